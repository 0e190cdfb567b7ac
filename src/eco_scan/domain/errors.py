"""Error taxonomy for scan sessions."""

CAMERA_UNAVAILABLE_MESSAGE = (
    "Unable to access camera. Please allow permissions or upload an image instead."
)


class ScanSessionError(Exception):
    """Base class for recoverable scan session failures."""


class CameraUnavailable(ScanSessionError):
    """Camera permission was denied or no device could be opened."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(CAMERA_UNAVAILABLE_MESSAGE)
        self.detail = detail


class UnsupportedFile(ScanSessionError):
    """A file was rejected before it reached the scan endpoint."""


class ScanRequestFailed(ScanSessionError):
    """The scan endpoint call failed or returned an unusable body."""

    def __init__(self, status: int | None = None, reason: str = "status") -> None:
        self.status = status
        self.reason = reason
        super().__init__(_describe(status, reason))


def _describe(status: int | None, reason: str) -> str:
    if status is not None:
        return f"Scan failed ({status})"
    if reason == "parse":
        return "Scan failed (invalid response)"
    if reason == "network":
        return "Scan failed (network error)"
    return "Scan failed"
