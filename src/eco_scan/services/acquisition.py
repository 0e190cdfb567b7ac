"""Image acquisition from files, drag-and-drop and the camera."""

import logging
from dataclasses import dataclass, field

from eco_scan.adapters.camera import CameraDevice, CameraHandle
from eco_scan.domain.errors import CameraUnavailable, UnsupportedFile
from eco_scan.domain.scans import ImagePayload, UploadedFile

logger = logging.getLogger(__name__)

CAPTURE_FILE_NAME = "camera-capture.jpg"
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024
_GENERIC_CONTENT_TYPES = {"", "application/octet-stream"}


@dataclass
class AcquisitionManager:
    """Owns the camera handle and turns user input into image payloads."""

    camera_device: CameraDevice
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    capture_quality: float = 0.95
    _camera: CameraHandle | None = field(default=None, init=False, repr=False)

    @property
    def is_camera_open(self) -> bool:
        return self._camera is not None

    @property
    def camera(self) -> CameraHandle | None:
        return self._camera

    def pick_file(self, upload: UploadedFile) -> ImagePayload:
        """Validate a file chosen through the file picker."""
        return validate_upload(upload, self.max_upload_bytes)

    def drop_file(self, upload: UploadedFile) -> ImagePayload:
        """Validate a file dropped onto the upload zone."""
        return validate_upload(upload, self.max_upload_bytes)

    async def open_camera(self) -> None:
        """Open the camera stream; a no-op when one is already open."""
        if self._camera is not None:
            return
        try:
            handle = await self.camera_device.open()
        except OSError as exc:
            raise CameraUnavailable(str(exc)) from exc
        self._camera = handle

    def close_camera(self) -> bool:
        """Stop every camera track. Returns False when nothing was open."""
        handle, self._camera = self._camera, None
        if handle is None:
            return False
        handle.stop()
        logger.info("Camera stream closed")
        return True

    async def capture_frame(self) -> ImagePayload:
        """Encode the current camera frame as a still image payload."""
        if self._camera is None:
            raise CameraUnavailable("camera is not open")
        data = await self._camera.capture_still(self.capture_quality)
        return ImagePayload(
            data=data, file_name=CAPTURE_FILE_NAME, content_type="image/jpeg"
        )


def validate_upload(upload: UploadedFile, max_bytes: int) -> ImagePayload:
    """Reject empty, oversized and non-image files before they are sent."""
    name = upload.file_name or "upload"
    if not upload.data:
        raise UnsupportedFile(f"{name} is empty.")
    if len(upload.data) > max_bytes:
        limit_mb = max_bytes / (1024 * 1024)
        raise UnsupportedFile(f"{name} is larger than {limit_mb:g} MB.")
    declared = (upload.content_type or "").split(";")[0].strip().lower()
    if declared not in _GENERIC_CONTENT_TYPES and not declared.startswith("image/"):
        raise UnsupportedFile(f"{name} is not an image ({declared}).")
    detected = detect_image_type(upload.data)
    if detected is None:
        raise UnsupportedFile(f"{name} is not a PNG, JPEG, GIF or WEBP image.")
    return ImagePayload(data=upload.data, file_name=name, content_type=detected)


def detect_image_type(data: bytes) -> str | None:
    """Infer an image MIME type from file signatures."""
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data[:6] in {b"GIF87a", b"GIF89a"}:
        return "image/gif"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None
