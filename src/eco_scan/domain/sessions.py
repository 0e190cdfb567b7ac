"""Domain models for the scan session."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from eco_scan.domain.scans import ScanResult


class SessionMode(StrEnum):
    """Phases of the scan session state machine."""

    IDLE = "idle"
    UPLOAD = "upload"
    CAMERA = "camera"
    SCANNING = "scanning"
    RESULT = "result"


@dataclass
class Session:
    """Mutable session state. Only the session controller writes to it."""

    mode: SessionMode = SessionMode.IDLE
    source_file: str | None = None
    preview_handle: str | None = None
    progress: float = 0.0
    error: str | None = None
    result: ScanResult | None = None
    scanned_at: datetime | None = None

    def snapshot(self) -> "SessionSnapshot":
        return SessionSnapshot(
            mode=self.mode,
            source_file=self.source_file,
            preview_handle=self.preview_handle,
            progress=self.progress,
            error=self.error,
            result=self.result,
            scanned_at=self.scanned_at,
        )


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only copy of the session handed to observers and presenters."""

    mode: SessionMode
    source_file: str | None
    preview_handle: str | None
    progress: float
    error: str | None
    result: ScanResult | None
    scanned_at: datetime | None
