"""Pydantic response models for the session API."""

from datetime import datetime

from pydantic import BaseModel

from eco_scan.domain.scans import ScanResult
from eco_scan.domain.sessions import SessionMode, SessionSnapshot


class SessionState(BaseModel):
    """Serialized scan session."""

    mode: SessionMode
    source_file: str | None = None
    preview_url: str | None = None
    progress: float = 0.0
    error: str | None = None
    result: ScanResult | None = None
    scanned_at: datetime | None = None

    @classmethod
    def from_snapshot(cls, snapshot: SessionSnapshot) -> "SessionState":
        preview_url = None
        if snapshot.preview_handle:
            preview_url = f"/previews/{snapshot.preview_handle}"
        return cls(
            mode=snapshot.mode,
            source_file=snapshot.source_file,
            preview_url=preview_url,
            progress=snapshot.progress,
            error=snapshot.error,
            result=snapshot.result,
            scanned_at=snapshot.scanned_at,
        )


class OperationResponse(BaseModel):
    """Outcome of a session operation and the session it left behind."""

    accepted: bool
    session: SessionState
