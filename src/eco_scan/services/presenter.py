"""Display and export views derived from a finished scan."""

import json
import math
from dataclasses import dataclass
from datetime import UTC, datetime

from eco_scan.domain.scans import ScanLabel
from eco_scan.domain.sessions import SessionSnapshot
from eco_scan.services.acquisition import CAPTURE_FILE_NAME


@dataclass(frozen=True)
class LabelChip:
    label: str
    active: bool


@dataclass(frozen=True)
class ScanReport:
    """Display-safe view of a scan result."""

    file_name: str
    preview_handle: str | None
    detected: bool
    status_text: str
    confidence_percent: int
    label: str
    chips: list[LabelChip]
    suggestions: list[str]


@dataclass(frozen=True)
class ScanningView:
    """Progress shown while a scan runs."""

    file_name: str
    percent: int


@dataclass(frozen=True)
class ReportArtifact:
    """Downloadable JSON report."""

    file_name: str
    content: bytes
    media_type: str = "application/json"


class ResultPresenter:
    """Pure derivations over a session snapshot."""

    def present(self, snapshot: SessionSnapshot) -> ScanReport | None:
        """Build the result view, or None when the session holds no result."""
        result = snapshot.result
        if result is None:
            return None
        return ScanReport(
            file_name=snapshot.source_file or "",
            preview_handle=snapshot.preview_handle,
            detected=result.detected,
            status_text="Trash Detected" if result.detected else "No Trash Detected",
            confidence_percent=confidence_percent(result.confidence),
            label=str(result.label),
            chips=[
                LabelChip(label=str(label), active=label == result.label)
                for label in ScanLabel
            ],
            suggestions=list(result.suggestions),
        )

    def present_scanning(self, snapshot: SessionSnapshot) -> ScanningView:
        return ScanningView(
            file_name=snapshot.source_file or CAPTURE_FILE_NAME,
            percent=min(100, _round_half_up(snapshot.progress)),
        )

    def export(
        self, snapshot: SessionSnapshot, now: datetime | None = None
    ) -> ReportArtifact | None:
        """Serialize the result as ``scan-report-<epoch-ms>.json``."""
        result = snapshot.result
        if result is None:
            return None
        exported_at = now or datetime.now(tz=UTC)
        scanned_at = snapshot.scanned_at or exported_at
        document: dict[str, object] = {
            "fileName": snapshot.source_file or "",
            "previewURL": snapshot.preview_handle or "",
            "scannedAt": _iso_timestamp(scanned_at),
        }
        document.update(result.model_dump(mode="json"))
        epoch_ms = int(exported_at.timestamp() * 1000)
        return ReportArtifact(
            file_name=f"scan-report-{epoch_ms}.json",
            content=json.dumps(document, indent=2).encode("utf-8"),
        )


def confidence_percent(confidence: float) -> int:
    return _round_half_up(confidence * 100)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _iso_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    text = value.astimezone(UTC).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")
