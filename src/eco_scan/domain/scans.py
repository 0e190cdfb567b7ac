"""Models for scan payloads and classification results."""

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ScanLabel(StrEnum):
    """Fixed classification set reported by the scan endpoint."""

    ORGANIC = "Organic"
    PLASTIC = "Plastic"
    METAL = "Metal"
    PAPER = "Paper"
    OTHER = "Other"


class ScanResult(BaseModel):
    """Classification outcome returned by the scan endpoint."""

    model_config = ConfigDict(frozen=True, extra="allow")

    detected: bool
    label: ScanLabel
    confidence: float = Field(ge=0.0, le=1.0)
    suggestions: tuple[str, ...]


@dataclass(frozen=True)
class UploadedFile:
    """A file handed over by a picker or drag-and-drop gesture."""

    file_name: str
    data: bytes
    content_type: str | None = None


@dataclass(frozen=True)
class ImagePayload:
    """Validated image bytes ready to be submitted."""

    data: bytes
    file_name: str
    content_type: str

    @property
    def size(self) -> int:
        return len(self.data)
