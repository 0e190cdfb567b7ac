"""Locally addressable preview images."""

from dataclasses import dataclass
from typing import Protocol
from uuid import uuid4


class PreviewStore(Protocol):
    """Holds image bytes under short-lived handles for display."""

    def create(self, data: bytes, content_type: str) -> str:
        """Store bytes and return a handle for them."""

    def get(self, handle: str) -> "PreviewEntry | None":
        """Return the stored preview, if the handle is still live."""

    def release(self, handle: str) -> None:
        """Drop a preview; unknown handles are ignored."""


@dataclass(frozen=True)
class PreviewEntry:
    data: bytes
    content_type: str


@dataclass
class InMemoryPreviewStore(PreviewStore):
    """In-memory preview store keyed by random handles."""

    _entries: dict[str, PreviewEntry]

    def __init__(self) -> None:
        self._entries = {}

    def create(self, data: bytes, content_type: str) -> str:
        handle = f"preview-{uuid4().hex}"
        self._entries[handle] = PreviewEntry(data=data, content_type=content_type)
        return handle

    def get(self, handle: str) -> PreviewEntry | None:
        return self._entries.get(handle)

    def release(self, handle: str) -> None:
        self._entries.pop(handle, None)

    def __len__(self) -> int:
        return len(self._entries)
