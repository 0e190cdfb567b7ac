"""Camera device adapter backed by OpenCV."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

import cv2
import numpy as np

from eco_scan.domain.errors import CameraUnavailable

logger = logging.getLogger(__name__)


class CameraHandle(Protocol):
    """An open camera stream."""

    @property
    def active_tracks(self) -> int:
        """Return the number of tracks still delivering frames."""

    async def capture_still(self, quality: float) -> bytes:
        """Grab the current frame at native resolution as JPEG bytes."""

    def stop(self) -> None:
        """Stop every track of the stream."""


class CameraDevice(Protocol):
    """Opens camera streams."""

    async def open(self) -> CameraHandle:
        """Open a stream or raise CameraUnavailable."""


@dataclass
class OpenCvCameraHandle(CameraHandle):
    """Camera stream wrapping one or more ``cv2.VideoCapture`` tracks."""

    tracks: list[cv2.VideoCapture]

    @property
    def active_tracks(self) -> int:
        return sum(1 for track in self.tracks if track.isOpened())

    async def capture_still(self, quality: float) -> bytes:
        frame = await asyncio.to_thread(self._read_frame)
        return encode_jpeg(frame, quality)

    def stop(self) -> None:
        for track in self.tracks:
            track.release()
        self.tracks.clear()

    def _read_frame(self) -> np.ndarray:
        if not self.tracks:
            raise CameraUnavailable("stream is stopped")
        ok, frame = self.tracks[0].read()
        if not ok or frame is None:
            raise CameraUnavailable("no frame available")
        return frame


@dataclass
class OpenCvCameraDevice(CameraDevice):
    """Opens the environment-facing camera first, then the default one."""

    camera_index: int = 0
    environment_index: int | None = None
    _backend: int = field(default=cv2.CAP_ANY, repr=False)

    async def open(self) -> CameraHandle:
        capture = await asyncio.to_thread(self._open_first, self._candidates())
        return OpenCvCameraHandle(tracks=[capture])

    def _candidates(self) -> list[int]:
        indices = []
        if self.environment_index is not None:
            indices.append(self.environment_index)
        if self.camera_index not in indices:
            indices.append(self.camera_index)
        return indices

    def _open_first(self, indices: Sequence[int]) -> cv2.VideoCapture:
        for index in indices:
            capture = cv2.VideoCapture(index, self._backend)
            if capture.isOpened():
                logger.info("Opened camera device %s", index)
                return capture
            capture.release()
            logger.warning("Camera device %s is not available", index)
        raise CameraUnavailable(f"no camera among devices {list(indices)}")


def encode_jpeg(frame: np.ndarray, quality: float) -> bytes:
    """Encode a BGR frame as JPEG; ``quality`` is in the 0-1 range."""
    level = max(0, min(100, round(quality * 100)))
    ok, buffer = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, level])
    if not ok:
        raise CameraUnavailable("frame could not be encoded")
    return buffer.tobytes()
