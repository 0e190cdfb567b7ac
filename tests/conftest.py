"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from eco_scan.adapters.camera import CameraDevice, CameraHandle
from eco_scan.adapters.scan_client import ScanClient
from eco_scan.config import Settings
from eco_scan.containers import AppContainer
from eco_scan.domain.errors import CameraUnavailable, ScanRequestFailed
from eco_scan.domain.scans import ScanResult
from eco_scan.services.acquisition import AcquisitionManager
from eco_scan.services.presenter import ResultPresenter
from eco_scan.services.previews import InMemoryPreviewStore
from eco_scan.services.progress import ProgressHandle, ProgressTimer
from eco_scan.services.session import SessionController
from eco_scan.services.submitter import ScanSubmitter

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * (50 * 1024)
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 256
FIXED_NOW = datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)

ORGANIC_PAYLOAD: dict[str, object] = {
    "detected": True,
    "label": "Organic",
    "confidence": 0.87,
    "suggestions": ["Compost this item"],
}


@dataclass
class FakeScanClient(ScanClient):
    """Fake scan endpoint returning a fixed payload or failure."""

    payload: dict[str, object] = field(default_factory=lambda: dict(ORGANIC_PAYLOAD))
    status: int | None = None
    error: Exception | None = None
    gate: asyncio.Event | None = None
    delay: float = 0.02
    calls: list[tuple[str, str, int]] = field(default_factory=list)

    async def scan(
        self, image: bytes, file_name: str, content_type: str
    ) -> dict[str, object]:
        self.calls.append((file_name, content_type, len(image)))
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.status is not None:
            raise ScanRequestFailed(status=self.status)
        return dict(self.payload)


@dataclass
class FakeCameraHandle(CameraHandle):
    """Camera stream fake that tracks stop calls."""

    frame: bytes = JPEG_BYTES
    live_tracks: int = 1
    stop_calls: int = 0
    qualities: list[float] = field(default_factory=list)

    @property
    def active_tracks(self) -> int:
        return self.live_tracks

    async def capture_still(self, quality: float) -> bytes:
        self.qualities.append(quality)
        return self.frame

    def stop(self) -> None:
        self.stop_calls += 1
        self.live_tracks = 0


@dataclass
class FakeCameraDevice(CameraDevice):
    """Camera device fake that can deny access or hold the open call."""

    denied: bool = False
    gate: asyncio.Event | None = None
    handles: list[FakeCameraHandle] = field(default_factory=list)

    async def open(self) -> CameraHandle:
        if self.gate is not None:
            await self.gate.wait()
        if self.denied:
            raise CameraUnavailable("permission denied")
        handle = FakeCameraHandle()
        self.handles.append(handle)
        return handle


@dataclass
class RecordingProgressTimer(ProgressTimer):
    """Progress timer that keeps every handle it hands out."""

    handles: list[ProgressHandle] = field(default_factory=list)

    def start(self, on_tick):  # type: ignore[no-untyped-def]
        handle = super().start(on_tick)
        self.handles.append(handle)
        return handle


@dataclass
class RecordingListener:
    """Scan listener that records every callback."""

    progress: list[float] = field(default_factory=list)
    results: list[ScanResult] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)

    def scan_progressed(self, token: int, progress: float) -> None:
        self.progress.append(progress)

    def scan_succeeded(self, token: int, result: ScanResult) -> None:
        self.results.append(result)

    def scan_failed(self, token: int, message: str) -> None:
        self.failures.append(message)


def build_controller(
    scan_client: ScanClient,
    camera_device: CameraDevice,
    progress_timer: ProgressTimer | None = None,
    previews: InMemoryPreviewStore | None = None,
) -> SessionController:
    """Wire a controller with fast timings for tests."""
    submitter = ScanSubmitter(
        client=scan_client,
        progress=progress_timer or RecordingProgressTimer(interval=0.001),
        latency_floor_min=0.0,
        latency_floor_max=0.0,
    )
    return SessionController(
        acquisition=AcquisitionManager(camera_device=camera_device),
        submitter=submitter,
        previews=previews if previews is not None else InMemoryPreviewStore(),
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        backend_url="https://scan.test",
        latency_floor_min=0.0,
        latency_floor_max=0.0,
        progress_interval=0.001,
    )


@pytest.fixture
def scan_client() -> FakeScanClient:
    return FakeScanClient()


@pytest.fixture
def camera_device() -> FakeCameraDevice:
    return FakeCameraDevice()


@pytest.fixture
def progress_timer() -> RecordingProgressTimer:
    return RecordingProgressTimer(interval=0.001)


@pytest.fixture
def previews() -> InMemoryPreviewStore:
    return InMemoryPreviewStore()


@pytest.fixture
def controller(
    scan_client: FakeScanClient,
    camera_device: FakeCameraDevice,
    progress_timer: RecordingProgressTimer,
    previews: InMemoryPreviewStore,
) -> SessionController:
    return build_controller(scan_client, camera_device, progress_timer, previews)


@pytest.fixture
def container(
    settings: Settings,
    scan_client: FakeScanClient,
    previews: InMemoryPreviewStore,
    controller: SessionController,
) -> AppContainer:
    async def close_resources() -> None:
        controller.teardown()

    return AppContainer(
        settings=settings,
        scan_client=scan_client,
        previews=previews,
        acquisition=controller.acquisition,
        submitter=controller.submitter,
        session_controller=controller,
        presenter=ResultPresenter(),
        close_resources=close_resources,
    )
