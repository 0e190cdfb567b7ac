"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from eco_scan.adapters.camera import OpenCvCameraDevice
from eco_scan.adapters.scan_client import HttpxScanClient, ScanClient
from eco_scan.config import Settings, resolve_api_base
from eco_scan.services.acquisition import AcquisitionManager
from eco_scan.services.presenter import ResultPresenter
from eco_scan.services.previews import InMemoryPreviewStore, PreviewStore
from eco_scan.services.progress import ProgressTimer
from eco_scan.services.session import SessionController
from eco_scan.services.submitter import ScanSubmitter


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    scan_client: ScanClient
    previews: PreviewStore
    acquisition: AcquisitionManager
    submitter: ScanSubmitter
    session_controller: SessionController
    presenter: ResultPresenter
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    scan_client = HttpxScanClient.create(
        base_url=resolve_api_base(
            resolved_settings.backend_url, resolved_settings.page_origin
        ),
        timeout=resolved_settings.request_timeout,
    )
    camera_device = OpenCvCameraDevice(
        camera_index=resolved_settings.camera_index,
        environment_index=resolved_settings.camera_environment_index,
    )
    previews = InMemoryPreviewStore()
    acquisition = AcquisitionManager(
        camera_device=camera_device,
        max_upload_bytes=resolved_settings.max_upload_bytes,
        capture_quality=resolved_settings.capture_quality,
    )
    submitter = ScanSubmitter(
        client=scan_client,
        progress=ProgressTimer(
            interval=resolved_settings.progress_interval,
            max_step=resolved_settings.progress_max_step,
            ceiling=resolved_settings.progress_ceiling,
        ),
        latency_floor_min=resolved_settings.latency_floor_min,
        latency_floor_max=resolved_settings.latency_floor_max,
    )
    session_controller = SessionController(
        acquisition=acquisition,
        submitter=submitter,
        previews=previews,
    )

    async def close_resources() -> None:
        session_controller.teardown()
        await scan_client.close()

    return AppContainer(
        settings=resolved_settings,
        scan_client=scan_client,
        previews=previews,
        acquisition=acquisition,
        submitter=submitter,
        session_controller=session_controller,
        presenter=ResultPresenter(),
        close_resources=close_resources,
    )
