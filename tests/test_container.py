"""Tests for container wiring."""

import asyncio

from eco_scan.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.session_controller is not None
    assert container.submitter.progress.interval == settings.progress_interval
    assert container.acquisition.max_upload_bytes == settings.max_upload_bytes
    asyncio.run(container.close_resources())
