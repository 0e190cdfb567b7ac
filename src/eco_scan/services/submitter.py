"""Scan submission with a paced progress simulation."""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError

from eco_scan.adapters.scan_client import ScanClient
from eco_scan.domain.errors import ScanRequestFailed
from eco_scan.domain.scans import ImagePayload, ScanResult
from eco_scan.services.progress import ProgressHandle, ProgressTimer

logger = logging.getLogger(__name__)


class ScanListener(Protocol):
    """Receives the outcome of a submission tagged with its session token."""

    def scan_progressed(self, token: int, progress: float) -> None:
        """Apply a simulated progress tick."""

    def scan_succeeded(self, token: int, result: ScanResult) -> None:
        """Apply a successful result."""

    def scan_failed(self, token: int, message: str) -> None:
        """Apply a failed submission."""


@dataclass
class ScanSubmitter:
    """Submits one image while a progress timer runs alongside the request."""

    client: ScanClient
    progress: ProgressTimer = field(default_factory=ProgressTimer)
    latency_floor_min: float = 0.8
    latency_floor_max: float = 1.7
    rng: random.Random = field(default_factory=random.Random)
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    _active: ProgressHandle | None = field(default=None, init=False, repr=False)

    async def submit(
        self,
        payload: ImagePayload,
        display_name: str,
        listener: ScanListener,
        token: int,
    ) -> None:
        """Run one submission and report its outcome to ``listener``."""
        handle = self.progress.start(
            lambda value: listener.scan_progressed(token, value)
        )
        self._active = handle
        failure: ScanRequestFailed | None = None
        try:
            result = await self._request(payload, display_name)
        except ScanRequestFailed as exc:
            failure = exc
        finally:
            handle.cancel()
            if self._active is handle:
                self._active = None
        if failure is not None:
            logger.warning("Scan of %s failed: %s", display_name, failure)
            listener.scan_failed(token, str(failure))
            return
        listener.scan_succeeded(token, result)

    def abandon(self) -> None:
        """Stop the running progress timer without waiting for the request."""
        if self._active is not None:
            self._active.cancel()

    async def _request(self, payload: ImagePayload, display_name: str) -> ScanResult:
        raw = await self.client.scan(payload.data, display_name, payload.content_type)
        floor = self.rng.uniform(self.latency_floor_min, self.latency_floor_max)
        await self.sleep(floor)
        try:
            return ScanResult.model_validate(raw)
        except ValidationError as exc:
            raise ScanRequestFailed(reason="parse") from exc
