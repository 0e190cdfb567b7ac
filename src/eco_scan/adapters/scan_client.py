"""Scan endpoint client."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from eco_scan.domain.errors import ScanRequestFailed

logger = logging.getLogger(__name__)


class ScanClient(Protocol):
    """Interface for the remote classification endpoint."""

    async def scan(
        self, image: bytes, file_name: str, content_type: str
    ) -> dict[str, object]:
        """Upload an image and return the raw JSON body."""


@dataclass
class HttpxScanClient(ScanClient):
    """HTTPX-backed scan client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 30.0

    @classmethod
    def create(cls, base_url: str, timeout: float = 30.0) -> "HttpxScanClient":
        """Create a scan client with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient(), timeout=timeout)

    async def scan(
        self, image: bytes, file_name: str, content_type: str
    ) -> dict[str, object]:
        """POST the image as the single multipart field ``image``."""
        url = f"{self.base_url}/api/scan"
        try:
            response = await self.http_client.post(
                url,
                files={"image": (file_name, image, content_type)},
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            logger.warning("Scan request to %s failed: %s", url, exc)
            raise ScanRequestFailed(reason="network") from exc
        if not response.is_success:
            raise ScanRequestFailed(status=response.status_code)
        try:
            payload = response.json()
        except ValueError as exc:
            raise ScanRequestFailed(reason="parse") from exc
        if not isinstance(payload, dict):
            raise ScanRequestFailed(reason="parse")
        return payload

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
