"""Application configuration."""

import os

import httpx
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

PAGE_PORT = 3000
API_PORT = 8000


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    backend_url: str | None = None
    page_origin: str = f"http://localhost:{PAGE_PORT}"
    request_timeout: float = 30.0
    max_upload_bytes: int = 10 * 1024 * 1024
    progress_interval: float = 0.18
    progress_max_step: float = 7.0
    progress_ceiling: float = 96.0
    latency_floor_min: float = 0.8
    latency_floor_max: float = 1.7
    camera_index: int = 0
    camera_environment_index: int | None = None
    capture_quality: float = 0.95
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_api_base(backend_url: str | None, page_origin: str) -> str:
    """Return the scan API base URL.

    An explicit backend URL wins. Otherwise the page origin is reused with the
    dev-server port swapped for the API port.
    """
    if backend_url and backend_url.strip():
        return backend_url.strip().rstrip("/")
    origin = httpx.URL(page_origin)
    if origin.port == PAGE_PORT:
        origin = origin.copy_with(port=API_PORT)
    return str(origin).rstrip("/")
