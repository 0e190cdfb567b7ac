"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import Response

from eco_scan.api.session import router as session_router
from eco_scan.app_logging import configure_logging
from eco_scan.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(session_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/previews/{handle}")
    async def preview(handle: str, request: Request) -> Response:
        """Serve the bytes behind a preview handle."""
        state_container: AppContainer = request.app.state.container
        entry = state_container.previews.get(handle)
        if entry is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return Response(content=entry.data, media_type=entry.content_type)

    return app
