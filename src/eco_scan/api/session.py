"""Session API endpoints driving the scan state machine."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, File, HTTPException, Request, UploadFile, status
from fastapi.responses import Response

from eco_scan.api.models import OperationResponse, SessionState
from eco_scan.domain.scans import UploadedFile

if TYPE_CHECKING:
    from eco_scan.containers import AppContainer
    from eco_scan.services.session import SessionController

router = APIRouter(prefix="/session", tags=["session"])


def _controller(request: Request) -> SessionController:
    container: AppContainer = request.app.state.container
    return container.session_controller


def _respond(controller: SessionController, accepted: bool) -> OperationResponse:
    return OperationResponse(
        accepted=accepted,
        session=SessionState.from_snapshot(controller.snapshot()),
    )


async def _read_upload(image: UploadFile) -> UploadedFile:
    data = await image.read()
    return UploadedFile(
        file_name=image.filename or "upload",
        data=data,
        content_type=image.content_type,
    )


@router.get("")
async def get_session(request: Request) -> SessionState:
    """Return the current session."""
    return SessionState.from_snapshot(_controller(request).snapshot())


@router.post("/upload")
async def begin_upload(request: Request) -> OperationResponse:
    """Switch the session to the upload zone."""
    controller = _controller(request)
    return _respond(controller, controller.begin_upload())


@router.post("/upload/file")
async def pick_file(
    request: Request, image: UploadFile = File(...)
) -> OperationResponse:
    """Scan a file chosen through the file picker."""
    controller = _controller(request)
    accepted = await controller.pick_file(await _read_upload(image))
    return _respond(controller, accepted)


@router.post("/drop")
async def drop_file(
    request: Request, image: UploadFile = File(...)
) -> OperationResponse:
    """Scan a file dropped onto the upload zone."""
    controller = _controller(request)
    accepted = await controller.drop_file(await _read_upload(image))
    return _respond(controller, accepted)


@router.post("/camera/open")
async def open_camera(request: Request) -> OperationResponse:
    controller = _controller(request)
    return _respond(controller, await controller.open_camera())


@router.post("/camera/close")
async def close_camera(request: Request) -> OperationResponse:
    controller = _controller(request)
    controller.close_camera()
    return _respond(controller, True)


@router.post("/camera/capture")
async def capture(request: Request) -> OperationResponse:
    """Scan the current camera frame."""
    controller = _controller(request)
    return _respond(controller, await controller.capture())


@router.post("/reset")
async def reset(request: Request) -> OperationResponse:
    controller = _controller(request)
    controller.reset()
    return _respond(controller, True)


@router.post("/error/dismiss")
async def dismiss_error(request: Request) -> OperationResponse:
    controller = _controller(request)
    controller.dismiss_error()
    return _respond(controller, True)


@router.get("/scanning")
async def scanning_view(request: Request) -> dict[str, object]:
    """Return the progress view for the running scan."""
    container: AppContainer = request.app.state.container
    snapshot = container.session_controller.snapshot()
    return asdict(container.presenter.present_scanning(snapshot))


@router.get("/result")
async def result_view(request: Request) -> dict[str, object]:
    """Return the display view of the current result."""
    container: AppContainer = request.app.state.container
    report = container.presenter.present(container.session_controller.snapshot())
    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return asdict(report)


@router.get("/report")
async def download_report(request: Request) -> Response:
    """Download the current result as a JSON report."""
    container: AppContainer = request.app.state.container
    artifact = container.presenter.export(container.session_controller.snapshot())
    if artifact is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{artifact.file_name}"'
        },
    )
