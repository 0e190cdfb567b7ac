"""Scan session state machine."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from eco_scan.domain.errors import CameraUnavailable, UnsupportedFile
from eco_scan.domain.scans import ImagePayload, ScanResult, UploadedFile
from eco_scan.domain.sessions import Session, SessionMode, SessionSnapshot
from eco_scan.services.acquisition import AcquisitionManager
from eco_scan.services.previews import PreviewStore
from eco_scan.services.submitter import ScanListener, ScanSubmitter

logger = logging.getLogger(__name__)

GENERIC_SCAN_ERROR = "Something went wrong while scanning"

SessionObserver = Callable[[SessionSnapshot], None]


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class SessionController(ScanListener):
    """Owns the single scan session and every transition of its mode.

    Each submission is tagged with a generation token. ``reset`` and every new
    submission bump the generation, so progress ticks and outcomes that arrive
    for an older generation are dropped instead of repopulating the session.
    """

    acquisition: AcquisitionManager
    submitter: ScanSubmitter
    previews: PreviewStore
    clock: Callable[[], datetime] = _utcnow
    _session: Session = field(default_factory=Session, init=False)
    _generation: int = field(default=0, init=False)
    _opening_camera: bool = field(default=False, init=False)
    _camera_epoch: int = field(default=0, init=False)
    _observers: list[SessionObserver] = field(default_factory=list, init=False)

    @property
    def mode(self) -> SessionMode:
        return self._session.mode

    def snapshot(self) -> SessionSnapshot:
        """Return a read-only copy of the current session."""
        return self._session.snapshot()

    def subscribe(self, observer: SessionObserver) -> Callable[[], None]:
        """Call ``observer`` after every change; returns an unsubscribe hook."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def begin_upload(self) -> bool:
        """Switch to the upload zone."""
        if self._rejected_while_scanning("begin_upload"):
            return False
        if self._session.mode == SessionMode.RESULT:
            self._leave_result()
        self._transition(SessionMode.UPLOAD)
        return True

    async def pick_file(self, upload: UploadedFile) -> bool:
        """Scan a file chosen through the file picker."""
        if self._rejected_while_scanning("pick_file"):
            return False
        try:
            payload = self.acquisition.pick_file(upload)
        except UnsupportedFile as exc:
            self._fail_locally(str(exc))
            return False
        return await self.submit(payload)

    async def drop_file(self, upload: UploadedFile) -> bool:
        """Scan a file dropped onto the upload zone."""
        if self._rejected_while_scanning("drop_file"):
            return False
        try:
            payload = self.acquisition.drop_file(upload)
        except UnsupportedFile as exc:
            self._fail_locally(str(exc))
            return False
        return await self.submit(payload)

    async def open_camera(self) -> bool:
        """Open the camera and enter camera mode.

        When the camera cannot be opened the mode is left untouched and a
        camera error is recorded instead.
        """
        if self._rejected_while_scanning("open_camera"):
            return False
        if self._session.mode == SessionMode.CAMERA or self._opening_camera:
            return self._session.mode == SessionMode.CAMERA
        token = self._generation
        epoch = self._camera_epoch
        self._set_error(None)
        self._opening_camera = True
        try:
            await self.acquisition.open_camera()
        except CameraUnavailable as exc:
            logger.warning("Camera unavailable: %s", exc.detail)
            if token == self._generation:
                self._set_error(str(exc))
            return False
        finally:
            self._opening_camera = False
        if (
            token != self._generation
            or epoch != self._camera_epoch
            or self._session.mode == SessionMode.SCANNING
        ):
            logger.info("Session moved on while the camera was opening")
            self.acquisition.close_camera()
            return False
        if self._session.mode == SessionMode.RESULT:
            self._leave_result()
        self._transition(SessionMode.CAMERA)
        return True

    def close_camera(self) -> None:
        """Leave camera mode, releasing the stream. Safe to repeat.

        A camera that is still opening is released as soon as it opens.
        """
        if self._opening_camera:
            self._camera_epoch += 1
        if self._session.mode == SessionMode.CAMERA:
            self._transition(SessionMode.IDLE)
        else:
            self.acquisition.close_camera()

    async def capture(self) -> bool:
        """Scan the current camera frame."""
        if self._session.mode != SessionMode.CAMERA:
            logger.warning("Ignoring capture outside camera mode (%s)", self.mode)
            return False
        token = self._generation
        try:
            payload = await self.acquisition.capture_frame()
        except CameraUnavailable as exc:
            logger.warning("Camera capture failed: %s", exc.detail)
            if token == self._generation:
                self._set_error(str(exc))
            return False
        if token != self._generation or self._session.mode != SessionMode.CAMERA:
            return False
        return await self.submit(payload)

    async def submit(self, payload: ImagePayload) -> bool:
        """Enter scanning and run one submission to completion.

        Returns False without side effects while another scan is running.
        """
        if self._rejected_while_scanning("submit"):
            return False
        if self._session.mode == SessionMode.RESULT:
            self._leave_result()
        self._generation += 1
        token = self._generation
        self._replace_preview(payload)
        self._session.error = None
        self._session.progress = 0.0
        self._transition(SessionMode.SCANNING)
        try:
            await self.submitter.submit(payload, payload.file_name, self, token)
        except asyncio.CancelledError:
            logger.warning("Scan of %s was cancelled", payload.file_name)
            self.scan_failed(token, GENERIC_SCAN_ERROR)
            raise
        except Exception:
            logger.exception("Unexpected error while scanning %s", payload.file_name)
            self.scan_failed(token, GENERIC_SCAN_ERROR)
        return True

    def reset(self) -> None:
        """Return to the initial idle session.

        Releases the camera and the preview, stops any progress timer and
        invalidates a submission that is still in flight.
        """
        self._generation += 1
        self.submitter.abandon()
        self.acquisition.close_camera()
        self._release_preview()
        self._session.source_file = None
        self._session.progress = 0.0
        self._session.error = None
        self._session.result = None
        self._session.scanned_at = None
        self._transition(SessionMode.IDLE)

    def dismiss_error(self) -> None:
        if self._session.error is None:
            return
        self._set_error(None)

    def teardown(self) -> None:
        """Release every resource held by the session."""
        self.reset()
        self._observers.clear()
        logger.info("Scan session torn down")

    def scan_progressed(self, token: int, progress: float) -> None:
        if self._is_stale(token) or self._session.mode != SessionMode.SCANNING:
            return
        if progress <= self._session.progress:
            return
        self._session.progress = progress
        self._notify()

    def scan_succeeded(self, token: int, result: ScanResult) -> None:
        if self._is_stale(token):
            logger.info("Discarding scan result from a previous session")
            return
        self._session.result = result
        self._session.scanned_at = self.clock()
        self._session.progress = 100.0
        self._session.error = None
        self._transition(SessionMode.RESULT)

    def scan_failed(self, token: int, message: str) -> None:
        if self._is_stale(token):
            logger.info("Discarding scan failure from a previous session")
            return
        self._session.result = None
        self._session.scanned_at = None
        self._session.progress = 0.0
        self._session.error = message or GENERIC_SCAN_ERROR
        self._transition(SessionMode.IDLE)

    def _transition(self, mode: SessionMode) -> None:
        previous = self._session.mode
        if previous == SessionMode.CAMERA and mode != SessionMode.CAMERA:
            self.acquisition.close_camera()
        self._session.mode = mode
        if previous != mode:
            logger.info("Session %s -> %s", previous, mode)
        self._notify()

    def _leave_result(self) -> None:
        self._release_preview()
        self._session.source_file = None
        self._session.result = None
        self._session.scanned_at = None
        self._session.error = None
        self._session.progress = 0.0

    def _replace_preview(self, payload: ImagePayload) -> None:
        self._release_preview()
        self._session.preview_handle = self.previews.create(
            payload.data, payload.content_type
        )
        self._session.source_file = payload.file_name

    def _release_preview(self) -> None:
        handle = self._session.preview_handle
        if handle is not None:
            self.previews.release(handle)
        self._session.preview_handle = None

    def _fail_locally(self, message: str) -> None:
        logger.warning("Rejected file: %s", message)
        self._set_error(message)

    def _set_error(self, message: str | None) -> None:
        self._session.error = message
        self._notify()

    def _rejected_while_scanning(self, operation: str) -> bool:
        if self._session.mode != SessionMode.SCANNING:
            return False
        logger.warning("Ignoring %s while a scan is running", operation)
        return True

    def _is_stale(self, token: int) -> bool:
        return token != self._generation

    def _notify(self) -> None:
        snapshot = self._session.snapshot()
        for observer in list(self._observers):
            observer(snapshot)
