"""Voice-sample recording session and its screen controller.

States: Idle -> Recording -> Idle (with artifact).

The controller is the only writer of its ``RecordingSession``; views read
snapshots through ``state`` or the ``on_change`` callback.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path

from soulingo.core.config import Settings, get_settings
from soulingo.core.exceptions import CaptureError
from soulingo.services.audio.capture import BaseCaptureDevice
from soulingo.sessions.timer import RecordingTimer

logger = logging.getLogger(__name__)


@dataclass
class RecordingSession:
    """Per-screen recording state."""

    is_recording: bool = False
    elapsed_seconds: int = 0
    audio_file: Path | None = None
    selected_image: str | None = None
    last_error: str | None = None

    @property
    def duration_ms(self) -> int:
        return self.elapsed_seconds * 1000

    def snapshot(self) -> "RecordingSession":
        """Independent copy safe to hand to another task."""
        return replace(self)


@dataclass(frozen=True)
class RecordingResult:
    """What the recording screen hands on once the user proceeds."""

    audio_file: Path | None
    selected_image: str | None
    duration_ms: int


class RecordingController:
    """Drives one RecordingSession with a capture device and a timer.

    Args:
        device: Capture device, owned by this controller.
        session: Existing session to drive (a new one is created if omitted).
        timer: Timer instance (defaults to one ticking ``Settings.timer_interval``).
        settings: Optional Settings instance (defaults to get_settings()).
        on_change: Called with a snapshot after every mutation.
    """

    def __init__(
        self,
        device: BaseCaptureDevice,
        session: RecordingSession | None = None,
        timer: RecordingTimer | None = None,
        settings: Settings | None = None,
        on_change: Callable[[RecordingSession], None] | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._device = device
        self._session = session if session is not None else RecordingSession()
        self._timer = timer or RecordingTimer(self._settings.timer_interval)
        self._min_seconds = self._settings.min_recording_seconds
        self._on_change = on_change
        self._transitioning = False
        self._closed = False
        # Bumped by reset() and close() so an in-flight start can tell it was torn down
        self._generation = 0

    async def __aenter__(self) -> "RecordingController":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def state(self) -> RecordingSession:
        return self._session.snapshot()

    @property
    def is_recording(self) -> bool:
        return self._session.is_recording

    @property
    def closed(self) -> bool:
        return self._closed

    async def toggle(self) -> bool:
        """Start recording when idle, stop it when recording.

        Returns:
            True if the transition succeeded. Failures leave a message in
            ``last_error`` and never raise.
        """
        if self._closed:
            logger.warning("toggle() on a closed recording session ignored")
            return False
        if self._transitioning:
            logger.debug("toggle() ignored: a transition is already in flight")
            return False

        self._transitioning = True
        try:
            if self._session.is_recording:
                return await self._stop()
            return await self._start()
        finally:
            self._transitioning = False

    async def _start(self) -> bool:
        session = self._session
        generation = self._generation
        try:
            path = await self._device.start()
        except CaptureError as exc:
            logger.error("Failed to start recording: %s", exc.detail)
            session.last_error = f"Failed to start recording: {exc.detail}"
            self._notify()
            return False

        if self._closed or generation != self._generation:
            logger.info("Recording start finished after teardown; releasing %s", path)
            self._device.release()
            return False

        session.is_recording = True
        session.elapsed_seconds = 0
        session.audio_file = path
        session.last_error = None
        self._timer.start(session, on_tick=lambda _elapsed: self._notify())
        logger.info("Recording started: %s", path)
        self._notify()
        return True

    async def _stop(self) -> bool:
        session = self._session
        generation = self._generation
        self._timer.cancel()
        try:
            path = await self._device.stop()
        except CaptureError as exc:
            # Fail open so the screen is never stuck in the recording state
            logger.error("Failed to stop recording: %s", exc.detail)
            session.is_recording = False
            session.audio_file = None
            session.last_error = f"Failed to stop recording: {exc.detail}"
            self._notify()
            return False

        if generation != self._generation:
            logger.info("Recording stop finished after teardown; discarding %s", path)
            return False

        session.is_recording = False
        session.audio_file = path
        logger.info("Recording stopped after %ss: %s", session.elapsed_seconds, path)
        self._notify()
        return True

    def select_image(self, handle: str | Path | None) -> None:
        """Attach (or clear) the photo that accompanies the voice sample."""
        self._session.selected_image = str(handle) if handle is not None else None
        self._notify()

    def can_proceed(self) -> bool:
        """Both a long-enough recording and a photo are required to move on."""
        session = self._session
        logger.debug(
            "can_proceed: recording=%s elapsed=%s image=%s",
            session.is_recording,
            session.elapsed_seconds,
            session.selected_image,
        )
        return (
            session.elapsed_seconds >= self._min_seconds
            and session.selected_image is not None
        )

    def result(self) -> RecordingResult:
        session = self._session
        return RecordingResult(
            audio_file=session.audio_file,
            selected_image=session.selected_image,
            duration_ms=session.duration_ms,
        )

    def reset(self) -> None:
        """Discard the current take. The selected image is kept."""
        self._generation += 1
        self._timer.cancel()
        if self._session.is_recording or self._device.is_capturing:
            self._device.release()
        session = self._session
        session.is_recording = False
        session.elapsed_seconds = 0
        session.audio_file = None
        session.last_error = None
        self._notify()

    async def close(self) -> None:
        """Screen teardown: stop ticking and force-release the microphone."""
        if self._closed:
            return
        self._closed = True
        self._generation += 1
        self._timer.cancel()
        self._session.is_recording = False
        self._device.release()
        logger.debug("Recording session closed")

    def _notify(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self._session.snapshot())
        except Exception:
            logger.warning("on_change callback failed (non-fatal)", exc_info=True)
