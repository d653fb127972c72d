"""Lesson session: watch, read, record, get pronunciation feedback.

Steps only move forward (WATCH_VIDEO -> READ_TEXT -> RECORD_PRACTICE ->
EVALUATION). ``retry()`` clears the take and its result without replaying
the video; ``reset()`` starts the lesson over.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import IntEnum

from soulingo.core.config import Settings, get_settings
from soulingo.core.exceptions import ScoringError
from soulingo.core.models import Lesson, PronunciationResult
from soulingo.services.audio.capture import BaseCaptureDevice
from soulingo.services.scoring import BasePronunciationScorer, create_scorer
from soulingo.sessions.recording import RecordingController, RecordingSession

logger = logging.getLogger(__name__)


class LessonStep(IntEnum):
    """Lesson steps in the only order they may be visited."""

    WATCH_VIDEO = 0
    READ_TEXT = 1
    RECORD_PRACTICE = 2
    EVALUATION = 3


@dataclass
class LessonSession:
    """State of one lesson attempt."""

    lesson: Lesson
    step: LessonStep = LessonStep.WATCH_VIDEO
    video_playing: bool = False
    video_completed: bool = False
    recording: RecordingSession = field(default_factory=RecordingSession)
    evaluation_result: PronunciationResult | None = None
    is_evaluating: bool = False
    last_error: str | None = None

    @property
    def can_record(self) -> bool:
        return not self.is_evaluating and self.evaluation_result is None

    def snapshot(self) -> "LessonSession":
        return replace(self, recording=self.recording.snapshot())


class LessonController:
    """Drives a LessonSession.

    Args:
        lesson: The lesson being practised.
        device: Capture device used for the practice recording.
        scorer: Pronunciation scorer (defaults to ``Settings.scorer_provider``).
        settings: Optional Settings instance (defaults to get_settings()).
        on_change: Called with a snapshot after every mutation.
    """

    def __init__(
        self,
        lesson: Lesson,
        device: BaseCaptureDevice,
        scorer: BasePronunciationScorer | None = None,
        settings: Settings | None = None,
        on_change: Callable[[LessonSession], None] | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._device = device
        self._scorer = scorer or create_scorer(
            self._settings.scorer_provider, settings=self._settings
        )
        self._on_change = on_change
        self._session = LessonSession(lesson=lesson)
        self._recorder = self._make_recorder()
        self._evaluation_task: asyncio.Task | None = None
        self._closed = False

    def _make_recorder(self) -> RecordingController:
        return RecordingController(
            self._device,
            session=self._session.recording,
            settings=self._settings,
            on_change=lambda _snapshot: self._notify(),
        )

    async def __aenter__(self) -> "LessonController":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def state(self) -> LessonSession:
        return self._session.snapshot()

    @property
    def closed(self) -> bool:
        return self._closed

    # -- video / text --

    def start_video(self) -> None:
        if self._closed or self._session.video_completed:
            return
        self._session.video_playing = True
        self._notify()

    def on_video_completed(self) -> None:
        """Completion signal from the player; the text is shown next."""
        if self._closed:
            return
        self._session.video_playing = False
        self._session.video_completed = True
        self._advance(LessonStep.READ_TEXT)
        self._notify()

    def proceed_to_read_text(self) -> bool:
        return self._advance_and_notify(LessonStep.READ_TEXT)

    def proceed_to_recording(self) -> bool:
        return self._advance_and_notify(LessonStep.RECORD_PRACTICE)

    # -- recording / evaluation --

    async def toggle_recording(self) -> bool:
        """Start or stop the practice take. Stopping launches the evaluation."""
        if self._closed:
            return False
        session = self._session
        if not session.can_record:
            logger.info("Recording ignored: evaluation pending or result displayed")
            return False

        recorder = self._recorder
        if not session.recording.is_recording:
            started = await recorder.toggle()
            if not started or self._torn_down(recorder):
                return False
            if self._session.step < LessonStep.RECORD_PRACTICE:
                self._advance_and_notify(LessonStep.RECORD_PRACTICE)
            return True

        stopped = await recorder.toggle()
        if not stopped or self._torn_down(recorder):
            return False
        self._begin_evaluation()
        return True

    def _torn_down(self, recorder: RecordingController) -> bool:
        """True when close() or reset() ran while ``recorder`` was switching."""
        return self._closed or recorder is not self._recorder

    def _begin_evaluation(self) -> None:
        session = self._session
        session.is_evaluating = True
        session.last_error = None
        self._notify()
        self._evaluation_task = asyncio.create_task(
            self._evaluate(session.recording.audio_file)
        )

    async def _evaluate(self, audio_file) -> None:
        session = self._session
        try:
            result = await self._scorer.evaluate(audio_file, session.lesson.content)
        except ScoringError as exc:
            logger.error("Pronunciation evaluation failed: %s", exc.detail)
            session.is_evaluating = False
            session.last_error = exc.detail
            self._notify()
            return
        except Exception:
            logger.exception("Scorer crashed for lesson %s", session.lesson.lesson_id)
            session.is_evaluating = False
            session.last_error = "Pronunciation evaluation failed"
            self._notify()
            return

        session.evaluation_result = result
        session.is_evaluating = False
        self._advance(LessonStep.EVALUATION)
        logger.info("Lesson %s scored %s", session.lesson.lesson_id, result.score)
        self._notify()

    async def wait_for_evaluation(self) -> PronunciationResult | None:
        """Wait for a pending evaluation (if any) and return the result."""
        task = self._evaluation_task
        if task is not None:
            await asyncio.wait({task})
        return self._session.evaluation_result

    def retry(self) -> None:
        """Clear the take and its result; the video is not replayed."""
        if self._closed:
            return
        self._cancel_evaluation()
        self._recorder.reset()
        session = self._session
        session.evaluation_result = None
        session.is_evaluating = False
        session.last_error = None
        logger.info("Lesson %s: retry", session.lesson.lesson_id)
        self._notify()

    def reset(self) -> None:
        """Start the lesson over from the video."""
        if self._closed:
            return
        self._cancel_evaluation()
        self._recorder.reset()
        self._session = LessonSession(lesson=self._session.lesson)
        self._recorder = self._make_recorder()
        self._notify()

    async def complete(self) -> None:
        """Leave the lesson; the session is discarded."""
        logger.info("Lesson %s completed", self._session.lesson.lesson_id)
        await self.close()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._cancel_evaluation()
        await self._recorder.close()

    # -- internals --

    def _cancel_evaluation(self) -> None:
        task, self._evaluation_task = self._evaluation_task, None
        if task is not None and not task.done():
            task.cancel()

    def _advance(self, step: LessonStep) -> bool:
        current = self._session.step
        if step < current:
            logger.warning("Ignoring backward step %s -> %s", current.name, step.name)
            return False
        if step != current:
            logger.info("Lesson step %s -> %s", current.name, step.name)
            self._session.step = step
        return True

    def _advance_and_notify(self, step: LessonStep) -> bool:
        if self._closed:
            return False
        advanced = self._advance(step)
        if advanced:
            self._notify()
        return advanced

    def _notify(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self._session.snapshot())
        except Exception:
            logger.warning("on_change callback failed (non-fatal)", exc_info=True)
