"""Top-level navigation between screens.

Onboarding -> auth -> voice recording (only for users without a stored
sample) -> profile -> learning (modules, lessons). The current screen is
derived from a handful of flags in a fixed priority order, so any
combination of flags maps to exactly one screen.
"""

import logging
from dataclasses import dataclass, replace
from enum import StrEnum

from soulingo.core.models import LearningModule, Lesson
from soulingo.sessions.auth import AuthController
from soulingo.sessions.recording import RecordingResult

logger = logging.getLogger(__name__)


class Screen(StrEnum):
    onboarding = "onboarding"
    auth = "auth"
    voice_recording = "voice_recording"
    profile = "profile"
    module_list = "module_list"
    lesson_list = "lesson_list"
    lesson = "lesson"


@dataclass
class FlowState:
    onboarding_finished: bool = False
    authenticated: bool = False
    user_has_recording: bool = False
    recording_complete: bool = False
    started_learning: bool = False
    show_profile: bool = False
    selected_module: LearningModule | None = None
    selected_lesson: Lesson | None = None
    recording: RecordingResult | None = None


class AppFlow:
    """Headless navigator; the UI renders whatever ``current_screen`` says."""

    def __init__(self) -> None:
        self._state = FlowState()

    @property
    def state(self) -> FlowState:
        return replace(self._state)

    @property
    def current_screen(self) -> Screen:
        s = self._state
        if not s.onboarding_finished:
            return Screen.onboarding
        if not s.authenticated:
            return Screen.auth
        if not s.user_has_recording and not s.recording_complete:
            return Screen.voice_recording
        if not s.started_learning:
            return Screen.profile
        if s.selected_lesson is not None:
            return Screen.lesson
        if s.selected_module is not None:
            return Screen.lesson_list
        if s.show_profile:
            return Screen.profile
        return Screen.module_list

    def finish_onboarding(self) -> None:
        self._state.onboarding_finished = True
        logger.info("Onboarding completed")

    def auth_succeeded(self, has_recording: bool) -> None:
        if self.current_screen is not Screen.auth:
            logger.warning("auth_succeeded() ignored on %s", self.current_screen)
            return
        self._state.authenticated = True
        self._state.user_has_recording = has_recording
        logger.info("Authenticated; user has recording: %s", has_recording)

    async def recording_completed(self, result: RecordingResult, auth: AuthController) -> bool:
        """Upload the new voice sample and move on to the profile.

        The flow advances even when the upload fails, so the app stays
        usable offline; the failure is only logged.

        Returns:
            Whether the upload succeeded.
        """
        if self.current_screen is not Screen.voice_recording:
            logger.warning("recording_completed() ignored on %s", self.current_screen)
            return False

        self._state.recording = result
        uploaded = await auth.update_recording(
            result.audio_file, result.selected_image, result.duration_ms
        )
        if uploaded:
            logger.info("Recording uploaded")
        else:
            logger.error("Recording upload failed; continuing to profile")
        self._state.recording_complete = True
        return uploaded

    def start_learning(self) -> None:
        self._state.started_learning = True
        logger.info("Starting learning")

    def open_profile(self) -> None:
        self._state.show_profile = True

    def close_profile(self) -> None:
        self._state.show_profile = False

    def select_module(self, module: LearningModule) -> bool:
        if module.is_locked:
            logger.info("Module %s is locked", module.id)
            return False
        self._state.selected_module = module
        logger.info("Selected module: %s", module.title)
        return True

    def back_from_module(self) -> None:
        self._state.selected_module = None

    def select_lesson(self, lesson: Lesson) -> None:
        self._state.selected_lesson = lesson
        logger.info("Selected lesson: %s", lesson.title)

    def close_lesson(self) -> None:
        self._state.selected_lesson = None
