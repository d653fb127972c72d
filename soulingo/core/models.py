"""
Pydantic v2 models exchanged with the backend and the lesson catalog.

Wire names follow the backend's JSON (snake_case for auth payloads,
camelCase for a few lesson media fields).
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Lessons
# ---------------------------------------------------------------------------


class LessonType(StrEnum):
    """Kind of exercise a lesson drives."""

    lecture_repetition = "lecture_repetition"
    question_answer = "question_answer"


class Lesson(BaseModel):
    """A single lesson, fetched from the backend or bundled offline."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    lesson_id: str
    title: str
    content: str
    level: str
    lesson_type: str = LessonType.lecture_repetition.value
    created_at: str = ""
    updated_at: str = ""
    video_url: str | None = Field(default=None, alias="videoUrl")
    audio_url: str | None = Field(default=None, alias="audioUrl")
    is_completed: bool = Field(default=False, alias="isCompleted")

    @property
    def type(self) -> LessonType:
        """Lesson type, falling back to lecture_repetition for unknown values."""
        try:
            return LessonType(self.lesson_type)
        except ValueError:
            return LessonType.lecture_repetition


class LearningModule(BaseModel):
    """A CEFR level grouping lessons."""

    id: str
    level: str
    title: str
    lessons: list[Lesson] = Field(default_factory=list)
    is_locked: bool = False
    progress: int = 0


# ---------------------------------------------------------------------------
# Pronunciation
# ---------------------------------------------------------------------------


class PronunciationMistake(BaseModel):
    """One mispronounced word, located by its offset in the recording."""

    word: str
    expected_form: str
    actual_form: str
    timestamp_ms: int = Field(ge=0)


class PronunciationResult(BaseModel):
    """Outcome of scoring one practice recording against its reference text."""

    score: int = Field(ge=0, le=100)
    mistakes: list[PronunciationMistake] = Field(default_factory=list)
    feedback_text: str = ""


# ---------------------------------------------------------------------------
# Users & auth
# ---------------------------------------------------------------------------


class UserData(BaseModel):
    """User record as returned by the auth endpoints."""

    id: int
    email: str
    audio_file_url: str | None = None
    image_file_url: str | None = None
    recording_duration: int | None = None
    elevenlabs_voice_id: str | None = None
    did_avatar_id: str | None = None
    created_at: str | None = None

    @property
    def has_recording(self) -> bool:
        """True only when both the voice sample and the photo were uploaded."""
        return self.audio_file_url is not None and self.image_file_url is not None


class LoginRequest(BaseModel):
    """POST /auth/login request body."""

    email: str
    password: str


class RegisterRequest(BaseModel):
    """POST /auth/register request body.

    ``recording_duration`` is in milliseconds.
    """

    email: str
    password: str
    audio_base64: str | None = None
    image_base64: str | None = None
    recording_duration: int = 0


class UpdateRecordingRequest(BaseModel):
    """PUT /users/recording request body."""

    audio_base64: str | None = None
    image_base64: str | None = None
    recording_duration: int = 0


class AuthResponse(BaseModel):
    """Response envelope of login and register."""

    success: bool
    message: str | None = None
    user: UserData | None = None
    token: str | None = None
    error: str | None = None
    errors: dict[str, list[str]] | None = None


class UserResponse(BaseModel):
    """Response envelope of /auth/me and /users/recording."""

    success: bool
    user: UserData | None = None
    error: str | None = None
    message: str | None = None
