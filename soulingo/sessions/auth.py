"""Login / registration session and its screen controller.

A single validate-then-submit flow: each check short-circuits with its own
message, then exactly one login or register call is made. No retries.
An authenticated session is terminal for its screen.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import StrEnum
from pathlib import Path

from soulingo.core.config import Settings, get_settings
from soulingo.core.exceptions import RemoteError
from soulingo.core.models import AuthResponse, UserData
from soulingo.services.api.client import RemoteClient
from soulingo.services.audio.encoding import encode_file_base64

logger = logging.getLogger(__name__)

# Same shape as Android's Patterns.EMAIL_ADDRESS
EMAIL_PATTERN = re.compile(
    r"[a-zA-Z0-9+._%\-]{1,256}"
    r"@"
    r"[a-zA-Z0-9][a-zA-Z0-9\-]{0,64}"
    r"(\.[a-zA-Z0-9][a-zA-Z0-9\-]{0,25})+"
)

MSG_EMAIL_REQUIRED = "Please enter your email address"
MSG_EMAIL_INVALID = "Please enter a valid email address"
MSG_PASSWORD_TOO_SHORT = "Password must be at least {min_length} characters"
MSG_PASSWORD_MISMATCH = "Passwords do not match"
MSG_USERNAME_REQUIRED = "Please enter a username"
MSG_LOGIN_FAILED = "Login failed"
MSG_REGISTER_FAILED = "Registration failed"

# RemoteError categories shown to the user as network problems
TRANSPORT_CATEGORIES = frozenset({"connection", "timeout", "network"})


class AuthMode(StrEnum):
    login = "login"
    register = "register"


@dataclass
class AuthSession:
    """Per-screen authentication state."""

    mode: AuthMode = AuthMode.login
    username: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    is_loading: bool = False
    error_message: str | None = None
    auth_token: str | None = None
    user: UserData | None = None
    user_has_prior_recording: bool = False
    # Voice sample and photo captured before registering
    audio_file: Path | None = None
    image_file: str | None = None
    recording_duration_ms: int = 0

    @property
    def is_authenticated(self) -> bool:
        return self.auth_token is not None

    def snapshot(self) -> "AuthSession":
        return replace(self)


def validate_credentials(session: AuthSession, min_password_length: int = 6) -> str | None:
    """Return the first validation message for ``session``, or None if it passes."""
    if not session.email.strip():
        return MSG_EMAIL_REQUIRED
    if not EMAIL_PATTERN.fullmatch(session.email):
        return MSG_EMAIL_INVALID
    if len(session.password) < min_password_length:
        return MSG_PASSWORD_TOO_SHORT.format(min_length=min_password_length)
    if session.mode is AuthMode.register:
        if session.password != session.confirm_password:
            return MSG_PASSWORD_MISMATCH
        if not session.username.strip():
            return MSG_USERNAME_REQUIRED
    return None


class AuthController:
    """Drives one AuthSession against the backend.

    Args:
        client: Shared RemoteClient.
        settings: Optional Settings instance (defaults to get_settings()).
        on_change: Called with a snapshot after every mutation.
    """

    def __init__(
        self,
        client: RemoteClient,
        settings: Settings | None = None,
        on_change: Callable[[AuthSession], None] | None = None,
    ) -> None:
        self._client = client
        self._settings = settings or get_settings()
        self._on_change = on_change
        self._session = AuthSession()

    @property
    def state(self) -> AuthSession:
        return self._session.snapshot()

    # -- form fields --

    def toggle_mode(self) -> None:
        session = self._session
        session.mode = AuthMode.register if session.mode is AuthMode.login else AuthMode.login
        session.error_message = None
        self._notify()

    def update_username(self, username: str) -> None:
        self._update(username=username)

    def update_email(self, email: str) -> None:
        self._update(email=email)

    def update_password(self, password: str) -> None:
        self._update(password=password)

    def update_confirm_password(self, confirm_password: str) -> None:
        self._update(confirm_password=confirm_password)

    def set_recording_data(
        self,
        audio_file: str | Path | None,
        image_file: str | Path | None,
        duration_ms: int,
    ) -> None:
        """Attach the voice sample and photo to send along with registration."""
        session = self._session
        session.audio_file = Path(audio_file) if audio_file is not None else None
        session.image_file = str(image_file) if image_file is not None else None
        session.recording_duration_ms = duration_ms
        logger.debug(
            "Recording data set: audio=%s image=%s duration=%sms",
            session.audio_file,
            session.image_file,
            duration_ms,
        )
        self._notify()

    def _update(self, **fields) -> None:
        for name, value in fields.items():
            setattr(self._session, name, value)
        self._session.error_message = None
        self._notify()

    # -- submission --

    async def submit(self) -> bool:
        """Validate the form and perform one login or register call.

        Returns:
            True once the session holds an auth token.
        """
        session = self._session
        if session.is_authenticated:
            logger.debug("submit() ignored: already authenticated")
            return True
        if session.is_loading:
            return False

        error = validate_credentials(session, self._settings.min_password_length)
        if error is not None:
            session.error_message = error
            self._notify()
            return False

        session.is_loading = True
        session.error_message = None
        self._notify()

        registering = session.mode is AuthMode.register
        try:
            if registering:
                response = await self._register()
            else:
                logger.info("Login attempt: %s", session.email)
                response = await self._client.login(session.email, session.password)
        except RemoteError as exc:
            session.is_loading = False
            if exc.category in TRANSPORT_CATEGORIES:
                session.error_message = f"Network error: {exc.detail}"
            else:
                session.error_message = exc.detail
            logger.error("%s failed: %s", "Registration" if registering else "Login", exc.detail)
            self._notify()
            return False

        return self._apply_response(response, registering)

    async def _register(self) -> AuthResponse:
        session = self._session
        logger.info("Register attempt: %s", session.email)
        audio_base64 = encode_file_base64(session.audio_file, "audio")
        image_base64 = encode_file_base64(session.image_file, "image")
        logger.debug(
            "Registration payload: audio=%s image=%s duration=%sms",
            f"{len(audio_base64)} chars" if audio_base64 else "absent",
            f"{len(image_base64)} chars" if image_base64 else "absent",
            session.recording_duration_ms,
        )
        return await self._client.register(
            session.email,
            session.password,
            audio_base64=audio_base64,
            image_base64=image_base64,
            duration_ms=session.recording_duration_ms,
        )

    def _apply_response(self, response: AuthResponse, registering: bool) -> bool:
        session = self._session
        session.is_loading = False

        if not response.success or not response.token:
            message = response.error
            if not message and registering and response.errors:
                message = str(response.errors)
            session.error_message = message or (
                MSG_REGISTER_FAILED if registering else MSG_LOGIN_FAILED
            )
            logger.error("Authentication rejected: %s", session.error_message)
            self._notify()
            return False

        session.auth_token = response.token
        session.user = response.user
        session.user_has_prior_recording = bool(response.user and response.user.has_recording)
        session.error_message = None
        session.password = ""
        session.confirm_password = ""
        logger.info(
            "Authenticated %s (prior recording: %s)",
            response.user.email if response.user else session.email,
            session.user_has_prior_recording,
        )
        self._notify()
        return True

    async def update_recording(
        self,
        audio_file: str | Path | None,
        image_file: str | Path | None,
        duration_ms: int,
    ) -> bool:
        """Upload a new voice sample and photo for the signed-in user.

        Returns:
            True if the backend accepted the upload; False without a token
            or on any failure.
        """
        token = self._session.auth_token
        if token is None:
            logger.warning("update_recording() without an auth token")
            return False

        audio_base64 = encode_file_base64(audio_file, "audio")
        image_base64 = encode_file_base64(image_file, "image")
        try:
            response = await self._client.update_recording(
                token,
                audio_base64=audio_base64,
                image_base64=image_base64,
                duration_ms=duration_ms,
            )
        except RemoteError as exc:
            logger.error("Recording upload failed: %s", exc.detail)
            return False

        if not response.success:
            logger.error("Recording upload rejected: %s", response.error or response.message)
            return False

        if response.user is not None:
            self._session.user = response.user
            self._session.user_has_prior_recording = response.user.has_recording
            self._notify()
        logger.info("Recording uploaded (%sms)", duration_ms)
        return True

    def _notify(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self._session.snapshot())
        except Exception:
            logger.warning("on_change callback failed (non-fatal)", exc_info=True)
