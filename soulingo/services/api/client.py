"""
Asynchronous HTTP client for the SouLingo backend API.

Uses ``httpx.AsyncClient`` so screen controllers can await network calls
without blocking the event loop. Construct one client per process and
inject it into the controllers that need it.
"""

import logging

import httpx
from pydantic import TypeAdapter, ValidationError

from soulingo.core.config import Settings, get_settings
from soulingo.core.exceptions import RemoteError
from soulingo.core.models import (
    AuthResponse,
    Lesson,
    LoginRequest,
    RegisterRequest,
    UpdateRecordingRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)

_LESSON_LIST = TypeAdapter(list[Lesson])


class RemoteClient:
    """Thin async wrapper around httpx for calling the SouLingo backend.

    Every call is a single request/response pair: no retries, no backoff.
    All methods return parsed models or raise ``RemoteError`` with a
    user-friendly message and a category for the caller to branch on.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: Root URL of the backend (defaults to ``Settings.api_base_url``).
            timeout: Per-request timeout in seconds (defaults to ``Settings.api_timeout``).
            transport: Optional httpx transport, e.g. ``httpx.MockTransport`` in tests.
            settings: Optional Settings instance, consulted only for the values
                not passed explicitly (defaults to get_settings()).
        """
        if base_url is None or timeout is None:
            settings = settings or get_settings()
            base_url = base_url or settings.api_base_url
            timeout = settings.api_timeout if timeout is None else timeout
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "RemoteClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request with user-friendly error handling.

        Args:
            method: HTTP method name ("get", "post", "put").
            path: API endpoint path (e.g. "/api/v1/lessons").
            **kwargs: Passed through to httpx (json, headers, params, etc.).

        Returns:
            The httpx Response object with a successful status code.

        Raises:
            RemoteError: On connection, timeout, HTTP status, or network errors.
        """
        try:
            resp = await self._client.request(method.upper(), path, **kwargs)
            resp.raise_for_status()
            return resp
        except httpx.ConnectError as exc:
            logger.warning("Backend unreachable at %s: %s", self._base_url, exc)
            raise RemoteError(
                "Backend server is not reachable.", category="connection"
            ) from None
        except httpx.TimeoutException:
            logger.warning("Request timed out: %s %s", method.upper(), path)
            raise RemoteError("Request timed out.", category="timeout") from None
        except httpx.HTTPStatusError as exc:
            detail = _error_detail(exc.response)
            logger.warning(
                "HTTP %s from %s %s: %s", exc.response.status_code, method.upper(), path, detail
            )
            raise RemoteError(
                detail, category="http", status_code=exc.response.status_code
            ) from None
        except httpx.HTTPError as exc:
            raise RemoteError(str(exc) or type(exc).__name__, category="network") from None

    @staticmethod
    def _auth_header(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    # -- auth --

    async def login(self, email: str, password: str) -> AuthResponse:
        body = LoginRequest(email=email, password=password).model_dump()
        resp = await self._request("post", "/api/v1/auth/login", json=body)
        return _parse(AuthResponse, resp)

    async def register(
        self,
        email: str,
        password: str,
        audio_base64: str | None = None,
        image_base64: str | None = None,
        duration_ms: int = 0,
    ) -> AuthResponse:
        """Create an account, uploading the voice sample and photo if present.

        Absent payloads are omitted from the JSON body.
        """
        request = RegisterRequest(
            email=email,
            password=password,
            audio_base64=audio_base64,
            image_base64=image_base64,
            recording_duration=duration_ms,
        )
        resp = await self._request(
            "post", "/api/v1/auth/register", json=request.model_dump(exclude_none=True)
        )
        return _parse(AuthResponse, resp)

    async def get_current_user(self, token: str) -> UserResponse:
        resp = await self._request("get", "/api/v1/auth/me", headers=self._auth_header(token))
        return _parse(UserResponse, resp)

    # -- users --

    async def update_recording(
        self,
        token: str,
        audio_base64: str | None = None,
        image_base64: str | None = None,
        duration_ms: int = 0,
    ) -> UserResponse:
        request = UpdateRecordingRequest(
            audio_base64=audio_base64,
            image_base64=image_base64,
            recording_duration=duration_ms,
        )
        resp = await self._request(
            "put",
            "/api/v1/users/recording",
            json=request.model_dump(exclude_none=True),
            headers=self._auth_header(token),
        )
        return _parse(UserResponse, resp)

    # -- lessons --

    async def get_lessons(self) -> list[Lesson]:
        resp = await self._request("get", "/api/v1/lessons")
        try:
            return _LESSON_LIST.validate_python(resp.json())
        except (ValidationError, ValueError) as exc:
            raise RemoteError(f"Malformed lesson list: {exc}", category="decode") from None

    async def get_lesson(self, lesson_id: int) -> Lesson:
        resp = await self._request("get", f"/api/v1/lessons/{lesson_id}")
        return _parse(Lesson, resp)


def _parse(model, resp: httpx.Response):
    """Validate a JSON response body into ``model``."""
    try:
        return model.model_validate(resp.json())
    except (ValidationError, ValueError) as exc:
        raise RemoteError(
            f"Malformed {model.__name__} response: {exc}", category="decode"
        ) from None


def _error_detail(response: httpx.Response) -> str:
    """Pull a human-readable message out of an error response body."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        for key in ("error", "detail", "message"):
            if payload.get(key):
                return str(payload[key])
    return response.text or f"HTTP {response.status_code}"
