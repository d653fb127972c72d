"""Shared pytest fixtures for the SouLingo test suite.

Provides settings tuned for fast tests, an in-memory capture device, a
sample lesson, and helpers for faking the backend with httpx.MockTransport.
"""

import asyncio
import json
import struct
import wave
from pathlib import Path

import httpx
import pytest

from soulingo.core.config import Settings
from soulingo.core.exceptions import DeviceBusyError, NoActiveCaptureError
from soulingo.core.models import Lesson
from soulingo.services.audio import capture
from soulingo.services.audio.capture import BaseCaptureDevice

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path):
    """Settings with millisecond-scale timers and a temporary cache dir."""
    return Settings(
        cache_dir=str(tmp_path / "cache"),
        sample_rate=16000,
        timer_interval=0.05,
        evaluation_delay=0.05,
        api_base_url="http://test",
    )


@pytest.fixture(autouse=True)
def _release_microphone():
    """Ensure no test leaks microphone ownership into the next one."""
    capture._microphone_owner = None
    yield
    capture._microphone_owner = None


# ---------------------------------------------------------------------------
# Capture device
# ---------------------------------------------------------------------------


class FakeCaptureDevice(BaseCaptureDevice):
    """In-memory capture device writing tiny placeholder artifacts.

    Set ``start_error`` / ``stop_error`` to make the next call fail, or
    ``start_gate`` to an ``asyncio.Event`` to hold start() until it is set.
    """

    def __init__(self, directory: Path) -> None:
        self._dir = directory
        self._capturing = False
        self._counter = 0
        self.path: Path | None = None
        self.start_error: Exception | None = None
        self.stop_error: Exception | None = None
        self.start_gate: asyncio.Event | None = None
        self.start_calls = 0
        self.stop_calls = 0
        self.release_calls = 0

    @property
    def is_capturing(self) -> bool:
        return self._capturing

    async def start(self) -> Path:
        self.start_calls += 1
        if self._capturing:
            raise DeviceBusyError()
        if self.start_gate is not None:
            await self.start_gate.wait()
        if self.start_error is not None:
            raise self.start_error
        self._counter += 1
        self.path = self._dir / f"voice_{self._counter}.wav"
        self.path.write_bytes(b"RIFF0000WAVE")
        self._capturing = True
        return self.path

    async def stop(self) -> Path:
        self.stop_calls += 1
        if not self._capturing:
            raise NoActiveCaptureError()
        self._capturing = False
        if self.stop_error is not None:
            raise self.stop_error
        return self.path

    def release(self) -> None:
        self.release_calls += 1
        self._capturing = False


@pytest.fixture
def fake_device(tmp_path):
    return FakeCaptureDevice(tmp_path)


# ---------------------------------------------------------------------------
# Content fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def lesson():
    return Lesson(
        id=1,
        lesson_id="a1_l1",
        title="Introduction & Daily Routine",
        content="Hola. Me llamo Lucy. Soy estudiante.",
        level="A1",
        lesson_type="lecture_repetition",
    )


@pytest.fixture
def sample_wav_path(tmp_path):
    """A 0.1 s 16 kHz mono WAV file of a quiet ramp.

    Returns:
        Path: Path to the temporary WAV file.
    """
    wav_path = tmp_path / "sample.wav"
    frames = b"".join(struct.pack("<h", i * 10) for i in range(1600))
    with wave.open(str(wav_path), "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(16000)
        wf.writeframes(frames)
    return wav_path


@pytest.fixture
def sample_image_path(tmp_path):
    image_path = tmp_path / "photo.jpg"
    image_path.write_bytes(b"\xff\xd8\xff\xe0fake-jpeg")
    return image_path


# ---------------------------------------------------------------------------
# Backend fakes
# ---------------------------------------------------------------------------


class RecordingBackend:
    """httpx.MockTransport handler that records requests and replays routes.

    Routes map ``(METHOD, path)`` to either a ``(status, json_body)`` tuple
    or an exception instance to raise.
    """

    def __init__(self, routes: dict | None = None) -> None:
        self.routes = routes or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        if isinstance(route, Exception):
            raise route
        status, body = route
        return httpx.Response(status, json=body)

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
async def remote_client(backend):
    from soulingo.services.api import RemoteClient

    client = RemoteClient(
        base_url="http://test", timeout=5.0, transport=httpx.MockTransport(backend)
    )
    yield client
    await client.aclose()
