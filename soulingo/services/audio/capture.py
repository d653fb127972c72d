"""Microphone capture into WAV artifacts.

``SoundDeviceCapture`` opens a ``sounddevice.InputStream`` on the default
input device and streams its int16 frames straight into a
``soundfile.SoundFile``. One artifact is written per start/stop pair, named
``voice_<epoch_ms>.wav`` inside the configured cache directory.

The microphone is a process-wide resource: at most one device holds it at
a time and a second acquisition fails fast with ``DeviceBusyError``.
"""

import asyncio
import logging
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import numpy as np
import soundfile as sf

from soulingo.core.config import Settings, get_settings
from soulingo.core.exceptions import (
    DeviceBusyError,
    FinalizeError,
    MicrophoneUnavailableError,
    NoActiveCaptureError,
    OutputTargetError,
)

try:
    import sounddevice as sd
except OSError:  # PortAudio shared library missing
    sd = None

logger = logging.getLogger(__name__)


class BaseCaptureDevice(ABC):
    """Interface every capture device implements."""

    @property
    @abstractmethod
    def is_capturing(self) -> bool:
        """Whether a capture is currently running."""

    @abstractmethod
    async def start(self) -> Path:
        """Acquire the microphone and begin writing a fresh artifact.

        Returns:
            Path of the artifact being written.

        Raises:
            CaptureError: If already capturing, the microphone cannot be
                acquired, or the output file cannot be created.
        """

    @abstractmethod
    async def stop(self) -> Path:
        """Finalize the artifact and release the microphone.

        The microphone is released even when finalization fails.

        Returns:
            Path of the finished artifact.

        Raises:
            CaptureError: If no capture is active or finalization fails.
        """

    @abstractmethod
    def release(self) -> None:
        """Force teardown. Idempotent and never raises."""


# ---------------------------------------------------------------------------
# Process-wide microphone ownership
# ---------------------------------------------------------------------------

_microphone_lock = threading.Lock()
_microphone_owner: BaseCaptureDevice | None = None


def _acquire_microphone(owner: BaseCaptureDevice) -> None:
    global _microphone_owner
    with _microphone_lock:
        if _microphone_owner is not None:
            raise DeviceBusyError()
        _microphone_owner = owner


def _release_microphone(owner: BaseCaptureDevice) -> None:
    global _microphone_owner
    with _microphone_lock:
        if _microphone_owner is owner:
            _microphone_owner = None


def get_microphone_owner() -> BaseCaptureDevice | None:
    """Return the device currently holding the microphone, or None."""
    return _microphone_owner


class SoundDeviceCapture(BaseCaptureDevice):
    """Capture device backed by PortAudio (sounddevice) and libsndfile (soundfile).

    Args:
        cache_dir: Directory for artifacts (defaults to ``Settings.cache_dir``).
        sample_rate: Capture rate in Hz.
        channels: Number of input channels.
        subtype: soundfile subtype of the WAV artifact.
        device: sounddevice input device index or name (None = default).
        settings: Optional Settings instance (defaults to get_settings()).
    """

    def __init__(
        self,
        cache_dir: str | Path | None = None,
        sample_rate: int | None = None,
        channels: int | None = None,
        subtype: str | None = None,
        device: int | str | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._cache_dir = Path(cache_dir or self._settings.cache_dir)
        self._sample_rate = sample_rate or self._settings.sample_rate
        self._channels = channels or self._settings.channels
        self._subtype = subtype or self._settings.audio_subtype
        self._device = device

        self._stream: Any = None
        self._file: sf.SoundFile | None = None
        self._output_path: Path | None = None
        self._current_artifact: Path | None = None
        self._write_error: Exception | None = None
        self._frames_written = 0
        self._level = 0.0

    @property
    def is_capturing(self) -> bool:
        return self._stream is not None

    @property
    def current_artifact(self) -> Path | None:
        """Artifact of the latest capture (being written or finished)."""
        return self._current_artifact

    @property
    def frames_written(self) -> int:
        return self._frames_written

    @property
    def input_level(self) -> float:
        """RMS level of the last captured block, in [0.0, 1.0]."""
        return self._level

    async def start(self) -> Path:
        if self.is_capturing:
            raise DeviceBusyError("A capture is already running on this device")

        _acquire_microphone(self)
        try:
            path = self._allocate_output()
            self._open_file(path)
            await asyncio.to_thread(self._open_stream)
        except Exception:
            self._teardown()
            raise

        self._output_path = path
        self._current_artifact = path
        logger.info("Capture started: %s", path)
        return path

    async def stop(self) -> Path:
        if not self.is_capturing:
            raise NoActiveCaptureError()

        path = self._output_path
        try:
            await asyncio.to_thread(self._finalize)
        finally:
            self._teardown()

        logger.info("Capture finished: %s (%d frames)", path, self._frames_written)
        return path

    def release(self) -> None:
        if self._stream is not None or self._file is not None:
            logger.info("Releasing capture device (forced)")
        self._teardown()

    # -- internals --

    def _allocate_output(self) -> Path:
        """Pick a fresh ``voice_<epoch_ms>.wav`` path in the cache directory."""
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputTargetError(f"Cache directory unavailable: {exc}") from exc

        stamp = int(time.time() * 1000)
        path = self._cache_dir / f"voice_{stamp}.wav"
        while path.exists():
            stamp += 1
            path = self._cache_dir / f"voice_{stamp}.wav"
        return path

    def _open_file(self, path: Path) -> None:
        try:
            self._file = sf.SoundFile(
                str(path),
                mode="w",
                samplerate=self._sample_rate,
                channels=self._channels,
                subtype=self._subtype,
                format="WAV",
            )
        except (RuntimeError, OSError, ValueError) as exc:
            raise OutputTargetError(f"Audio output file could not be created: {exc}") from exc
        self._write_error = None
        self._frames_written = 0
        self._level = 0.0

    def _open_stream(self) -> None:
        """Open and start the input stream (blocking; runs in a worker thread)."""
        if sd is None:
            raise MicrophoneUnavailableError("PortAudio backend is not available")
        try:
            stream = sd.InputStream(
                samplerate=self._sample_rate,
                channels=self._channels,
                dtype="int16",
                device=self._device,
                callback=self._on_audio,
            )
        except Exception as exc:
            raise MicrophoneUnavailableError(f"Microphone could not be acquired: {exc}") from exc
        try:
            stream.start()
        except Exception as exc:
            stream.close(ignore_errors=True)
            raise MicrophoneUnavailableError(f"Microphone could not be started: {exc}") from exc
        self._stream = stream

    def _on_audio(self, indata: Any, frames: int, time_info: Any, status: Any) -> None:
        """PortAudio callback: append the block to the artifact."""
        if status:
            logger.debug("Input stream status: %s", status)
        sink = self._file
        if sink is None:
            return
        try:
            sink.write(indata)
        except Exception as exc:
            if self._write_error is None:
                self._write_error = exc
            return
        self._frames_written += frames
        samples = np.asarray(indata, dtype=np.float32) / 32768.0
        self._level = float(np.sqrt(np.mean(np.square(samples)))) if samples.size else 0.0

    def _finalize(self) -> None:
        """Stop the stream and close the artifact (blocking)."""
        try:
            self._stream.stop()
            self._stream.close()
            self._stream = None
            self._file.close()
            self._file = None
        except Exception as exc:
            raise FinalizeError(f"Audio capture could not be finalized: {exc}") from exc
        if self._write_error is not None:
            raise FinalizeError(f"Audio frames could not be written: {self._write_error}")

    def _teardown(self) -> None:
        """Release whatever is still held. Never raises."""
        stream, self._stream = self._stream, None
        sink, self._file = self._file, None
        if stream is not None:
            try:
                stream.abort(ignore_errors=True)
                stream.close(ignore_errors=True)
            except Exception:
                logger.warning("Failed to close input stream", exc_info=True)
        if sink is not None:
            try:
                sink.close()
            except Exception:
                logger.warning("Failed to close audio artifact", exc_info=True)
        _release_microphone(self)
