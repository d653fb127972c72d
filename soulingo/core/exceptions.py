"""
SouLingo exception hierarchy.

All application-specific exceptions inherit from SoulingoError so that
screen controllers can catch them at one boundary and turn them into a
one-line message on their session.
"""

from datetime import UTC, datetime


class SoulingoError(Exception):
    """Base exception for all SouLingo errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "SOULINGO_ERROR",
    ) -> None:
        self.detail = detail
        self.code = code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


# ---------------------------------------------------------------------------
# Capture device
# ---------------------------------------------------------------------------


class CaptureError(SoulingoError):
    """Raised when the microphone capture device cannot start or stop."""

    def __init__(self, detail: str = "Audio capture failed", code: str = "CAPTURE_ERROR") -> None:
        super().__init__(detail=detail, code=code)


class DeviceBusyError(CaptureError):
    """Raised when the microphone is already being captured."""

    def __init__(self, detail: str = "Microphone is already in use") -> None:
        super().__init__(detail=detail, code="DEVICE_BUSY")


class MicrophoneUnavailableError(CaptureError):
    """Raised when the input stream cannot be opened or started."""

    def __init__(self, detail: str = "Microphone could not be acquired") -> None:
        super().__init__(detail=detail, code="MICROPHONE_UNAVAILABLE")


class OutputTargetError(CaptureError):
    """Raised when the artifact file cannot be created."""

    def __init__(self, detail: str = "Audio output file could not be created") -> None:
        super().__init__(detail=detail, code="OUTPUT_TARGET_ERROR")


class NoActiveCaptureError(CaptureError):
    """Raised when stop() is called without a running capture."""

    def __init__(self) -> None:
        super().__init__(detail="No capture is active", code="NO_ACTIVE_CAPTURE")


class FinalizeError(CaptureError):
    """Raised when the stream or artifact cannot be finalized."""

    def __init__(self, detail: str = "Audio capture could not be finalized") -> None:
        super().__init__(detail=detail, code="CAPTURE_FINALIZE_ERROR")


# ---------------------------------------------------------------------------
# Remote backend
# ---------------------------------------------------------------------------


class RemoteError(SoulingoError):
    """User-friendly backend error with categorized message.

    Categories: "connection", "timeout", "http", "network", "decode".
    """

    def __init__(
        self,
        detail: str,
        category: str = "network",
        status_code: int | None = None,
    ) -> None:
        self.category = category
        self.status_code = status_code
        super().__init__(detail=detail, code="REMOTE_ERROR")


# ---------------------------------------------------------------------------
# Pronunciation scoring
# ---------------------------------------------------------------------------


class ScoringError(SoulingoError):
    """Raised when a pronunciation scorer cannot produce a result."""

    def __init__(self, detail: str = "Pronunciation evaluation failed") -> None:
        super().__init__(detail=detail, code="SCORING_ERROR")
