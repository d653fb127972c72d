"""
Sessions module - Per-screen session state and the controllers that drive it.
"""

from .auth import AuthController, AuthMode, AuthSession, validate_credentials
from .flow import AppFlow, Screen
from .lesson import LessonController, LessonSession, LessonStep
from .recording import RecordingController, RecordingResult, RecordingSession
from .timer import RecordingTimer

__all__ = [
    "AppFlow",
    "AuthController",
    "AuthMode",
    "AuthSession",
    "LessonController",
    "LessonSession",
    "LessonStep",
    "RecordingController",
    "RecordingResult",
    "RecordingSession",
    "RecordingTimer",
    "Screen",
    "validate_credentials",
]
