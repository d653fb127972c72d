"""
Audio module - Microphone capture and payload encoding.
"""

from .capture import BaseCaptureDevice, SoundDeviceCapture, get_microphone_owner
from .encoding import encode_file_base64

__all__ = [
    "BaseCaptureDevice",
    "SoundDeviceCapture",
    "encode_file_base64",
    "get_microphone_owner",
]
