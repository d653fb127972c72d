"""
API module - Client for the SouLingo backend.
"""

from .client import RemoteClient

__all__ = ["RemoteClient"]
