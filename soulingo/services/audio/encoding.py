"""Whole-file base64 encoding of audio and image payloads.

Encoding never aborts a submission: a missing path, missing file, or read
error is logged and the payload becomes ``None`` (absent from the request).
"""

import base64
import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

logger = logging.getLogger(__name__)


def resolve_local_path(handle: str | Path) -> Path:
    """Turn a plain path or a ``file://`` URI into a filesystem path."""
    if isinstance(handle, Path):
        return handle
    if handle.startswith("file://"):
        return Path(unquote(urlparse(handle).path))
    return Path(handle)


def encode_file_base64(handle: str | Path | None, label: str = "file") -> str | None:
    """Read a file and return its contents as a base64 string.

    Args:
        handle: Path or ``file://`` URI, or None.
        label: Payload name used in log messages ("audio", "image").

    Returns:
        The base64 text (no line wrapping), or None when the file cannot be read.
    """
    if handle is None:
        return None

    path = resolve_local_path(handle)
    if not path.is_file():
        logger.error("%s file not found: %s", label.capitalize(), path)
        return None

    try:
        encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    except OSError as exc:
        logger.error("%s encoding error for %s: %s", label.capitalize(), path, exc)
        return None

    logger.debug("%s encoded: %d chars", label.capitalize(), len(encoded))
    return encoded
