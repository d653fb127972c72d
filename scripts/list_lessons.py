#!/usr/bin/env python3
"""
SouLingo lesson lister

Fetches the lesson list from the backend and prints one line per lesson.
Falls back to the bundled offline catalog when the backend is unreachable.

Usage:
    python scripts/list_lessons.py                       # Backend from .env
    python scripts/list_lessons.py --base-url http://host:8000
    python scripts/list_lessons.py --offline             # Bundled catalog only
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Ensure project root is on sys.path for ``soulingo`` imports
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from soulingo.content import iter_lessons  # noqa: E402
from soulingo.core.exceptions import RemoteError  # noqa: E402
from soulingo.core.log import configure_logging  # noqa: E402
from soulingo.core.models import Lesson  # noqa: E402
from soulingo.services.api import RemoteClient  # noqa: E402

logger = logging.getLogger(__name__)


async def load_lessons(base_url: str | None, offline: bool) -> tuple[list[Lesson], str]:
    """Return the lessons and where they came from ("backend" or "bundled")."""
    if not offline:
        async with RemoteClient(base_url=base_url) as client:
            try:
                return await client.get_lessons(), "backend"
            except RemoteError as exc:
                logger.warning("Backend unavailable (%s); using bundled catalog", exc.detail)
    return list(iter_lessons()), "bundled"


async def run(base_url: str | None, offline: bool) -> int:
    lessons, source = await load_lessons(base_url, offline)
    print(f"{len(lessons)} lessons ({source})")
    for lesson in lessons:
        print(f"  [{lesson.level}] {lesson.lesson_id:<8} {lesson.type.value:<20} {lesson.title}")
    return 0


def main() -> int:
    """Entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(description="List SouLingo lessons")
    parser.add_argument("--base-url", default=None, help="Backend root URL")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip the backend and list the bundled catalog",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default from .env)")
    args = parser.parse_args()

    configure_logging(args.log_level)
    return asyncio.run(run(args.base_url, args.offline))


if __name__ == "__main__":
    sys.exit(main())
