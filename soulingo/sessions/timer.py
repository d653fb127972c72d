"""Cooperative one-second ticker for recording sessions.

While the session's ``is_recording`` flag is set, the timer sleeps one
interval, then increments ``elapsed_seconds`` and re-checks the flag. It
exits on its own when the flag drops and can be cancelled at any time.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)


class Tickable(Protocol):
    is_recording: bool
    elapsed_seconds: int


class RecordingTimer:
    """Owns at most one ticking task at a time.

    Args:
        interval: Seconds between ticks (1.0 in production).
    """

    def __init__(self, interval: float = 1.0) -> None:
        if interval <= 0:
            raise ValueError("Timer interval must be positive")
        self._interval = interval
        self._task: asyncio.Task | None = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(
        self,
        session: Tickable,
        on_tick: Callable[[int], None] | None = None,
    ) -> None:
        """Start ticking ``session``, cancelling any previous task first."""
        self.cancel()
        self._task = asyncio.create_task(self._run(session, on_tick))

    def cancel(self) -> None:
        """Stop ticking. Idempotent."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    async def _run(self, session: Tickable, on_tick: Callable[[int], None] | None) -> None:
        while session.is_recording:
            await asyncio.sleep(self._interval)
            if not session.is_recording:
                break
            session.elapsed_seconds += 1
            if on_tick is not None:
                try:
                    on_tick(session.elapsed_seconds)
                except Exception:
                    logger.warning("Timer tick callback failed (non-fatal)", exc_info=True)
        logger.debug("Recording timer stopped at %ss", session.elapsed_seconds)
