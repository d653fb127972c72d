"""Stand-in scorer used until a real scoring backend is wired in.

It waits a fixed delay and fabricates a result: a score drawn from a fixed
range, one canned mistake and fixed feedback text. None of it reflects the
recording.
"""

import asyncio
import logging
import random
from pathlib import Path

from soulingo.core.config import Settings, get_settings
from soulingo.core.exceptions import ScoringError
from soulingo.core.models import PronunciationMistake, PronunciationResult
from soulingo.services.scoring.base import BasePronunciationScorer

logger = logging.getLogger(__name__)

CANNED_MISTAKE = PronunciationMistake(
    word="estudiante",
    expected_form="es-tu-di-AN-te",
    actual_form="es-tu-di-an-TE",
    timestamp_ms=1500,
)
CANNED_FEEDBACK = "Good pronunciation! Pay attention to the stress on 'estudiante'."


class PlaceholderScorer(BasePronunciationScorer):
    """Fixed-delay scorer that returns a synthesized result.

    Args:
        delay: Seconds to wait before answering.
        score_min: Lowest score it may return (inclusive).
        score_max: Highest score it may return (inclusive).
        rng: Random source, injectable for tests.
        settings: Optional Settings instance (defaults to get_settings()).
    """

    def __init__(
        self,
        delay: float | None = None,
        score_min: int | None = None,
        score_max: int | None = None,
        rng: random.Random | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._delay = settings.evaluation_delay if delay is None else delay
        self._score_min = settings.evaluation_score_min if score_min is None else score_min
        self._score_max = settings.evaluation_score_max if score_max is None else score_max
        if not 0 <= self._score_min <= self._score_max <= 100:
            raise ValueError(
                f"Invalid score range: {self._score_min}..{self._score_max}"
            )
        self._rng = rng or random.Random()

    @property
    def delay(self) -> float:
        return self._delay

    async def evaluate(self, audio_file: Path, reference_text: str) -> PronunciationResult:
        if audio_file is None:
            raise ScoringError("No recording to evaluate")

        logger.info("Evaluating %s (placeholder, %.1fs delay)", audio_file, self._delay)
        await asyncio.sleep(self._delay)

        return PronunciationResult(
            score=self._rng.randint(self._score_min, self._score_max),
            mistakes=[CANNED_MISTAKE.model_copy()],
            feedback_text=CANNED_FEEDBACK,
        )
