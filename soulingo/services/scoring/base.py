"""
Abstract base class for pronunciation scorers.

A scorer compares one practice recording with the reference text the
learner read aloud and reports a score plus per-word mistakes.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from soulingo.core.models import PronunciationResult


class BasePronunciationScorer(ABC):
    """Interface that every pronunciation scorer must implement."""

    @abstractmethod
    async def evaluate(self, audio_file: Path, reference_text: str) -> PronunciationResult:
        """Score a recording against its reference text.

        Args:
            audio_file: Path to the finished practice recording.
            reference_text: The lesson text the learner was asked to read.

        Returns:
            The pronunciation result.

        Raises:
            ScoringError: If the recording cannot be scored.
        """
