"""
Scoring module - Pronunciation scorer abstraction layer.

Factory function for creating scorer instances based on provider configuration.
"""

from .base import BasePronunciationScorer

__all__ = ["BasePronunciationScorer", "create_scorer"]


def create_scorer(provider: str, **kwargs) -> BasePronunciationScorer:
    """
    Factory function to create a scorer instance based on provider.

    Args:
        provider: Scorer provider name ("placeholder")
        **kwargs: Provider-specific configuration

    Returns:
        BasePronunciationScorer implementation instance

    Raises:
        ValueError: If provider is unknown
    """
    if provider == "placeholder":
        from .placeholder import PlaceholderScorer
        return PlaceholderScorer(**kwargs)
    else:
        raise ValueError(f"Unknown scorer provider: {provider}")
