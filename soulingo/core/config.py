"""
Application configuration via pydantic-settings.

Loads values from .env file with sensible defaults for local development.
Use ``get_settings()`` to obtain the cached singleton instance.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SouLingo settings loaded from environment / .env file.

    All settings can be overridden via environment variables or a `.env` file.
    Field names map directly to env var names (case-insensitive).

    Attributes:
        api_base_url: Root URL of the SouLingo backend.
        cache_dir: Transient area where captured audio artifacts are written.
        timer_interval: Seconds between recording timer ticks.
        evaluation_delay: Fixed delay of the placeholder pronunciation scorer.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore unrecognized env vars
    )

    # --- Backend API ---
    api_base_url: str = "http://localhost:8000"
    api_timeout: float = 30.0  # Seconds per request, no retries

    # --- Audio capture ---
    # Artifacts are named voice_<epoch_ms>.wav and overwritten by nothing
    cache_dir: str = "data/cache"
    sample_rate: int = 44100
    channels: int = 1
    audio_subtype: str = "PCM_16"  # soundfile subtype for the WAV artifact

    # --- Recording session ---
    timer_interval: float = 1.0
    min_recording_seconds: int = 3  # can_proceed() threshold

    # --- Authentication ---
    min_password_length: int = 6

    # --- Pronunciation scoring ---
    # "placeholder" fabricates a result after a fixed delay
    scorer_provider: str = "placeholder"
    evaluation_delay: float = 3.0
    evaluation_score_min: int = 70
    evaluation_score_max: int = 95

    # --- Application ---
    log_level: str = "INFO"  # Python logging level


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Uses ``functools.lru_cache`` so the .env file is read only once.
    Subsequent calls return the same ``Settings`` instance.

    Returns:
        Settings: The application-wide configuration object.
    """
    return Settings()
