"""Application settings loaded from environment variables via pydantic-settings.

Sources, in priority order:

  1. Environment variables, e.g. ``TMDB_API_KEY=abc123`` (always win)
  2. ``.env`` file in the working directory (local development)
  3. The defaults below

Field ``tmdb_api_key`` maps to env var ``TMDB_API_KEY``; pydantic-settings
matches names case-insensitively.
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """castgraph application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Lookup service ===
    # Empty string = not configured; the factories refuse to build a
    # provider without a key.
    tmdb_api_key: str = ""
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    tmdb_media_type: Literal["tv", "movie"] = "tv"

    # === Cast fetch pass ===
    cast_batch_size: int = 5
    cast_batch_delay_ms: int = 100
    cast_limit: int = 25  # billing-order entries kept per item

    # === Credits (recommendation) pass ===
    credits_batch_size: int = 3
    credits_batch_delay_ms: int = 150

    # === Display ===
    hide_voice_performers: bool = False

    # === Cache ===
    cache_max_entries: int = 8
    cache_ttl_seconds: int = 6 * 3600

    # === Session status (progress tracker) ===
    status_ttl_seconds: int = 3600
    status_max_sessions: int = 1024

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    @property
    def cast_batch_delay(self) -> float:
        return self.cast_batch_delay_ms / 1000.0

    @property
    def credits_batch_delay(self) -> float:
        return self.credits_batch_delay_ms / 1000.0
