"""Runtime configuration loaded from the environment or a ``.env`` file.

Static values (table names, limits, verdict bands) live in
``quizcraft.constants``; anything that differs between deployments lives here.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from quizcraft.constants.network_constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
)
from quizcraft.constants.quiz_constants import IMAGE_BUCKET, LOCAL_CACHE_FILENAME


class Settings(BaseSettings):
    """Settings read from ``QUIZCRAFT_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="QUIZCRAFT_",
        env_file=".env",
        extra="ignore",
    )

    store_url: str | None = Field(
        default=None,
        description="Base URL of the hosted backend; unset runs with an in-memory store",
    )
    store_key: str | None = Field(default=None, description="API key sent to the hosted backend")
    admin_code: str | None = Field(
        default=None,
        description="Shared passphrase that unlocks quiz authoring for 24 hours",
    )
    image_bucket: str = IMAGE_BUCKET
    local_cache_path: Path | None = Field(default=Path(LOCAL_CACHE_FILENAME))
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS


@lru_cache()
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance."""
    return Settings()
