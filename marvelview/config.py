"""Application configuration."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """Runtime settings loaded from ``MARVEL_*`` environment variables.

    The two credentials are issued by the Marvel developer portal. They
    are resolved once at process start and treated as read-only.
    """

    app_name: str = "Marvel Characters"
    public_key: str = ""
    private_key: str = ""
    base_url: str = "https://gateway.marvel.com/v1/public"
    timeout_seconds: float = 10.0
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="MARVEL_",
        env_file=str(_PROJECT_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()
