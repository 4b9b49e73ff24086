"""Application configuration via environment variables (pydantic-settings)."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Data cache
    CACHE_DEFAULT_TTL: int = 300_000  # ms, 5 minutes
    CACHE_MAX_ENTRIES: int = 1000
    CACHE_DEBUG: bool = False
    CACHE_SWEEP_INTERVAL: float = 0.0  # seconds, 0 disables the background sweep

    # Route decisions
    ROUTE_CACHE_MAX_ENTRIES: int = 10_000

    # Auth
    AUTH_COOKIE_NAME: str = "nextar_user"

    # Defaults
    LOG_LEVEL: str = "INFO"
    PROJECT_NAME: str = "Help Desk Dashboard"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings():
    return Settings()


settings = get_settings()
