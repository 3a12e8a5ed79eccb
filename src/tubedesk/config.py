"""Application settings loaded from environment variables and ``.env``."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["development", "test", "production"]
ServerAddon = Literal["none", "rate_limit", "panel"]

DEFAULT_PORT = 3001


class Settings(BaseSettings):
    """Server settings.

    ``DATABASE_URL`` and ``DATABASE_SERVICE_KEY`` have no defaults, so a
    missing value fails validation before anything is bound or connected.
    """

    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, alias="PORT")
    environment: Environment = Field(default="development", alias="APP_ENV")
    host: str | None = Field(default=None, alias="HOST")

    database_url: str = Field(alias="DATABASE_URL", min_length=1)
    database_service_key: SecretStr = Field(alias="DATABASE_SERVICE_KEY")
    create_tables: bool = Field(default=False, alias="DB_CREATE_TABLES")

    addon: ServerAddon = Field(default="none", alias="SERVER_ADDON")
    rate_limit_max: int = Field(default=5, ge=1, alias="RATE_LIMIT_MAX")
    rate_limit_window_seconds: int = Field(default=60, ge=1, alias="RATE_LIMIT_WINDOW_SECONDS")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def bind_host(self) -> str:
        """Loopback outside production, all interfaces in production."""
        if self.host:
            return self.host
        return "0.0.0.0" if self.is_production else "127.0.0.1"

    @property
    def rate_limit_enabled(self) -> bool:
        return self.addon == "rate_limit"

    @property
    def panel_enabled(self) -> bool:
        # The introspection page is never served in production.
        return self.addon == "panel" and not self.is_production


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached instance of the application settings."""

    return Settings()


__all__ = ["Settings", "get_settings", "DEFAULT_PORT"]
