"""Application configuration loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(default="sqlite:///./movies.db", alias="DATABASE_URL")
    sql_echo: bool = Field(default=False, alias="SQL_ECHO")
    host: str = Field(default="127.0.0.1", alias="CATALOG_HOST")
    port: int = Field(default=8080, alias="CATALOG_PORT")
    api_base_url: str = Field(default="http://localhost:8080", alias="CATALOG_API_URL")
    request_timeout: float = Field(default=3.0, alias="CATALOG_TIMEOUT")
    initial_fetch_limit: int = Field(default=100000, alias="CATALOG_FETCH_LIMIT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    tui_log_file: str = Field(default="catalog-tui.log", alias="CATALOG_TUI_LOG")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
