"""Application settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service settings, read from ``TABULA_*`` environment variables or ``.env``."""

    app_name: str = "Tabula API"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    # API Settings
    api_prefix: str = "/api/v1"
    host: str = "127.0.0.1"
    port: int = 8000

    # Storage Settings
    storage_dir: Path = Path("data")
    database_url: str | None = None  # defaults to sqlite under storage_dir
    database_echo: bool = False

    # Extraction Settings
    extractor: str = "pymupdf"
    max_workers: int = Field(default=1, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="TABULA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"sqlite:///{(self.storage_dir / 'tabula.db').resolve()}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
