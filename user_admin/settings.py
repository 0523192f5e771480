from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STATIC_DIR = Path(__file__).resolve().parent / "static"


class Settings(BaseSettings):
    # Local dev: load from .env automatically.
    # In production: you typically inject real env vars instead.
    model_config = SettingsConfigDict(env_prefix="", extra="ignore", env_file=".env", env_file_encoding="utf-8")

    # Env vars:
    # - DATABASE_URL (required): sqlite:///path/to/users.db or a bare path
    # - PORT / HOST (optional): where `user-admin` listens
    # - STATIC_DIR (optional): directory holding index.html
    # - CORS_ALLOW_ORIGINS (optional): JSON list, defaults to every origin
    # - LOG_LEVEL (optional)
    database_url: str = Field(default="", validation_alias="DATABASE_URL")

    port: int = Field(default=8080, validation_alias="PORT")
    host: str = Field(default="0.0.0.0", validation_alias="HOST")

    static_dir: Path = Field(default=DEFAULT_STATIC_DIR, validation_alias="STATIC_DIR")
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"], validation_alias="CORS_ALLOW_ORIGINS")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


def get_settings() -> Settings:
    """Load settings from environment.

    Keep this as the single canonical constructor for Settings(). FastAPI
    dependencies and tests can override/monkeypatch this function.
    """
    return Settings()
