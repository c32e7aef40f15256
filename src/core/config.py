from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CWA_",
        case_sensitive=False,
    )

    # ── Storage ─────────────────────────────────────────────────
    # "database" uses SQLAlchemy; "demo" serves seeded in-memory data
    storage_backend: Literal["database", "demo"] = "database"
    database_url: str = "sqlite+aiosqlite:///./alarms.db"
    demo_organization_id: str = "demo-org"

    # ── API ─────────────────────────────────────────────────────
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # ── Webhook ─────────────────────────────────────────────────
    webhook_base_url: str = "http://localhost:8000"
    subscription_confirm_timeout_seconds: float = 10.0

    # ── Logging ─────────────────────────────────────────────────
    log_json: bool = False
    log_level: str = "INFO"


# Singleton
_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
