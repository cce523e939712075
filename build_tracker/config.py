"""Settings for the build tracker.

Values come from ``BT_``-prefixed environment variables (or a ``.env``
file) and fall back to the defaults below. CLI options override them.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_db_url() -> str:
    """SQLite database under the user data directory."""
    db_path = Path.home() / ".local" / "share" / "build-tracker" / "db.sqlite"
    return f"sqlite:///{db_path}"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the BT_ prefix.
    List and mapping values (artifact filters, toggle groups) are read as JSON.
    """

    model_config = SettingsConfigDict(
        env_prefix="BT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    db_url: str = Field(
        default_factory=_default_db_url,
        description="Database connection URL",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # Dashboard
    artifact_filters: list[str] = Field(
        default_factory=list,
        description="Regular expressions for artifact names hidden by default",
    )
    toggle_groups: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Named groups of artifacts that can be toggled together",
    )

    # Queries
    recent_limit: int = Field(
        default=20,
        ge=1,
        le=1000,
        description="Number of builds returned by recent queries without a limit",
    )

    # Client
    api_url: str = Field(
        default="http://127.0.0.1:8000",
        description="Base URL of the Build Tracker API",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for API requests (seconds)",
    )


def get_settings() -> Settings:
    """Load settings from the environment.

    A fresh instance is built on every call so that tests and the CLI see
    environment changes.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Serialize settings for ``bt config --json``.

    Args:
        settings: Settings to serialize; loaded from the environment if None.

    Returns:
        Indented JSON object keyed by setting name.
    """
    return (settings or get_settings()).model_dump_json(indent=2)


__all__ = ["Settings", "get_settings", "print_settings_json"]
