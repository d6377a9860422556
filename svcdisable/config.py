"""
Configuration management for svcdisable.

This module uses Pydantic's BaseSettings to manage configuration
through environment variables (prefixed ``SVCDISABLE_``) and an optional
``.env`` file.
"""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    These settings are loaded from environment variables.
    """

    # Scheduling
    MAX_PARALLEL: int = Field(default=10, ge=1)
    STOP_TIMEOUT: float = Field(default=10.0, gt=0)  # seconds
    POLL_INTERVAL: float = Field(default=0.25, gt=0)  # seconds
    COMMAND_TIMEOUT: float = Field(default=30.0, gt=0)  # seconds, per sc/systemctl call

    # Services appended to every run unless --no-defaults is given
    DEFAULT_SERVICES: list[str] = ["SysMain", "wuauserv"]

    # CLI behaviour
    EXIT_DELAY: float = Field(default=0.0, ge=0)  # seconds
    REQUIRE_ADMIN: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        env_prefix="SVCDISABLE_",
    )


def get_settings() -> Settings:
    """Load a fresh settings instance from the current environment."""
    return Settings()
