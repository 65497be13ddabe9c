"""
Configuration management using Pydantic Settings.

Every value can be overridden from the environment (``CODEXBAR_`` prefix)
or from a ``.env`` file in the working directory.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _home(*parts: str) -> Path:
    return Path.home().joinpath(*parts)


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="CODEXBAR_LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["json", "console"] = "console"


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="CODEXBAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # HTTP
    http_timeout: float = 30.0
    user_agent: str = "codexbar-linux/0.1.0"

    # Token refresh
    refresh_margin_seconds: int = 60

    # Credential locations
    claude_credentials_path: Path = Field(
        default_factory=lambda: _home(".claude", ".credentials.json")
    )
    codex_auth_path: Path = Field(default_factory=lambda: _home(".codex", "auth.json"))
    codex_sessions_dir: Path = Field(default_factory=lambda: _home(".codex", "sessions"))
    codex_session_days: int = 7
    cursor_state_db: Path = Field(
        default_factory=lambda: _home(".config", "Cursor", "User", "globalStorage", "state.vscdb")
    )
    kimi_credentials_path: Path = Field(
        default_factory=lambda: _home(".kimi", "credentials", "kimi-code.json")
    )
    copilot_token_command: list[str] = Field(default_factory=lambda: ["gh", "auth", "token"])

    # Active window detection
    focused_window_command: list[str] = Field(
        default_factory=lambda: ["niri", "msg", "--json", "focused-window"]
    )
    proc_root: Path = Path("/proc")
    process_walk_depth: int = 4

    # Nested settings
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance (cached after first call)
    """
    return Settings()


def reload_settings() -> Settings:
    """
    Reload settings (clears cache).

    Returns:
        Fresh Settings instance
    """
    get_settings.cache_clear()
    return get_settings()
