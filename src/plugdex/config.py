"""
Plugdex Configuration.

Centralized configuration management using Pydantic Settings.
Loads configuration from environment variables prefixed with ``PLUGDEX_``.
"""

import os
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_xdg_state_dir() -> str:
    """
    Get XDG-compliant state directory for Plugdex logs.

    Follows XDG Base Directory Specification:
    - Uses $XDG_STATE_HOME/plugdex if XDG_STATE_HOME is set
    - Falls back to $HOME/.local/state/plugdex if not set
    - Returns relative path ./logs if HOME not available (dev/testing)

    Returns:
        str: Path to state/logs directory
    """
    xdg_state_home = os.getenv("XDG_STATE_HOME")
    if xdg_state_home:
        return str(Path(xdg_state_home) / "plugdex" / "logs")

    home = os.getenv("HOME")
    if home:
        return str(Path(home) / ".local" / "state" / "plugdex" / "logs")

    # Fallback for development/testing environments without HOME
    return "./logs"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PLUGDEX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Discovery
    plugin_paths: list[str] = []  # Overrides the default roots, highest priority first
    concurrency: int = 0  # Max parallel descriptor loads (0 = logical core count)

    # Logging
    log_level: str = "INFO"
    log_dir: str = ""  # XDG-compliant log directory (defaults to XDG state dir if empty)
    log_format: Literal["standard", "json"] = "standard"
    log_console_enabled: bool = True  # Enable console (stderr) logging
    log_file_enabled: bool = False  # Enable file-based logging
    log_max_bytes: int = 10_485_760  # 10MB per log file
    log_backup_count: int = 5  # Keep 5 backup files

    @property
    def log_directory(self) -> Path:
        """Get the log directory path, using XDG default if not specified."""
        if self.log_dir:
            return Path(self.log_dir).expanduser()
        return Path(get_xdg_state_dir())

    @property
    def effective_concurrency(self) -> int:
        """Concurrency cap to use, resolving 0 to the logical core count."""
        if self.concurrency > 0:
            return self.concurrency
        return os.cpu_count() or 1


# Global settings instance
settings = Settings()
