"""Environment settings for wireflow.

Read from WIREFLOW_* variables and the nearest .env file (looked up from the
working directory towards home). Process environment wins over .env.
"""

import os
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class WireflowSettings(BaseSettings):
    """Environment-level settings (API key, config locations, logging)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    anthropic_api_key: str | None = None

    wireflow_config_home: Path | None = None
    wireflow_prompt_prefix: Path | None = None
    wireflow_log_level: str = "WARNING"
    wireflow_dry_run: bool = False

    @property
    def config_home(self) -> Path:
        """Directory holding the global config.yaml."""
        if self.wireflow_config_home:
            return self.wireflow_config_home
        xdg = os.environ.get("XDG_CONFIG_HOME")
        base = Path(xdg) if xdg else Path.home() / ".config"
        return base / "wireflow"

    @property
    def global_config_file(self) -> Path:
        return self.config_home / "config.yaml"

    @property
    def prompt_prefix(self) -> Path:
        """Directory searched first for system prompt files."""
        if self.wireflow_prompt_prefix:
            return self.wireflow_prompt_prefix
        return self.config_home / "prompts" / "system"


def find_dotenv(start: Path | None = None) -> Path | None:
    """Nearest .env at or above start (default cwd), stopping at home."""
    directory = start or Path.cwd()
    home = Path.home()

    while directory >= home:
        env_file = directory / ".env"
        if env_file.exists():
            return env_file
        if directory.parent == directory:
            break
        directory = directory.parent

    return None


@lru_cache(maxsize=1)
def get_settings() -> WireflowSettings:
    """Process-wide settings, loaded once."""
    env_file = find_dotenv()
    if env_file:
        return WireflowSettings(_env_file=env_file)
    return WireflowSettings()


def clear_settings_cache() -> None:
    """Force the next get_settings() call to reload (tests change env vars)."""
    get_settings.cache_clear()
