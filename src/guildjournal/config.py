"""
guildjournal/config.py

Configuration constants and runtime settings for guildjournal.

Settings can be provided via:
1. Environment variables (GUILD_*)
2. Command-line flags (see guildjournal.cli)
3. Programmatic configuration (GuildConfig(...))

Usage:
    from guildjournal.config import GuildConfig

    config = GuildConfig.from_env()
    print(config.physical_badge_fee)
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import click

logger = logging.getLogger("guildjournal.config")


# ============================================================================
# ENGINE CONSTANTS
# ============================================================================

# Physical artifacts: first copy per badge is free, every later copy costs this
PHYSICAL_BADGE_FEE = 15.00

# Defaults substituted for malformed drafts / failed collaborator calls
DEFAULT_DIFFICULTY = 3
DEFAULT_COMPLEXITY = 3
MAX_SECONDARY_DOMAINS = 2

# Seed value for the access fund shown to the council
INITIAL_ACCESS_FUND_BALANCE = 1240.50


# ============================================================================
# CONTENT SERVICE CONSTANTS
# ============================================================================

DEFAULT_MODEL = "gemini-3-flash-preview"
CONTENT_API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

# Request timeout in seconds
REQUEST_TIMEOUT = 30


# ============================================================================
# STORAGE CONSTANTS
# ============================================================================

DEFAULT_STORAGE_DIR = Path.home() / ".guildjournal"
SNAPSHOT_FILENAME = "guild_state.json"
SNAPSHOT_KEY = "guild_state"


# ============================================================================
# ENVIRONMENT VARIABLES
# ============================================================================

ENV_API_KEY = "GUILD_API_KEY"
ENV_API_KEY_FALLBACK = "GEMINI_API_KEY"
ENV_MODEL = "GUILD_MODEL"
ENV_API_BASE_URL = "GUILD_API_BASE_URL"
ENV_REQUEST_TIMEOUT = "GUILD_REQUEST_TIMEOUT"
ENV_STORAGE_DIR = "GUILD_STORAGE_DIR"
ENV_PHYSICAL_BADGE_FEE = "GUILD_PHYSICAL_BADGE_FEE"
ENV_LOG_LEVEL = "GUILD_LOG_LEVEL"


@dataclass
class GuildConfig:
    """Runtime settings for the store, persistence and content service."""
    api_key: str = ""
    model: str = DEFAULT_MODEL
    api_base_url: str = CONTENT_API_BASE_URL
    request_timeout: float = REQUEST_TIMEOUT
    storage_dir: Path = field(default_factory=lambda: DEFAULT_STORAGE_DIR)
    physical_badge_fee: float = PHYSICAL_BADGE_FEE
    log_level: str = "INFO"

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "GuildConfig":
        """
        Build a config from environment variables.

        Invalid numeric values are logged and replaced by the defaults.

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            GuildConfig instance
        """
        env = os.environ if environ is None else environ
        config = cls()

        config.api_key = env.get(ENV_API_KEY) or env.get(ENV_API_KEY_FALLBACK) or ""
        config.model = env.get(ENV_MODEL) or DEFAULT_MODEL
        config.api_base_url = env.get(ENV_API_BASE_URL) or CONTENT_API_BASE_URL

        storage_dir = env.get(ENV_STORAGE_DIR)
        if storage_dir:
            config.storage_dir = Path(storage_dir).expanduser()

        config.request_timeout = _read_float(env, ENV_REQUEST_TIMEOUT, REQUEST_TIMEOUT)
        config.physical_badge_fee = _read_float(env, ENV_PHYSICAL_BADGE_FEE, PHYSICAL_BADGE_FEE)

        log_level = env.get(ENV_LOG_LEVEL)
        if log_level:
            config.log_level = log_level.upper()

        return config

    @property
    def snapshot_path(self) -> Path:
        return self.storage_dir / SNAPSHOT_FILENAME

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary (API key masked)."""
        return {
            "api_key": "***" if self.api_key else "",
            "model": self.model,
            "api_base_url": self.api_base_url,
            "request_timeout": self.request_timeout,
            "storage_dir": str(self.storage_dir),
            "physical_badge_fee": self.physical_badge_fee,
            "log_level": self.log_level,
        }


def _read_float(env, name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Invalid {name}={raw!r}, using default {default}")
        return default
    if value < 0:
        logger.warning(f"Negative {name}={raw!r}, using default {default}")
        return default
    return value


# Click option decorator for CLI support
def storage_dir_option():
    """
    Click option decorator for --storage-dir.

    Usage:
        import click
        from guildjournal.config import storage_dir_option

        @click.command()
        @storage_dir_option()
        def my_command(storage_dir):
            ...
    """
    def decorator(f):
        return click.option(
            "--storage-dir",
            type=click.Path(file_okay=False, path_type=Path),
            default=None,
            envvar=ENV_STORAGE_DIR,
            help="Directory holding the journal snapshot (default: ~/.guildjournal)",
        )(f)
    return decorator
