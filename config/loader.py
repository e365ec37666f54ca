"""
Configuration loader.

Loads configuration from:
1. Default values (built-in)
2. TOML config file (alphainsight.toml or ~/.config/alphainsight/config.toml)
3. Environment variables

Priority: env vars > config file > defaults
"""

import logging
import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .schema import AlphaInsightConfig

logger = logging.getLogger(__name__)

# Config file search paths (in priority order)
CONFIG_PATHS = [
    Path("alphainsight.toml"),                                 # Current directory
    Path(".alphainsight.toml"),                                # Hidden in current directory
    Path.home() / ".config" / "alphainsight" / "config.toml",  # User config
    Path("/etc/alphainsight/config.toml"),                     # System config
]

# Environment variable prefix
ENV_PREFIX = "ALPHAINSIGHT_"

# env var suffix -> (section, field)
ENV_OVERRIDES = {
    "TIMEZONE": ("exchange", "timezone"),
    "ALWAYS_OPEN": ("exchange", "always_open"),
    "SOURCE_MODEL": ("defaults", "source_model"),
    "LOG_LEVEL": ("logging", "level"),
}


class ConfigError(Exception):
    """Configuration error with helpful message."""

    def __init__(self, message: str, source: str | None = None, field: str | None = None):
        self.source = source
        self.field = field
        super().__init__(message)

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.source:
            parts.append(f"Source: {self.source}")
        if self.field:
            parts.append(f"Field: {self.field}")
        return " | ".join(parts)


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load TOML file if it exists."""
    if not path.exists():
        return {}

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        logger.info(f"Loaded config from: {path}")
        return data
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to parse TOML: {e}", source=str(path))


def _find_config_file() -> Path | None:
    """Find the first existing config file."""
    for path in CONFIG_PATHS:
        if path.exists():
            return path
    return None


def _apply_env_overrides(config_data: dict[str, Any]) -> dict[str, Any]:
    """Overlay ALPHAINSIGHT_* environment variables onto the file config."""
    applied = 0
    for suffix, (section, field) in ENV_OVERRIDES.items():
        value = os.environ.get(f"{ENV_PREFIX}{suffix}")
        if value is None:
            continue
        config_data.setdefault(section, {})[field] = value
        applied += 1

    if applied:
        logger.debug(f"Applied {applied} override(s) from environment")
    return config_data


def load_config(config_path: Path | str | None = None) -> AlphaInsightConfig:
    """
    Load and validate configuration.

    Args:
        config_path: Explicit path to config file (optional)

    Returns:
        Validated AlphaInsightConfig

    Raises:
        ConfigError: If configuration is invalid
    """
    config_data: dict[str, Any] = {}

    # Load from config file
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}", source=str(path))
        config_data = _load_toml_file(path)
    else:
        found_path = _find_config_file()
        if found_path:
            config_data = _load_toml_file(found_path)

    config_data = _apply_env_overrides(config_data)

    # Validate and create config
    try:
        config = AlphaInsightConfig(**config_data)
    except ValidationError as e:
        errors = e.errors()
        if errors:
            first_error = errors[0]
            field = ".".join(str(loc) for loc in first_error.get("loc", []))
            msg = first_error.get("msg", "Validation error")
            raise ConfigError(f"Invalid configuration: {msg}", field=field)
        raise ConfigError(f"Invalid configuration: {e}")

    return config


@lru_cache
def get_config() -> AlphaInsightConfig:
    """
    Get singleton configuration instance.

    Uses LRU cache to ensure config is loaded only once.
    """
    return load_config()


def reload_config(config_path: Path | str | None = None) -> AlphaInsightConfig:
    """
    Force reload configuration.

    Clears the cache and reloads from file/environment.
    """
    get_config.cache_clear()
    if config_path:
        return load_config(config_path)
    return get_config()
