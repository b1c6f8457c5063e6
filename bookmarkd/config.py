"""Configuration management for bookmarkd."""

import copy
import json
import os
from pathlib import Path
from typing import Any

# Application name for XDG paths
APP_NAME = "bookmarkd"

# Default configuration
DEFAULT_CONFIG: dict[str, Any] = {
    "sync": {
        "cooldown_minutes": 60,
        "item_delay_seconds": 0.15,  # pause between consecutive new items
        "ping_interval_seconds": 10,
        "max_pages": 10,
        "full_page_size": 100,
        "incremental_page_size": 50,
    },
    "enrichment": {
        "base_url": "https://api.fxtwitter.com",
        "user_agent": "bookmarkd/1.0",
        "timeout_seconds": 5.0,
        "retry_attempts": 2,
        "retry_delay_seconds": 0.2,
    },
    "source": {
        "api_base": "https://api.twitter.com/2",
        "timeout_seconds": 30.0,
        "access_token_env": "BOOKMARKD_ACCESS_TOKEN",
        "default_owner_env": "BOOKMARKD_OWNER_ID",
    },
    "feed": {
        "default_limit": 50,
        "max_limit": 100,
    },
    "paths": {
        # If not set, XDG defaults are used
        "data_dir": None,
    },
}


def get_xdg_config_home() -> Path:
    """Get XDG config home directory."""
    return Path(os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config")))


def get_xdg_data_home() -> Path:
    """Get XDG data home directory."""
    return Path(os.environ.get("XDG_DATA_HOME", os.path.expanduser("~/.local/share")))


def get_config_path() -> Path:
    """Get the path to the config file."""
    return get_xdg_config_home() / APP_NAME / "config.json"


def load_config() -> dict[str, Any]:
    """Load configuration, merging with defaults and env overrides."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    config_path = get_config_path()

    if config_path.exists():
        with open(config_path) as f:
            user_config = json.load(f)
            config = deep_merge(config, user_config)

    cooldown_env = os.environ.get("BOOKMARKD_SYNC_COOLDOWN_MINUTES")
    if cooldown_env:
        try:
            config["sync"]["cooldown_minutes"] = float(cooldown_env)
        except ValueError:
            pass

    return config


def load_settings(config: dict[str, Any] | None = None):
    """Validate *config*, or the loaded configuration, into the typed settings model."""
    from .models.config import BookmarkdConfig

    return BookmarkdConfig.model_validate(config if config is not None else load_config())


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to file."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        json.dump(config, f, indent=2)


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def get_data_dir() -> Path:
    """
    Get the data directory for bookmarkd.

    Priority:
    1. BOOKMARKD_DATA_DIR environment variable
    2. paths.data_dir in config.json
    3. XDG default: ~/.local/share/bookmarkd/
    """
    env_dir = os.environ.get("BOOKMARKD_DATA_DIR")
    if env_dir:
        return Path(env_dir)

    config_dir = load_settings().paths.data_dir
    if config_dir:
        return Path(config_dir)

    return get_xdg_data_home() / APP_NAME


def get_database_path() -> Path:
    """Get the database path."""
    return get_data_dir() / "bookmarkd.db"


def get_tokens_path() -> Path:
    """Get the per-owner access token file path."""
    return get_data_dir() / "tokens.json"


def get_sync_cooldown_ms(config: dict[str, Any] | None = None) -> int:
    """Return the sync cooldown window in milliseconds."""
    return int(load_settings(config).sync.cooldown_minutes * 60 * 1000)
