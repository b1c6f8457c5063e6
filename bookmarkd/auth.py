"""Environment-file parsing and per-owner credential helpers."""

import json
import os
import re
from pathlib import Path

from .config import get_tokens_path, load_config

_ENV_SUFFIX_RE = re.compile(r"[^A-Za-z0-9]+")


def load_env_file(path: Path | None = None) -> dict[str, str]:
    """Parse a .env file, returning a dict of key-value pairs.

    Skips blank lines and comments.  Handles ``export KEY=value`` and
    quoted values.  If *path* is ``None`` the default ``~/.env`` is used.
    """
    if path is None:
        path = Path.home() / ".env"

    env: dict[str, str] = {}
    if not path.exists():
        return env

    with open(path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            if line.startswith("export "):
                line = line[7:]
            key, value = line.split("=", 1)
            value = value.strip("\"'")
            env[key] = value

    return env


def _lookup(key_name: str) -> str | None:
    return os.environ.get(key_name) or load_env_file().get(key_name)


def _load_token_file(path: Path | None = None) -> dict[str, str]:
    if path is None:
        path = get_tokens_path()
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError):
        return {}
    if not isinstance(data, dict):
        return {}
    return {str(k): str(v) for k, v in data.items() if v}


def get_access_token(owner_id: str, tokens_path: Path | None = None) -> str:
    """Return the post-source access token for *owner_id*.

    Lookup order: ``<ENV>_<OWNER>``, ``<ENV>`` (environment or ``~/.env``),
    then the ``tokens.json`` file in the data directory.

    Raises ``ValueError`` when no token can be found.
    """
    env_name = load_config()["source"]["access_token_env"]
    suffix = _ENV_SUFFIX_RE.sub("_", owner_id).upper()

    value = _lookup(f"{env_name}_{suffix}") or _lookup(env_name)
    if not value:
        value = _load_token_file(tokens_path).get(owner_id)
    if not value:
        raise ValueError(f"No access token configured for owner {owner_id}")
    return value


def get_default_owner() -> str | None:
    """Return the owner id configured for CLI use, if any."""
    env_name = load_config()["source"]["default_owner_env"]
    return _lookup(env_name)
