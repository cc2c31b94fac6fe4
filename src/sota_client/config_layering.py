"""Configuration override layering.

Precedence (later overrides earlier): config.toml < environment
variables (``SOTA_CLIENT_*``) < CLI overrides.
"""

from __future__ import annotations

import os
from typing import Any

ENV_PREFIX = "SOTA_CLIENT_"

# Variables under the prefix that select files or logging rather than
# carrying config values.
_RESERVED_ENV_VARS = frozenset({"SOTA_CLIENT_CONFIG_PATH", "SOTA_CLIENT_LOG_LEVEL"})


def apply_overrides(
    data: dict[str, Any], cli_overrides: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Merge environment and CLI overrides over ``data``."""
    result = data
    env_overrides = extract_env_overrides()
    if env_overrides:
        result = deep_merge(result, env_overrides)
    if cli_overrides:
        result = deep_merge(result, cli_overrides)
    return result


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base, preferring override values.

    For nested dicts, merge recursively. For all other types, override replaces base.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def extract_env_overrides(prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Extract SOTA_CLIENT_* environment variables into a nested config dict.

    Only SOTA_CLIENT_SECTION__KEY names are read; others are ignored.

    Example:
        SOTA_CLIENT_ACCOUNT__USERNAME=w0keh → {"account": {"username": "w0keh"}}
    """
    overrides: dict[str, Any] = {}

    for env_key, env_value in os.environ.items():
        if not env_key.startswith(prefix) or env_key in _RESERVED_ENV_VARS:
            continue
        parts = env_key[len(prefix) :].lower().split("__")
        if len(parts) == 2 and all(parts):
            section, key = parts
            overrides.setdefault(section, {})[key] = parse_env_value(env_value)

    return overrides


def parse_env_value(raw: str) -> Any:
    """Parse environment variable string into appropriate Python type.

    - "true"/"false" → bool
    - Numeric strings → int or float
    - Everything else → str
    """
    lower = raw.lower()
    if lower == "true":
        return True
    if lower == "false":
        return False
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        pass
    return raw
