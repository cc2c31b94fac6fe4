"""Configuration loading and persistence helpers."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomli_w  # type: ignore[import]

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for <3.11
    import tomli as tomllib  # type: ignore[no-redef]

try:  # Optional dependency for secure credential storage
    import keyring as _keyring  # type: ignore[import]
    from keyring.errors import KeyringError  # type: ignore[import]
except ImportError:  # pragma: no cover - keyring not installed
    _keyring = None
    KeyringError = Exception

from .client import DEFAULT_API_URL, DEFAULT_AUTH_URL
from .config_layering import apply_overrides
from .errors import InvalidConfiguration

CONFIG_VERSION = 1
CONFIG_ENV_VAR = "SOTA_CLIENT_CONFIG_PATH"
CONFIG_DIR_NAME = "sota-client"
CONFIG_FILENAME = "config.toml"
KEYRING_SERVICE = "sota-client"
KEYRING_SENTINEL = "__KEYRING__"
DEFAULT_TIMEOUT_S = 10.0


def _xdg_path(env_var: str, default: Path) -> Path:
    value = os.environ.get(env_var)
    if value:
        return Path(value).expanduser()
    return default


def get_config_dir() -> Path:
    """Return the directory containing configuration files."""
    default = Path.home() / ".config"
    return _xdg_path("XDG_CONFIG_HOME", default) / CONFIG_DIR_NAME


def get_data_dir() -> Path:
    """Return the directory for runtime data/log files."""
    default = Path.home() / ".local" / "share"
    return _xdg_path("XDG_DATA_HOME", default) / CONFIG_DIR_NAME


def resolve_config_path(path: str | Path | None = None) -> Path:
    """Resolve the configuration file path, honouring overrides."""
    if path is not None:
        return Path(path).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return get_config_dir() / CONFIG_FILENAME


@dataclass(slots=True)
class ClientConfig:
    """SOTA API client identifier, account credentials and endpoints."""

    client_id: str
    username: str
    password: str
    password_in_keyring: bool = False
    auth_url: str = DEFAULT_AUTH_URL
    api_url: str = DEFAULT_API_URL
    timeout_s: float = DEFAULT_TIMEOUT_S

    def to_dict(self) -> dict[str, Any]:
        """Convert the configuration to a TOML-serialisable dictionary."""
        return {
            "version": CONFIG_VERSION,
            "client": {"client_id": self.client_id},
            "account": {
                "username": self.username,
                "password": KEYRING_SENTINEL
                if self.password_in_keyring
                else self.password,
            },
            "endpoints": {
                "auth_url": self.auth_url,
                "api_url": self.api_url,
                "timeout_s": self.timeout_s,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClientConfig:
        """Construct from a dictionary (typically parsed from TOML)."""
        version = data.get("version", CONFIG_VERSION)
        if version != CONFIG_VERSION:
            raise InvalidConfiguration(f"Unsupported config version: {version}")

        client = data.get("client", {})
        account = data.get("account", {})
        endpoints = data.get("endpoints", {})

        client_id = client.get("client_id")
        username = account.get("username")
        password = account.get("password")
        if not client_id:
            raise InvalidConfiguration("Configuration missing required client_id")
        if not username or not password:
            raise InvalidConfiguration("Configuration missing required username/password")

        password_in_keyring = False
        if isinstance(password, str) and password == KEYRING_SENTINEL:
            password = _retrieve_password_from_keyring(str(username))
            password_in_keyring = True

        try:
            timeout_s = float(endpoints.get("timeout_s", DEFAULT_TIMEOUT_S))
        except (TypeError, ValueError):
            raise InvalidConfiguration(
                f"Invalid timeout_s: {endpoints.get('timeout_s')!r}"
            ) from None

        return cls(
            client_id=str(client_id),
            username=str(username),
            password=str(password),
            password_in_keyring=password_in_keyring,
            auth_url=str(endpoints.get("auth_url", DEFAULT_AUTH_URL)),
            api_url=str(endpoints.get("api_url", DEFAULT_API_URL)),
            timeout_s=timeout_s,
        )


def load_config(
    path: str | Path | None = None, overrides: dict[str, Any] | None = None
) -> ClientConfig:
    """Load persisted configuration, applying env and explicit overrides."""
    config_path = resolve_config_path(path)
    with config_path.open("rb") as handle:
        data = tomllib.load(handle)
    return ClientConfig.from_dict(apply_overrides(data, overrides))


def save_config(config: ClientConfig, path: str | Path | None = None) -> Path:
    """Persist configuration to disk and return the file path."""
    if config.password_in_keyring:
        _store_password_in_keyring(config.username, config.password)
    config_path = resolve_config_path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    toml_text = tomli_w.dumps(config.to_dict())
    config_path.write_text(toml_text, encoding="utf-8")
    try:
        os.chmod(config_path, stat.S_IRUSR | stat.S_IWUSR)
    except PermissionError:  # pragma: no cover - some FS disallow chmod
        pass
    return config_path


def config_summary(config: ClientConfig) -> str:
    """Generate a human-readable summary of key settings."""
    password = "keyring" if config.password_in_keyring else "config file"
    return (
        f"  Client ID : {config.client_id}\n"
        f"  Username  : {config.username}\n"
        f"  Password  : stored in {password}\n"
        f"  Auth URL  : {config.auth_url}\n"
        f"  API URL   : {config.api_url}"
    )


def keyring_supported() -> bool:
    """Return True if a keyring backend is available."""
    return _keyring is not None


def delete_password_from_keyring(username: str) -> None:
    """Remove the SOTA account password from the system keyring if present."""
    if _keyring is None:
        return
    try:
        _keyring.delete_password(KEYRING_SERVICE, username)
    except KeyringError:  # pragma: no cover - backend quirks
        pass


def _store_password_in_keyring(username: str, password: str) -> None:
    if _keyring is None:
        raise InvalidConfiguration("Keyring backend not available; install 'keyring' package")
    try:
        _keyring.set_password(KEYRING_SERVICE, username, password)
    except KeyringError as exc:  # pragma: no cover - backend dependent
        raise InvalidConfiguration(f"Failed to store password in keyring: {exc}") from exc


def _retrieve_password_from_keyring(username: str) -> str:
    if _keyring is None:
        raise InvalidConfiguration("Keyring backend not available for stored password")
    try:
        value = _keyring.get_password(KEYRING_SERVICE, username)
    except KeyringError as exc:  # pragma: no cover - backend dependent
        raise InvalidConfiguration(f"Failed to read password from keyring: {exc}") from exc
    if not value:
        raise InvalidConfiguration("No SOTA password stored in keyring; rerun setup")
    return value
