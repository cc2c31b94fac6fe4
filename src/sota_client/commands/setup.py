"""Onboarding command implementation."""

from __future__ import annotations

import logging
from argparse import Namespace
from getpass import getpass
from pathlib import Path
from typing import Callable

from .. import config as config_module
from ..client import DEFAULT_API_URL, DEFAULT_AUTH_URL
from ..config import ClientConfig
from ..errors import InvalidConfiguration

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def run_setup(args: Namespace) -> int:
    """Run the onboarding workflow."""
    config_path = config_module.resolve_config_path(getattr(args, "config", None))

    if getattr(args, "reset", False) and config_path.exists():
        try:
            existing_config = config_module.load_config(config_path)
        except Exception:  # pragma: no cover - best effort cleanup
            existing_config = None
        if existing_config and existing_config.password_in_keyring:
            config_module.delete_password_from_keyring(existing_config.username)
        config_path.unlink()
        logger.info("Removed existing configuration at %s", config_path)

    if getattr(args, "non_interactive", False):
        return _run_non_interactive(config_path)

    existing = _load_existing(config_path)

    try:
        new_config = _interactive_prompt(
            existing,
            client_id=getattr(args, "client_id", None),
            username=getattr(args, "username", None),
            want_keyring=getattr(args, "keyring", None),
        )
    except (KeyboardInterrupt, EOFError):
        logger.info("Setup cancelled by user")
        return 1

    try:
        saved_path = config_module.save_config(new_config, path=config_path)
    except InvalidConfiguration as exc:
        logger.error("Could not save configuration: %s", exc)
        return 1
    logger.info("Configuration saved to %s", saved_path)
    logger.info("%s", config_module.config_summary(new_config))
    return 0


def _run_non_interactive(config_path: Path) -> int:
    try:
        config = config_module.load_config(config_path)
    except FileNotFoundError:
        logger.error(
            "Configuration not found at %s; run interactive setup first", config_path
        )
        return 1
    except ValueError as exc:
        logger.error("Configuration invalid: %s", exc)
        return 1

    logger.info("Configuration OK:")
    logger.info("%s", config_module.config_summary(config))
    return 0


def _load_existing(config_path: Path) -> ClientConfig | None:
    if not config_path.exists():
        return None
    try:
        return config_module.load_config(config_path)
    except (FileNotFoundError, ValueError) as exc:
        logger.warning("Existing configuration invalid (%s); starting fresh", exc)
        return None


def _interactive_prompt(
    existing: ClientConfig | None,
    *,
    client_id: str | None = None,
    username: str | None = None,
    want_keyring: bool | None = None,
    prompt: _Prompt | None = None,
) -> ClientConfig:
    prompt = prompt or _Prompt()

    client_id = client_id or prompt.string(
        "SOTA API client ID", default=_default(existing, "client_id")
    )
    username = username or prompt.string(
        "SOTA username", default=_default(existing, "username")
    )
    password = prompt.secret("SOTA password", default=_default(existing, "password"))

    use_keyring = bool(_default(existing, "password_in_keyring", fallback=False))
    if config_module.keyring_supported():
        if want_keyring is None:
            want_keyring = prompt.yes_no(
                "Store SOTA password in system keyring?", default=use_keyring
            )
        if not want_keyring and use_keyring and existing is not None:
            config_module.delete_password_from_keyring(existing.username)
        use_keyring = bool(want_keyring)
    elif use_keyring or want_keyring:
        logger.warning(
            "Keyring backend is unavailable. Keeping password in config file."
        )
        use_keyring = False

    return ClientConfig(
        client_id=client_id,
        username=username,
        password=password,
        password_in_keyring=use_keyring,
        auth_url=str(_default(existing, "auth_url", fallback=DEFAULT_AUTH_URL)),
        api_url=str(_default(existing, "api_url", fallback=DEFAULT_API_URL)),
        timeout_s=float(
            _default(existing, "timeout_s", fallback=config_module.DEFAULT_TIMEOUT_S)  # type: ignore[arg-type]
        ),
    )


def _default(
    config: ClientConfig | None, attr: str, fallback: object | None = None
) -> object | None:
    if config is None:
        return fallback
    return getattr(config, attr)


class _Prompt:
    """Utility helpers for prompting user input with validation."""

    def __init__(
        self,
        *,
        input_func: Callable[[str], str] | None = None,
        echo: Callable[[str], None] | None = None,
        secret_func: Callable[[str], str] | None = None,
    ) -> None:
        self._input = input_func or input
        self._echo = echo or (lambda msg: logger.warning("%s", msg))
        self._secret = secret_func or getpass

    def string(self, label: str, default: object | None = None) -> str:
        while True:
            raw = self._input(_format_prompt(label, default)).strip()
            if not raw and default is not None:
                value = str(default)
            else:
                value = raw
            if not value:
                self._echo("Value required")
                continue
            return value

    def secret(self, label: str, default: object | None = None) -> str:
        while True:
            if default is not None:
                prompt = f"{label} [leave blank to keep existing]: "
            else:
                prompt = f"{label}: "
            value = self._secret(prompt)
            if not value and default is not None:
                return str(default)
            if not value:
                self._echo("Value required")
                continue
            confirm = self._secret("Confirm password: ")
            if value != confirm:
                self._echo("Passwords do not match; try again")
                continue
            return value

    def yes_no(self, message: str, *, default: bool) -> bool:
        suffix = " [Y/n]" if default else " [y/N]"
        while True:
            response = self._input(f"{message}{suffix}: ").strip().lower()
            if not response:
                return default
            if response in {"y", "yes"}:
                return True
            if response in {"n", "no"}:
                return False
            self._echo("Please answer 'y' or 'n'")


def _format_prompt(label: str, default: object | None) -> str:
    suffix = f" [{default}]" if default not in (None, "") else ""
    return f"{label}{suffix}: "
