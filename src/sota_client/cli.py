"""Command-line entry point for sota-client."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time

from . import __version__
from . import config as config_module

_LOG_LEVEL_ALIASES = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def _resolve_log_level(candidate: str | None) -> int:
    for value in (candidate, os.getenv("SOTA_CLIENT_LOG_LEVEL")):
        level = _LOG_LEVEL_ALIASES.get((value or "").strip().lower())
        if level is not None:
            return level
    return logging.INFO


def _configure_logging(level_name: str | None) -> None:
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter("%(message)s"))
    handlers: list[logging.Handler] = [stream_handler]

    try:
        log_dir = config_module.get_data_dir() / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / "sota-client.log", encoding="utf-8")
        file_formatter = logging.Formatter(
            "%(asctime)sZ %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
        file_formatter.converter = time.gmtime
        file_handler.setFormatter(file_formatter)
        handlers.append(file_handler)
    except OSError:
        # If we can't create the log directory or file, continue without file logging.
        pass

    logging.basicConfig(
        level=_resolve_log_level(level_name),
        handlers=handlers,
        force=True,
    )


def _add_common_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", help="Path to config.toml")
    p.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        help="Logging level",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sota-client", description="Upload activations and chases to the SOTA database"
    )
    parser.add_argument(
        "--version", action="version", version=f"sota-client {__version__}"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    setup = subparsers.add_parser("setup", help="Create or update the client configuration")
    _add_common_flags(setup)
    setup.add_argument("--client-id", help="SOTA API client identifier")
    setup.add_argument("--username", help="SOTA database username")
    setup.add_argument(
        "--keyring",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Store the password in the system keyring",
    )
    setup.add_argument(
        "--reset",
        action="store_true",
        help="Delete existing configuration before starting",
    )
    setup.add_argument(
        "--non-interactive",
        action="store_true",
        help="Validate the existing configuration instead of prompting",
    )

    upload = subparsers.add_parser("upload", help="Upload a JSON logbook")
    _add_common_flags(upload)
    upload.add_argument("logbook", help="Path to a JSON logbook file")
    upload.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the upload payload instead of sending it",
    )
    upload.add_argument(
        "--json", action="store_true", help="Print the upload result as JSON"
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(getattr(args, "log_level", None))

    if args.command == "setup":
        from .commands.setup import run_setup

        return run_setup(args)
    from .commands.upload import run_upload

    return run_upload(args)


if __name__ == "__main__":
    sys.exit(main())
