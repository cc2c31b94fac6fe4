"""CLI commands (setup, upload)."""

from .setup import run_setup
from .upload import run_upload

__all__ = [
    "run_setup",
    "run_upload",
]
