"""Upload command implementation.

Loads a JSON logbook and submits it to the SOTA database.
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace

from .. import config as config_module
from ..client import SotaClient
from ..errors import SotaClientError
from ..logbook import load_logbook

LOG = logging.getLogger(__name__)


def run_upload(args: Namespace) -> int:
    """Upload the activations and chases in ``args.logbook``."""
    try:
        upload_data = load_logbook(args.logbook)
    except FileNotFoundError:
        LOG.error("Logbook not found: %s", args.logbook)
        return 1
    except OSError as exc:
        LOG.error("Cannot read logbook %s: %s", args.logbook, exc)
        return 1
    except SotaClientError as exc:
        LOG.error("Invalid logbook: %s", exc)
        return 1

    summary = upload_data.summary()
    LOG.info(
        "Logbook contains %d activations (%d QSOs, %d S2S) and %d chases",
        summary["activations"],
        summary["qsos"],
        summary["s2s"],
        summary["chases"],
    )

    if getattr(args, "dry_run", False):
        print(json.dumps(upload_data.to_dict(), indent=2))
        return 0

    if upload_data.is_empty():
        LOG.error("Nothing to upload in %s", args.logbook)
        return 1

    try:
        cfg = config_module.load_config(getattr(args, "config", None))
    except FileNotFoundError:
        LOG.error(
            "Cannot upload without a configuration; run sota-client setup or provide --config"
        )
        return 1
    except ValueError as exc:
        LOG.error("Configuration invalid: %s", exc)
        return 1

    try:
        with SotaClient.from_config(cfg) as client:
            for activation in upload_data.activations:
                client.add_activation(activation)
            for chase in upload_data.chases:
                client.add_chase(chase)
            client.upload()
    except SotaClientError as exc:
        LOG.error("Upload failed (%s): %s", type(exc).__name__, exc)
        if getattr(args, "json", False):
            print(json.dumps({"ok": False, "error": type(exc).__name__, "detail": str(exc)}, indent=2))
        return 1

    if getattr(args, "json", False):
        print(json.dumps({"ok": True, **summary}, indent=2))
    return 0
