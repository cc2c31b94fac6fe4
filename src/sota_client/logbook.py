"""Load activations and chases from a JSON logbook file.

The file uses the upload wire keys, with dates in any format
:func:`sota_client.dates.parse_date` understands::

    {
      "activations": [
        {"date": "2025-05-29", "summit": "W3/PW-024", "ownCallsign": "W0KEH",
         "qsos": [{"date": "2025-05-29", "time": "23:23", "callsign": "W1AW",
                   "s2sSummitCode": "JA/NN-181", "mode": "CW", "band": "14.310MHz"}]}
      ],
      "chases": []
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from .errors import InvalidArgument
from .records import Activation, Chase
from .upload import UploadData

LOG = logging.getLogger(__name__)


def load_logbook(path: str | Path, upload_data: UploadData | None = None) -> UploadData:
    """Read ``path`` and add its records to ``upload_data`` (or a new one)."""
    logbook_path = Path(path)
    try:
        with logbook_path.open("r", encoding="utf-8") as fh:
            document = json.load(fh)
    except json.JSONDecodeError as exc:
        raise InvalidArgument(f"{logbook_path}: invalid JSON ({exc})") from exc
    except UnicodeDecodeError as exc:
        raise InvalidArgument(f"{logbook_path}: not valid UTF-8 ({exc})") from exc

    if not isinstance(document, dict):
        raise InvalidArgument(f"{logbook_path}: top level must be an object")

    activations = _section(document, "activations", logbook_path)
    chases = _section(document, "chases", logbook_path)

    # Build everything first so a bad entry adds nothing.
    parsed_activations = []
    for index, entry in enumerate(activations):
        try:
            parsed_activations.append(Activation.from_dict(entry))
        except InvalidArgument as exc:
            raise InvalidArgument(f"{logbook_path}: activation {index}: {exc}") from exc
    parsed_chases = []
    for index, entry in enumerate(chases):
        try:
            parsed_chases.append(Chase.from_dict(entry))
        except InvalidArgument as exc:
            raise InvalidArgument(f"{logbook_path}: chase {index}: {exc}") from exc

    target = upload_data if upload_data is not None else UploadData()
    for activation in parsed_activations:
        target.add_activation(activation)
    for chase in parsed_chases:
        target.add_chase(chase)
    LOG.debug(
        "Loaded %d activations and %d chases from %s",
        len(parsed_activations),
        len(parsed_chases),
        logbook_path,
    )
    return target


def _section(document: dict, key: str, path: Path) -> list:
    value = document.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidArgument(f"{path}: '{key}' must be a list")
    return value
