"""SOTA database client."""

from importlib import metadata as _importlib_metadata

try:
    __version__ = _importlib_metadata.version("sota-client")
except _importlib_metadata.PackageNotFoundError:  # pragma: no cover - source checkout
    __version__ = "0.0.0"

from .client import SotaClient  # noqa: E402
from .errors import (  # noqa: E402
    AccessDenied,
    InvalidArgument,
    InvalidClientId,
    InvalidConfiguration,
    ServerError,
    SessionClosed,
    SotaClientError,
)
from .records import Activation, Chase, Qso  # noqa: E402
from .upload import UploadData  # noqa: E402

__all__ = [
    "AccessDenied",
    "Activation",
    "Chase",
    "InvalidArgument",
    "InvalidClientId",
    "InvalidConfiguration",
    "Qso",
    "ServerError",
    "SessionClosed",
    "SotaClient",
    "SotaClientError",
    "UploadData",
    "__version__",
]
