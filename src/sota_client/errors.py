"""Exception types raised by the SOTA client."""

from __future__ import annotations

from typing import Any


class SotaClientError(RuntimeError):
    """Base class for every error raised by this package.

    ``error_code`` and ``response_data`` carry whatever the server sent
    back, when there was a parseable response at all.
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        response_data: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.response_data = response_data or {}


class InvalidConfiguration(SotaClientError, ValueError):
    """A required construction parameter or config value is missing."""


class InvalidArgument(SotaClientError, ValueError):
    """A record was given a value it cannot hold."""


class InvalidClientId(SotaClientError):
    """The server does not recognise the client identifier."""


class AccessDenied(SotaClientError):
    """Bad user credentials, or the access token was rejected."""


class SessionClosed(AccessDenied):
    """The client has logged out and cannot issue further requests."""


class ServerError(SotaClientError):
    """Unexpected status, content type or body, or the server was unreachable."""
