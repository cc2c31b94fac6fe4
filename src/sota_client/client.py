"""SOTA database API client: login, upload, logout.

Usage::

    from sota_client import Activation, Qso, SotaClient

    with SotaClient("wavelog", "w0keh", "secret") as client:
        client.add_activation(
            Activation(date="2025-05-29", summit="W3/PW-024", own_callsign="W0KEH",
                       qsos=[Qso(date="2025-05-29", time="23:23", callsign="W1AW",
                                 mode="CW", band="14.310MHz")])
        )
        client.upload()

Constructing the client logs in immediately. Leaving the ``with`` block
(or calling :meth:`SotaClient.close`) logs out on a best-effort basis.
The client is not thread-safe.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import requests

from . import __version__
from .errors import (
    AccessDenied,
    InvalidClientId,
    InvalidConfiguration,
    ServerError,
    SessionClosed,
)
from .records import Activation, Chase
from .upload import UploadData

LOG = logging.getLogger(__name__)

DEFAULT_AUTH_URL = "https://sso.sota.org.uk/auth/realms/SOTA/protocol/openid-connect"
DEFAULT_API_URL = "https://api-db2.sota.org.uk"
CONNECT_TIMEOUT_S = 5
READ_TIMEOUT_S = 10
JSON_CONTENT_TYPE = "application/json"


class SotaClient:
    """Authenticated session against the SOTA database API."""

    def __init__(
        self,
        client_id: str,
        username: str | None = None,
        password: str | None = None,
        *,
        session: Any | None = None,
        auth_url: str = DEFAULT_AUTH_URL,
        api_url: str = DEFAULT_API_URL,
        timeout: float | tuple[float, float] | None = None,
    ) -> None:
        self._access_token: str | None = None
        self._refresh_token: str | None = None
        self._closed = False
        self._owns_session = session is None

        if not client_id:
            raise InvalidConfiguration("Missing required parameter 'client_id'")
        if not username:
            raise InvalidConfiguration("Missing required parameter 'username'")
        if not password:
            raise InvalidConfiguration("Missing required parameter 'password'")

        self.client_id = client_id
        self.auth_url = auth_url.rstrip("/")
        self.api_url = api_url.rstrip("/")
        self._timeout = timeout if timeout is not None else (CONNECT_TIMEOUT_S, READ_TIMEOUT_S)
        self._session: Any = session if session is not None else requests.Session()
        self._session.headers.setdefault("User-Agent", f"sota-client/{__version__}")
        self._upload_data = UploadData()

        try:
            self._login(username, password)
        except Exception:
            self._close_session()
            raise

    @classmethod
    def from_config(cls, config: Any, session: Any | None = None) -> SotaClient:
        """Build a client from a :class:`sota_client.config.ClientConfig`."""
        return cls(
            config.client_id,
            config.username,
            config.password,
            session=session,
            auth_url=config.auth_url,
            api_url=config.api_url,
            timeout=config.timeout_s,
        )

    @property
    def authenticated(self) -> bool:
        return self._access_token is not None and not self._closed

    @property
    def upload_data(self) -> UploadData:
        return self._upload_data

    # --- Records ------------------------------------------------------------
    def add_activation(self, activation: Activation) -> None:
        self._upload_data.add_activation(activation)

    def add_chase(self, chase: Chase) -> None:
        self._upload_data.add_chase(chase)

    def payload(self) -> dict[str, Any]:
        return self._upload_data.to_dict()

    # --- Protocol -----------------------------------------------------------
    def _login(self, username: str, password: str) -> None:
        url = f"{self.auth_url}/token"
        LOG.debug("Requesting SOTA access token for %s", username)
        response = self._post(
            url,
            operation="login",
            data={
                "client_id": self.client_id,
                "grant_type": "password",
                "username": username,
                "password": password,
            },
        )

        content_type = _media_type(response)
        if content_type != JSON_CONTENT_TYPE:
            raise ServerError(
                f'Unexpected content type "{content_type}" received from server'
            )
        try:
            body = response.json()
        except ValueError:
            raise ServerError(
                f"Unparseable login response (HTTP {response.status_code})"
            ) from None
        if not isinstance(body, dict):
            raise ServerError(f"Unexpected login response (HTTP {response.status_code})")

        error_code = body.get("error")
        description = body.get("error_description") or error_code or ""
        if response.status_code == 401:
            LOG.warning("SOTA login rejected: %s", error_code)
            if error_code == "invalid_client":
                raise InvalidClientId(description, error_code=error_code, response_data=body)
            raise AccessDenied(description, error_code=error_code, response_data=body)
        if response.status_code != 200:
            raise ServerError(
                f"({error_code}) {description}", error_code=error_code, response_data=body
            )

        access_token = body.get("access_token")
        if not access_token:
            raise ServerError("Login response did not include an access token", response_data=body)
        self._access_token = access_token
        self._refresh_token = body.get("refresh_token")
        LOG.info("Logged in to SOTA database as %s", username)

    def upload(self) -> None:
        """Post every pending activation and chase to the SOTA database.

        Raises :class:`AccessDenied` when the token is rejected (HTTP 401/403)
        and :class:`ServerError` for any other failure. Pending records are
        kept either way; call again to resubmit.
        """
        if not self.authenticated:
            raise SessionClosed("Client is not logged in")
        payload = self._upload_data.to_dict()
        url = f"{self.api_url}/uploads"
        LOG.debug(
            "Uploading %d activations, %d s2s, %d chases",
            len(payload["activations"]),
            len(payload["s2s"]),
            len(payload["chases"]),
        )
        response = self._post(
            url, operation="upload", json=payload, headers=self._auth_headers()
        )

        if response.status_code != 200:
            body = response.text or ""
            LOG.warning("SOTA upload HTTP %s", response.status_code)
            if response.status_code in (401, 403):
                raise AccessDenied(body)
            raise ServerError(body or f"HTTP {response.status_code} during upload")
        LOG.info(
            "Uploaded %d activations, %d s2s and %d chases to %s",
            len(payload["activations"]),
            len(payload["s2s"]),
            len(payload["chases"]),
            self.api_url,
        )

    def logout(self) -> None:
        """Invalidate the session server-side. Failures are logged, never raised."""
        if not self.authenticated:
            self._closed = True
            return
        try:
            response = self._post(
                f"{self.auth_url}/logout",
                operation="logout",
                data={"client_id": self.client_id, "refresh_token": self._refresh_token},
                headers=self._auth_headers(),
            )
            if response.status_code not in (200, 204):
                LOG.warning("SOTA logout HTTP %s", response.status_code)
            else:
                LOG.debug("Logged out of SOTA database")
        except Exception as exc:
            LOG.warning("SOTA logout failed: %s", exc)
        finally:
            self._access_token = None
            self._refresh_token = None
            self._closed = True

    def close(self) -> None:
        self.logout()
        self._close_session()

    def __enter__(self) -> SotaClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __del__(self) -> None:
        try:
            self.close()
        except Exception:
            pass

    # --- Helpers ------------------------------------------------------------
    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._access_token}"}

    def _post(self, url: str, *, operation: str, **kwargs: Any) -> Any:
        try:
            return self._session.post(url, timeout=self._timeout, **kwargs)
        except requests.RequestException as exc:
            LOG.warning("SOTA %s request failed: %s", operation, exc)
            raise ServerError(f"Request error during {operation}: {exc}") from exc

    def _close_session(self) -> None:
        session = getattr(self, "_session", None)
        if session is None or not getattr(self, "_owns_session", False):
            return
        self._session = None
        session.close()


def _media_type(response: Any) -> str:
    headers: Mapping[str, str] = getattr(response, "headers", None) or {}
    raw = headers.get("Content-Type") or headers.get("content-type") or ""
    return raw.split(";", 1)[0].strip().lower()
