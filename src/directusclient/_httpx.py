from __future__ import annotations

import threading
import httpx

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Mapping, Optional

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Generator
    import ssl


@dataclass(frozen=True)
class DirectusConnectionParameters:
    """Parameters required to connect to a Directus instance.

    Attributes:
        base_url (str): The instance URL without trailing slashes.
        version (str): The API version used for versioned endpoints.
        headers (Mapping[str, str]): Static headers sent with every request.
        ssl_verify (bool): Whether to verify SSL certificates.
        timeout (httpx.Timeout): Configured timeout object for HTTP requests.
    """

    base_url: str
    version: str = "1.1"
    headers: Mapping[str, str] = field(default_factory=dict)
    ssl_verify: bool | ssl.SSLContext = True
    timeout: httpx.Timeout = field(default_factory=lambda: httpx.Timeout(None))

    @property
    def api_url(self) -> str:
        """Root for unversioned calls, e.g. ``https://cms.example.org/api/``."""
        return f"{self.base_url}/api/"

    @property
    def versioned_url(self) -> str:
        """Root for resource calls, e.g. ``https://cms.example.org/api/1.1/``."""
        return f"{self.api_url}{self.version}/"


class DirectusAuth(httpx.Auth):
    """Bearer token authentication for Directus.

    The access token is the only mutable piece of client configuration. It is read
    under a lock on every request, so a token stored by a successful login applies
    to every request dispatched afterwards. Requests already in flight keep the
    token they were dispatched with.

    Works with both synchronous and asynchronous httpx clients.
    """

    def __init__(self, access_token: Optional[str] = None):
        self._access_token = access_token
        self._lock: threading.RLock = threading.RLock()

    @property
    def access_token(self) -> Optional[str]:
        with self._lock:
            return self._access_token

    @access_token.setter
    def access_token(self, value: Optional[str]) -> None:
        with self._lock:
            self._access_token = value

    def auth_headers(self) -> Dict[str, str]:
        """Return the Authorization header for the current token, or nothing."""
        token = self.access_token
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def auth_flow(self, request: httpx.Request) -> "Generator[httpx.Request, httpx.Response, None]":
        """Attach the current bearer token, overriding any static Authorization header"""
        request.headers.update(self.auth_headers())
        yield request
