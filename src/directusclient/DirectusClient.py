from __future__ import annotations

import json
import logging
import os
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, cast, TYPE_CHECKING

import httpx

from directusclient import querystring
from directusclient._httpx import DirectusAuth, DirectusConnectionParameters
from directusclient.catalog import install_catalog
from directusclient.decorators import use_client_session
from directusclient.exceptions import (
    ConfigError,
    DirectusClientClosed,
    MissingParameterError,
    RemoteRejection,
    directus_errors,
)

if TYPE_CHECKING:  # pragma: no cover
    import ssl


# Conditional import of orjson to support faster JSON processing if available
try:  # pragma: no cover
    import orjson  # type: ignore

    if (
        os.environ.get("DIRECTUSCLIENT_PREFER_ORJSON", "0") != "0"
    ):  # Allow user to opt in to orjson via env var
        _HAS_ORJSON = True
    else:
        _HAS_ORJSON = False

    def _orjson_loads(data):
        return orjson.loads(data)

    JSON_DECODE_ERRORS = (json.JSONDecodeError, orjson.JSONDecodeError)  # type: ignore

except ImportError:
    _HAS_ORJSON = False
    JSON_DECODE_ERRORS = (json.JSONDecodeError,)  # type: ignore

# Constants
CONTENT_TYPE_JSON = "application/json"

DEFAULT_API_VERSION = "1.1"

LOGIN_ENDPOINT = "auth/request-token"

USER_AGENT_STRING = "Directus Client (python-httpx)"

try:
    timeout_str = os.environ.get("DIRECTUSCLIENT_HTTP_TIMEOUT")
    HTTPX_TIMEOUT = float(timeout_str) if timeout_str is not None else None
except (TypeError, ValueError):
    HTTPX_TIMEOUT = None

# Set up logger
logger = logging.getLogger("DirectusClient")


# Sentinel value for detecting unset timeout parameter
class _TimeoutUnsetType:
    def __repr__(self):
        return "_TIMEOUT_UNSET"


_TIMEOUT_UNSET = _TimeoutUnsetType()


def _get_timeout_config() -> dict:
    """Get granular timeout configuration from environment variables.

    Returns:
        dict: Timeout configuration dictionary with connect, read, write, and pool timeouts.
    """
    return {
        "connect": float(os.environ["DIRECTUSCLIENT_CONNECT_TIMEOUT"])
        if "DIRECTUSCLIENT_CONNECT_TIMEOUT" in os.environ
        else None,
        "read": float(os.environ["DIRECTUSCLIENT_READ_TIMEOUT"])
        if "DIRECTUSCLIENT_READ_TIMEOUT" in os.environ
        else None,
        "write": float(os.environ["DIRECTUSCLIENT_WRITE_TIMEOUT"])
        if "DIRECTUSCLIENT_WRITE_TIMEOUT" in os.environ
        else None,
        "pool": float(os.environ["DIRECTUSCLIENT_POOL_TIMEOUT"])
        if "DIRECTUSCLIENT_POOL_TIMEOUT" in os.environ
        else None,
    }


class DirectusClient:
    """A Python client for the Directus 6 REST API

    The client resolves two roots from the instance URL: the API root
    (``<url>/api/``) used for generic passthrough calls, and the versioned root
    (``<url>/api/<version>/``) used by every resource operation. Requests carry
    ``Authorization: Bearer <token>`` whenever a token is set, plus any static
    headers given at construction.

    Successful calls return the parsed JSON body untouched, including the
    ``{"success": ..., "data": ...}`` envelope. Failed calls raise a
    RemoteRejection (the remote error payload is on ``.payload``) or a
    TransportError (the raw httpx error is on ``.original``).

    Initialization:
        DirectusClient can be used as a context manager, which shares one HTTP
        session between calls. Outside a context each call opens its own session.

        >>> from directusclient import DirectusClient
        >>> with DirectusClient("https://cms.example.org") as directus:
        ...     directus.authenticate("admin@example.org", "password")
        ...     articles = directus.get_items("articles", {"filter": {"status": ["published"]}})
        ...

    Parameters:
        url (str): The base URL of the Directus instance.
        access_token (str, optional): Bearer token to start with.
        version (str, optional): API version for versioned endpoints. Default is "1.1".
        headers (Mapping[str, str], optional): Static headers sent with every request.
        ssl_verify (bool | ssl.SSLContext), keyword-only: Whether to verify SSL certificates, or a custom SSL context. Default is True.
        timeout (float | dict | httpx.Timeout | None, optional), keyword-only: Timeout configuration for HTTP requests.
    """  # noqa: E501

    def __init__(
        self,
        url: Optional[str] = None,
        access_token: Optional[str] = None,
        version: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        *,
        ssl_verify: bool | ssl.SSLContext = True,
        timeout: float | dict | httpx.Timeout | None | _TimeoutUnsetType = _TIMEOUT_UNSET,
    ):
        base_url = (url or "").rstrip("/")
        if not base_url:
            raise ConfigError("No Directus URL provided")

        # Determine timeout value to use
        if timeout is _TIMEOUT_UNSET:
            timeout_value: httpx.Timeout = DirectusClient._construct_timeout_from_env()
        elif timeout is None:
            timeout_value = httpx.Timeout(None)
        else:
            timeout_value = DirectusClient._construct_timeout(
                cast(float | dict | httpx.Timeout, timeout)
            )

        self.directus_parameters: DirectusConnectionParameters = DirectusConnectionParameters(
            base_url=base_url,
            version=version or DEFAULT_API_VERSION,
            headers=MappingProxyType(dict(headers or {})),
            ssl_verify=ssl_verify,
            timeout=timeout_value,
        )
        self.directus_auth: DirectusAuth = DirectusAuth(access_token)
        self.base_headers = {
            "accept": CONTENT_TYPE_JSON,
            "user-agent": USER_AGENT_STRING,
        }
        self.httpx_client: Optional[httpx.Client] = None
        self.async_httpx_client: Optional[httpx.AsyncClient] = None
        self.is_closed = False

    def __repr__(self) -> str:
        return f"DirectusClient for {self.versioned_url}"

    def __enter__(self):
        """Context manager entry for DirectusClient.

        Returns:
            DirectusClient: The DirectusClient instance.

        Note:
            Instantiates the shared httpx.Client using `self.get_directus_http_client()`.
        """
        self.validate_client_open()
        self.httpx_client = self.get_directus_http_client()
        logger.debug("Opened Directus session for %s", self.base_url)
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        """Context manager exit method.

        Closes the shared httpx.Client and marks the DirectusClient instance as closed.
        """
        if self.httpx_client is not None and not self.httpx_client.is_closed:
            self.httpx_client.close()
        self.httpx_client = None
        self.is_closed = True
        logger.debug("Closed Directus session for %s", self.base_url)

    async def __aenter__(self):
        """Asynchronous context manager entry for DirectusClient.

        Returns:
            DirectusClient: The DirectusClient instance.

        Note:
            Instantiates both an httpx.Client and an httpx.AsyncClient, so that sync
            calls made inside an async context share a session as well.
        """
        self.validate_client_open()
        self.httpx_client = self.get_directus_http_client()
        self.async_httpx_client = self.get_directus_http_client_async()
        logger.debug("Opened async Directus session for %s", self.base_url)
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        """Asynchronous context manager exit method."""
        if self.async_httpx_client is not None and not self.async_httpx_client.is_closed:
            await self.async_httpx_client.aclose()
        self.async_httpx_client = None
        self.__exit__(exc_type, exc_value, traceback)

    def close(self) -> None:
        """Manually close the DirectusClient object.

        This should only be used when running DirectusClient outside a context manager.
        """
        self.__exit__(None, None, None)

    async def async_close(self) -> None:
        """Manually close the DirectusClient object asynchronously.

        This should only be used when running DirectusClient outside a context manager.
        """
        await self.__aexit__(None, None, None)

    def validate_client_open(self):
        if self.is_closed:
            raise DirectusClientClosed()

    @staticmethod
    def _construct_timeout_from_env() -> httpx.Timeout:
        """Construct httpx.Timeout object from environment variables only.

        Returns:
            httpx.Timeout: Configured timeout object from environment variables.
                          If no environment configuration is found, returns httpx.Timeout(None).
        """
        default_timeout_config = {k: v for k, v in _get_timeout_config().items() if v is not None}

        if not default_timeout_config and HTTPX_TIMEOUT is None:
            return httpx.Timeout(None)

        return httpx.Timeout(HTTPX_TIMEOUT, **default_timeout_config)

    @staticmethod
    def _construct_timeout(timeout: float | dict | httpx.Timeout) -> httpx.Timeout:
        """Construct httpx.Timeout object from user-provided timeout parameter.

        If timeout is a dict, any unspecified values will be replaced by the environment
        default values.

        Args:
            timeout: Timeout configuration - can be float, dict, or httpx.Timeout.

        Returns:
            httpx.Timeout: Configured timeout object.
        """
        if isinstance(timeout, httpx.Timeout):
            return timeout
        elif isinstance(timeout, dict):
            default_timeout_config = {
                k: v for k, v in _get_timeout_config().items() if v is not None
            }
            merged_timeout = {**default_timeout_config, **timeout}
            return httpx.Timeout(HTTPX_TIMEOUT, **merged_timeout)
        else:
            return httpx.Timeout(timeout)

    @property
    def base_url(self) -> str:
        """The instance URL, without trailing slashes."""
        return self.directus_parameters.base_url

    @property
    def version(self) -> str:
        return self.directus_parameters.version

    @property
    def api_url(self) -> str:
        """The unversioned API root, always ending in a single slash."""
        return self.directus_parameters.api_url

    @property
    def versioned_url(self) -> str:
        """The versioned API root, always ending in a single slash."""
        return self.directus_parameters.versioned_url

    @property
    def ssl_verify(self) -> bool | ssl.SSLContext:
        return self.directus_parameters.ssl_verify

    @property
    def http_timeout(self) -> httpx.Timeout:
        return self.directus_parameters.timeout

    @property
    def access_token(self) -> Optional[str]:
        """The bearer token sent with every request, or None."""
        return self.directus_auth.access_token

    @access_token.setter
    def access_token(self, token: Optional[str]) -> None:
        self.directus_auth.access_token = token

    @property
    def headers(self) -> Dict[str, str]:
        """A copy of the static headers configured at construction."""
        return dict(self.directus_parameters.headers)

    @property
    def request_headers(self) -> Dict[str, str]:
        """
        The headers a request dispatched right now would carry.

        Static headers merged with ``Authorization: Bearer <token>`` when a token is
        set. Computed on every access; DirectusClient's own requests get the same
        merge from DirectusAuth.

        Example:
            >>> import httpx
            >>> directus = DirectusClient("https://cms.example.org", access_token="T")
            >>> httpx.get(directus.versioned_url + "users/me", headers=directus.request_headers)
        """
        return {**self.directus_parameters.headers, **self.directus_auth.auth_headers()}

    def root(self, api: bool = False) -> str:
        """Return the API root when ``api`` is true, else the versioned root."""
        return self.api_url if api else self.versioned_url

    def build_url(self, endpoint: str, api: bool = False) -> str:
        """Build the absolute URL for an endpoint.

        The endpoint is appended to the chosen root as-is, so it must not start
        with a slash.

        Args:
            endpoint (str): Relative endpoint path, e.g. ``tables/articles/rows``.
            api (bool): Use the API root instead of the versioned root.

        Returns:
            str: The absolute URL.
        """
        return self.root(api) + endpoint

    def _client_headers(self) -> httpx.Headers:
        # Static headers replace base headers case-insensitively
        headers = httpx.Headers(self.base_headers)
        headers.update(self.directus_parameters.headers)
        return headers

    def get_directus_http_client(self) -> httpx.Client:
        """Returns a httpx client for use in Directus communication.

        Returns:
            httpx.Client: HTTP client with the bearer auth, static headers, timeout
                and SSL settings of this DirectusClient.
        """
        return httpx.Client(
            timeout=self.directus_parameters.timeout,
            verify=self.directus_parameters.ssl_verify,
            auth=self.directus_auth,
            headers=self._client_headers(),
            follow_redirects=True,
        )

    def get_directus_http_client_async(self) -> httpx.AsyncClient:
        """Returns an async httpx client for use in Directus communication.

        Returns:
            httpx.AsyncClient: Async HTTP client configured like
                `get_directus_http_client()`.
        """
        return httpx.AsyncClient(
            timeout=self.directus_parameters.timeout,
            verify=self.directus_parameters.ssl_verify,
            auth=self.directus_auth,
            headers=self._client_headers(),
            follow_redirects=True,
        )

    @staticmethod
    def handle_json_response(response: httpx.Response) -> Any:
        """Parse a response body as JSON.

        Uses orjson for faster parsing if enabled, otherwise the standard json library.

        Returns:
            Any: The parsed JSON data, or None for an empty or non-JSON body.
        """
        if not response.content:
            return None
        try:
            if _HAS_ORJSON:
                return _orjson_loads(response.content)
            else:
                return response.json()
        except (*JSON_DECODE_ERRORS, UnicodeDecodeError):
            logger.debug("Response from %s is not JSON", response.request.url)
            return None

    def _build_request(
        self, httpx_client, verb: str, endpoint: str, payload: Any, api: bool
    ) -> httpx.Request:
        url = self.build_url(endpoint, api)
        if verb == "GET":
            query = querystring.stringify(payload)
            if query:
                url = f"{url}{'&' if '?' in url else '?'}{query}"
            return httpx_client.build_request(verb, url)
        if payload is None and verb != "DELETE":
            payload = {}
        if payload is None:
            return httpx_client.build_request(verb, url)
        return httpx_client.build_request(verb, url, json=payload)

    @directus_errors
    @use_client_session
    def _request(self, httpx_client, verb: str, endpoint: str, payload: Any, api: bool) -> Any:
        """Send one request and return the parsed body; httpx errors are normalized."""
        request = self._build_request(httpx_client, verb, endpoint, payload, api)
        logger.debug("%s %s", verb, request.url)
        response = httpx_client.send(request)
        response.raise_for_status()
        return self.handle_json_response(response)

    @directus_errors
    @use_client_session
    async def _request_async(
        self, async_httpx_client, verb: str, endpoint: str, payload: Any, api: bool
    ) -> Any:
        """Private async method that implements `_request` for the async primitives."""
        request = self._build_request(async_httpx_client, verb, endpoint, payload, api)
        logger.debug("%s %s", verb, request.url)
        response = await async_httpx_client.send(request)
        response.raise_for_status()
        return self.handle_json_response(response)

    def get(self, endpoint: str, params: Optional[Mapping[str, Any]] = None, api: bool = False) -> Any:
        """Fetches data from Directus and returns the parsed JSON body.

        Args:
            endpoint (str): Endpoint path relative to the chosen root.
            params (dict, optional): Query parameters, serialized in bracket notation.
            api (bool, optional): Target the API root instead of the versioned root.

        Returns:
            Any: The JSON response body, envelope included.

        Raises:
            RemoteRejection: Directus answered with an error status.
            TransportError: The request did not get a response.
        """
        return self._request("GET", endpoint, params, api)

    def post(self, endpoint: str, data: Any = None, api: bool = False) -> Any:
        """Posts ``data`` (default ``{}``) as a JSON body. See `get` for errors."""
        return self._request("POST", endpoint, data, api)

    def put(self, endpoint: str, data: Any = None, api: bool = False) -> Any:
        """Puts ``data`` (default ``{}``) as a JSON body. See `get` for errors."""
        return self._request("PUT", endpoint, data, api)

    def delete(self, endpoint: str, data: Any = None, api: bool = False) -> Any:
        """Issues a DELETE, sending ``data`` as a JSON body when it is not None."""
        return self._request("DELETE", endpoint, data, api)

    async def get_async(
        self, endpoint: str, params: Optional[Mapping[str, Any]] = None, api: bool = False
    ) -> Any:
        """Asynchronous version of `get`."""
        return await self._request_async("GET", endpoint, params, api)

    async def post_async(self, endpoint: str, data: Any = None, api: bool = False) -> Any:
        """Asynchronous version of `post`."""
        return await self._request_async("POST", endpoint, data, api)

    async def put_async(self, endpoint: str, data: Any = None, api: bool = False) -> Any:
        """Asynchronous version of `put`."""
        return await self._request_async("PUT", endpoint, data, api)

    async def delete_async(self, endpoint: str, data: Any = None, api: bool = False) -> Any:
        """Asynchronous version of `delete`."""
        return await self._request_async("DELETE", endpoint, data, api)

    @staticmethod
    def _credentials(email: Optional[str], password: Optional[str]) -> Dict[str, str]:
        if email is None:
            raise MissingParameterError("email")
        if password is None:
            raise MissingParameterError("password")
        return {"email": email, "password": password}

    def _accept_login(self, response: Any, email: str) -> Any:
        """Store the token from a login response, or reject a ``success: false`` envelope."""
        if not isinstance(response, dict) or not response.get("success"):
            raise RemoteRejection(payload=response)
        data = response.get("data")
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise RemoteRejection("Login response did not include a token", payload=response)
        self.access_token = token
        logger.info("Authenticated with %s as %s", self.base_url, email)
        return response

    def authenticate(self, email: Optional[str] = None, password: Optional[str] = None) -> Any:
        """Logs into Directus and stores the returned access token.

        Every request dispatched after this call returns carries the new token.

        Args:
            email (str): The user's email address.
            password (str): The user's password.

        Returns:
            dict: The full login response, e.g. ``{"success": True, "data": {"token": ...}}``.

        Raises:
            MissingParameterError: If email or password is omitted.
            RemoteRejection: If Directus answers ``success: false`` (``payload`` is the
                response) or with an error status.
            TransportError: If the request did not get a response.
        """
        credentials = self._credentials(email, password)
        response = self.post(LOGIN_ENDPOINT, credentials)
        return self._accept_login(response, credentials["email"])

    async def authenticate_async(
        self, email: Optional[str] = None, password: Optional[str] = None
    ) -> Any:
        """Asynchronous version of `authenticate`."""
        credentials = self._credentials(email, password)
        response = await self.post_async(LOGIN_ENDPOINT, credentials)
        return self._accept_login(response, credentials["email"])


install_catalog(DirectusClient)
