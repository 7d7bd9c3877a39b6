"""
Custom exceptions for the directusclient package.

Every error a DirectusClient call can raise derives from DirectusError. Failures
reported by httpx are converted here, so callers never see a bare httpx exception:
HTTP error statuses become RemoteRejection (carrying the remote error payload) and
network failures become TransportError (carrying the original httpx error).
"""

import functools
import inspect
import json
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Optional,
    ParamSpec,
    Type,
    TypeVar,
    Union,
    cast,
    overload,
)

import httpx

P = ParamSpec("P")
T = TypeVar("T")


# Base Directus exceptions
class DirectusError(Exception):
    """Base exception for all Directus-related errors."""

    pass


class DirectusClientClosed(DirectusError):
    """
    Raised when an operation is attempted on a closed DirectusClient.
    """

    def __init__(self, message: str = "The DirectusClient is closed") -> None:
        super().__init__(message)


class ConfigError(DirectusError, ValueError):
    """Raised when the client is constructed without a usable base URL."""


class MissingParameterError(DirectusError, TypeError):
    """
    Raised when a required argument of a catalog operation is omitted.

    Raised before any network I/O takes place.
    """

    def __init__(self, parameter: str) -> None:
        super().__init__(f"Missing parameter [{parameter}]")
        self.parameter = parameter


class TypeMismatchError(DirectusError, TypeError):
    """
    Raised when a bulk operation receives a payload that is not a list of rows.
    """

    def __init__(self, parameter: str, value: Any) -> None:
        super().__init__(
            f"Parameter {parameter} should be an array of objects, got {type(value).__name__}"
        )
        self.parameter = parameter
        self.value = value


# Remote rejections
class RemoteRejection(DirectusError):
    """
    Raised when Directus answers with an error.

    This covers both HTTP error statuses and the soft ``{"success": false}``
    envelope returned by the login endpoint. ``payload`` holds the remote error
    body exactly as Directus sent it (parsed JSON, raw text, or None for an empty
    body). ``response`` is None for soft failures.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        payload: Any = None,
        response: Optional[httpx.Response] = None,
    ) -> None:
        self.payload = payload
        self.response = response
        self.message = message or _get_error_detail(payload)
        super().__init__(self.message)

    @property
    def status_code(self) -> Optional[int]:
        return self.response.status_code if self.response is not None else None

    def __str__(self) -> str:
        if self.status_code is None:
            return f"Directus rejected the request: {self.message}"
        return f"Directus rejected the request: {self.message} (HTTP {self.status_code})"


class DirectusBadRequestError(RemoteRejection):
    """Raised for 400 bad request errors."""

    def __str__(self) -> str:
        return f"Directus bad request: {self.message}"


class DirectusAuthenticationError(RemoteRejection):
    """
    Raised for 401 errors.
    Invalid credentials or an expired token; the caller may re-authenticate.
    """

    def __str__(self) -> str:
        return f"Directus authentication failed: {self.message}"


class DirectusPermissionError(RemoteRejection):
    """Raised for 403 errors. The token lacks the privileges for the operation."""

    def __str__(self) -> str:
        return f"Directus permission denied: {self.message}"


class DirectusNotFoundError(RemoteRejection):
    """Raised for 404 errors. The table, row, file or endpoint does not exist."""

    def __str__(self) -> str:
        return f"Directus resource not found: {self.message}"


class DirectusConflictError(RemoteRejection):
    """Raised for 409 errors, e.g. duplicate primary keys."""

    def __str__(self) -> str:
        return f"Directus data conflict: {self.message}"


class DirectusValidationError(RemoteRejection):
    """Raised for 422 errors. The payload failed Directus validation."""

    def __str__(self) -> str:
        return f"Directus validation error: {self.message}"


class DirectusRateLimitError(RemoteRejection):
    """Raised for 429 errors."""

    def __str__(self) -> str:
        return f"Directus rate limit exceeded: {self.message}"


class DirectusServerError(RemoteRejection):
    """
    Base class for 5xx errors.
    Indicates problems within the Directus instance itself.
    """

    def __str__(self) -> str:
        return f"Directus server error: {self.message} (HTTP {self.status_code})"


class DirectusServiceUnavailableError(DirectusServerError):
    """Raised for 503 errors. The instance is down for maintenance or overloaded."""

    def __str__(self) -> str:
        return f"Directus service unavailable: {self.message}"


# Transport errors
class TransportError(DirectusError, httpx.RequestError):
    """
    Raised when the request never produced an HTTP response.

    ``original`` is the raw httpx exception (also chained as ``__cause__``).
    """

    def __init__(
        self,
        message: str,
        *,
        request: Optional[httpx.Request] = None,
        original: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self._request = request
        self.original = original

    def __str__(self) -> str:
        return f"Directus transport error: {self.message}"


class DirectusUnavailableError(TransportError):
    """
    Raised when the Directus host cannot be reached.
    DNS resolution failures, connection refused, TLS handshake failures.
    """

    def __str__(self) -> str:
        return f"Directus unavailable: {self.message}"


class DirectusTimeoutError(TransportError, httpx.TimeoutException):
    """Raised when a request to Directus times out."""

    def __str__(self) -> str:
        return f"Directus request timeout: {self.message}"


class DirectusProtocolError(TransportError):
    """Raised for HTTP protocol-level errors, e.g. a dropped keep-alive connection."""

    def __str__(self) -> str:
        return f"Directus protocol error: {self.message}"


# Exception mapping dictionaries
_HTTP_STATUS_EXCEPTIONS: Dict[int, Type[RemoteRejection]] = {
    400: DirectusBadRequestError,
    401: DirectusAuthenticationError,
    403: DirectusPermissionError,
    404: DirectusNotFoundError,
    409: DirectusConflictError,
    422: DirectusValidationError,
    429: DirectusRateLimitError,
    503: DirectusServiceUnavailableError,
}

# Checked in order; the first matching base class wins
_TRANSPORT_EXCEPTIONS: Dict[Type[httpx.RequestError], Type[TransportError]] = {
    httpx.TimeoutException: DirectusTimeoutError,
    httpx.ConnectError: DirectusUnavailableError,
    httpx.RemoteProtocolError: DirectusProtocolError,
    httpx.LocalProtocolError: DirectusProtocolError,
}


def _get_error_detail(payload: Any) -> str:
    """Extract a human readable message from a Directus error payload."""
    if payload is None or payload == "":
        return "No error details in response"
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if payload.get("message"):
            return str(payload["message"])
    text = payload if isinstance(payload, str) else json.dumps(payload, default=str)
    # Limit length to prevent extremely long error messages
    return text[:500] + "..." if len(text) > 500 else text


def _get_error_payload(response: Optional[httpx.Response]) -> Any:
    """Return the remote error body: parsed JSON, raw text, or None when empty."""
    if response is None:
        return None
    try:
        text = response.text
    except (httpx.ResponseNotRead, UnicodeDecodeError):
        return None
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


def _create_directus_exception(
    original_error: Union[httpx.RequestError, httpx.HTTPStatusError],
) -> DirectusError:
    """Create the appropriate Directus exception based on the original httpx error."""

    # Handle HTTP status errors (have response)
    if isinstance(original_error, httpx.HTTPStatusError):
        response = original_error.response
        status_code = response.status_code
        exception_class = _HTTP_STATUS_EXCEPTIONS.get(status_code)
        if exception_class is None:
            exception_class = DirectusServerError if status_code >= 500 else RemoteRejection
        return exception_class(payload=_get_error_payload(response), response=response)

    # Handle transport errors (no response)
    if isinstance(original_error, httpx.RequestError):
        try:
            request: Optional[httpx.Request] = original_error.request
        except RuntimeError:
            request = None
        transport_class = TransportError
        for error_type, mapped_class in _TRANSPORT_EXCEPTIONS.items():
            if isinstance(original_error, error_type):
                transport_class = mapped_class
                break
        return transport_class(str(original_error), request=request, original=original_error)

    # Fallback for anything else httpx might raise
    return DirectusError(f"Unexpected Directus error: {original_error}")


@overload
def directus_errors(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
    ...  # pragma: no cover


@overload
def directus_errors(func: Callable[P, T]) -> Callable[P, T]:
    ...  # pragma: no cover


def directus_errors(func: Callable[P, Any]) -> Callable[P, Any]:
    """
    Decorator that converts httpx exceptions to Directus-specific exceptions.

    httpx.HTTPStatusError becomes a RemoteRejection carrying the response body,
    httpx.RequestError becomes a TransportError carrying the original error.
    Exceptions that are already DirectusErrors pass through untouched.

    Works with both synchronous and asynchronous functions.

    Usage:
        >>> @directus_errors
        ... def get_row(self, table: str, row_id: int):
        ...     response = self.httpx_client.get(f"{self.versioned_url}tables/{table}/rows/{row_id}")
        ...     response.raise_for_status()
        ...     return response.json()
    """
    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except DirectusError:
                raise
            except (httpx.RequestError, httpx.HTTPStatusError) as e:
                directus_exception = _create_directus_exception(e)
                raise directus_exception from e

        return cast(Callable[P, Awaitable[T]], async_wrapper)
    else:

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except DirectusError:
                raise
            except (httpx.RequestError, httpx.HTTPStatusError) as e:
                directus_exception = _create_directus_exception(e)
                raise directus_exception from e

        return cast(Callable[P, T], sync_wrapper)
