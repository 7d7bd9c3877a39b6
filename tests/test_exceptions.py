"""Tests for the exceptions module."""

import inspect
import pytest
from unittest.mock import Mock

import httpx

from directusclient.exceptions import (
    # Base exceptions
    DirectusError,
    DirectusClientClosed,
    # Caller errors
    ConfigError,
    MissingParameterError,
    TypeMismatchError,
    # Remote rejections
    RemoteRejection,
    DirectusBadRequestError,
    DirectusAuthenticationError,
    DirectusPermissionError,
    DirectusNotFoundError,
    DirectusConflictError,
    DirectusValidationError,
    DirectusRateLimitError,
    DirectusServerError,
    DirectusServiceUnavailableError,
    # Transport errors
    TransportError,
    DirectusUnavailableError,
    DirectusTimeoutError,
    DirectusProtocolError,
    # Decorator
    directus_errors,
    _create_directus_exception,
    _get_error_detail,
    _get_error_payload,
)


def make_response(status_code, **kwargs):
    request = httpx.Request("GET", "https://cms.example.org/api/1.1/tables/articles/rows")
    return httpx.Response(status_code, request=request, **kwargs)


def make_status_error(response):
    return httpx.HTTPStatusError("error", request=response.request, response=response)


class TestDirectusClientClosed:
    """Test DirectusClientClosed exception."""

    def test_default_message(self):
        exc = DirectusClientClosed()
        assert str(exc) == "The DirectusClient is closed"

    def test_custom_message(self):
        exc = DirectusClientClosed("Custom message")
        assert str(exc) == "Custom message"


class TestCallerErrors:
    """Test errors raised before any request is made."""

    def test_config_error_is_value_error(self):
        exc = ConfigError("No Directus URL provided")
        assert isinstance(exc, DirectusError)
        assert isinstance(exc, ValueError)

    def test_missing_parameter_names_parameter(self):
        exc = MissingParameterError("table")
        assert exc.parameter == "table"
        assert str(exc) == "Missing parameter [table]"
        assert isinstance(exc, TypeError)

    def test_type_mismatch_describes_value(self):
        exc = TypeMismatchError("data", {"not": "an array"})
        assert exc.parameter == "data"
        assert exc.value == {"not": "an array"}
        assert "should be an array of objects" in str(exc)
        assert "dict" in str(exc)


class TestRemoteRejection:
    """Test RemoteRejection and its status subclasses."""

    def test_soft_failure_has_no_response(self):
        payload = {"success": False, "error": {"code": 100, "message": "Invalid credentials"}}
        exc = RemoteRejection(payload=payload)
        assert exc.payload is payload
        assert exc.response is None
        assert exc.status_code is None
        assert exc.message == "Invalid credentials"
        assert str(exc) == "Directus rejected the request: Invalid credentials"

    def test_status_code_from_response(self):
        response = make_response(418, json={"error": "teapot"})
        exc = RemoteRejection(payload={"error": "teapot"}, response=response)
        assert exc.status_code == 418
        assert str(exc) == "Directus rejected the request: teapot (HTTP 418)"

    def test_explicit_message_wins(self):
        exc = RemoteRejection("custom", payload={"error": {"message": "remote"}})
        assert exc.message == "custom"

    @pytest.mark.parametrize(
        "exception_class, prefix",
        [
            (DirectusBadRequestError, "Directus bad request"),
            (DirectusAuthenticationError, "Directus authentication failed"),
            (DirectusPermissionError, "Directus permission denied"),
            (DirectusNotFoundError, "Directus resource not found"),
            (DirectusConflictError, "Directus data conflict"),
            (DirectusValidationError, "Directus validation error"),
            (DirectusRateLimitError, "Directus rate limit exceeded"),
            (DirectusServiceUnavailableError, "Directus service unavailable"),
        ],
    )
    def test_subclass_messages(self, exception_class, prefix):
        exc = exception_class(payload={"error": {"message": "boom"}})
        assert isinstance(exc, RemoteRejection)
        assert str(exc) == f"{prefix}: boom"

    def test_server_error_includes_status(self):
        response = make_response(500, text="oops")
        exc = DirectusServerError(payload="oops", response=response)
        assert str(exc) == "Directus server error: oops (HTTP 500)"


class TestTransportErrors:
    """Test transport-related exceptions."""

    def test_transport_error_keeps_original(self):
        request = Mock(spec=httpx.Request)
        original = httpx.ConnectError("Connection refused", request=request)
        exc = TransportError("Connection refused", request=request, original=original)
        assert exc.message == "Connection refused"
        assert exc.request is request
        assert exc.original is original
        assert str(exc) == "Directus transport error: Connection refused"

    def test_subclass_messages(self):
        request = Mock(spec=httpx.Request)
        assert str(DirectusUnavailableError("down", request=request)) == "Directus unavailable: down"
        assert str(DirectusTimeoutError("slow", request=request)) == "Directus request timeout: slow"
        assert str(DirectusProtocolError("bad", request=request)) == "Directus protocol error: bad"

    def test_inheritance(self):
        request = Mock(spec=httpx.Request)
        exc = DirectusTimeoutError("Test", request=request)
        assert isinstance(exc, TransportError)
        assert isinstance(exc, httpx.TimeoutException)
        assert isinstance(exc, httpx.RequestError)
        assert isinstance(exc, DirectusError)


class TestErrorDetailExtraction:
    """Test error detail extraction from payloads and responses."""

    def test_envelope_error_message(self):
        payload = {"success": False, "error": {"message": "Table not found"}}
        assert _get_error_detail(payload) == "Table not found"

    def test_string_error(self):
        assert _get_error_detail({"error": "nope"}) == "nope"

    def test_top_level_message(self):
        assert _get_error_detail({"message": "Forbidden"}) == "Forbidden"

    def test_plain_text(self):
        assert _get_error_detail("Bad Gateway") == "Bad Gateway"

    def test_empty(self):
        assert _get_error_detail(None) == "No error details in response"
        assert _get_error_detail("") == "No error details in response"

    def test_unrecognized_json_is_dumped(self):
        assert _get_error_detail({"code": 7}) == '{"code": 7}'

    def test_long_text(self):
        result = _get_error_detail("x" * 600)
        assert len(result) == 503  # 500 + "..."
        assert result.endswith("...")

    def test_payload_json(self):
        response = make_response(404, json={"success": False, "error": {"message": "gone"}})
        assert _get_error_payload(response) == {"success": False, "error": {"message": "gone"}}

    def test_payload_text(self):
        response = make_response(502, text="<html>Bad Gateway</html>")
        assert _get_error_payload(response) == "<html>Bad Gateway</html>"

    def test_payload_empty(self):
        assert _get_error_payload(make_response(500)) is None
        assert _get_error_payload(None) is None


class TestCreateDirectusException:
    """Test exception creation from httpx errors."""

    def setup_method(self):
        self.request = Mock(spec=httpx.Request)

    def test_create_connection_error(self):
        original_error = httpx.ConnectError("Connection refused", request=self.request)
        directus_error = _create_directus_exception(original_error)
        assert isinstance(directus_error, DirectusUnavailableError)
        assert directus_error.request == self.request
        assert directus_error.original is original_error

    def test_create_timeout_error(self):
        original_error = httpx.ReadTimeout("Timeout", request=self.request)
        directus_error = _create_directus_exception(original_error)
        assert isinstance(directus_error, DirectusTimeoutError)

    def test_create_protocol_error(self):
        original_error = httpx.RemoteProtocolError("Protocol error", request=self.request)
        directus_error = _create_directus_exception(original_error)
        assert isinstance(directus_error, DirectusProtocolError)

    def test_create_unknown_transport_error(self):
        class CustomRequestError(httpx.RequestError):
            pass

        original_error = CustomRequestError("Unknown error", request=self.request)
        directus_error = _create_directus_exception(original_error)
        assert type(directus_error) is TransportError
        assert directus_error.original is original_error

    @pytest.mark.parametrize(
        "status_code, exception_class",
        [
            (400, DirectusBadRequestError),
            (401, DirectusAuthenticationError),
            (403, DirectusPermissionError),
            (404, DirectusNotFoundError),
            (409, DirectusConflictError),
            (422, DirectusValidationError),
            (429, DirectusRateLimitError),
            (500, DirectusServerError),
            (503, DirectusServiceUnavailableError),
            (599, DirectusServerError),
            (418, RemoteRejection),
        ],
    )
    def test_create_http_status_errors(self, status_code, exception_class):
        body = {"success": False, "error": {"message": "failed"}}
        response = make_response(status_code, json=body)
        directus_error = _create_directus_exception(make_status_error(response))
        assert type(directus_error) is exception_class
        assert directus_error.payload == body
        assert directus_error.response is response

    def test_create_http_status_error_without_body(self):
        response = make_response(500)
        directus_error = _create_directus_exception(make_status_error(response))
        assert isinstance(directus_error, DirectusServerError)
        assert directus_error.payload is None

    def test_create_unexpected_error(self):
        class WeirdError(Exception):
            pass

        directus_err = _create_directus_exception(WeirdError("odd"))  # type: ignore[arg-type]
        assert type(directus_err) is DirectusError
        assert "Unexpected Directus error" in str(directus_err)


class TestDirectusErrorsDecorator:
    """Test the directus_errors decorator."""

    def test_sync_function_success(self):
        @directus_errors
        def test_function():
            return "success"

        assert test_function() == "success"

    def test_sync_function_http_error(self):
        response = make_response(404, json={"error": {"message": "Not found"}})

        @directus_errors
        def test_function():
            raise make_status_error(response)

        with pytest.raises(DirectusNotFoundError) as exc_info:
            test_function()

        assert exc_info.value.payload == {"error": {"message": "Not found"}}
        assert exc_info.value.__cause__.__class__ == httpx.HTTPStatusError

    def test_sync_function_connection_error(self):
        request = Mock(spec=httpx.Request)

        @directus_errors
        def test_function():
            raise httpx.ConnectError("Connection failed", request=request)

        with pytest.raises(DirectusUnavailableError) as exc_info:
            test_function()

        assert exc_info.value.request == request
        assert exc_info.value.__cause__.__class__ == httpx.ConnectError

    def test_sync_function_preserves_other_exceptions(self):
        @directus_errors
        def test_function():
            raise ValueError("Some other error")

        with pytest.raises(ValueError):
            test_function()

    def test_directus_errors_pass_through(self):
        @directus_errors
        def test_function():
            raise DirectusClientClosed()

        with pytest.raises(DirectusClientClosed):
            test_function()

    @pytest.mark.asyncio
    async def test_async_function_success(self):
        @directus_errors
        async def test_function():
            return "async success"

        assert await test_function() == "async success"

    @pytest.mark.asyncio
    async def test_async_function_http_error(self):
        response = make_response(401, json={"error": {"message": "Token expired"}})

        @directus_errors
        async def test_function():
            raise make_status_error(response)

        with pytest.raises(DirectusAuthenticationError) as exc_info:
            await test_function()

        assert exc_info.value.message == "Token expired"
        assert exc_info.value.__cause__.__class__ == httpx.HTTPStatusError

    @pytest.mark.asyncio
    async def test_async_function_connection_error(self):
        request = Mock(spec=httpx.Request)

        @directus_errors
        async def test_function():
            raise httpx.TimeoutException("Timeout", request=request)

        with pytest.raises(DirectusTimeoutError) as exc_info:
            await test_function()

        assert exc_info.value.original.__class__ == httpx.TimeoutException

    def test_decorator_preserves_function_metadata(self):
        @directus_errors
        def test_function():
            """Test docstring."""
            return "test"

        assert test_function.__name__ == "test_function"
        assert test_function.__doc__ == "Test docstring."

    def test_decorator_preserves_async_function_metadata(self):
        @directus_errors
        async def async_test_function():
            """Async test docstring."""
            return "async test"

        assert async_test_function.__name__ == "async_test_function"
        assert inspect.iscoroutinefunction(async_test_function)
