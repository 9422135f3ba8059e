"""Structured exception classes for the BigCommerce client."""

import json
from typing import Any, Dict, Optional


class BigcommerceError(Exception):
    """Base exception for all BigCommerce client errors.

    This exception serves as the parent class for every error raised
    by the client, providing a consistent interface for error
    handling in calling code.

    :param message: Human-readable error message
    :param code: Optional error code for programmatic handling
    :param details: Optional dictionary containing additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the exception with message, code, and details."""
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format.

        :return: Dictionary containing error code, message, and details
        """
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        """Convert exception to JSON string.

        :return: JSON-encoded string representation of the exception
        """
        return json.dumps(self.to_dict(), default=str)


class TransportError(BigcommerceError):
    """Raised when the HTTP exchange itself fails.

    Covers DNS resolution failures, refused connections, TLS errors,
    timeouts and redirect loops. These are never retried.

    :param message: Message reported by the transport layer
    :param errno: Name of the underlying transport error
    """

    def __init__(self, message: str, errno: Optional[str] = None):
        """Initialize transport error with message and native error name."""
        details = {}
        if errno:
            details["errno"] = errno
        super().__init__(message=message, code="TRANSPORT_ERROR", details=details)
        self.errno = errno


class APIError(BigcommerceError):
    """Raised when the API answers with an error.

    This exception is raised for HTTP statuses of 400 and above and for
    decoded bodies carrying an ``error`` field, whatever the status. The
    status message is the exception message and the status code is
    exposed as ``status_code``.

    :param method: HTTP method of the failed call
    :param path: Request path of the failed call
    :param params: Parameters sent with the failed call
    :param response_headers: Parsed response headers, including the
                             synthesized ``http_status_code`` and
                             ``http_status_message`` keys
    :param response: Decoded response body
    """

    def __init__(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]],
        response_headers: Dict[str, Any],
        response: Any,
    ):
        """Initialize API error from the request and parsed response."""
        self.method = method
        self.path = path
        self.params = params or {}
        self.response_headers = response_headers
        self.response = response
        self.status_code: Optional[int] = response_headers.get("http_status_code")
        self.status_message: str = response_headers.get("http_status_message", "")
        super().__init__(
            message=self.status_message or "API error",
            code="API_ERROR",
            details={
                "method": method,
                "path": path,
                "status_code": self.status_code,
                "response": response,
            },
        )


class RateLimitError(APIError):
    """Raised when a call is still throttled after the automatic retries.

    :param retry_after: Seconds the API asked the client to wait
    """

    def __init__(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]],
        response_headers: Dict[str, Any],
        response: Any,
        retry_after: Optional[float] = None,
    ):
        """Initialize rate limit error with the last throttled response."""
        super().__init__(method, path, params, response_headers, response)
        self.code = "RATE_LIMIT_ERROR"
        self.retry_after = retry_after
        if retry_after is not None:
            self.details["retry_after"] = retry_after


class ConfigurationError(BigcommerceError):
    """Raised for configuration-related errors.

    This exception is raised when required configuration settings are
    missing or invalid, e.g. building a client without credentials.

    :param message: Description of the configuration error
    :param setting: Optional name of the problematic setting
    """

    def __init__(self, message: str, setting: Optional[str] = None):
        """Initialize configuration error with message and optional setting."""
        details = {}
        if setting:
            details["setting"] = setting
        super().__init__(message=message, code="CONFIGURATION_ERROR", details=details)
