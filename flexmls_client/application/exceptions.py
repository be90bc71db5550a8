"""
Exceptions raised by the flexmls client.

This module defines a hierarchy of custom exceptions so callers can tell
configuration problems, malformed server responses and API-level failures
apart without inspecting status codes by hand.
"""

from typing import Any, Mapping, Optional, Union


class FlexmlsError(Exception):
    """Base exception for all client errors."""
    pass


# --- Configuration Errors ---

class ConfigurationError(FlexmlsError):
    """Raised for errors related to client configuration."""
    pass


# --- Response Errors ---

class InvalidResponse(FlexmlsError):
    """Raised when the server response is not a well-formed envelope."""
    pass


class ClientError(FlexmlsError):
    """
    Raised when the API reports a failed request.

    Carries the API-level ``code`` (e.g. 1020 for an expired session) and
    the HTTP ``status`` of the response. Can be built from a plain message
    or from a mapping with ``message``, ``code`` and ``status`` keys:

        ClientError("boom")
        ClientError({"message": "boom", "code": 1020, "status": 401})
    """

    def __init__(
        self,
        options: Union[str, Mapping[str, Any], None] = None,
        *,
        code: Optional[int] = None,
        status: Optional[int] = None,
    ):
        if isinstance(options, Mapping):
            message = options.get("message")
            code = options.get("code", code)
            status = options.get("status", status)
        else:
            message = None if options is None else str(options)

        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status

    def __str__(self) -> str:
        return self.message or ""

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(message={self.message!r}, "
            f"code={self.code!r}, status={self.status!r})"
        )


class NotFound(ClientError):
    """The requested resource does not exist (HTTP 404)."""
    pass


class PermissionDenied(ClientError):
    """Authentication failed or the session token is no longer valid."""
    pass


class NotAllowed(ClientError):
    """The HTTP method is not supported on the resource (HTTP 405)."""
    pass


class BadResourceRequest(ClientError):
    """The request was rejected as malformed (HTTP 400)."""
    pass
