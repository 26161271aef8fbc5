"""Errors - Exception taxonomy shared by every part of the client.

Nothing in the client retries. Every error below surfaces to the caller of
ApiClient.call_api unchanged.
"""

from __future__ import annotations

from typing import Any


class ApiClientError(Exception):
    """Base class for client errors."""


class ConfigError(ApiClientError):
    """Raised when configuration loading fails."""


class TransportError(ApiClientError):
    """Raised when a request fails before a response exists (connection, TLS, timeout)."""


class ApiError(ApiClientError):
    """Raised when the server answers with a non-2xx status.

    Carries everything needed to diagnose the failure without access to the
    transport: status code, response headers, raw response body, and the
    status message.
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        code: int | None = None,
        response_headers: dict[str, str] | None = None,
        response_body: str | None = None,
    ) -> None:
        self.code = code
        self.response_headers = response_headers or {}
        self.response_body = response_body
        self.message = message or "Error message not provided"
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.code is not None:
            parts.append(f"HTTP status code: {self.code}")
        if self.response_body:
            parts.append(f"Response body: {self.response_body}")
        return "\n".join(parts)


class UnsupportedContentTypeError(ApiClientError):
    """Raised when a response content type cannot be deserialized."""

    def __init__(self, content_type: str) -> None:
        self.content_type = content_type
        super().__init__(f"Content-Type is not supported: {content_type}")


class ResponseParseError(ApiClientError):
    """Raised when a response body is not valid JSON and the target type has no raw fallback."""


class DeserializationError(ApiClientError):
    """Raised when decoded data does not fit the requested type shape."""


class TypeDescriptorError(ApiClientError, ValueError):
    """Raised when a type descriptor string is malformed."""


class UnknownTypeError(ApiClientError, LookupError):
    """Raised when a named model type has no registered descriptor."""

    def __init__(self, type_id: str, known: Any = ()) -> None:
        self.type_id = type_id
        available = ", ".join(sorted(known))
        message = f"Unknown model type '{type_id}'"
        if available:
            message += f". Registered: {available}"
        super().__init__(message)


class AuthSettingError(ApiClientError, ValueError):
    """Raised when an auth setting is placed somewhere other than header or query."""
