"""
Client-side exception types raised before or after the HTTP exchange.

These cover failures that never reach the provider (configuration and request
validation) and failures decoding a streamed body. They share the
:class:`OpenAIFetchError` root with :class:`APIError` so callers can catch the
whole family with one clause.
"""
from __future__ import annotations


class OpenAIFetchError(Exception):
    """Root of every exception raised by this package."""


class ConfigurationError(OpenAIFetchError):
    """Raised at client construction when required settings are missing."""


class RequestValidationError(OpenAIFetchError, ValueError):
    """Raised when request parameters are rejected before any network call."""


class StreamDecodeError(OpenAIFetchError):
    """Raised when a streamed frame carries a payload that is not valid JSON.

    Attributes:
        payload: The offending frame payload (truncated for readability).
    """

    def __init__(self, message: str, payload: str | None = None) -> None:
        super().__init__(message)
        self.payload = payload


__all__ = [
    "OpenAIFetchError",
    "ConfigurationError",
    "RequestValidationError",
    "StreamDecodeError",
]
