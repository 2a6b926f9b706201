"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `openai_fetch.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .client_errors import (
    OpenAIFetchError,
    ConfigurationError,
    RequestValidationError,
    StreamDecodeError,
)
from .api_error import (
    APIError,
    APIConnectionError,
    APIConnectionTimeoutError,
)
from .classification import classify_exception, status_to_code

__all__ = [
    "ErrorCode",
    "OpenAIFetchError",
    "ConfigurationError",
    "RequestValidationError",
    "StreamDecodeError",
    "APIError",
    "APIConnectionError",
    "APIConnectionTimeoutError",
    "classify_exception",
    "status_to_code",
]
