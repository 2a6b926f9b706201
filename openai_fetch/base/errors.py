"""Unified error taxonomy public surface.

This module re-exports the implementations under
``openai_fetch.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.client_errors import (
    OpenAIFetchError,
    ConfigurationError,
    RequestValidationError,
    StreamDecodeError,
)
from .errors_parts.api_error import (
    APIError,
    BadRequestError,
    AuthenticationError,
    PermissionDeniedError,
    NotFoundError,
    ConflictError,
    UnprocessableEntityError,
    RateLimitError,
    InternalServerError,
    APIConnectionError,
    APIConnectionTimeoutError,
)
from .errors_parts.classification import classify_exception, status_to_code

__all__ = [
    "ErrorCode",
    "OpenAIFetchError",
    "ConfigurationError",
    "RequestValidationError",
    "StreamDecodeError",
    "APIError",
    "BadRequestError",
    "AuthenticationError",
    "PermissionDeniedError",
    "NotFoundError",
    "ConflictError",
    "UnprocessableEntityError",
    "RateLimitError",
    "InternalServerError",
    "APIConnectionError",
    "APIConnectionTimeoutError",
    "classify_exception",
    "status_to_code",
]
