"""openai_fetch package

Lightweight client for the OpenAI HTTP API (chat, completions, embeddings,
moderation, speech, transcription) built on ``httpx``.

Public API (re-exported):
    - Client: :class:`OpenAIClient`
    - Configuration: :class:`ClientConfig`, :class:`TransportOptions`,
      :class:`TransportHooks`, :class:`RetryPolicy`
    - Streaming: :class:`ChunkStream`
    - Uploads: :class:`FileUpload`
    - Cancellation: :class:`CancellationToken`, :class:`CancelledError`
    - Errors: :class:`OpenAIFetchError` and subclasses, :class:`ErrorCode`
    - Logging: :func:`configure_logger`

Example::

    from openai_fetch import OpenAIClient

    client = OpenAIClient()
    for chunk in client.stream_chat_completion(
        {"model": "gpt-4o-mini", "messages": [{"role": "user", "content": "Hi"}]}
    ):
        print(chunk["choices"][0]["delta"].get("content", ""), end="")
"""

from .base.cancellation import CancellationToken, CancelledError
from .base.dto import FileUpload
from .base.errors import (
    APIConnectionError,
    APIConnectionTimeoutError,
    APIError,
    AuthenticationError,
    BadRequestError,
    ConfigurationError,
    ConflictError,
    ErrorCode,
    InternalServerError,
    NotFoundError,
    OpenAIFetchError,
    PermissionDeniedError,
    RateLimitError,
    RequestValidationError,
    StreamDecodeError,
    UnprocessableEntityError,
    classify_exception,
)
from .base.http import TransportHooks, TransportOptions, TransportResponse
from .base.logging import configure_logger
from .base.resilience.retry import RetryPolicy
from .base.streaming import ChunkStream
from .client import OpenAIClient
from .config import ClientConfig

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "OpenAIClient",
    "ClientConfig",
    "TransportOptions",
    "TransportHooks",
    "TransportResponse",
    "RetryPolicy",
    "ChunkStream",
    "FileUpload",
    "CancellationToken",
    "CancelledError",
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
    "ErrorCode",
    "classify_exception",
    "configure_logger",
]
