"""
openai_fetch base package

Building blocks shared by the client facade:

- errors: structured error taxonomy and classification
- cancellation: cooperative cancellation token
- logging: shared JSON logger helpers
- resilience: retry policy
- http: transport adapter, options, error normalizer, pooled clients
- streaming: SSE decoder and lazy chunk sequence
- multipart / dto: transcription form building
"""

from .cancellation import CancellationToken, CancelledError
from .errors import (
    APIError,
    ErrorCode,
    OpenAIFetchError,
    classify_exception,
)

__all__ = [
    "CancellationToken",
    "CancelledError",
    "APIError",
    "ErrorCode",
    "OpenAIFetchError",
    "classify_exception",
]
