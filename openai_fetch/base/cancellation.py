"""Cooperative cancellation primitives (public API facade).

Purpose
-------
Expose the cancellation constructs via the canonical
``openai_fetch.base.cancellation`` import path while the concrete
implementations live under ``cancellation_parts``.

Notes
-----
- ``CancellationToken`` is passed as ``signal=`` to any client call. The
  transport checks it before each attempt, waits on it between retries, and
  stream readers stop when it fires.
- ``CancelledError`` is raised by non-streaming operations that observe a
  cancellation request.
"""

from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.cancellation_token import CancellationToken, combine_tokens

__all__ = ["CancellationToken", "CancelledError", "combine_tokens"]
