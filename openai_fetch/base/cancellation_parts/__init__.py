"""Cancellation parts package (token and error type)."""

from .cancelled_error import CancelledError
from .cancellation_token import CancellationToken, combine_tokens

__all__ = ["CancellationToken", "CancelledError", "combine_tokens"]
