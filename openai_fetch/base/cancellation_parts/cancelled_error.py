"""Exception raised when a request is abandoned through its cancellation token."""

from __future__ import annotations


class CancelledError(RuntimeError):
    """The caller's ``CancellationToken`` fired before a response was returned.

    Only request/response calls raise this. A cancelled ``ChunkStream`` ends
    like a closed stream instead.
    """


__all__ = ["CancelledError"]
