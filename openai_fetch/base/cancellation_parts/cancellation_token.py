"""Cooperative cancellation token implementation.

Exposes the ``CancellationToken`` class used by the transport and stream
readers to stop in-flight work early. Besides polling (``cancelled`` /
``raise_if_cancelled``), holders can block on ``wait`` or register a callback
that fires once when cancellation is requested.
"""

from __future__ import annotations

from threading import Event, Lock
from typing import Callable, List

from .cancelled_error import CancelledError


class CancellationToken:
    """A cooperative cancellation token with optional cascading semantics.

    Thread-safe. Child tokens inherit cancellation when the parent is
    cancelled.
    """

    def __init__(self, *, parent: "CancellationToken | None" = None) -> None:
        self._cancelled = False
        self._reason: str | None = None
        self._lock = Lock()
        self._event = Event()
        self._children: List[CancellationToken] = []
        self._callbacks: List[Callable[[], None]] = []
        if parent is not None:
            parent.link_child(self)

    @property
    def cancelled(self) -> bool:  # noqa: D401 - short form
        """Whether cancellation has been requested."""
        return self._cancelled

    @property
    def reason(self) -> str | None:  # noqa: D401 - short form
        """Reason string supplied at cancel time (if any)."""
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cooperative cancellation, run callbacks, cascade to children."""
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            self._reason = reason
            children = list(self._children)
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        self._event.set()
        for callback in callbacks:
            callback()
        for child in children:
            child.cancel(reason)

    def link_child(self, token: "CancellationToken") -> "CancellationToken":
        """Link a child token so parent cancellation cascades (returns child)."""
        with self._lock:
            self._children.append(token)
            should_cancel = self._cancelled
            reason = self._reason
        if should_cancel:
            token.cancel(reason)
        return token

    def add_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run ``callback`` once on cancellation (immediately if already cancelled).

        Returns a zero-argument function that unregisters the callback.
        """
        with self._lock:
            run_now = self._cancelled
            if not run_now:
                self._callbacks.append(callback)
        if run_now:
            callback()

        def _remove() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return _remove

    def wait(self, timeout: float | None = None) -> bool:
        """Block up to ``timeout`` seconds; return True if cancelled meanwhile."""
        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        """Raise ``CancelledError`` if token is cancelled."""
        if self._cancelled:
            raise CancelledError(self._reason or "operation cancelled")

    def child(self) -> "CancellationToken":
        """Create and link a child token (shortcut)."""
        return CancellationToken(parent=self)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return (
            f"CancellationToken(cancelled={self._cancelled}, "
            f"reason={self._reason!r}, children={len(self._children)})"
        )


def combine_tokens(*tokens: "CancellationToken | None") -> "CancellationToken | None":
    """Return a token cancelled when any of ``tokens`` is.

    ``None`` entries and repeats are ignored. A single distinct token is
    returned as is; several yield a child linked under every one of them.
    """
    distinct: List[CancellationToken] = []
    for token in tokens:
        if token is not None and all(token is not seen for seen in distinct):
            distinct.append(token)
    if not distinct:
        return None
    if len(distinct) == 1:
        return distinct[0]
    combined = distinct[0].child()
    for token in distinct[1:]:
        token.link_child(combined)
    return combined


__all__ = ["CancellationToken", "combine_tokens"]
