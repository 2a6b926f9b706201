"""Breaking blocked socket reads when a cancellation token fires.

Closing an ``httpx.Response`` from another thread does not interrupt a
``recv`` already blocked on its socket. Shutting the socket down does: the
blocked read returns immediately and httpx raises a read error, which the
caller maps to cancellation.

The socket comes from httpcore's network stream, found either on a
response's ``network_stream`` extension or, before any response exists, via
the ``trace`` request extension reporting a freshly opened connection.
"""
from __future__ import annotations

import contextlib
import socket
import threading
from typing import Any, Callable, Dict, Optional

import httpx

_CONNECT_EVENTS = frozenset(("connection.connect_tcp.complete", "connection.start_tls.complete"))

TraceHook = Callable[[str, Dict[str, Any]], None]


def shutdown_network_stream(stream: Any) -> None:
    """Shut down the socket behind an httpcore network stream (best effort)."""
    if stream is None:
        return
    with contextlib.suppress(Exception):
        sock = stream.get_extra_info("socket")
        if sock is not None:
            sock.shutdown(socket.SHUT_RDWR)


def abort_response(response: httpx.Response) -> None:
    """Unblock any pending read on ``response`` and close it."""
    shutdown_network_stream(response.extensions.get("network_stream"))
    with contextlib.suppress(Exception):
        response.close()


class ConnectionAborter:
    """Tracks the connection used by one attempt so ``abort`` can break it.

    ``trace`` is installed as the request's ``trace`` extension (chaining any
    hook already there); ``attach`` records the stream of the response once
    headers arrive. ``abort`` may run before either: the stream is then shut
    down as soon as it is seen.
    """

    def __init__(self) -> None:
        self._chained: Optional[TraceHook] = None
        self._lock = threading.Lock()
        self._stream: Any = None
        self._aborted = False

    def install(self, request: httpx.Request) -> None:
        self._chained = request.extensions.get("trace")
        request.extensions["trace"] = self.trace

    def trace(self, event: str, info: Dict[str, Any]) -> None:
        if self._chained is not None:
            self._chained(event, info)
        if event in _CONNECT_EVENTS:
            self._track(info.get("return_value"))

    def attach(self, response: httpx.Response) -> None:
        self._track(response.extensions.get("network_stream"))

    def _track(self, stream: Any) -> None:
        if stream is None:
            return
        with self._lock:
            self._stream = stream
            aborted = self._aborted
        if aborted:
            shutdown_network_stream(stream)

    def abort(self) -> None:
        with self._lock:
            self._aborted = True
            stream = self._stream
        shutdown_network_stream(stream)


__all__ = ["ConnectionAborter", "abort_response", "shutdown_network_stream"]
