"""Lazy, single-pass sequence of decoded stream chunks.

``ChunkStream`` pulls bytes from a streamed :class:`TransportResponse` only
when the consumer asks for the next value, feeds them through a
:class:`StreamChunkDecoder`, and hands out mapped values in order.

Termination:
    - ``[DONE]`` frame or end of the byte stream: iteration stops.
    - Decode or mid-stream provider error: raised to the consumer; the
      response is closed.
    - Cancellation token fired: iteration stops without raising. A callback
      registered on the token shuts down the socket and closes the response,
      so a read blocked in another thread returns at once.

The sequence mirrors a network stream and cannot be restarted; iterating an
exhausted ``ChunkStream`` again yields nothing.
"""
from __future__ import annotations

import contextlib
import logging
from collections import deque
from typing import Any, Callable, Deque, Generic, Iterator, Optional, TypeVar

import httpx

from ..http.abort import abort_response
from ..http.normalizer import normalize_error
from ..http.response import TransportResponse
from ..logging import LogContext, get_logger, log_event
from .decoder import StreamChunkDecoder

T = TypeVar("T")


def _identity(value: Any) -> Any:
    return value


class ChunkStream(Generic[T]):
    """Iterator over mapped chunks of one streaming response.

    Parameters:
        response: Streamed response whose body has not been read.
        mapper: Applied to each decoded JSON value (identity by default).
        ctx: Log context of the originating call.
    """

    def __init__(
        self,
        response: TransportResponse,
        mapper: Callable[[Any], T] = _identity,
        *,
        ctx: Optional[LogContext] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._response = response
        self._decoder: StreamChunkDecoder[T] = StreamChunkDecoder(mapper, headers=response.headers)
        self._pending: Deque[T] = deque()
        self._bytes: Optional[Iterator[bytes]] = None
        self._signal = response.signal
        self._ctx = ctx or LogContext()
        self._logger = logger or get_logger("openai_fetch.stream")
        self._closed = False
        self._emitted = 0
        self._unregister = self._signal.add_callback(self._on_cancel) if self._signal is not None else None
        log_event(self._logger, "stream.start", self._ctx, level=logging.DEBUG, status=response.status)

    @property
    def response(self) -> TransportResponse:
        return self._response

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> "ChunkStream[T]":
        return self

    def __next__(self) -> T:
        while True:
            if self._closed:
                raise StopIteration
            if self._signal is not None and self._signal.cancelled:
                self._finish("cancelled")
                continue
            if self._pending:
                self._emitted += 1
                return self._pending.popleft()
            if self._decoder.terminated:
                error = self._decoder.take_error()
                if error is not None:
                    self.close()
                    raise error
                self._finish("done")
                continue
            chunk = self._read_chunk()
            if chunk is None:
                if self._signal is not None and self._signal.cancelled:
                    self._finish("cancelled")
                    continue
                dropped = self._decoder.finish()
                if dropped:
                    log_event(self._logger, "stream.discard_partial", self._ctx, level=logging.DEBUG, bytes=dropped)
                self._finish("eof")
                continue
            try:
                self._pending.extend(self._decoder.feed(chunk))
            except Exception:
                self.close()
                raise

    def _read_chunk(self) -> Optional[bytes]:
        if self._bytes is None:
            self._bytes = self._response.iter_bytes()
        try:
            return next(self._bytes)
        except StopIteration:
            return None
        except Exception as exc:
            if self._signal is not None and self._signal.cancelled:
                return None
            self.close()
            if isinstance(exc, httpx.HTTPError):
                raise normalize_error(exc) from exc
            raise

    def _on_cancel(self) -> None:
        abort_response(self._response.raw)

    def _finish(self, reason: str) -> None:
        if self._closed:
            return
        event = "stream.cancelled" if reason == "cancelled" else "stream.end"
        log_event(self._logger, event, self._ctx, level=logging.DEBUG, reason=reason, emitted=self._emitted)
        self.close()

    def close(self) -> None:
        """Release the connection; further iteration yields nothing."""
        if self._closed:
            return
        self._closed = True
        self._pending.clear()
        if self._unregister is not None:
            self._unregister()
        with contextlib.suppress(Exception):
            self._response.close()

    def __enter__(self) -> "ChunkStream[T]":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = ["ChunkStream"]
