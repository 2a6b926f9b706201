"""Incremental decoder for server-sent-event style completion streams.

The wire format is a sequence of frames separated by a blank line::

    data: {"id": 1}\\n\\n
    : keep-alive comment\\n\\n
    data: [DONE]\\n\\n

HTTP chunk boundaries are unrelated to frame boundaries, so the decoder keeps
a byte buffer and only dispatches frames once their delimiter has arrived.
Buffering bytes rather than text keeps multi-byte UTF-8 characters intact
when a chunk splits them.

State machine::

    AWAITING_DELIMITER --feed(partial)--> HAVE_PARTIAL_FRAME
    HAVE_PARTIAL_FRAME --feed(completes frames, no rest)--> AWAITING_DELIMITER
    any --[DONE] / decode error / finish()--> TERMINATED

``TERMINATED`` is absorbing: later ``feed`` calls return nothing.
"""
from __future__ import annotations

import json
import re
from enum import Enum
from typing import Any, Callable, Generic, List, Mapping, Optional, TypeVar

from ...config.defaults import STREAM_DONE_SENTINEL
from ..errors import APIError, StreamDecodeError

T = TypeVar("T")

_FRAME_DELIMITER = re.compile(rb"\r\n\r\n|\n\n|\r\r")
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
# Longest delimiter minus one: a delimiter may straddle two chunks.
_DELIMITER_OVERLAP = 3


class DecoderState(str, Enum):
    AWAITING_DELIMITER = "awaiting_delimiter"
    HAVE_PARTIAL_FRAME = "have_partial_frame"
    TERMINATED = "terminated"


def frame_payload(frame: bytes) -> Optional[str]:
    """Return the joined ``data:`` payload of one frame, or ``None``.

    ``event:``, ``id:``, ``retry:`` and comment lines carry nothing the
    completion endpoints need and are ignored.
    """
    text = frame.decode("utf-8")
    data_lines: List[str] = []
    for line in _LINE_BREAK.split(text):
        if not line or line.startswith(":"):
            continue
        name, _, value = line.partition(":")
        if name != "data":
            continue
        data_lines.append(value[1:] if value.startswith(" ") else value)
    if not data_lines:
        return None
    return "\n".join(data_lines)


class StreamChunkDecoder(Generic[T]):
    """Turns raw byte chunks into mapped JSON values, one per frame.

    Parameters:
        mapper: Applied to every decoded JSON value before it is returned.
        headers: Response headers, attached to mid-stream ``APIError``s.
    """

    def __init__(self, mapper: Callable[[Any], T], *, headers: Optional[Mapping[str, str]] = None) -> None:
        self._mapper = mapper
        self._headers = dict(headers or {})
        self._buffer = bytearray()
        self._scan_from = 0
        self._deferred: Optional[Exception] = None
        self.state = DecoderState.AWAITING_DELIMITER

    @property
    def terminated(self) -> bool:
        return self.state is DecoderState.TERMINATED

    def take_error(self) -> Optional[Exception]:
        """Return (once) an error held back so earlier frames could be delivered."""
        error, self._deferred = self._deferred, None
        return error

    @property
    def buffered(self) -> int:
        """Number of bytes held for an incomplete frame."""
        return len(self._buffer)

    def feed(self, chunk: bytes) -> List[T]:
        """Consume ``chunk`` and return values for every frame it completes.

        Raises:
            StreamDecodeError: a frame payload is neither JSON nor ``[DONE]``.
            APIError: a frame carries a provider ``error`` object.
        """
        if self.state is DecoderState.TERMINATED:
            return []
        self._buffer.extend(chunk)
        out: List[T] = []
        while self.state is not DecoderState.TERMINATED:
            match = _FRAME_DELIMITER.search(self._buffer, self._scan_from)
            if match is None:
                break
            frame = bytes(self._buffer[: match.start()])
            del self._buffer[: match.end()]
            self._scan_from = 0
            try:
                self._dispatch(frame, out)
            except (StreamDecodeError, APIError) as exc:
                if not out:
                    raise
                # Hand out the frames decoded before the bad one first.
                self._deferred = exc
                break
        if self.state is not DecoderState.TERMINATED:
            self._scan_from = max(0, len(self._buffer) - _DELIMITER_OVERLAP)
            self.state = DecoderState.HAVE_PARTIAL_FRAME if self._buffer else DecoderState.AWAITING_DELIMITER
        return out

    def finish(self) -> int:
        """Mark the end of input; return the count of discarded partial bytes.

        A frame still waiting for its delimiter is incomplete and is dropped
        rather than dispatched.
        """
        dropped = len(self._buffer) if self._buffer.strip() else 0
        self._terminate()
        return dropped

    def _terminate(self) -> None:
        self._buffer.clear()
        self._scan_from = 0
        self.state = DecoderState.TERMINATED

    def _dispatch(self, frame: bytes, out: List[T]) -> None:
        try:
            payload = frame_payload(frame)
        except UnicodeDecodeError as exc:
            self._terminate()
            raise StreamDecodeError("Stream frame is not valid UTF-8") from exc
        if payload is None:
            return
        if payload.strip() == STREAM_DONE_SENTINEL:
            self._terminate()
            return
        try:
            value = json.loads(payload)
        except ValueError as exc:
            self._terminate()
            raise StreamDecodeError(
                f"Could not parse stream frame as JSON: {payload[:120]!r}", payload=payload[:500]
            ) from exc
        if isinstance(value, dict) and value.get("error") is not None:
            self._terminate()
            raise APIError(None, value["error"], None, self._headers)
        out.append(self._mapper(value))


__all__ = ["DecoderState", "StreamChunkDecoder", "frame_payload"]
