"""Unit tests for the incremental stream frame decoder.

The decoder must produce the same values however the byte stream is split
into chunks, ignore non-data lines, stop at ``[DONE]`` and surface malformed
frames as ``StreamDecodeError``.
"""
from __future__ import annotations

import pytest

from openai_fetch.base.errors import APIError, StreamDecodeError
from openai_fetch.base.streaming import DecoderState, StreamChunkDecoder, frame_payload

_BODY = b'data: {"id": 1}\n\ndata: {"id": 2}\n\ndata: [DONE]\n\n'


def _decode(chunks, mapper=lambda value: value):
    decoder = StreamChunkDecoder(mapper)
    out = []
    for chunk in chunks:
        out.extend(decoder.feed(chunk))
    decoder.finish()
    return out


def test_two_frames_then_done_for_every_split_point():
    for cut in range(len(_BODY) + 1):
        assert _decode([_BODY[:cut], _BODY[cut:]]) == [{"id": 1}, {"id": 2}], f"split at {cut}"


def test_byte_at_a_time_delivery():
    assert _decode([bytes([b]) for b in _BODY]) == [{"id": 1}, {"id": 2}]


def test_mapper_applied_to_each_value():
    assert _decode([_BODY], mapper=lambda value: value["id"] * 10) == [10, 20]


def test_frames_after_done_are_ignored():
    decoder = StreamChunkDecoder(lambda value: value)
    assert decoder.feed(b'data: [DONE]\n\ndata: {"id": 3}\n\n') == []
    assert decoder.terminated
    assert decoder.feed(b'data: {"id": 4}\n\n') == []


def test_comment_event_and_id_lines_are_ignored():
    body = b': keep-alive\n\nevent: message\nid: 7\ndata: {"ok": true}\n\nretry: 100\n\n'
    assert _decode([body]) == [{"ok": True}]


def test_multiple_data_lines_are_joined():
    body = b'data: {"text":\ndata: "hi"}\n\n'
    assert _decode([body]) == [{"text": "hi"}]


@pytest.mark.parametrize("delimiter", [b"\r\n\r\n", b"\r\r", b"\n\n"])
def test_all_blank_line_delimiters(delimiter):
    line_end = delimiter[: len(delimiter) // 2]
    body = b"data: {\"a\": 1}" + delimiter + b"event: x" + line_end + b"data: {\"a\": 2}" + delimiter
    assert _decode([body[:5], body[5:17], body[17:]]) == [{"a": 1}, {"a": 2}]


def test_multibyte_utf8_split_across_chunks():
    body = 'data: {"text": "héllo 🌍"}\n\n'.encode("utf-8")
    cut = body.index("🌍".encode("utf-8")) + 2
    assert _decode([body[:cut], body[cut:]]) == [{"text": "héllo 🌍"}]


def test_end_without_done_keeps_complete_frames_and_drops_partial():
    decoder = StreamChunkDecoder(lambda value: value)
    values = decoder.feed(b'data: {"id": 1}\n\ndata: {"id"')
    assert values == [{"id": 1}]
    assert decoder.state is DecoderState.HAVE_PARTIAL_FRAME
    assert decoder.finish() == len(b'data: {"id"')
    assert decoder.state is DecoderState.TERMINATED
    assert decoder.buffered == 0


def test_state_returns_to_awaiting_after_complete_frame():
    decoder = StreamChunkDecoder(lambda value: value)
    assert decoder.state is DecoderState.AWAITING_DELIMITER
    decoder.feed(b"data: {}")
    assert decoder.state is DecoderState.HAVE_PARTIAL_FRAME
    decoder.feed(b"\n\n")
    assert decoder.state is DecoderState.AWAITING_DELIMITER


def test_malformed_frame_raises_and_terminates():
    decoder = StreamChunkDecoder(lambda value: value)
    with pytest.raises(StreamDecodeError) as info:
        decoder.feed(b"data: {not json}\n\n")
    assert info.value.payload == "{not json}"
    assert decoder.terminated
    assert decoder.feed(b'data: {"id": 1}\n\n') == []


def test_values_before_malformed_frame_are_delivered_first():
    decoder = StreamChunkDecoder(lambda value: value)
    assert decoder.feed(b'data: {"id": 1}\n\ndata: nope\n\n') == [{"id": 1}]
    assert decoder.terminated
    assert isinstance(decoder.take_error(), StreamDecodeError)
    assert decoder.take_error() is None


def test_invalid_utf8_frame_raises():
    with pytest.raises(StreamDecodeError):
        StreamChunkDecoder(lambda value: value).feed(b"data: \xff\xfe\n\n")


def test_error_frame_raises_api_error():
    decoder = StreamChunkDecoder(lambda value: value, headers={"x-request-id": "req_9"})
    with pytest.raises(APIError) as info:
        decoder.feed(b'data: {"error": {"message": "overloaded", "type": "server_error"}}\n\n')
    assert info.value.status is None
    assert info.value.type == "server_error"
    assert info.value.request_id == "req_9"


def test_frame_payload_helpers():
    assert frame_payload(b": only a comment") is None
    assert frame_payload(b"data:no-space") == "no-space"
    assert frame_payload(b"data:  two spaces") == " two spaces"
