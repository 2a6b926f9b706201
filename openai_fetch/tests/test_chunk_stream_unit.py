"""Streaming calls end to end over ``httpx.MockTransport``.

Covers lazy delivery, clean termination with and without ``[DONE]``,
single-pass iteration, cancellation and error surfacing.
"""
from __future__ import annotations

import httpx
import pytest

from openai_fetch import ChunkStream
from openai_fetch.base.cancellation import CancellationToken
from openai_fetch.base.errors import APIConnectionError, APIError, AuthenticationError, StreamDecodeError

_PARAMS = {"model": "gpt-4o-mini", "messages": [{"role": "user", "content": "hi"}]}


def _streaming(*chunks):
    def handler(request):
        return httpx.Response(200, headers={"content-type": "text/event-stream"}, content=iter(chunks))

    return handler


def test_stream_yields_values_then_stops(make_client, recorder, sse_body):
    body = sse_body({"id": 1}, {"id": 2}, "[DONE]")
    rec = recorder(_streaming(body[:7], body[7:30], body[30:]))
    stream = make_client(rec).stream_chat_completion(_PARAMS)

    assert isinstance(stream, ChunkStream)
    assert list(stream) == [{"id": 1}, {"id": 2}]
    assert stream.closed
    assert rec.body()["stream"] is True
    assert rec.body()["model"] == "gpt-4o-mini"
    assert str(rec.requests[0].url).endswith("/chat/completions")


def test_stream_is_single_pass(make_client, recorder, sse_body):
    rec = recorder(_streaming(sse_body({"id": 1}, "[DONE]")))
    stream = make_client(rec).stream_chat_completion(_PARAMS)
    assert list(stream) == [{"id": 1}]
    assert list(stream) == []


def test_stream_without_done_ends_cleanly(make_client, recorder, sse_body, log_records, decode_events):
    rec = recorder(_streaming(sse_body({"id": 1}, {"id": 2}), b'data: {"id": 3'))
    assert list(make_client(rec).stream_completion({"model": "m", "prompt": "p"})) == [{"id": 1}, {"id": 2}]
    names = [e["event"] for e in decode_events(log_records)]
    assert "stream.discard_partial" in names
    assert "stream.end" in names


def test_completion_stream_targets_completions(make_client, recorder, sse_body):
    rec = recorder(_streaming(sse_body({"choices": [{"text": "a"}]}, "[DONE]")))
    assert list(make_client(rec).stream_completion({"model": "m", "prompt": "p"})) == [{"choices": [{"text": "a"}]}]
    assert str(rec.requests[0].url) == "https://api.openai.com/v1/completions"
    assert rec.body()["stream"] is True


def test_cancel_mid_stream_stops_without_error(make_client, recorder, sse_body, log_records, decode_events):
    rec = recorder(_streaming(sse_body({"id": 1}), sse_body({"id": 2}), sse_body("[DONE]")))
    token = CancellationToken()
    stream = make_client(rec).stream_chat_completion(_PARAMS, signal=token)

    received = []
    for chunk in stream:
        received.append(chunk)
        token.cancel("user stop")

    assert received == [{"id": 1}]
    assert stream.closed
    assert stream.response.raw.is_closed
    assert "stream.cancelled" in [e["event"] for e in decode_events(log_records)]


def test_cancel_drops_values_already_buffered(make_client, recorder, sse_body):
    rec = recorder(_streaming(sse_body({"id": 1}, {"id": 2}, {"id": 3})))
    token = CancellationToken()
    stream = make_client(rec).stream_chat_completion(_PARAMS, signal=token)
    assert next(stream) == {"id": 1}
    token.cancel()
    assert list(stream) == []


def test_malformed_frame_raises_after_earlier_values(make_client, recorder):
    rec = recorder(_streaming(b'data: {"id": 1}\n\ndata: not-json\n\n'))
    stream = make_client(rec).stream_chat_completion(_PARAMS)
    assert next(stream) == {"id": 1}
    with pytest.raises(StreamDecodeError):
        next(stream)
    assert stream.closed
    assert list(stream) == []


def test_mid_stream_error_frame_raises_api_error(make_client, recorder, sse_body):
    rec = recorder(_streaming(sse_body({"id": 1}), sse_body({"error": {"message": "overloaded"}})))
    stream = make_client(rec).stream_chat_completion(_PARAMS)
    assert next(stream) == {"id": 1}
    with pytest.raises(APIError) as info:
        next(stream)
    assert "overloaded" in str(info.value)


def test_network_failure_mid_stream_is_normalized(make_client, recorder, sse_body):
    def chunks():
        yield sse_body({"id": 1})
        raise httpx.ReadError("connection reset")

    rec = recorder(lambda request: httpx.Response(200, content=chunks()))
    stream = make_client(rec).stream_chat_completion(_PARAMS)
    assert next(stream) == {"id": 1}
    with pytest.raises(APIConnectionError):
        next(stream)
    assert stream.closed


def test_http_error_is_raised_before_streaming(make_client, recorder):
    rec = recorder(httpx.Response(401, json={"error": {"message": "bad key", "code": "invalid_api_key"}}))
    with pytest.raises(AuthenticationError) as info:
        make_client(rec).stream_chat_completion(_PARAMS)
    assert info.value.code == "invalid_api_key"
    assert rec.calls == 1


def test_context_manager_closes_stream(make_client, recorder, sse_body):
    rec = recorder(_streaming(sse_body({"id": 1}, {"id": 2})))
    with make_client(rec).stream_chat_completion(_PARAMS) as stream:
        assert next(stream) == {"id": 1}
    assert stream.closed
    assert list(stream) == []
