"""Transcription requests: multipart marshalling, validation and response shapes."""
from __future__ import annotations

import io

import httpx
import pytest

from openai_fetch import ChunkStream, FileUpload
from openai_fetch.base.errors import RequestValidationError
from openai_fetch.base.multipart import build_transcription_form, normalize_upload

_AUDIO = b"RIFF\x00\x00WAVEfmt fake"


def test_missing_file_sends_nothing(make_client, recorder):
    rec = recorder(httpx.Response(200, json={"text": "hi"}))
    with pytest.raises(RequestValidationError):
        make_client(rec).create_transcription({"model": "whisper-1"})
    assert rec.calls == 0


@pytest.mark.parametrize("bad", [12345, object(), ["not", "a", "file"], b""])
def test_unsupported_file_sends_nothing(make_client, recorder, bad):
    rec = recorder(httpx.Response(200, json={"text": "hi"}))
    with pytest.raises(RequestValidationError):
        make_client(rec).create_transcription({"model": "whisper-1", "file": bad})
    assert rec.calls == 0


def test_missing_model_is_rejected():
    with pytest.raises(RequestValidationError):
        build_transcription_form({"file": _AUDIO})


def test_json_format_returns_parsed_object(make_client, recorder):
    rec = recorder(httpx.Response(200, json={"text": "hello"}))
    result = make_client(rec).create_transcription(
        {"model": "whisper-1", "file": _AUDIO, "response_format": "json"}
    )
    assert result == {"text": "hello"}
    sent = rec.requests[0]
    assert str(sent.url).endswith("/audio/transcriptions")
    assert sent.headers["content-type"].startswith("multipart/form-data; boundary=")


def test_default_format_returns_parsed_object(make_client, recorder):
    rec = recorder(httpx.Response(200, json={"text": "hello"}))
    assert make_client(rec).create_transcription({"model": "whisper-1", "file": _AUDIO}) == {"text": "hello"}


@pytest.mark.parametrize("fmt", ["text", "srt", "vtt"])
def test_text_formats_return_plain_text(make_client, recorder, fmt):
    rec = recorder(httpx.Response(200, text="1\n00:00:00,000 --> 00:00:01,000\nhello\n"))
    result = make_client(rec).create_transcription({"model": "whisper-1", "file": _AUDIO, "response_format": fmt})
    assert isinstance(result, str)
    assert "hello" in result


def test_form_fields_are_encoded(make_client, recorder):
    rec = recorder(httpx.Response(200, json={"text": "hi"}))
    make_client(rec).create_transcription(
        {
            "model": "whisper-1",
            "file": ("meeting.mp3", _AUDIO),
            "language": "en",
            "prompt": "Names: Ada",
            "temperature": 0,
            "timestamp_granularities": ["word", "segment"],
            "chunking_strategy": {"type": "server_vad"},
        }
    )
    body = rec.requests[0].content
    assert b'name="file"; filename="meeting.mp3"' in body
    assert b"Content-Type: audio/mpeg" in body
    assert _AUDIO in body
    assert body.count(b'name="timestamp_granularities[]"') == 2
    assert b'name="language"\r\n\r\nen' in body
    assert b'name="temperature"\r\n\r\n0' in body
    assert b'{"type": "server_vad"}' in body
    assert b'name="stream"' not in body


def test_streaming_transcription_returns_chunk_stream(make_client, recorder, sse_body):
    body = sse_body({"type": "transcript.text.delta", "delta": "hel"}, {"type": "transcript.text.done", "text": "hello"})
    rec = recorder(lambda request: httpx.Response(200, content=iter([body])))
    result = make_client(rec).create_transcription(
        {"model": "gpt-4o-transcribe", "file": _AUDIO, "stream": True}
    )
    assert isinstance(result, ChunkStream)
    assert [event["type"] for event in result] == ["transcript.text.delta", "transcript.text.done"]
    assert b'name="stream"\r\n\r\ntrue' in rec.requests[0].content


def test_retry_resends_same_file_bytes(make_client, recorder, sleeps):
    rec = recorder(httpx.Response(503), httpx.Response(200, json={"text": "ok"}))
    make_client(rec).create_transcription({"model": "whisper-1", "file": io.BytesIO(_AUDIO)})
    assert rec.calls == 2
    assert all(_AUDIO in request.content for request in rec.requests)


def test_normalize_upload_representations(tmp_path):
    named = io.BytesIO(_AUDIO)
    named.name = "/tmp/recordings/clip.mp3"
    assert normalize_upload(named) == ("clip.mp3", _AUDIO, "audio/mpeg")

    path = tmp_path / "voice.mp3"
    path.write_bytes(_AUDIO)
    assert normalize_upload(path) == ("voice.mp3", _AUDIO, "audio/mpeg")

    assert normalize_upload(_AUDIO) == ("audio", _AUDIO, "application/octet-stream")
    assert normalize_upload(bytearray(_AUDIO))[1] == _AUDIO
    assert normalize_upload(("a.webm", _AUDIO, "audio/webm")) == ("a.webm", _AUDIO, "audio/webm")
    assert normalize_upload(FileUpload(data=_AUDIO, name="x.mp3")) == ("x.mp3", _AUDIO, "audio/mpeg")
    assert normalize_upload({"data": _AUDIO, "type": "audio/wav"}) == ("audio", _AUDIO, "audio/wav")


def test_normalize_upload_rejects_invalid_mapping():
    with pytest.raises(RequestValidationError):
        normalize_upload({"name": "missing-data.mp3"})
    with pytest.raises(RequestValidationError):
        normalize_upload(("only-name",))
