"""OpenAI API client facade.

One method per endpoint. Each method marshals its parameters (JSON for most
endpoints, multipart for transcription), posts through the shared
:class:`HttpTransport`, and unmarshals the response: parsed JSON, raw audio
bytes, plain text, or a lazy :class:`ChunkStream` for streaming calls.

Request and response payloads follow the upstream API schema and are passed
through as plain mappings; this module does not model them.

Per-call overrides (``headers`` and ``signal``) apply to that call only via a
derived transport; the client's own configuration never changes after
construction.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Union

from .base.cancellation import CancellationToken
from .base.http import HttpTransport, TransportOptions, create_transport
from .base.logging import LogContext
from .base.multipart import build_transcription_form
from .base.streaming import ChunkStream
from .config import ClientConfig, resolve_client_config
from .config.defaults import TEXT_TRANSCRIPTION_FORMATS

Params = Mapping[str, Any]
HeaderOverrides = Optional[Mapping[str, Optional[str]]]


class OpenAIClient:
    """Synchronous client for the OpenAI HTTP API.

    Parameters:
        api_key: API key; falls back to ``OPENAI_API_KEY``.
        organization_id: Organization billed for requests; falls back to
            ``OPENAI_ORG_ID``. Only needed for keys scoped to several
            organizations.
        base_url: API root; falls back to ``OPENAI_BASE_URL`` and then
            ``https://api.openai.com/v1``.
        options: Transport options (headers, timeout, retry policy, hooks).

    Raises:
        ConfigurationError: no API key was found. Raised before any network
            activity.

    The client is safe to share across threads. Use it as a context manager
    (or call :meth:`close`) to release a client-owned connection pool.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        organization_id: Optional[str] = None,
        base_url: Optional[str] = None,
        options: Optional[TransportOptions] = None,
    ) -> None:
        self._config = resolve_client_config(api_key, organization_id, base_url)
        self._api = create_transport(
            api_key=self._config.api_key,
            base_url=self._config.base_url,
            organization_id=self._config.organization_id,
            options=options,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    def _get_api(
        self,
        headers: HeaderOverrides = None,
        signal: Optional[CancellationToken] = None,
    ) -> HttpTransport:
        if headers is None and signal is None:
            return self._api
        return self._api.extend(headers=headers, signal=signal)

    def create_chat_completion(
        self,
        params: Params,
        *,
        headers: HeaderOverrides = None,
        signal: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        """Create a completion for a chat message."""
        resp = self._get_api(headers, signal).post("chat/completions", json=dict(params))
        return resp.json()

    def stream_chat_completion(
        self,
        params: Params,
        *,
        headers: HeaderOverrides = None,
        signal: Optional[CancellationToken] = None,
    ) -> ChunkStream[Dict[str, Any]]:
        """Create a chat completion and stream back partial progress.

        The returned stream yields one ``chat.completion.chunk`` dict per
        server event and stops at ``[DONE]``.
        """
        resp = self._get_api(headers, signal).post(
            "chat/completions",
            json={**params, "stream": True},
            stream=True,
        )
        return ChunkStream(resp, ctx=LogContext(endpoint="chat/completions", method="POST"))

    def create_completions(
        self,
        params: Params,
        *,
        headers: HeaderOverrides = None,
        signal: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        """Create completions for an array of prompt strings."""
        resp = self._get_api(headers, signal).post("completions", json=dict(params))
        return resp.json()

    def stream_completion(
        self,
        params: Params,
        *,
        headers: HeaderOverrides = None,
        signal: Optional[CancellationToken] = None,
    ) -> ChunkStream[Dict[str, Any]]:
        """Create a completion for a single prompt string and stream back partial progress."""
        resp = self._get_api(headers, signal).post(
            "completions",
            json={**params, "stream": True},
            stream=True,
        )
        return ChunkStream(resp, ctx=LogContext(endpoint="completions", method="POST"))

    def create_embeddings(
        self,
        params: Params,
        *,
        headers: HeaderOverrides = None,
        signal: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        """Create an embedding vector representing the input text."""
        resp = self._get_api(headers, signal).post("embeddings", json=dict(params))
        return resp.json()

    def create_moderation(
        self,
        params: Params,
        *,
        headers: HeaderOverrides = None,
        signal: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        """Classify whether the input is potentially harmful across several categories."""
        resp = self._get_api(headers, signal).post("moderations", json=dict(params))
        return resp.json()

    def create_speech(
        self,
        params: Params,
        *,
        headers: HeaderOverrides = None,
        signal: Optional[CancellationToken] = None,
    ) -> bytes:
        """Generate audio from the input text (TTS). Returns the encoded audio."""
        resp = self._get_api(headers, signal).post("audio/speech", json=dict(params))
        return resp.content()

    def create_transcription(
        self,
        params: Params,
        *,
        headers: HeaderOverrides = None,
        signal: Optional[CancellationToken] = None,
    ) -> Union[str, Dict[str, Any], ChunkStream[Dict[str, Any]]]:
        """Transcribe audio into the input language.

        ``params["file"]`` accepts bytes, a binary file object, a path, a
        :class:`~openai_fetch.FileUpload` (or mapping with ``data``/``name``/
        ``type``) or a ``(filename, content[, content_type])`` tuple.

        Returns:
            ``str`` for the ``text``, ``srt`` and ``vtt`` formats, a parsed
            dict for JSON formats, or a :class:`ChunkStream` of transcription
            events when ``stream`` is true.

        Raises:
            RequestValidationError: missing file/model or an unsupported file
                representation; raised before any request is sent.
        """
        form = build_transcription_form(params)
        streaming = params.get("stream") is True
        resp = self._get_api(headers, signal).post("audio/transcriptions", body=form, stream=streaming)
        if streaming:
            return ChunkStream(resp, ctx=LogContext(endpoint="audio/transcriptions", method="POST"))
        if params.get("response_format") in TEXT_TRANSCRIPTION_FORMATS:
            return resp.text()
        return resp.json()

    def close(self) -> None:
        self._api.close()

    def __enter__(self) -> "OpenAIClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = ["OpenAIClient"]
