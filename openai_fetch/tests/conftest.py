"""Shared fixtures for the openai_fetch test suite.

Every HTTP test runs against ``httpx.MockTransport`` handed to the client via
``TransportOptions(transport=...)``; nothing here touches the network.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Dict, Iterator, List

import httpx
import pytest

from openai_fetch import OpenAIClient, TransportOptions
from openai_fetch.base.http import close_all_clients
from openai_fetch.base.logging import BASE_LOGGER_NAME, get_logger

_OPENAI_ENV = ("OPENAI_API_KEY", "OPENAI_ORG_ID", "OPENAI_ORGANIZATION", "OPENAI_BASE_URL")


@pytest.fixture(autouse=True)
def clean_openai_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's real credentials out of every test."""
    for name in _OPENAI_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="session", autouse=True)
def close_pooled_clients() -> Iterator[None]:
    yield
    close_all_clients()


@pytest.fixture()
def sleeps(monkeypatch: pytest.MonkeyPatch) -> List[float]:
    """Record retry waits (seconds) instead of sleeping."""
    recorded: List[float] = []
    monkeypatch.setattr(time, "sleep", lambda seconds: recorded.append(seconds))
    return recorded


def _fresh(response: httpx.Response) -> httpx.Response:
    """Copy a buffered response so a replayed one is never reused after close."""
    try:
        content = response.content
    except httpx.ResponseNotRead:
        return response
    return httpx.Response(response.status_code, headers=response.headers, content=content)


class Recorder:
    """Mock transport handler that records requests and replays responses.

    ``responses`` items may be ``httpx.Response`` objects, exceptions to raise,
    or callables taking the request.
    """

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            return httpx.Response(200, json={})
        item = self.responses[0] if len(self.responses) == 1 else self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return item(request)
        return _fresh(item)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def body(self, index: int = -1) -> Dict[str, Any]:
        return json.loads(self.requests[index].content)


@pytest.fixture()
def make_client() -> Iterator[Callable[..., OpenAIClient]]:
    """Factory building clients over a ``Recorder`` (or any handler)."""
    created: List[OpenAIClient] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> OpenAIClient:
        option_kwargs = kwargs.pop("options", {})
        options = TransportOptions(transport=httpx.MockTransport(handler), **option_kwargs)
        kwargs.setdefault("api_key", "sk-test")
        client = OpenAIClient(options=options, **kwargs)
        created.append(client)
        return client

    yield _make
    for client in created:
        client.close()


def sse(*payloads: Any) -> bytes:
    """Encode payloads as ``data:`` frames; strings are sent verbatim."""
    frames = []
    for payload in payloads:
        data = payload if isinstance(payload, str) else json.dumps(payload)
        frames.append(f"data: {data}\n\n")
    return "".join(frames).encode("utf-8")


@pytest.fixture()
def sse_body() -> Callable[..., bytes]:
    return sse


@pytest.fixture()
def log_records() -> Iterator[List[logging.LogRecord]]:
    """Capture records reaching the base logger at DEBUG level."""
    records: List[logging.LogRecord] = []
    base = get_logger(BASE_LOGGER_NAME)
    handler = logging.Handler()
    handler.emit = lambda record: records.append(record)  # type: ignore
    previous = base.level
    base.setLevel(logging.DEBUG)
    base.addHandler(handler)
    try:
        yield records
    finally:
        base.removeHandler(handler)
        base.setLevel(previous)


def events(records: List[logging.LogRecord]) -> List[Dict[str, Any]]:
    """Decode ``log_event`` payloads from captured records."""
    out = []
    for record in records:
        try:
            payload = json.loads(record.getMessage())
        except ValueError:
            continue
        if isinstance(payload, dict) and "event" in payload:
            out.append(payload)
    return out


@pytest.fixture()
def decode_events() -> Callable[[List[logging.LogRecord]], List[Dict[str, Any]]]:
    return events


@pytest.fixture()
def recorder() -> Callable[..., Recorder]:
    return Recorder
