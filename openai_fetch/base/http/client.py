"""Shared HTTP client pool for transports.

Purpose:
    Provide a centralized, thread-safe pool of reusable ``httpx.Client``
    instances so that every ``OpenAIClient`` (and every transport derived from
    one) shares connection pools instead of allocating per call.

External dependencies:
    - ``httpx`` for the underlying synchronous HTTP client.

Timeout strategy:
    - Transports pass an explicit timeout on every request, so the pooled
      client's own default only applies to callers that bypass the transport.

Lifecycle & cleanup:
    - Clients are cached by a composite key of ``base_url`` and ``purpose``.
    - All pooled clients are closed at interpreter exit via ``atexit``. Tests
      may also call :func:`close_all_clients` explicitly.
    - Clients built around a caller-supplied ``httpx.BaseTransport`` are never
      pooled; :func:`create_dedicated_client` returns them and the owner
      closes them.
"""

from __future__ import annotations

import atexit
import threading
from typing import Dict, Optional, Tuple

import httpx

from ...config.defaults import DEFAULT_TIMEOUT_MS

# Internal cache keyed by (base_url, purpose)
_CLIENTS: Dict[Tuple[Optional[str], str], httpx.Client] = {}
_LOCK = threading.RLock()


def _new_client(base_url: Optional[str], transport: Optional[httpx.BaseTransport] = None) -> httpx.Client:
    kwargs = {"timeout": DEFAULT_TIMEOUT_MS / 1000}
    if base_url:
        kwargs["base_url"] = base_url
    if transport is not None:
        kwargs["transport"] = transport
    return httpx.Client(**kwargs)


def get_httpx_client(base_url: Optional[str], purpose: str) -> httpx.Client:
    """Return a pooled ``httpx.Client`` for the given base URL and purpose.

    Parameters:
        base_url: Optional API base URL to associate with the client. ``None``
            groups clients under a shared key; callers then send absolute URLs.
        purpose: A short string discriminating separate pools. Keep stable to
            maximize reuse.

    Thread-safety:
        Safe for concurrent use; per-key creation is guarded by a re-entrant
        lock.
    """
    key = (base_url, purpose)
    client = _CLIENTS.get(key)
    if client is not None and not client.is_closed:
        return client

    with _LOCK:
        client = _CLIENTS.get(key)
        if client is not None and not client.is_closed:
            return client
        client = _new_client(base_url)
        _CLIENTS[key] = client
        return client


def create_dedicated_client(transport: httpx.BaseTransport) -> httpx.Client:
    """Build an unpooled client around a caller-supplied transport."""
    return _new_client(None, transport)


def close_all_clients() -> None:
    """Close and clear all pooled HTTP clients."""
    with _LOCK:
        for c in _CLIENTS.values():
            try:
                c.close()
            except Exception:  # nosec B110 - best-effort shutdown; safe to ignore close errors
                pass
        _CLIENTS.clear()


def _cleanup_at_exit() -> None:
    """atexit hook to ensure clients are closed on interpreter exit."""
    close_all_clients()


atexit.register(_cleanup_at_exit)

__all__ = ["get_httpx_client", "create_dedicated_client", "close_all_clients"]
