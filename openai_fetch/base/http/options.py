"""Transport options, lifecycle hooks and the immutable transport configuration.

``TransportOptions`` is what callers hand to ``OpenAIClient``. The transport
folds it together with the client credentials into a frozen
``TransportConfig``; per-call overrides produce a *new* config via
:func:`derive_config` and never touch the original.

Hook signatures
---------------
before_request(request) -> httpx.Request | httpx.Response | None
    Runs before every attempt. Returning a request replaces it; returning a
    response skips the network entirely.
after_response(request, response) -> httpx.Response | None
    Runs after every attempt that produced a response. Returning a response
    replaces it.
before_retry(request, error, attempt) -> None
    Runs before each retry; ``error`` is the HTTP or transport failure.
before_error(error) -> BaseException | None
    Runs over the raw failure before normalization; may return a
    replacement. Returning an ``APIError`` skips normalization.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Tuple

import httpx

from ...config.defaults import DEFAULT_TIMEOUT_MS, DEFAULT_USER_AGENT, ORGANIZATION_HEADER
from ..cancellation import CancellationToken, combine_tokens
from ..resilience.retry import DEFAULT_RETRY_POLICY, RetryPolicy

BeforeRequestHook = Callable[[httpx.Request], Any]
AfterResponseHook = Callable[[httpx.Request, httpx.Response], Optional[httpx.Response]]
BeforeRetryHook = Callable[[httpx.Request, BaseException, int], None]
BeforeErrorHook = Callable[[BaseException], Optional[BaseException]]

HeaderMap = Mapping[str, Optional[str]]


def _freeze(headers: Optional[HeaderMap]) -> Mapping[str, Optional[str]]:
    return MappingProxyType(dict(headers or {}))


def merge_headers(base: HeaderMap, overrides: Optional[HeaderMap]) -> dict:
    """Return a new header dict with ``overrides`` layered over ``base``.

    Keys compare case-insensitively; the override's spelling wins. A ``None``
    value removes the header.
    """
    merged = dict(base)
    for key, value in (overrides or {}).items():
        for existing in [k for k in merged if k.lower() == key.lower()]:
            del merged[existing]
        merged[key] = value
    return merged


@dataclass(frozen=True)
class TransportHooks:
    """Ordered, immutable lifecycle hook lists (run in registration order)."""

    before_request: Tuple[BeforeRequestHook, ...] = ()
    after_response: Tuple[AfterResponseHook, ...] = ()
    before_retry: Tuple[BeforeRetryHook, ...] = ()
    before_error: Tuple[BeforeErrorHook, ...] = ()

    def __post_init__(self) -> None:
        for name in ("before_request", "after_response", "before_retry", "before_error"):
            object.__setattr__(self, name, tuple(getattr(self, name)))


@dataclass(frozen=True)
class TransportOptions:
    """Caller-facing transport settings.

    Attributes:
        headers: Extra headers sent on every request (override the defaults).
        timeout_ms: Request timeout in milliseconds (default ten minutes).
        retry: Retry policy; ``None`` selects :data:`DEFAULT_RETRY_POLICY`.
        hooks: Lifecycle hooks.
        transport: Optional ``httpx`` transport (for example
            ``httpx.MockTransport``) used instead of the pooled network client.
    """

    headers: HeaderMap = field(default_factory=dict)
    timeout_ms: Optional[float] = None
    retry: Optional[RetryPolicy] = None
    hooks: TransportHooks = field(default_factory=TransportHooks)
    transport: Optional[httpx.BaseTransport] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", _freeze(self.headers))


@dataclass(frozen=True)
class TransportConfig:
    """Fully resolved, read-only configuration of one transport instance."""

    api_key: str
    base_url: str
    organization_id: Optional[str] = None
    headers: Mapping[str, Optional[str]] = field(default_factory=dict)
    timeout_ms: float = DEFAULT_TIMEOUT_MS
    retry: RetryPolicy = DEFAULT_RETRY_POLICY
    hooks: TransportHooks = field(default_factory=TransportHooks)
    signal: Optional[CancellationToken] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", _freeze(self.headers))

    @classmethod
    def from_options(
        cls,
        *,
        api_key: str,
        base_url: str,
        organization_id: Optional[str] = None,
        options: Optional[TransportOptions] = None,
    ) -> "TransportConfig":
        opts = options or TransportOptions()
        return cls(
            api_key=api_key,
            base_url=base_url,
            organization_id=organization_id,
            headers=opts.headers,
            timeout_ms=opts.timeout_ms if opts.timeout_ms is not None else DEFAULT_TIMEOUT_MS,
            retry=opts.retry or DEFAULT_RETRY_POLICY,
            hooks=opts.hooks,
        )

    def request_headers(self) -> dict:
        """Default headers followed by configured headers (configured win)."""
        defaults = {"User-Agent": DEFAULT_USER_AGENT}
        if self.api_key:
            defaults["Authorization"] = f"Bearer {self.api_key}"
        if self.organization_id:
            defaults[ORGANIZATION_HEADER] = self.organization_id
        return merge_headers(defaults, self.headers)


def derive_config(
    config: TransportConfig,
    *,
    headers: Optional[HeaderMap] = None,
    signal: Optional[CancellationToken] = None,
) -> TransportConfig:
    """Return a copy of ``config`` with per-call overrides layered on top.

    A new ``signal`` joins rather than replaces an inherited one: the derived
    config is cancelled when either fires.
    """
    return replace(
        config,
        headers=merge_headers(config.headers, headers),
        signal=combine_tokens(config.signal, signal),
    )


__all__ = [
    "TransportHooks",
    "TransportOptions",
    "TransportConfig",
    "derive_config",
    "merge_headers",
]
