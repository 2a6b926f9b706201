"""HTTP transport adapter.

Purpose:
    Issue requests against the API on behalf of the facade: apply the base
    URL and default headers, run lifecycle hooks, retry transient failures,
    and convert every failure into a single :class:`APIError`.

External dependencies:
    - ``httpx`` for the wire protocol (pooled ``httpx.Client`` instances from
      :mod:`openai_fetch.base.http.client`).

Immutability:
    An ``HttpTransport`` wraps a frozen :class:`TransportConfig`. ``extend``
    returns a new transport over a derived config and shares only the
    thread-safe ``httpx.Client``; the parent's headers are never modified, so
    concurrent calls cannot leak overrides into each other.

Cancellation:
    A ``CancellationToken`` passed as ``signal`` is checked before every
    attempt and after each response; retry waits return early when it fires.
    While a request is in flight, firing the token shuts down the socket
    (see :mod:`openai_fetch.base.http.abort`) so a blocked read returns at
    once. Non-streaming calls then raise ``CancelledError``. Streaming
    responses hand the token on to the stream reader.

    A signal given per call joins the one inherited from ``extend``; either
    cancels the request.

Errors:
    Every ``httpx.RequestError`` (network, timeout, body decoding, redirect)
    and every non-2xx status leaves as an :class:`APIError`. Only plain
    network errors and retryable statuses are retried.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Mapping, Optional, Union

import httpx

from ..cancellation import CancellationToken, CancelledError, combine_tokens
from ..errors import APIError
from ..logging import LogContext, get_logger, log_event
from ..multipart import MultipartForm
from .abort import ConnectionAborter
from .client import create_dedicated_client, get_httpx_client
from .normalizer import normalize_error
from .options import HeaderMap, TransportConfig, TransportOptions, derive_config, merge_headers
from .response import TransportResponse

Body = Union[MultipartForm, bytes, str, None]

_POOL_PURPOSE = "openai_fetch"


def join_url(base_url: str, path: str) -> str:
    """Join ``path`` onto ``base_url``; a leading slash on ``path`` is ignored."""
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def _is_retryable_network_error(exc: httpx.RequestError) -> bool:
    # Timeouts, body decoding and redirect errors are final.
    return isinstance(exc, httpx.TransportError) and not isinstance(exc, httpx.TimeoutException)


class HttpTransport:
    """Request issuer bound to one immutable :class:`TransportConfig`."""

    def __init__(
        self,
        config: TransportConfig,
        client: httpx.Client,
        *,
        owns_client: bool = False,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config = config
        self._client = client
        self._owns_client = owns_client
        self._logger = logger or get_logger("openai_fetch.transport")

    @property
    def config(self) -> TransportConfig:
        return self._config

    def extend(
        self,
        *,
        headers: Optional[HeaderMap] = None,
        signal: Optional[CancellationToken] = None,
    ) -> "HttpTransport":
        """Return a transport layering ``headers``/``signal`` over this one."""
        return HttpTransport(
            derive_config(self._config, headers=headers, signal=signal),
            self._client,
            owns_client=False,
            logger=self._logger,
        )

    def close(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            self._client.close()

    # ---- Requests ----

    def post(
        self,
        path: str,
        *,
        json: Any = None,
        body: Body = None,
        headers: Optional[HeaderMap] = None,
        signal: Optional[CancellationToken] = None,
        stream: bool = False,
    ) -> TransportResponse:
        """POST to ``path``. ``json`` is ignored when ``body`` is given."""
        return self.request("POST", path, json=json, body=body, headers=headers, signal=signal, stream=stream)

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        body: Body = None,
        headers: Optional[HeaderMap] = None,
        signal: Optional[CancellationToken] = None,
        stream: bool = False,
    ) -> TransportResponse:
        """Send one logical request, retrying per the configured policy.

        Returns:
            A :class:`TransportResponse` for a 2xx response. With
            ``stream=True`` its body is left unread.

        Raises:
            APIError: normalized HTTP or connection failure (after retries).
            CancelledError: the token fired before a response was returned.
        """
        cfg = self._config
        method = method.upper()
        token = combine_tokens(cfg.signal, signal)
        url = join_url(cfg.base_url, path)
        merged = merge_headers(cfg.request_headers(), headers)
        send_headers = {k: v for k, v in merged.items() if v is not None}
        ctx = LogContext(endpoint=path.lstrip("/"), method=method)

        attempt = 0
        while True:
            attempt += 1
            self._check_cancelled(token)
            request = self._build_request(method, url, send_headers, json, body)
            response: Optional[httpx.Response] = None
            for hook in cfg.hooks.before_request:
                result = hook(request)
                if isinstance(result, httpx.Response):
                    response = result
                    break
                if isinstance(result, httpx.Request):
                    request = result

            log_event(self._logger, "http.request", ctx, level=logging.DEBUG, attempt=attempt, stream=stream)
            if response is None:
                try:
                    response = self._send(request, stream, token)
                except httpx.RequestError as exc:
                    self._check_cancelled(token)
                    if _is_retryable_network_error(exc) and cfg.retry.allows(method, attempt):
                        self._wait_before_retry(request, exc, attempt, cfg.retry.backoff_ms(attempt), ctx, token)
                        continue
                    raise self._fail(exc, ctx, attempt) from exc

            for after in cfg.hooks.after_response:
                replaced = after(request, response)
                if replaced is not None:
                    response = replaced

            if token is not None and token.cancelled:
                response.close()
                self._check_cancelled(token)

            log_event(
                self._logger,
                "http.response",
                ctx,
                level=logging.DEBUG,
                attempt=attempt,
                status=response.status_code,
                request_id=response.headers.get("x-request-id"),
            )
            if response.is_success:
                return TransportResponse(response, token)

            failure = httpx.HTTPStatusError(
                f"{response.status_code} error for {method} {url}",
                request=request,
                response=response,
            )
            if cfg.retry.allows(method, attempt):
                delay = cfg.retry.delay_for_status(response.status_code, response.headers, attempt)
                if delay is not None:
                    response.close()
                    self._wait_before_retry(request, failure, attempt, delay, ctx, token)
                    continue
            try:
                raise self._fail(failure, ctx, attempt)
            finally:
                response.close()

    # ---- Internals ----

    def _build_request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        json: Any,
        body: Body,
    ) -> httpx.Request:
        timeout = httpx.Timeout(self._config.timeout_ms / 1000)
        if isinstance(body, MultipartForm):
            return self._client.build_request(
                method, url, headers=headers, data=body.data, files=body.files, timeout=timeout
            )
        if body is not None:
            return self._client.build_request(method, url, headers=headers, content=body, timeout=timeout)
        if json is not None:
            return self._client.build_request(method, url, headers=headers, json=json, timeout=timeout)
        return self._client.build_request(method, url, headers=headers, timeout=timeout)

    def _send(
        self,
        request: httpx.Request,
        stream: bool,
        token: Optional[CancellationToken],
    ) -> httpx.Response:
        if token is None:
            return self._client.send(request, stream=stream)
        aborter = ConnectionAborter()
        aborter.install(request)
        unregister = token.add_callback(aborter.abort)
        try:
            response = self._client.send(request, stream=True)
            aborter.attach(response)
            if not stream:
                try:
                    response.read()
                except BaseException:
                    response.close()
                    raise
            return response
        finally:
            unregister()

    @staticmethod
    def _check_cancelled(token: Optional[CancellationToken]) -> None:
        if token is not None:
            token.raise_if_cancelled()

    def _wait_before_retry(
        self,
        request: httpx.Request,
        error: BaseException,
        attempt: int,
        delay_ms: float,
        ctx: LogContext,
        token: Optional[CancellationToken],
    ) -> None:
        for hook in self._config.hooks.before_retry:
            hook(request, error, attempt)
        log_event(
            self._logger,
            "http.retry",
            ctx,
            attempt=attempt,
            max_attempts=self._config.retry.max_attempts,
            delay_ms=round(delay_ms, 1),
            error=str(error)[:260],
        )
        seconds = delay_ms / 1000
        if token is None:
            time.sleep(seconds)
        elif token.wait(seconds):
            raise CancelledError(token.reason or "operation cancelled")

    def _fail(self, failure: BaseException, ctx: LogContext, attempt: int) -> APIError:
        for hook in self._config.hooks.before_error:
            replaced = hook(failure)
            if replaced is not None:
                failure = replaced
        error = normalize_error(failure)
        log_event(
            self._logger,
            "http.error",
            ctx,
            level=logging.WARNING,
            attempt=attempt,
            status=error.status,
            error_code=error.category.value,
            request_id=error.request_id,
            error=str(error)[:260],
        )
        return error


def create_transport(
    *,
    api_key: str,
    base_url: str,
    organization_id: Optional[str] = None,
    options: Optional[TransportOptions] = None,
) -> HttpTransport:
    """Build the root transport for a client.

    A caller-supplied ``options.transport`` gets its own ``httpx.Client``
    (closed by :meth:`HttpTransport.close`); otherwise the pooled client is
    shared.
    """
    opts = options or TransportOptions()
    config = TransportConfig.from_options(
        api_key=api_key,
        base_url=base_url,
        organization_id=organization_id,
        options=opts,
    )
    if opts.transport is not None:
        return HttpTransport(config, create_dedicated_client(opts.transport), owns_client=True)
    return HttpTransport(config, get_httpx_client(None, _POOL_PURPOSE))


__all__ = ["HttpTransport", "create_transport", "join_url"]
