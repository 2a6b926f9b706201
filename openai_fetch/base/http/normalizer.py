"""Failure normalization for the HTTP transport.

Turns whatever went wrong during a request into exactly one :class:`APIError`:

- A failure carrying an ``httpx.Response`` (``httpx.HTTPStatusError``) yields
  a status-specific ``APIError`` whose ``error`` is the ``error`` field of the
  JSON body, or whose message is the raw body text when it is not JSON.
- A failure without a response (connect/read errors, timeouts) yields an
  ``APIConnectionError`` / ``APIConnectionTimeoutError`` wrapping the cause.

The normalizer never raises: body reads, JSON parsing and header iteration
degrade to fallback values. ``httpx`` caches the body on first read, so the
response stays readable for anyone else holding it.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

import httpx

from ..errors import APIConnectionError, APIConnectionTimeoutError, APIError


def parse_headers(headers: Any) -> Dict[str, str]:
    """Copy response headers into a plain dict (``{}`` on any failure)."""
    try:
        if not headers:
            return {}
        if hasattr(headers, "items"):
            return {str(k): str(v) for k, v in headers.items()}
        return {str(k): str(v) for k, v in headers}
    except Exception:
        return {}


def safe_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return None


def _read_text(response: httpx.Response) -> str:
    try:
        response.read()
        return response.text
    except Exception as exc:
        return str(exc) or exc.__class__.__name__


def _response_of(failure: BaseException) -> Optional[httpx.Response]:
    try:
        response = getattr(failure, "response", None)
    except Exception:
        return None
    return response if isinstance(response, httpx.Response) else None


def normalize_error(failure: BaseException) -> APIError:
    """Build the structured error for one failed request.

    An ``APIError`` passes through unchanged so normalization happens once.
    """
    if isinstance(failure, APIError):
        return failure

    response = _response_of(failure)
    if response is not None:
        status = response.status_code
        headers = parse_headers(response.headers)
        error_body: Any = None
        message: Optional[str] = None
        text = _read_text(response)
        if text:
            parsed = safe_json(text)
            error_body = parsed.get("error") if isinstance(parsed, dict) else None
            message = None if error_body else text
        return APIError.generate(status, error_body, message, headers, cause=failure)

    if isinstance(failure, (httpx.TimeoutException, TimeoutError)):
        return APIConnectionTimeoutError(cause=failure)
    return APIConnectionError(cause=failure)


__all__ = ["normalize_error", "parse_headers", "safe_json"]
