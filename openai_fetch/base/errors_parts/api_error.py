"""
Structured API error types.

:class:`APIError` carries what the provider told us about a failed call: the
HTTP status, the parsed ``error`` object from the body (when the body was
JSON), a raw message fallback, and the response headers. Status-specific
subclasses let callers branch with ``except`` clauses instead of comparing
integers. Connection failures (no response at all) use
:class:`APIConnectionError` with ``status`` set to ``None``.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional

from .client_errors import OpenAIFetchError
from .error_code import ErrorCode


def _make_message(status: Optional[int], error: Any, message: Optional[str]) -> str:
    """Compose the exception text from status, error object and raw message."""
    if isinstance(error, Mapping) and isinstance(error.get("message"), str):
        msg = error["message"]
    elif error is not None:
        try:
            msg = json.dumps(error)
        except (TypeError, ValueError):
            msg = str(error)
    else:
        msg = message

    if status and msg:
        return f"{status} {msg}"
    if status:
        return f"{status} status code (no body)"
    if msg:
        return msg
    return "(no status code or body)"


def _find_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    target = name.lower()
    for key, value in headers.items():
        if str(key).lower() == target:
            return value
    return None


class APIError(OpenAIFetchError):
    """A normalized failure of an HTTP call to the provider.

    Attributes:
        status: HTTP status code, or ``None`` when no response was received.
        error: Parsed ``error`` object from the response body, if any.
        raw_message: Raw body text (or transport message) when no ``error``
            object was available.
        headers: Response headers (empty when no response was received).
        code: Provider error code lifted from ``error`` (e.g. ``"invalid_api_key"``).
        param: Offending parameter name reported by the provider, if any.
        type: Provider error type (e.g. ``"invalid_request_error"``).
        request_id: Value of the ``x-request-id`` response header.
    """

    def __init__(
        self,
        status: Optional[int],
        error: Any = None,
        message: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        super().__init__(_make_message(status, error, message))
        self.status = status
        self.error = error
        self.raw_message = message
        self.headers: Dict[str, str] = dict(headers or {})
        self.request_id = _find_header(self.headers, "x-request-id")
        data = error if isinstance(error, Mapping) else {}
        self.code = data.get("code")
        self.param = data.get("param")
        self.type = data.get("type")

    @property
    def message(self) -> str:
        return self.args[0] if self.args else ""

    @property
    def category(self) -> ErrorCode:
        """Normalized :class:`ErrorCode` for logging and retry decisions."""
        from .classification import status_to_code

        return status_to_code(self.status)

    @classmethod
    def generate(
        cls,
        status: Optional[int],
        error: Any = None,
        message: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        cause: Optional[BaseException] = None,
    ) -> "APIError":
        """Build the most specific subclass for ``status``.

        With no status the failure never produced a response, so an
        :class:`APIConnectionError` wrapping ``cause`` is returned.
        """
        if status is None:
            return APIConnectionError(cause=cause)
        subclass = _STATUS_CLASSES.get(status)
        if subclass is None:
            subclass = InternalServerError if status >= 500 else APIError
        err = subclass(status, error, message, headers)
        if cause is not None:
            err.__cause__ = cause
        return err


class BadRequestError(APIError):
    pass


class AuthenticationError(APIError):
    pass


class PermissionDeniedError(APIError):
    pass


class NotFoundError(APIError):
    pass


class ConflictError(APIError):
    pass


class UnprocessableEntityError(APIError):
    pass


class RateLimitError(APIError):
    pass


class InternalServerError(APIError):
    pass


class APIConnectionError(APIError):
    """Raised when the request never produced an HTTP response."""

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None) -> None:
        if message is None:
            message = str(cause) if cause is not None and str(cause) else "Connection error."
        super().__init__(None, None, message, None)
        if cause is not None:
            self.__cause__ = cause


class APIConnectionTimeoutError(APIConnectionError):
    """Raised when the request timed out before a response arrived."""

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None) -> None:
        super().__init__(message or "Request timed out.", cause)


_STATUS_CLASSES = {
    400: BadRequestError,
    401: AuthenticationError,
    403: PermissionDeniedError,
    404: NotFoundError,
    409: ConflictError,
    422: UnprocessableEntityError,
    429: RateLimitError,
}


__all__ = [
    "APIError",
    "BadRequestError",
    "AuthenticationError",
    "PermissionDeniedError",
    "NotFoundError",
    "ConflictError",
    "UnprocessableEntityError",
    "RateLimitError",
    "InternalServerError",
    "APIConnectionError",
    "APIConnectionTimeoutError",
]
