"""Retry policy for the HTTP transport.

The policy is a frozen value: the transport consults it between attempts but
never mutates it, so one policy can be shared by any number of derived
transports. All delays are expressed in milliseconds.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from email.utils import parsedate_to_datetime
from datetime import datetime, timezone
from typing import Callable, Mapping, Optional

from ...config.defaults import (
    RETRY_AFTER_STATUS_CODES,
    RETRY_DEFAULT_MAX_ATTEMPTS,
    RETRY_DEFAULT_METHODS,
    RETRY_DEFAULT_STATUS_CODES,
    RETRY_INITIAL_DELAY_SECONDS,
    RETRY_JITTER_SECONDS,
)


def number_between(low: float, high: float) -> float:
    return random.uniform(low, high)


def default_delay(attempt: int) -> float:
    """Quadratic backoff with symmetric jitter, in milliseconds.

    ``attempt`` is the 1-based number of the attempt that just failed. The
    first retry therefore waits only the jitter; negative values clamp to 0.
    """
    jitter = number_between(-RETRY_JITTER_SECONDS, RETRY_JITTER_SECONDS)
    sleep = RETRY_INITIAL_DELAY_SECONDS * (attempt - 1) ** 2
    return max(0.0, (sleep + jitter) * 1000)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration for one transport.

    Attributes:
        max_attempts: Total attempts per call, the first one included. ``1``
            disables retries.
        methods: Upper-case HTTP methods eligible for retry.
        status_codes: Response statuses that trigger a retry.
        after_status_codes: Statuses for which a ``Retry-After`` header, when
            present, replaces the computed delay.
        max_retry_after_ms: Give up instead of waiting when ``Retry-After``
            asks for longer than this. ``None`` means no ceiling.
        backoff_limit_ms: Upper bound applied to every computed delay.
        delay: ``attempt -> milliseconds`` backoff function.
    """

    max_attempts: int = RETRY_DEFAULT_MAX_ATTEMPTS
    methods: tuple[str, ...] = RETRY_DEFAULT_METHODS
    status_codes: tuple[int, ...] = RETRY_DEFAULT_STATUS_CODES
    after_status_codes: tuple[int, ...] = RETRY_AFTER_STATUS_CODES
    max_retry_after_ms: Optional[float] = None
    backoff_limit_ms: Optional[float] = None
    delay: Callable[[int], float] = default_delay

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    def allows(self, method: str, attempt: int) -> bool:
        """Whether another attempt may follow attempt number ``attempt``."""
        return attempt < self.max_attempts and method.upper() in self.methods

    def backoff_ms(self, attempt: int) -> float:
        delay = max(0.0, float(self.delay(attempt)))
        if self.backoff_limit_ms is not None:
            delay = min(delay, self.backoff_limit_ms)
        return delay

    def delay_for_status(
        self, status: int, headers: Mapping[str, str], attempt: int
    ) -> Optional[float]:
        """Return the wait before retrying a response, or ``None`` to give up."""
        if status not in self.status_codes:
            return None
        if status in self.after_status_codes:
            after_ms = parse_retry_after(headers)
            if after_ms is not None:
                if self.max_retry_after_ms is not None and after_ms > self.max_retry_after_ms:
                    return None
                return after_ms
        return self.backoff_ms(attempt)


def parse_retry_after(headers: Mapping[str, str]) -> Optional[float]:
    """Parse ``Retry-After`` (seconds or HTTP date) into milliseconds."""
    raw = None
    for key, value in headers.items():
        if str(key).lower() == "retry-after":
            raw = value
            break
    if not raw:
        return None
    raw = str(raw).strip()
    try:
        return max(0.0, float(raw) * 1000)
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(raw)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds() * 1000)


DEFAULT_RETRY_POLICY = RetryPolicy()


__all__ = [
    "RetryPolicy",
    "DEFAULT_RETRY_POLICY",
    "default_delay",
    "parse_retry_after",
]
