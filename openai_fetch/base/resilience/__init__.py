"""Resilience helpers (retry policy)."""

from .retry import DEFAULT_RETRY_POLICY, RetryPolicy, default_delay, parse_retry_after

__all__ = ["DEFAULT_RETRY_POLICY", "RetryPolicy", "default_delay", "parse_retry_after"]
