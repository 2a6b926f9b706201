"""Formatter and per-call context used by :mod:`openai_fetch.base.logging`."""

from .json_formatter import JsonFormatter
from .logging_context import LogContext

__all__ = ["JsonFormatter", "LogContext"]
