"""Per-call context attached to every structured log event.

A ``LogContext`` is built once per request (endpoint path and HTTP method)
and passed to ``log_event`` for each event that request produces, so retry,
error and stream events can be correlated without repeating fields.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class LogContext:
    """Fields shared by the log events of one API call."""

    endpoint: Optional[str] = None
    method: Optional[str] = None
    request_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Flatten ``extra`` into the top level, omitting unset values."""
        merged: Dict[str, Any] = {
            "endpoint": self.endpoint,
            "method": self.method,
            "request_id": self.request_id,
            **self.extra,
        }
        return {k: v for k, v in merged.items() if v is not None}


__all__ = ["LogContext"]
