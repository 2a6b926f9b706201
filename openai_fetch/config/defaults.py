"""openai_fetch.config.defaults
============================

Central place for small, stable default values used across the openai_fetch
package. These defaults can be overridden via environment variables or
constructor arguments, but provide sensible fallbacks.

Module Purpose
--------------
- Provide a single import location for default constants (no I/O).
- Keep the transport and facade free of magic literals.

This module intentionally avoids importing from other openai_fetch packages to
prevent circular dependencies. Only plain constants should live here.
"""

from __future__ import annotations

# ---- HTTP layer ----

# The HTTP endpoint for the OpenAI API.
OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"

# Value sent in the User-Agent header on every request.
DEFAULT_USER_AGENT = "openai-fetch"

# Header carrying the organization id when one is configured.
ORGANIZATION_HEADER = "OpenAI-Organization"

# Whole-request timeout (milliseconds): ten minutes.
DEFAULT_TIMEOUT_MS = 1000 * 60 * 10


# ---- Retry defaults ----

# Total attempts including the first one.
RETRY_DEFAULT_MAX_ATTEMPTS = 3
# Backoff curve: INITIAL_DELAY * (attempt - 1) ** 2 seconds plus jitter.
RETRY_INITIAL_DELAY_SECONDS = 0.3
RETRY_JITTER_SECONDS = 0.3
RETRY_DEFAULT_METHODS = ("GET", "POST", "PUT", "HEAD", "DELETE", "OPTIONS", "TRACE")
RETRY_DEFAULT_STATUS_CODES = (408, 413, 429, 500, 502, 503, 504)
# Statuses for which a Retry-After header replaces the computed delay.
RETRY_AFTER_STATUS_CODES = (413, 429, 503)


# ---- Streaming ----

STREAM_DONE_SENTINEL = "[DONE]"

# Transcription response formats returned as plain text rather than JSON.
TEXT_TRANSCRIPTION_FORMATS = ("text", "srt", "vtt")

# Fallbacks for multipart uploads that carry no metadata.
DEFAULT_UPLOAD_FILENAME = "audio"
DEFAULT_UPLOAD_CONTENT_TYPE = "application/octet-stream"


__all__ = [
    "OPENAI_DEFAULT_BASE_URL",
    "DEFAULT_USER_AGENT",
    "ORGANIZATION_HEADER",
    "DEFAULT_TIMEOUT_MS",
    "RETRY_DEFAULT_MAX_ATTEMPTS",
    "RETRY_INITIAL_DELAY_SECONDS",
    "RETRY_JITTER_SECONDS",
    "RETRY_DEFAULT_METHODS",
    "RETRY_DEFAULT_STATUS_CODES",
    "RETRY_AFTER_STATUS_CODES",
    "STREAM_DONE_SENTINEL",
    "TEXT_TRANSCRIPTION_FORMATS",
    "DEFAULT_UPLOAD_FILENAME",
    "DEFAULT_UPLOAD_CONTENT_TYPE",
]
