"""Pydantic DTO describing an in-memory file upload.

Purpose
-------
Callers that hold audio as bytes together with a filename and MIME type pass
a :class:`FileUpload` (or a plain mapping with the same keys) as the
transcription ``file``. Validation catches a missing ``data`` payload before
any request is built.

External dependencies: Pydantic only (no network calls).
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FileUpload(BaseModel):
    """File contents plus optional metadata.

    Attributes:
        data: Raw file bytes.
        name: Filename reported to the API (its extension selects the decoder
            server-side).
        type: MIME type of ``data``.
    """

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(..., min_length=1)
    name: Optional[str] = None
    type: Optional[str] = None


__all__ = ["FileUpload"]
