"""Multipart form construction for file-upload endpoints.

The transcription endpoint takes ``multipart/form-data``. This module turns
the caller's parameter mapping into a :class:`MultipartForm` that the
transport hands to ``httpx`` (which generates the boundary and the
``Content-Type`` header).

Accepted ``file`` representations:

- ``bytes`` / ``bytearray`` / ``memoryview``
- readable file-like objects (``open(path, "rb")``, ``io.BytesIO``); the
  filename comes from ``.name`` when present
- ``os.PathLike`` paths, read eagerly
- :class:`FileUpload` or a mapping with ``data`` and optional ``name`` /
  ``type``
- ``(filename, content)`` or ``(filename, content, content_type)`` tuples

Anything else raises :class:`RequestValidationError` before a request is
built. File contents are read into memory once so that retries resend the
same bytes.
"""
from __future__ import annotations

import json
import mimetypes
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple, Union

from pydantic import ValidationError

from ..config.defaults import DEFAULT_UPLOAD_CONTENT_TYPE, DEFAULT_UPLOAD_FILENAME
from .dto.file_upload import FileUpload
from .errors import RequestValidationError

UploadTuple = Tuple[str, bytes, str]
FieldValue = Union[str, List[str]]


@dataclass(frozen=True)
class MultipartForm:
    """Form fields plus file parts, in the shapes ``httpx`` expects."""

    data: Dict[str, FieldValue] = field(default_factory=dict)
    files: Dict[str, UploadTuple] = field(default_factory=dict)


def _guess_type(name: str) -> str:
    guessed, _ = mimetypes.guess_type(name)
    return guessed or DEFAULT_UPLOAD_CONTENT_TYPE


def _read_content(content: Any) -> bytes:
    if isinstance(content, (bytes, bytearray, memoryview)):
        return bytes(content)
    if callable(getattr(content, "read", None)):
        data = content.read()
        return data.encode("utf-8") if isinstance(data, str) else bytes(data)
    raise RequestValidationError(
        f"Unsupported file content of type {type(content).__name__}; expected bytes or a readable file object"
    )


def normalize_upload(file: Any) -> UploadTuple:
    """Convert any supported file representation to ``(name, bytes, type)``."""
    if file is None:
        raise RequestValidationError("Transcription requires a file")

    if isinstance(file, Mapping):
        try:
            file = FileUpload.model_validate(dict(file))
        except ValidationError as exc:
            raise RequestValidationError(f"Invalid file mapping: {exc.errors()[0]['msg']}") from exc

    if isinstance(file, FileUpload):
        name = file.name or DEFAULT_UPLOAD_FILENAME
        return name, file.data, file.type or _guess_type(name)

    if isinstance(file, (bytes, bytearray, memoryview)):
        if not len(file):
            raise RequestValidationError("Transcription requires a non-empty file")
        return DEFAULT_UPLOAD_FILENAME, bytes(file), DEFAULT_UPLOAD_CONTENT_TYPE

    if isinstance(file, tuple):
        if len(file) not in (2, 3) or not isinstance(file[0], str):
            raise RequestValidationError(
                "File tuples must be (filename, content) or (filename, content, content_type)"
            )
        name = file[0] or DEFAULT_UPLOAD_FILENAME
        content_type = file[2] if len(file) == 3 and file[2] else _guess_type(name)
        return name, _read_content(file[1]), content_type

    if isinstance(file, os.PathLike):
        path = os.fspath(file)
        with open(path, "rb") as fh:
            data = fh.read()
        name = os.path.basename(path) or DEFAULT_UPLOAD_FILENAME
        return name, data, _guess_type(name)

    if callable(getattr(file, "read", None)):
        raw_name = getattr(file, "name", None)
        name = os.path.basename(raw_name) if isinstance(raw_name, str) and raw_name else DEFAULT_UPLOAD_FILENAME
        content_type = getattr(file, "content_type", None) or _guess_type(name)
        return name, _read_content(file), content_type

    raise RequestValidationError(
        f"Unsupported file representation: {type(file).__name__}. Pass bytes, a binary file "
        "object, a path, a FileUpload, or a (filename, content[, content_type]) tuple."
    )


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_transcription_form(params: Mapping[str, Any]) -> MultipartForm:
    """Build the ``audio/transcriptions`` form from request parameters.

    Raises:
        RequestValidationError: missing ``file``/``model`` or an unsupported
            file representation.
    """
    upload = normalize_upload(params.get("file"))
    model = params.get("model")
    if not model:
        raise RequestValidationError("Transcription requires a model")

    data: Dict[str, FieldValue] = {"model": str(model)}
    for key in ("language", "prompt", "response_format"):
        if params.get(key):
            data[key] = str(params[key])
    if params.get("temperature") is not None:
        data["temperature"] = _stringify(params["temperature"])
    if params.get("timestamp_granularities"):
        data["timestamp_granularities[]"] = [str(g) for g in params["timestamp_granularities"]]
    if params.get("include"):
        data["include[]"] = [str(i) for i in params["include"]]
    if params.get("stream") is not None:
        data["stream"] = _stringify(params["stream"])
    strategy = params.get("chunking_strategy")
    if strategy is not None:
        data["chunking_strategy"] = strategy if isinstance(strategy, str) else json.dumps(strategy)

    return MultipartForm(data=data, files={"file": upload})


__all__ = ["MultipartForm", "build_transcription_form", "normalize_upload"]
