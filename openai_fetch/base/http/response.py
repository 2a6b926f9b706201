"""Response wrapper returned by :meth:`HttpTransport.post`."""
from __future__ import annotations

from typing import Any, Dict, Iterator, Optional

import httpx

from ..cancellation import CancellationToken
from ..errors import APIError


class TransportResponse:
    """Successful response with body-consumption helpers.

    For streamed requests the body has not been read yet; ``iter_bytes``
    yields it incrementally, while ``json``/``text``/``content`` read it in
    full first.
    """

    def __init__(self, response: httpx.Response, signal: Optional[CancellationToken] = None) -> None:
        self._response = response
        self.signal = signal

    @property
    def raw(self) -> httpx.Response:
        return self._response

    @property
    def status(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self._response.headers.items())

    def json(self) -> Any:
        """Parsed JSON body; a 2xx body that is not JSON raises ``APIError``."""
        self._response.read()
        try:
            return self._response.json()
        except ValueError as exc:
            raise APIError(self.status, None, self._response.text, self.headers) from exc

    def text(self) -> str:
        self._response.read()
        return self._response.text

    def content(self) -> bytes:
        return self._response.read()

    def iter_bytes(self, chunk_size: Optional[int] = None) -> Iterator[bytes]:
        return self._response.iter_bytes(chunk_size)

    def close(self) -> None:
        self._response.close()

    def __enter__(self) -> "TransportResponse":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"TransportResponse(status={self.status})"


__all__ = ["TransportResponse"]
