"""HTTP transport package.

Exposes the transport adapter, its configuration types, the error
normalizer and the pooled httpx clients.
"""

from .client import get_httpx_client, create_dedicated_client, close_all_clients
from .normalizer import normalize_error
from .options import TransportConfig, TransportHooks, TransportOptions, derive_config, merge_headers
from .response import TransportResponse
from .transport import HttpTransport, create_transport, join_url

__all__ = [
    "get_httpx_client",
    "create_dedicated_client",
    "close_all_clients",
    "normalize_error",
    "TransportConfig",
    "TransportHooks",
    "TransportOptions",
    "derive_config",
    "merge_headers",
    "TransportResponse",
    "HttpTransport",
    "create_transport",
    "join_url",
]
