"""HTTP utilities public API (barrel module).

This package provides:
- HTTP client construction with the API transport policy
- PHP-compatible query string encoding
- Raw HTTP message parsing and a replaying transport
- Retry-after parsing for throttled calls

Recommended import pattern for consumers:
    from bigcommerce_client.utils.http import create_http_client, parse_httpx_response
"""

from .client_manager import create_http_client, create_timeout
from .query import append_query, build_query, flatten_params
from .raw import (
    RawResponseTransport,
    decode_body,
    parse_header_block,
    parse_httpx_response,
    parse_raw_response,
    parse_status_line,
    split_message,
)
from .retry import parse_retry_after

__all__ = [
    "create_http_client",
    "create_timeout",
    "append_query",
    "build_query",
    "flatten_params",
    "RawResponseTransport",
    "decode_body",
    "parse_header_block",
    "parse_httpx_response",
    "parse_raw_response",
    "parse_status_line",
    "split_message",
    "parse_retry_after",
]
