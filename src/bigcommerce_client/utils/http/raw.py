"""Raw HTTP message parsing.

An HTTP response is handled as the text a server writes on the wire:
a status line, header lines, a blank line and the body. Both live
responses from ``httpx`` and canned messages replayed in tests go
through the same functions, so header parsing behaves identically.

The module also provides :class:`RawResponseTransport`, an ``httpx``
transport that answers requests with canned raw messages.
"""

import json
import logging
import re
from typing import Any, Callable, Dict, List, Sequence, Tuple, Union

import httpx

from ...models import ApiResponse

logger = logging.getLogger(__name__)

_BLANK_LINE = re.compile(r"\r\n\r\n|\n\n|\r\r")
_LINE_BREAK = re.compile(r"\r\n|\n|\r")

STATUS_CODE_KEY = "http_status_code"
STATUS_MESSAGE_KEY = "http_status_message"

# Replayed bodies are plain text; length is recomputed by httpx
_REPLAY_SKIPPED_HEADERS = {"content-length", "content-encoding", "transfer-encoding"}


def split_message(raw: str) -> Tuple[str, str]:
    """Split a raw message into its header block and body.

    The split happens on the first blank line, whatever the line ending.
    A message without a blank line is all headers and has an empty body.

    :param raw: Raw HTTP message
    :type raw: str
    :return: ``(header_block, body)``
    :rtype: Tuple[str, str]
    """
    parts = _BLANK_LINE.split(raw, maxsplit=1)
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], parts[1]


def parse_status_line(line: str) -> Tuple[int, str]:
    """Parse ``HTTP/<version> <code> <message>``.

    :param line: Status line
    :type line: str
    :return: ``(status_code, status_message)``
    :rtype: Tuple[int, str]
    :raises ValueError: If the line has no numeric status code
    """
    parts = line.strip().split(" ", 2)
    if len(parts) < 2 or not parts[0].upper().startswith("HTTP/"):
        raise ValueError(f"Malformed status line: {line!r}")
    status_code = int(parts[1])
    status_message = parts[2].strip() if len(parts) > 2 else ""
    return status_code, status_message


def _header_items(lines: Sequence[str]) -> List[Tuple[str, str]]:
    items = []
    for line in lines:
        name, sep, value = line.partition(":")
        if sep and name.strip():
            items.append((name.strip(), value.strip()))
    return items


def parse_header_block(block: str) -> Dict[str, Any]:
    """Parse a header block into a flat mapping.

    The first line is the status line; it yields the ``http_status_code``
    and ``http_status_message`` keys. Every other ``name: value`` line is
    stored under the lower-cased name, later repeats overwriting earlier
    ones. Lines without a colon are skipped.

    :param block: Header block, status line first
    :type block: str
    :return: Parsed headers
    :rtype: Dict[str, Any]
    """
    lines = _LINE_BREAK.split(block)
    status_code, status_message = parse_status_line(lines[0])
    headers: Dict[str, Any] = {
        STATUS_CODE_KEY: status_code,
        STATUS_MESSAGE_KEY: status_message,
    }
    for name, value in _header_items(lines[1:]):
        headers[name.lower()] = value
    return headers


def decode_body(body: str) -> Any:
    """Decode a JSON body, falling back to the raw text.

    :param body: Response body
    :type body: str
    :return: Decoded JSON, the raw text when it is not JSON, or None
             when the body is empty
    :rtype: Any
    """
    if not body.strip():
        return None
    try:
        return json.loads(body)
    except ValueError:
        logger.debug("Response body is not JSON (%d chars)", len(body))
        return body


def parse_raw_response(raw: str) -> ApiResponse:
    """Parse a complete raw HTTP message.

    :param raw: Raw HTTP message
    :type raw: str
    :return: Parsed response
    :rtype: ApiResponse
    """
    block, body = split_message(raw)
    headers = parse_header_block(block)
    return ApiResponse(
        status_code=headers[STATUS_CODE_KEY],
        status_message=headers[STATUS_MESSAGE_KEY],
        headers=headers,
        body=decode_body(body),
    )


def render_head(response: httpx.Response) -> str:
    """Render the status line and headers of an ``httpx`` response."""
    lines = [
        f"{response.http_version} {response.status_code} {response.reason_phrase}".rstrip()
    ]
    lines.extend(f"{name}: {value}" for name, value in response.headers.multi_items())
    return "\r\n".join(lines)


def parse_httpx_response(response: httpx.Response) -> ApiResponse:
    """Parse a received ``httpx`` response like a raw message.

    :param response: Received response
    :type response: httpx.Response
    :return: Parsed response
    :rtype: ApiResponse
    """
    headers = parse_header_block(render_head(response))
    return ApiResponse(
        status_code=headers[STATUS_CODE_KEY],
        status_message=headers[STATUS_MESSAGE_KEY],
        headers=headers,
        body=decode_body(response.text),
    )


RawReply = Union[str, Callable[[httpx.Request], str]]


class RawResponseTransport(httpx.BaseTransport):
    """Transport replaying canned raw HTTP messages.

    Replies are served in order, one per request; a callable reply is
    called with the request and must return the raw message. Every
    request received is kept in ``requests``.

    .. example::
       >>> transport = RawResponseTransport(
       ...     ["HTTP/1.1 200 OK\\r\\nContent-Type: application/json\\r\\n\\r\\n{}"]
       ... )
       >>> client = httpx.Client(transport=transport)
    """

    def __init__(self, replies: Sequence[RawReply]):
        self._replies: List[RawReply] = list(replies)
        self.requests: List[httpx.Request] = []

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if not self._replies:
            raise httpx.ConnectError("No canned response left", request=request)

        reply = self._replies.pop(0)
        raw = reply(request) if callable(reply) else reply
        block, body = split_message(raw)
        lines = _LINE_BREAK.split(block)
        status_code, status_message = parse_status_line(lines[0])
        header_items = [
            (name, value)
            for name, value in _header_items(lines[1:])
            if name.lower() not in _REPLAY_SKIPPED_HEADERS
        ]

        return httpx.Response(
            status_code,
            headers=header_items,
            content=body.encode("utf-8"),
            request=request,
            extensions={
                "http_version": lines[0].split(" ", 1)[0].encode("ascii"),
                "reason_phrase": status_message.encode("ascii", errors="ignore"),
            },
        )
