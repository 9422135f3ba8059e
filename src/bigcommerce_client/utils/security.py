"""Secret redaction for logs.

App credentials, store access tokens and authorization codes pass
through the client on every call. Everything here exists so that they
never reach a log record in clear text.
"""

import copy
import logging
import re
import sys
from typing import Any, Dict

# Values that look like credentials wherever they appear
SECRET_VALUE_PATTERNS = {
    "bearer_token": re.compile(r"Bearer\s+[A-Za-z0-9_-]+", re.IGNORECASE),
    "api_key": re.compile(r"[A-Za-z0-9]{32,}"),
}

# Request/response headers carrying credentials
SENSITIVE_HEADERS = {
    "authorization",
    "x-auth-token",
    "x-auth-client",
    "cookie",
    "set-cookie",
}

# Payload keys whose values are always redacted (substring match)
SENSITIVE_KEYS = {"password", "token", "secret", "auth"}

# Payload keys redacted only on exact match
SENSITIVE_EXACT_KEYS = {"code"}

_SENSITIVE_QUERY = re.compile(
    r"([?&](?:access_token|client_secret|token|secret|code|password)=)[^&\s]+",
    re.IGNORECASE,
)


def sanitize_string(value: str) -> str:
    """Redact a string that looks like it carries a credential.

    :param value: String to check
    :type value: str
    :return: The string, or a ``<kind:REDACTED>`` marker
    :rtype: str
    """
    if not value:
        return value
    for kind, pattern in SECRET_VALUE_PATTERNS.items():
        if pattern.search(value):
            return f"<{kind}:REDACTED>"
    return value


def sanitize_headers(headers: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``headers`` with credential headers replaced by their length.

    :param headers: HTTP headers
    :type headers: Dict[str, Any]
    :return: Headers safe to log
    :rtype: Dict[str, Any]
    """
    if not headers:
        return headers
    sanitized = {}
    for name, value in headers.items():
        if name.lower() not in SENSITIVE_HEADERS:
            sanitized[name] = sanitize_string(value) if isinstance(value, str) else value
        elif isinstance(value, str) and value:
            sanitized[name] = f"<REDACTED:length={len(value)}>"
        else:
            sanitized[name] = "<REDACTED>"
    return sanitized


def sanitize_url(url: str) -> str:
    """Redact credential query parameters, e.g. ``code`` on an auth callback."""
    if not url:
        return url
    return _SENSITIVE_QUERY.sub(r"\1<REDACTED>", url)


def _is_sensitive_key(key: Any) -> bool:
    name = str(key).lower()
    return name in SENSITIVE_EXACT_KEYS or any(word in name for word in SENSITIVE_KEYS)


def _redact(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {
            key: "<REDACTED>" if _is_sensitive_key(key) else _redact(value)
            for key, value in obj.items()
        }
    if isinstance(obj, list):
        return [_redact(item) for item in obj]
    if isinstance(obj, str):
        return sanitize_string(obj)
    return obj


def safe_log_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively redact a payload before logging it.

    Values are dropped for keys such as ``client_secret``, ``access_token``
    and ``code``; the input is left untouched.

    :param data: Payload to log
    :type data: Dict[str, Any]
    :return: Redacted copy
    :rtype: Dict[str, Any]
    """
    if not data:
        return data
    return _redact(copy.deepcopy(data))


class SanitizingFormatter(logging.Formatter):
    """Formatter that redacts credentials from the rendered message."""

    def format(self, record: logging.LogRecord) -> str:
        record.msg = sanitize_string(record.getMessage())
        record.args = None
        return super().format(record)


_configured = False


def setup_secure_logging(level: str = "INFO") -> None:
    """Route the root logger to stderr through :class:`SanitizingFormatter`.

    Only the first call has an effect.

    :param level: Logging level name
    :type level: str
    """
    global _configured
    if _configured:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        SanitizingFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=[handler],
        force=True,
    )
    # httpx logs every request at INFO with the full URL
    logging.getLogger("httpx").setLevel(logging.WARNING)
    _configured = True
