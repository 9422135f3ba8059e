"""Retry-after handling for throttled API calls.

The API signals throttling with HTTP 429 and tells the client how long
to back off in ``X-Retry-After``. Some edge proxies send the standard
``Retry-After`` instead, in either delta-seconds or HTTP-date form.
"""

import logging
import math
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

RETRY_AFTER_HEADERS = ("x-retry-after", "retry-after")


def parse_retry_after(
    headers: Mapping[str, Any], default: Optional[float] = None
) -> Optional[float]:
    """Parse the back-off delay from parsed response headers.

    ``X-Retry-After`` wins over ``Retry-After``. Negative and
    unparsable values fall through to the next header, then to
    ``default``.

    :param headers: Response headers with lower-cased names
    :type headers: Mapping[str, Any]
    :param default: Delay returned when no header can be parsed
    :type default: Optional[float]
    :return: Delay in seconds
    :rtype: Optional[float]
    """
    for name in RETRY_AFTER_HEADERS:
        raw = str(headers.get(name, "") or "").strip()
        if not raw:
            continue
        try:
            delay = float(raw)
            if math.isfinite(delay) and delay >= 0:
                logger.debug("Parsed %s as delta-seconds: %s", name, delay)
                return delay
        except ValueError:
            pass

        try:
            retry_date = parsedate_to_datetime(raw)
        except (TypeError, ValueError):
            logger.warning("Failed to parse %s header %r", name, raw)
            continue
        if retry_date is None:
            continue
        if retry_date.tzinfo is None:
            retry_date = retry_date.replace(tzinfo=timezone.utc)
        delay = max(0.0, (retry_date - datetime.now(timezone.utc)).total_seconds())
        logger.debug("Parsed %s as HTTP-date: %ss", name, delay)
        return delay

    return default
