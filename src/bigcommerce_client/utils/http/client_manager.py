"""HTTP client construction with the transport policy of the API.

Every request to the API and to the login service goes through an
``httpx.Client`` built here: certificate verification on, a bounded
number of redirects, equal connect and total timeouts and a fixed
User-Agent.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ...config.settings import Settings

logger = logging.getLogger(__name__)


def create_timeout(timeout: float = 30.0, connect: Optional[float] = None) -> httpx.Timeout:
    """Create a timeout configuration object.

    httpx has no single "total" timeout, so the read, write and pool
    phases all get ``timeout`` and the connect phase gets ``connect``
    (defaulting to the same value).

    :param timeout: Timeout for the read, write and pool phases in seconds
    :type timeout: float
    :param connect: Connection timeout in seconds
    :type connect: Optional[float]
    :return: Configured timeout object
    :rtype: httpx.Timeout
    """
    return httpx.Timeout(timeout, connect=timeout if connect is None else connect)


def create_http_client(
    settings: Settings,
    transport: Optional[httpx.BaseTransport] = None,
    **kwargs: Any,
) -> httpx.Client:
    """Create a synchronous HTTP client for the given settings.

    :param settings: Client settings supplying timeouts, redirects and
                     the User-Agent
    :type settings: Settings
    :param transport: Optional transport, mostly for tests and replays
    :type transport: Optional[httpx.BaseTransport]
    :param **kwargs: Additional ``httpx.Client`` options
    :return: Configured HTTP client
    :rtype: httpx.Client
    """
    client_config: Dict[str, Any] = {
        "timeout": create_timeout(settings.timeout),
        "follow_redirects": True,
        "max_redirects": settings.max_redirects,
        "verify": True,
        "headers": {"User-Agent": settings.user_agent},
        **kwargs,
    }
    if transport is not None:
        client_config["transport"] = transport

    client = httpx.Client(**client_config)
    logger.debug(
        "Created HTTP client (timeout=%ss, max_redirects=%d)",
        settings.timeout,
        settings.max_redirects,
    )
    return client
