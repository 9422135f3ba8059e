"""BigCommerce API client package.

This package provides a small synchronous client for the BigCommerce
REST API, for apps authenticated with OAuth2. It handles the
authorization code exchange, the ``X-Auth-*`` request headers, JSON
payload marshaling and a single automatic retry on rate limiting.

:var __version__: Current package version
:type __version__: str
"""

__version__ = "0.1.0"

from .exceptions import (  # noqa: E402
    APIError,
    BigcommerceError,
    ConfigurationError,
    RateLimitError,
    TransportError,
)
from .http_client import BigcommerceClient  # noqa: E402

__all__ = [
    "__version__",
    "BigcommerceClient",
    "BigcommerceError",
    "TransportError",
    "APIError",
    "RateLimitError",
    "ConfigurationError",
]
