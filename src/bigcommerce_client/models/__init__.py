"""BigCommerce client models package."""

from .base_models import (
    AccessToken,
    ApiRequest,
    ApiResponse,
    Credentials,
    HttpMethod,
)

__all__ = [
    "AccessToken",
    "ApiRequest",
    "ApiResponse",
    "Credentials",
    "HttpMethod",
]
