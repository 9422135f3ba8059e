"""Shared Pydantic models for the BigCommerce client.

The models provide type safety and validation for:
- App credentials and the OAuth2 grant
- Outgoing API requests
- Parsed API responses
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


class HttpMethod(str, Enum):
    """HTTP methods accepted by the API call executor."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @property
    def sends_body(self) -> bool:
        """Whether parameters travel as a JSON body rather than a query string."""
        return self in (HttpMethod.POST, HttpMethod.PUT)


# Auth Models
class Credentials(BaseModel):
    """App credentials bound to one store.

    :param store_context: Store path segment, ``stores/{store_hash}``
    :type store_context: str
    :param client_id: Client ID of the app
    :type client_id: str
    :param client_secret: Client secret of the app
    :type client_secret: str
    :param access_token: OAuth2 access token, empty until obtained
    :type access_token: str
    """

    store_context: str
    client_id: str
    client_secret: str
    access_token: str = ""

    @field_validator("store_context")
    @classmethod
    def strip_slashes(cls, v: str) -> str:
        return v.strip().strip("/")


class AccessToken(BaseModel):
    """Grant returned by the OAuth2 token endpoint.

    :param access_token: The permanent store access token
    :type access_token: str
    :param scope: Space separated scopes granted to the app
    :type scope: Optional[str]
    :param user: Installing user (id, username, email)
    :type user: Dict[str, Any]
    :param context: Store context the token is bound to
    :type context: Optional[str]
    :param account_uuid: Account owning the store
    :type account_uuid: Optional[str]
    """

    access_token: str
    scope: Optional[str] = None
    user: Dict[str, Any] = Field(default_factory=dict)
    context: Optional[str] = None
    account_uuid: Optional[str] = None

    @field_validator("user", mode="before")
    @classmethod
    def null_user_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v


# Request / Response Models
class ApiRequest(BaseModel):
    """One call to the API, built per invocation.

    :param method: HTTP method
    :type method: HttpMethod
    :param path: Path below the store context
    :type path: str
    :param params: Query parameters or JSON payload
    :type params: Dict[str, Any]
    """

    method: HttpMethod
    path: str
    params: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("method", mode="before")
    @classmethod
    def upper_method(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v

    @property
    def relative_path(self) -> str:
        return self.path.lstrip("/")


class ApiResponse(BaseModel):
    """Parsed result of one HTTP exchange.

    ``headers`` holds the lower-cased response headers together with the
    synthesized ``http_status_code`` and ``http_status_message`` keys, so
    it can be attached to an :class:`~bigcommerce_client.exceptions.APIError`
    unchanged.

    :param status_code: HTTP status code
    :type status_code: int
    :param status_message: Reason phrase of the status line
    :type status_message: str
    :param headers: Parsed response headers
    :type headers: Dict[str, Any]
    :param body: Decoded JSON body, raw text when not JSON, None when empty
    :type body: Any
    """

    status_code: int
    status_message: str = ""
    headers: Dict[str, Any] = Field(default_factory=dict)
    body: Any = None

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429

    @property
    def has_error_field(self) -> bool:
        """Whether the decoded body is a mapping with a non-null ``error`` key."""
        return isinstance(self.body, dict) and self.body.get("error") is not None

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400 or self.has_error_field
