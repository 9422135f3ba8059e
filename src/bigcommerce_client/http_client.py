"""HTTP client for the BigCommerce REST API.

This module provides the client that authenticates and executes calls
against the BigCommerce API on behalf of one store. It is meant for
apps installed through OAuth2: the store access token is obtained with
:meth:`BigcommerceClient.get_access_token` and then relayed on every
call.

Key Features:

- Authorization code exchange against the login service
- ``X-Auth-Client`` / ``X-Auth-Token`` header injection
- Query string parameters for GET/DELETE, JSON bodies for POST/PUT
- One automatic retry after a rate-limited (HTTP 429) call
- Structured errors for transport failures and API errors

Examples:
    >>> with BigcommerceClient("stores/abc123", "client-id", "secret", "token") as bc:
    ...     products = bc.call("GET", "/v3/catalog/products", {"limit": 5})
"""

import json
import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional, Union

import httpx
from pydantic import ValidationError

from .config.settings import Settings
from .exceptions import APIError, ConfigurationError, RateLimitError, TransportError
from .models import AccessToken, ApiRequest, ApiResponse, Credentials, HttpMethod
from .utils.http import (
    append_query,
    create_http_client,
    parse_httpx_response,
    parse_retry_after,
)
from .utils.security import safe_log_dict, sanitize_headers, sanitize_url

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class BigcommerceClient:
    """Client for the BigCommerce REST API, bound to one store.

    One call runs to completion, including any rate-limit wait, before
    control returns to the caller. The client keeps the last parsed
    response in :attr:`last_response` for convenience; code sharing an
    instance between threads should use the :class:`ApiResponse`
    returned by :meth:`request` instead.

    :param store_context: Store path segment, ``stores/{store_hash}``
    :type store_context: str
    :param client_id: Client ID of the app
    :type client_id: str
    :param client_secret: Client secret of the app
    :type client_secret: str
    :param access_token: OAuth2 access token, if already known
    :type access_token: str
    :param settings: Endpoint and transport settings
    :type settings: Optional[Settings]
    :param transport: Optional ``httpx`` transport, mostly for tests
    :type transport: Optional[httpx.BaseTransport]
    :param sleep: Function used to wait before a rate-limit retry
    :type sleep: Callable[[float], None]
    """

    def __init__(
        self,
        store_context: str,
        client_id: str,
        client_secret: str,
        access_token: str = "",
        *,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.credentials = Credentials(
            store_context=store_context,
            client_id=client_id,
            client_secret=client_secret,
            access_token=access_token or "",
        )
        self.settings = settings or Settings()
        self._sleep = sleep
        self._http = create_http_client(self.settings, transport=transport)
        self.last_response: Optional[ApiResponse] = None

    @classmethod
    def from_settings(
        cls, settings: Optional[Settings] = None, **kwargs: Any
    ) -> "BigcommerceClient":
        """Build a client from configured credentials.

        :param settings: Settings to use; read from the environment if omitted
        :type settings: Optional[Settings]
        :param kwargs: Extra keyword arguments for the constructor
        :return: Configured client
        :rtype: BigcommerceClient
        :raises ConfigurationError: If the store context or app credentials
                                    are missing
        """
        settings = settings or Settings()
        for name in ("store_context", "client_id", "client_secret"):
            if not getattr(settings, name):
                raise ConfigurationError(
                    f"BIGCOMMERCE_{name.upper()} is not configured", setting=name
                )
        return cls(
            settings.store_context,
            settings.client_id,
            settings.client_secret,
            settings.access_token or "",
            settings=settings,
            **kwargs,
        )

    def __enter__(self) -> "BigcommerceClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()

    @property
    def store_context(self) -> str:
        return self.credentials.store_context

    @property
    def access_token(self) -> str:
        return self.credentials.access_token

    @access_token.setter
    def access_token(self, value: str) -> None:
        self.credentials.access_token = value or ""

    @property
    def base_url(self) -> str:
        """Base URL of the store, with a trailing slash."""
        return f"{self.settings.api_base_url}/{self.store_context}/"

    @property
    def last_response_headers(self) -> Optional[Dict[str, Any]]:
        """Headers of the most recent exchange, or None before any call."""
        if self.last_response is None:
            return None
        return self.last_response.headers

    # =========================================================================
    # OAuth2
    # =========================================================================

    def exchange_code(
        self, code: str, scope: str, redirect_uri: str
    ) -> Optional[AccessToken]:
        """Exchange a temporary authorization code for the store grant.

        On success the access token is stored on the client.

        :param code: Temporary code received on the auth callback
        :type code: str
        :param scope: Space separated scopes received on the auth callback
        :type scope: str
        :param redirect_uri: The registered auth callback URL
        :type redirect_uri: str
        :return: The grant, or None when the response has no access token
        :rtype: Optional[AccessToken]
        :raises TransportError: If the token endpoint cannot be reached
        """
        payload = {
            "grant_type": "authorization_code",
            "client_id": self.credentials.client_id,
            "client_secret": self.credentials.client_secret,
            "context": self.store_context,
            "code": code,
            "scope": scope,
            "redirect_uri": redirect_uri,
        }
        logger.debug(
            "Exchanging authorization code at %s: %s",
            self.settings.token_url,
            safe_log_dict(payload),
        )

        response = self._send(
            "POST",
            self.settings.token_url,
            data=payload,
            headers={"Content-Type": FORM_CONTENT_TYPE},
        )
        parsed = parse_httpx_response(response)
        self.last_response = parsed

        body = parsed.body
        if not isinstance(body, dict) or not body.get("access_token"):
            logger.warning(
                "Token exchange failed: %s %s",
                parsed.status_code,
                parsed.status_message,
            )
            return None

        try:
            grant = AccessToken.model_validate(body)
        except ValidationError as e:
            logger.warning(
                "Token exchange returned a malformed grant: %d validation error(s)",
                e.error_count(),
            )
            return None
        self.access_token = grant.access_token
        if grant.context and grant.context.strip("/") != self.store_context:
            logger.warning(
                "Token issued for context %s, client is bound to %s",
                grant.context,
                self.store_context,
            )
        logger.info("Obtained access token for %s", self.store_context)
        return grant

    def get_access_token(
        self, code: str, scope: str, redirect_uri: str
    ) -> Optional[str]:
        """Retrieve the OAuth2 access token for the store.

        Failure is reported by returning None, not by raising, except for
        transport failures.

        :param code: Temporary code received on the auth callback
        :type code: str
        :param scope: Space separated scopes received on the auth callback
        :type scope: str
        :param redirect_uri: The registered auth callback URL
        :type redirect_uri: str
        :return: The access token, or None on failure
        :rtype: Optional[str]
        """
        grant = self.exchange_code(code, scope, redirect_uri)
        if grant is None:
            return None
        return grant.access_token

    # =========================================================================
    # API calls
    # =========================================================================

    def call(
        self,
        method: Union[str, HttpMethod],
        path: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Make a call to the API and return the decoded response body.

        :param method: HTTP method: GET, POST, PUT or DELETE
        :type method: Union[str, HttpMethod]
        :param path: Path of the resource below the store context
        :type path: str
        :param params: Query parameters (GET/DELETE) or payload (POST/PUT)
        :type params: Optional[Mapping[str, Any]]
        :return: Decoded JSON body, raw text for non-JSON bodies, None when empty
        :rtype: Any
        :raises APIError: If the API answers with an error
        :raises RateLimitError: If the call is still throttled after retrying
        :raises TransportError: If the request cannot be completed
        """
        return self.request(method, path, params).body

    def request(
        self,
        method: Union[str, HttpMethod],
        path: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> ApiResponse:
        """Make a call to the API and return the full parsed response.

        A rate-limited call waits for the delay announced by the API and
        is re-issued unchanged, up to ``settings.max_rate_limit_retries``
        times. The response of the last attempt is returned.

        :param method: HTTP method: GET, POST, PUT or DELETE
        :type method: Union[str, HttpMethod]
        :param path: Path of the resource below the store context
        :type path: str
        :param params: Query parameters (GET/DELETE) or payload (POST/PUT)
        :type params: Optional[Mapping[str, Any]]
        :return: Parsed response
        :rtype: ApiResponse
        :raises APIError: If the API answers with an error
        :raises RateLimitError: If the call is still throttled after retrying
        :raises TransportError: If the request cannot be completed
        """
        api_request = ApiRequest(method=method, path=path, params=dict(params or {}))

        retries = 0
        while True:
            parsed = self._execute(api_request)
            if not parsed.is_rate_limited:
                break

            retry_after = parse_retry_after(
                parsed.headers, default=self.settings.default_retry_after
            )
            if retries >= self.settings.max_rate_limit_retries:
                logger.warning(
                    "Still rate limited after %d retr%s: %s %s",
                    retries,
                    "y" if retries == 1 else "ies",
                    api_request.method.value,
                    api_request.path,
                )
                raise RateLimitError(
                    api_request.method.value,
                    api_request.path,
                    api_request.params,
                    parsed.headers,
                    parsed.body,
                    retry_after=retry_after,
                )

            retries += 1
            logger.warning(
                "Rate limited on %s %s, retrying in %ss",
                api_request.method.value,
                api_request.path,
                retry_after,
            )
            self._sleep(retry_after)

        if parsed.is_error:
            raise APIError(
                api_request.method.value,
                api_request.path,
                api_request.params,
                parsed.headers,
                parsed.body,
            )
        return parsed

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Make a GET call. See :meth:`call`."""
        return self.call(HttpMethod.GET, path, params)

    def post(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Make a POST call. See :meth:`call`."""
        return self.call(HttpMethod.POST, path, params)

    def put(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Make a PUT call. See :meth:`call`."""
        return self.call(HttpMethod.PUT, path, params)

    def delete(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Make a DELETE call. See :meth:`call`."""
        return self.call(HttpMethod.DELETE, path, params)

    def _execute(self, api_request: ApiRequest) -> ApiResponse:
        """Send one attempt of an API call and parse the response."""
        url = self.base_url + api_request.relative_path
        headers = {
            "Accept": "application/json",
            "X-Auth-Client": self.credentials.client_id,
            "X-Auth-Token": self.credentials.access_token,
        }

        content: Optional[bytes] = None
        if api_request.method.sends_body:
            headers["Content-Type"] = JSON_CONTENT_TYPE
            content = json.dumps(
                api_request.params, separators=(",", ":"), ensure_ascii=False
            ).encode("utf-8")
        else:
            url = append_query(url, api_request.params)

        response = self._send(
            api_request.method.value, url, headers=headers, content=content
        )
        parsed = parse_httpx_response(response)
        self.last_response = parsed
        return parsed

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, turning transport failures into TransportError."""
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "HTTP %s %s headers=%s",
                method,
                sanitize_url(url),
                sanitize_headers(kwargs.get("headers") or {}),
            )
        try:
            response = self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(
                "Transport failure on %s %s: %s", method, sanitize_url(url), e
            )
            raise TransportError(
                str(e) or type(e).__name__, errno=type(e).__name__
            ) from e
        logger.debug(
            "HTTP %s %s -> %d", method, sanitize_url(url), response.status_code
        )
        return response


__all__ = ["BigcommerceClient"]
