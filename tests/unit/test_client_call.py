"""Unit tests for BigcommerceClient.call.

Tests request building, response parsing, outcome classification and
the rate-limit retry of the API call executor.
"""

import json

import httpx
import pytest

from bigcommerce_client.config.settings import Settings
from bigcommerce_client.exceptions import APIError, RateLimitError, TransportError
from bigcommerce_client.http_client import BigcommerceClient
from bigcommerce_client.models import ApiResponse, HttpMethod

OK_EMPTY = "HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n\r\n{}"
OK_ID_5 = 'HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n\r\n{"id":5}'
THROTTLED = "HTTP/1.1 429 Too Many Requests\r\nX-Retry-After: 2\r\n\r\n{}"


@pytest.mark.unit
class TestRequestBuilding:
    """Test how calls are turned into HTTP requests."""

    @pytest.mark.parametrize("method", ["GET", "DELETE"])
    def test_query_methods_encode_params_in_url(self, make_client, method):
        client, transport = make_client([OK_EMPTY])

        client.call(method, "/v3/catalog/products", {"limit": 5, "is_visible": True})

        request = transport.requests[0]
        assert request.method == method
        assert request.url.params["limit"] == "5"
        assert request.url.params["is_visible"] == "1"
        assert request.content == b""
        assert "content-type" not in request.headers

    @pytest.mark.parametrize("method", ["POST", "PUT"])
    def test_body_methods_encode_params_as_json(self, make_client, method):
        client, transport = make_client([OK_EMPTY])
        payload = {"name": "Shirt", "price": 9.5, "categories": [18]}

        client.call(method, "/v3/catalog/products", payload)

        request = transport.requests[0]
        assert request.method == method
        assert request.url.query == b""
        assert json.loads(request.content) == payload
        assert request.headers["content-type"] == "application/json; charset=utf-8"

    def test_json_body_keeps_slashes_and_unicode(self, make_client):
        client, transport = make_client([OK_EMPTY])

        client.post("/v2/pages", {"url": "/about-us/", "name": "Café"})

        body = transport.requests[0].content.decode("utf-8")
        assert '"/about-us/"' in body
        assert "Café" in body

    def test_url_is_built_from_store_context(self, make_client):
        client, transport = make_client([OK_EMPTY])

        client.call("GET", "//v3/catalog/products")

        url = transport.requests[0].url
        assert url.scheme == "https"
        assert url.host == "api.bigcommerce.com"
        assert url.path == "/stores/abc123/v3/catalog/products"

    def test_auth_headers_are_attached(self, make_client):
        client, transport = make_client([OK_EMPTY])

        client.get("/v2/store")

        headers = transport.requests[0].headers
        assert headers["accept"] == "application/json"
        assert headers["x-auth-client"] == "test-client-id"
        assert headers["x-auth-token"] == "test-access-token"
        assert headers["user-agent"].startswith("bigcommerce-python-client/")

    def test_nested_params_use_bracket_notation(self, make_client):
        client, transport = make_client([OK_EMPTY])

        client.get("/v3/catalog/products", {"include": ["variants", "images"]})

        params = transport.requests[0].url.params
        assert params["include[0]"] == "variants"
        assert params["include[1]"] == "images"

    def test_method_is_case_insensitive(self, make_client):
        client, transport = make_client([OK_EMPTY, OK_EMPTY])

        client.call("get", "/v2/store")
        client.call(HttpMethod.DELETE, "/v2/store")

        assert [r.method for r in transport.requests] == ["GET", "DELETE"]

    def test_unsupported_method_is_rejected(self, make_client):
        client, transport = make_client([OK_EMPTY])

        with pytest.raises(ValueError):
            client.call("PATCH", "/v2/store")
        assert transport.requests == []


@pytest.mark.unit
class TestResponseHandling:
    """Test parsing and classification of responses."""

    def test_success_returns_decoded_body(self, make_client):
        client, _ = make_client([OK_ID_5])

        assert client.call("GET", "/v3/catalog/products/5") == {"id": 5}
        assert client.last_response.status_code == 200
        assert client.last_response_headers["http_status_code"] == 200
        assert client.last_response_headers["http_status_message"] == "OK"
        assert client.last_response_headers["content-type"] == "application/json"

    def test_request_returns_full_response(self, make_client):
        client, _ = make_client([OK_ID_5])

        response = client.request("GET", "/v3/catalog/products/5")

        assert isinstance(response, ApiResponse)
        assert response.status_code == 200
        assert response.status_message == "OK"
        assert response.body == {"id": 5}
        assert response.headers["content-type"] == "application/json"

    def test_last_response_headers_is_none_before_any_call(self, make_client):
        client, _ = make_client([])
        assert client.last_response_headers is None

    def test_non_json_body_is_returned_raw(self, make_client):
        client, _ = make_client(["HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\n\r\npong"])
        assert client.call("GET", "/v2/time") == "pong"

    def test_empty_body_returns_none(self, make_client):
        client, _ = make_client(["HTTP/1.1 204 No Content\r\n\r\n"])
        assert client.call("DELETE", "/v3/catalog/products/5") is None

    def test_bare_newline_line_endings(self, make_client):
        client, _ = make_client(['HTTP/1.1 200 OK\nContent-Type: application/json\n\n{"id":5}'])
        assert client.call("GET", "/v3/catalog/products/5") == {"id": 5}

    def test_error_field_wins_on_success_status(self, make_client):
        client, _ = make_client(
            ['HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n\r\n{"error": "Invalid field"}']
        )

        with pytest.raises(APIError) as exc_info:
            client.call("PUT", "/v2/products/5", {"bogus": 1})

        error = exc_info.value
        assert not isinstance(error, RateLimitError)
        assert error.status_code == 200
        assert error.response == {"error": "Invalid field"}

    def test_null_error_field_is_not_an_error(self, make_client):
        client, _ = make_client(
            ['HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n\r\n{"error": null, "id": 1}']
        )
        assert client.call("GET", "/v2/products/1") == {"error": None, "id": 1}

    def test_http_error_raises_api_error_with_context(self, make_client):
        body = '[{"status": 404, "message": "The requested resource was not found."}]'
        client, _ = make_client(
            [f"HTTP/1.1 404 Not Found\r\nContent-Type: application/json\r\n\r\n{body}"]
        )

        with pytest.raises(APIError) as exc_info:
            client.call("GET", "/v2/products/999", {"include": "skus"})

        error = exc_info.value
        assert error.method == "GET"
        assert error.path == "/v2/products/999"
        assert error.params == {"include": "skus"}
        assert error.status_code == 404
        assert error.message == "Not Found"
        assert str(error) == "Not Found"
        assert error.response_headers["http_status_code"] == 404
        assert error.response_headers["content-type"] == "application/json"
        assert error.response == json.loads(body)

    def test_server_error_raises_api_error(self, make_client):
        client, _ = make_client(["HTTP/1.1 500 Internal Server Error\r\n\r\noops"])

        with pytest.raises(APIError) as exc_info:
            client.call("POST", "/v3/catalog/products", {"name": "x"})
        assert exc_info.value.response == "oops"


@pytest.mark.unit
class TestRateLimitRetry:
    """Test the automatic retry after HTTP 429."""

    def test_throttled_call_waits_and_is_reissued_once(self, make_client, sleeps):
        client, transport = make_client([THROTTLED, OK_ID_5])

        result = client.call("POST", "/v3/catalog/products", {"name": "Shirt"})

        assert sleeps == [2.0]
        assert len(transport.requests) == 2
        first, second = transport.requests
        assert (first.method, first.url, first.content) == (
            second.method,
            second.url,
            second.content,
        )
        # The retried response is the one returned
        assert result == {"id": 5}
        assert client.last_response.status_code == 200

    def test_throttled_response_with_error_field_is_retried(self, make_client, sleeps):
        throttled_with_error = (
            "HTTP/1.1 429 Too Many Requests\r\nX-Retry-After: 1\r\n\r\n"
            '{"error":"throttled"}'
        )
        client, transport = make_client([throttled_with_error, OK_ID_5])

        assert client.call("GET", "/v2/orders") == {"id": 5}
        assert sleeps == [1.0]
        assert len(transport.requests) == 2

    def test_still_throttled_after_retry_raises(self, make_client, sleeps):
        client, transport = make_client([THROTTLED, THROTTLED])

        with pytest.raises(RateLimitError) as exc_info:
            client.call("GET", "/v2/orders")

        assert sleeps == [2.0]
        assert len(transport.requests) == 2
        error = exc_info.value
        assert isinstance(error, APIError)
        assert error.status_code == 429
        assert error.retry_after == 2.0
        assert error.message == "Too Many Requests"

    def test_retry_disabled(self, make_client, sleeps):
        client, transport = make_client(
            [THROTTLED], settings=Settings(max_rate_limit_retries=0)
        )

        with pytest.raises(RateLimitError):
            client.call("GET", "/v2/orders")
        assert sleeps == []
        assert len(transport.requests) == 1

    def test_missing_retry_header_uses_default_delay(self, make_client, sleeps):
        client, _ = make_client(
            ["HTTP/1.1 429 Too Many Requests\r\n\r\n", OK_EMPTY],
            settings=Settings(default_retry_after=0.5),
        )

        client.call("GET", "/v2/orders")
        assert sleeps == [0.5]

    def test_standard_retry_after_header_is_honoured(self, make_client, sleeps):
        client, _ = make_client(
            ["HTTP/1.1 429 Too Many Requests\r\nRetry-After: 3\r\n\r\n", OK_EMPTY]
        )

        client.call("GET", "/v2/orders")
        assert sleeps == [3.0]

    def test_retried_call_can_still_fail(self, make_client, sleeps):
        client, _ = make_client([THROTTLED, "HTTP/1.1 403 Forbidden\r\n\r\n"])

        with pytest.raises(APIError) as exc_info:
            client.call("GET", "/v2/orders")
        assert exc_info.value.status_code == 403
        assert sleeps == [2.0]


@pytest.mark.unit
class TestTransportFailures:
    """Test that network failures surface as TransportError."""

    def _client(self, handler, **settings):
        return BigcommerceClient(
            "stores/abc123",
            "test-client-id",
            "test-client-secret",
            "test-access-token",
            settings=Settings(**settings),
            transport=httpx.MockTransport(handler),
        )

    def test_unreachable_host_raises_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("Name or service not known", request=request)

        with self._client(handler) as client:
            with pytest.raises(TransportError) as exc_info:
                client.call("GET", "/v2/store")

        error = exc_info.value
        assert not isinstance(error, APIError)
        assert error.errno == "ConnectError"
        assert "Name or service not known" in error.message

    def test_timeout_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ReadTimeout("timed out", request=request)

        with self._client(handler) as client:
            with pytest.raises(TransportError) as exc_info:
                client.call("GET", "/v2/store")

        assert exc_info.value.errno == "ReadTimeout"
        assert len(calls) == 1

    def test_redirects_are_followed(self):
        def handler(request):
            if request.url.path.endswith("/old"):
                return httpx.Response(
                    301, headers={"Location": "https://api.bigcommerce.com/stores/abc123/v2/new"}
                )
            return httpx.Response(200, json={"moved": True})

        with self._client(handler) as client:
            assert client.call("GET", "/v2/old") == {"moved": True}

    def test_redirect_loop_raises_transport_error(self):
        seen = []

        def handler(request):
            seen.append(request.url)
            return httpx.Response(302, headers={"Location": str(request.url)})

        with self._client(handler, max_redirects=3) as client:
            with pytest.raises(TransportError) as exc_info:
                client.call("GET", "/v2/loop")

        assert exc_info.value.errno == "TooManyRedirects"
        assert len(seen) == 4
