import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bigcommerce_client.config.settings import Settings  # noqa: E402
from bigcommerce_client.http_client import BigcommerceClient  # noqa: E402
from bigcommerce_client.utils.http import RawResponseTransport  # noqa: E402


def pytest_configure(config):
    # Add custom markers for test organization
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "auth: mark test as testing authentication"
    )


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    """Set required environment variables for tests.

    This fixture automatically sets up the minimum required environment
    variables needed for the Settings class to initialize properly during tests.
    """
    monkeypatch.setenv("BIGCOMMERCE_STORE_CONTEXT", "stores/abc123")
    monkeypatch.setenv("BIGCOMMERCE_CLIENT_ID", "test-client-id")
    monkeypatch.setenv("BIGCOMMERCE_CLIENT_SECRET", "test-client-secret")
    monkeypatch.setenv("BIGCOMMERCE_ACCESS_TOKEN", "test-access-token")
    monkeypatch.delenv("BIGCOMMERCE_API_BASE_URL", raising=False)
    monkeypatch.delenv("BIGCOMMERCE_LOGIN_BASE_URL", raising=False)
    monkeypatch.delenv("BIGCOMMERCE_MAX_RATE_LIMIT_RETRIES", raising=False)

    # Logging
    monkeypatch.setenv("LOG_LEVEL", "INFO")

    yield


@pytest.fixture
def sleeps():
    """Record rate-limit waits instead of blocking."""
    return []


@pytest.fixture
def make_client(sleeps):
    """Build a client answering with canned raw HTTP messages."""
    clients = []

    def _make(replies, **kwargs):
        transport = RawResponseTransport(replies)
        settings = kwargs.pop("settings", None) or Settings()
        client = BigcommerceClient(
            "stores/abc123",
            "test-client-id",
            "test-client-secret",
            "test-access-token",
            settings=settings,
            transport=transport,
            sleep=sleeps.append,
            **kwargs,
        )
        clients.append(client)
        return client, transport

    yield _make

    for client in clients:
        client.close()


@pytest.fixture
def sample_oauth_token():
    """Sample OAuth token response."""
    return {
        "access_token": "new-access-token",
        "scope": "store_v2_products store_v2_orders_read_only",
        "user": {"id": 24654, "username": "merchant", "email": "merchant@example.com"},
        "context": "stores/abc123",
        "account_uuid": "1a2b3c",
    }
