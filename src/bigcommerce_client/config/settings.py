"""Configuration settings for the BigCommerce client.

This module defines the configuration settings for the client,
including app credentials, API endpoints and transport tuning.
Settings are loaded from environment variables and .env files.
"""

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .. import __version__

DEFAULT_USER_AGENT = f"bigcommerce-python-client/{__version__}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Every field may be set through a ``BIGCOMMERCE_``-prefixed variable,
    except ``log_level`` which reads ``LOG_LEVEL``.

    :param store_context: Store path segment, ``stores/{store_hash}``
    :type store_context: Optional[str]
    :param client_id: Client ID of the app
    :type client_id: Optional[str]
    :param client_secret: Client secret of the app
    :type client_secret: Optional[str]
    :param access_token: OAuth2 access token for the store
    :type access_token: Optional[str]
    :param api_base_url: Base URL of the REST API
    :type api_base_url: str
    :param login_base_url: Base URL of the OAuth2 login service
    :type login_base_url: str
    :param timeout: Connect and total timeout, in seconds
    :type timeout: float
    :param max_redirects: Redirects followed before giving up
    :type max_redirects: int
    :param max_rate_limit_retries: Automatic re-issues after a 429
    :type max_rate_limit_retries: int
    :param default_retry_after: Wait used when a 429 carries no retry header
    :type default_retry_after: float
    :param user_agent: User-Agent sent on every request
    :type user_agent: str
    :param log_level: Logging level for the CLI
    :type log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="BIGCOMMERCE_",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env file
        populate_by_name=True,
    )

    # App credentials
    store_context: Optional[str] = Field(
        None, description="Store context, e.g. stores/{store_hash}"
    )
    client_id: Optional[str] = Field(None, description="App Client ID")
    client_secret: Optional[str] = Field(None, description="App Client Secret")
    access_token: Optional[str] = Field(None, description="OAuth2 access token")

    # Endpoints
    api_base_url: str = Field(
        "https://api.bigcommerce.com", description="BigCommerce API Base URL"
    )
    login_base_url: str = Field(
        "https://login.bigcommerce.com", description="BigCommerce OAuth2 Base URL"
    )

    # Transport
    timeout: float = Field(30.0, gt=0, description="Connect and total timeout")
    max_redirects: int = Field(3, ge=0, description="Maximum redirects followed")
    max_rate_limit_retries: int = Field(
        1, ge=0, description="Automatic retries after an HTTP 429"
    )
    default_retry_after: float = Field(
        1.0, ge=0, description="Seconds to wait when a 429 has no retry header"
    )
    user_agent: str = Field(DEFAULT_USER_AGENT, description="User-Agent header")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", validation_alias="LOG_LEVEL", description="Logging level"
    )

    @field_validator("store_context")
    @classmethod
    def normalize_store_context(cls, v: Optional[str]) -> Optional[str]:
        """Normalize a store context or bare store hash.

        Accepts ``stores/abc123``, ``/stores/abc123/`` or just ``abc123``
        and always returns ``stores/abc123``.

        :param v: The configured store context
        :type v: Optional[str]
        :return: Normalized store context
        :rtype: Optional[str]
        """
        if v is None:
            return v
        v = v.strip().strip("/")
        if not v:
            return None
        if "/" not in v:
            return f"stores/{v}"
        return v

    @field_validator("api_base_url", "login_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def token_url(self) -> str:
        """Get the OAuth2 token endpoint.

        :return: Token endpoint URL
        :rtype: str
        """
        return f"{self.login_base_url}/oauth2/token"


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()
