"""
Cloud robot configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Union

from ..errors import InvalidConfigError, MissingConfigError
from .base import DEFAULT_ENV_PREFIX

DEFAULT_API_URL = "https://api.automationcloud.net"
DEFAULT_API_TOKEN_URL = (
    "https://auth.automationcloud.net/auth/realms/automationcloud/protocol/openid-connect/token"
)


@dataclass(frozen=True)
class ClientCredentials:
    """OAuth2 client credentials."""

    client_id: str
    client_secret: str


CloudAuth = Union[str, ClientCredentials]


@dataclass
class CloudRobotConfig:
    """
    Configuration for jobs executed by the Automation Service.

    ``auth`` is either a secret API key (sent as basic auth username) or
    OAuth2 client credentials. Intervals and timeouts are in seconds.
    """

    service_id: str | None = None
    auth: CloudAuth | None = None

    # Endpoints
    api_url: str = DEFAULT_API_URL
    api_token_url: str = DEFAULT_API_TOKEN_URL

    # Tracking
    poll_interval: float = 1.0

    # Transport
    request_timeout: float = 30.0
    max_retries: int = 3
    retry_backoff: float = 0.5

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.service_id:
            raise MissingConfigError("Please specify serviceId option", option="service_id")
        if not self.auth:
            raise MissingConfigError("Please specify auth option", option="auth")
        if isinstance(self.auth, dict):
            self.auth = ClientCredentials(
                client_id=self.auth.get("client_id") or self.auth.get("clientId", ""),
                client_secret=self.auth.get("client_secret") or self.auth.get("clientSecret", ""),
            )
        if isinstance(self.auth, ClientCredentials) and not (self.auth.client_id and self.auth.client_secret):
            raise MissingConfigError(
                "OAuth2 auth requires both client_id and client_secret",
                option="auth",
            )
        if not self.api_url.startswith(("http://", "https://")):
            raise InvalidConfigError("api_url must be a valid HTTP(S) URL")
        if self.poll_interval <= 0:
            raise InvalidConfigError("poll_interval must be positive")
        if self.request_timeout <= 0:
            raise InvalidConfigError("request_timeout must be positive")
        if self.max_retries < 0:
            raise InvalidConfigError("max_retries cannot be negative")

    @classmethod
    def from_env(cls, prefix: str = DEFAULT_ENV_PREFIX, **overrides: Any) -> CloudRobotConfig:
        """
        Load settings from environment variables.

        Example:
            ROBOT_SERVICE_ID=5f0c...
            ROBOT_API_KEY=sk-...            (or ROBOT_CLIENT_ID / ROBOT_CLIENT_SECRET)
            ROBOT_API_URL=https://api.automationcloud.net
            ROBOT_POLL_INTERVAL=2
        """
        kwargs: dict[str, Any] = {}
        if service_id := os.getenv(f"{prefix}SERVICE_ID"):
            kwargs["service_id"] = service_id
        if api_key := os.getenv(f"{prefix}API_KEY"):
            kwargs["auth"] = api_key
        elif client_id := os.getenv(f"{prefix}CLIENT_ID"):
            kwargs["auth"] = ClientCredentials(
                client_id=client_id,
                client_secret=os.getenv(f"{prefix}CLIENT_SECRET", ""),
            )
        if api_url := os.getenv(f"{prefix}API_URL"):
            kwargs["api_url"] = api_url
        if token_url := os.getenv(f"{prefix}API_TOKEN_URL"):
            kwargs["api_token_url"] = token_url
        if poll_interval := os.getenv(f"{prefix}POLL_INTERVAL"):
            kwargs["poll_interval"] = float(poll_interval)
        if max_retries := os.getenv(f"{prefix}MAX_RETRIES"):
            kwargs["max_retries"] = int(max_retries)
        kwargs.update(overrides)
        return cls(**kwargs)


__all__ = [
    "CloudRobotConfig",
    "ClientCredentials",
    "CloudAuth",
    "DEFAULT_API_URL",
    "DEFAULT_API_TOKEN_URL",
]
