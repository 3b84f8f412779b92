"""
Authentication for Automation Service requests.

Two schemes are supported:
- Secret API key, sent as the basic-auth username with an empty password
- OAuth2 client credentials, exchanged for a bearer token that is cached
  until shortly before it expires
"""

from __future__ import annotations

import asyncio
import base64
import time
from typing import Any, Protocol

import aiohttp

from ..config import ClientCredentials, CloudRobotConfig
from ..errors import RequestFailedError, error_from_status
from ..logging import Logger, NullLogger, redact_secret

# Tokens are refreshed this many seconds before they expire
TOKEN_REFRESH_MARGIN = 30.0


class AuthAgent(Protocol):
    async def headers(self, session: aiohttp.ClientSession) -> dict[str, str]: ...

    def invalidate(self) -> None: ...


class BasicAuthAgent:
    """Secret key as basic-auth username."""

    def __init__(self, key: str):
        credentials = base64.b64encode(f"{key}:".encode("utf-8")).decode("ascii")
        self._header = f"Basic {credentials}"

    async def headers(self, session: aiohttp.ClientSession) -> dict[str, str]:
        return {"Authorization": self._header}

    def invalidate(self) -> None:
        pass


class OAuth2Agent:
    """OAuth2 client-credentials grant with an in-memory token cache."""

    def __init__(
        self,
        credentials: ClientCredentials,
        token_url: str,
        *,
        timeout: float = 30.0,
        logger: Logger | None = None,
    ):
        self.credentials = credentials
        self.token_url = token_url
        self.timeout = timeout
        self.logger = logger or NullLogger()
        self._access_token: str | None = None
        self._expires_at = 0.0
        self._lock = asyncio.Lock()

    @property
    def token_valid(self) -> bool:
        return self._access_token is not None and time.monotonic() < self._expires_at

    async def headers(self, session: aiohttp.ClientSession) -> dict[str, str]:
        token = await self.get_token(session)
        return {"Authorization": f"Bearer {token}"}

    def invalidate(self) -> None:
        self._access_token = None
        self._expires_at = 0.0

    async def get_token(self, session: aiohttp.ClientSession) -> str:
        async with self._lock:
            token = self._access_token
            if token is None or not self.token_valid:
                token = await self._refresh(session)
            return token

    async def _refresh(self, session: aiohttp.ClientSession) -> str:
        form = {
            "grant_type": "client_credentials",
            "client_id": self.credentials.client_id,
            "client_secret": self.credentials.client_secret,
        }
        self.logger.debug(
            "Requesting access token",
            client_id=self.credentials.client_id,
            client_secret=redact_secret(self.credentials.client_secret),
        )
        try:
            async with session.post(
                self.token_url,
                data=form,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status >= 400:
                    raise error_from_status(
                        response.status,
                        "Access token request failed",
                        method="POST",
                        url=self.token_url,
                        body=await response.text(),
                    )
                payload: dict[str, Any] = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise RequestFailedError(
                f"Access token request failed: {exc}",
                method="POST",
                url=self.token_url,
                cause=exc,
            ) from exc

        token = payload.get("access_token")
        if not token:
            raise RequestFailedError(
                "Access token response has no access_token",
                method="POST",
                url=self.token_url,
            )
        expires_in = float(payload.get("expires_in") or 60)
        self._access_token = token
        self._expires_at = time.monotonic() + max(expires_in - TOKEN_REFRESH_MARGIN, 0.0)
        self.logger.debug("Access token refreshed", expires_in=expires_in)
        return token


def auth_agent_for(config: CloudRobotConfig, logger: Logger | None = None) -> AuthAgent:
    if isinstance(config.auth, ClientCredentials):
        return OAuth2Agent(
            config.auth,
            config.api_token_url,
            timeout=config.request_timeout,
            logger=logger,
        )
    return BasicAuthAgent(str(config.auth))


__all__ = ["AuthAgent", "BasicAuthAgent", "OAuth2Agent", "auth_agent_for", "TOKEN_REFRESH_MARGIN"]
