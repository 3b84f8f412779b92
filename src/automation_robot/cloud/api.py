"""
Automation Service HTTP client.

Thin async client over ``aiohttp`` for the job endpoints of the Automation
Service. Responses are decoded into small dataclasses; failures raise
RequestFailedError after bounded retries with exponential backoff.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import aiohttp

from ..config import CloudRobotConfig
from ..errors import RequestFailedError, error_from_status
from ..logging import Logger, NullLogger, timed, truncate_for_log
from ..types import JobCategory
from .auth import AuthAgent, auth_agent_for

# =============================================================================
# Wire types
# =============================================================================


@dataclass
class ServiceJob:
    """Job record as returned by ``POST /jobs`` and ``GET /jobs/:id``."""

    id: str
    state: str
    category: str = JobCategory.TEST.value
    awaiting_input_key: str | None = None
    error: dict[str, Any] | None = None
    service_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ServiceJob:
        return cls(
            id=data["id"],
            state=data.get("state") or "created",
            category=data.get("category") or JobCategory.TEST.value,
            awaiting_input_key=data.get("awaitingInputKey"),
            error=data.get("error"),
            service_id=data.get("serviceId"),
        )


@dataclass
class ServiceJobEvent:
    id: str
    name: str
    key: str | None = None
    created_at: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ServiceJobEvent:
        return cls(
            id=str(data.get("id", "")),
            name=data["name"],
            key=data.get("key"),
            created_at=data.get("createdAt"),
        )


@dataclass
class ServiceJobOutput:
    job_id: str
    key: str
    data: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ServiceJobOutput:
        return cls(job_id=data.get("jobId", ""), key=data["key"], data=data.get("data"))


@dataclass
class ServiceJobInput:
    job_id: str
    key: str
    data: Any = None
    encrypted: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ServiceJobInput:
        return cls(
            job_id=data.get("jobId", ""),
            key=data["key"],
            data=data.get("data"),
            encrypted=bool(data.get("encrypted", False)),
        )


@dataclass
class PreviousJobOutput:
    """Output of an earlier job with matching inputs."""

    job_id: str
    key: str
    data: Any = None
    variability: float = 0.0
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PreviousJobOutput:
        known = {"jobId", "key", "data", "variability"}
        return cls(
            job_id=data.get("jobId", ""),
            key=data.get("key", ""),
            data=data.get("data"),
            variability=float(data.get("variability") or 0.0),
            extra={k: v for k, v in data.items() if k not in known},
        )


# =============================================================================
# Client
# =============================================================================


class AutomationServiceClient:
    """
    Client for the Automation Service REST API.

    The aiohttp session is created on first use and must be released with
    ``close()`` (or by using the client as an async context manager).
    """

    def __init__(
        self,
        config: CloudRobotConfig,
        *,
        auth: AuthAgent | None = None,
        logger: Logger | None = None,
    ):
        self.config = config
        self.logger = logger or NullLogger()
        self.auth = auth or auth_agent_for(config, self.logger)
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> AutomationServiceClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.request_timeout),
            )
        return self._session

    def url(self, path: str) -> str:
        return f"{self.config.api_url.rstrip('/')}{path}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        allow_not_found: bool = False,
    ) -> Any:
        """
        Send a request and return the decoded JSON body.

        Connection errors, 5xx and 429 responses are retried up to
        ``max_retries`` times. A 401 drops the cached token and retries once.
        With ``allow_not_found`` a 404 returns None instead of raising.
        """
        session = await self._get_session()
        url = self.url(path)
        refreshed_auth = False
        attempt = 0

        while True:
            try:
                headers = await self.auth.headers(session)
                with timed() as timer:
                    async with session.request(
                        method, url, params=params, json=json, headers=headers
                    ) as response:
                        body = await self._read_body(response)
                        status = response.status
                self.logger.debug(
                    "Request completed",
                    method=method,
                    url=url,
                    status=status,
                    latency_ms=timer.elapsed_ms,
                )
                if status < 400:
                    return body
                if status == 404 and allow_not_found:
                    return None
                if status == 401 and not refreshed_auth:
                    refreshed_auth = True
                    self.auth.invalidate()
                    continue
                error = error_from_status(
                    status,
                    _error_message(body, status),
                    method=method,
                    url=url,
                    body=body if isinstance(body, dict) else truncate_for_log(str(body or "")),
                )
            except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                error = RequestFailedError(
                    f"Request failed: {str(exc) or type(exc).__name__}",
                    method=method,
                    url=url,
                    cause=exc,
                )

            if not error.retryable or attempt >= self.config.max_retries:
                raise error
            attempt += 1
            self.logger.warning(
                "Request failed, retrying",
                method=method,
                url=url,
                attempt=attempt,
                error=error,
            )
            await asyncio.sleep(self.config.retry_backoff * (2 ** (attempt - 1)))

    @staticmethod
    async def _read_body(response: aiohttp.ClientResponse) -> Any:
        text = await response.text()
        if not text:
            return None
        try:
            return await response.json(content_type=None)
        except ValueError:
            return text

    # -------------------------------------------------------------------------
    # Jobs
    # -------------------------------------------------------------------------

    async def create_job(
        self,
        service_id: str,
        *,
        category: JobCategory | str = JobCategory.TEST,
        input: dict[str, Any] | None = None,
    ) -> ServiceJob:
        body = await self.request(
            "POST",
            "/jobs",
            json={
                "serviceId": service_id,
                "category": JobCategory(category).value,
                "input": dict(input or {}),
            },
        )
        return ServiceJob.from_dict(body)

    async def get_job(self, job_id: str) -> ServiceJob:
        body = await self.request("GET", f"/jobs/{_segment(job_id)}")
        return ServiceJob.from_dict(body)

    async def get_job_events(self, job_id: str, offset: int = 0) -> list[ServiceJobEvent]:
        body = await self.request(
            "GET",
            f"/jobs/{_segment(job_id)}/events",
            params={"offset": offset},
        )
        return [ServiceJobEvent.from_dict(item) for item in (body or {}).get("data", [])]

    async def get_job_output(self, job_id: str, key: str) -> ServiceJobOutput | None:
        """Fetch one output; None when the service has no output for ``key`` yet."""
        body = await self.request(
            "GET",
            f"/jobs/{_segment(job_id)}/outputs/{_segment(key)}",
            allow_not_found=True,
        )
        if body is None:
            return None
        return ServiceJobOutput.from_dict(body)

    async def send_job_input(self, job_id: str, key: str, data: Any) -> ServiceJobInput:
        body = await self.request(
            "POST",
            f"/jobs/{_segment(job_id)}/inputs",
            json={"key": key, "data": data},
        )
        return ServiceJobInput.from_dict(body or {"key": key, "data": data, "jobId": job_id})

    async def cancel_job(self, job_id: str) -> None:
        await self.request("POST", f"/jobs/{_segment(job_id)}/cancel")

    # -------------------------------------------------------------------------
    # Services
    # -------------------------------------------------------------------------

    async def get_previous_job_outputs(
        self,
        service_id: str,
        key: str,
        inputs: dict[str, Any] | None = None,
    ) -> list[PreviousJobOutput]:
        body = await self.request(
            "POST",
            f"/services/{_segment(service_id)}/previous-job-outputs",
            params={"key": key},
            json={"inputs": dict(inputs or {})},
        )
        return [PreviousJobOutput.from_dict(item) for item in (body or {}).get("data", [])]

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None


def _segment(value: str) -> str:
    return quote(str(value), safe="")


def _error_message(body: Any, status: int) -> str:
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if isinstance(message, str) and message:
            return message
    return f"HTTP {status}"


__all__ = [
    "AutomationServiceClient",
    "ServiceJob",
    "ServiceJobEvent",
    "ServiceJobOutput",
    "ServiceJobInput",
    "PreviousJobOutput",
]
