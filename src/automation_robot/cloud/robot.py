"""
Cloud robot: creates and tracks jobs on the Automation Service.
"""

from __future__ import annotations

import weakref
from typing import Any

from ..config import CloudRobotConfig
from ..jobs import Job, JobContext
from ..logging import Logger
from ..robot import Robot
from ..types import JobCategory
from .api import AutomationServiceClient, PreviousJobOutput
from .driver import CloudJobDriver


class CloudRobot(Robot):
    """
    Robot backed by the Automation Service.

    Example:
        ```python
        async with CloudRobot(service_id=SERVICE_ID, auth=API_KEY) as robot:
            job = await robot.create_job(input={"url": "https://example.com"})
            await job.wait_for_completion()
        ```
    """

    def __init__(
        self,
        config: CloudRobotConfig | None = None,
        *,
        api: AutomationServiceClient | None = None,
        logger: Logger | None = None,
        **options: Any,
    ):
        super().__init__(logger)
        self.config = config or CloudRobotConfig(**options)
        self.api = api or AutomationServiceClient(self.config, logger=self.logger)
        self._drivers: weakref.WeakSet[CloudJobDriver] = weakref.WeakSet()

    async def __aenter__(self) -> CloudRobot:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _new_job(self, category: JobCategory = JobCategory.TEST) -> tuple[Job, CloudJobDriver]:
        context = JobContext(category=category, logger=self.logger)
        driver = CloudJobDriver(
            context,
            self.api,
            service_id=self.config.service_id,
            poll_interval=self.config.poll_interval,
            logger=self.logger,
        )
        self._drivers.add(driver)
        return Job(context, driver), driver

    async def _create_job(self, category: JobCategory, input: dict[str, Any]) -> Job:
        job, driver = self._new_job(category)
        await driver.start(input)
        return job

    async def get_job(self, job_id: str) -> Job:
        """Attach to an existing job and track it from its first event."""
        job, driver = self._new_job()
        await driver.track_existing(job_id)
        return job

    async def get_previous_job_outputs(
        self, key: str, inputs: dict[str, Any] | None = None
    ) -> list[PreviousJobOutput]:
        """Outputs for ``key`` from earlier jobs of this service with matching inputs."""
        return await self.api.get_previous_job_outputs(self.config.service_id, key, inputs)

    async def close(self) -> None:
        """Stop tracking every job created by this robot and close the HTTP session."""
        for driver in list(self._drivers):
            await driver.stop()
        await self.api.close()


__all__ = ["CloudRobot"]
