"""
Local robot: runs jobs in-process with an injected automation engine.
"""

from __future__ import annotations

from typing import Any

from ..config import LocalRobotConfig
from ..jobs import Job, JobContext
from ..logging import Logger
from ..robot import Robot
from ..types import JobCategory
from .driver import LocalJobDriver
from .engine import BrowserLauncher, EngineFactory


class LocalRobot(Robot):
    """
    Robot that executes scripts locally.

    Each job gets a fresh engine from ``engine_factory``. When a
    ``browser`` launcher is given, the browser is started before the first
    job if nothing listens on the configured debug port.

    Example:
        ```python
        robot = LocalRobot(
            LocalRobotConfig(script="./checkout.json", chrome_path="/usr/bin/chromium"),
            engine_factory=make_engine,
        )
        job = await robot.create_job(input={"url": "https://example.com"})
        await job.wait_for_completion()
        ```
    """

    def __init__(
        self,
        config: LocalRobotConfig | None = None,
        *,
        engine_factory: EngineFactory,
        browser: BrowserLauncher | None = None,
        logger: Logger | None = None,
        **options: Any,
    ):
        super().__init__(logger)
        self.config = config or LocalRobotConfig(**options)
        self.engine_factory = engine_factory
        self.browser = browser

    async def ensure_browser_running(self) -> None:
        if self.browser is None:
            return
        port = self.config.chrome_port
        if await self.browser.is_running(port):
            return
        self.logger.info("Launching browser", port=port, headless=self.config.chrome_headless)
        await self.browser.launch(self.config)

    async def _create_job(self, category: JobCategory, input: dict[str, Any]) -> Job:
        await self.ensure_browser_running()
        context = JobContext(category=category, logger=self.logger)
        driver = LocalJobDriver(
            context,
            self.engine_factory(self.config),
            script=self.config.script,
            input_timeout=self.config.input_timeout,
            input=input,
            logger=self.logger,
        )
        job = Job(context, driver)
        if self.config.auto_run_jobs:
            driver.run()
        return job


__all__ = ["LocalRobot"]
