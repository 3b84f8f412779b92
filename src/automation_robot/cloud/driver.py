"""
Cloud job driver.

Mirrors a job running on the Automation Service by polling its event log.
The event cursor only moves forward by the number of events received, so
overlapping polls never process the same event twice.
"""

from __future__ import annotations

import asyncio
from typing import Any

from ..errors import (
    InvalidStateError,
    JobAlreadyStartedError,
    JobFailedError,
    error_from_job_error,
    normalize_job_error,
)
from ..jobs.state import JobContext
from ..logging import Logger, NullLogger
from ..types import JobCategory, JobState
from .api import AutomationServiceClient, ServiceJob, ServiceJobEvent


class CloudJobDriver:
    """Drives one remote job through the Automation Service API."""

    kind = "cloud"

    def __init__(
        self,
        context: JobContext,
        api: AutomationServiceClient,
        *,
        service_id: str,
        poll_interval: float,
        logger: Logger | None = None,
    ):
        self.context = context
        self.api = api
        self.service_id = service_id
        self.poll_interval = poll_interval
        self.logger = logger or NullLogger()
        self._job_id: str | None = None
        self._offset = 0
        self._task: asyncio.Task | None = None
        self._failure: JobFailedError | None = None
        self._settled_remotely: ServiceJob | None = None

    @property
    def job_id(self) -> str:
        if self._job_id is None:
            raise InvalidStateError("Job is not yet created")
        return self._job_id

    @property
    def event_offset(self) -> int:
        return self._offset

    @property
    def completion(self) -> asyncio.Task | None:
        return self._task

    # -------------------------------------------------------------------------
    # Attach
    # -------------------------------------------------------------------------

    async def start(self, input: dict[str, Any] | None = None) -> None:
        """Create the remote job, seed the input cache and begin tracking."""
        if self._job_id is not None:
            raise JobAlreadyStartedError(self._job_id)
        input = dict(input or {})
        job = await self.api.create_job(
            self.service_id,
            category=self.context.category,
            input=input,
        )
        self._job_id = job.id
        for key, data in input.items():
            self.context.put_input(key, data, publish=False)
        self.logger.info("Cloud job created", job_id=job.id, service_id=self.service_id)
        self._adopt(job)
        self.track()

    async def track_existing(self, job_id: str) -> None:
        """Attach to an existing remote job and begin tracking."""
        if self._job_id is not None:
            raise JobAlreadyStartedError(self._job_id)
        job = await self.api.get_job(job_id)
        self._job_id = job.id
        try:
            self.context.category = JobCategory(job.category)
        except ValueError:
            self.logger.warning("Unknown job category", job_id=job.id, category=job.category)
        if job.state in (JobState.SUCCESS.value, JobState.FAIL.value):
            # Replay the event log first so outputs are cached before the job finishes
            self._settled_remotely = job
        else:
            self._adopt(job)
        self.track()

    def _adopt(self, job: ServiceJob) -> None:
        state = self._parse_state(job.state)
        if state is None or state is self.context.state:
            return
        if state is JobState.FAIL:
            self._record_failure(job)
        elif state is JobState.SUCCESS:
            self.context.succeed()
        elif state is JobState.AWAITING_INPUT and job.awaiting_input_key:
            self.context.await_input(job.awaiting_input_key)
        else:
            self.context.set_state(state)

    # -------------------------------------------------------------------------
    # Tracking
    # -------------------------------------------------------------------------

    def track(self) -> asyncio.Task:
        """Start the polling loop. While it runs, repeated calls return the same task."""
        if self._task is None or self._task.done():
            self._task = asyncio.ensure_future(self._track())
        return self._task

    async def _track(self) -> None:
        job_id = self.job_id
        while True:
            events = await self.api.get_job_events(job_id, self._offset)
            self._offset += len(events)
            for event in events:
                await self._process_event(event)
            if not events and self._settled_remotely is not None:
                self._adopt(self._settled_remotely)
                self._settled_remotely = None

            if self.context.state is JobState.SUCCESS:
                self.logger.info("Cloud job succeeded", job_id=job_id)
                return
            if self.context.state is JobState.FAIL:
                raise self._failure or error_from_job_error(normalize_job_error(self.context.error))
            await asyncio.sleep(self.poll_interval)

    async def _process_event(self, event: ServiceJobEvent) -> None:
        self.logger.debug("Job event received", job_id=self._job_id, event=event.name, key=event.key)
        name = event.name
        if name == "awaitingInput":
            if event.key:
                self.context.await_input(event.key)
        elif name == "createOutput":
            if event.key:
                output = await self.api.get_job_output(self.job_id, event.key)
                if output is not None:
                    self.context.put_output(event.key, output.data)
        elif name == "processing":
            self.context.set_state(JobState.PROCESSING)
        elif name == "success":
            self.context.succeed()
        elif name == "fail":
            self._record_failure(await self.api.get_job(self.job_id))
        elif name == "tdsStart":
            self.context.set_state(JobState.AWAITING_TDS)
        elif name == "tdsFinish":
            self.context.set_state(JobState.PROCESSING)
        elif name == "restart":
            self.logger.info("Job restarted", job_id=self._job_id)
        else:
            self.logger.debug("Ignoring unknown job event", job_id=self._job_id, event=name)

    def _record_failure(self, job: ServiceJob) -> None:
        if self.context.is_terminal:
            return
        error = normalize_job_error(job.error)
        self._failure = error_from_job_error(error)
        self.logger.warning("Cloud job failed", job_id=job.id, error=self._failure)
        self.context.fail(error, self._failure)

    def _parse_state(self, value: str) -> JobState | None:
        try:
            return JobState(value)
        except ValueError:
            self.logger.warning("Unknown job state", job_id=self._job_id, state=value)
            return None

    async def stop(self) -> None:
        """Stop polling without cancelling the remote job."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)

    # -------------------------------------------------------------------------
    # Job commands
    # -------------------------------------------------------------------------

    async def submit_input(self, key: str, data: Any) -> None:
        await self.api.send_job_input(self.job_id, key, data)
        self.context.put_input(key, data)

    async def get_output(self, key: str) -> Any:
        output = self.context.outputs.get(key)
        if output is not None:
            return output.data
        remote = await self.api.get_job_output(self.job_id, key)
        return remote.data if remote is not None else None

    async def cancel(self) -> None:
        self.logger.info("Cancelling cloud job", job_id=self._job_id)
        await self.api.cancel_job(self.job_id)


__all__ = ["CloudJobDriver"]
