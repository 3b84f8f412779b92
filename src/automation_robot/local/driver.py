"""
Local job driver.

Runs a script in-process through an AutomationEngine and translates the
engine's callbacks into job state. The driver is the engine's EngineCallbacks
implementation.

Input requests race three outcomes: the matching input arrives, the job
leaves ``awaitingInput``, or the input timeout fires. Whichever comes first
wins and the other two are torn down.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Any

from ..errors import (
    AwaitingInputInterruptedError,
    InputTimeoutError,
    JobCancelledError,
    RobotError,
    error_from_exception,
)
from ..events import InputEvent, JobEventType, StateChangedEvent
from ..jobs.race import Race
from ..jobs.state import JobContext
from ..logging import Logger, NullLogger
from ..types import JobState
from .engine import AutomationEngine
from .script import load_script


class LocalJobDriver:
    """Drives one local job through an in-process engine."""

    kind = "local"

    def __init__(
        self,
        context: JobContext,
        engine: AutomationEngine,
        *,
        script: Any,
        input_timeout: float,
        input: dict[str, Any] | None = None,
        logger: Logger | None = None,
    ):
        self.context = context
        self.engine = engine
        self.script = script
        self.input_timeout = input_timeout
        self.logger = logger or NullLogger()
        self._id = f"local-{uuid.uuid4().hex[:12]}"
        self._task: asyncio.Task | None = None
        self._failure: RobotError | None = None
        self._pending_input: Race[Any] | None = None

        for key, data in (input or {}).items():
            context.put_input(key, data, publish=False)
        engine.bind(self)

    @property
    def job_id(self) -> str:
        return self._id

    @property
    def completion(self) -> asyncio.Task | None:
        return self._task

    # -------------------------------------------------------------------------
    # Run
    # -------------------------------------------------------------------------

    def run(self) -> asyncio.Task:
        """Start executing the script. Repeated calls return the same task."""
        if self._task is None:
            self._task = asyncio.ensure_future(self._run())
        return self._task

    async def _run(self) -> None:
        self.logger.info("Local job started", job_id=self._id)
        try:
            await self.engine.load(load_script(self.script))
            await self.engine.connect()
            self.context.set_state(JobState.PROCESSING)
            await self.engine.run()
        except Exception as exc:
            self.on_fail(exc)

        if not self.context.is_terminal:
            # A paused engine returns without reporting an outcome
            self.on_fail(JobCancelledError("Job was cancelled before completion"))
        if self.context.state is JobState.FAIL and self._failure is not None:
            raise self._failure
        self.logger.info("Local job finished", job_id=self._id, state=self.context.state.value)

    # -------------------------------------------------------------------------
    # Job commands
    # -------------------------------------------------------------------------

    async def submit_input(self, key: str, data: Any) -> None:
        # A repeated key replaces the earlier value and notifies again
        self.context.put_input(key, data)

    async def get_output(self, key: str) -> Any:
        output = self.context.outputs.get(key)
        return output.data if output is not None else None

    async def cancel(self) -> None:
        """Pause the engine and abandon a pending input wait."""
        self.logger.info("Cancelling local job", job_id=self._id)
        self.engine.pause()
        if self._pending_input is not None:
            self._pending_input.reject(JobCancelledError())

    # -------------------------------------------------------------------------
    # Engine callbacks
    # -------------------------------------------------------------------------

    def on_step(self) -> None:
        if self.context.state is not JobState.PROCESSING:
            self.context.set_state(JobState.PROCESSING)

    def on_success(self) -> None:
        if self.context.succeed():
            self.logger.debug("Local job succeeded", job_id=self._id)

    def on_fail(self, error: BaseException | None) -> None:
        if self.context.is_terminal:
            return
        failure = error_from_exception(error)
        self._failure = failure
        self.logger.warning("Local job failed", job_id=self._id, error=failure)
        self.context.fail(failure.to_job_error(), failure)

    async def peek_input(self, key: str) -> Any:
        cached = self.context.inputs.get(key)
        return cached.data if cached is not None else None

    async def send_output(self, key: str, data: Any) -> None:
        self.context.put_output(key, data)

    async def request_input(self, key: str) -> Any:
        cached = self.context.inputs.get(key)
        if cached is not None:
            return cached.data

        race: Race[Any] = Race()

        def on_input(event: InputEvent) -> None:
            if event.input.key == key:
                race.resolve(event.input.data)

        def on_state_changed(event: StateChangedEvent) -> None:
            if event.state is not JobState.AWAITING_INPUT:
                race.reject(AwaitingInputInterruptedError(event.state.value, key=key))

        def on_timeout() -> None:
            self.logger.warning("Input timeout", job_id=self._id, key=key)
            race.reject(InputTimeoutError(key))

        bus = self.context.bus
        race.add_cleanup(bus.subscribe(JobEventType.INPUT, on_input).unsubscribe)
        race.add_cleanup(bus.subscribe(JobEventType.STATE_CHANGED, on_state_changed).unsubscribe)
        race.timer(self.input_timeout, on_timeout)

        self._pending_input = race
        try:
            if not self.context.await_input(key):
                race.reject(AwaitingInputInterruptedError(self.context.state.value, key=key))
            return await race.wait()
        finally:
            if self._pending_input is race:
                self._pending_input = None


__all__ = ["LocalJobDriver"]
