"""
Job facade.

A Job is what callers hold: state queries, input submission, output access,
waiting and event registration. Everything that differs between local and
cloud execution lives behind the JobDriver protocol; the facade only reads
the shared JobContext and forwards commands to its driver.

Example:
    ```python
    job = await robot.create_job(input={"url": "https://example.com"})
    job.on_awaiting_input("password", lambda key: secrets[key])
    job.on_output("price", lambda price: print("price", price))

    price, = await job.wait_for_outputs("price")
    await job.wait_for_completion()
    ```
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable, Protocol, runtime_checkable

from ..events import (
    ErrorEvent,
    EventSubscription,
    FailEvent,
    JobEventType,
    OutputEvent,
    StateChangedEvent,
)
from ..types import JobCategory, JobError, JobInput, JobOutput, JobState
from .negotiation import InputHandler, on_awaiting_input
from .state import JobContext
from .waiters import wait_for_completion, wait_for_outputs


@runtime_checkable
class JobDriver(Protocol):
    """Execution backend of a job (in-process engine or remote service)."""

    kind: str

    @property
    def job_id(self) -> str | None: ...

    @property
    def completion(self) -> asyncio.Future | None:
        """Task that settles when the job reaches a terminal state, if started."""
        ...

    async def submit_input(self, key: str, data: Any) -> None: ...

    async def get_output(self, key: str) -> Any: ...

    async def cancel(self) -> None: ...


def _call(handler: Callable[..., Any], *args: Any) -> Any:
    result = handler(*args)
    if inspect.isawaitable(result):
        return result
    return None


class Job:
    """A single automation run, local or remote."""

    def __init__(self, context: JobContext, driver: JobDriver):
        self.context = context
        self.driver = driver

    def __repr__(self) -> str:
        return f"Job(kind={self.driver.kind!r}, state={self.state.value!r})"

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def job_id(self) -> str | None:
        return self.driver.job_id

    @property
    def category(self) -> JobCategory:
        return self.context.category

    @property
    def state(self) -> JobState:
        return self.context.state

    @property
    def awaiting_input_key(self) -> str | None:
        return self.context.awaiting_input_key

    @property
    def inputs(self) -> dict[str, JobInput]:
        return dict(self.context.inputs)

    @property
    def outputs(self) -> dict[str, JobOutput]:
        return dict(self.context.outputs)

    def get_state(self) -> JobState:
        return self.context.state

    def get_error_info(self) -> JobError | None:
        """Error info of a failed job, None unless the job is in ``fail`` state."""
        if self.context.state is not JobState.FAIL:
            return None
        return self.context.error

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    async def submit_input(self, key: str, data: Any) -> None:
        await self.driver.submit_input(key, data)

    async def get_output(self, key: str) -> Any:
        """Cached output data for ``key``; drivers may fall back to a remote fetch."""
        return await self.driver.get_output(key)

    async def wait_for_outputs(self, *keys: str) -> list[Any]:
        return await wait_for_outputs(self.context, keys)

    async def wait_for_completion(self) -> None:
        """Wait until the job succeeds; raise the job's error if it fails."""
        await wait_for_completion(self.context, self.driver.completion)

    async def cancel(self) -> None:
        await self.driver.cancel()

    # -------------------------------------------------------------------------
    # Event registration
    # -------------------------------------------------------------------------

    def on_awaiting_input(self, key: str, handler: InputHandler) -> EventSubscription:
        """
        Answer input requests for ``key`` (or ``"*"`` for any key).

        ``handler(key)`` may be sync or async; a non-None result for a
        concrete key is submitted as the input.
        """
        return on_awaiting_input(self.context.bus, key, handler, self.submit_input)

    def on_output(self, key: str, handler: Callable[[Any], Any]) -> EventSubscription:
        """Call ``handler(data)`` whenever an output with ``key`` is produced."""

        def listener(event: OutputEvent) -> Any:
            if event.output.key == key:
                return _call(handler, event.output.data)
            return None

        return self.context.bus.subscribe(JobEventType.OUTPUT, listener)

    def on_any_output(self, handler: Callable[[JobOutput], Any]) -> EventSubscription:
        return self.context.bus.subscribe(
            JobEventType.OUTPUT, lambda event: _call(handler, event.output)
        )

    def on_state_changed(
        self, handler: Callable[[JobState, JobState], Any]
    ) -> EventSubscription:
        """Call ``handler(state, previous_state)`` on every transition."""

        def listener(event: StateChangedEvent) -> Any:
            return _call(handler, event.state, event.previous_state)

        return self.context.bus.subscribe(JobEventType.STATE_CHANGED, listener)

    def on_success(self, handler: Callable[[], Any]) -> EventSubscription:
        return self.context.bus.subscribe(JobEventType.SUCCESS, lambda _event: _call(handler))

    def on_fail(self, handler: Callable[[Exception], Any]) -> EventSubscription:
        def listener(event: FailEvent) -> Any:
            return _call(handler, event.error)

        return self.context.bus.subscribe(JobEventType.FAIL, listener)

    def on_error(self, handler: Callable[[BaseException], Any]) -> EventSubscription:
        """Observe exceptions raised by other listeners of this job."""

        def listener(event: ErrorEvent) -> Any:
            return _call(handler, event.error)

        return self.context.bus.subscribe(JobEventType.ERROR, listener)


__all__ = ["Job", "JobDriver"]
