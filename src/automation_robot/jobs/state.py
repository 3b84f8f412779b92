"""
Job state holder.

JobStateMachine records the current state and error info and announces every
transition on the job's bus. JobContext bundles the machine with the input and
output caches; drivers are its only writers and always mutate the cache before
publishing the matching notification.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..events import (
    AwaitingInputEvent,
    FailEvent,
    InputEvent,
    JobEventBus,
    OutputEvent,
    StateChangedEvent,
    SuccessEvent,
)
from ..logging import Logger, NullLogger
from ..types import JobCategory, JobError, JobInput, JobOutput, JobState


class JobStateMachine:
    """Current state plus error info; publishes ``stateChanged`` on every set."""

    def __init__(self, bus: JobEventBus, state: JobState = JobState.CREATED):
        self._bus = bus
        self._state = JobState(state)
        self._error: JobError | None = None

    @property
    def state(self) -> JobState:
        return self._state

    @property
    def error(self) -> JobError | None:
        return self._error

    def set_state(self, new_state: JobState | str) -> JobState:
        """Store ``new_state`` and publish the transition. Returns the previous state."""
        previous = self._state
        self._state = JobState(new_state)
        self._bus.publish(StateChangedEvent(state=self._state, previous_state=previous))
        return previous

    def set_error(self, error: JobError | None) -> None:
        self._error = error


@dataclass(eq=False)
class JobContext:
    """Observable state of one job, shared between the Job facade and its driver."""

    category: JobCategory = JobCategory.TEST
    logger: Logger = field(default_factory=NullLogger)
    bus: JobEventBus = field(init=False)
    machine: JobStateMachine = field(init=False)
    inputs: dict[str, JobInput] = field(default_factory=dict)
    outputs: dict[str, JobOutput] = field(default_factory=dict)
    awaiting_input_key: str | None = None

    def __post_init__(self):
        self.category = JobCategory(self.category)
        self.bus = JobEventBus(logger=self.logger)
        self.machine = JobStateMachine(self.bus)

    @property
    def state(self) -> JobState:
        return self.machine.state

    @property
    def error(self) -> JobError | None:
        return self.machine.error

    @property
    def is_terminal(self) -> bool:
        return self.machine.state.is_terminal

    def set_state(self, new_state: JobState | str) -> bool:
        """
        Transition to ``new_state`` unless the job already finished.

        Leaving ``awaitingInput`` clears the awaiting input key.
        """
        if self.is_terminal:
            self.logger.debug(
                "Ignoring transition of finished job",
                state=self.state.value,
                requested=JobState(new_state).value,
            )
            return False
        new_state = JobState(new_state)
        if new_state is not JobState.AWAITING_INPUT:
            self.awaiting_input_key = None
        self.machine.set_state(new_state)
        return True

    def await_input(self, key: str) -> bool:
        if self.is_terminal:
            return False
        self.awaiting_input_key = key
        self.machine.set_state(JobState.AWAITING_INPUT)
        self.bus.publish(AwaitingInputEvent(key=key))
        return True

    def put_input(self, key: str, data: Any, *, publish: bool = True) -> JobInput:
        """Store an input, replacing any previous value under ``key``."""
        job_input = JobInput(key=key, data=data)
        self.inputs[key] = job_input
        if key == self.awaiting_input_key:
            self.awaiting_input_key = None
        if publish:
            self.bus.publish(InputEvent(input=job_input))
        return job_input

    def put_output(self, key: str, data: Any) -> JobOutput:
        job_output = JobOutput(key=key, data=data)
        self.outputs[key] = job_output
        self.bus.publish(OutputEvent(output=job_output))
        return job_output

    def succeed(self) -> bool:
        if not self.set_state(JobState.SUCCESS):
            return False
        self.bus.publish(SuccessEvent())
        return True

    def fail(self, error: JobError, exc: Exception) -> bool:
        """Record ``error``, switch to ``fail`` and publish ``exc`` to fail listeners."""
        if self.is_terminal:
            return False
        self.machine.set_error(error)
        self.set_state(JobState.FAIL)
        self.bus.publish(FailEvent(error=exc))
        return True


__all__ = ["JobStateMachine", "JobContext"]
