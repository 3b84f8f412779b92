"""
Job notification types.

Every notification published on a job's event bus is one of the variants
below. Each variant carries its own payload and a fixed ``type`` tag, so
subscribers can filter by JobEventType and receive a precisely typed event.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

from ..types import JobInput, JobOutput, JobState


class JobEventType(str, Enum):
    """Notification kinds carried by the job event bus."""

    INPUT = "input"
    OUTPUT = "output"
    AWAITING_INPUT = "awaitingInput"
    STATE_CHANGED = "stateChanged"
    SUCCESS = "success"
    FAIL = "fail"
    ERROR = "error"


@dataclass(frozen=True)
class InputEvent:
    """An input was submitted for the job."""
    type: ClassVar[JobEventType] = JobEventType.INPUT
    input: JobInput


@dataclass(frozen=True)
class OutputEvent:
    """An output was produced and is already present in the output cache."""
    type: ClassVar[JobEventType] = JobEventType.OUTPUT
    output: JobOutput


@dataclass(frozen=True)
class AwaitingInputEvent:
    type: ClassVar[JobEventType] = JobEventType.AWAITING_INPUT
    key: str


@dataclass(frozen=True)
class StateChangedEvent:
    type: ClassVar[JobEventType] = JobEventType.STATE_CHANGED
    state: JobState
    previous_state: JobState


@dataclass(frozen=True)
class SuccessEvent:
    type: ClassVar[JobEventType] = JobEventType.SUCCESS


@dataclass(frozen=True)
class FailEvent:
    """The job failed; ``error`` is the exception callers will observe."""
    type: ClassVar[JobEventType] = JobEventType.FAIL
    error: Exception


@dataclass(frozen=True)
class ErrorEvent:
    """A listener raised; the original exception is carried as ``error``."""
    type: ClassVar[JobEventType] = JobEventType.ERROR
    error: BaseException
    source: JobEventType | None = None


JobEvent = Union[
    InputEvent,
    OutputEvent,
    AwaitingInputEvent,
    StateChangedEvent,
    SuccessEvent,
    FailEvent,
    ErrorEvent,
]


__all__ = [
    "JobEventType",
    "JobEvent",
    "InputEvent",
    "OutputEvent",
    "AwaitingInputEvent",
    "StateChangedEvent",
    "SuccessEvent",
    "FailEvent",
    "ErrorEvent",
]
