"""
Job data types shared by local and cloud jobs.

This module defines the JobState / JobCategory enums and the JobInput,
JobOutput and JobError records that make up a job's observable state.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class JobState(str, Enum):
    """Job lifecycle states.

    State transitions:
    - CREATED -> SCHEDULED -> PROCESSING (job starts)
    - PROCESSING <-> AWAITING_INPUT (input requested / supplied)
    - PROCESSING <-> AWAITING_TDS (3-D Secure challenge)
    - * -> SUCCESS | FAIL (terminal)
    """
    CREATED = "created"
    SCHEDULED = "scheduled"
    PROCESSING = "processing"
    AWAITING_INPUT = "awaitingInput"
    AWAITING_TDS = "awaitingTds"
    SUCCESS = "success"
    FAIL = "fail"

    @property
    def is_terminal(self) -> bool:
        """Check if this is a terminal state."""
        return self in {JobState.SUCCESS, JobState.FAIL}

    @property
    def is_active(self) -> bool:
        return self in {
            JobState.PROCESSING,
            JobState.AWAITING_INPUT,
            JobState.AWAITING_TDS,
        }


class JobCategory(str, Enum):
    LIVE = "live"
    TEST = "test"


@dataclass(frozen=True)
class JobInput:
    """A key/value datum supplied by the caller."""
    key: str
    data: Any = None
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "data": self.data, "timestamp": self.timestamp}


@dataclass(frozen=True)
class JobOutput:
    """A key/value datum produced by the automation."""
    key: str
    data: Any = None
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "data": self.data, "timestamp": self.timestamp}


@dataclass(frozen=True)
class JobError:
    """Error info of a failed job, as reported by the engine or the service."""
    code: str
    category: str = "server"
    message: str = "Unknown error"
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "category": self.category,
            "message": self.message,
            "details": dict(self.details),
        }


__all__ = [
    "JobState",
    "JobCategory",
    "JobInput",
    "JobOutput",
    "JobError",
]
