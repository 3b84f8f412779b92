"""
Job model shared by local and cloud execution.

- JobContext / JobStateMachine: observable state owned by the driver
- Job: caller-facing facade over a JobDriver
- wait_for_outputs / wait_for_completion: waiting primitives
- on_awaiting_input: input negotiation (concrete key or ``"*"``)
- Race / CancellableTimer: first-settled-wins coordination
"""

from .job import Job, JobDriver
from .negotiation import WILDCARD, InputHandler, on_awaiting_input
from .race import CancellableTimer, Race
from .state import JobContext, JobStateMachine
from .waiters import collect_outputs, wait_for_completion, wait_for_outputs

__all__ = [
    # Facade
    "Job",
    "JobDriver",
    # State
    "JobContext",
    "JobStateMachine",
    # Waiting
    "collect_outputs",
    "wait_for_outputs",
    "wait_for_completion",
    # Negotiation
    "WILDCARD",
    "InputHandler",
    "on_awaiting_input",
    # Coordination
    "Race",
    "CancellableTimer",
]
