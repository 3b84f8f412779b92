"""
Event system for automation-robot jobs.

This module provides the per-job notification channel:
- JobEvent: Tagged union of typed notifications
- JobEventBus: Synchronous broadcast bus with listener error isolation
- EventSubscription: Unsubscribe token returned by every registration
"""

from .types import (
    JobEventType,
    JobEvent,
    InputEvent,
    OutputEvent,
    AwaitingInputEvent,
    StateChangedEvent,
    SuccessEvent,
    FailEvent,
    ErrorEvent,
)
from .bus import (
    JobEventBus,
    EventSubscription,
    Listener,
)

__all__ = [
    # Types
    "JobEventType",
    "JobEvent",
    "InputEvent",
    "OutputEvent",
    "AwaitingInputEvent",
    "StateChangedEvent",
    "SuccessEvent",
    "FailEvent",
    "ErrorEvent",
    # Bus
    "JobEventBus",
    "EventSubscription",
    "Listener",
]
