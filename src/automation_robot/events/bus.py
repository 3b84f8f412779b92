"""
Per-job event bus.

The bus delivers typed job notifications to every matching listener,
synchronously and in registration order, so a listener always observes the
cache mutation that preceded the notification. Listeners may be plain
functions or coroutine functions; coroutines are scheduled as tasks that the
bus keeps alive until they finish.

A listener that raises (or a listener coroutine that fails) never propagates
into the publisher. The exception is re-published on the ``error`` channel;
when nothing listens there, it is logged as a warning.
"""

from __future__ import annotations

import asyncio
import inspect
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable

from ..logging import Logger, NullLogger
from .types import ErrorEvent, JobEvent, JobEventType

Listener = Callable[[Any], Any]


@dataclass(eq=False)
class EventSubscription:
    """Handle for one listener registration. Calling it unsubscribes."""

    event_type: JobEventType
    listener: Listener
    subscription_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    _bus: JobEventBus | None = field(default=None, repr=False)

    @property
    def active(self) -> bool:
        return self._bus is not None

    def unsubscribe(self) -> None:
        """Remove the listener. Safe to call more than once."""
        bus, self._bus = self._bus, None
        if bus is not None:
            bus._remove(self)

    def __call__(self) -> None:
        self.unsubscribe()


class JobEventBus:
    """Broadcast publish/subscribe channel owned by a single job."""

    def __init__(self, logger: Logger | None = None):
        self._subscriptions: dict[JobEventType, list[EventSubscription]] = defaultdict(list)
        self._pending: set[asyncio.Future] = set()
        self._logger = logger or NullLogger()

    def subscribe(self, event_type: JobEventType, listener: Listener) -> EventSubscription:
        """Register ``listener`` for ``event_type`` and return its subscription."""
        subscription = EventSubscription(
            event_type=JobEventType(event_type),
            listener=listener,
            _bus=self,
        )
        self._subscriptions[subscription.event_type].append(subscription)
        return subscription

    def unsubscribe(self, subscription: EventSubscription) -> None:
        subscription.unsubscribe()

    def _remove(self, subscription: EventSubscription) -> None:
        listeners = self._subscriptions.get(subscription.event_type)
        if listeners and subscription in listeners:
            listeners.remove(subscription)

    def listener_count(self, event_type: JobEventType) -> int:
        return len(self._subscriptions.get(JobEventType(event_type), ()))

    def publish(self, event: JobEvent) -> None:
        """Deliver ``event`` to every listener registered for its type."""
        for subscription in list(self._subscriptions.get(event.type, ())):
            # Listeners removed by an earlier listener in this dispatch are skipped
            if not subscription.active:
                continue
            try:
                result = subscription.listener(event)
            except Exception as exc:
                self._report(exc, event.type)
                continue
            if inspect.isawaitable(result):
                self._schedule(result, event.type)

    def _schedule(self, awaitable: Any, source: JobEventType) -> None:
        task = asyncio.ensure_future(awaitable)
        self._pending.add(task)

        def _done(fut: asyncio.Future) -> None:
            self._pending.discard(fut)
            if fut.cancelled():
                return
            exc = fut.exception()
            if exc is not None:
                self._report(exc, source)

        task.add_done_callback(_done)

    def _report(self, exc: BaseException, source: JobEventType) -> None:
        if source is JobEventType.ERROR or not self.listener_count(JobEventType.ERROR):
            self._logger.warning(
                "Unobserved job listener error",
                source=source.value,
                error=exc,
            )
            return
        self.publish(ErrorEvent(error=exc, source=source))

    async def drain(self) -> None:
        """
        Wait until every scheduled listener coroutine has finished.

        A listener that calls this from inside its own task does not wait on
        itself. Waiting is not cancelled into the listener tasks.
        """
        current = asyncio.current_task()
        while True:
            pending = {task for task in self._pending if task is not current}
            if not pending:
                return
            await asyncio.wait(pending)

    def clear(self) -> None:
        for listeners in self._subscriptions.values():
            for subscription in list(listeners):
                subscription._bus = None
        self._subscriptions.clear()


__all__ = [
    "JobEventBus",
    "EventSubscription",
    "Listener",
]
