"""
Input negotiation: answering ``awaitingInput`` requests with handlers.
"""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable

from ..events import AwaitingInputEvent, EventSubscription, JobEventBus, JobEventType

WILDCARD = "*"

InputHandler = Callable[[str], Any]
SubmitInput = Callable[[str, Any], Awaitable[None]]


def on_awaiting_input(
    bus: JobEventBus,
    key: str,
    handler: InputHandler,
    submit_input: SubmitInput,
) -> EventSubscription:
    """
    Answer input requests for ``key`` with ``handler``.

    The handler receives the requested key and may be sync or async. For a
    concrete key a non-None result is submitted as that input. With the
    ``"*"`` wildcard the handler is called for every request and its result
    is ignored; the handler submits inputs itself.
    """

    async def respond(requested: str) -> None:
        data = handler(requested)
        if inspect.isawaitable(data):
            data = await data
        if key != WILDCARD and data is not None:
            await submit_input(requested, data)

    def listener(event: AwaitingInputEvent) -> Awaitable[None] | None:
        if key != WILDCARD and event.key != key:
            return None
        return respond(event.key)

    return bus.subscribe(JobEventType.AWAITING_INPUT, listener)


__all__ = ["WILDCARD", "InputHandler", "on_awaiting_input"]
