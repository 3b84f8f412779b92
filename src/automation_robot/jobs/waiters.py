"""
Waiting primitives shared by the local and cloud job facades.
"""

from __future__ import annotations

import asyncio
from typing import Any, Sequence

from ..errors import (
    JobCancelledError,
    JobFailMissingOutputsError,
    JobSuccessMissingOutputsError,
)
from ..events import JobEventType
from ..types import JobState
from .race import Race
from .state import JobContext


def collect_outputs(context: JobContext, keys: Sequence[str]) -> list[Any] | None:
    """Return the data for every key in order, or None if any key is missing."""
    values = []
    for key in keys:
        output = context.outputs.get(key)
        if output is None:
            return None
        values.append(output.data)
    return values


async def wait_for_outputs(context: JobContext, keys: Sequence[str]) -> list[Any]:
    """
    Wait until every key in ``keys`` has an output.

    Resolves immediately when all outputs are already cached. Raises
    JobSuccessMissingOutputsError / JobFailMissingOutputsError when the job
    finishes first, including when it had already finished before the call.
    """
    keys = list(keys)
    race: Race[list[Any]] = Race()

    def check(_event: Any = None) -> None:
        values = collect_outputs(context, keys)
        if values is not None:
            race.resolve(values)

    def on_success(_event: Any) -> None:
        race.reject(JobSuccessMissingOutputsError(keys))

    def on_fail(_event: Any) -> None:
        race.reject(JobFailMissingOutputsError(keys))

    bus = context.bus
    race.add_cleanup(bus.subscribe(JobEventType.OUTPUT, check).unsubscribe)
    race.add_cleanup(bus.subscribe(JobEventType.SUCCESS, on_success).unsubscribe)
    race.add_cleanup(bus.subscribe(JobEventType.FAIL, on_fail).unsubscribe)

    check()
    if context.state is JobState.SUCCESS:
        on_success(None)
    elif context.state is JobState.FAIL:
        on_fail(None)
    return await race.wait()


async def wait_for_completion(context: JobContext, task: asyncio.Future | None) -> None:
    """
    Wait for the driver's run/track task, then for listener coroutines to settle.

    The task is shielded so one caller giving up does not stop the job for
    others; a finished task keeps its outcome for every later caller.
    """
    error: Exception | None = None
    if task is not None:
        try:
            await asyncio.shield(task)
        except asyncio.CancelledError:
            if not task.cancelled():
                raise
            error = JobCancelledError("Job stopped before completion")
        except Exception as exc:
            error = exc
    await context.bus.drain()
    if error is not None:
        raise error


__all__ = ["collect_outputs", "wait_for_outputs", "wait_for_completion"]
