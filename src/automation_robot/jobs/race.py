"""
First-settled-wins race with cancellable timers.

A Race is a one-shot future that several independent sources (bus listeners,
timers, explicit cancellation) compete to settle. Only the first resolve or
reject takes effect; every registered cleanup runs exactly once, whichever
source won, and also when the awaiting caller is itself cancelled.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")


class CancellableTimer:
    """Invokes ``callback`` once after ``delay`` seconds unless cancelled first."""

    def __init__(self, delay: float, callback: Callable[[], Any]):
        self._callback = callback
        self._fired = False
        self._handle: asyncio.TimerHandle | None = asyncio.get_running_loop().call_later(
            delay, self._fire
        )

    def _fire(self) -> None:
        self._handle = None
        self._fired = True
        self._callback()

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def active(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class Race(Generic[T]):
    """One-shot outcome settled by whichever source gets there first."""

    def __init__(self) -> None:
        self._future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._cleanups: list[Callable[[], Any]] = []
        self._cleaned = False

    @property
    def settled(self) -> bool:
        return self._future.done()

    def add_cleanup(self, cleanup: Callable[[], Any]) -> None:
        """Register a callable to run once the race is over."""
        if self._cleaned:
            cleanup()
            return
        self._cleanups.append(cleanup)

    def timer(self, delay: float, on_timeout: Callable[[], Any]) -> CancellableTimer:
        timer = CancellableTimer(delay, on_timeout)
        self.add_cleanup(timer.cancel)
        return timer

    def resolve(self, value: T) -> bool:
        if self._future.done():
            return False
        self._future.set_result(value)
        self._cleanup()
        return True

    def reject(self, error: BaseException) -> bool:
        if self._future.done():
            return False
        self._future.set_exception(error)
        self._cleanup()
        return True

    def _cleanup(self) -> None:
        if self._cleaned:
            return
        self._cleaned = True
        cleanups, self._cleanups = self._cleanups, []
        for cleanup in cleanups:
            cleanup()

    async def wait(self) -> T:
        try:
            return await self._future
        finally:
            self._cleanup()


__all__ = ["CancellableTimer", "Race"]
