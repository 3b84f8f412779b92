"""
Automation engine protocol.

The engine that actually interprets scripts and drives the browser is an
external component. A local job talks to it through two narrow protocols:
AutomationEngine (what the job calls) and EngineCallbacks (what the engine
calls back while running).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..config import LocalRobotConfig


@runtime_checkable
class EngineCallbacks(Protocol):
    """Hooks the engine invokes while executing a script."""

    def on_step(self) -> None:
        """A script action is about to run."""
        ...

    def on_success(self) -> None: ...

    def on_fail(self, error: BaseException | None) -> None: ...

    async def request_input(self, key: str) -> Any:
        """Return input data for ``key``, waiting for the caller if necessary."""
        ...

    async def peek_input(self, key: str) -> Any:
        """Return cached input data for ``key`` without waiting, or None."""
        ...

    async def send_output(self, key: str, data: Any) -> None: ...


@runtime_checkable
class AutomationEngine(Protocol):
    """In-process automation engine."""

    def bind(self, callbacks: EngineCallbacks) -> None: ...

    async def load(self, script: dict[str, Any]) -> None: ...

    async def connect(self) -> None:
        """Attach to the browser and open a tab for the script."""
        ...

    async def run(self) -> None:
        """Run the loaded script, reporting the outcome through the callbacks."""
        ...

    def pause(self) -> None: ...


@runtime_checkable
class BrowserLauncher(Protocol):
    """Starts the local browser when nothing is listening on its debug port."""

    async def is_running(self, port: int) -> bool: ...

    async def launch(self, config: LocalRobotConfig) -> None: ...


EngineFactory = Callable[["LocalRobotConfig"], AutomationEngine]


__all__ = ["AutomationEngine", "EngineCallbacks", "BrowserLauncher", "EngineFactory"]
