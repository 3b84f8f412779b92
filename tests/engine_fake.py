"""
Scripted stand-in for the automation engine.

Interprets a tiny subset of script actions so local jobs can be exercised
without a browser:

- ``Flow.output``: evaluates ``pipeline`` and emits the result as ``outputKey``
- ``Flow.fail``: fails with ``errorCode`` (and optional ``message``)
- ``Flow.success``: finishes successfully, skipping remaining actions
- ``Flow.group``: runs its ``children`` in place

Pipeline steps: ``Value.getInput`` / ``Value.peekInput`` (by ``inputKey``)
and ``Value.constant`` (``value``).
"""

from __future__ import annotations

from typing import Any

from automation_robot.config import LocalRobotConfig
from automation_robot.errors import RobotError
from automation_robot.local import EngineCallbacks, LocalRobot


class ScriptedEngine:
    """In-memory AutomationEngine driven by script JSON."""

    instances: list[ScriptedEngine] = []

    def __init__(self, config: Any = None, *, connect_error: Exception | None = None):
        self.config = config
        self.connect_error = connect_error
        self.callbacks: EngineCallbacks | None = None
        self.script: dict[str, Any] | None = None
        self.connected = False
        self.paused = False
        self.executed: list[str] = []
        ScriptedEngine.instances.append(self)

    def bind(self, callbacks: EngineCallbacks) -> None:
        self.callbacks = callbacks

    async def load(self, script: dict[str, Any]) -> None:
        self.script = script

    async def connect(self) -> None:
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True

    def pause(self) -> None:
        self.paused = True

    async def run(self) -> None:
        assert self.callbacks is not None
        try:
            for action in self._actions():
                if self.paused:
                    return
                self.callbacks.on_step()
                self.executed.append(action["type"])
                if await self._execute(action):
                    break
        except Exception as exc:
            self.callbacks.on_fail(exc)
            return
        self.callbacks.on_success()

    def _actions(self) -> list[dict[str, Any]]:
        contexts = (self.script or {}).get("contexts") or []
        if isinstance(contexts, dict):
            contexts = list(contexts.values())
        actions: list[dict[str, Any]] = []
        for context in contexts:
            actions.extend(_flatten(context.get("children", [])))
        return actions

    async def _execute(self, action: dict[str, Any]) -> bool:
        kind = action["type"]
        if kind == "Flow.output":
            data = await self._evaluate(action.get("pipeline", []))
            await self.callbacks.send_output(action["outputKey"], data)
            return False
        if kind == "Flow.fail":
            raise RobotError(
                action.get("message"),
                code=action.get("errorCode") or "UnknownError",
                category=action.get("category", "website"),
            )
        if kind == "Flow.success":
            return True
        raise ValueError(f"Unsupported action {kind}")

    async def _evaluate(self, pipeline: list[dict[str, Any]]) -> Any:
        value: Any = None
        for step in pipeline:
            kind = step["type"]
            if kind == "Value.getInput":
                value = await self.callbacks.request_input(step["inputKey"])
            elif kind == "Value.peekInput":
                value = await self.callbacks.peek_input(step["inputKey"])
            elif kind == "Value.constant":
                value = step.get("value")
            else:
                raise ValueError(f"Unsupported pipeline step {kind}")
        return value


def _flatten(actions: list[dict[str, Any]]) -> list[dict[str, Any]]:
    flat: list[dict[str, Any]] = []
    for action in actions:
        if action.get("type") == "Flow.group":
            flat.extend(_flatten(action.get("children", [])))
        else:
            flat.append(action)
    return flat


# =============================================================================
# Script builders
# =============================================================================


def make_script(*actions: dict[str, Any], script_id: str = "test-script") -> dict[str, Any]:
    return {
        "id": script_id,
        "contexts": [{"type": "context", "name": "main", "children": list(actions)}],
    }


def output_input(output_key: str, input_key: str) -> dict[str, Any]:
    """Action that echoes input ``input_key`` as output ``output_key``."""
    return {
        "type": "Flow.output",
        "outputKey": output_key,
        "pipeline": [{"type": "Value.getInput", "inputKey": input_key}],
    }


def output_peek(output_key: str, input_key: str) -> dict[str, Any]:
    return {
        "type": "Flow.output",
        "outputKey": output_key,
        "pipeline": [{"type": "Value.peekInput", "inputKey": input_key}],
    }


def output_constant(output_key: str, value: Any) -> dict[str, Any]:
    return {
        "type": "Flow.output",
        "outputKey": output_key,
        "pipeline": [{"type": "Value.constant", "value": value}],
    }


def fail_with(error_code: str, message: str | None = None) -> dict[str, Any]:
    action: dict[str, Any] = {"type": "Flow.fail", "errorCode": error_code}
    if message:
        action["message"] = message
    return action


def group(*actions: dict[str, Any]) -> dict[str, Any]:
    return {"type": "Flow.group", "children": list(actions)}


SUCCESS = {"type": "Flow.success"}


def make_local_robot(
    script: Any,
    *,
    logger: Any = None,
    engine_factory: Any = None,
    browser: Any = None,
    **options: Any,
) -> LocalRobot:
    """LocalRobot running ``script`` on the scripted engine."""
    options.setdefault("chrome_path", "/usr/bin/chromium")
    options.setdefault("input_timeout", 1.0)
    return LocalRobot(
        LocalRobotConfig(script=script, **options),
        engine_factory=engine_factory or ScriptedEngine,
        browser=browser,
        logger=logger,
    )
