"""
Shared test fixtures for automation-robot tests.

This module provides:
- A recording logger for asserting on log calls
- Reset of the scripted fake engine registry between tests
- A running Automation Service mock and cloud robots pointed at it
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

import pytest
import pytest_asyncio

from automation_robot.cloud import CloudRobot
from automation_robot.config import ClientCredentials

from engine_fake import ScriptedEngine
from service_mock import AutomationServiceMock, make_cloud_config

# =============================================================================
# Logging
# =============================================================================


@dataclass
class RecordingLogger:
    """Logger that keeps every call for later assertions."""

    records: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)

    def debug(self, message: str, **kwargs: Any) -> None:
        self.records.append(("debug", message, kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self.records.append(("info", message, kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self.records.append(("warning", message, kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        self.records.append(("error", message, kwargs))

    def messages(self, level: str | None = None) -> list[str]:
        return [msg for lvl, msg, _ in self.records if level is None or lvl == level]


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


# =============================================================================
# Local robots
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_engines():
    ScriptedEngine.instances.clear()
    yield
    ScriptedEngine.instances.clear()


# =============================================================================
# Cloud robots
# =============================================================================


@pytest_asyncio.fixture
async def service() -> AsyncIterator[AutomationServiceMock]:
    mock = AutomationServiceMock()
    await mock.start()
    try:
        yield mock
    finally:
        await mock.stop()


@pytest_asyncio.fixture
async def cloud_robot(service: AutomationServiceMock, logger: RecordingLogger) -> AsyncIterator[CloudRobot]:
    robot = CloudRobot(make_cloud_config(service), logger=logger)
    try:
        yield robot
    finally:
        await robot.close()


@pytest_asyncio.fixture
async def oauth_robot(service: AutomationServiceMock) -> AsyncIterator[CloudRobot]:
    config = make_cloud_config(
        service,
        auth=ClientCredentials(client_id="client-id", client_secret="client-secret"),
    )
    robot = CloudRobot(config)
    try:
        yield robot
    finally:
        await robot.close()
