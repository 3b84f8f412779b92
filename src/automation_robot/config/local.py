"""
Local robot configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

from ..errors import ErrorCode, InvalidConfigError, MissingConfigError
from .base import DEFAULT_ENV_PREFIX, parse_bool

DEFAULT_CHROME_PORT = 9123
DEFAULT_INPUT_TIMEOUT = 60.0


def _env_chrome_port() -> int:
    try:
        return int(os.environ.get("CHROME_PORT", ""))
    except ValueError:
        return DEFAULT_CHROME_PORT


@dataclass
class LocalRobotConfig:
    """
    Configuration for jobs executed in-process by the Automation Engine.

    ``script`` is either a script mapping or a path to a JSON script file.
    ``input_timeout`` is in seconds.
    """

    script: Any = None

    # Browser settings
    chrome_path: str | None = field(default_factory=lambda: os.environ.get("CHROME_PATH"))
    chrome_port: int = field(default_factory=_env_chrome_port)
    chrome_headless: bool = True
    chrome_additional_args: list[str] = field(default_factory=list)

    # Job behaviour
    auto_run_jobs: bool = True
    input_timeout: float = DEFAULT_INPUT_TIMEOUT

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.script is None:
            raise MissingConfigError(
                "Please specify script option",
                option="script",
            )
        if not self.chrome_path:
            raise MissingConfigError(
                "Please specify chromePath option or CHROME_PATH env variable",
                option="chrome_path",
                env_var="CHROME_PATH",
                code=ErrorCode.CHROME_PATH_NOT_SPECIFIED.value,
            )
        if self.chrome_port < 1 or self.chrome_port > 65535:
            raise InvalidConfigError("chrome_port must be between 1 and 65535")
        if self.input_timeout <= 0:
            raise InvalidConfigError("input_timeout must be positive")

    @property
    def chrome_args(self) -> list[str]:
        """Command line arguments for launching the browser."""
        args = ["--headless"] if self.chrome_headless else []
        return [arg for arg in [*args, *self.chrome_additional_args] if arg]

    @classmethod
    def from_env(cls, script: Any = None, prefix: str = DEFAULT_ENV_PREFIX, **overrides: Any) -> LocalRobotConfig:
        """
        Load settings from environment variables.

        Example:
            ROBOT_SCRIPT=./scripts/checkout.json
            ROBOT_INPUT_TIMEOUT=30
            ROBOT_CHROME_HEADLESS=false
            CHROME_PATH=/usr/bin/chromium
        """
        kwargs: dict[str, Any] = {}
        if script is not None:
            kwargs["script"] = script
        elif script_path := os.getenv(f"{prefix}SCRIPT"):
            kwargs["script"] = script_path
        if timeout := os.getenv(f"{prefix}INPUT_TIMEOUT"):
            kwargs["input_timeout"] = float(timeout)
        if headless := os.getenv(f"{prefix}CHROME_HEADLESS"):
            kwargs["chrome_headless"] = parse_bool(headless)
        if auto_run := os.getenv(f"{prefix}AUTO_RUN_JOBS"):
            kwargs["auto_run_jobs"] = parse_bool(auto_run)
        kwargs.update(overrides)
        return cls(**kwargs)


__all__ = ["LocalRobotConfig", "DEFAULT_CHROME_PORT", "DEFAULT_INPUT_TIMEOUT"]
