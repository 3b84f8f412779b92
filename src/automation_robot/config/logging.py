"""
Logging configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .base import DEFAULT_ENV_PREFIX, LogFormat, LogLevel


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    name: str = "automation_robot"
    level: LogLevel = "INFO"
    format: LogFormat = "text"
    log_file: Path | None = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        if self.level not in valid_levels:
            raise ValueError(f"Invalid log level: {self.level}. Must be one of {valid_levels}")
        valid_formats = ("text", "json")
        if self.format not in valid_formats:
            raise ValueError(f"Invalid log format: {self.format}. Must be one of {valid_formats}")
        if self.log_file and isinstance(self.log_file, str):
            self.log_file = Path(self.log_file)

    @classmethod
    def from_env(cls, prefix: str = DEFAULT_ENV_PREFIX) -> LoggingConfig:
        """
        Load logging settings from environment variables.

        Example:
            ROBOT_LOG_LEVEL=DEBUG
            ROBOT_LOG_FORMAT=json
            ROBOT_LOG_FILE=/var/log/robot.log
        """
        kwargs = {}
        if level := os.getenv(f"{prefix}LOG_LEVEL"):
            kwargs["level"] = level.upper()
        if log_format := os.getenv(f"{prefix}LOG_FORMAT"):
            kwargs["format"] = log_format.lower()
        if log_file := os.getenv(f"{prefix}LOG_FILE"):
            kwargs["log_file"] = Path(log_file)
        return cls(**kwargs)


__all__ = ["LoggingConfig"]
