"""
Configuration system for automation-robot.

This package provides typed configuration classes with:
- Dataclass-based settings with validation
- Environment variable loading (optionally from a .env file)
- Sensible defaults with override capability
"""

from .base import DEFAULT_ENV_PREFIX, LogFormat, LogLevel, load_env
from .cloud import ClientCredentials, CloudAuth, CloudRobotConfig
from .local import LocalRobotConfig
from .logging import LoggingConfig

__all__ = [
    # Types
    "LogLevel",
    "LogFormat",
    "DEFAULT_ENV_PREFIX",
    # Configs
    "LoggingConfig",
    "LocalRobotConfig",
    "CloudRobotConfig",
    "ClientCredentials",
    "CloudAuth",
    # Helpers
    "load_env",
]
