"""
Top-level package for automation-robot.

Jobs run either in-process through an automation engine (LocalRobot) or on
the Automation Service (CloudRobot); both hand back the same Job facade.
Environment variables from a `.env` file are loaded by calling `load_env()`.
"""

from .cloud import AutomationServiceClient, CloudRobot, PreviousJobOutput
from .config import (
    ClientCredentials,
    CloudRobotConfig,
    LocalRobotConfig,
    LoggingConfig,
    load_env,
)
from .errors import (
    AwaitingInputInterruptedError,
    BadScriptError,
    ConfigurationError,
    ErrorCategory,
    ErrorCode,
    InputTimeoutError,
    InvalidConfigError,
    InvalidStateError,
    JobAlreadyStartedError,
    JobCancelledError,
    JobFailedError,
    JobFailMissingOutputsError,
    JobSuccessMissingOutputsError,
    MissingConfigError,
    RequestFailedError,
    RobotError,
    ScriptInitFailedError,
)
from .events import EventSubscription, JobEventType
from .jobs import Job
from .local import AutomationEngine, EngineCallbacks, LocalRobot
from .logging import Logger, NullLogger, StructuredLogger, configure_logging
from .robot import Robot
from .types import JobCategory, JobError, JobInput, JobOutput, JobState

__all__ = [
    # Robots
    "Robot",
    "LocalRobot",
    "CloudRobot",
    "AutomationServiceClient",
    "PreviousJobOutput",
    # Jobs
    "Job",
    "JobState",
    "JobCategory",
    "JobInput",
    "JobOutput",
    "JobError",
    "JobEventType",
    "EventSubscription",
    # Engine boundary
    "AutomationEngine",
    "EngineCallbacks",
    # Config
    "LocalRobotConfig",
    "CloudRobotConfig",
    "ClientCredentials",
    "LoggingConfig",
    "load_env",
    # Logging
    "Logger",
    "NullLogger",
    "StructuredLogger",
    "configure_logging",
    # Errors
    "ErrorCode",
    "ErrorCategory",
    "RobotError",
    "JobFailedError",
    "InputTimeoutError",
    "AwaitingInputInterruptedError",
    "JobCancelledError",
    "JobSuccessMissingOutputsError",
    "JobFailMissingOutputsError",
    "InvalidStateError",
    "JobAlreadyStartedError",
    "BadScriptError",
    "ScriptInitFailedError",
    "ConfigurationError",
    "MissingConfigError",
    "InvalidConfigError",
    "RequestFailedError",
]
