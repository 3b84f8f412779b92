"""
Error taxonomy for automation-robot.

This module provides the exception hierarchy shared by local and cloud jobs:
- Named error codes matching the Automation Service wire format
- Error categories (client / server / website)
- Structured details for programmatic handling
- Translation between JobError records and raised exceptions
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from .types import JobError


class ErrorCode(str, Enum):
    """Well-known error codes. Remote jobs may report codes outside this set."""

    # Job outcome errors
    UNKNOWN_ERROR = "UnknownError"
    INPUT_TIMEOUT = "InputTimeout"
    AWAITING_INPUT_INTERRUPTED = "AwaitingInputInterrupted"
    JOB_CANCELLED = "JobCancelled"

    # Output race errors
    JOB_SUCCESS_MISSING_OUTPUTS = "JobSuccessMissingOutputs"
    JOB_FAIL_MISSING_OUTPUTS = "JobFailMissingOutputs"

    # State misuse
    INVALID_STATE = "InvalidStateError"
    JOB_ALREADY_STARTED = "JobAlreadyStarted"

    # Script format errors
    BAD_SCRIPT = "BadScript"
    SCRIPT_INIT_FAILED = "ScriptInitFailed"

    # Configuration errors
    CONFIG_ERROR = "ConfigurationError"
    MISSING_CONFIG = "MissingConfig"
    CHROME_PATH_NOT_SPECIFIED = "ChromePathNotSpecified"
    INVALID_CONFIG = "InvalidConfig"

    # Transport
    REQUEST_FAILED = "RequestFailed"


class ErrorCategory(str, Enum):
    CLIENT = "client"
    SERVER = "server"
    WEBSITE = "website"


class RobotError(Exception):
    """
    Base exception for all automation-robot errors.

    Attributes:
        name: Error name; equals ``code`` unless given explicitly
        code: Error code string (see ErrorCode)
        category: Who is at fault (client, server, website)
        message: Human-readable error message
        details: Arbitrary structured details
        cause: Original exception that caused this error
    """

    code: str = ErrorCode.UNKNOWN_ERROR.value
    category: ErrorCategory = ErrorCategory.SERVER

    def __init__(
        self,
        message: str | None = None,
        *,
        name: str | None = None,
        code: str | None = None,
        category: ErrorCategory | str | None = None,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        if code is not None:
            self.code = str(code.value if isinstance(code, ErrorCode) else code)
        if category is not None:
            self.category = ErrorCategory(category)
        self.name = name or self.code
        self.message = message or self.name
        self.details = dict(details or {})
        self.cause = cause
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "name": self.name,
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
            "details": dict(self.details),
            "cause": str(self.cause) if self.cause else None,
        }

    def to_job_error(self) -> JobError:
        return JobError(
            code=self.code,
            category=self.category.value,
            message=self.message,
            details=dict(self.details),
        )


# =============================================================================
# Job outcome errors
# =============================================================================


class JobFailedError(RobotError):
    """A job reached the ``fail`` state. ``name`` mirrors the reported code."""


class InputTimeoutError(RobotError):
    code = ErrorCode.INPUT_TIMEOUT.value
    category = ErrorCategory.CLIENT

    def __init__(self, key: str, **kwargs):
        super().__init__(
            f"Input timeout (key={key})",
            details={"key": key},
            **kwargs,
        )
        self.key = key


class AwaitingInputInterruptedError(RobotError):
    code = ErrorCode.AWAITING_INPUT_INTERRUPTED.value
    category = ErrorCategory.CLIENT

    def __init__(self, state: str, *, key: str | None = None, **kwargs):
        super().__init__(
            f"Awaiting input was interrupted because job was switched to state {state}",
            details={"state": state, "key": key},
            **kwargs,
        )


class JobCancelledError(RobotError):
    code = ErrorCode.JOB_CANCELLED.value
    category = ErrorCategory.CLIENT

    def __init__(self, message: str = "Job was cancelled", **kwargs):
        super().__init__(message, **kwargs)


# =============================================================================
# Output race errors
# =============================================================================


class JobSuccessMissingOutputsError(RobotError):
    code = ErrorCode.JOB_SUCCESS_MISSING_OUTPUTS.value
    category = ErrorCategory.CLIENT

    def __init__(self, keys: list[str], **kwargs):
        super().__init__(
            "Job succeeded, but specified outputs were not emitted",
            details={"keys": list(keys)},
            **kwargs,
        )


class JobFailMissingOutputsError(RobotError):
    code = ErrorCode.JOB_FAIL_MISSING_OUTPUTS.value
    category = ErrorCategory.CLIENT

    def __init__(self, keys: list[str], **kwargs):
        super().__init__(
            "Job failed, and specified outputs were not emitted",
            details={"keys": list(keys)},
            **kwargs,
        )


# =============================================================================
# State misuse
# =============================================================================


class InvalidStateError(RobotError):
    code = ErrorCode.INVALID_STATE.value
    category = ErrorCategory.CLIENT


class JobAlreadyStartedError(RobotError):
    code = ErrorCode.JOB_ALREADY_STARTED.value
    category = ErrorCategory.CLIENT

    def __init__(self, job_id: str, **kwargs):
        super().__init__(
            f"Job {job_id} already initialized; use track() to follow its progress",
            details={"job_id": job_id},
            **kwargs,
        )


# =============================================================================
# Script format errors
# =============================================================================


class BadScriptError(RobotError):
    code = ErrorCode.BAD_SCRIPT.value
    category = ErrorCategory.CLIENT


class ScriptInitFailedError(RobotError):
    code = ErrorCode.SCRIPT_INIT_FAILED.value
    category = ErrorCategory.CLIENT


# =============================================================================
# Configuration errors
# =============================================================================


class ConfigurationError(RobotError):
    code = ErrorCode.CONFIG_ERROR.value
    category = ErrorCategory.CLIENT


class MissingConfigError(ConfigurationError):
    """A required connection parameter is not set."""

    code = ErrorCode.MISSING_CONFIG.value

    def __init__(
        self,
        message: str,
        *,
        option: str | None = None,
        env_var: str | None = None,
        **kwargs,
    ):
        details = {"option": option, "env_var": env_var}
        super().__init__(message, details=details, **kwargs)
        self.option = option
        self.env_var = env_var


class InvalidConfigError(ConfigurationError):
    code = ErrorCode.INVALID_CONFIG.value


# =============================================================================
# Transport
# =============================================================================


class RequestFailedError(RobotError):
    """The Automation Service answered with an error status or was unreachable."""

    code = ErrorCode.REQUEST_FAILED.value
    category = ErrorCategory.SERVER

    def __init__(
        self,
        message: str = "Request failed",
        *,
        status: int | None = None,
        method: str | None = None,
        url: str | None = None,
        body: Any = None,
        **kwargs,
    ):
        details = {"status": status, "method": method, "url": url, "body": body}
        super().__init__(message, details=details, **kwargs)
        self.status = status

    @property
    def retryable(self) -> bool:
        return self.status is None or self.status >= 500 or self.status == 429


# =============================================================================
# Translation helpers
# =============================================================================


def normalize_job_error(payload: dict[str, Any] | JobError | None) -> JobError:
    """
    Fill in defaults for an incomplete error payload.

    Missing fields default to ``category=server``, ``code=UnknownError``,
    ``message="Unknown error"``.
    """
    if isinstance(payload, JobError):
        payload = payload.to_dict()
    payload = payload or {}
    return JobError(
        code=payload.get("code") or ErrorCode.UNKNOWN_ERROR.value,
        category=payload.get("category") or ErrorCategory.SERVER.value,
        message=payload.get("message") or "Unknown error",
        details=payload.get("details") or {},
    )


def error_from_job_error(error: JobError) -> JobFailedError:
    """Build the exception raised to callers for a failed job."""
    return JobFailedError(
        error.message,
        code=error.code,
        category=error.category,
        details={"category": error.category, **(error.details or {})},
    )


def error_from_exception(exc: BaseException | None) -> RobotError:
    """Coerce an arbitrary engine failure into a RobotError."""
    if isinstance(exc, RobotError):
        return exc
    if exc is None:
        return RobotError("Unknown error", code=ErrorCode.UNKNOWN_ERROR.value)
    name = getattr(exc, "name", None) or getattr(exc, "code", None)
    return RobotError(
        str(exc) or type(exc).__name__,
        code=str(name) if name else ErrorCode.UNKNOWN_ERROR.value,
        details=dict(getattr(exc, "details", None) or {}),
        cause=exc,
    )


def error_from_status(
    status: int,
    message: str,
    *,
    method: str | None = None,
    url: str | None = None,
    body: Any = None,
) -> RequestFailedError:
    """Create a RequestFailedError from an HTTP status code."""
    category = ErrorCategory.CLIENT if 400 <= status < 500 else ErrorCategory.SERVER
    return RequestFailedError(
        message,
        status=status,
        method=method,
        url=url,
        body=body,
        category=category,
    )


__all__ = [
    # Base
    "ErrorCode",
    "ErrorCategory",
    "RobotError",
    # Job outcome errors
    "JobFailedError",
    "InputTimeoutError",
    "AwaitingInputInterruptedError",
    "JobCancelledError",
    # Output race errors
    "JobSuccessMissingOutputsError",
    "JobFailMissingOutputsError",
    # State misuse
    "InvalidStateError",
    "JobAlreadyStartedError",
    # Script format errors
    "BadScriptError",
    "ScriptInitFailedError",
    # Config errors
    "ConfigurationError",
    "MissingConfigError",
    "InvalidConfigError",
    # Transport
    "RequestFailedError",
    # Utilities
    "normalize_job_error",
    "error_from_job_error",
    "error_from_exception",
    "error_from_status",
]
