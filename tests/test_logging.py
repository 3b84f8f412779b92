"""
Tests for the structured logging module.
"""

import io
import json
import uuid

from automation_robot.config import LoggingConfig
from automation_robot.errors import InputTimeoutError
from automation_robot.logging import (
    LogContext,
    NullLogger,
    StructuredLogger,
    Timer,
    configure_logging,
    redact_secret,
    timed,
    truncate_for_log,
)


def unique_name() -> str:
    return f"automation_robot.test.{uuid.uuid4().hex[:8]}"


def json_lines(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


class TestLogContext:
    """Test LogContext dataclass."""

    def test_to_dict_skips_unset(self):
        ctx = LogContext(job_id="job-1", extra={"attempt": 2})
        assert ctx.to_dict() == {"job_id": "job-1", "attempt": 2}

    def test_with_update(self):
        ctx = LogContext(job_id="job-1", driver="cloud", extra={"a": 1})
        updated = ctx.with_update(service_id="svc", extra={"b": 2})

        assert updated.job_id == "job-1"
        assert updated.service_id == "svc"
        assert updated.extra == {"a": 1, "b": 2}
        assert ctx.service_id is None


class TestStructuredLogger:
    """Test StructuredLogger output."""

    def test_json_output(self):
        stream = io.StringIO()
        logger = StructuredLogger(unique_name(), level="DEBUG", stream=stream)

        logger.info("Job event received", event="createOutput", key="echo")

        (record,) = json_lines(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "Job event received"
        assert record["event"] == "createOutput"
        assert record["key"] == "echo"

    def test_bind_adds_context(self):
        stream = io.StringIO()
        logger = StructuredLogger(unique_name(), stream=stream)

        job_logger = logger.bind(job_id="job-1", driver="local")
        job_logger.warning("Input timeout", key="value")
        logger.info("Unbound")

        bound, unbound = json_lines(stream)
        assert bound["job_id"] == "job-1"
        assert bound["driver"] == "local"
        assert "job_id" not in unbound

    def test_level_filtering(self):
        stream = io.StringIO()
        logger = StructuredLogger(unique_name(), level="WARNING", stream=stream)

        logger.debug("hidden")
        logger.info("hidden")
        logger.error("shown")

        assert [r["message"] for r in json_lines(stream)] == ["shown"]

    def test_exceptions_are_serialized(self):
        stream = io.StringIO()
        logger = StructuredLogger(unique_name(), stream=stream)

        logger.warning("Local job failed", error=InputTimeoutError("value"), other=ValueError("x"))

        (record,) = json_lines(stream)
        assert record["error"]["code"] == "InputTimeout"
        assert record["other"] == {"error_type": "ValueError", "message": "x"}

    def test_text_output(self):
        stream = io.StringIO()
        logger = StructuredLogger(unique_name(), json_output=False, stream=stream)

        logger.bind(job_id="job-1").info("Job restarted")

        output = stream.getvalue()
        assert "INFO" in output
        assert "Job restarted job_id=job-1" in output


class TestNullLogger:

    def test_accepts_everything(self):
        logger = NullLogger()
        logger.debug("a", x=1)
        logger.info("b")
        logger.warning("c")
        logger.error("d", error=RuntimeError())


class TestConfigureLogging:

    def test_writes_to_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "robot.log"
        config = LoggingConfig(name=unique_name(), format="json", log_file=log_file)

        logger = configure_logging(config)
        logger.info("Request completed", status=200)

        record = json.loads(log_file.read_text().splitlines()[0])
        assert record["message"] == "Request completed"
        assert record["status"] == 200

        logger.close()
        assert logger._logger.handlers == []
        logger.info("After close")
        assert len(log_file.read_text().splitlines()) == 1

    def test_text_format(self):
        logger = configure_logging(LoggingConfig(name=unique_name(), format="text"))
        assert logger.json_output is False


class TestUtilities:
    """Test helper functions."""

    def test_timer(self):
        timer = Timer()
        elapsed = timer.stop()
        assert elapsed >= 0
        assert timer.elapsed_ms == elapsed

    def test_timed(self):
        with timed() as timer:
            pass
        assert timer.end_time is not None

    def test_truncate_for_log(self):
        assert truncate_for_log("short") == "short"
        truncated = truncate_for_log("x" * 300, max_length=10)
        assert truncated == "xxxxxxxxxx... (300 chars total)"

    def test_redact_secret(self):
        assert redact_secret(None) == "<not set>"
        assert redact_secret("short") == "***"
        assert redact_secret("sk-1234567890abcd") == "sk-1...abcd"
