"""Tests for cloud jobs tracked against the Automation Service mock."""

from __future__ import annotations

import asyncio

import pytest

from automation_robot import (
    InvalidStateError,
    JobAlreadyStartedError,
    JobFailedError,
    JobFailMissingOutputsError,
    JobState,
    JobSuccessMissingOutputsError,
)
from automation_robot.cloud import CloudJobDriver


class TestCloudJobBasics:
    """Creating and attaching to remote jobs."""

    @pytest.mark.asyncio
    async def test_create_job_posts_job(self, cloud_robot, service):
        """create_job sends service id, category and inputs."""
        job = await cloud_robot.create_job(category="live", input={"value": {"foo": 1}})

        assert service.requests[0][:2] == ("POST", "/jobs")
        assert service.job["serviceId"] == "service-123"
        assert service.job["category"] == "live"
        assert service.inputs == [{"key": "value", "data": {"foo": 1}}]
        assert job.job_id == service.job["id"]
        assert job.state is JobState.PROCESSING
        assert job.inputs["value"].data == {"foo": 1}
        assert job.category.value == "live"

    @pytest.mark.asyncio
    async def test_basic_auth_header(self, cloud_robot, service):
        """Secret keys are sent as basic-auth usernames."""
        await cloud_robot.create_job()
        assert service.auth_headers[0] == "Basic c2VjcmV0LWtleTo="

    @pytest.mark.asyncio
    async def test_wait_for_completion_on_success(self, cloud_robot, service):
        """Success events complete the job."""
        job = await cloud_robot.create_job()
        service.success()

        await job.wait_for_completion()
        assert job.state is JobState.SUCCESS
        assert job.get_error_info() is None

    @pytest.mark.asyncio
    async def test_wait_for_completion_on_fail(self, cloud_robot, service):
        """Fail events raise the remote error with its code as name."""
        job = await cloud_robot.create_job()
        service.fail({"category": "client", "code": "UhOhError", "message": "Uh oh"})

        with pytest.raises(JobFailedError) as exc_info:
            await job.wait_for_completion()

        error = exc_info.value
        assert error.name == "UhOhError"
        assert error.message == "Uh oh"
        assert error.details["category"] == "client"
        assert job.get_error_info().code == "UhOhError"

    @pytest.mark.asyncio
    async def test_incomplete_error_gets_defaults(self, cloud_robot, service):
        """Missing error fields default to server / UnknownError."""
        job = await cloud_robot.create_job()
        service.fail(None)

        with pytest.raises(JobFailedError) as exc_info:
            await job.wait_for_completion()
        assert exc_info.value.name == "UnknownError"
        assert exc_info.value.message == "Unknown error"
        assert exc_info.value.details == {"category": "server"}

    @pytest.mark.asyncio
    async def test_get_job_tracks_existing(self, cloud_robot, service):
        """get_job attaches to an existing job and replays its events."""
        job = await cloud_robot.create_job()
        service.add_output("echo", "hello")
        service.success()
        await job.wait_for_completion()

        same = await cloud_robot.get_job(job.job_id)
        await same.wait_for_completion()

        assert same.job_id == job.job_id
        assert same.state is JobState.SUCCESS
        assert await same.get_output("echo") == "hello"

    @pytest.mark.asyncio
    async def test_get_job_of_finished_job_replays_outputs(self, cloud_robot, service):
        """Outputs of a job that finished before attaching can still be awaited."""
        job = await cloud_robot.create_job()
        service.add_output("echo", {"foo": 1})
        service.success()
        await job.wait_for_completion()

        attached = await cloud_robot.get_job(job.job_id)
        assert attached.state is not JobState.SUCCESS

        assert await attached.wait_for_outputs("echo") == [{"foo": 1}]
        await attached.wait_for_completion()
        assert attached.state is JobState.SUCCESS

    @pytest.mark.asyncio
    async def test_get_job_of_failed_job(self, cloud_robot, service):
        """Attaching to a failed job raises its error."""
        job = await cloud_robot.create_job()
        service.fail({"category": "website", "code": "PageNotFound", "message": "404"})
        with pytest.raises(JobFailedError):
            await job.wait_for_completion()

        same = await cloud_robot.get_job(job.job_id)
        with pytest.raises(JobFailedError) as exc_info:
            await same.wait_for_completion()
        assert exc_info.value.name == "PageNotFound"

    @pytest.mark.asyncio
    async def test_start_twice_raises(self, cloud_robot, service):
        """A driver attached to a job cannot start another."""
        job = await cloud_robot.create_job()
        with pytest.raises(JobAlreadyStartedError):
            await job.driver.start()

    @pytest.mark.asyncio
    async def test_job_id_before_creation(self, cloud_robot):
        """The job id is unavailable until the job is created."""
        job, driver = cloud_robot._new_job()
        assert isinstance(driver, CloudJobDriver)
        with pytest.raises(InvalidStateError):
            _ = job.job_id

    @pytest.mark.asyncio
    async def test_cancel_posts_cancel(self, cloud_robot, service):
        """cancel() asks the service to cancel the job."""
        job = await cloud_robot.create_job()
        await job.cancel()

        assert service.cancelled
        with pytest.raises(JobFailedError) as exc_info:
            await job.wait_for_completion()
        assert exc_info.value.name == "JobCancelled"


class TestCloudJobEvents:
    """Event log translation and the polling cursor."""

    @pytest.mark.asyncio
    async def test_events_processed_exactly_once(self, cloud_robot, service):
        """Repeated polls never re-deliver an event."""
        job = await cloud_robot.create_job()
        outputs, states = [], []
        job.on_any_output(lambda output: outputs.append(output.key))
        job.on_state_changed(lambda state, previous: states.append(state))

        service.add_output("a", 1)
        await asyncio.sleep(0.05)
        service.add_output("b", 2)
        service.success()
        await job.wait_for_completion()

        assert outputs == ["a", "b"]
        assert states == [JobState.SUCCESS]
        assert job.driver.event_offset == len(service.events)
        assert service.event_offsets == sorted(service.event_offsets)

    @pytest.mark.asyncio
    async def test_tds_events_map_to_states(self, cloud_robot, service):
        """tdsStart / tdsFinish move through awaitingTds."""
        job = await cloud_robot.create_job()
        states = []
        job.on_state_changed(lambda state, previous: states.append(state))

        service.add_event("tdsStart")
        service.add_event("tdsFinish")
        service.add_event("restart")
        service.success()
        await job.wait_for_completion()

        assert states == [JobState.AWAITING_TDS, JobState.PROCESSING, JobState.SUCCESS]

    @pytest.mark.asyncio
    async def test_success_and_fail_listeners(self, cloud_robot, service):
        """on_success fires once for a successful job."""
        job = await cloud_robot.create_job()
        calls = []
        job.on_success(lambda: calls.append("success"))
        job.on_fail(lambda error: calls.append("fail"))

        service.success()
        await job.wait_for_completion()
        assert calls == ["success"]

    @pytest.mark.asyncio
    async def test_listener_errors_go_to_error_channel(self, cloud_robot, service):
        """A raising listener does not stop tracking."""
        job = await cloud_robot.create_job()
        errors = []
        job.on_error(errors.append)

        def broken(output):
            raise RuntimeError("listener bug")

        job.on_any_output(broken)
        service.add_output("a", 1)
        service.success()
        await job.wait_for_completion()

        assert [str(e) for e in errors] == ["listener bug"]
        assert job.state is JobState.SUCCESS


class TestCloudJobInputs:
    """Input negotiation against the service."""

    @pytest.mark.asyncio
    async def test_handler_returning_value(self, cloud_robot, service):
        """A handler's return value is submitted."""
        job = await cloud_robot.create_job()
        service.request_input("value")
        job.on_awaiting_input("value", lambda key: {"foo": "bar"})

        async def finish_after_input(state, previous):
            if state is JobState.PROCESSING:
                service.success()

        job.on_state_changed(finish_after_input)
        await job.wait_for_completion()

        assert service.inputs == [{"key": "value", "data": {"foo": "bar"}}]
        assert job.inputs["value"].data == {"foo": "bar"}

    @pytest.mark.asyncio
    async def test_submit_from_state_change(self, cloud_robot, service):
        """Inputs can be submitted when the state becomes awaitingInput."""
        job = await cloud_robot.create_job()

        async def on_state(state, previous):
            if state is JobState.AWAITING_INPUT:
                await job.submit_input(job.awaiting_input_key, "secret")
                service.success()

        job.on_state_changed(on_state)
        service.request_input("password")
        await job.wait_for_completion()

        assert service.input_keys() == ["password"]

    @pytest.mark.asyncio
    async def test_wildcard_handler(self, cloud_robot, service):
        """The '*' handler answers every request itself."""
        job = await cloud_robot.create_job()
        requested = []

        async def answer(key):
            requested.append(key)
            await job.submit_input(f"selected{key.capitalize()}", key)
            if key == "foo":
                service.request_input("bar")
            else:
                service.success()

        job.on_awaiting_input("*", answer)
        service.request_input("foo")
        await job.wait_for_completion()

        assert requested == ["foo", "bar"]
        assert service.inputs == [
            {"key": "selectedFoo", "data": "foo"},
            {"key": "selectedBar", "data": "bar"},
        ]
        assert job.inputs["selectedBar"].data == "bar"

    @pytest.mark.asyncio
    async def test_input_timeout(self, cloud_robot, service):
        """The service failing with InputTimeout surfaces with its details."""
        job = await cloud_robot.create_job()
        service.request_input("value")

        with pytest.raises(JobFailedError) as exc_info:
            await job.wait_for_completion()

        error = exc_info.value
        assert error.name == "InputTimeout"
        assert error.category.value == "client"
        assert error.details["key"] == "value"


class TestCloudJobOutputs:
    """Outputs of remote jobs."""

    @pytest.mark.asyncio
    async def test_wait_for_outputs(self, cloud_robot, service):
        """Outputs resolve in key order once all are produced."""
        job = await cloud_robot.create_job()
        service.add_output("b", 2)
        service.add_output("a", 1)

        assert await job.wait_for_outputs("a", "b") == [1, 2]
        service.success()
        await job.wait_for_completion()

    @pytest.mark.asyncio
    async def test_outputs_already_produced(self, cloud_robot, service):
        """Waiting again resolves from the cache."""
        job = await cloud_robot.create_job()
        service.add_output("echo", "x")
        service.success()
        await job.wait_for_completion()

        assert await job.wait_for_outputs("echo") == ["x"]

    @pytest.mark.asyncio
    async def test_success_missing_outputs(self, cloud_robot, service):
        job = await cloud_robot.create_job()
        service.add_output("a", 1)
        service.success()

        with pytest.raises(JobSuccessMissingOutputsError):
            await job.wait_for_outputs("a", "b")

    @pytest.mark.asyncio
    async def test_fail_missing_outputs(self, cloud_robot, service):
        job = await cloud_robot.create_job()
        service.fail({"code": "UhOhError"})

        with pytest.raises(JobFailMissingOutputsError):
            await job.wait_for_outputs("a")
        with pytest.raises(JobFailedError):
            await job.wait_for_completion()

    @pytest.mark.asyncio
    async def test_get_output_falls_back_to_service(self, cloud_robot, service):
        """Uncached outputs are fetched remotely; missing ones are None."""
        job = await cloud_robot.create_job()
        service.outputs["late"] = {"price": 10}

        assert await job.get_output("late") == {"price": 10}
        assert await job.get_output("missing") is None
        assert "late" not in job.outputs

    @pytest.mark.asyncio
    async def test_previous_job_outputs(self, cloud_robot, service):
        """Previous outputs are fetched per service and key."""
        service.previous_outputs["price"] = [
            {"jobId": "job-1", "key": "price", "data": 10, "variability": 0.5},
        ]

        outputs = await cloud_robot.get_previous_job_outputs("price", {"url": "x"})

        assert [(o.job_id, o.data, o.variability) for o in outputs] == [("job-1", 10, 0.5)]
        method, path, query = service.requests[-1]
        assert (method, path, query) == (
            "POST",
            "/services/service-123/previous-job-outputs",
            {"key": "price"},
        )


class TestCloudRobotLifecycle:
    """Closing robots."""

    @pytest.mark.asyncio
    async def test_close_stops_tracking(self, cloud_robot, service):
        """Closing the robot stops polling unfinished jobs."""
        job = await cloud_robot.create_job()
        await asyncio.sleep(0.03)
        await cloud_robot.close()

        polls = len(service.event_offsets)
        await asyncio.sleep(0.05)
        assert len(service.event_offsets) == polls
        assert job.driver.completion.cancelled()
