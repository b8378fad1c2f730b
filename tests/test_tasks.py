"""
Tests for background tasks and their outcomes
"""
from datetime import datetime, timezone
from unittest.mock import MagicMock

import httpx
import pytest
import respx

from inkpost.core.email.transport import SMTPTransport
from inkpost.core.tasks import (
    EmailFailed,
    EmailScheduled,
    EmailSent,
    FiltersFetched,
    JobActionFailed,
    JobCancelled,
    JobsFailed,
    JobsFetched,
    LogsDeleted,
    LogsFailed,
    LogsFetched,
    TaskRunner,
)
from inkpost.core.validation import ScheduleInput
from inkpost.utils.config import AppConfig
from inkpost.utils.errors import DeliveryError

BASE_URL = "https://worker.example.com"


@pytest.fixture
def transport():
    return MagicMock(spec=SMTPTransport)


@pytest.fixture
def runner(transport):
    return TaskRunner(transport=transport)


@pytest.fixture
def london_morning():
    return ScheduleInput(
        day="15", month="06", year="2024", hour="09", minute="30", second="00",
        timezone="Europe/London",
    )


class TestSendTask:
    """Tests for the send operation"""

    async def test_send_success(self, runner, transport, app_config, draft):
        """Test a successful send reports EmailSent"""
        runner.send(app_config, draft)
        outcome = await runner.queue.get()

        assert outcome == EmailSent(recipient="grace@example.com")
        transport.send.assert_called_once()

    async def test_send_uses_private_copy(self, runner, transport, app_config, draft):
        """Test later edits to the draft do not leak into a running task"""
        runner.send(app_config, draft)
        draft.recipient = "someone-else@example.com"
        app_config.smtp_username = "changed@example.com"

        outcome = await runner.queue.get()

        assert outcome == EmailSent(recipient="grace@example.com")
        message, credentials = transport.send.call_args[0]
        assert message["To"] == "grace@example.com"
        assert credentials.username == "ada@example.com"

    async def test_invalid_recipient(self, runner, transport, app_config, draft):
        """Test a bad address fails before the transport is used"""
        runner.send(app_config, draft.model_copy(update={"recipient": "nope"}))
        outcome = await runner.queue.get()

        assert isinstance(outcome, EmailFailed)
        assert "recipient" in outcome.error
        transport.send.assert_not_called()

    async def test_delivery_failure(self, runner, transport, app_config, draft):
        """Test relay errors become EmailFailed"""
        transport.send.side_effect = DeliveryError("SMTP authentication failed: bad password")

        runner.send(app_config, draft)
        outcome = await runner.queue.get()

        assert outcome == EmailFailed(error="SMTP authentication failed: bad password")

    async def test_unexpected_error(self, runner, transport, app_config, draft):
        """Test unexpected exceptions still produce exactly one outcome"""
        transport.send.side_effect = RuntimeError("boom")

        runner.send(app_config, draft)
        outcome = await runner.queue.get()

        assert isinstance(outcome, EmailFailed)
        assert runner.queue.empty()


class TestScheduleTask:
    """Tests for the schedule operation"""

    @respx.mock
    async def test_schedule_success(
        self, runner, app_config, draft, london_morning, image_file, attachment_file
    ):
        """Test the resolved instant is posted to the worker"""
        route = respx.post(f"{BASE_URL}/api/schedule").mock(return_value=httpx.Response(200))
        draft = draft.model_copy(
            update={"body": f"![chart]({image_file})", "attachments": [attachment_file]}
        )

        runner.schedule(app_config, draft, london_morning)
        outcome = await runner.queue.get()

        assert outcome == EmailScheduled(
            recipient="grace@example.com",
            scheduled_at=datetime(2024, 6, 15, 8, 30, tzinfo=timezone.utc),
        )
        body = route.calls.last.request.content
        assert b"2024-06-15T08:30:00+00:00" in body
        assert b"notes.txt" in body
        assert b"meeting notes" in body

    @respx.mock
    async def test_unresolvable_schedule(self, runner, app_config, draft):
        """Test an invalid schedule fails without contacting the worker"""
        route = respx.post(f"{BASE_URL}/api/schedule").mock(return_value=httpx.Response(200))

        runner.schedule(app_config, draft, ScheduleInput(day="31", month="02", year="2024"))
        outcome = await runner.queue.get()

        assert isinstance(outcome, EmailFailed)
        assert "Schedule" in outcome.error
        assert not route.called

    async def test_worker_not_configured(self, runner, draft, london_morning):
        """Test scheduling needs a worker URL and secret"""
        config = AppConfig(smtp_username="ada@example.com", smtp_app_password="pw")

        runner.schedule(config, draft, london_morning)
        outcome = await runner.queue.get()

        assert isinstance(outcome, EmailFailed)
        assert "Worker URL" in outcome.error

    @respx.mock
    async def test_worker_rejects(self, runner, app_config, draft, london_morning):
        """Test worker errors become EmailFailed"""
        respx.post(f"{BASE_URL}/api/schedule").mock(return_value=httpx.Response(500, text="down"))

        runner.schedule(app_config, draft, london_morning)
        outcome = await runner.queue.get()

        assert isinstance(outcome, EmailFailed)
        assert "500" in outcome.error


class TestDashboardTasks:
    """Tests for log, filter and job operations"""

    @respx.mock
    async def test_fetch_logs(self, runner, app_config):
        """Test logs arrive as LogsFetched"""
        respx.get(f"{BASE_URL}/api/logs").mock(
            return_value=httpx.Response(
                200, json=[{"tracking_id": "abc", "timestamp": "2024-06-15T08:30:00Z"}]
            )
        )

        runner.fetch_logs(app_config)
        outcome = await runner.queue.get()

        assert isinstance(outcome, LogsFetched)
        assert outcome.logs[0].tracking_id == "abc"

    @respx.mock
    async def test_fetch_logs_failure(self, runner, app_config):
        """Test errors arrive as LogsFailed"""
        respx.get(f"{BASE_URL}/api/logs").mock(return_value=httpx.Response(503))

        runner.fetch_logs(app_config)
        outcome = await runner.queue.get()

        assert isinstance(outcome, LogsFailed)
        assert "503" in outcome.error

    @respx.mock
    async def test_fetch_filters(self, runner, app_config):
        """Test filters arrive as FiltersFetched"""
        respx.get(f"{BASE_URL}/api/filters").mock(
            return_value=httpx.Response(200, json={"recipients": [], "countries": ["GB"]})
        )

        runner.fetch_filters(app_config)
        outcome = await runner.queue.get()

        assert isinstance(outcome, FiltersFetched)
        assert outcome.filters.countries == ["GB"]

    @respx.mock
    async def test_delete_logs(self, runner, app_config):
        """Test deleting logs reports the tracking id"""
        respx.delete(f"{BASE_URL}/api/logs").mock(return_value=httpx.Response(200))

        runner.delete_logs(app_config, "abc")

        assert await runner.queue.get() == LogsDeleted(tracking_id="abc")

    @respx.mock
    async def test_fetch_and_cancel_jobs(self, runner, app_config):
        """Test job listing and cancellation outcomes"""
        respx.get(f"{BASE_URL}/api/scheduled").mock(
            return_value=httpx.Response(200, json=[{"id": "9", "recipient": "g@example.com"}])
        )
        respx.delete(f"{BASE_URL}/api/scheduled").mock(return_value=httpx.Response(200))

        runner.fetch_jobs(app_config)
        jobs = await runner.queue.get()
        runner.cancel_job(app_config, "9")
        cancelled = await runner.queue.get()

        assert isinstance(jobs, JobsFetched)
        assert jobs.jobs[0].id == "9"
        assert cancelled == JobCancelled(job_id="9")

    @respx.mock
    async def test_cancel_failure(self, runner, app_config):
        """Test a failed cancel is a JobActionFailed"""
        respx.delete(f"{BASE_URL}/api/scheduled").mock(return_value=httpx.Response(404))

        runner.cancel_job(app_config, "9")
        outcome = await runner.queue.get()

        assert isinstance(outcome, JobActionFailed)
        assert "404" in outcome.error

    @respx.mock
    async def test_each_task_posts_one_outcome(self, runner, app_config):
        """Test concurrent tasks each report exactly once"""
        respx.get(f"{BASE_URL}/api/logs").mock(return_value=httpx.Response(200, json=[]))
        respx.get(f"{BASE_URL}/api/scheduled").mock(
            side_effect=httpx.ConnectError("unreachable")
        )

        runner.fetch_logs(app_config)
        runner.fetch_jobs(app_config)
        await runner.wait()

        outcomes = [runner.queue.get_nowait() for _ in range(runner.queue.qsize())]
        assert len(outcomes) == 2
        assert {type(o) for o in outcomes} == {LogsFetched, JobsFailed}
