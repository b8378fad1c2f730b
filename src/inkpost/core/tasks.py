"""Background operations and the outcomes they report.

Each operation runs as its own asyncio task over a private copy of the
config and draft, and puts exactly one outcome on the runner's queue:

    >>> runner = TaskRunner()
    >>> runner.send(config, draft)
    >>> outcome = await runner.queue.get()
    >>> isinstance(outcome, (EmailSent, EmailFailed))
    True
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Optional, Set, Tuple, Union

from inkpost.core.compiler import compile
from inkpost.core.email.transport import SMTPTransport, send_draft
from inkpost.core.models.draft import Draft
from inkpost.core.models.worker import FilterOptions, LogEntry, ScheduledJob
from inkpost.core.validation.email import EmailValidator
from inkpost.core.validation.schedule import ScheduleInput, ScheduleResolver
from inkpost.core.worker.client import WorkerClient
from inkpost.utils.config import AppConfig
from inkpost.utils.errors import ErrorHandler, InvalidScheduleError, format_error_message
from inkpost.utils.logging import get_logger

logger = get_logger(__name__)


## Outcomes


@dataclass(frozen=True)
class EmailSent:
    recipient: str


@dataclass(frozen=True)
class EmailScheduled:
    recipient: str
    scheduled_at: datetime


@dataclass(frozen=True)
class EmailFailed:
    error: str


@dataclass(frozen=True)
class LogsFetched:
    logs: Tuple[LogEntry, ...]


@dataclass(frozen=True)
class LogsFailed:
    error: str


@dataclass(frozen=True)
class LogsDeleted:
    tracking_id: str


@dataclass(frozen=True)
class FiltersFetched:
    filters: FilterOptions


@dataclass(frozen=True)
class FiltersFailed:
    error: str


@dataclass(frozen=True)
class JobsFetched:
    jobs: Tuple[ScheduledJob, ...]


@dataclass(frozen=True)
class JobsFailed:
    error: str


@dataclass(frozen=True)
class JobCancelled:
    job_id: str


@dataclass(frozen=True)
class JobActionFailed:
    error: str


TaskOutcome = Union[
    EmailSent,
    EmailScheduled,
    EmailFailed,
    LogsFetched,
    LogsFailed,
    LogsDeleted,
    FiltersFetched,
    FiltersFailed,
    JobsFetched,
    JobsFailed,
    JobCancelled,
    JobActionFailed,
]


## Runner


class TaskRunner:
    """Launch background operations and collect their outcomes on one queue."""

    def __init__(
        self,
        queue: Optional[asyncio.Queue] = None,
        transport: Optional[SMTPTransport] = None,
    ):
        self.queue: asyncio.Queue = queue or asyncio.Queue()
        self._transport = transport
        self._tasks: Set[asyncio.Task] = set()

    def _spawn(self, coro: Awaitable[None]) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait(self) -> None:
        """Wait for every task launched so far."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _run(
        self,
        operation: Callable[[], Awaitable[TaskOutcome]],
        failure: Callable[[str], TaskOutcome],
        context: str,
    ) -> None:
        try:
            outcome = await operation()
        except Exception as e:
            ErrorHandler.handle(e, context, log_traceback=False)
            outcome = failure(format_error_message(e))

        await self.queue.put(outcome)

    @staticmethod
    def _worker(config: AppConfig) -> WorkerClient:
        config.require_worker()
        return WorkerClient(config.worker_url, config.api_secret)

    ## Email

    def send(self, config: AppConfig, draft: Draft) -> asyncio.Task:
        """Compile and deliver a draft now."""
        config = config.model_copy(deep=True)
        draft = draft.model_copy(deep=True)

        async def operation() -> TaskOutcome:
            await asyncio.to_thread(send_draft, config, draft, self._transport)
            return EmailSent(recipient=draft.recipient)

        return self._spawn(self._run(operation, EmailFailed, "Send email"))

    def schedule(
        self, config: AppConfig, draft: Draft, schedule: ScheduleInput
    ) -> asyncio.Task:
        """Compile a draft and hand it to the worker for later delivery."""
        config = config.model_copy(deep=True)
        draft = draft.model_copy(deep=True)

        async def operation() -> TaskOutcome:
            resolved = ScheduleResolver.resolve(schedule)
            if resolved is None:
                raise InvalidScheduleError(
                    "Schedule is incomplete, does not exist or uses an unknown timezone"
                )

            config.require_smtp_credentials()
            recipient = EmailValidator.normalize(draft.recipient, role="recipient")
            compiled = compile(draft, config.identity, config.worker_url)

            async with self._worker(config) as client:
                await client.schedule_email(
                    compiled,
                    subject=draft.subject,
                    recipient=recipient,
                    scheduled_at=resolved.instant,
                    smtp_username=config.smtp_username,
                    smtp_password=config.smtp_app_password,
                    sender_name=config.identity.name,
                )
            return EmailScheduled(recipient=recipient, scheduled_at=resolved.instant)

        return self._spawn(self._run(operation, EmailFailed, "Schedule email"))

    ## Dashboard

    def fetch_logs(self, config: AppConfig) -> asyncio.Task:
        config = config.model_copy(deep=True)

        async def operation() -> TaskOutcome:
            async with self._worker(config) as client:
                return LogsFetched(logs=tuple(await client.fetch_logs()))

        return self._spawn(self._run(operation, LogsFailed, "Fetch logs"))

    def fetch_filters(self, config: AppConfig) -> asyncio.Task:
        config = config.model_copy(deep=True)

        async def operation() -> TaskOutcome:
            async with self._worker(config) as client:
                return FiltersFetched(filters=await client.fetch_filters())

        return self._spawn(self._run(operation, FiltersFailed, "Fetch filters"))

    def delete_logs(self, config: AppConfig, tracking_id: str) -> asyncio.Task:
        config = config.model_copy(deep=True)

        async def operation() -> TaskOutcome:
            async with self._worker(config) as client:
                await client.delete_recipient_logs(tracking_id)
            return LogsDeleted(tracking_id=tracking_id)

        return self._spawn(self._run(operation, LogsFailed, "Delete logs"))

    ## Scheduled jobs

    def fetch_jobs(self, config: AppConfig) -> asyncio.Task:
        config = config.model_copy(deep=True)

        async def operation() -> TaskOutcome:
            async with self._worker(config) as client:
                return JobsFetched(jobs=tuple(await client.fetch_scheduled_jobs()))

        return self._spawn(self._run(operation, JobsFailed, "Fetch scheduled jobs"))

    def cancel_job(self, config: AppConfig, job_id: str) -> asyncio.Task:
        config = config.model_copy(deep=True)

        async def operation() -> TaskOutcome:
            async with self._worker(config) as client:
                await client.cancel_scheduled_job(job_id)
            return JobCancelled(job_id=job_id)

        return self._spawn(self._run(operation, JobActionFailed, "Cancel job"))
