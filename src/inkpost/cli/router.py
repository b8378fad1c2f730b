"""Routes CLI commands to the draft, tracking and job workflows."""

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from rich.columns import Columns
from rich.console import Console
from rich.markup import escape

from inkpost.core.compiler import compile, tracking_token
from inkpost.core.editor import open_external_editor
from inkpost.core.models.draft import Draft
from inkpost.core.models.worker import JobStatus
from inkpost.core.storage import DraftStore
from inkpost.core.tasks import (
    EmailScheduled,
    EmailSent,
    FiltersFetched,
    JobCancelled,
    JobsFetched,
    LogsDeleted,
    LogsFailed,
    LogsFetched,
    TaskRunner,
)
from inkpost.core.tracking import aggregate_logs, export_job, filter_jobs
from inkpost.core.validation.email import EmailValidator
from inkpost.core.validation.schedule import ScheduleInput, ScheduleResolver
from inkpost.utils.config import ConfigManager
from inkpost.utils.console import print_error, print_status, print_success, print_warning
from inkpost.utils.errors import FileSystemError, MissingConfigError
from inkpost.utils.logging import async_log_call, get_logger

from .display import render_jobs, render_settings, render_summaries

logger = get_logger(__name__)


def apply_draft_overrides(draft: Draft, args: Dict[str, Any]) -> Draft:
    """Return a copy of the draft with the command line fields applied."""
    updates: Dict[str, Any] = {}

    for field in ("recipient", "subject", "body"):
        if args.get(field) is not None:
            updates[field] = args[field]

    if args.get("body_file"):
        path = Path(args["body_file"]).expanduser()
        try:
            updates["body"] = path.read_text(encoding="utf-8")
        except OSError as e:
            raise FileSystemError(f"Cannot read body file {path}: {e}") from e

    if args.get("clear_attachments") or args.get("attach"):
        attachments = [] if args.get("clear_attachments") else list(draft.attachments)
        attachments.extend(Path(p).expanduser() for p in args.get("attach") or [])
        updates["attachments"] = attachments

    return draft.model_copy(update=updates)


class CommandRouter:
    """Routes commands to their handlers."""

    def __init__(
        self,
        console: Console,
        config_manager: ConfigManager,
        drafts: Optional[DraftStore] = None,
        runner: Optional[TaskRunner] = None,
    ):
        self.console = console
        self.config_manager = config_manager
        self.drafts = drafts or DraftStore()
        self.runner = runner or TaskRunner()

    @property
    def config(self):
        return self.config_manager.config

    @async_log_call
    async def route(self, command: str, args: Optional[Dict[str, Any]] = None) -> bool:
        """Run a command.

        Raises:
            ValueError: If the command is unknown
        """
        handler = self._get_handler(command, args or {})
        if handler is None:
            raise ValueError(f"Unknown command: {command}")

        return await handler(args or {})

    def _get_handler(self, command: str, args: Dict[str, Any]) -> Optional[Callable]:
        handlers = {
            "edit": self._handle_edit,
            "preview": self._handle_preview,
            "send": self._handle_send,
            "schedule": self._handle_schedule,
            "timezones": self._handle_timezones,
            "logs": self._handle_logs,
            "forget": self._handle_forget,
            "jobs": self._handle_jobs,
            "cancel": self._handle_cancel,
            "export-job": self._handle_export_job,
        }
        if command == "config":
            return {
                "list": self._handle_config_list,
                "get": self._handle_config_get,
                "set": self._handle_config_set,
                "reset": self._handle_config_reset,
            }.get(args.get("config_command"))

        return handlers.get(command)

    ## Draft

    async def _handle_edit(self, args: Dict[str, Any]) -> bool:
        draft = Draft() if args.get("clear") else self.drafts.load()
        draft = apply_draft_overrides(draft, args)

        if not args.get("no_editor"):
            body = await asyncio.to_thread(open_external_editor, draft.body)
            draft = draft.model_copy(update={"body": body})

        self.drafts.save(draft)
        await print_success("Draft saved", self.console)
        return True

    async def _handle_preview(self, args: Dict[str, Any]) -> bool:
        draft = self.drafts.load()
        compiled = compile(draft, self.config.identity, self.config.worker_url)

        body = compiled.html_body if args.get("html") else compiled.plain_body
        self.console.rule(escape(f"To: {draft.recipient or '-'}  Subject: {draft.subject or '-'}"))
        self.console.print(body, markup=False, highlight=False)
        self.console.rule()

        for image in compiled.inline_images:
            self.console.print(f"inline  {image.source_path} -> {image.reference}", markup=False)
        for path in compiled.attachments:
            self.console.print(f"attach  {path}", markup=False)
        return True

    async def _handle_send(self, args: Dict[str, Any]) -> bool:
        draft = apply_draft_overrides(self.drafts.load(), args)
        self.drafts.save(draft)

        await print_status(f"Sending to {draft.recipient}...", self.console)
        self.runner.send(self.config, draft)
        outcome = await self.runner.queue.get()

        if isinstance(outcome, EmailSent):
            self.drafts.clear()
            await print_success(f"Email sent to {outcome.recipient}", self.console)
            return True

        await print_error(f"Send failed: {outcome.error}", self.console)
        return False

    async def _handle_schedule(self, args: Dict[str, Any]) -> bool:
        draft = apply_draft_overrides(self.drafts.load(), args)
        self.drafts.save(draft)

        schedule = ScheduleResolver.with_defaults(
            ScheduleInput(
                day=args.get("day", ""),
                month=args.get("month", ""),
                year=args.get("year", ""),
                hour=args.get("hour", ""),
                minute=args.get("minute", ""),
                second=args.get("second", ""),
                timezone=args.get("timezone", ""),
            )
        )

        await print_status(f"Scheduling email to {draft.recipient}...", self.console)
        self.runner.schedule(self.config, draft, schedule)
        outcome = await self.runner.queue.get()

        if isinstance(outcome, EmailScheduled):
            self.drafts.clear()
            await print_success(
                f"Scheduled for {outcome.scheduled_at.isoformat()} ({outcome.recipient})",
                self.console,
            )
            return True

        await print_error(f"Scheduling failed: {outcome.error}", self.console)
        return False

    async def _handle_timezones(self, args: Dict[str, Any]) -> bool:
        zones = ScheduleResolver.filter_timezones(args.get("query", ""))
        if not zones:
            await print_warning("No matching timezones", self.console)
            return False

        self.console.print(Columns(zones, equal=True, expand=True))
        return True

    ## Tracking

    async def _handle_logs(self, args: Dict[str, Any]) -> bool:
        self.runner.fetch_logs(self.config)
        self.runner.fetch_filters(self.config)

        logs_outcome = None
        for _ in range(2):
            outcome = await self.runner.queue.get()
            if isinstance(outcome, (LogsFetched, LogsFailed)):
                logs_outcome = outcome
            elif isinstance(outcome, FiltersFetched):
                countries = ", ".join(outcome.filters.countries) or "-"
                self.console.print(f"Countries seen: {countries}", style="dim", markup=False)
            else:
                await print_warning(f"Could not fetch filters: {outcome.error}", self.console)

        if not isinstance(logs_outcome, LogsFetched):
            await print_error(f"Could not fetch logs: {logs_outcome.error}", self.console)
            return False

        summaries = aggregate_logs(
            logs_outcome.logs,
            recipient_filter=args.get("recipient", ""),
            country_filter=args.get("country", ""),
            min_opens=args.get("min_opens"),
        )
        render_summaries(summaries, self.console, detail=args.get("detail", False))
        return True

    async def _handle_forget(self, args: Dict[str, Any]) -> bool:
        target = args["recipient"].strip()
        tracking_id = tracking_token(target) if "@" in target else target

        self.runner.delete_logs(self.config, tracking_id)
        outcome = await self.runner.queue.get()

        if isinstance(outcome, LogsDeleted):
            await print_success(f"Deleted tracking logs for {target}", self.console)
            return True

        await print_error(f"Could not delete logs: {outcome.error}", self.console)
        return False

    ## Scheduled jobs

    async def _fetch_jobs(self):
        self.runner.fetch_jobs(self.config)
        outcome = await self.runner.queue.get()

        if isinstance(outcome, JobsFetched):
            return outcome.jobs

        await print_error(f"Could not fetch jobs: {outcome.error}", self.console)
        return None

    async def _handle_jobs(self, args: Dict[str, Any]) -> bool:
        jobs = await self._fetch_jobs()
        if jobs is None:
            return False

        status = JobStatus(args["status"]) if args.get("status") else None
        render_jobs(filter_jobs(jobs, args.get("recipient", ""), status), self.console)
        return True

    async def _handle_cancel(self, args: Dict[str, Any]) -> bool:
        self.runner.cancel_job(self.config, args["job_id"])
        outcome = await self.runner.queue.get()

        if isinstance(outcome, JobCancelled):
            await print_success(f"Cancelled job {outcome.job_id}", self.console)
            return True

        await print_error(f"Could not cancel job: {outcome.error}", self.console)
        return False

    async def _handle_export_job(self, args: Dict[str, Any]) -> bool:
        jobs = await self._fetch_jobs()
        if jobs is None:
            return False

        job = next((j for j in jobs if j.id == args["job_id"]), None)
        if job is None:
            await print_error(f"No scheduled job with ID {args['job_id']}", self.console)
            return False

        target_root = Path(args["path"]).expanduser() if args.get("path") else None
        target = await asyncio.to_thread(export_job, job, target_root)
        await print_success(f"Exported to {target}", self.console)
        return True

    ## Configuration

    async def _handle_config_list(self, args: Dict[str, Any]) -> bool:
        render_settings(self.config.model_dump(mode="json"), self.console)
        return True

    async def _handle_config_get(self, args: Dict[str, Any]) -> bool:
        missing = object()
        value = self.config_manager.get_config(args["key"], missing)
        if value is missing:
            raise MissingConfigError(f"Unknown configuration key '{args['key']}'")

        if isinstance(value, list):
            value = ", ".join(value)
        self.console.print(str(value), markup=False, highlight=False)
        return True

    async def _handle_config_set(self, args: Dict[str, Any]) -> bool:
        key, value = args["key"], args["value"]

        if key == "identity.emails":
            emails = self.config_manager.set_emails(value)
            await print_success(f"identity.emails = {', '.join(emails)}", self.console)
            for email in emails:
                if not EmailValidator.is_valid_email(email):
                    await print_warning(f"'{email}' does not look like an email address", self.console)
            return True

        self.config_manager.set_config(key, value)
        await print_success(f"{key} updated", self.console)
        return True

    async def _handle_config_reset(self, args: Dict[str, Any]) -> bool:
        self.config_manager.reset_to_defaults()
        await print_success("Configuration reset to defaults", self.console)
        return True
