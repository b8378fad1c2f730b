"""Async HTTP client for the remote tracking and scheduling worker"""

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from inkpost.core.attachments import guess_content_type, load_optional, part_filename
from inkpost.core.email.constants import MimeDefaults, Timeouts
from inkpost.core.models.document import CompiledDocument
from inkpost.core.models.worker import FilterOptions, LogEntry, ScheduledJob
from inkpost.utils.errors import NetworkError, WorkerError
from inkpost.utils.logging import async_log_call, get_logger, log_event

logger = get_logger(__name__)

_LOG_LIST = TypeAdapter(List[LogEntry])
_JOB_LIST = TypeAdapter(List[ScheduledJob])

FilePart = Tuple[str, Tuple[Any, ...]]


def _utc_rfc3339(instant: datetime) -> str:
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc).isoformat()


def _content_type(path: Path) -> str:
    return "/".join(guess_content_type(path))


class WorkerClient:
    """Client for the worker's ``/api`` endpoints.

    Every request carries the shared secret as a ``secret`` query parameter.
    A non-2xx response raises WorkerError, transport failures raise
    NetworkError.
    """

    def __init__(
        self,
        base_url: str,
        secret: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = Timeouts.WORKER_REQUEST,
    ):
        self.base_url = base_url.rstrip("/")
        self._secret = secret
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "WorkerClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    ## Request helpers

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        include_body: bool = False,
        **kwargs: Any,
    ) -> httpx.Response:
        query = {"secret": self._secret, **(params or {})}
        url = f"{self.base_url}{path}"

        try:
            response = await self._get_client().request(method, url, params=query, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Worker request {method} {path} failed: {e}")
            raise NetworkError(
                f"Could not reach worker: {e}", details={"path": path}
            ) from e

        if not response.is_success:
            message = f"Worker returned error: {response.status_code}"
            if include_body and response.text:
                message = f"{message} - {response.text}"
            raise WorkerError(
                message, details={"path": path, "status_code": response.status_code}
            )

        return response

    @staticmethod
    def _decode(response: httpx.Response, adapter: Any, path: str) -> Any:
        try:
            return adapter.validate_python(response.json())
        except (json.JSONDecodeError, PydanticValidationError) as e:
            raise WorkerError(
                f"Worker returned malformed data for {path}: {e}",
                details={"path": path},
            ) from e

    ## Tracking dashboard

    @async_log_call
    async def fetch_logs(self) -> List[LogEntry]:
        """All open-tracking hits recorded by the worker."""
        response = await self._request("GET", "/api/logs")
        return self._decode(response, _LOG_LIST, "/api/logs")

    @async_log_call
    async def fetch_filters(self) -> FilterOptions:
        """Distinct recipient tokens and countries for the dashboard filters."""
        response = await self._request("GET", "/api/filters")
        return self._decode(response, TypeAdapter(FilterOptions), "/api/filters")

    @async_log_call
    async def delete_recipient_logs(self, tracking_id: str) -> None:
        """Forget every hit recorded for one tracking token."""
        await self._request("DELETE", "/api/logs", params={"tracking_id": tracking_id})
        log_event("logs_deleted", "Deleted tracking logs for one recipient")

    ## Scheduling

    @async_log_call
    async def schedule_email(
        self,
        compiled: CompiledDocument,
        subject: str,
        recipient: str,
        scheduled_at: datetime,
        smtp_username: str,
        smtp_password: str,
        sender_name: str,
    ) -> None:
        """Hand a compiled message to the worker for delivery at ``scheduled_at``.

        The body is always multipart; files that cannot be read are skipped.
        """
        fields = {
            "recipient": recipient,
            "subject": subject,
            "html_body": compiled.html_body,
            "plain_body": compiled.plain_body,
            "scheduled_at": _utc_rfc3339(scheduled_at),
            "smtp_username": smtp_username,
            "smtp_password": smtp_password,
            "sender_name": sender_name,
        }
        # Filename-less parts keep the body multipart even without files
        parts: List[FilePart] = [(name, (None, value)) for name, value in fields.items()]
        parts.extend(await asyncio.to_thread(self._file_parts, compiled))

        await self._request("POST", "/api/schedule", include_body=True, files=parts)
        log_event("email_scheduled", f"Scheduled message for {fields['scheduled_at']}")

    @staticmethod
    def _file_parts(compiled: CompiledDocument) -> List[FilePart]:
        parts: List[FilePart] = []

        for path in compiled.attachments:
            content = load_optional(path, "attachment")
            if content is not None:
                filename = part_filename(path, MimeDefaults.ATTACHMENT_FILENAME)
                parts.append(("attachments", (filename, content, _content_type(path))))

        # Content ids carry no extension, so the type comes from the source file
        for image in compiled.inline_images:
            content = load_optional(image.source_path, "inline image")
            if content is not None:
                parts.append(
                    (
                        "inline_images",
                        (image.content_id, content, _content_type(image.source_path)),
                    )
                )

        return parts

    @async_log_call
    async def fetch_scheduled_jobs(self) -> List[ScheduledJob]:
        """Every job the worker knows about, whatever its status."""
        response = await self._request("GET", "/api/scheduled")
        return self._decode(response, _JOB_LIST, "/api/scheduled")

    @async_log_call
    async def cancel_scheduled_job(self, job_id: str) -> None:
        """Remove a job from the worker's queue."""
        await self._request("DELETE", "/api/scheduled", params={"id": job_id})
        log_event("job_cancelled", f"Cancelled scheduled job {job_id}")
