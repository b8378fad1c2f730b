"""Tracking dashboard aggregation and scheduled job housekeeping"""

import json
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from inkpost.core.compiler import decode_tracking_token
from inkpost.core.email.constants import MimeDefaults
from inkpost.core.models.worker import JobStatus, LogEntry, ScheduledJob
from inkpost.utils.errors import FileSystemError
from inkpost.utils.logging import get_logger, log_event
from inkpost.utils.paths import EXPORTS_DIR
from inkpost.utils.security import PathSecurity

logger = get_logger(__name__)


@dataclass
class RecipientSummary:
    """All opens recorded for one tracking token, newest first."""

    tracking_id: str
    email: str
    country: str
    logs: List[LogEntry] = field(default_factory=list)

    @property
    def open_count(self) -> int:
        return len(self.logs)

    @property
    def last_seen(self) -> datetime:
        return self.logs[0].opened_at


def _parse_min_opens(value: Optional[int | str]) -> int:
    if value is None or value == "":
        return 0
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


def aggregate_logs(
    logs: Iterable[LogEntry],
    recipient_filter: str = "",
    country_filter: str = "",
    min_opens: Optional[int | str] = None,
) -> List[RecipientSummary]:
    """Group open logs by recipient and apply the dashboard filters.

    Args:
        logs: Raw hits from the worker
        recipient_filter: Case-insensitive substring of the decoded address
        country_filter: Case-insensitive substring of the latest country
        min_opens: Minimum number of opens; unparseable values count as 0

    Returns:
        Summaries sorted by most recent open, newest first
    """
    groups: Dict[str, List[LogEntry]] = defaultdict(list)
    for entry in logs:
        groups[entry.tracking_id].append(entry)

    threshold = _parse_min_opens(min_opens)
    recipient_filter = recipient_filter.strip().lower()
    country_filter = country_filter.strip().lower()

    summaries: List[RecipientSummary] = []
    for tracking_id, entries in groups.items():
        entries.sort(key=lambda e: e.opened_at, reverse=True)

        if len(entries) < threshold:
            continue

        email = decode_tracking_token(tracking_id)
        if recipient_filter and recipient_filter not in email.lower():
            continue

        country = entries[0].country
        if country_filter and country_filter not in country.lower():
            continue

        summaries.append(
            RecipientSummary(tracking_id=tracking_id, email=email, country=country, logs=entries)
        )

    summaries.sort(key=lambda s: s.last_seen, reverse=True)
    return summaries


def filter_jobs(
    jobs: Iterable[ScheduledJob],
    recipient: str = "",
    status: Optional[JobStatus] = None,
) -> List[ScheduledJob]:
    """Jobs whose recipient contains ``recipient`` and whose status matches."""
    recipient = recipient.strip().lower()
    return [
        job
        for job in jobs
        if (not recipient or recipient in job.recipient.lower())
        and (status is None or job.status == status)
    ]


def export_job(job: ScheduledJob, target_root: Optional[Path] = None) -> Path:
    """Write a job's metadata, body and attachments to a local directory.

    The directory is named after the recipient with every non-alphanumeric
    character replaced by an underscore.

    Returns:
        The directory the job was written to

    Raises:
        FileSystemError: If the directory or its files cannot be written
    """
    root = Path(target_root) if target_root else EXPORTS_DIR
    target = root / PathSecurity.directory_name(job.recipient)

    metadata = job.model_dump(mode="json", exclude={"attachments"})
    metadata["attachments"] = [a.filename for a in job.attachments]

    try:
        target.mkdir(parents=True, exist_ok=True)
        (target / "metadata.json").write_text(
            json.dumps(metadata, indent=2, ensure_ascii=False), encoding="utf-8"
        )
        (target / "body.txt").write_text(job.body, encoding="utf-8")

        for attachment in job.attachments:
            filename = PathSecurity.sanitize_filename(
                attachment.filename, MimeDefaults.ATTACHMENT_FILENAME
            )
            path = target / filename
            if not PathSecurity.is_within(target, path):
                logger.warning(f"Skipping attachment with unsafe name: {attachment.filename!r}")
                continue
            path.write_bytes(attachment.content)

    except OSError as e:
        raise FileSystemError(
            f"Failed to export job {job.id}: {e}", details={"path": str(target)}
        ) from e

    log_event("job_exported", f"Exported job {job.id}", path=str(target))
    return target
