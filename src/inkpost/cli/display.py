"""Rich tables for tracking summaries, scheduled jobs and settings"""

from typing import Any, Dict, List, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from inkpost.core.models.worker import JobStatus, ScheduledJob
from inkpost.core.tracking import RecipientSummary

STATUS_STYLES = {
    JobStatus.PENDING: "yellow",
    JobStatus.SENT: "green",
    JobStatus.FAILED: "red",
}


def _timestamp(summary: RecipientSummary) -> str:
    return summary.last_seen.strftime("%Y-%m-%d %H:%M:%S UTC")


def render_summaries(
    summaries: Sequence[RecipientSummary], console: Console, detail: bool = False
) -> None:
    """Print one row per tracked recipient, newest open first."""
    if not summaries:
        console.print("[yellow]No tracking data matches the filters[/]")
        return

    table = Table(title="Opens by recipient", show_lines=detail)
    table.add_column("Recipient", style="magenta", min_width=20)
    table.add_column("Opens", justify="right", style="cyan")
    table.add_column("Country", style="green")
    table.add_column("Last seen", justify="right", style="yellow")
    table.add_column("Tracking ID", style="dim", overflow="fold")

    for summary in summaries:
        table.add_row(
            escape(summary.email),
            str(summary.open_count),
            escape(summary.country),
            _timestamp(summary),
            escape(summary.tracking_id),
        )

        if detail:
            for entry in summary.logs:
                table.add_row(
                    "",
                    "",
                    escape(f"{entry.city}, {entry.country}"),
                    escape(entry.timestamp),
                    escape(f"{entry.ip} {entry.user_agent}"),
                )

    console.print(table)


def render_jobs(jobs: Sequence[ScheduledJob], console: Console) -> None:
    """Print scheduled jobs with a coloured status column."""
    if not jobs:
        console.print("[yellow]No scheduled jobs match the filters[/]")
        return

    table = Table(title="Scheduled jobs")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Recipient", style="magenta", min_width=20)
    table.add_column("Subject", style="green", min_width=20)
    table.add_column("Scheduled at", justify="right", style="yellow")
    table.add_column("Timezone")
    table.add_column("Status", justify="center")
    table.add_column("", justify="center", width=3)

    for job in jobs:
        style = STATUS_STYLES.get(job.status, "white")
        table.add_row(
            escape(job.id),
            escape(job.recipient),
            escape(job.subject or "(no subject)"),
            escape(job.scheduled_at),
            escape(job.recipient_timezone),
            f"[{style}]{job.status.value}[/]",
            "📎" if job.attachments else "",
        )

    console.print(table)


def render_settings(settings: Dict[str, Any], console: Console) -> None:
    """Print flattened settings, masking secrets."""
    table = Table(title="Settings")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green", overflow="fold")

    for key, value in flatten(settings):
        if key.rsplit(".", 1)[-1] in ("smtp_app_password", "api_secret") and value:
            value = "********"
        table.add_row(escape(key), escape(str(value)))

    console.print(table)


def flatten(data: Dict[str, Any], prefix: str = "") -> List[tuple]:
    """``{"a": {"b": 1}}`` -> ``[("a.b", 1)]``"""
    items: List[tuple] = []
    for key, value in data.items():
        path = f"{prefix}{key}"
        if isinstance(value, dict):
            items.extend(flatten(value, f"{path}."))
        elif isinstance(value, list):
            items.append((path, ", ".join(str(v) for v in value)))
        else:
            items.append((path, value))
    return items
