"""Argument parser configuration for the inkpost CLI"""

import argparse

from inkpost import __version__


## Argument Adding Utilities


def add_draft_arguments(parser: argparse.ArgumentParser) -> None:
    """Add arguments that override fields of the saved draft."""

    draft_group = parser.add_argument_group("draft", "Override fields of the saved draft")

    draft_group.add_argument(
        "--to",
        dest="recipient",
        help="Recipient email address"
    )
    draft_group.add_argument(
        "--subject",
        help="Email subject"
    )
    body_group = draft_group.add_mutually_exclusive_group()
    body_group.add_argument(
        "--body",
        help="Markdown body content"
    )
    body_group.add_argument(
        "--body-file",
        help="Read the markdown body from a file"
    )
    draft_group.add_argument(
        "--attach",
        action="append",
        metavar="PATH",
        help="Add an attachment (repeatable)"
    )
    draft_group.add_argument(
        "--clear-attachments",
        action="store_true",
        help="Drop the attachments already on the draft"
    )


def add_schedule_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the free-form date, time and timezone fields."""

    when_group = parser.add_argument_group(
        "when", "Delivery time; omit the date to default to now + 30 minutes"
    )

    for name in ("day", "month", "year", "hour", "minute", "second"):
        when_group.add_argument(f"--{name}", default="", help=f"Delivery {name}")

    when_group.add_argument(
        "--timezone",
        "--tz",
        default="",
        help="IANA timezone of the recipient, e.g. Europe/London"
    )


## Command Setup Functions


def setup_compose_commands(subparsers) -> None:
    """Setup draft editing, preview, send and schedule commands."""

    edit_parser = subparsers.add_parser(
        "edit",
        help="Edit the saved draft",
        description="Update draft fields and open the body in an external editor"
    )
    add_draft_arguments(edit_parser)
    edit_parser.add_argument(
        "--no-editor",
        action="store_true",
        help="Only apply the field overrides, do not launch an editor"
    )
    edit_parser.add_argument(
        "--clear",
        action="store_true",
        help="Start from an empty draft"
    )

    preview_parser = subparsers.add_parser(
        "preview",
        help="Show the compiled draft",
        description="Compile the saved draft and print its plain or HTML body"
    )
    preview_parser.add_argument(
        "--html",
        action="store_true",
        help="Print the HTML body instead of the plain body"
    )

    send_parser = subparsers.add_parser(
        "send",
        help="Send the draft now",
        description="Compile the draft and deliver it through the SMTP relay"
    )
    add_draft_arguments(send_parser)

    schedule_parser = subparsers.add_parser(
        "schedule",
        help="Schedule the draft for later delivery",
        description="Compile the draft and hand it to the remote worker"
    )
    add_draft_arguments(schedule_parser)
    add_schedule_arguments(schedule_parser)

    timezones_parser = subparsers.add_parser(
        "timezones",
        help="List IANA timezones",
    )
    timezones_parser.add_argument(
        "query",
        nargs="?",
        default="",
        help="Case-insensitive substring to filter by"
    )


def setup_tracking_commands(subparsers) -> None:
    """Setup open-tracking dashboard commands."""

    logs_parser = subparsers.add_parser(
        "logs",
        help="Show open-tracking summaries",
        description="Fetch tracking hits from the worker and group them by recipient"
    )
    logs_parser.add_argument(
        "--recipient",
        default="",
        help="Filter by recipient address substring"
    )
    logs_parser.add_argument(
        "--country",
        default="",
        help="Filter by country substring"
    )
    logs_parser.add_argument(
        "--min-opens",
        default="",
        help="Only show recipients with at least this many opens"
    )
    logs_parser.add_argument(
        "--detail",
        action="store_true",
        help="List every open under each recipient"
    )

    forget_parser = subparsers.add_parser(
        "forget",
        help="Delete the tracking logs of one recipient",
    )
    forget_parser.add_argument(
        "recipient",
        help="Recipient address or tracking id"
    )


def setup_job_commands(subparsers) -> None:
    """Setup scheduled job commands."""

    jobs_parser = subparsers.add_parser(
        "jobs",
        help="List scheduled jobs",
    )
    jobs_parser.add_argument(
        "--recipient",
        default="",
        help="Filter by recipient substring"
    )
    jobs_parser.add_argument(
        "--status",
        choices=["pending", "sent", "failed"],
        help="Filter by job status"
    )

    cancel_parser = subparsers.add_parser(
        "cancel",
        help="Cancel a scheduled job",
    )
    cancel_parser.add_argument("job_id", help="Job ID")

    export_parser = subparsers.add_parser(
        "export-job",
        help="Save a scheduled job to disk",
        description="Write a job's metadata, body and attachments to a local directory"
    )
    export_parser.add_argument("job_id", help="Job ID")
    export_parser.add_argument(
        "--path",
        help="Export directory (default: ~/.inkpost/exports)"
    )


def setup_config_commands(subparsers) -> None:
    """Setup configuration management commands."""

    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Manage application configuration settings"
    )

    config_subparsers = config_parser.add_subparsers(
        dest="config_command",
        required=True,
        help="Configuration operation to perform"
    )

    config_subparsers.add_parser(
        "list",
        help="List current settings"
    )

    get_parser = config_subparsers.add_parser(
        "get",
        help="Get a setting value"
    )
    get_parser.add_argument("key", help="Config key to get, e.g. identity.name")

    set_parser = config_subparsers.add_parser(
        "set",
        help="Set a setting value"
    )
    set_parser.add_argument("key", help="Config key to set")
    set_parser.add_argument(
        "value",
        help="New value; identity.emails takes a comma separated list"
    )

    config_subparsers.add_parser(
        "reset",
        help="Reset settings to default"
    )


## Main Parser Setup


def setup_argument_parser() -> argparse.ArgumentParser:
    """Setup the main argument parser for the inkpost CLI."""

    parser = argparse.ArgumentParser(
        prog="inkpost",
        description="Markdown email composer - send, schedule and track emails",
        epilog="Use 'inkpost <command> --help' for command-specific help."
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"inkpost {__version__}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        help="Command to execute"
    )

    setup_compose_commands(subparsers)
    setup_tracking_commands(subparsers)
    setup_job_commands(subparsers)
    setup_config_commands(subparsers)

    return parser
