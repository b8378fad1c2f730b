"""Domain models."""

from .document import CompiledDocument, InlineImage
from .draft import DEFAULT_FOOTER_COLOR, Draft, Identity
from .worker import FilterOptions, JobAttachment, JobStatus, LogEntry, ScheduledJob

__all__ = [
    "CompiledDocument",
    "DEFAULT_FOOTER_COLOR",
    "Draft",
    "FilterOptions",
    "Identity",
    "InlineImage",
    "JobAttachment",
    "JobStatus",
    "LogEntry",
    "ScheduledJob",
]
