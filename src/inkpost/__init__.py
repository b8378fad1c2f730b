"""inkpost - markdown drafts to tracked, schedulable email."""

__version__ = "0.1.0"
