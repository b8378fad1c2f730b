"""Remote worker API: tracking logs, filters and scheduled jobs."""

from .client import WorkerClient

__all__ = ["WorkerClient"]
