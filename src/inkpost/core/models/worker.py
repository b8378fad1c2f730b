"""Models for payloads returned by the remote tracking/scheduling worker"""

import base64
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator


class JobStatus(str, Enum):
    """Delivery state of a scheduled job."""

    PENDING = "Pending"
    SENT = "Sent"
    FAILED = "Failed"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None

    def next_filter(self) -> Optional["JobStatus"]:
        """Next status in the Pending -> Sent -> Failed -> (none) filter cycle."""
        order = list(JobStatus)
        index = order.index(self)
        return order[index + 1] if index + 1 < len(order) else None


class LogEntry(BaseModel):
    """One open-tracking hit recorded by the worker."""

    id: Union[int, str] = 0
    tracking_id: str
    timestamp: str
    ip: str = "unknown"
    country: str = "unknown"
    city: str = "unknown"
    user_agent: str = "unknown"
    timezone: str = "UTC"

    @property
    def opened_at(self) -> datetime:
        """Parsed timestamp; unparseable values sort as the epoch."""
        try:
            parsed = datetime.fromisoformat(self.timestamp.replace("Z", "+00:00"))
        except ValueError:
            return datetime.fromtimestamp(0, tz=timezone.utc)

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)


class FilterOptions(BaseModel):
    """Distinct tracking tokens and countries seen by the worker."""

    recipients: List[str] = Field(default_factory=list)
    countries: List[str] = Field(default_factory=list)


class JobAttachment(BaseModel):
    """Attachment stored with a scheduled job."""

    filename: str
    content: bytes = b""

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value):
        # Worker payloads carry either a byte array or a base64 string
        if isinstance(value, list):
            return bytes(value)
        if isinstance(value, str):
            return base64.b64decode(value)
        return value


class ScheduledJob(BaseModel):
    """A message waiting on (or already processed by) the remote scheduler."""

    id: str
    recipient: str
    subject: str = ""
    body: str = ""
    scheduled_at: str = ""
    recipient_timezone: str = "UTC"
    status: JobStatus = JobStatus.PENDING
    attachments: List[JobAttachment] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return str(value)

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value):
        # The worker's casing is not guaranteed
        if isinstance(value, str):
            return JobStatus(value)
        return value
