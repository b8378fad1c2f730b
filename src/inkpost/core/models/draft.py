"""Draft and sender identity models"""

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

DEFAULT_FOOTER_COLOR = "#179299"


class Identity(BaseModel):
    """Sender identity rendered into the footer."""

    name: str = ""
    role: str = ""
    department: str = ""
    institution: str = ""
    phone: str = ""
    emails: List[str] = Field(default_factory=list)
    footer_color: str = DEFAULT_FOOTER_COLOR


class Draft(BaseModel):
    """User-authored email that has not been sent yet."""

    recipient: str = ""
    subject: str = ""
    body: str = ""
    attachments: List[Path] = Field(default_factory=list)
    scheduled_at: Optional[datetime] = None
