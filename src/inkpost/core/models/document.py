"""Compiled document models"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple


@dataclass(frozen=True)
class InlineImage:
    """A local image embedded in the message and referenced by content id."""

    content_id: str
    source_path: Path

    @property
    def reference(self) -> str:
        """The ``cid:`` URL used in the HTML body."""
        return f"cid:{self.content_id}"


@dataclass(frozen=True)
class CompiledDocument:
    """Rendered HTML/plain bodies plus the resources they depend on."""

    html_body: str
    plain_body: str
    inline_images: Tuple[InlineImage, ...] = field(default_factory=tuple)
    attachments: Tuple[Path, ...] = field(default_factory=tuple)
