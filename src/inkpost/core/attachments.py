"""File helpers for inline images and attachments."""

import mimetypes
from pathlib import Path
from typing import Optional, Tuple

from inkpost.utils.errors import AttachmentNotFoundError
from inkpost.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def guess_content_type(path: Path) -> Tuple[str, str]:
    """Infer ``(maintype, subtype)`` from the file extension."""
    content_type, encoding = mimetypes.guess_type(str(path))
    if content_type is None or encoding is not None:
        content_type = DEFAULT_CONTENT_TYPE

    maintype, _, subtype = content_type.partition("/")
    return maintype, subtype


def part_filename(path: Path, fallback: str) -> str:
    """Bare filename for a MIME or form part."""
    return Path(path).name or fallback


def read_file(path: Path) -> bytes:
    """Read a file for embedding.

    Raises:
        AttachmentNotFoundError: If the file is missing or unreadable
    """
    try:
        return Path(path).expanduser().read_bytes()
    except OSError as e:
        raise AttachmentNotFoundError(
            f"Cannot read {path}: {e.strerror or e}", details={"path": str(path)}
        ) from e


def load_optional(path: Path, kind: str) -> Optional[bytes]:
    """Read a file, logging and returning None when it cannot be read."""
    try:
        return read_file(path)
    except AttachmentNotFoundError as e:
        logger.warning(f"Skipping {kind}: {e.message}")
        return None
