"""Draft persistence between sessions"""

import json
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from inkpost.core.models.draft import Draft
from inkpost.utils.errors import FileSystemError
from inkpost.utils.logging import get_logger
from inkpost.utils.paths import DRAFT_PATH

logger = get_logger(__name__)


class DraftStore:
    """Load and save the single working draft as JSON."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else DRAFT_PATH

    def load(self) -> Draft:
        """Return the saved draft.

        A missing file gives an empty draft, and so does a corrupt one after
        a warning; the next save overwrites it.
        """
        if not self.path.exists():
            return Draft()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return Draft.model_validate(json.load(f))
        except (json.JSONDecodeError, PydanticValidationError, UnicodeDecodeError) as e:
            logger.warning(f"Ignoring unreadable draft at {self.path}: {e}")
            return Draft()
        except OSError as e:
            raise FileSystemError(f"Failed to read draft: {e}") from e

    def save(self, draft: Draft) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(draft.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise FileSystemError(f"Failed to write draft: {e}") from e

        logger.debug(f"Draft saved to {self.path}")

    def clear(self) -> None:
        """Replace the saved draft with an empty one."""
        self.save(Draft())
