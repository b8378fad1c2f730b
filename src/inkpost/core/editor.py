"""Edit a draft body in the user's external editor"""

import os
import platform
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import List

from inkpost.utils.errors import EditorError
from inkpost.utils.logging import get_logger

logger = get_logger(__name__)

POSIX_EDITORS = ["nano", "vim", "vi", "editor", "xdg-open"]
WINDOWS_EDITORS = ["notepad.exe", "code.cmd"]


def editor_candidates() -> List[List[str]]:
    """Editor commands to try, in order: $VISUAL, $EDITOR, platform fallbacks."""
    candidates: List[List[str]] = []

    for variable in ("VISUAL", "EDITOR"):
        value = os.environ.get(variable, "").strip()
        if value:
            candidates.append(shlex.split(value))

    fallbacks = WINDOWS_EDITORS if platform.system() == "Windows" else POSIX_EDITORS
    candidates.extend([name] for name in fallbacks)
    return candidates


def open_external_editor(initial_text: str) -> str:
    """Open ``initial_text`` in an editor and return what was saved.

    The first candidate that exits with status 0 wins. Missing executables
    and failed runs fall through to the next one.

    Raises:
        EditorError: If no candidate editor succeeds
    """
    fd, name = tempfile.mkstemp(suffix=".md", prefix="inkpost-")
    path = Path(name)

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(initial_text)

        for command in editor_candidates():
            try:
                result = subprocess.run([*command, str(path)], check=False)
            except OSError as e:
                logger.debug(f"Editor {command[0]} unavailable: {e}")
                continue

            if result.returncode == 0:
                logger.info(f"Edited draft body with {command[0]}")
                return path.read_text(encoding="utf-8")

            logger.debug(f"Editor {command[0]} exited with {result.returncode}")

        raise EditorError("No suitable editor found; set $VISUAL or $EDITOR")

    except OSError as e:
        raise EditorError(f"Could not prepare the editor file: {e}") from e

    finally:
        path.unlink(missing_ok=True)
