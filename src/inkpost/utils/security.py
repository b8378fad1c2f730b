"""Path and filename sanitising for files written from worker payloads"""

import re
from pathlib import Path


class PathSecurity:
    """Keep exported files inside their target directory."""

    UNSAFE_FILENAME_CHARS = re.compile(r"[^\w.\-]")

    WINDOWS_RESERVED = {
        "CON", "PRN", "AUX", "NUL",
        "COM1", "COM2", "COM3", "COM4", "COM5", "COM6", "COM7", "COM8", "COM9",
        "LPT1", "LPT2", "LPT3", "LPT4", "LPT5", "LPT6", "LPT7", "LPT8", "LPT9",
    }

    @staticmethod
    def directory_name(text: str, fallback: str = "unknown") -> str:
        """Replace every non-alphanumeric character with an underscore."""
        name = "".join(c if c.isalnum() else "_" for c in text)
        return name or fallback

    @classmethod
    def sanitize_filename(cls, filename: str, fallback: str, max_length: int = 255) -> str:
        """Reduce an untrusted filename to a safe basename.

        Path components are dropped and unsafe characters become underscores;
        the fallback is used when nothing usable remains.
        """
        # Both separator styles, whatever the host platform
        filename = filename.replace("\\", "/").rsplit("/", 1)[-1]

        sanitized = cls.UNSAFE_FILENAME_CHARS.sub("_", filename)
        sanitized = re.sub(r"_+", "_", sanitized).strip("_.")

        if len(sanitized) > max_length:
            suffix = Path(sanitized).suffix
            sanitized = Path(sanitized).stem[: max_length - len(suffix)] + suffix

        if not sanitized or sanitized.split(".")[0].upper() in cls.WINDOWS_RESERVED:
            return fallback
        return sanitized

    @staticmethod
    def is_within(base: Path, path: Path) -> bool:
        """Whether ``path`` resolves to a location inside ``base``."""
        try:
            path.resolve().relative_to(base.resolve())
        except ValueError:
            return False
        return True
