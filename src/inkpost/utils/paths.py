"""Centralized path definitions for the inkpost application.

This module provides a single source of truth for all application paths.
Set ``INKPOST_HOME`` to relocate everything (used by the test suite).
"""

import os
from pathlib import Path

# Base application directory
INKPOST_DIR = Path(os.environ.get("INKPOST_HOME") or Path.home() / ".inkpost")

# Subdirectories
DATA_DIR = INKPOST_DIR / "data"
LOGS_DIR = INKPOST_DIR / "logs"
EXPORTS_DIR = INKPOST_DIR / "exports"

# Specific files
CONFIG_PATH = INKPOST_DIR / "config.json"
DRAFT_PATH = DATA_DIR / "draft.json"
