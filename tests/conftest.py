"""
Shared test fixtures and configuration for pytest
"""
import os
import tempfile

# Keep config, drafts and logs out of the real home directory
os.environ.setdefault("INKPOST_HOME", tempfile.mkdtemp(prefix="inkpost-tests-"))

from pathlib import Path

import pytest

from inkpost.core.models.draft import Draft, Identity
from inkpost.utils.config import AppConfig

# 1x1 transparent PNG
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000100e221bc33000000"
    "0049454e44ae426082"
)


@pytest.fixture
def identity():
    """Sample sender identity"""
    return Identity(
        name="Ada Lovelace",
        role="Research Engineer",
        department="Analytical Engines",
        institution="Babbage & Co",
        phone="+44 20 7946 0000",
        emails=["ada@example.com", "ada.lovelace@example.org"],
    )


@pytest.fixture
def image_file(tmp_path) -> Path:
    """A small PNG on disk"""
    path = tmp_path / "pixel.png"
    path.write_bytes(PNG_BYTES)
    return path


@pytest.fixture
def attachment_file(tmp_path) -> Path:
    """A plain text attachment on disk"""
    path = tmp_path / "notes.txt"
    path.write_text("meeting notes\n", encoding="utf-8")
    return path


@pytest.fixture
def draft():
    """Sample draft with a markdown body and no files"""
    return Draft(
        recipient="grace@example.com",
        subject="Quarterly report",
        body="# Hello\n\nThe numbers are **up**.",
    )


@pytest.fixture
def app_config(identity):
    """Configuration with SMTP credentials and a worker"""
    return AppConfig(
        identity=identity,
        smtp_username="ada@example.com",
        smtp_app_password="app-password",
        worker_url="https://worker.example.com",
        api_secret="s3cret",
    )
