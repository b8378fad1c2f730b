"""
Tests for draft persistence
"""
from datetime import datetime, timezone
from pathlib import Path

from inkpost.core.models.draft import Draft
from inkpost.core.storage import DraftStore


class TestDraftStore:
    """Tests for DraftStore"""

    def test_missing_file_gives_empty_draft(self, tmp_path):
        """Test loading without a saved draft"""
        assert DraftStore(tmp_path / "draft.json").load() == Draft()

    def test_round_trip(self, tmp_path):
        """Test a saved draft loads back unchanged"""
        store = DraftStore(tmp_path / "nested" / "draft.json")
        draft = Draft(
            recipient="grace@example.com",
            subject="Hi",
            body="**bold**",
            attachments=[Path("/tmp/a.pdf")],
            scheduled_at=datetime(2024, 6, 15, 8, 30, tzinfo=timezone.utc),
        )

        store.save(draft)

        assert store.load() == draft

    def test_corrupt_file_gives_empty_draft(self, tmp_path):
        """Test an unreadable draft is replaced by an empty one"""
        path = tmp_path / "draft.json"
        path.write_text("{not json", encoding="utf-8")

        assert DraftStore(path).load() == Draft()

    def test_wrong_shape_gives_empty_draft(self, tmp_path):
        """Test a draft with invalid fields is ignored"""
        path = tmp_path / "draft.json"
        path.write_text('{"attachments": 5}', encoding="utf-8")

        assert DraftStore(path).load() == Draft()

    def test_clear(self, tmp_path):
        """Test clearing resets the saved draft"""
        store = DraftStore(tmp_path / "draft.json")
        store.save(Draft(recipient="grace@example.com"))

        store.clear()

        assert store.load() == Draft()
