"""Tests for the document layer and file storage."""

from datetime import date
from unittest.mock import patch

import pytest

from dayplan.adapters.file_document import FileDocumentStore
from dayplan.core.analyzer import AnalyzeOptions
from dayplan.document import shift_document, shift_many, shift_stored, split_keep_newlines


@pytest.fixture
def options():
    return AnalyzeOptions(day=date(2025, 1, 15), timezone="UTC")


class TestShiftDocument:
    def test_shifts_one_line(self, options):
        result = shift_document("- 9am, A, 30m\n- B\n- 10am C", 1, "+15m", options)
        assert result.success
        assert result.new_source == "- 9:15am, A, 30m\n- B\n- 10am C"
        assert result.affected_line_numbers == [2]

    def test_failure_leaves_no_document(self, options):
        result = shift_document("- !day 2025-01-15", 1, "+15m", options)
        assert not result.success
        assert result.new_source is None
        assert result.error == "Time shift can only be applied to task lines"

    def test_missing_line(self, options):
        result = shift_document("- 9am A", 5, "+15m", options)
        assert result.error == "Line 5 not found"

    def test_preserves_crlf(self, options):
        result = shift_document("- 9am A\r\n- B\r\n", 1, "+15m", options)
        assert result.new_source == "- 9:15am A\r\n- B\r\n"

    def test_preserves_trailing_newline(self, options):
        result = shift_document("- 9am A\n", 1, "-1h", options)
        assert result.new_source == "- 8am A\n"


class TestShiftMany:
    def test_lines_shift_independently(self, options):
        batch = shift_many("- 9am, A, 30m\n- B\n- 11am C", [1, 2, 99], "+10m", options)
        assert not batch.success
        assert batch.failures == {99: "Line 99 not found"}
        assert batch.new_source == "- 9:10am, A, 30m\n- 9:40am, B\n- 11am C"

    def test_affected_lines_per_shift(self, options):
        batch = shift_many("- 9am A\n- B\n- C", [1], "+5m", options)
        assert batch.success
        assert batch.affected == {1: [2, 3]}

    def test_all_failed_returns_source_unchanged(self, options):
        source = "# just a comment\n"
        batch = shift_many(source, [1], "+5m", options)
        assert batch.new_source == source
        assert 1 in batch.failures


class TestLineEndings:
    def test_mixed_endings_are_kept_per_line(self, options):
        batch = shift_many("- 9am A\r\n- 10am B\n- C", [1], "+15m", options)
        assert batch.new_source == "- 9:15am A\r\n- 10am B\n- C"

    def test_shifted_line_keeps_its_own_ending(self, options):
        batch = shift_many("- 9am A\n- 10am B\r\n- C\n", [2], "-15m", options)
        assert batch.new_source == "- 9am A\n- 9:45am B\r\n- C\n"

    @pytest.mark.parametrize("text", ["a\nb", "a\r\nb\n", "a", ""])
    def test_split_keeps_endings(self, text):
        assert "".join(split_keep_newlines(text)) == text


class TestFileDocumentStore:
    def test_round_trip_keeps_crlf(self, tmp_path):
        store = FileDocumentStore(tmp_path)
        store.write("plans/today.plan", "- 9am A\r\n- B\r\n")
        assert (tmp_path / "plans" / "today.plan").read_bytes() == b"- 9am A\r\n- B\r\n"
        assert store.read("plans/today.plan") == "- 9am A\r\n- B\r\n"

    def test_exists(self, tmp_path):
        store = FileDocumentStore(tmp_path)
        assert not store.exists("today.plan")
        store.write("today.plan", "- 9am A")
        assert store.exists("today.plan")

    def test_absolute_paths_ignore_base_dir(self, tmp_path):
        target = tmp_path / "abs.plan"
        FileDocumentStore("/nonexistent").write(target, "- noon Lunch")
        assert target.read_text() == "- noon Lunch"

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(OSError):
            FileDocumentStore(tmp_path).read("missing.plan")


class TestShiftStored:
    def test_writes_back(self, tmp_path, options):
        store = FileDocumentStore(tmp_path)
        store.write("today.plan", "- 9am A\n- B\n")
        batch = shift_stored(store, "today.plan", [2], "+15m", options, write=True)
        assert batch.success
        assert store.read("today.plan") == "- 9am A\n- 9:45am, B\n"

    def test_dry_run_leaves_file_alone(self, tmp_path, options):
        store = FileDocumentStore(tmp_path)
        store.write("today.plan", "- 9am A\n")
        batch = shift_stored(store, "today.plan", [1], "+15m", options)
        assert batch.new_source == "- 9:15am A\n"
        assert store.read("today.plan") == "- 9am A\n"

    def test_nothing_written_when_every_line_fails(self, tmp_path, options):
        store = FileDocumentStore(tmp_path)
        store.write("today.plan", "# notes\n")
        with patch.object(store, "write") as mock_write:
            shift_stored(store, "today.plan", [1], "+15m", options, write=True)
        mock_write.assert_not_called()
