"""Tests for the directory scanner."""
import os

import pytest

from brain_mcp.scanner import ScanEntry, is_hidden, scan_directory
from brain_mcp.utils import is_note_name, note_filename, sanitize_note_filename


def _touch(path, content=""):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class TestScanDirectory:
    """Tests for scan_directory."""

    def test_lists_files_and_directories(self, scan_root):
        _touch(scan_root / "a.md", "x")
        _touch(scan_root / "sub" / "c.txt")
        entries = scan_directory(scan_root)

        by_name = {e.name: e for e in entries}
        assert set(by_name) == {"a.md", "sub", "c.txt"}
        assert by_name["sub"].is_dir is True
        assert by_name["a.md"].is_dir is False
        assert by_name["c.txt"].path == str(scan_root / "sub" / "c.txt")

    def test_root_not_reported(self, scan_root):
        _touch(scan_root / "a.md")
        entries = scan_directory(scan_root)
        assert all(e.path != str(scan_root) for e in entries)

    def test_parents_before_children_sorted(self, scan_root):
        _touch(scan_root / "b.txt")
        _touch(scan_root / "a" / "z.md")
        names = [e.name for e in scan_directory(scan_root)]
        assert names == ["a", "z.md", "b.txt"]

    def test_hidden_entries_skipped(self, scan_root):
        _touch(scan_root / ".secret.md")
        _touch(scan_root / ".git" / "config")
        _touch(scan_root / "notes" / ".draft.md")
        _touch(scan_root / "notes" / "kept.md")
        names = {e.name for e in scan_directory(scan_root)}
        assert names == {"notes", "kept.md"}

    def test_relative_root_reports_absolute_paths(self, scan_root, monkeypatch):
        _touch(scan_root / "sub" / "a.md")
        monkeypatch.chdir(scan_root)
        (entry,) = scan_directory("sub/../sub")
        assert entry.path == str(scan_root / "sub" / "a.md")

    def test_empty_directory(self, scan_root):
        assert scan_directory(scan_root) == []

    def test_missing_root_returns_empty(self, scan_root):
        assert scan_directory(scan_root / "nope") == []

    def test_file_root_returns_empty(self, scan_root):
        _touch(scan_root / "f.txt")
        assert scan_directory(scan_root / "f.txt") == []

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_directory_not_followed(self, scan_root, tmp_path):
        target = tmp_path / "elsewhere"
        _touch(target / "inner.md")
        try:
            os.symlink(target, scan_root / "link", target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlinks here")
        entries = scan_directory(scan_root)
        assert [e.name for e in entries] == ["link"]
        assert entries[0].is_dir is False

    def test_entries_are_frozen(self):
        entry = ScanEntry(path="/x", name="x", is_dir=False)
        with pytest.raises(AttributeError):
            entry.name = "y"


class TestNameHelpers:
    def test_is_hidden(self):
        assert is_hidden(".git")
        assert not is_hidden("notes")

    def test_is_note_name_case_sensitive(self):
        assert is_note_name("a.md")
        assert not is_note_name("a.MD")
        assert not is_note_name("a.txt")

    def test_sanitize(self):
        assert sanitize_note_filename("Hello World") == "Hello World"
        assert sanitize_note_filename("  Plan: v2/final?  ") == "Plan v2final"
        assert sanitize_note_filename("../../etc/passwd") == "etcpasswd"
        assert sanitize_note_filename("") == ""

    def test_note_filename(self):
        assert note_filename("Hello World") == "Hello World.md"
        assert note_filename("?!/") == ""
