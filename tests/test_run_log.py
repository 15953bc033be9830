"""Tests for the diagnostic run logs."""

from pathlib import Path

import pytest

from topicsdk.errors import TopicSdkError
from topicsdk.run_log import LogRegistry, RunLog


def test_log_without_headers(tmp_path: Path) -> None:
    """Verify a headerless log starts with its label as a comment."""
    log = RunLog("Things.", "Things_Log.txt")
    log.add_entry("one")
    log.add("two")
    path = log.write(tmp_path)
    assert path == tmp_path / "Things_Log.txt"
    assert path.read_text(encoding="utf-8") == "// Things.\none\ntwo\n"


def test_log_with_headers(tmp_path: Path) -> None:
    """Verify header logs format entries with the delimiter."""
    log = RunLog("Pairs.", "Pairs_Log.txt", headers=["Name", "Count"])
    assert log.format_string == "{0}|{1}"
    log.add_entry("a", 1)
    path = log.write(tmp_path)
    assert path is not None
    assert path.read_text(encoding="utf-8") == "Name|Count\na|1\n"


def test_add_entry_arity_is_checked() -> None:
    """Verify a wrong number of values is rejected."""
    with pytest.raises(TopicSdkError):
        RunLog("Pairs.", "p.txt", headers=["A", "B"]).add_entry("only one")
    with pytest.raises(TopicSdkError):
        RunLog("Plain.", "q.txt").add_entry("a", "b")
    with pytest.raises(TopicSdkError):
        RunLog("Plain.", "q.txt").add_entry()


def test_empty_log_removes_stale_file(tmp_path: Path) -> None:
    """Verify an empty log deletes the previous run's file and writes nothing."""
    stale = tmp_path / "Things_Log.txt"
    stale.write_text("old", encoding="utf-8")
    assert RunLog("Things.", "Things_Log.txt").write(tmp_path) is None
    assert not stale.exists()


def test_registry_outputs(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Verify the saved-files summary and that only non-empty logs are written."""
    registry = LogRegistry(tmp_path)
    registry.files_saved.add("first.xml")
    registry.files_saved.add("second.xml")
    registry.duplicated_mappings.add("map.txt has duplicate key: a,1")
    extra = RunLog("Extra.", "Extra_Log.txt")
    registry.register(extra)

    registry.output_files_saved_log(dry_run=False)
    assert registry.output_other_logs()

    out = capsys.readouterr().out
    assert "first.xml" in out
    assert (tmp_path / "FilesSaved_Log.txt").exists()
    assert (tmp_path / "DuplicatedMappings_Log.txt").exists()
    assert not (tmp_path / "MalformedMappings_Log.txt").exists()
    assert not (tmp_path / "Extra_Log.txt").exists()


def test_registry_with_nothing_to_report(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Verify a quiet dry run says so."""
    registry = LogRegistry(tmp_path)
    registry.output_files_saved_log(dry_run=True)
    assert not registry.output_other_logs()
    out = capsys.readouterr().out
    assert "***None***" in out
    assert "***No logs***" in out
