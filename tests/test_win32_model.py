"""Tests for the Win32 function model."""

from pathlib import Path

from tests.builders import topic_xml, write_project
from topicsdk.run_log import RunLog
from topicsdk.toc_loader import editors_for_project
from topicsdk.win32_model import Win32Model


def test_case_insensitive_duplicate_keeps_first(tmp_path: Path) -> None:
    """Verify a name differing only in case is logged once and not registered."""
    project_dir = write_project(
        tmp_path,
        "dev_kernel",
        {
            "create.xml": topic_xml("function", "dev_kernel.create", title="CreateFoo"),
            "create2.xml": topic_xml("function", "dev_kernel.create2", title="createfoo"),
            "struct.xml": topic_xml("struct", "dev_kernel.s", title="FOO_INFO"),
        },
    )
    log = RunLog("Duped Win32 API names.", "DupedWin32ApiNames_Log.txt")
    model = Win32Model(log)
    model.process_project(project_dir.name, editors_for_project(project_dir))

    assert list(model.functions) == ["createfoo"]
    function = model.get_function_by_name("CREATEFOO")
    assert function is not None
    assert function.name == "CreateFoo"
    assert function.id == "dev_kernel.create"
    assert len(log) == 1
    assert "create2.xml and " in log[0]
    assert log[0].endswith("create.xml")


def test_ensure_function_reports_existing() -> None:
    """Verify ensure_function returns the registered record on a second call."""
    model = Win32Model()
    first, existed = model.ensure_function("p", "p.a", "Alpha", None)
    assert not existed
    again, existed = model.ensure_function("q", "q.a", "ALPHA", None)
    assert existed
    assert again is first
    assert model.has_functions


def test_sorted_functions() -> None:
    """Verify functions sort case-insensitively, punctuation then digits then letters."""
    model = Win32Model()
    for name in ["beta", "3d", "Alpha", "_gamma"]:
        model.ensure_function("p", f"p.{name}", name, None)
    assert [f.name for f in model.sorted_functions()] == [
        "_gamma",
        "3d",
        "Alpha",
        "beta",
    ]
