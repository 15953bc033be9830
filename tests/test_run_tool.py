"""End-to-end tests for the command-line run."""

import json
from pathlib import Path

import pytest
import yaml

from tests.builders import topic_xml, write_master_list, write_project
from topicsdk.run_tool import build_parser, main


def _enlistment(tmp_path: Path) -> Path:
    enlistment = tmp_path / "enlistment"
    write_master_list(enlistment, "metro.txt", ["w_foo"])
    write_master_list(enlistment, "windev.txt", [])
    write_master_list(enlistment, "desktop.txt", ["dev_kernel"])
    write_project(
        enlistment,
        "w_foo",
        {
            "ns.xml": topic_xml("namespace", "w_foo.ns", title="Windows.Foo"),
            "x1.xml": topic_xml("class_winrt", "X1", intellisense_id="T:Windows.Foo.Bar"),
            "go.xml": topic_xml(
                "method_winrt", "w_foo.go", title="Go", owner_rid="X1", params=[]
            ),
        },
    )
    write_project(
        enlistment,
        "dev_kernel",
        {
            "c.xml": topic_xml("function", "dev_kernel.c", title="CreateFoo"),
            "d.xml": topic_xml("function", "dev_kernel.d", title="createfoo"),
        },
    )
    return enlistment


def _config(tmp_path: Path, enlistment: Path) -> Path:
    (tmp_path / "stubs").mkdir(exist_ok=True)
    config_file = tmp_path / "config.yml"
    config_file.write_text(
        yaml.safe_dump(
            {
                "enlistment_folder": str(enlistment),
                "api_ref_stub_folder": str(tmp_path / "stubs"),
                "uwp_projects": ["w_*"],
                "ref_proj_prefixes": ["w_"],
                "log_dir": str(tmp_path / "logs"),
            }
        ),
        encoding="utf-8",
    )
    return config_file


def test_full_run_writes_report_and_logs(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Verify a run builds both models, writes the report and the duplicate log."""
    config_file = _config(tmp_path, _enlistment(tmp_path))
    db = tmp_path / "onecore.yml"
    db.write_text(
        "sdk_version: '10'\napis:\n  - {name: CreateFoo, binary: kernel32.dll}\n",
        encoding="utf-8",
    )
    report_path = tmp_path / "report.json"

    code = main(
        [
            "--config",
            str(config_file),
            "--win32",
            "--module-db",
            str(db),
            "--report",
            str(report_path),
            "--dry-run",
        ]
    )

    assert code == 0
    out = capsys.readouterr().out
    assert "Windows.Foo (w_foo): 1 classes, 1 members" in out

    report = json.loads(report_path.read_text(encoding="utf-8"))
    namespaces = report["docsets"][0]["namespaces"]
    assert namespaces == [
        {"name": "Windows.Foo", "project": "w_foo", "classes": 1, "members": 1}
    ]
    assert report["win32"] == {"functions": 1, "projects": {"dev_kernel": 1}}
    assert report["modules"]["modules"] == {"kernel32.dll": 1}
    assert report["modules"]["initial_chars"] == {"C": 1}
    assert (tmp_path / "logs" / "DupedWin32ApiNames_Log.txt").exists()


def test_conceptual_run_skips_model(tmp_path: Path) -> None:
    """Verify a conceptual-only docset reports no namespaces."""
    config_file = _config(tmp_path, _enlistment(tmp_path))
    report_path = tmp_path / "report.json"
    code = main(
        ["--config", str(config_file), "--content", "conceptual", "--report", str(report_path)]
    )
    assert code == 0
    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert report["docsets"][0]["projects"] == []
    assert "namespaces" not in report["docsets"][0]


def test_fatal_error_exits_1(tmp_path: Path) -> None:
    """Verify a missing configuration folder ends the run with exit code 1."""
    config_file = tmp_path / "config.yml"
    config_file.write_text(yaml.safe_dump({"dry_run": True}), encoding="utf-8")
    assert main(["--config", str(config_file)]) == 1


def test_parser_defaults() -> None:
    """Verify the default docset and content options."""
    args = build_parser().parse_args([])
    assert args.docset == "uwp"
    assert args.content == "reference"
    assert not args.win32
    assert args.report is None
