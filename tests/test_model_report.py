"""Tests for the ModelReport logic."""

import json
from pathlib import Path

from tests.builders import make_context
from topicsdk.api_ref_model import ApiRefModel
from topicsdk.docset import DocSet, DocSetType, Platform
from topicsdk.model_report import ModelReport, config_fingerprint
from topicsdk.module_groups import ApiRecord, UmbrellaLib
from topicsdk.win32_model import Win32Model


def test_config_fingerprint_stability() -> None:
    """Verify that the fingerprint is stable regardless of key order."""
    config1 = {"b": 2, "a": 1, "nested": {"y": 2, "x": 1}}
    config2 = {"a": 1, "b": 2, "nested": {"x": 1, "y": 2}}
    assert config_fingerprint(config1) == config_fingerprint(config2)
    assert config_fingerprint(config1) != config_fingerprint({"a": 1})


def test_model_report_generation(tmp_path: Path) -> None:
    """Verify that the report records docsets, ambiguities and module stats."""
    context = make_context(tmp_path)
    docset = DocSet(
        context,
        DocSetType.REFERENCE_ONLY,
        Platform.UWP_WINDOWS_10,
        "UWP reference",
        [context.enlistment / "w_foo"],
    )
    model = ApiRefModel()
    namespace = model.ensure_namespace("w_foo")
    namespace.name = "Windows.Foo"
    namespace.ensure_class("X1", "")
    namespace.ensure_class("", "Bar")
    namespace.ensure_class("X1", "Bar")

    win32 = Win32Model()
    win32.ensure_function("dev_kernel", "dev_kernel.c", "CreateFoo", None)
    win32.ensure_function("dev_kernel", "dev_kernel.o", "OpenFoo", None)
    win32.ensure_function("dev_user", "dev_user.m", "MessageBox", None)
    umbrella = UmbrellaLib("onecore")
    umbrella.add_api(ApiRecord("CreateFoo", "api-ms-win-foo.dll", ("api-ms-win-foo",)), "10", "id")

    report = ModelReport("hash123")
    report.add_docset(docset, model)
    report.add_win32(win32)
    report.add_modules(umbrella)
    path = tmp_path / "report.json"
    report.generate_report(path)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["meta"]["config_hash"] == "hash123"
    entry = data["docsets"][0]
    assert entry["platform"] == "uwp"
    assert entry["content"] == "reference"
    assert entry["projects"] == ["w_foo"]
    assert entry["namespaces"][0]["classes"] == 2  # noqa: PLR2004
    assert entry["ambiguous_merges"] == [
        {
            "project": "w_foo",
            "id": "X1",
            "name": "Bar",
            "matched_by_id": {"id": "X1", "name": "Bar"},
            "matched_by_name": {"id": "", "name": "Bar"},
        }
    ]
    assert data["win32"] == {
        "functions": 3,
        "projects": {"dev_kernel": 2, "dev_user": 1},
    }
    assert data["modules"]["api_sets"] == ["api-ms-win-foo.dll"]
