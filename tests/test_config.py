"""Tests for configuration loading, merging and validation."""

from pathlib import Path

import pytest
import yaml

from topicsdk.deep_merge import deep_merge
from topicsdk.errors import TopicSdkError
from topicsdk.load_config import DEFAULT_CONFIG, load_config, parse_line_config
from topicsdk.run_context import build_context, expand_path


def test_deep_merge_nested() -> None:
    """Verify recursive merging of dictionaries."""
    base = {"nested": {"x": 1, "y": 2}}
    update = {"nested": {"y": 3, "z": 4}}
    assert deep_merge(base, update) == {"nested": {"x": 1, "y": 3, "z": 4}}


def test_deep_merge_arrays_replace() -> None:
    """Verify that ordinary arrays are replaced."""
    merged = deep_merge({"checkout_command": ["sd", "edit"]}, {"checkout_command": []})
    assert merged == {"checkout_command": []}


def test_deep_merge_project_lists_additive() -> None:
    """Verify project and prefix lists accumulate distinct values."""
    base = {"ref_proj_prefixes": ["w_", "m_"]}
    update = {"ref_proj_prefixes": ["m_", "dev_"]}
    assert deep_merge(base, update)["ref_proj_prefixes"] == ["w_", "m_", "dev_"]


def test_load_config_defaults() -> None:
    """Verify defaults are returned when no path is given."""
    config = load_config(None)
    assert config == DEFAULT_CONFIG
    assert config["master_lists"]["winrt"] == ["metro.txt", "windev.txt"]


def test_load_yaml_config(tmp_path: Path) -> None:
    """Verify a YAML file is merged over the defaults."""
    config_file = tmp_path / "config.yml"
    config_file.write_text(
        yaml.safe_dump(
            {
                "enlistment_folder": "/src/devdocmain",
                "dry_run": True,
                "ref_proj_prefixes": ["w_"],
                "master_lists": {"win32": ["desktop.txt", "extra.txt"]},
            }
        ),
        encoding="utf-8",
    )
    config = load_config(config_file)
    assert config["enlistment_folder"] == "/src/devdocmain"
    assert config["dry_run"] is True
    assert config["ref_proj_prefixes"] == ["w_"]
    assert config["master_lists"] == {
        "winrt": ["metro.txt", "windev.txt"],
        "win32": ["desktop.txt", "extra.txt"],
    }
    assert config["checkout_command"] == ["sd", "edit"]


def test_parse_line_config() -> None:
    """Verify the key/value line format, comments and repeated keys."""
    text = "\n".join(
        [
            "// comment",
            "my_enlistment_folder D:\\Source_Depot\\devdocmain",
            "dryrun 1",
            "uwp_proj w_*",
            "uwp_proj w_*",
            "winrt_proj m_*",
            "winrt_proj m_*",
            "ref_proj_prefix w_",
            "unknown_key value",
            "",
        ]
    )
    parsed = parse_line_config(text)
    assert parsed == {
        "enlistment_folder": "D:\\Source_Depot\\devdocmain",
        "dry_run": True,
        "uwp_projects": ["w_*", "w_*"],
        "winrt_projects": ["m_*"],
        "ref_proj_prefixes": ["w_"],
    }


def test_load_line_config_file(tmp_path: Path) -> None:
    """Verify a non-YAML file is read in the line format."""
    config_file = tmp_path / "configuration.txt"
    config_file.write_text("dryrun 0\nuwp_exclude_type Windows.Foo.Bar\n", encoding="utf-8")
    config = load_config(config_file)
    assert config["dry_run"] is False
    assert config["uwp_exclude_types"] == ["Windows.Foo.Bar"]


def test_missing_config_file_is_fatal(tmp_path: Path) -> None:
    """Verify a configuration path that doesn't exist raises TopicSdkError."""
    with pytest.raises(TopicSdkError, match="MISSING CONFIGURATION FILE"):
        load_config(tmp_path / "nope.yml")


def test_build_context(tmp_path: Path) -> None:
    """Verify the context carries validated settings as tuples."""
    config = deep_merge(
        DEFAULT_CONFIG,
        {
            "enlistment_folder": str(tmp_path / "enl"),
            "api_ref_stub_folder": str(tmp_path / "stubs"),
            "ref_proj_prefixes": ["w_"],
            "uwp_exclude_types": ["Windows.Foo.Bar"],
        },
    )
    context = build_context(config, tmp_path)
    assert context.enlistment == tmp_path / "enl"
    assert context.reference_prefixes == ("w_",)
    assert context.uwp_excluded_types == ("Windows.Foo.Bar",)
    assert context.checkout_command == ("sd", "edit")
    assert context.logs.log_dir == tmp_path
    assert context.is_reference_project("w_foo")
    assert not context.is_reference_project("m_foo")
    assert not context.is_reference_project("wfoo")
    assert context.resolve_input("map.txt") == tmp_path / "map.txt"


@pytest.mark.parametrize("missing", ["enlistment_folder", "api_ref_stub_folder"])
def test_build_context_requires_folders(tmp_path: Path, missing: str) -> None:
    """Verify both folders are required."""
    config = deep_merge(
        DEFAULT_CONFIG,
        {"enlistment_folder": str(tmp_path), "api_ref_stub_folder": str(tmp_path)},
    )
    config[missing] = None
    with pytest.raises(TopicSdkError, match="MISSING"):
        build_context(config, tmp_path)


def test_expand_path(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Verify %VAR% expansion and the %SDKBX% parent rule."""
    monkeypatch.setenv("DOCROOT", str(tmp_path))
    monkeypatch.setenv("SDKBX", str(tmp_path / "devdocmain" / "sdkbx"))
    assert expand_path("%DOCROOT%/devdocmain") == tmp_path / "devdocmain"
    assert expand_path("$DOCROOT/devdocmain") == tmp_path / "devdocmain"
    assert expand_path("%SDKBX%") == tmp_path / "devdocmain"
