"""Tests for resolving a project's published topics from its xtoc."""

from pathlib import Path

import pytest

from tests.builders import topic_xml, write_project
from topicsdk.errors import TopicSdkError
from topicsdk.toc_loader import editors_for_project, topic_paths_for_project


def test_published_topics_in_toc_order(tmp_path: Path) -> None:
    """Verify build-excluded nodes are skipped and order is kept."""
    project_dir = write_project(
        tmp_path,
        "w_foo",
        {
            "b.xml": topic_xml("class_winrt", "w_foo.b"),
            "a.xml": topic_xml("class_winrt", "w_foo.a"),
            "hidden.xml": topic_xml("class_winrt", "w_foo.hidden"),
        },
        excluded={"hidden.xml"},
    )
    paths = topic_paths_for_project(project_dir)
    assert [p.name for p in paths] == ["b.xml", "a.xml"]


def test_includes_are_followed(tmp_path: Path) -> None:
    """Verify published includes add their nodes after the including toc's own."""
    project_dir = write_project(
        tmp_path, "w_foo", {"a.xml": topic_xml("class_winrt", "w_foo.a")}
    )
    (project_dir / "w_foo" / "b.xml").write_text(
        topic_xml("class_winrt", "w_foo.b"), encoding="utf-8"
    )
    (project_dir / "w_foo" / "c.xml").write_text(
        topic_xml("class_winrt", "w_foo.c"), encoding="utf-8"
    )
    (project_dir / "more.xtoc").write_text(
        '<xtoc><node topicURL="w_foo/b.xml"/></xtoc>', encoding="utf-8"
    )
    (project_dir / "hidden.xtoc").write_text(
        '<xtoc><node topicURL="w_foo/c.xml"/></xtoc>', encoding="utf-8"
    )
    xtoc = project_dir / "w_foo.xtoc"
    xtoc.write_text(
        "<xtoc>"
        '<node topicURL="w_foo/a.xml"/>'
        '<include url="more.xtoc"/>'
        '<include url="hidden.xtoc" filter_msdn="1"/>'
        "</xtoc>",
        encoding="utf-8",
    )

    editors = editors_for_project(project_dir)
    assert [e.metadata_id for e in editors] == ["w_foo.a", "w_foo.b"]


def test_missing_xtoc_is_fatal(tmp_path: Path) -> None:
    """Verify a project folder without its xtoc raises TopicSdkError."""
    project_dir = tmp_path / "w_empty"
    project_dir.mkdir()
    with pytest.raises(TopicSdkError, match="does not contain w_empty.xtoc"):
        topic_paths_for_project(project_dir)
