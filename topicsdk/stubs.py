"""Lookup of generated API reference stub topics in the stub folder."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from topicsdk.errors import TopicSdkError
from topicsdk.topic_editor import TopicEditor

if TYPE_CHECKING:
    from topicsdk.run_context import RunContext

logger = logging.getLogger(__name__)


def stub_paths_for_pattern(context: RunContext, pattern: str = "*") -> list[Path]:
    """Stub topic files of every stub project whose name matches ``pattern``.

    A stub project keeps its topics in a same-named subfolder; projects
    without one are reported and skipped.
    """
    stub_folder = context.stub_folder
    if not stub_folder.is_dir():
        msg = f"Stub folder {stub_folder} doesn't exist."
        raise TopicSdkError(msg)

    paths: list[Path] = []
    for project_dir in sorted(stub_folder.glob(pattern)):
        if not project_dir.is_dir():
            continue
        topic_dir = project_dir / project_dir.name
        if not topic_dir.is_dir():
            logger.error(
                "%s doesn't have a same-named subfolder.", project_dir.name
            )
            continue
        paths.extend(sorted(topic_dir.glob("*.xml")))
    return paths


def stub_editors_for_pattern(
    context: RunContext, pattern: str = "*"
) -> list[TopicEditor]:
    return [TopicEditor(p) for p in stub_paths_for_pattern(context, pattern)]


def stub_path_for_id(context: RunContext, topic_id: str) -> Path | None:
    """Find the stub file of a ``project.topic`` id.

    Stub filenames can carry a suffix after the topic name, so the topic name
    is matched as a prefix and only a single match counts.
    """
    segments = topic_id.split(".")
    if len(segments) != 2:  # noqa: PLR2004
        return None
    project, topic = segments

    topic_dir = context.stub_folder / project / project
    if not topic_dir.is_dir():
        return None
    matches = list(topic_dir.glob(f"{topic}*.xml"))
    if len(matches) != 1:
        if matches:
            logger.warning(
                "%d stub files match %s; expected one", len(matches), topic_id
            )
        return None
    return matches[0]


def stub_editor_for_id(context: RunContext, topic_id: str) -> TopicEditor | None:
    path = stub_path_for_id(context, topic_id)
    return TopicEditor(path) if path is not None else None
