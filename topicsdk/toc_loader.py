"""Logic for resolving the published topics of a project from its xtoc."""

from pathlib import Path

from topicsdk.errors import TopicSdkError
from topicsdk.topic_editor import TopicEditor, is_published


def editor_for_xtoc(project_dir: Path) -> TopicEditor:
    """Open the xtoc inside, and named after, the project folder.

    Anything other than exactly one match is fatal.
    """
    xtoc_files = list(project_dir.glob(f"{project_dir.name}.xtoc"))
    if len(xtoc_files) != 1:
        msg = f"Project folder {project_dir.name} does not contain {project_dir.name}.xtoc"
        raise TopicSdkError(msg)
    return TopicEditor(xtoc_files[0], namespace="")


def topic_paths_in_xtoc(project_dir: Path, xtoc: TopicEditor) -> list[Path]:
    """Collect published node@topicURL paths, then follow published includes.

    Includes are followed recursively with no cycle guard.
    """
    paths: list[Path] = []
    for node in xtoc.descendants("node"):
        topic_url = node.get("topicURL")
        if topic_url is not None and is_published(node):
            paths.append(project_dir / topic_url)

    for include in xtoc.descendants("include"):
        url = include.get("url")
        if url is not None and is_published(include):
            included = TopicEditor(project_dir / url, namespace="")
            paths.extend(topic_paths_in_xtoc(project_dir, included))

    return paths


def topic_paths_for_project(project_dir: Path) -> list[Path]:
    """Return the published topic files of a project folder."""
    return topic_paths_in_xtoc(project_dir, editor_for_xtoc(project_dir))


def editors_for_project(project_dir: Path) -> list[TopicEditor]:
    """Open an editor for every published topic of a project folder."""
    return [TopicEditor(p) for p in topic_paths_for_project(project_dir)]
