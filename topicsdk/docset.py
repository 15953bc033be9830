"""Docsets: the project folders selected along platform and content-type axes."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from topicsdk.api_ref_model import ApiRefModel
from topicsdk.mapping_files import load_text_lines
from topicsdk.toc_loader import editors_for_project, topic_paths_for_project
from topicsdk.topic_editor import TopicEditor
from topicsdk.win32_model import Win32Model

if TYPE_CHECKING:
    from topicsdk.run_context import RunContext

logger = logging.getLogger(__name__)

# Topics whose id names no project of the docset live here.
FALLBACK_PROJECT = "modern_nodes"
NODEPAGE_FOLDER = "nodepage"


class Platform(Enum):
    """The set of APIs and features a docset covers."""

    UWP_WINDOWS_10 = "uwp"
    WINRT_WINDOWS_8X_AND_10 = "winrt"
    WIN32_DESKTOP = "win32"


class DocSetType(Enum):
    """The content type of a docset."""

    CONCEPTUAL_AND_REFERENCE = "both"
    CONCEPTUAL_ONLY = "conceptual"
    REFERENCE_ONLY = "reference"


def _missing_list_message(file_name: str) -> str:
    return (
        f"MISSING {file_name}. This file could not be found in your enlistment "
        "folder. Your configuration contains something like: my_enlistment_folder "
        "D:\\Source_Depot\\devdocmain. This should be the folder that contains "
        f"the dev_*, m_*, w_* folders, {file_name}, etc."
    )


def load_master_list(context: RunContext, list_name: str) -> list[str]:
    """Concatenate the project lists configured under ``list_name``."""
    names: list[str] = []
    for file_name in context.master_lists.get(list_name, []):
        names.extend(
            load_text_lines(
                context.enlistment / file_name, _missing_list_message(file_name)
            )
        )
    return [n.strip() for n in names if n.strip()]


def project_dirs_for_patterns(enlistment: Path, patterns: tuple[str, ...]) -> list[Path]:
    """Top-level enlistment folders matching any pattern, in pattern order."""
    dirs: list[Path] = []
    for pattern in patterns:
        for d in sorted(enlistment.glob(pattern)):
            if d.is_dir() and d not in dirs:
                dirs.append(d)
    return dirs


def _print_project_list(intro: str, project_dirs: list[Path]) -> None:
    print(intro)
    print(", ".join(d.name for d in project_dirs) + ".\n")


class DocSet:
    """A named, filtered collection of project folders.

    You can query it for topic files, for editors, or for a hierarchical
    object model of its API reference.
    """

    def __init__(
        self,
        context: RunContext,
        docset_type: DocSetType,
        platform: Platform,
        description: str,
        project_dirs: list[Path] | None = None,
    ) -> None:
        """Wrap an already resolved list of project folders."""
        self.context = context
        self.docset_type = docset_type
        self.platform = platform
        self.description = description
        self.project_dirs: list[Path] = list(project_dirs or [])
        self._api_ref_model: ApiRefModel | None = None

    def __repr__(self) -> str:
        return f"DocSet({self.description!r}, projects={len(self.project_dirs)})"

    @classmethod
    def create(
        cls,
        context: RunContext,
        docset_type: DocSetType,
        platform: Platform,
        description: str,
    ) -> DocSet:
        """Resolve the project folders of a WinRT-family docset.

        Configured project patterns for the platform are matched against the
        enlistment. Conceptual-only docsets drop reference-prefixed projects,
        reference-only docsets drop the rest, and projects missing from the
        master lists are dropped regardless.
        """
        print(f'Creating docset: "{description}"')
        master = set(load_master_list(context, "winrt"))

        patterns = (
            context.uwp_projects
            if platform is Platform.UWP_WINDOWS_10
            else context.winrt_projects
        )
        project_dirs = project_dirs_for_patterns(context.enlistment, patterns)

        if docset_type is DocSetType.CONCEPTUAL_ONLY:
            project_dirs = [
                d for d in project_dirs if not context.is_reference_project(d.name)
            ]
        elif docset_type is DocSetType.REFERENCE_ONLY:
            project_dirs = [
                d for d in project_dirs if context.is_reference_project(d.name)
            ]

        project_dirs = [d for d in project_dirs if d.name in master]

        content = {
            DocSetType.CONCEPTUAL_AND_REFERENCE: "features and namespaces",
            DocSetType.CONCEPTUAL_ONLY: "features",
            DocSetType.REFERENCE_ONLY: "namespaces",
        }[docset_type]
        scope = (
            "UWP (Windows 10 only)"
            if platform is Platform.UWP_WINDOWS_10
            else "WinRT (Windows 8.x, Windows Phone 8.x, and Windows 10)"
        )
        _print_project_list(
            f"These are the shipping projects that document {scope} {content}. "
            "Only topics with an unfiltered TOC entry are processed.",
            project_dirs,
        )
        return cls(context, docset_type, platform, description, project_dirs)

    def find_for_project_name(self, project_name: str) -> Path | None:
        return next((d for d in self.project_dirs if d.name == project_name), None)

    def find_all_for_project_name_prefix(self, prefix: str) -> list[Path]:
        """Project folders whose names start with ``prefix`` (not a glob pattern)."""
        return [d for d in self.project_dirs if d.name.startswith(prefix)]

    def _topic_folder(self, project_dir: Path) -> Path | None:
        for candidate in (project_dir / project_dir.name, project_dir / NODEPAGE_FOLDER):
            if candidate.is_dir():
                return candidate
        logger.error("%s doesn't have a same-named subfolder.", project_dir.name)
        return None

    def topic_paths(
        self,
        project_name: str | None = None,
        is_prefix: bool = False,
        ignore_toc: bool = False,
    ) -> list[Path]:
        """Topic files of one project, of every project matching a prefix, or of all.

        By default only published toc entries are returned; with
        ``ignore_toc`` every ``*.xml`` in the project's topic folder is.
        """
        paths: list[Path] = []
        for project_dir in self.project_dirs:
            selected = (
                project_name is None
                or project_dir.name == project_name
                or (is_prefix and project_dir.name.startswith(project_name))
            )
            if not selected:
                continue
            if not ignore_toc:
                paths.extend(topic_paths_for_project(project_dir))
                continue
            folder = self._topic_folder(project_dir)
            if folder is not None:
                paths.extend(sorted(folder.glob("*.xml")))
        return paths

    def editors(
        self,
        project_name: str | None = None,
        is_prefix: bool = False,
        ignore_toc: bool = False,
    ) -> list[TopicEditor]:
        return [
            TopicEditor(p) for p in self.topic_paths(project_name, is_prefix, ignore_toc)
        ]

    def path_for_topic(self, topic_id: str) -> Path | None:
        """Find the file of a ``project.topic`` id, or None."""
        segments = topic_id.split(".")
        if len(segments) != 2:  # noqa: PLR2004
            return None
        project, topic = segments

        project_dir = self.find_for_project_name(project)
        if project_dir is None:
            project_dir = self.find_for_project_name(FALLBACK_PROJECT)
        if project_dir is None:
            return None

        folder = self._topic_folder(project_dir)
        if folder is None:
            return None
        candidate = folder / f"{topic}.xml"
        return candidate if candidate.is_file() else None

    def editor_for_topic(self, topic_id: str) -> TopicEditor | None:
        path = self.path_for_topic(topic_id)
        return TopicEditor(path) if path is not None else None

    @property
    def api_ref_model(self) -> ApiRefModel:
        """The namespace model of the docset's reference projects, built on first use."""
        if self._api_ref_model is None:
            model = ApiRefModel()
            for project_dir in self.project_dirs:
                if self.context.is_reference_project(project_dir.name):
                    model.process_project(
                        project_dir.name, editors_for_project(project_dir)
                    )
            model.remove_incomplete(self.context.uwp_excluded_types)
            if model.ambiguous_merges:
                logger.warning(
                    "%s: %d class lookups matched different classes by id and name",
                    self.description,
                    len(model.ambiguous_merges),
                )
            self._api_ref_model = model
        return self._api_ref_model


def build_win32_model(context: RunContext) -> Win32Model:
    """Build the Win32 function model from the projects in the win32 master list."""
    print("Creating Win32 docset")
    project_dirs: list[Path] = []
    for project_name in load_master_list(context, "win32"):
        project_dirs.extend(project_dirs_for_patterns(context.enlistment, (project_name,)))

    _print_project_list(
        "These are the shipping projects that document Win32 functions. "
        "Only topics with an unfiltered TOC entry are processed.",
        project_dirs,
    )

    model = Win32Model(context.logs.duped_win32_names)
    for project_dir in project_dirs:
        model.process_project(project_dir.name, editors_for_project(project_dir))
    return model
