"""Flat model of the documented Win32 functions, keyed case-insensitively."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from topicsdk.name_sort_key import name_sort_key

if TYPE_CHECKING:
    from collections.abc import Iterable

    from topicsdk.run_log import RunLog
    from topicsdk.topic_editor import TopicEditor

logger = logging.getLogger(__name__)

FUNCTION_TOPIC_TYPE = "function"


@dataclass
class FunctionInDocs:
    """A Win32 function as documented by a topic."""

    project_name: str
    id: str
    name: str  # original case from the topic title
    path: Path | None = None


class Win32Model:
    """Maps lowercased function names to the topic that documents them.

    The first topic registered for a name wins. Later topics with the same
    name, in any case, are reported to ``duplicates_log``.
    """

    def __init__(self, duplicates_log: RunLog | None = None) -> None:
        """Initialize an empty model."""
        self.functions: dict[str, FunctionInDocs] = {}
        self.duplicates_log = duplicates_log

    def ensure_function(
        self, project_name: str, function_id: str, name: str, path: Path | None
    ) -> tuple[FunctionInDocs, bool]:
        """Register a function unless its name is already known.

        Returns the registered function and whether it already existed.
        """
        key = name.lower()
        existing = self.functions.get(key)
        if existing is not None:
            return existing, True
        function = FunctionInDocs(project_name, function_id, name, path)
        self.functions[key] = function
        return function, False

    def process_project(self, project_name: str, editors: Iterable[TopicEditor]) -> None:
        """Register every function topic of a project."""
        for editor in editors:
            if editor.metadata_type != FUNCTION_TOPIC_TYPE:
                continue
            function, already_existed = self.ensure_function(
                project_name,
                editor.metadata_id or "",
                editor.metadata_title or "",
                editor.path,
            )
            if already_existed:
                logger.debug("Duplicate Win32 name %s in %s", function.name, editor.path)
                if self.duplicates_log is not None:
                    self.duplicates_log.add_entry(f"{editor.path} and {function.path}")

    @property
    def has_functions(self) -> bool:
        return len(self.functions) != 0

    def get_function_by_name(self, name: str) -> FunctionInDocs | None:
        return self.functions.get(name.lower())

    def sorted_functions(self) -> list[FunctionInDocs]:
        return sorted(self.functions.values(), key=lambda f: name_sort_key(f.name))
