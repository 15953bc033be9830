"""Loaders for list files and comma-delimited two-column mapping files."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from topicsdk.errors import TopicSdkError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from topicsdk.docset import DocSet
    from topicsdk.run_context import RunContext


def load_text_lines(path: Path, not_found_message: str | None = None) -> list[str]:
    """Return every line of a text file. A missing file is fatal."""
    if not path.exists():
        raise TopicSdkError(not_found_message or f"Could not find {path}")
    return path.read_text(encoding="utf-8").splitlines()


def _mapping_lines(path: Path) -> Iterator[str]:
    if not path.exists():
        msg = f"Could not find {path}"
        raise TopicSdkError(msg)
    for line in path.read_text(encoding="utf-8").splitlines():
        if line and not line.startswith("//"):
            yield line


def _split_pair(line: str, delimiter: str) -> tuple[str, str] | None:
    values = [v.strip() for v in line.split(delimiter)]
    if len(values) != 2 or not values[0] or not values[1]:  # noqa: PLR2004
        return None
    return values[0], values[1]


def load_unique_key_map(
    path: Path,
    context: RunContext,
    validate_against: tuple[DocSet, DocSet] | None = None,
) -> dict[str, str]:
    """Load a map whose keys are valid only if they appear exactly once.

    The second occurrence of a key removes it from the map and logs both
    lines; later occurrences log just their own line. Keys that turned out to
    be duplicated are remembered for the rest of the run.

    With ``validate_against``, keys and values are topic ids checked against
    the first and second docset respectively.
    """
    logs = context.logs
    mappings: dict[str, str] = {}

    for line in _mapping_lines(path):
        pair = _split_pair(line, ",")
        if pair is None:
            logs.malformed_mappings.add(f"{path.name} has malformed mapping: {line}")
            continue
        key, value = pair

        if key in context.duplicate_map_keys:
            logs.duplicated_mappings.add(f"{path.name} has duplicate key: {line}")
            continue
        if key in mappings:
            logs.duplicated_mappings.add(
                f"{path.name} has duplicate key: {key},{mappings[key]}"
            )
            logs.duplicated_mappings.add(f"{path.name} has duplicate key: {line}")
            del mappings[key]
            context.duplicate_map_keys.add(key)
            continue

        if validate_against is not None:
            key_docset, value_docset = validate_against
            if key_docset.path_for_topic(key) is None:
                logs.nonexistent_rids.add(f"{key_docset.description} don't contain {key}")
            if value_docset.path_for_topic(value) is None:
                logs.nonexistent_rids.add(
                    f"{value_docset.description} don't contain {value}"
                )

        mappings[key] = value

    return mappings


def load_non_unique_key_map(
    path: Path, context: RunContext, delimiter: str = ","
) -> dict[str, list[str]]:
    """Load a map where a key may repeat; values are lowercased and kept distinct."""
    mappings: dict[str, list[str]] = {}
    for line in _mapping_lines(path):
        pair = _split_pair(line, delimiter)
        if pair is None:
            context.logs.malformed_mappings.add(
                f"{path.name} has malformed mapping: {line}"
            )
            continue
        key, value = pair
        values = mappings.setdefault(key, [])
        if value.lower() not in values:
            values.append(value.lower())
    return mappings
