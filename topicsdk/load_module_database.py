"""Logic for loading an exported module database."""

import logging
from pathlib import Path
from typing import Any

import yaml

from topicsdk.errors import TopicSdkError
from topicsdk.module_groups import ApiRecord

logger = logging.getLogger(__name__)


def load_module_database(path: Path) -> tuple[str, list[ApiRecord]]:
    """Load the SDK version and API records of a module database export.

    The export is YAML with an ``sdk_version`` and a list of ``apis``, each
    with a ``name``, a ``binary`` and an optional list of ``apisets``.
    Entries without a name or a binary are skipped.
    """
    if not path.exists():
        msg = f"Could not find module database {path}"
        raise TopicSdkError(msg)

    try:
        doc: dict[str, Any] = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        msg = f"{path} is invalid. {e}"
        raise TopicSdkError(msg) from e

    sdk_version = str(doc.get("sdk_version") or "")
    records: list[ApiRecord] = []
    for entry in doc.get("apis") or []:
        if not isinstance(entry, dict) or not entry.get("name") or not entry.get("binary"):
            logger.warning("Skipping malformed module database entry: %r", entry)
            continue
        records.append(
            ApiRecord(
                name=str(entry["name"]),
                binary=str(entry["binary"]),
                apisets=tuple(str(a) for a in entry.get("apisets") or ()),
            )
        )
    return sdk_version, records
