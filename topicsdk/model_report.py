"""Summary report of the models built during a run."""

from __future__ import annotations

import hashlib
import json
import time
from collections import Counter
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from topicsdk.api_ref_model import ApiClass, ApiRefModel
    from topicsdk.docset import DocSet
    from topicsdk.module_groups import UmbrellaLib
    from topicsdk.win32_model import Win32Model


def config_fingerprint(config: dict[str, Any]) -> str:
    """Stable hash of a configuration (canonical JSON, sorted keys)."""
    config_json = json.dumps(config, sort_keys=True, ensure_ascii=True, default=str)
    return hashlib.sha256(config_json.encode("utf-8")).hexdigest()


def _class_ref(api_class: ApiClass) -> dict[str, str]:
    return {"id": api_class.id, "name": api_class.name}


class ModelReport:
    """Collects what a run built and writes it out as JSON."""

    def __init__(self, config_hash: str) -> None:
        """Initialize the report with metadata."""
        self.config_hash = config_hash
        self.start_time = time.time()
        self.docsets: list[dict[str, Any]] = []
        self.win32: dict[str, Any] | None = None
        self.modules: dict[str, Any] | None = None

    def add_docset(self, docset: DocSet, model: ApiRefModel | None = None) -> None:
        """Record a docset's projects and, if built, its namespace model."""
        entry: dict[str, Any] = {
            "description": docset.description,
            "platform": docset.platform.value,
            "content": docset.docset_type.value,
            "projects": [d.name for d in docset.project_dirs],
        }
        if model is not None:
            entry["namespaces"] = [
                {
                    "name": ns.name,
                    "project": ns.project_name,
                    "classes": len(ns.classes),
                    "members": sum(len(c.members) for c in ns.classes),
                }
                for ns in model.sorted_namespaces()
            ]
            entry["ambiguous_merges"] = [
                {
                    "project": m.namespace_project,
                    "id": m.id,
                    "name": m.name,
                    "matched_by_id": _class_ref(m.matched_by_id),
                    "matched_by_name": _class_ref(m.matched_by_name),
                }
                for m in model.ambiguous_merges
            ]
        self.docsets.append(entry)

    def add_win32(self, model: Win32Model) -> None:
        projects = Counter(f.project_name for f in model.functions.values())
        self.win32 = {"functions": len(model.functions), "projects": dict(projects)}

    def add_modules(self, umbrella: UmbrellaLib) -> None:
        """Record per-module counts and the size of each initial-character bucket."""
        groups = umbrella.initial_char_groups or umbrella.sort_alphabetically()
        self.modules = {
            "modules": {m.name: len(m.apis) for m in umbrella.modules},
            "api_sets": sorted(m.name for m in umbrella.modules if m.is_api_set),
            "initial_chars": {g.name: len(g.apis) for g in groups},
        }

    def generate_report(self, path: str | Path) -> None:
        """Write the summary report to a JSON file."""
        report: dict[str, Any] = {
            "meta": {
                "timestamp": time.time(),
                "duration": time.time() - self.start_time,
                "config_hash": self.config_hash,
            },
            "docsets": self.docsets,
        }
        if self.win32 is not None:
            report["win32"] = self.win32
        if self.modules is not None:
            report["modules"] = self.modules

        Path(path).write_text(json.dumps(report, indent=2), encoding="utf-8")
