"""The validated settings and logs shared by every component of a run."""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from topicsdk.errors import TopicSdkError
from topicsdk.project_prefix import project_prefix
from topicsdk.run_log import LogRegistry

WINDOWS_ENV_VAR_RE = re.compile(r"%([^%]+)%")


@dataclass
class RunContext:
    """Created once at startup and passed to everything that needs it.

    Settings are read-only during processing; only the logs and the set of
    ongoing duplicate mapping keys accumulate.
    """

    enlistment: Path
    stub_folder: Path
    config_dir: Path
    logs: LogRegistry
    dry_run: bool = False
    uwp_projects: tuple[str, ...] = ()
    uwp_excluded_types: tuple[str, ...] = ()
    winrt_projects: tuple[str, ...] = ()
    reference_prefixes: tuple[str, ...] = ()
    checkout_command: tuple[str, ...] = ("sd", "edit")
    master_lists: dict[str, list[str]] = field(default_factory=dict)
    duplicate_map_keys: set[str] = field(default_factory=set)

    def is_reference_project(self, project_name: str) -> bool:
        """Check if the project folder's prefix is a configured reference prefix."""
        return project_prefix(project_name) in self.reference_prefixes

    def resolve_input(self, file_name: str | Path) -> Path:
        """Resolve a mapping or list file name against the configuration folder."""
        p = Path(file_name)
        return p if p.is_absolute() else self.config_dir / p


def expand_path(value: str) -> Path:
    """Expand ``%VAR%`` and ``$VAR`` references in a configured folder path.

    ``%SDKBX%`` on its own names the build folder inside the enlistment, so the
    enlistment is its parent.
    """
    expanded = WINDOWS_ENV_VAR_RE.sub(
        lambda m: os.environ.get(m.group(1), m.group(0)), value
    )
    path = Path(os.path.expandvars(expanded))
    if value == "%SDKBX%":
        path = path.parent
    return path


def build_context(config: dict[str, Any], config_dir: Path | None = None) -> RunContext:
    """Validate a merged configuration and build the run context."""
    enlistment = config.get("enlistment_folder")
    if not enlistment:
        msg = (
            "MISSING ENLISTMENT FOLDER CONFIG INFO. Your configuration needs "
            "something like: my_enlistment_folder D:\\Source_Depot\\devdocmain. "
            "This is the folder that contains the dev_*, m_*, w_* folders, "
            "metro.txt, etc."
        )
        raise TopicSdkError(msg)

    stub_folder = config.get("api_ref_stub_folder")
    if not stub_folder:
        msg = (
            "MISSING API REFERENCE STUB FOLDER CONFIG INFO. Your configuration "
            "needs something like: api_ref_stub_folder \\\\server\\winrt\\latest. "
            "This is the folder that contains the stubs."
        )
        raise TopicSdkError(msg)

    base_dir = config_dir or Path.cwd()
    log_dir = Path(config["log_dir"]) if config.get("log_dir") else base_dir

    return RunContext(
        enlistment=expand_path(str(enlistment)),
        stub_folder=Path(str(stub_folder)),
        config_dir=base_dir,
        logs=LogRegistry(log_dir),
        dry_run=bool(config.get("dry_run", False)),
        uwp_projects=tuple(config.get("uwp_projects") or ()),
        uwp_excluded_types=tuple(config.get("uwp_exclude_types") or ()),
        winrt_projects=tuple(config.get("winrt_projects") or ()),
        reference_prefixes=tuple(config.get("ref_proj_prefixes") or ()),
        checkout_command=tuple(config.get("checkout_command") or ()),
        master_lists=dict(config.get("master_lists") or {}),
    )
