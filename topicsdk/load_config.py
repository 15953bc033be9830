"""Logic for loading and merging configuration files."""

from pathlib import Path
from typing import Any

import yaml

from topicsdk.deep_merge import deep_merge
from topicsdk.errors import TopicSdkError

DEFAULT_CONFIG: dict[str, Any] = {
    "enlistment_folder": None,
    "api_ref_stub_folder": None,
    "dry_run": False,
    "uwp_projects": [],
    "uwp_exclude_types": [],
    "winrt_projects": [],
    "ref_proj_prefixes": [],
    "checkout_command": ["sd", "edit"],
    "log_dir": None,
    "master_lists": {
        "winrt": ["metro.txt", "windev.txt"],
        "win32": ["desktop.txt"],
    },
}

# configuration.txt key -> (config key, how repeated lines combine)
LINE_KEYS: dict[str, tuple[str, str]] = {
    "my_enlistment_folder": ("enlistment_folder", "scalar"),
    "api_ref_stub_folder": ("api_ref_stub_folder", "scalar"),
    "dryrun": ("dry_run", "flag"),
    "uwp_proj": ("uwp_projects", "list"),
    "uwp_exclude_type": ("uwp_exclude_types", "distinct"),
    "winrt_proj": ("winrt_projects", "distinct"),
    "ref_proj_prefix": ("ref_proj_prefixes", "distinct"),
    "log_dir": ("log_dir", "scalar"),
}


def parse_line_config(text: str) -> dict[str, Any]:
    """Parse the line-oriented ``key value`` configuration format.

    Lines starting with ``//`` and blank lines are ignored, as are unknown keys.
    """
    parsed: dict[str, Any] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("//"):
            continue
        parts = line.split(None, 1)
        if len(parts) != 2 or parts[0] not in LINE_KEYS:  # noqa: PLR2004
            continue
        key, mode = LINE_KEYS[parts[0]]
        value = parts[1].strip()
        if mode == "scalar":
            parsed[key] = value
        elif mode == "flag":
            parsed[key] = value == "1"
        else:
            values = parsed.setdefault(key, [])
            if mode == "list" or value not in values:
                values.append(value)
    return parsed


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load configuration from a file and merge it with defaults.

    ``.yml``/``.yaml`` files are read as YAML; anything else is read in the
    line-oriented ``configuration.txt`` format.
    """
    config = DEFAULT_CONFIG.copy()
    if path:
        p = Path(path)
        if not p.exists():
            msg = f"MISSING CONFIGURATION FILE: {p}"
            raise TopicSdkError(msg)
        text = p.read_text(encoding="utf-8")
        if p.suffix.lower() in {".yml", ".yaml"}:
            user_config = yaml.safe_load(text) or {}
        else:
            user_config = parse_line_config(text)
        config = deep_merge(config, user_config)
    return config
