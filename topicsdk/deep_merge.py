"""Logic for deep merging configuration dictionaries."""

from typing import Any

# List settings that accumulate across sources instead of being replaced.
ADDITIVE_KEYS = frozenset(
    {"uwp_projects", "uwp_exclude_types", "winrt_projects", "ref_proj_prefixes"}
)


def deep_merge(base: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    - Objects are merged recursively.
    - Arrays in 'update' replace 'base' arrays, EXCEPT for the additive keys.
    - Additive keys keep base order and append unseen values from 'update'.
    """
    result = base.copy()
    for key, value in update.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        elif (
            key in ADDITIVE_KEYS
            and isinstance(value, list)
            and isinstance(result.get(key), list)
        ):
            merged = list(result[key])
            merged.extend(v for v in value if v not in merged)
            result[key] = merged
        else:
            # Default: Replacement (scalars and other arrays)
            result[key] = value
    return result
