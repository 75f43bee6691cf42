"""
Non-destructive merging of breaking-change reports.

The same rule is used at every aggregation level (parameter set, command,
component, module): mappings merge recursively, lists are appended to and
differing messages for the same key are joined, never overwritten.
"""

import copy
from typing import Any


def merge_breaking_changes(target: dict[str, Any], source: dict[str, Any]) -> dict[str, Any]:
    """
    Merge ``source`` into ``target`` in place.

    Args:
        target: Mapping receiving the entries (modified in place)
        source: Mapping to merge in (left untouched)

    Returns:
        The updated ``target`` mapping

    Example:
        >>> target = {"Get-Widget": {"AllParameterSets": {"CmdletBreakingChange": ["a"]}}}
        >>> merge_breaking_changes(
        ...     target, {"Get-Widget": {"AllParameterSets": {"CmdletBreakingChange": ["b"]}}}
        ... )
        {'Get-Widget': {'AllParameterSets': {'CmdletBreakingChange': ['a', 'b']}}}
    """
    for key, value in source.items():
        if key not in target:
            target[key] = copy.deepcopy(value)
            continue

        existing = target[key]
        if isinstance(existing, dict) and isinstance(value, dict):
            merge_breaking_changes(existing, value)
        elif isinstance(existing, list) and isinstance(value, list):
            existing.extend(copy.deepcopy(value))
        elif isinstance(existing, str) and isinstance(value, str):
            if value != existing:
                target[key] = f"{existing}\n{value}"
        else:
            raise TypeError(
                f"Cannot merge {type(value).__name__} into {type(existing).__name__} "
                f"for key {key!r}"
            )

    return target
