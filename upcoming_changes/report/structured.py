"""
Machine-readable serialization of breaking-change reports.
"""

import json

import yaml

from upcoming_changes.models import BreakingChangeReport

FORMATS = ("json", "yaml")


def dump_structured(report: BreakingChangeReport, fmt: str = "json") -> str:
    """
    Serialize a report as JSON or YAML.

    Key order follows the report's insertion order in both formats.

    Args:
        report: Report mapping command -> parameter set -> breaking-change info
        fmt: "json" or "yaml"

    Returns:
        Serialized text

    Raises:
        ValueError: If the format is not supported
    """
    if fmt == "json":
        return json.dumps(report, indent=2)
    if fmt == "yaml":
        return yaml.safe_dump(report, default_flow_style=False, sort_keys=False)
    raise ValueError(f"Unsupported format: {fmt} (expected one of: {', '.join(FORMATS)})")
