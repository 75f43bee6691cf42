"""Command descriptors shared by the binary and script component readers.

Both component kinds are normalized into these dataclasses before scanning,
so the scanners never need to know where a command came from.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

ALL_PARAMETER_SETS = "AllParameterSets"
CMDLET_BREAKING_CHANGE = "CmdletBreakingChange"
PARAMETER_BREAKING_CHANGE = "ParameterBreakingChange"

# command -> parameter set -> {"CmdletBreakingChange": [...], "ParameterBreakingChange": {...}}
BreakingChangeReport = dict[str, dict[str, dict[str, Any]]]


def short_type_name(type_name: str) -> str:
    """Strip the namespace and the ``Attribute`` suffix from a type name."""
    name = type_name.rsplit(".", 1)[-1]
    if name.endswith("Attribute") and name != "Attribute":
        name = name[: -len("Attribute")]
    return name


@dataclass
class AttributeSpec:
    """An attribute as declared on a command or parameter."""

    type_name: str
    arguments: tuple = ()
    named_arguments: dict[str, Any] = field(default_factory=dict)
    base_names: tuple[str, ...] = ()  # ancestor type names, when the reader can see them

    @property
    def short_name(self) -> str:
        return short_type_name(self.type_name)


@dataclass
class ParameterDescriptor:
    """A declared parameter of a command."""

    name: str
    attributes: list[AttributeSpec] = field(default_factory=list)


@dataclass
class CommandDescriptor:
    """An exported command together with its attributes and parameters."""

    name: str
    parameter_set: str = ALL_PARAMETER_SETS
    attributes: list[AttributeSpec] = field(default_factory=list)
    parameters: list[ParameterDescriptor] = field(default_factory=list)
    source: Path | None = None
