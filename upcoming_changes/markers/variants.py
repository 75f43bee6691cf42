"""Known breaking-change marker types."""

from dataclasses import dataclass
from typing import Any

from upcoming_changes.exceptions import MarkerContractError
from upcoming_changes.markers.base import BreakingChangeMarker


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None]
    return [str(value)]


@dataclass
class GenericBreakingChange(BreakingChangeMarker):
    """Free-form breaking change with an explicit message."""

    marker_name = "GenericBreakingChange"
    positional_fields = (
        "message",
        "deprecate_by_az_version",
        "deprecate_by_version",
        "change_in_effect_by_date",
    )

    message: str | None = None

    def attribute_specific_message(self) -> str:
        if not self.message or not str(self.message).strip():
            raise MarkerContractError(self.marker_name, "no message given")
        return str(self.message).strip()


@dataclass
class CmdletBreakingChange(BreakingChangeMarker):
    """The whole cmdlet is deprecated, optionally with a replacement."""

    marker_name = "CmdletBreakingChange"
    aliases = ("CmdletDeprecation",)
    positional_fields = (
        "deprecate_by_az_version",
        "deprecate_by_version",
        "change_in_effect_by_date",
    )

    replacement_cmdlet_name: str | None = None

    def attribute_specific_message(self) -> str:
        if self.replacement_cmdlet_name:
            return (
                "The cmdlet is being deprecated. "
                f"The replacement cmdlet will be '{self.replacement_cmdlet_name}'."
            )
        return "The cmdlet is being deprecated. There will be no replacement for it."


@dataclass
class OutputBreakingChange(BreakingChangeMarker):
    """The output type of the cmdlet or some of its properties are changing."""

    marker_name = "OutputBreakingChange"
    aliases = ("CmdletOutputBreakingChange",)
    positional_fields = (
        "deprecated_output_type",
        "deprecate_by_az_version",
        "deprecate_by_version",
        "change_in_effect_by_date",
        "replacement_output_type",
    )

    deprecated_output_type: str | None = None
    replacement_output_type: str | None = None
    deprecated_output_properties: Any = None
    new_output_properties: Any = None

    def attribute_specific_message(self) -> str:
        if self.replacement_output_type:
            message = (
                "The output type is changing from the existing type "
                f"'{self.deprecated_output_type}' to the new type "
                f"'{self.replacement_output_type}'."
            )
        else:
            message = f"The output type '{self.deprecated_output_type}' is changing."

        deprecated = _as_list(self.deprecated_output_properties)
        if deprecated:
            message += (
                "\nThe following properties in the output type are being deprecated: "
                + ", ".join(f"'{p}'" for p in deprecated)
            )
        added = _as_list(self.new_output_properties)
        if added:
            message += "\nThe following properties are being added to the output type: " + (
                ", ".join(f"'{p}'" for p in added)
            )
        return message


@dataclass
class ParameterBreakingChange(BreakingChangeMarker):
    """A single parameter is being replaced, retyped or made mandatory."""

    marker_name = "ParameterBreakingChange"
    aliases = ("CmdletParameterBreakingChange",)
    positional_fields = (
        "parameter_name",
        "deprecate_by_az_version",
        "deprecate_by_version",
        "change_in_effect_by_date",
    )

    parameter_name: str | None = None
    replacement_parameter_name: str | None = None
    is_becoming_mandatory: bool = False
    old_parameter_type: str | None = None
    new_parameter_type: str | None = None

    def attribute_specific_message(self) -> str:
        if not self.parameter_name:
            raise MarkerContractError(self.marker_name, "no parameter name given")

        if self.replacement_parameter_name:
            kind = "mandatory parameter" if self.is_becoming_mandatory else "parameter"
            message = (
                f"The parameter '{self.parameter_name}' is being replaced by "
                f"{kind} '{self.replacement_parameter_name}'."
            )
        elif self.is_becoming_mandatory:
            message = f"The parameter '{self.parameter_name}' is becoming mandatory."
        else:
            message = f"The parameter '{self.parameter_name}' is changing."

        if self.old_parameter_type and self.new_parameter_type:
            message += (
                "\nThe type of the parameter is changing from "
                f"'{self.old_parameter_type}' to '{self.new_parameter_type}'."
            )
        return message


@dataclass
class ParameterSetBreakingChange(BreakingChangeMarker):
    """One or more parameter sets of the cmdlet are changing."""

    marker_name = "ParameterSetBreakingChange"
    positional_fields = (
        "changed_parameter_sets",
        "deprecate_by_az_version",
        "deprecate_by_version",
        "change_in_effect_by_date",
    )

    changed_parameter_sets: Any = None

    def attribute_specific_message(self) -> str:
        sets = _as_list(self.changed_parameter_sets)
        if not sets:
            raise MarkerContractError(self.marker_name, "no parameter set given")
        if len(sets) == 1:
            return f"The parameter set '{sets[0]}' is changing."
        return "The parameter sets " + ", ".join(f"'{s}'" for s in sets) + " are changing."
