"""Data models for commands and breaking-change reports."""

from upcoming_changes.models.command import (
    ALL_PARAMETER_SETS,
    CMDLET_BREAKING_CHANGE,
    PARAMETER_BREAKING_CHANGE,
    AttributeSpec,
    BreakingChangeReport,
    CommandDescriptor,
    ParameterDescriptor,
    short_type_name,
)

__all__ = [
    "ALL_PARAMETER_SETS",
    "CMDLET_BREAKING_CHANGE",
    "PARAMETER_BREAKING_CHANGE",
    "AttributeSpec",
    "BreakingChangeReport",
    "CommandDescriptor",
    "ParameterDescriptor",
    "short_type_name",
]
