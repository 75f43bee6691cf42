"""
Scan command descriptors for breaking-change markers.
"""

import logging
from typing import Any

from upcoming_changes.markers import find_markers
from upcoming_changes.models import (
    ALL_PARAMETER_SETS,
    CMDLET_BREAKING_CHANGE,
    PARAMETER_BREAKING_CHANGE,
    BreakingChangeReport,
    CommandDescriptor,
    ParameterDescriptor,
)
from upcoming_changes.scan.extract import extract_message
from upcoming_changes.util.merge import merge_breaking_changes

logger = logging.getLogger(__name__)


def scan_parameter(parameter: ParameterDescriptor) -> str | None:
    """
    Return the breaking-change message of a parameter, if any.

    Messages of several markers on the same parameter are joined with a newline
    in attachment order.
    """
    messages = [extract_message(marker) for marker in find_markers(parameter.attributes)]
    if not messages:
        return None
    return "\n".join(messages)


def scan_command(command: CommandDescriptor) -> dict[str, dict[str, Any]]:
    """
    Collect the breaking changes of one command.

    Args:
        command: Command descriptor from a binary or script component

    Returns:
        Mapping of parameter-set name to breaking-change info, empty when the
        command has no markers at all
    """
    parameter_set = command.parameter_set or ALL_PARAMETER_SETS
    info: dict[str, Any] = {}

    cmdlet_messages = [extract_message(marker) for marker in find_markers(command.attributes)]
    if cmdlet_messages:
        info[CMDLET_BREAKING_CHANGE] = cmdlet_messages

    parameter_messages: dict[str, str] = {}
    for parameter in command.parameters:
        message = scan_parameter(parameter)
        if message is not None:
            merge_breaking_changes(parameter_messages, {parameter.name: message})
    if parameter_messages:
        info[PARAMETER_BREAKING_CHANGE] = parameter_messages

    if not info:
        return {}

    logger.debug(f"Found breaking changes on {command.name} ({parameter_set})")
    return {parameter_set: info}


def build_report(commands: list[CommandDescriptor]) -> BreakingChangeReport:
    """Scan every command and merge the results into one report."""
    report: BreakingChangeReport = {}
    for command in commands:
        changes = scan_command(command)
        if changes:
            merge_breaking_changes(report, {command.name: changes})
    return report
