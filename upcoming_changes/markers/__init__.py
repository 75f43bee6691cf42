"""
Breaking-change marker types and lookup.

Markers form a closed set: an attribute is a marker only if its type name
(namespace and ``Attribute`` suffix stripped) is one of the known marker
names or aliases.
"""

from upcoming_changes.exceptions import MarkerContractError
from upcoming_changes.markers.base import BreakingChangeMarker
from upcoming_changes.markers.variants import (
    CmdletBreakingChange,
    GenericBreakingChange,
    OutputBreakingChange,
    ParameterBreakingChange,
    ParameterSetBreakingChange,
)
from upcoming_changes.models import AttributeSpec, short_type_name

MARKER_TYPES: tuple[type[BreakingChangeMarker], ...] = (
    GenericBreakingChange,
    CmdletBreakingChange,
    OutputBreakingChange,
    ParameterBreakingChange,
    ParameterSetBreakingChange,
)

_MARKERS_BY_NAME = {
    name.lower(): marker_type
    for marker_type in MARKER_TYPES
    for name in (marker_type.marker_name, *marker_type.aliases)
}


def marker_type_for(type_name: str) -> type[BreakingChangeMarker] | None:
    """Return the marker class for an attribute type name, if it is a marker."""
    return _MARKERS_BY_NAME.get(short_type_name(type_name).lower())


def build_marker(spec: AttributeSpec) -> BreakingChangeMarker | None:
    """
    Turn an attribute into a marker instance.

    Args:
        spec: Attribute as declared on a command or parameter

    Returns:
        Marker instance, or None if the attribute is not a breaking-change marker

    Raises:
        MarkerContractError: If the attribute derives from a marker type but is
            not one of the known marker types
    """
    marker_type = marker_type_for(spec.type_name)
    if marker_type is not None:
        return marker_type.from_arguments(spec.arguments, spec.named_arguments)

    for base_name in spec.base_names:
        if marker_type_for(base_name) is not None:
            raise MarkerContractError(
                spec.type_name, f"unknown marker type derived from {base_name}"
            )
    return None


def find_markers(attributes: list[AttributeSpec]) -> list[BreakingChangeMarker]:
    """Return the markers among ``attributes``, in attachment order."""
    markers = []
    for spec in attributes:
        marker = build_marker(spec)
        if marker is not None:
            markers.append(marker)
    return markers


__all__ = [
    "BreakingChangeMarker",
    "CmdletBreakingChange",
    "GenericBreakingChange",
    "MARKER_TYPES",
    "OutputBreakingChange",
    "ParameterBreakingChange",
    "ParameterSetBreakingChange",
    "build_marker",
    "find_markers",
    "marker_type_for",
]
