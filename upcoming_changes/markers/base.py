"""
Base marker interface for upcoming breaking changes.

Every breaking-change marker attached to a command or parameter is turned into
an instance of a BreakingChangeMarker subclass. Subclasses only decide the
attribute-specific part of the message; the shared fields (effective versions,
effective date, usage change) are rendered here.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, fields
from typing import Any, ClassVar

from upcoming_changes.exceptions import MarkerContractError

logger = logging.getLogger(__name__)

# Named attribute arguments, lower-cased, mapped to dataclass fields.
# Misspellings are the ones used by the attribute classes themselves.
NAMED_ARGUMENT_FIELDS = {
    "changedescription": "change_description",
    "oldway": "old_way",
    "newway": "new_way",
    "deprecatebyazversion": "deprecate_by_az_version",
    "deprecatebyversion": "deprecate_by_version",
    "changeinefectbydate": "change_in_effect_by_date",
    "changeineffectbydate": "change_in_effect_by_date",
    "replacementcmdletname": "replacement_cmdlet_name",
    "deprecatedcmdletoutputtype": "deprecated_output_type",
    "replacementcmdletoutputtype": "replacement_output_type",
    "deprecatedoutputproperties": "deprecated_output_properties",
    "newoutputproperties": "new_output_properties",
    "nameofparameterchanging": "parameter_name",
    "oldparamatertype": "old_parameter_type",
    "oldparametertype": "old_parameter_type",
    "newparametertype": "new_parameter_type",
    "replacementcmdletparametername": "replacement_parameter_name",
    "isbecomingmandatory": "is_becoming_mandatory",
    "changedparameterset": "changed_parameter_sets",
}


@dataclass
class BreakingChangeMarker(ABC):
    """
    Abstract base class for all breaking-change markers.

    A marker produces its message in one of two equivalent ways:

    - ``describe()`` returns the whole message as one string
    - ``print_info(write)`` calls ``write`` once per message fragment

    Concatenating the fragments passed to ``write`` yields exactly ``describe()``.

    Example:
        >>> marker = GenericBreakingChange(message="Removed in next major version")
        >>> marker.describe()
        'Removed in next major version'
    """

    marker_name: ClassVar[str] = ""
    aliases: ClassVar[tuple[str, ...]] = ()
    positional_fields: ClassVar[tuple[str, ...]] = ()

    deprecate_by_az_version: str | None = None
    deprecate_by_version: str | None = None
    change_in_effect_by_date: str | None = None
    change_description: str | None = None
    old_way: str | None = None
    new_way: str | None = None

    @classmethod
    def from_arguments(
        cls, arguments: Sequence[Any] = (), named_arguments: Mapping[str, Any] | None = None
    ) -> "BreakingChangeMarker":
        """
        Build a marker from constructor-style attribute arguments.

        Args:
            arguments: Positional constructor arguments, in declaration order
            named_arguments: Named (property) arguments, matched case-insensitively

        Returns:
            Marker instance

        Raises:
            MarkerContractError: If more positional arguments are given than the
                marker type accepts
        """
        if len(arguments) > len(cls.positional_fields):
            raise MarkerContractError(
                cls.marker_name,
                f"expected at most {len(cls.positional_fields)} positional "
                f"argument(s), got {len(arguments)}",
            )

        values = dict(zip(cls.positional_fields, arguments))
        known = {f.name for f in fields(cls)}
        for key, value in (named_arguments or {}).items():
            field_name = NAMED_ARGUMENT_FIELDS.get(key.lower())
            if field_name is None or field_name not in known:
                logger.debug(f"Ignoring argument {key} on {cls.marker_name}")
                continue
            values[field_name] = value

        return cls(**values)

    @abstractmethod
    def attribute_specific_message(self) -> str:
        """
        Return the part of the message that depends on the marker type.

        Returns:
            Message string, without effective version or date information
        """
        pass

    def print_info(self, write: Callable[[str], Any]) -> None:
        """Pass the message to ``write`` fragment by fragment."""
        for fragment in self._fragments():
            write(fragment)

    def describe(self) -> str:
        """Return the full breaking-change message."""
        return "".join(self._fragments())

    def _fragments(self) -> Iterator[str]:
        yield self.attribute_specific_message()

        if self.old_way and self.new_way:
            yield (
                "\nCmdlet invocation changes:"
                f"\n    Old Way: {self.old_way}"
                f"\n    New Way: {self.new_way}"
            )
        if self.change_in_effect_by_date:
            yield f"\nThis change will take effect on '{self.change_in_effect_by_date}'."
        if self.deprecate_by_az_version:
            yield (
                "\nThe change is expected to take effect from Az version: "
                f"'{self.deprecate_by_az_version}'."
            )
        if self.deprecate_by_version:
            yield (
                "\nThe change is expected to take effect from version: "
                f"'{self.deprecate_by_version}'."
            )
