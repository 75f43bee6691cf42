"""
Binary component (.NET assembly) reader.

Commands in a compiled component are the types carrying a ``CmdletAttribute``;
their parameters are the properties and fields carrying a
``ParameterAttribute``. Attribute arguments are decoded from the metadata
tables with dnfile, without loading or running the assembly.

Attributes that are neither cmdlet, parameter nor breaking-change markers are
not decoded.
"""

import logging
from pathlib import Path
from typing import Any

import dnfile
from pefile import PEFormatError

from upcoming_changes.components.metadata import decode_custom_attribute, parse_method_signature
from upcoming_changes.exceptions import MetadataFormatError, MissingArtifactError
from upcoming_changes.markers import marker_type_for
from upcoming_changes.models import (
    ALL_PARAMETER_SETS,
    AttributeSpec,
    CommandDescriptor,
    ParameterDescriptor,
    short_type_name,
)

logger = logging.getLogger(__name__)

CMDLET_ATTRIBUTE = "Cmdlet"
PARAMETER_ATTRIBUTE = "Parameter"


def command_name(verb: str, noun: str) -> tuple[str, str]:
    """
    Reconstruct a command name from the CmdletAttribute arguments.

    A noun may carry a parameter-set suffix after an underscore; it is stripped
    from the name and returned as the parameter set.

    Example:
        >>> command_name("Get", "Widget_ByName")
        ('Get-Widget', 'ByName')
        >>> command_name("Remove", "Thing")
        ('Remove-Thing', 'AllParameterSets')
    """
    base, _, suffix = noun.partition("_")
    return f"{verb}-{base}", suffix or ALL_PARAMETER_SETS


def _text(item: Any) -> str:
    if item is None:
        return ""
    value = getattr(item, "value", item)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return "" if value is None else str(value)


def _blob(item: Any) -> bytes:
    if item is None:
        return b""
    value = getattr(item, "value", item)
    return b"" if value is None else bytes(value)


def _table_name(index: Any) -> str | None:
    table = getattr(index, "table", None)
    return getattr(table, "name", table)


def _row_index(index: Any) -> int:
    return getattr(index, "row_index", 0) or 0


class AssemblyMetadata:
    """
    Read-only view over the metadata tables of one compiled component.

    Args:
        tables: Metadata tables (``dnPE.net.mdtables``); each table exposes ``rows``
        source: Path of the component, used in descriptors and error messages
    """

    def __init__(self, tables: Any, source: Path | None = None):
        self.tables = tables
        self.source = source

        self._method_owner: dict[int, int] = {}
        self._fields_by_type: dict[int, list[int]] = {}
        for type_row, typedef in enumerate(self.rows("TypeDef"), start=1):
            for method in getattr(typedef, "MethodList", None) or []:
                self._method_owner[_row_index(method)] = type_row
            self._fields_by_type[type_row] = [
                _row_index(f) for f in getattr(typedef, "FieldList", None) or []
            ]

        self._properties_by_type: dict[int, list[int]] = {}
        for property_map in self.rows("PropertyMap"):
            self._properties_by_type.setdefault(_row_index(property_map.Parent), []).extend(
                _row_index(p) for p in property_map.PropertyList or []
            )

        self._attributes = self._read_custom_attributes()

    def rows(self, table_name: str) -> list[Any]:
        table = getattr(self.tables, table_name, None)
        if table is None:
            return []
        return list(getattr(table, "rows", None) or [])

    def _row(self, table_name: str, row_index: int) -> Any:
        rows = self.rows(table_name)
        if not 1 <= row_index <= len(rows):
            raise MetadataFormatError(f"{table_name} row {row_index} out of range", self.source)
        return rows[row_index - 1]

    def type_name(self, table_name: str | None, row_index: int) -> str:
        """Return the full name of a TypeDef or TypeRef row."""
        if table_name not in ("TypeDef", "TypeRef") or not row_index:
            return ""
        row = self._row(table_name, row_index)
        namespace = _text(row.TypeNamespace)
        name = _text(row.TypeName)
        return f"{namespace}.{name}" if namespace else name

    def base_names(self, table_name: str | None, row_index: int) -> tuple[str, ...]:
        """Return the names of a type's ancestors, as far as this assembly defines them."""
        names = []
        seen = set()
        while table_name == "TypeDef" and row_index and row_index not in seen:
            seen.add(row_index)
            extends = self._row("TypeDef", row_index).Extends
            table_name, row_index = _table_name(extends), _row_index(extends)
            name = self.type_name(table_name, row_index)
            if not name:
                break
            names.append(name)
        return tuple(names)

    def _is_relevant(self, type_name: str, base_names: tuple[str, ...]) -> bool:
        if short_type_name(type_name) in (CMDLET_ATTRIBUTE, PARAMETER_ATTRIBUTE):
            return True
        return any(marker_type_for(name) is not None for name in (type_name, *base_names))

    def _constructor(self, index: Any) -> tuple[str | None, int, Any]:
        table_name, row_index = _table_name(index), _row_index(index)
        if table_name == "MethodDef":
            method = self._row("MethodDef", row_index)
            return "TypeDef", self._method_owner.get(row_index, 0), method.Signature
        if table_name == "MemberRef":
            member = self._row("MemberRef", row_index)
            return _table_name(member.Class), _row_index(member.Class), member.Signature
        raise MetadataFormatError(
            f"unexpected attribute constructor table {table_name}", self.source
        )

    def _read_custom_attributes(self) -> dict[tuple[str | None, int], list[AttributeSpec]]:
        attributes: dict[tuple[str | None, int], list[AttributeSpec]] = {}
        for row in self.rows("CustomAttribute"):
            type_table, type_row, signature = self._constructor(row.Type)
            type_name = self.type_name(type_table, type_row)
            base_names = self.base_names(type_table, type_row)
            if not self._is_relevant(type_name, base_names):
                continue

            arguments, named_arguments = decode_custom_attribute(
                _blob(row.Value), parse_method_signature(_blob(signature))
            )
            key = (_table_name(row.Parent), _row_index(row.Parent))
            attributes.setdefault(key, []).append(
                AttributeSpec(
                    type_name=type_name,
                    arguments=tuple(arguments),
                    named_arguments=named_arguments,
                    base_names=base_names,
                )
            )
        return attributes

    def attributes_of(self, table_name: str, row_index: int) -> list[AttributeSpec]:
        return list(self._attributes.get((table_name, row_index), []))

    def _parameters(self, type_row: int) -> list[ParameterDescriptor]:
        parameters = []
        for table_name, members in (
            ("Property", self._properties_by_type.get(type_row, [])),
            ("Field", self._fields_by_type.get(type_row, [])),
        ):
            for member_row in members:
                attributes = self.attributes_of(table_name, member_row)
                if not any(a.short_name == PARAMETER_ATTRIBUTE for a in attributes):
                    continue
                name = _text(self._row(table_name, member_row).Name)
                parameters.append(ParameterDescriptor(name=name, attributes=attributes))
        return parameters

    def commands(self) -> list[CommandDescriptor]:
        """Return one descriptor per type carrying a CmdletAttribute."""
        commands = []
        for type_row, typedef in enumerate(self.rows("TypeDef"), start=1):
            attributes = self.attributes_of("TypeDef", type_row)
            cmdlet = next((a for a in attributes if a.short_name == CMDLET_ATTRIBUTE), None)
            if cmdlet is None:
                continue
            if len(cmdlet.arguments) < 2:
                raise MetadataFormatError(
                    f"CmdletAttribute on {_text(typedef.TypeName)} has no verb and noun",
                    self.source,
                )

            name, parameter_set = command_name(*cmdlet.arguments[:2])

            # Parameters declared on base classes in this assembly are inherited
            parameters = self._parameters(type_row)
            for base_row in self._base_rows(type_row):
                parameters.extend(self._parameters(base_row))

            commands.append(
                CommandDescriptor(
                    name=name,
                    parameter_set=parameter_set,
                    attributes=[a for a in attributes if a is not cmdlet],
                    parameters=parameters,
                    source=self.source,
                )
            )
        return commands

    def _base_rows(self, type_row: int) -> list[int]:
        rows = []
        extends = self._row("TypeDef", type_row).Extends
        while _table_name(extends) == "TypeDef" and _row_index(extends) not in rows:
            rows.append(_row_index(extends))
            extends = self._row("TypeDef", rows[-1]).Extends
        return rows


def read_binary_commands(assembly_file: str | Path) -> list[CommandDescriptor]:
    """
    Read the commands defined in a compiled component.

    Args:
        assembly_file: Path to the ``*.private.dll`` assembly

    Returns:
        List of CommandDescriptor, in type definition order

    Raises:
        MissingArtifactError: If the file does not exist
        MetadataFormatError: If the file is not a readable .NET assembly
    """
    assembly_file = Path(assembly_file)
    if not assembly_file.is_file():
        raise MissingArtifactError(assembly_file, "binary component")

    try:
        pe = dnfile.dnPE(str(assembly_file))
    except (OSError, PEFormatError) as e:
        raise MetadataFormatError(str(e), assembly_file) from e

    try:
        if pe.net is None or pe.net.mdtables is None:
            raise MetadataFormatError("no .NET metadata", assembly_file)
        try:
            commands = AssemblyMetadata(pe.net.mdtables, assembly_file).commands()
        except MetadataFormatError as e:
            raise MetadataFormatError(e.details, assembly_file) from e
    finally:
        pe.close()

    logger.debug(f"Found {len(commands)} command(s) in {assembly_file.name}")
    return commands
