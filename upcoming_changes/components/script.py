"""
Script component (.psm1) reader.

Finds the functions a script module exports and normalizes their attributes
into CommandDescriptor instances. Function-level attributes are the ones
written before ``param(``; parameter attributes precede the parameter
variable:

    function Remove-Thing {
        [GenericBreakingChange("Removed in next major version")]
        [CmdletBinding()]
        param(
            [ParameterBreakingChange("Force", IsBecomingMandatory)]
            [Parameter()]
            [switch] $Force
        )
    }

Files dot-sourced by the module (explicitly, or with the
``Get-ChildItem ... -Include '*.ps1' | ForEach-Object { . $_.FullName }``
idiom) are read as part of it.
"""

import logging
import re
from collections.abc import Iterator
from contextlib import contextmanager
from fnmatch import fnmatch
from pathlib import Path

from upcoming_changes.components.powershell import (
    find_closing,
    parse_literal,
    split_top_level,
    strip_comments,
)
from upcoming_changes.exceptions import MissingArtifactError, ScriptParseError
from upcoming_changes.markers import marker_type_for
from upcoming_changes.models import (
    ALL_PARAMETER_SETS,
    AttributeSpec,
    CommandDescriptor,
    ParameterDescriptor,
)
from upcoming_changes.util.files import read_text

logger = logging.getLogger(__name__)

_FUNCTION_PATTERN = re.compile(
    r"\bfunction\s+(?:(?:global|script|private|local):)?([\w-]+)\s*(?:\([^)]*\)\s*)?\{",
    re.IGNORECASE,
)
_PARAM_PATTERN = re.compile(r"param\s*\(", re.IGNORECASE)
_ATTRIBUTE_PATTERN = re.compile(r"\s*([\w.`]+)\s*\((.*)\)\s*$", re.DOTALL)
_NAMED_ARGUMENT_PATTERN = re.compile(r"\s*(\w+)\s*=(?!=)\s*(.*)$", re.DOTALL)
_SWITCH_ARGUMENT_PATTERN = re.compile(r"[A-Za-z_]\w*")
_PARAMETER_NAME_PATTERN = re.compile(r"\$\{?([\w:]+)\}?")
_DOT_SOURCE_ALL_PATTERN = re.compile(
    r"Get-ChildItem\b[^\n]*\*\.ps1.*?\.\s+\$_\.FullName", re.IGNORECASE | re.DOTALL
)
_DOT_SOURCE_PATTERN = re.compile(
    r"^\s*\.\s+(?:\(\s*Join-Path\s+\$PSScriptRoot\s+['\"]([^'\"]+)['\"]\s*\)"
    r"|['\"]?\$PSScriptRoot[\\/]([^'\"\s]+)['\"]?)",
    re.IGNORECASE | re.MULTILINE,
)
_EXPORT_PATTERN = re.compile(r"Export-ModuleMember\b([^\n]*)", re.IGNORECASE)
_EXPORT_FUNCTION_PATTERN = re.compile(r"-Function\s+(.*?)(?=\s+-\w+|\s*$)", re.IGNORECASE)


def parse_attribute(text: str) -> AttributeSpec | None:
    """
    Parse the text between the brackets of an attribute.

    Only breaking-change markers have their arguments decoded as literals.
    Arguments of other attributes, such as ``ValidateRange(1, [int]::MaxValue)``,
    may be arbitrary expressions and are kept as stripped source text.

    Args:
        text: Attribute text, e.g. ``Parameter(Mandatory, ParameterSetName='Set1')``

    Returns:
        AttributeSpec, or None for type constraints such as ``string[]``
    """
    match = _ATTRIBUTE_PATTERN.match(text)
    if not match:
        return None

    type_name = match.group(1).replace("`", "")
    decode = parse_literal if marker_type_for(type_name) is not None else str.strip
    arguments = []
    named_arguments = {}
    for part in split_top_level(match.group(2)):
        if not part.strip():
            continue
        named = _NAMED_ARGUMENT_PATTERN.match(part)
        if named:
            named_arguments[named.group(1)] = decode(named.group(2))
        elif _SWITCH_ARGUMENT_PATTERN.fullmatch(part.strip()):
            named_arguments[part.strip()] = True
        else:
            arguments.append(decode(part))

    return AttributeSpec(
        type_name=type_name, arguments=tuple(arguments), named_arguments=named_arguments
    )


def _read_attributes(text: str, pos: int) -> tuple[list[AttributeSpec], int]:
    """Read consecutive ``[...]`` blocks starting at ``pos``."""
    attributes = []
    while True:
        while pos < len(text) and text[pos].isspace():
            pos += 1
        if pos >= len(text) or text[pos] != "[":
            return attributes, pos
        end = find_closing(text, pos)
        spec = parse_attribute(text[pos + 1 : end])
        if spec is not None:
            attributes.append(spec)
        pos = end + 1


def _parameter_declarations(block: str) -> list[str]:
    declarations: list[str] = []
    for fragment in split_top_level(block):
        stripped = fragment.strip()
        if not stripped:
            continue
        # Fragments of a comma-separated default value belong to the previous declaration
        if declarations and not stripped.startswith(("[", "$")):
            declarations[-1] += "," + fragment
        else:
            declarations.append(fragment)
    return declarations


def parse_param_block(block: str) -> list[ParameterDescriptor]:
    """Parse the contents of a ``param(...)`` block."""
    parameters = []
    for declaration in _parameter_declarations(block):
        attributes, pos = _read_attributes(declaration, 0)
        match = _PARAMETER_NAME_PATTERN.match(declaration, pos)
        if not match:
            raise ScriptParseError(f"no parameter name in {declaration.strip()[:60]!r}")
        parameters.append(ParameterDescriptor(name=match.group(1), attributes=attributes))
    return parameters


def parse_function(name: str, body: str, source: Path | None = None) -> CommandDescriptor:
    """
    Build a command descriptor from a function body.

    Args:
        name: Function name
        body: Text between the function's braces, comments removed
        source: File the function was read from

    Returns:
        CommandDescriptor for the function
    """
    attributes, pos = _read_attributes(body, 0)
    param = _PARAM_PATTERN.match(body, pos)
    if not param:
        # Attributes are only valid in front of a param block
        return CommandDescriptor(name=name, source=source)

    open_paren = param.end() - 1
    close_paren = find_closing(body, open_paren)
    parameters = parse_param_block(body[open_paren + 1 : close_paren])

    return CommandDescriptor(
        name=name,
        parameter_set=ALL_PARAMETER_SETS,
        attributes=attributes,
        parameters=parameters,
        source=source,
    )


def iter_functions(text: str, source: Path | None = None) -> Iterator[CommandDescriptor]:
    """Yield the top-level functions defined in comment-free script text."""
    pos = 0
    while True:
        match = _FUNCTION_PATTERN.search(text, pos)
        if not match:
            return
        open_brace = match.end() - 1
        close_brace = find_closing(text, open_brace)
        yield parse_function(match.group(1), text[open_brace + 1 : close_brace], source)
        pos = close_brace + 1


def dot_sourced_files(text: str, script_file: Path) -> list[Path]:
    """
    Return the script files dot-sourced by a module.

    Raises:
        MissingArtifactError: If an explicitly dot-sourced file does not exist
    """
    folder = script_file.parent
    files: list[Path] = []

    if _DOT_SOURCE_ALL_PATTERN.search(text):
        files.extend(sorted(folder.rglob("*.ps1")))

    for match in _DOT_SOURCE_PATTERN.finditer(text):
        relative = (match.group(1) or match.group(2)).replace("\\", "/").lstrip("/")
        path = folder / relative
        if not path.is_file():
            raise MissingArtifactError(path, "dot-sourced script")
        if path not in files:
            files.append(path)

    return files


def exported_function_patterns(text: str) -> list[str] | None:
    """
    Return the function names listed by ``Export-ModuleMember -Function``.

    Returns:
        List of name patterns, or None when exports are not restricted by a
        literal list (no -Function argument, or a computed one)
    """
    patterns: list[str] = []
    restricted = False
    for export in _EXPORT_PATTERN.finditer(text):
        function_argument = _EXPORT_FUNCTION_PATTERN.search(export.group(1))
        if not function_argument:
            continue
        argument = function_argument.group(1).strip()
        if not argument or argument[0] in "($":
            return None
        value = parse_literal(argument)
        patterns.extend(value if isinstance(value, list) else [value])
        restricted = True
    return patterns if restricted else None


@contextmanager
def _parsing(path: Path) -> Iterator[None]:
    """Name ``path`` in parse errors raised inside the block."""
    try:
        yield
    except ScriptParseError as e:
        if e.path is not None:
            raise
        raise ScriptParseError(e.details, path) from e


def _read_script(path: Path) -> tuple[str, list[CommandDescriptor]]:
    with _parsing(path):
        text = strip_comments(read_text(path))
        return text, list(iter_functions(text, path))


def read_script_commands(script_file: str | Path) -> list[CommandDescriptor]:
    """
    Read the commands exported by a script component.

    Args:
        script_file: Path to the ``.psm1`` file

    Returns:
        List of CommandDescriptor, in definition order

    Raises:
        MissingArtifactError: If the script or a dot-sourced file is missing
        ScriptParseError: If a function or attribute cannot be parsed; the
            error names the file it occurred in
    """
    script_file = Path(script_file)
    if not script_file.is_file():
        raise MissingArtifactError(script_file, "script component")

    text, commands = _read_script(script_file)
    for included in dot_sourced_files(text, script_file):
        logger.debug(f"Reading dot-sourced script {included}")
        commands.extend(_read_script(included)[1])

    with _parsing(script_file):
        patterns = exported_function_patterns(text)
    if patterns is not None:
        commands = [
            c for c in commands if any(fnmatch(c.name.lower(), p.lower()) for p in patterns)
        ]

    logger.debug(f"Found {len(commands)} command(s) in {script_file.name}")
    return commands
