"""
Custom exceptions for upcoming-changes with helpful error messages.
"""

from pathlib import Path


class UpcomingChangesError(Exception):
    """Base exception for upcoming-changes errors."""

    def __init__(self, message: str, suggestion: str = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.message)

    def __str__(self):
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class ArtifactError(UpcomingChangesError):
    """Errors related to reading build artifacts."""

    pass


class MissingArtifactError(ArtifactError):
    """A module directory, manifest or component file does not exist."""

    def __init__(self, path: str | Path, kind: str = "artifact"):
        self.path = Path(path)
        self.kind = kind
        message = f"Missing {kind}: {path}"
        suggestion = (
            "Build the modules before generating the report:\n"
            "  the artifacts directory must contain <Module>/<Module>.psd1\n\n"
            "Check the path with:\n"
            f"  ls -l {path}"
        )
        super().__init__(message, suggestion)


class ManifestParseError(ArtifactError):
    """Module manifest could not be parsed."""

    def __init__(self, path: str | Path, error_details: str):
        message = f"Invalid module manifest {path}: {error_details}"
        suggestion = (
            "The manifest must be a PowerShell data file containing a single\n"
            "hashtable literal, for example:\n"
            "  @{ ModuleVersion = '1.0.0'; RootModule = './Az.Widget.psm1' }"
        )
        super().__init__(message, suggestion)


class ScriptParseError(ArtifactError):
    """Script component could not be parsed."""

    def __init__(self, error_details: str, path: str | Path = None):
        self.details = error_details
        self.path = Path(path) if path else None
        message = f"Failed to parse script: {error_details}"
        if path:
            message = f"Failed to parse script {path}: {error_details}"
        super().__init__(message)


class MetadataFormatError(ArtifactError):
    """Binary component metadata is unreadable or malformed."""

    def __init__(self, error_details: str, path: str | Path = None):
        self.details = error_details
        message = f"Unreadable component metadata: {error_details}"
        if path:
            message = f"Unreadable component metadata in {path}: {error_details}"

        suggestion = (
            "Binary components must be .NET assemblies produced by the module build.\n"
            "Rebuild the module and make sure the file is not truncated."
        )
        super().__init__(message, suggestion)


class MarkerError(UpcomingChangesError):
    """Errors related to breaking-change marker attributes."""

    pass


class MarkerContractError(MarkerError):
    """A marker attribute cannot produce its breaking-change message."""

    def __init__(self, type_name: str, reason: str = None):
        self.type_name = type_name
        message = f"Marker '{type_name}' does not provide a breaking-change message"
        if reason:
            message = f"{message}: {reason}"

        suggestion = (
            "Breaking-change markers must either carry a ChangeDescription or be one\n"
            "of the known marker types:\n"
            "  - GenericBreakingChange\n"
            "  - CmdletBreakingChange\n"
            "  - OutputBreakingChange\n"
            "  - ParameterBreakingChange\n"
            "  - ParameterSetBreakingChange"
        )
        super().__init__(message, suggestion)


class ConfigurationError(UpcomingChangesError):
    """Configuration file errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Configuration file is invalid."""

    def __init__(self, error_details: str):
        message = f"Invalid configuration file: {error_details}"

        suggestion = (
            "Fix upcoming-changes.yaml or remove it to use the defaults:\n"
            "  output_file: UpcommingBreakingChanges.md\n"
            "  components:\n"
            "    binary_pattern: '*.private.dll'\n"
            "    script_pattern: '*.psm1'"
        )
        super().__init__(message, suggestion)


def format_error_for_cli(error: Exception) -> str:
    """
    Format an exception for CLI display with helpful information.

    Args:
        error: The exception to format

    Returns:
        Formatted error message string
    """
    if isinstance(error, UpcomingChangesError):
        output = f"[red]Error:[/red] {error.message}"
        if error.suggestion:
            output += f"\n\n[yellow]{error.suggestion}[/yellow]"
        return output
    else:
        return f"[red]Error:[/red] {str(error)}"
