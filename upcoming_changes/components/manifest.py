"""
Module manifest (.psd1) reader.

A manifest is a PowerShell data file holding a single hashtable literal. Only
the manifest's presence and a few informational keys matter for the report;
components are located on disk by the aggregator.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from upcoming_changes.components.powershell import parse_literal, strip_comments
from upcoming_changes.exceptions import ManifestParseError, MissingArtifactError, ScriptParseError
from upcoming_changes.util.files import read_text

logger = logging.getLogger(__name__)


@dataclass
class ModuleManifest:
    """Parsed module manifest."""

    path: Path
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.path.stem

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a manifest key case-insensitively, like PowerShell does."""
        for existing, value in self.data.items():
            if existing.lower() == key.lower():
                return value
        return default

    @property
    def version(self) -> str | None:
        value = self.get("ModuleVersion")
        return str(value) if value is not None else None


def load_manifest(path: str | Path) -> ModuleManifest:
    """
    Load and parse a module manifest.

    Args:
        path: Path to ``<Module>.psd1``

    Returns:
        Parsed ModuleManifest

    Raises:
        MissingArtifactError: If the manifest does not exist
        ManifestParseError: If the manifest is not a hashtable literal
    """
    path = Path(path)
    if not path.is_file():
        raise MissingArtifactError(path, "module manifest")

    try:
        data = parse_literal(strip_comments(read_text(path)))
    except ScriptParseError as e:
        raise ManifestParseError(path, e.details) from e

    if not isinstance(data, dict):
        raise ManifestParseError(path, f"expected a hashtable, got {type(data).__name__}")

    manifest = ModuleManifest(path=path, data=data)
    logger.debug(f"Loaded manifest {path.name} (version {manifest.version})")
    return manifest
