"""
Module aggregation.

Locates the components of one built module, reads their commands and merges
the scan results into a single BreakingChangeReport.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from upcoming_changes.components.binary import read_binary_commands
from upcoming_changes.components.manifest import ModuleManifest, load_manifest
from upcoming_changes.components.script import read_script_commands
from upcoming_changes.config import Settings
from upcoming_changes.exceptions import MissingArtifactError
from upcoming_changes.models import BreakingChangeReport
from upcoming_changes.scan import build_report
from upcoming_changes.util.merge import merge_breaking_changes

logger = logging.getLogger(__name__)


@dataclass
class ModuleLayout:
    """Artifacts of one built module."""

    name: str
    root: Path
    manifest: ModuleManifest
    binaries: list[Path] = field(default_factory=list)
    scripts: list[Path] = field(default_factory=list)


def _find_components(root: Path, pattern: str, folders: list[str]) -> list[Path]:
    wanted = {f.lower() for f in folders}
    return sorted(
        path
        for path in root.rglob(pattern)
        if path.is_file() and (not wanted or path.parent.name.lower() in wanted)
    )


def locate_module(module_dir: str | Path, settings: Settings | None = None) -> ModuleLayout:
    """
    Find the manifest and components of a module.

    Args:
        module_dir: ``<artifacts>/<Module>`` directory
        settings: Component patterns; defaults are used when omitted

    Returns:
        ModuleLayout listing the binary and script components

    Raises:
        MissingArtifactError: If the directory or its manifest is missing
    """
    settings = settings or Settings()
    module_dir = Path(module_dir)
    if not module_dir.is_dir():
        raise MissingArtifactError(module_dir, "module directory")

    manifest = load_manifest(module_dir / f"{module_dir.name}.psd1")
    return ModuleLayout(
        name=module_dir.name,
        root=module_dir,
        manifest=manifest,
        binaries=_find_components(module_dir, settings.binary_pattern, settings.binary_dirs),
        scripts=_find_components(module_dir, settings.script_pattern, settings.script_dirs),
    )


def aggregate_module(
    module_dir: str | Path, settings: Settings | None = None
) -> BreakingChangeReport:
    """
    Build the breaking-change report of one module.

    Binary and script components are read separately and merged with the same
    non-destructive rule used inside a command.

    Args:
        module_dir: ``<artifacts>/<Module>`` directory
        settings: Component patterns; defaults are used when omitted

    Returns:
        Report mapping command -> parameter set -> breaking-change info
    """
    layout = locate_module(module_dir, settings)
    logger.info(
        f"Scanning {layout.name} {layout.manifest.version or ''}: "
        f"{len(layout.binaries)} binary, {len(layout.scripts)} script component(s)"
    )

    report: BreakingChangeReport = {}
    for binary in layout.binaries:
        logger.debug(f"Reading binary component {binary}")
        merge_breaking_changes(report, build_report(read_binary_commands(binary)))

    for script in layout.scripts:
        logger.debug(f"Reading script component {script}")
        merge_breaking_changes(report, build_report(read_script_commands(script)))

    return report
