"""
Entry points for generating breaking-change reports from build artifacts.

The artifacts root holds one directory per built module:

    <root>/<Module>/<Module>.psd1
    <root>/<Module>/bin/<Module>.private.dll
    <root>/<Module>/custom/<Module>.custom.psm1
"""

import logging
from collections.abc import Callable
from pathlib import Path

from upcoming_changes.aggregate import aggregate_module
from upcoming_changes.config import Settings
from upcoming_changes.exceptions import MissingArtifactError
from upcoming_changes.models import BreakingChangeReport
from upcoming_changes.report import render_document
from upcoming_changes.util.files import write_text

logger = logging.getLogger(__name__)


def discover_modules(artifacts_root: str | Path) -> list[Path]:
    """
    Return the module directories under the artifacts root.

    A directory counts as a module only if it holds ``<Name>/<Name>.psd1``;
    other directories are skipped.

    Raises:
        MissingArtifactError: If the artifacts root does not exist
    """
    artifacts_root = Path(artifacts_root)
    if not artifacts_root.is_dir():
        raise MissingArtifactError(artifacts_root, "artifacts directory")

    modules = []
    for candidate in sorted(p for p in artifacts_root.iterdir() if p.is_dir()):
        if (candidate / f"{candidate.name}.psd1").is_file():
            modules.append(candidate)
        else:
            logger.debug(f"Skipping {candidate.name}: no module manifest")
    return modules


def collect_reports(
    artifacts_root: str | Path,
    settings: Settings | None = None,
    on_module: Callable[[str], None] | None = None,
) -> dict[str, BreakingChangeReport]:
    """
    Aggregate every module under the artifacts root.

    Args:
        artifacts_root: Directory holding the built modules
        settings: Component patterns; defaults are used when omitted
        on_module: Called with each module name once it has been scanned

    Returns:
        Mapping of module name to its report, in discovery order
    """
    reports = {}
    for module_dir in discover_modules(artifacts_root):
        reports[module_dir.name] = aggregate_module(module_dir, settings)
        if on_module is not None:
            on_module(module_dir.name)
    return reports


def export_breaking_changes(
    artifacts_root: str | Path,
    output_file: str | Path | None = None,
    settings: Settings | None = None,
    on_module: Callable[[str], None] | None = None,
) -> Path:
    """
    Write the Markdown report for all modules under the artifacts root.

    Args:
        artifacts_root: Directory holding the built modules
        output_file: Report path; relative paths are resolved against the
            current directory. Defaults to the configured output file name.
        settings: Configuration; defaults are used when omitted
        on_module: Called with each module name once it has been scanned

    Returns:
        Path of the written report
    """
    settings = settings or Settings()
    output_path = Path.cwd() / Path(output_file or settings.output_file)

    document = render_document(collect_reports(artifacts_root, settings, on_module))
    write_text(output_path, document)
    logger.info(f"Wrote {output_path}")
    return output_path


def get_module_breaking_changes(
    module_name: str, artifacts_root: str | Path, settings: Settings | None = None
) -> BreakingChangeReport:
    """
    Return the structured report of a single module.

    Raises:
        MissingArtifactError: If the module directory or its manifest is missing
    """
    return aggregate_module(Path(artifacts_root) / module_name, settings)
