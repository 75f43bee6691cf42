"""
CLI entry point for upcoming-changes.
"""

import logging
from functools import wraps
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from upcoming_changes.aggregate import locate_module
from upcoming_changes.config import load_settings
from upcoming_changes.driver import (
    discover_modules,
    export_breaking_changes,
    get_module_breaking_changes,
)
from upcoming_changes.exceptions import UpcomingChangesError, format_error_for_cli
from upcoming_changes.report import FORMATS, dump_structured
from upcoming_changes.util.progress import show_summary, track_progress

app = typer.Typer(
    name="upcoming-changes",
    help="Generate upcoming breaking-change documentation from built cmdlet modules",
    add_completion=False,
)
console = Console()
logger = logging.getLogger(__name__)


def handle_errors(func):
    """Decorator to handle exceptions in CLI commands with nice formatting."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except UpcomingChangesError as e:
            console.print(format_error_for_cli(e))
            raise typer.Exit(1)

    return wrapper


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Upcoming breaking-change report generator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.command()
@handle_errors
def export(
    artifacts: Path = typer.Option(..., "--artifacts", help="Directory holding the built modules"),
    output: Path = typer.Option(None, "--output", help="Report file (default from config)"),
    config: Path = typer.Option(None, "--config", help="Configuration file"),
):
    """Write the Markdown report for every module under the artifacts directory."""
    settings = load_settings(config)
    modules = discover_modules(artifacts)

    if not modules:
        console.print(f"[yellow]No modules found under {artifacts}[/yellow]")

    with track_progress("Scanning modules", total=len(modules)) as (progress, task):

        def advance(module_name: str) -> None:
            progress.update(task, advance=1, description=f"Scanned {module_name}")

        report_file = export_breaking_changes(
            artifacts, output_file=output, settings=settings, on_module=advance
        )

    console.print(f"[green]✓ Scanned {len(modules)} module(s)[/green]")
    console.print(f"[green]✓ Report written to {report_file}[/green]")


@app.command()
@handle_errors
def module(
    name: str = typer.Argument(..., help="Module name, e.g. Az.Widget"),
    artifacts: Path = typer.Option(..., "--artifacts", help="Directory holding the built modules"),
    fmt: str = typer.Option("json", "--format", help=f"Output format ({'|'.join(FORMATS)})"),
    config: Path = typer.Option(None, "--config", help="Configuration file"),
):
    """Print the structured breaking-change report of one module."""
    if fmt not in FORMATS:
        console.print(f"[red]Error: Unsupported format '{fmt}'[/red]")
        raise typer.Exit(1)

    settings = load_settings(config)
    report = get_module_breaking_changes(name, artifacts, settings)
    # Plain print so the output stays machine-readable
    print(dump_structured(report, fmt))


@app.command(name="list")
@handle_errors
def list_modules(
    artifacts: Path = typer.Option(..., "--artifacts", help="Directory holding the built modules"),
    config: Path = typer.Option(None, "--config", help="Configuration file"),
):
    """List the modules and components found under the artifacts directory."""
    settings = load_settings(config)
    modules = discover_modules(artifacts)
    if not modules:
        console.print(f"[yellow]No modules found under {artifacts}[/yellow]")
        return

    table = Table(title="Modules")
    table.add_column("Module", style="cyan")
    table.add_column("Version")
    table.add_column("Binary", justify="right")
    table.add_column("Script", justify="right")

    binaries = scripts = 0
    for module_dir in modules:
        layout = locate_module(module_dir, settings)
        binaries += len(layout.binaries)
        scripts += len(layout.scripts)
        table.add_row(
            layout.name,
            layout.manifest.version or "-",
            str(len(layout.binaries)),
            str(len(layout.scripts)),
        )

    console.print(table)
    show_summary(
        "Artifacts",
        {"Modules": len(modules), "Binary components": binaries, "Script components": scripts},
    )


if __name__ == "__main__":
    app()
