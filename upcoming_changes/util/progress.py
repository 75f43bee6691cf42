"""
Progress and summary display using rich.
"""

from contextlib import contextmanager
from typing import Iterator

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

console = Console()


@contextmanager
def track_progress(description: str, total: int) -> Iterator[tuple[Progress, int]]:
    """
    Context manager yielding a progress bar and its task id.

    Usage:
        with track_progress("Scanning modules", total=3) as (progress, task):
            for module in modules:
                progress.update(task, advance=1)

    Args:
        description: Description shown next to the bar
        total: Total number of steps

    Yields:
        Tuple of (Progress instance, task id)
    """
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    )
    with progress:
        task = progress.add_task(description, total=total)
        yield progress, task


def show_summary(title: str, counts: dict[str, int]) -> None:
    """Print right-aligned counts in a titled panel sized to its content."""
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="cyan")
    grid.add_column(justify="right", style="bold")
    for label, count in counts.items():
        grid.add_row(label, str(count))

    console.print(Panel.fit(grid, title=title, border_style="blue"))
