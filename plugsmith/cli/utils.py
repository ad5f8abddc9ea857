# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""CLI utility functions for output formatting and user interaction.

Provides standardized functions for:
- Progress indicators
- User messaging (success, warning)
"""

from contextlib import contextmanager
from typing import Iterator

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TaskID, TextColumn

console = Console()
err_console = Console(stderr=True)


@contextmanager
def progress_spinner(description: str, transient: bool = True, no_progress: bool = False) -> Iterator[TaskID | None]:
    """Display a progress spinner during long-running operations.

    Args:
        description: Text to display next to the spinner
        transient: If True, spinner disappears after completion
        no_progress: If True, disable spinner and yield None
    """
    if no_progress:
        yield None
        return

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=err_console,
        transient=transient
    ) as progress:
        task = progress.add_task(description, total=None)
        try:
            yield task
        finally:
            progress.update(task, completed=True)


def success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def warning(message: str, details: list[str] | None = None) -> None:
    """Print a warning message with optional detail bullets to stderr."""
    err_console.print(f"[yellow]Warning:[/yellow] {message}")
    if details:
        for detail in details:
            err_console.print(f"  • {detail}")
