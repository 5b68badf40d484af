"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output.
Uses Rich library for progress bars, spinners, colored output, and formatted
text. Supports verbosity levels and --no-color flag.
"""

from contextlib import contextmanager
from typing import Iterator, List

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)
from rich.spinner import Spinner

from src.content.schema_validator import ValidationResult
from src.hierarchy.models import CrossReferenceIndex


class OutputHandler:
    """Handles all terminal output using Rich library.

    Provides methods for displaying messages, progress bars, spinners,
    and summaries with color coding and verbosity level control.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Operation completed")
        >>> with handler.spinner("Processing..."):
        ...     pass
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
        """
        self.verbosity = verbosity
        self.console = Console(
            force_terminal=not no_color,
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        """Display success message in green."""
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def error(self, message: str) -> None:
        """Display error message in red."""
        self.console.print(f"[red]✗[/red] {escape(message)}", style="red")

    def warning(self, message: str) -> None:
        """Display warning message in yellow."""
        self.console.print(f"[yellow]⚠[/yellow] {escape(message)}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(escape(message))

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2)."""
        if self.verbosity >= 2:
            self.console.print(f"[dim]{escape(message)}[/dim]")

    def print(self, message: str) -> None:
        """Display message without formatting."""
        self.console.print(escape(message))

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display spinner for single operations.

        Example:
            >>> with handler.spinner("Fetching hierarchy..."):
            ...     pass
        """
        spinner = Spinner("dots", text=message)
        with Live(spinner, console=self.console, refresh_per_second=10):
            yield

    @contextmanager
    def progress_bar(self) -> Iterator[Progress]:
        """Display progress bar for multi-item operations.

        The total is usually not known up front, so tasks are added by the
        caller once it is.

        Example:
            >>> with handler.progress_bar() as progress:
            ...     task = progress.add_task("Indexing pages", total=10)
            ...     progress.update(task, advance=1)
        """
        progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeRemainingColumn(),
            console=self.console,
        )
        with progress:
            yield progress

    def print_index_summary(
        self,
        index: CrossReferenceIndex,
        total: int,
        cancelled: bool = False,
    ) -> None:
        """Display the result of an indexing run.

        Args:
            index: The (possibly partial) cross-reference index
            total: Number of pages in scope
            cancelled: Whether the run was cancelled
        """
        self.console.print("\n[bold]Index Summary:[/bold]")

        if self.verbosity >= 1:
            for hyper_id, entry in sorted(index.items(), key=lambda item: item[1].full_path):
                self.console.print(
                    f"  [dim]{escape(hyper_id)}[/dim] {escape(entry.full_path)} / {escape(entry.name)}"
                )

        self.console.print(f"  [green]✓[/green] Indexed: {len(index)} of {total} page(s)")

        if cancelled:
            self.console.print("\n[yellow]Indexing cancelled, index is partial[/yellow]")
        elif total == 0:
            self.console.print("\n[yellow]No pages to index[/yellow]")
        else:
            self.console.print("\n[green]Indexing completed successfully[/green]")

    def print_validation_summary(self, result: ValidationResult) -> None:
        """Display the result of a schema validation."""
        self.console.print("\n[bold]Validation Summary:[/bold]")

        for correction in result.corrections:
            self.console.print(
                f"  [blue]↻[/blue] {escape(correction.element_path)}/@{escape(correction.attribute)}: "
                f"{escape(correction.original)} → {escape(correction.corrected)}"
            )

        errors: List[str] = result.errors
        for message in errors:
            self.console.print(f"  [red]✗[/red] {escape(message)}")

        if result.valid:
            self.console.print("\n[green]Content is valid[/green]")
        else:
            self.console.print(f"\n[red]Content is invalid ({len(errors)} error(s))[/red]")
