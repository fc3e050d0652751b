"""Display components for CLI using Rich."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from monteur.models.pipeline import PipelineResult

console = Console()
error_console = Console(stderr=True)


def show_success(title: str, message: str) -> None:
    """Display a success message."""
    console.print()
    console.print(
        Panel(
            f"[bold green]{escape(message)}[/]",
            title=f"[bold]{title}[/]",
            border_style="green",
        )
    )


def show_error(title: str, message: str) -> None:
    """Display an error message on stderr."""
    error_console.print()
    error_console.print(
        Panel(
            f"[bold red]{escape(message)}[/]",
            title=f"[bold]{escape(title)}[/]",
            border_style="red",
        )
    )


def show_result(result: PipelineResult) -> None:
    """Display a successful pipeline run in a table.

    Args:
        result: Result of the finished run.
    """
    table = Table(title="[bold]Build Result[/]", show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Source", escape(result.request.source_url))
    if result.variant:
        table.add_row("Build System", result.variant.value)
    if result.outcome:
        table.add_row("Build Time", f"{result.outcome.duration_seconds:.1f}s")
    if result.artifact:
        table.add_row("Artifact", escape(result.artifact.name))
        table.add_row("Module", escape(result.artifact.module))
    if result.published:
        table.add_row("Published To", escape(str(result.published.path)))
        table.add_row("Size", f"{result.published.size:,} bytes")

    console.print()
    console.print(table)
