"""Display functions for tinydb-migrator CLI output."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .constants import DATETIME_DISPLAY_FORMAT, NO_VERSION
from .controller import MigrationResult, MigrationStatus
from .engine import Applied
from .error_guidance import GuidanceProvider
from .errors import MigratorError


def _format_version(version: int) -> str:
    return "none" if version == NO_VERSION else str(version)


def display_result(command: str, result: MigrationResult, console: Console) -> None:
    """
    Display the outcome of a controller operation.

    Args:
        command: Command that produced the result
        result: Versions before and after the command
        console: Rich console instance for output
    """
    old = _format_version(result.old_version)
    new = _format_version(result.new_version)

    if result.old_version == result.new_version:
        console.print(f"[green]✓[/green] {command}: version {new}")
    else:
        console.print(f"[green]✓[/green] {command}: {old} -> [cyan]{new}[/cyan]")


def display_status(status: MigrationStatus, console: Console) -> None:
    """
    Display every known migration with its applied state.

    Args:
        status: Reconciled history and registry
        console: Rich console instance for output
    """
    table = Table(title="Migrations")
    table.add_column("Version", style="cyan", justify="right")
    table.add_column("Name", style="magenta")
    table.add_column("State")
    table.add_column("Applied", style="yellow")

    for step in status.steps:
        if isinstance(step, Applied):
            state = "[green]✓ Applied[/green]" if step.migration is not None else "[red]✗ Missing in code[/red]"
            applied_at = step.record.applied_at.strftime(DATETIME_DISPLAY_FORMAT)
        else:
            state = "[yellow]○ Pending[/yellow]"
            applied_at = ""

        table.add_row(str(step.version), step.name, state, applied_at)

    console.print(table)
    console.print(f"Current version: [cyan]{_format_version(status.current_version)}[/cyan]")

    if status.last_inserted is not None and status.last_inserted.version != status.current_version:
        console.print(
            f"[yellow]Note:[/yellow] last recorded migration is {status.last_inserted.version}, "
            "which is not the highest recorded version"
        )

    if status.orphaned:
        versions = ", ".join(str(record.version) for record in status.orphaned)
        console.print(
            Panel(
                f"Recorded migrations not found in code: {versions}\n"
                "'reset' refuses to run until they are restored or the history is rewritten.",
                title="History Warning",
                border_style="yellow",
            )
        )


def display_error(error: MigratorError, console: Console) -> None:
    """
    Display an error message followed by guidance when there is any.

    Args:
        error: Error raised by the migrator
        console: Rich console instance for output
    """
    console.print(f"[red]Error:[/red] {error}")

    guidance = GuidanceProvider.for_error(error)
    if guidance is not None:
        console.print()
        console.print(GuidanceProvider.format_guidance(guidance))
