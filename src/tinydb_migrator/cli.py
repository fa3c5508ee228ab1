"""CLI interface for tinydb-migrator."""

import sys

# Runtime version check - must be before other imports
if sys.version_info < (3, 11):
    print("Error: tinydb-migrator requires Python 3.11 or higher", file=sys.stderr)
    version = f"Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    print(f"Current version: {version}", file=sys.stderr)
    sys.exit(1)

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

import click
from rich.console import Console
from tinydb import TinyDB

from . import __version__
from .config import Config, load_config
from .controller import MigrationResult, Migrator
from .display import display_error, display_result, display_status
from .errors import MigratorError
from .loader import load_migrations
from .utils import configure_logging, ensure_dir

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Custom config file path",
)
@click.option(
    "--database",
    type=click.Path(dir_okay=False, path_type=Path),
    help="TinyDB database file (overrides config)",
)
@click.option("--table", help="Table holding the migration history (overrides config)")
@click.option(
    "--migrations",
    "migrations_source",
    help="Migrations to use, as 'package.module:attribute' (overrides config)",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path | None,
    database: Path | None,
    table: str | None,
    migrations_source: str | None,
    verbose: bool,
) -> None:
    """tinydb-migrator: Apply and revert versioned migrations on a TinyDB database."""
    configure_logging(verbose)
    ctx.ensure_object(dict)

    # Load configuration
    try:
        loaded = load_config(config)
    except (FileNotFoundError, ValueError, OSError, PermissionError) as e:
        console.print(f"[red]Error:[/red] Configuration: {e}")
        sys.exit(1)

    # Command line options take precedence over the config file
    overrides: dict = {}
    if database is not None:
        overrides["path"] = database
    if table is not None:
        overrides["table"] = table
    store = loaded.store.model_copy(update=overrides)

    migrations = loaded.migrations
    if migrations_source is not None:
        migrations = migrations.model_copy(update={"source": migrations_source})

    ctx.obj["config"] = Config(store=store, migrations=migrations)


@contextmanager
def _open_migrator(config: Config) -> Iterator[Migrator]:
    """Open the configured database and build a migrator for it."""
    if not config.migrations_source:
        console.print(
            "[red]Error:[/red] No migrations configured. "
            "Set [cyan]migrations.source[/cyan] in the config file or pass --migrations."
        )
        sys.exit(1)

    try:
        migrations = load_migrations(config.migrations_source)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    ensure_dir(config.database_path.parent)
    with TinyDB(config.database_path) as db:
        try:
            migrator = Migrator(db, migrations, table_name=config.table, console=console)
        except MigratorError as e:
            display_error(e, console)
            sys.exit(1)
        yield migrator


def _execute(
    ctx: click.Context,
    command: str,
    operation: Callable[[Migrator], MigrationResult],
) -> MigrationResult:
    """Run one controller operation, exiting with status 1 on failure."""
    with _open_migrator(ctx.obj["config"]) as migrator:
        try:
            return operation(migrator)
        except MigratorError as e:
            display_error(e, console)
            sys.exit(1)


@cli.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """
    Create the migration history and record the baseline version.

    Examples:

        \b
        tinydb-migrator --database app.json --migrations myapp.migrations:MIGRATIONS init
    """
    result = _execute(ctx, "init", lambda m: m.init())
    display_result("init", result, console)


@cli.command()
@click.argument("version", type=int, required=False)
@click.pass_context
def up(ctx: click.Context, version: int | None) -> None:
    """
    Apply pending migrations up to VERSION, or all of them.

    Migrations are applied one at a time. If one fails, the ones applied
    before it stay applied; run 'up' again once the problem is fixed.

    Examples:

        \b
        # Apply everything pending
        tinydb-migrator up

        \b
        # Apply pending migrations up to version 3
        tinydb-migrator up 3
    """
    result = _execute(ctx, "up", lambda m: m.up(version))
    display_result("up", result, console)


@cli.command()
@click.pass_context
def down(ctx: click.Context) -> None:
    """
    Revert the most recent migration.
    """
    result = _execute(ctx, "down", lambda m: m.down())
    display_result("down", result, console)


@cli.command()
@click.pass_context
def reset(ctx: click.Context) -> None:
    """
    Revert every applied migration back to the baseline.

    Refuses to start if the history records a migration that is missing
    from the code.
    """
    result = _execute(ctx, "reset", lambda m: m.reset())
    display_result("reset", result, console)


@cli.command("version")
@click.pass_context
def show_version(ctx: click.Context) -> None:
    """Show the current migration version."""
    result = _execute(ctx, "version", lambda m: m.version())
    console.print(f"Current version: [cyan]{result.new_version}[/cyan]")


@cli.command("set-version")
@click.argument("version", type=int)
@click.pass_context
def set_version(ctx: click.Context, version: int) -> None:
    """
    Record VERSION as applied without running any migration.

    Use this when the database already matches VERSION, for example after
    restoring a backup or repairing a failed migration by hand.

    Examples:

        \b
        tinydb-migrator set-version 3
    """
    result = _execute(ctx, "set-version", lambda m: m.set_version(version))
    display_result("set-version", result, console)


cli.add_command(set_version, name="set_version")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """
    List every migration with its applied state.
    """
    with _open_migrator(ctx.obj["config"]) as migrator:
        try:
            migration_status = migrator.status()
        except MigratorError as e:
            display_error(e, console)
            sys.exit(1)

    display_status(migration_status, console)


if __name__ == "__main__":
    cli()
