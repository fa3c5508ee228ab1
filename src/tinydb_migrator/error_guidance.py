"""Actionable error guidance for common failure scenarios."""

from dataclasses import dataclass

from .errors import (
    DuplicateRecordError,
    MigratorError,
    MissingMigrationError,
    ProcedureError,
    RecordNotFoundError,
    StoreError,
    TableExistsError,
    TargetVersionNotFoundError,
)


@dataclass
class ErrorGuidance:
    """Structured error guidance with checks and suggestions."""

    title: str
    checks: list[str]  # Things to check
    fixes: list[str]  # How to fix
    examples: list[str] | None = None  # Example commands


class GuidanceProvider:
    """Provides context-aware guidance for migrator errors."""

    @staticmethod
    def get_procedure_failed(error: ProcedureError) -> ErrorGuidance:
        """Guidance when a migration procedure raises."""
        checks = [
            f"Inspect migration {error.version} ({error.name}) and the traceback above",
            f"Last version recorded before the failure: {error.new_version}",
        ]
        if error.direction == "up":
            fixes = [
                "Migrations that succeeded earlier in this run are recorded and were not rolled back",
                f"Repair the database or fix migration {error.version}, then run 'up' again",
                "Already recorded migrations are skipped on the next run",
            ]
            examples = ["tinydb-migrator up", "tinydb-migrator status"]
        else:
            fixes = [
                "Migrations reverted earlier in this run stay reverted",
                f"Fix the down procedure of migration {error.version} and run the command again",
                "If the database already matches an earlier version, record it with set-version",
            ]
            examples = ["tinydb-migrator status", f"tinydb-migrator set-version {error.new_version}"]

        return ErrorGuidance(
            title="A migration failed part way through", checks=checks, fixes=fixes, examples=examples
        )

    @staticmethod
    def get_missing_migration(error: MissingMigrationError) -> ErrorGuidance:
        """Guidance when the history records a version the code no longer knows."""
        return ErrorGuidance(
            title=f"Recorded migration {error.version} is missing from the code",
            checks=[
                "Check whether the migration was renumbered or deleted",
                "Check that the configured migrations source is the right one",
            ],
            fixes=[
                f"Restore migration {error.version} in the migrations list",
                "Or record the version the database actually matches with set-version",
            ],
            examples=["tinydb-migrator status"],
        )

    @staticmethod
    def get_target_not_found(error: TargetVersionNotFoundError) -> ErrorGuidance:
        """Guidance when a requested version is not registered."""
        return ErrorGuidance(
            title=f"Version {error.version} is not a known migration",
            checks=["List the known versions: tinydb-migrator status"],
            fixes=["Pass one of the registered versions"],
            examples=["tinydb-migrator status"],
        )

    @staticmethod
    def get_not_initialized(error: RecordNotFoundError) -> ErrorGuidance:
        """Guidance when the history holds no record."""
        return ErrorGuidance(
            title="The migration history is empty",
            checks=["Check that the configured database path is the right one"],
            fixes=["Initialize the history before migrating"],
            examples=["tinydb-migrator init"],
        )

    @staticmethod
    def get_already_initialized(error: TableExistsError) -> ErrorGuidance:
        """Guidance when init runs against an existing history."""
        return ErrorGuidance(
            title=f"The history table '{error.table}' already exists",
            checks=["Show the current version: tinydb-migrator version"],
            fixes=["Nothing to do: the history is already initialized"],
        )

    @staticmethod
    def get_store_failed(error: StoreError) -> ErrorGuidance:
        """Guidance for unreadable or unwritable databases."""
        return ErrorGuidance(
            title="The migration history could not be read or written",
            checks=[
                "Check that the database file exists and is valid JSON",
                "Check file permissions on the database and its directory",
                f"Last version reached before the failure: {error.new_version}",
            ],
            fixes=[
                "Restore the database file from a backup if it is corrupt",
                "Fix permissions, then run the command again",
            ],
        )

    @classmethod
    def for_error(cls, error: MigratorError) -> ErrorGuidance | None:
        """Pick guidance for ``error``, or None when the message says it all."""
        if isinstance(error, ProcedureError):
            return cls.get_procedure_failed(error)
        if isinstance(error, MissingMigrationError):
            return cls.get_missing_migration(error)
        if isinstance(error, TargetVersionNotFoundError):
            return cls.get_target_not_found(error)
        if isinstance(error, RecordNotFoundError):
            return cls.get_not_initialized(error)
        if isinstance(error, TableExistsError):
            return cls.get_already_initialized(error)
        if isinstance(error, DuplicateRecordError):
            return None
        if isinstance(error, StoreError):
            return cls.get_store_failed(error)
        return None

    @staticmethod
    def format_guidance(guidance: ErrorGuidance) -> str:
        """Format guidance as rich-compatible string."""
        lines = [f"[bold yellow]{guidance.title}[/bold yellow]\n"]

        if guidance.checks:
            lines.append("[cyan]Checks:[/cyan]")
            for check in guidance.checks:
                lines.append(f"  • {check}")
            lines.append("")

        if guidance.fixes:
            lines.append("[cyan]How to fix:[/cyan]")
            for fix in guidance.fixes:
                lines.append(f"  • {fix}")
            lines.append("")

        if guidance.examples:
            lines.append("[cyan]Try these commands:[/cyan]")
            for example in guidance.examples:
                lines.append(f"  $ {example}")

        return "\n".join(lines)
