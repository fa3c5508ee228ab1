"""Migration controller: drives the history towards a requested version."""

import logging
from collections.abc import Iterable
from typing import NamedTuple, cast

from rich.console import Console
from tinydb import TinyDB

from .constants import (
    COMMAND_DOWN,
    COMMAND_INIT,
    COMMAND_RESET,
    COMMAND_SET_VERSION,
    COMMAND_UP,
    COMMAND_VERSION,
    DB_TABLE_MIGRATIONS,
    NO_VERSION,
    SENTINEL_VERSION,
)
from .engine import Applied, Pending, Step, correlate, merge
from .errors import (
    CommandRequiredError,
    InvalidVersionFormatError,
    MigratorError,
    MissingMigrationError,
    ProcedureError,
    RecordNotFoundError,
    TargetVersionNotFoundError,
    UnexpectedCommandError,
    VersionRequiredError,
)
from .migration import Baseline, Migration, MigrationRecord
from .registry import MigrationRegistry
from .store import HistoryStore, TinyDBHistoryStore

logger = logging.getLogger(__name__)


class MigrationResult(NamedTuple):
    """Versions before and after a controller operation."""

    old_version: int
    new_version: int


class MigrationStatus(NamedTuple):
    """Snapshot of the history reconciled with the registry."""

    current_version: int
    steps: list[Step]
    last_inserted: MigrationRecord | None
    orphaned: list[MigrationRecord]

    @property
    def pending(self) -> list[Pending]:
        """Registered migrations that have not been applied."""
        return [step for step in self.steps if isinstance(step, Pending)]


class Migrator:
    """
    Applies and reverts migrations against a TinyDB database.

    The migrator binds one database handle and one registry. Migrations are
    applied one at a time and each success is recorded immediately; a failure
    stops the operation without undoing the steps that already succeeded.
    Callers must not run two migrators against the same database at once.
    """

    def __init__(
        self,
        db: TinyDB,
        migrations: Iterable[Migration] | MigrationRegistry = (),
        table_name: str = DB_TABLE_MIGRATIONS,
        store: HistoryStore | None = None,
        console: Console | None = None,
    ):
        """
        Initialize migrator.

        Args:
            db: TinyDB database handed to every migration procedure
            migrations: Migrations in any order, or a prebuilt registry
            table_name: Table holding migration records
            store: History store (defaults to a TinyDB table in ``db``)
            console: Rich console for progress output (silent when None)
        """
        self.db = db
        self.registry = migrations if isinstance(migrations, MigrationRegistry) else MigrationRegistry(migrations)
        self.store: HistoryStore = store if store is not None else TinyDBHistoryStore(db, table_name)
        self.console = console

    def run(self, *args: str) -> MigrationResult:
        """
        Interpret a command line such as ``("up", "3")``.

        Raises:
            UsageError: If the command or its argument is missing or malformed
            MigratorError: If the command itself fails
        """
        if not args:
            raise CommandRequiredError()

        command, rest = args[0], args[1:]

        if command == COMMAND_INIT:
            return self.init()
        if command == COMMAND_UP:
            return self.up(_parse_version(rest, required=False))
        if command == COMMAND_DOWN:
            return self.down()
        if command == COMMAND_RESET:
            return self.reset()
        if command == COMMAND_VERSION:
            return self.version()
        if command == COMMAND_SET_VERSION:
            return self.set_version(cast(int, _parse_version(rest, required=True)))

        raise UnexpectedCommandError(command)

    def init(self) -> MigrationResult:
        """
        Create the history table and record the baseline.

        Raises:
            TableExistsError: If the table already exists
            StoreError: If the store cannot be written
        """
        self.store.create_table()
        self.store.insert_one(MigrationRecord.from_migration(Baseline()))
        logger.info(f"Initialized migration history at version {SENTINEL_VERSION}")
        return MigrationResult(NO_VERSION, SENTINEL_VERSION)

    def up(self, target: int | None = None) -> MigrationResult:
        """
        Apply pending migrations up to ``target`` inclusive, or all of them.

        Already recorded migrations are skipped, so calling this again after a
        failure resumes where the previous call stopped.

        Raises:
            ProcedureError: If a migration's ``up`` raises
            StoreError: If the history cannot be read or written
        """
        history = self.store.find_all_ordered_by_version_asc()
        old_version = new_version = history[-1].version if history else NO_VERSION

        for step in merge(history, self.registry.migrations, target):
            if not isinstance(step, Pending):
                continue

            migration = step.migration
            self._announce(f"Applying migration {migration.version}: {migration.name}")
            try:
                self._execute(migration, "up")
                new_version = migration.version
                self.store.insert_one(MigrationRecord.from_migration(migration))
            except MigratorError as e:
                e.with_versions(old_version, new_version)
                raise

        logger.info(f"Migrated up from {old_version} to {new_version}")
        return MigrationResult(old_version, new_version)

    def down(self) -> MigrationResult:
        """
        Revert the migration with the highest recorded version.

        Does nothing when only the baseline is recorded.

        Raises:
            RecordNotFoundError: If the history is empty
            MissingMigrationError: If the latest record has no registered migration
            ProcedureError: If the migration's ``down`` raises
            StoreError: If the history cannot be read or written
        """
        latest = self.store.find_latest_record()
        old_version = new_version = latest.version

        migration = self.registry.get(latest.version)
        if migration is None:
            raise MissingMigrationError(latest.version).with_versions(old_version, new_version)

        predecessor = self.registry.predecessor(migration.version)
        if predecessor is None:
            logger.info("Nothing to revert: history is at the baseline")
            return MigrationResult(old_version, new_version)

        self._announce(f"Reverting migration {migration.version}: {migration.name}")
        try:
            self._execute(migration, "down")
            new_version = predecessor.version
            self.store.delete_one(latest)
        except MigratorError as e:
            e.with_versions(old_version, new_version)
            raise

        logger.info(f"Migrated down from {old_version} to {new_version}")
        return MigrationResult(old_version, new_version)

    def reset(self) -> MigrationResult:
        """
        Revert every recorded migration, newest first, keeping the baseline record.

        Every record must match a registered migration; otherwise nothing is reverted.

        Raises:
            MissingMigrationError: If a record has no registered migration
            ProcedureError: If a migration's ``down`` raises (earlier reverts stay done)
            StoreError: If the history cannot be read or written
        """
        history = self.store.find_all_ordered_by_version_asc()
        old_version = new_version = history[-1].version if history else NO_VERSION

        correlated, ok = correlate(history, self.registry.migrations)
        if not ok:
            missing = correlated[-1].version
            logger.error(f"Cannot reset: recorded migration {missing} is not registered")
            raise MissingMigrationError(missing).with_versions(old_version, new_version)

        for index in range(len(correlated) - 1, -1, -1):
            step = correlated[index]
            migration = step.migration
            assert migration is not None

            self._announce(f"Reverting migration {migration.version}: {migration.name}")
            try:
                self._execute(migration, "down")
                new_version = correlated[index - 1].version if index > 0 else migration.version
                # The baseline record is never deleted
                if migration.version > SENTINEL_VERSION:
                    self.store.delete_one(step.record)
            except MigratorError as e:
                e.with_versions(old_version, new_version)
                raise

        logger.info(f"Reset from {old_version} to {new_version}")
        return MigrationResult(old_version, new_version)

    def version(self) -> MigrationResult:
        """
        Get the current version: the highest recorded version.

        Raises:
            RecordNotFoundError: If the history is empty
        """
        current = self.store.find_latest_record().version
        return MigrationResult(current, current)

    def set_version(self, target: int) -> MigrationResult:
        """
        Rewrite the history so that it ends at ``target`` without running any procedure.

        The database is trusted to already match ``target``.

        Raises:
            RecordNotFoundError: If the history is empty
            TargetVersionNotFoundError: If ``target`` is not registered
            StoreError: If the history cannot be written
        """
        old_version = self.version().old_version

        try:
            migrations = self.registry.upto(target)
        except TargetVersionNotFoundError as e:
            e.with_versions(old_version, old_version)
            raise

        try:
            self.store.delete_all_records()
            self.store.insert_many([MigrationRecord.from_migration(m) for m in migrations])
        except MigratorError as e:
            e.with_versions(old_version, old_version)
            raise

        logger.info(f"Forced version from {old_version} to {target}")
        return MigrationResult(old_version, target)

    def status(self) -> MigrationStatus:
        """
        Reconcile the history with the registry without changing anything.

        Raises:
            StoreError: If the history cannot be read
        """
        history = self.store.find_all_ordered_by_version_asc()
        steps = merge(history, self.registry.migrations)

        try:
            last_inserted: MigrationRecord | None = self.store.find_last_inserted_record()
        except RecordNotFoundError:
            last_inserted = None

        orphaned = [step.record for step in steps if isinstance(step, Applied) and step.migration is None]
        current = history[-1].version if history else NO_VERSION
        return MigrationStatus(current, steps, last_inserted, orphaned)

    def _execute(self, migration: Migration, direction: str) -> None:
        procedure = migration.up if direction == "up" else migration.down
        try:
            procedure(self.db)
        except Exception as e:
            logger.error(f"Migration {migration.version} ({migration.name}) failed during {direction}: {e}")
            raise ProcedureError(migration.version, migration.name, direction, e) from e

    def _announce(self, message: str) -> None:
        logger.info(message)
        if self.console is not None:
            self.console.print(f"  {message}")


def _parse_version(args: tuple[str, ...], required: bool) -> int | None:
    """Parse the optional version argument of a command."""
    if not args:
        if required:
            raise VersionRequiredError()
        return None

    try:
        return int(args[0], 10)
    except ValueError as e:
        raise InvalidVersionFormatError(args[0]) from e
