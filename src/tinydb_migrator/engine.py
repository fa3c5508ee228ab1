"""Reconciliation of recorded history against the registry.

Both functions expect their inputs sorted ascending by version, never mutate
them, and decide version equality before ordering, so a version present on
both sides is emitted once.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from .migration import Migration, MigrationRecord


@dataclass(frozen=True)
class Pending:
    """A registered migration with no record in the history."""

    migration: Migration

    stored = False

    @property
    def version(self) -> int:
        return self.migration.version

    @property
    def name(self) -> str:
        return self.migration.name


@dataclass(frozen=True)
class Applied:
    """A recorded migration, paired with its registered migration when one is known."""

    record: MigrationRecord
    migration: Migration | None = None

    stored = True

    @property
    def version(self) -> int:
        return self.record.version

    @property
    def name(self) -> str:
        return self.record.name


Step = Pending | Applied


def merge(
    applied: Sequence[MigrationRecord],
    registry: Sequence[Migration],
    target: int | None = None,
) -> list[Step]:
    """
    Merge recorded and registered migrations into one ascending sequence.

    Registered migrations are only taken up to ``target`` inclusive (all of them
    when ``target`` is None). Records are never bounded, so history beyond the
    target is still part of the result.

    Args:
        applied: Records in ascending version order
        registry: Migrations in ascending version order
        target: Highest version to consider for application, or None

    Returns:
        Steps in ascending order, each version exactly once
    """
    if target is not None:
        bound = target + 1
    elif registry:
        bound = registry[-1].version + 1
    else:
        bound = 0

    merged: list[Step] = []
    i = j = 0

    while i < len(applied) and j < len(registry) and registry[j].version < bound:
        record, migration = applied[i], registry[j]
        if record.version == migration.version:
            merged.append(Applied(record, migration))
            i += 1
            j += 1
        elif record.version < migration.version:
            merged.append(Applied(record))
            i += 1
        else:
            merged.append(Pending(migration))
            j += 1

    merged.extend(Applied(record) for record in applied[i:])

    while j < len(registry) and registry[j].version < bound:
        merged.append(Pending(registry[j]))
        j += 1

    return merged


def correlate(
    applied: Sequence[MigrationRecord],
    registry: Sequence[Migration],
) -> tuple[list[Applied], bool]:
    """
    Pair every record with its registered migration.

    Registered migrations without a record are skipped. A record without a
    registered migration stops the walk: it is appended (unpaired) to the steps
    correlated so far and the result is reported as failed.

    Args:
        applied: Records in ascending version order
        registry: Migrations in ascending version order

    Returns:
        Tuple of (correlated steps, True if every record was matched)
    """
    correlated: list[Applied] = []
    i = j = 0

    while i < len(applied) and j < len(registry):
        record, migration = applied[i], registry[j]
        if record.version == migration.version:
            correlated.append(Applied(record, migration))
            i += 1
            j += 1
        elif record.version < migration.version:
            correlated.append(Applied(record))
            return correlated, False
        else:
            j += 1

    if i < len(applied):
        correlated.append(Applied(applied[i]))
        return correlated, False

    return correlated, True
