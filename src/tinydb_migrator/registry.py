"""Immutable, version-sorted registry of migrations."""

from collections.abc import Iterable, Iterator

from .constants import MAX_VERSION, MIN_VERSION, SENTINEL_VERSION
from .errors import DuplicateVersionError, InvalidVersionError, TargetVersionNotFoundError
from .migration import Baseline, Migration


class MigrationRegistry:
    """
    Sorted set of migrations known to the running program.

    The registry copies the migrations it is given, injects the baseline
    migration and sorts everything by version. It never changes afterwards.

    Raises:
        DuplicateVersionError: If two migrations share a version
        InvalidVersionError: If a version precedes the baseline or overflows 64 bits
    """

    def __init__(self, migrations: Iterable[Migration] = ()):
        collected: list[Migration] = [Baseline()]
        seen = {SENTINEL_VERSION}

        for migration in migrations:
            version = migration.version
            if not isinstance(version, int) or isinstance(version, bool):
                raise InvalidVersionError(version, "must be an integer")
            if version < MIN_VERSION or version > MAX_VERSION:
                raise InvalidVersionError(version, "does not fit in a signed 64-bit integer")
            if version in seen:
                raise DuplicateVersionError(version)
            if version < SENTINEL_VERSION:
                raise InvalidVersionError(version, f"must be greater than {SENTINEL_VERSION}")
            seen.add(version)
            collected.append(migration)

        self._migrations: tuple[Migration, ...] = tuple(sorted(collected, key=lambda m: m.version))

    def __iter__(self) -> Iterator[Migration]:
        return iter(self._migrations)

    def __len__(self) -> int:
        return len(self._migrations)

    def __getitem__(self, index: int) -> Migration:
        return self._migrations[index]

    def __repr__(self) -> str:
        return f"MigrationRegistry(versions={self.versions!r})"

    @property
    def migrations(self) -> tuple[Migration, ...]:
        """All migrations in ascending version order."""
        return self._migrations

    @property
    def versions(self) -> list[int]:
        """Registered versions in ascending order."""
        return [m.version for m in self._migrations]

    @property
    def latest(self) -> Migration:
        """Migration with the highest version."""
        return self._migrations[-1]

    def get(self, version: int) -> Migration | None:
        """Get migration by version, or None if it is not registered."""
        for migration in self._migrations:
            if migration.version == version:
                return migration
        return None

    def index_of(self, version: int) -> int:
        """
        Get the position of a version in the registry.

        Raises:
            TargetVersionNotFoundError: If the version is not registered
        """
        for index, migration in enumerate(self._migrations):
            if migration.version == version:
                return index
        raise TargetVersionNotFoundError(version)

    def predecessor(self, version: int) -> Migration | None:
        """
        Get the migration preceding ``version``.

        Returns None for the baseline, which has no predecessor.

        Raises:
            TargetVersionNotFoundError: If the version is not registered
        """
        index = self.index_of(version)
        return self._migrations[index - 1] if index > 0 else None

    def upto(self, version: int) -> list[Migration]:
        """
        Get every migration from the baseline through ``version`` inclusive.

        Raises:
            TargetVersionNotFoundError: If the version is not registered
        """
        return list(self._migrations[: self.index_of(version) + 1])
