"""Tests for the migration registry."""

import pytest

from tinydb_migrator import Baseline, FunctionMigration, MigrationRegistry
from tinydb_migrator.constants import MAX_VERSION, SENTINEL_NAME, SENTINEL_VERSION
from tinydb_migrator.errors import DuplicateVersionError, InvalidVersionError, TargetVersionNotFoundError


def _migrations(*versions: int) -> list[FunctionMigration]:
    return [FunctionMigration(v, f"m{v}") for v in versions]


class TestMigrationRegistryConstruction:
    """Tests for building a registry."""

    def test_injects_baseline_first(self) -> None:
        """Test that the baseline is always the first migration."""
        registry = MigrationRegistry(_migrations(3, 2))

        assert registry.versions == [SENTINEL_VERSION, 2, 3]
        assert isinstance(registry[0], Baseline)
        assert registry[0].name == SENTINEL_NAME

    def test_empty_registry_holds_only_baseline(self) -> None:
        """Test that a registry without migrations still has the baseline."""
        registry = MigrationRegistry()

        assert len(registry) == 1
        assert registry.latest.version == SENTINEL_VERSION

    def test_sorts_by_version(self) -> None:
        """Test that migrations are ordered by ascending version."""
        registry = MigrationRegistry(_migrations(20240105, 7, 300))

        assert registry.versions == [1, 7, 300, 20240105]

    def test_does_not_modify_caller_list(self) -> None:
        """Test that the caller's list is copied, not extended or reordered."""
        migrations = _migrations(3, 2)
        MigrationRegistry(migrations)

        assert [m.version for m in migrations] == [3, 2]

    def test_rejects_duplicate_versions(self) -> None:
        """Test that two migrations with the same version are rejected."""
        with pytest.raises(DuplicateVersionError) as exc_info:
            MigrationRegistry(_migrations(2, 3, 2))

        assert exc_info.value.version == 2

    def test_rejects_baseline_version(self) -> None:
        """Test that version 1 is reserved for the baseline."""
        with pytest.raises(DuplicateVersionError):
            MigrationRegistry(_migrations(SENTINEL_VERSION))

    def test_rejects_versions_below_baseline(self) -> None:
        """Test that versions that would precede the baseline are rejected."""
        with pytest.raises(InvalidVersionError):
            MigrationRegistry(_migrations(0))

        with pytest.raises(InvalidVersionError):
            MigrationRegistry(_migrations(-5))

    def test_rejects_versions_beyond_64_bits(self) -> None:
        """Test that versions must fit in a signed 64-bit integer."""
        MigrationRegistry(_migrations(MAX_VERSION))

        with pytest.raises(InvalidVersionError):
            MigrationRegistry(_migrations(MAX_VERSION + 1))

    def test_rejects_non_integer_versions(self) -> None:
        """Test that versions must be integers."""
        with pytest.raises(InvalidVersionError):
            MigrationRegistry([FunctionMigration("2", "text")])  # type: ignore[arg-type]

    def test_registry_errors_are_value_errors(self) -> None:
        """Test that registry errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            MigrationRegistry(_migrations(2, 2))


class TestMigrationRegistryLookup:
    """Tests for registry lookups."""

    def test_get(self) -> None:
        """Test get returns the migration or None."""
        registry = MigrationRegistry(_migrations(2, 3))

        migration = registry.get(3)
        assert migration is not None
        assert migration.name == "m3"
        assert registry.get(4) is None

    def test_index_of_unknown_version(self) -> None:
        """Test index_of raises for unknown versions."""
        registry = MigrationRegistry(_migrations(2))

        assert registry.index_of(2) == 1
        with pytest.raises(TargetVersionNotFoundError):
            registry.index_of(5)

    def test_predecessor(self) -> None:
        """Test predecessor walks back one version and stops at the baseline."""
        registry = MigrationRegistry(_migrations(2, 5))

        predecessor = registry.predecessor(5)
        assert predecessor is not None
        assert predecessor.version == 2
        assert registry.predecessor(SENTINEL_VERSION) is None

    def test_upto(self) -> None:
        """Test upto returns the prefix through the target inclusive."""
        registry = MigrationRegistry(_migrations(2, 3, 4))

        assert [m.version for m in registry.upto(3)] == [1, 2, 3]
        assert [m.version for m in registry.upto(SENTINEL_VERSION)] == [1]
        with pytest.raises(TargetVersionNotFoundError):
            registry.upto(10)
