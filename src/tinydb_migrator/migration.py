"""Migration descriptors and persisted migration records."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime

from pydantic import BaseModel, Field
from tinydb import TinyDB

from .constants import SENTINEL_NAME, SENTINEL_VERSION

Procedure = Callable[[TinyDB], None]


def noop(db: TinyDB) -> None:
    """Procedure that leaves the database untouched."""


class Migration(ABC):
    """
    Base class for schema migrations.

    Each migration has a version number, a display name, and a pair of
    procedures: ``up`` applies the change and ``down`` reverts it. A procedure
    signals failure by raising.

    Example::

        class AddUsersTable(Migration):
            version = 2
            name = "add_users"

            def up(self, db: TinyDB) -> None:
                db.table("users").insert({"name": "admin"})

            def down(self, db: TinyDB) -> None:
                db.drop_table("users")
    """

    version: int
    name: str

    @abstractmethod
    def up(self, db: TinyDB) -> None:
        """
        Apply the migration.

        Args:
            db: TinyDB database instance
        """
        pass

    @abstractmethod
    def down(self, db: TinyDB) -> None:
        """
        Revert the migration.

        Args:
            db: TinyDB database instance
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(version={self.version!r}, name={self.name!r})"


class FunctionMigration(Migration):
    """Migration built from plain functions instead of a subclass."""

    def __init__(
        self,
        version: int,
        name: str,
        up: Procedure | None = None,
        down: Procedure | None = None,
    ):
        """
        Initialize function migration.

        Args:
            version: Migration version
            name: Display name
            up: Forward procedure (no-op when omitted)
            down: Backward procedure (no-op when omitted)
        """
        self.version = version
        self.name = name
        self._up = up or noop
        self._down = down or noop

    def up(self, db: TinyDB) -> None:
        self._up(db)

    def down(self, db: TinyDB) -> None:
        self._down(db)


class Baseline(Migration):
    """Sentinel migration standing for "no migrations applied"."""

    version = SENTINEL_VERSION
    name = SENTINEL_NAME

    def up(self, db: TinyDB) -> None:
        pass

    def down(self, db: TinyDB) -> None:
        pass


class MigrationRecord(BaseModel):
    """A persisted marker meaning "this version has been applied"."""

    version: int
    name: str
    applied_at: datetime = Field(default_factory=datetime.now)

    @classmethod
    def from_migration(cls, migration: Migration) -> "MigrationRecord":
        """Build the record written when ``migration`` is marked applied."""
        return cls(version=migration.version, name=migration.name)
