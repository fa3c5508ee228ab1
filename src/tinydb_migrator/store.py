"""History store: persisted records of applied migrations."""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Protocol

from tinydb import Query, TinyDB
from tinydb.table import Document

from .constants import DB_TABLE_MIGRATIONS, RECORD_KEY_VERSION
from .errors import DuplicateRecordError, RecordNotFoundError, StoreError, TableExistsError
from .migration import MigrationRecord

logger = logging.getLogger(__name__)


class HistoryStore(Protocol):
    """Operations the migrator needs from a history backend."""

    def create_table(self) -> None: ...

    def find_all_ordered_by_version_asc(self) -> list[MigrationRecord]: ...

    def find_last_inserted_record(self) -> MigrationRecord: ...

    def find_latest_record(self) -> MigrationRecord: ...

    def insert_one(self, record: MigrationRecord) -> None: ...

    def insert_many(self, records: list[MigrationRecord]) -> None: ...

    def delete_one(self, record: MigrationRecord) -> None: ...

    def delete_all_records(self) -> None: ...


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    """Re-raise TinyDB storage failures as StoreError."""
    try:
        yield
    except StoreError:
        raise
    except (OSError, ValueError) as e:
        logger.error(f"History store failed to {operation}: {e}")
        raise StoreError(f"Failed to {operation}: {e}") from e


class TinyDBHistoryStore:
    """History store backed by a TinyDB table, keyed by migration version."""

    def __init__(self, db: TinyDB, table_name: str = DB_TABLE_MIGRATIONS):
        """
        Initialize history store.

        Args:
            db: TinyDB database instance
            table_name: Name of the table holding migration records
        """
        self.db = db
        self.table_name = table_name
        self.table = db.table(table_name)

    def create_table(self) -> None:
        """
        Create the history table.

        TinyDB creates tables lazily on first write, so this writes an empty
        table into storage.

        Raises:
            TableExistsError: If the table is already present in storage
        """
        with _storage_errors("create table"):
            if self.table_name in self.db.tables():
                raise TableExistsError(self.table_name)
            # Clearing writes the table key to storage even when it holds no documents
            self.table.truncate()
        logger.debug(f"Created history table '{self.table_name}'")

    def find_all_ordered_by_version_asc(self) -> list[MigrationRecord]:
        """Get all records sorted by ascending version."""
        with _storage_errors("read records"):
            records = [MigrationRecord.model_validate(doc) for doc in self.table.all()]
        return sorted(records, key=lambda r: r.version)

    def find_last_inserted_record(self) -> MigrationRecord:
        """
        Get the most recently inserted record (insertion order, not version order).

        Raises:
            RecordNotFoundError: If the table holds no records
        """
        return self._find_max(lambda doc: doc.doc_id)

    def find_latest_record(self) -> MigrationRecord:
        """
        Get the record with the highest version.

        Raises:
            RecordNotFoundError: If the table holds no records
        """
        return self._find_max(lambda doc: doc[RECORD_KEY_VERSION])

    def insert_one(self, record: MigrationRecord) -> None:
        """
        Insert a single record.

        Raises:
            DuplicateRecordError: If a record with the same version exists
        """
        with _storage_errors("insert record"):
            if self.table.contains(Query()[RECORD_KEY_VERSION] == record.version):
                raise DuplicateRecordError(record.version)
            self.table.insert(record.model_dump(mode="json"))
        logger.debug(f"Recorded migration {record.version} ({record.name})")

    def insert_many(self, records: list[MigrationRecord]) -> None:
        """
        Insert records in the given order.

        The whole batch is checked for duplicate versions before anything is written.

        Raises:
            DuplicateRecordError: If any version is already stored or repeated in the batch
        """
        with _storage_errors("insert records"):
            existing = {doc[RECORD_KEY_VERSION] for doc in self.table.all()}
            for record in records:
                if record.version in existing:
                    raise DuplicateRecordError(record.version)
                existing.add(record.version)
            self.table.insert_multiple(record.model_dump(mode="json") for record in records)
        logger.debug(f"Recorded {len(records)} migration(s)")

    def delete_one(self, record: MigrationRecord) -> None:
        """
        Delete the record with the same version as ``record``.

        Raises:
            RecordNotFoundError: If no record has that version
        """
        with _storage_errors("delete record"):
            removed = self.table.remove(Query()[RECORD_KEY_VERSION] == record.version)
        if not removed:
            raise RecordNotFoundError(f"No record for version {record.version}")
        logger.debug(f"Deleted record for migration {record.version}")

    def delete_all_records(self) -> None:
        """Delete every record."""
        with _storage_errors("delete records"):
            self.table.truncate()
        logger.debug(f"Deleted all records from '{self.table_name}'")

    def _find_max(self, key: Callable[[Document], int]) -> MigrationRecord:
        with _storage_errors("read records"):
            docs = self.table.all()
            if not docs:
                raise RecordNotFoundError(f"No records in '{self.table_name}'")
            return MigrationRecord.model_validate(max(docs, key=key))
