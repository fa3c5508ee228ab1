"""Tests for the TinyDB history store."""

from pathlib import Path

import pytest
from tinydb import TinyDB

from tests.migration_helpers import record
from tinydb_migrator import TinyDBHistoryStore
from tinydb_migrator.errors import DuplicateRecordError, RecordNotFoundError, StoreError, TableExistsError


class TestCreateTable:
    """Tests for create_table."""

    def test_creates_table_in_storage(self, tmp_path: Path) -> None:
        """Test that the table exists in storage even before any record is written."""
        db = TinyDB(tmp_path / "db.json")
        store = TinyDBHistoryStore(db)

        store.create_table()

        assert "migrations" in db.tables()
        assert store.find_all_ordered_by_version_asc() == []

        db.close()

    def test_create_twice_fails(self, tmp_path: Path) -> None:
        """Test that creating an existing table raises TableExistsError."""
        db = TinyDB(tmp_path / "db.json")
        store = TinyDBHistoryStore(db)
        store.create_table()

        with pytest.raises(TableExistsError):
            store.create_table()

        db.close()

    def test_custom_table_name(self, tmp_path: Path) -> None:
        """Test that the table name is configurable."""
        db = TinyDB(tmp_path / "db.json")
        store = TinyDBHistoryStore(db, "schema_history")
        store.create_table()
        store.insert_one(record(1))

        assert db.tables() == {"schema_history"}

        db.close()


class TestReadRecords:
    """Tests for reading records."""

    def test_find_all_orders_by_version(self, tmp_path: Path) -> None:
        """Test that records come back in version order regardless of insertion order."""
        db = TinyDB(tmp_path / "db.json")
        store = TinyDBHistoryStore(db)
        store.insert_one(record(3))
        store.insert_one(record(1))
        store.insert_one(record(2))

        assert [r.version for r in store.find_all_ordered_by_version_asc()] == [1, 2, 3]

        db.close()

    def test_last_inserted_and_latest_differ(self, tmp_path: Path) -> None:
        """Test insertion order versus highest version."""
        db = TinyDB(tmp_path / "db.json")
        store = TinyDBHistoryStore(db)
        store.insert_one(record(1))
        store.insert_one(record(5))
        store.insert_one(record(3))

        assert store.find_last_inserted_record().version == 3
        assert store.find_latest_record().version == 5

        db.close()

    def test_empty_table_raises(self, tmp_path: Path) -> None:
        """Test that reading a single record from an empty table raises."""
        db = TinyDB(tmp_path / "db.json")
        store = TinyDBHistoryStore(db)

        with pytest.raises(RecordNotFoundError):
            store.find_last_inserted_record()
        with pytest.raises(RecordNotFoundError):
            store.find_latest_record()

        db.close()

    def test_records_survive_reopen(self, tmp_path: Path) -> None:
        """Test that records are persisted to the JSON file."""
        db_path = tmp_path / "db.json"
        db = TinyDB(db_path)
        TinyDBHistoryStore(db).insert_one(record(1, "-"))
        db.close()

        db = TinyDB(db_path)
        records = TinyDBHistoryStore(db).find_all_ordered_by_version_asc()

        assert len(records) == 1
        assert records[0].version == 1
        assert records[0].name == "-"

        db.close()

    def test_corrupt_file_raises_store_error(self, tmp_path: Path) -> None:
        """Test that an unreadable database surfaces as StoreError."""
        db_path = tmp_path / "db.json"
        db_path.write_text("{not json", encoding="utf-8")
        db = TinyDB(db_path)
        store = TinyDBHistoryStore(db)

        with pytest.raises(StoreError) as exc_info:
            store.find_all_ordered_by_version_asc()

        assert exc_info.value.__cause__ is not None

        db.close()


class TestWriteRecords:
    """Tests for inserting and deleting records."""

    def test_insert_duplicate_version(self, tmp_path: Path) -> None:
        """Test that a version can only be recorded once."""
        db = TinyDB(tmp_path / "db.json")
        store = TinyDBHistoryStore(db)
        store.insert_one(record(2))

        with pytest.raises(DuplicateRecordError):
            store.insert_one(record(2, "other"))

        db.close()

    def test_insert_many_keeps_order(self, tmp_path: Path) -> None:
        """Test that bulk inserts preserve the given order."""
        db = TinyDB(tmp_path / "db.json")
        store = TinyDBHistoryStore(db)
        store.insert_many([record(1), record(2), record(3)])

        assert [r.version for r in store.find_all_ordered_by_version_asc()] == [1, 2, 3]
        assert store.find_last_inserted_record().version == 3

        db.close()

    def test_insert_many_rejects_duplicates_atomically(self, tmp_path: Path) -> None:
        """Test that a batch with a duplicate writes nothing."""
        db = TinyDB(tmp_path / "db.json")
        store = TinyDBHistoryStore(db)
        store.insert_one(record(1))

        with pytest.raises(DuplicateRecordError):
            store.insert_many([record(2), record(1)])
        with pytest.raises(DuplicateRecordError):
            store.insert_many([record(3), record(3)])

        assert [r.version for r in store.find_all_ordered_by_version_asc()] == [1]

        db.close()

    def test_delete_one(self, tmp_path: Path) -> None:
        """Test deleting a record by version."""
        db = TinyDB(tmp_path / "db.json")
        store = TinyDBHistoryStore(db)
        store.insert_many([record(1), record(2)])

        store.delete_one(record(2, "name is ignored"))

        assert [r.version for r in store.find_all_ordered_by_version_asc()] == [1]

        db.close()

    def test_delete_missing_record(self, tmp_path: Path) -> None:
        """Test that deleting an absent version raises."""
        db = TinyDB(tmp_path / "db.json")
        store = TinyDBHistoryStore(db)

        with pytest.raises(RecordNotFoundError):
            store.delete_one(record(4))

        db.close()

    def test_delete_all_records(self, tmp_path: Path) -> None:
        """Test clearing the table leaves other tables alone."""
        db = TinyDB(tmp_path / "db.json")
        db.table("users").insert({"name": "admin"})
        store = TinyDBHistoryStore(db)
        store.insert_many([record(1), record(2)])

        store.delete_all_records()

        assert store.find_all_ordered_by_version_asc() == []
        assert len(db.table("users")) == 1

        db.close()
