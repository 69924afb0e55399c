"""Unit tests for the Database registry."""

from __future__ import annotations

from pathlib import Path

import pytest

from minidb.application import Database
from minidb.domain.entities import Table
from minidb.domain.errors import TableNotFoundError, ValidationError
from minidb.domain.value_objects import Column, ColumnType
from minidb.infrastructure.metrics import MetricsRegistry
from minidb.ports.outbound import SyncMode


COLUMNS = [Column("id", ColumnType.INT, primary_key=True), Column("name", ColumnType.TEXT)]


class FailingStore:
    """TableStore whose writes always fail."""

    def load_all(self) -> list[Table]:
        return []

    def save(self, table: Table) -> None:
        raise OSError("disk full")

    def delete(self, name: str) -> None:
        pass


@pytest.mark.unit
class TestDatabase:
    """Tests for Database."""

    def test_create_and_get(self, database: Database) -> None:
        table = database.create_table("users", COLUMNS)

        assert database.get_table("users") is table
        assert "users" in database
        assert database.has_table("users")
        assert len(database) == 1

    def test_create_existing(self, database: Database) -> None:
        database.create_table("users", COLUMNS)
        with pytest.raises(ValidationError, match="Table already exists: users"):
            database.create_table("users", COLUMNS)

    def test_get_missing(self, database: Database) -> None:
        with pytest.raises(TableNotFoundError, match="Table not found: ghosts"):
            database.get_table("ghosts")

    def test_list_in_registration_order(self, database: Database) -> None:
        for name in ["zeta", "alpha", "mid"]:
            database.create_table(name, COLUMNS)
        assert database.list_tables() == ["zeta", "alpha", "mid"]

    def test_drop_removes_record(self, database: Database) -> None:
        database.create_table("users", COLUMNS)
        record = database.data_dir / "users.json"
        assert record.exists()

        database.drop_table("users")

        assert not record.exists()
        assert database.list_tables() == []

    def test_drop_missing(self, database: Database) -> None:
        with pytest.raises(TableNotFoundError):
            database.drop_table("ghosts")

    def test_table_names_are_case_sensitive(self, database: Database) -> None:
        database.create_table("Users", COLUMNS)
        database.create_table("users", COLUMNS)
        assert database.list_tables() == ["Users", "users"]

    def test_reload(self, temp_dir: Path, metrics_registry: MetricsRegistry) -> None:
        first = Database(temp_dir, sync_mode=SyncMode.NONE, metrics=metrics_registry)
        users = first.create_table("users", COLUMNS)
        users.insert({"id": 1, "name": "Ann"})
        users.insert({"id": 2, "name": "Bob"})
        first.persist_table("users")

        second = Database(temp_dir, sync_mode=SyncMode.NONE, metrics=metrics_registry)

        reloaded = second.get_table("users")
        assert reloaded.select() == users.select()
        assert reloaded.next_row_id == users.next_row_id

    def test_persist_failure_propagates(self, temp_dir: Path, metrics_registry: MetricsRegistry) -> None:
        """A failed write is not masked; the in-memory table stays registered."""
        database = Database(temp_dir, store=FailingStore(), metrics=metrics_registry)

        with pytest.raises(OSError, match="disk full"):
            database.create_table("users", COLUMNS)

        assert database.list_tables() == ["users"]
        assert metrics_registry.registry.get_sample_value(
            "minidb_table_persists_total", {"status": "error"}
        ) == 1.0
