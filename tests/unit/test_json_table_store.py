"""Unit tests for the JSON table store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from minidb.adapters.outbound import JsonTableStore, TableRecord
from minidb.domain.entities import Table
from minidb.domain.value_objects import Column, ColumnType, WhereClause
from minidb.ports.outbound import SyncMode


@pytest.fixture
def store(temp_dir: Path) -> JsonTableStore:
    return JsonTableStore(temp_dir / "data", sync_mode=SyncMode.NONE)


@pytest.fixture
def people() -> Table:
    table = Table(
        "people",
        [
            Column("id", ColumnType.INT, primary_key=True),
            Column("name", ColumnType.TEXT, unique=True),
            Column("age", ColumnType.INT),
        ],
    )
    table.insert({"id": 1, "name": "Ann", "age": 30})
    table.insert({"id": 2, "name": "Bob", "age": None})
    return table


@pytest.mark.unit
class TestJsonTableStore:
    """Tests for JsonTableStore."""

    def test_creates_directory(self, temp_dir: Path) -> None:
        store = JsonTableStore(temp_dir / "a" / "b")
        assert store.data_dir.is_dir()
        assert store.sync_mode == SyncMode.FSYNC

    def test_record_layout(self, store: JsonTableStore, people: Table) -> None:
        store.save(people)

        record = json.loads(store.record_path("people").read_text())
        assert record["name"] == "people"
        assert record["columns"][0] == {
            "name": "id",
            "type": "INT",
            "primaryKey": True,
            "unique": True,
        }
        assert record["rows"][1] == {"row_id": 2, "values": {"id": 2, "name": "Bob", "age": None}}
        assert record["next_row_id"] == 3

    def test_no_temp_file_left(self, store: JsonTableStore, people: Table) -> None:
        store.save(people)
        assert [p.name for p in store.data_dir.iterdir()] == ["people.json"]

    def test_round_trip(self, store: JsonTableStore, people: Table) -> None:
        people.delete(WhereClause("id", 2))
        store.save(people)

        [loaded] = store.load_all()

        assert loaded.name == "people"
        assert loaded.columns == people.columns
        assert loaded.select() == people.select()
        assert loaded.next_row_id == 3
        assert loaded.get_index("name").lookup("Ann") == {1}

    def test_save_overwrites(self, store: JsonTableStore, people: Table) -> None:
        store.save(people)
        people.delete()
        store.save(people)

        [loaded] = store.load_all()
        assert loaded.row_count == 0

    def test_delete(self, store: JsonTableStore, people: Table) -> None:
        store.save(people)
        store.delete("people")
        store.delete("people")

        assert store.load_all() == []

    def test_skips_unreadable_records(self, store: JsonTableStore, people: Table) -> None:
        """Broken records are skipped; the rest still load."""
        store.save(people)
        (store.data_dir / "garbage.json").write_text("{not json")
        (store.data_dir / "typed.json").write_text(
            json.dumps(
                {
                    "name": "typed",
                    "columns": [{"name": "id", "type": "INT"}],
                    "rows": [{"row_id": 1, "values": {"id": "one"}}],
                }
            )
        )
        (store.data_dir / "dupes.json").write_text(
            json.dumps(
                {
                    "name": "dupes",
                    "columns": [{"name": "id", "type": "INT", "primaryKey": True}],
                    "rows": [
                        {"row_id": 1, "values": {"id": 1}},
                        {"row_id": 2, "values": {"id": 1}},
                    ],
                }
            )
        )

        assert [t.name for t in store.load_all()] == ["people"]

    def test_ignores_temp_files(self, store: JsonTableStore, people: Table) -> None:
        (store.data_dir / "people.json.tmp").write_text("partial")
        assert store.load_all() == []

    def test_legacy_record_without_counter(self, store: JsonTableStore) -> None:
        store.record_path("old").write_text(
            json.dumps(
                {
                    "name": "old",
                    "columns": [{"name": "id", "type": "INT"}],
                    "rows": [{"row_id": 4, "values": {"id": 1}}],
                }
            )
        )

        [loaded] = store.load_all()
        assert loaded.next_row_id == 5


@pytest.mark.unit
class TestTableRecord:
    """Tests for the pydantic record model."""

    def test_from_table(self, people: Table) -> None:
        record = TableRecord.from_table(people)

        assert [c.name for c in record.columns] == ["id", "name", "age"]
        assert record.columns[0].primary_key is True
        assert record.columns[1].unique is True
        assert [r.row_id for r in record.rows] == [1, 2]

    def test_rejects_unknown_type(self) -> None:
        with pytest.raises(ValueError):
            TableRecord.model_validate(
                {"name": "t", "columns": [{"name": "x", "type": "FLOAT"}], "rows": []}
            )
