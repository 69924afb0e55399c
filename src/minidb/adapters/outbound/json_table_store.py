"""JSON-file table store.

This adapter implements the TableStore protocol with one JSON document
per table, ``<data_dir>/<table>.json``.

File Format:
    {
      "name": "users",
      "columns": [{"name": "id", "type": "INT", "primaryKey": true, "unique": true}, ...],
      "rows": [{"row_id": 1, "values": {"id": 1, "name": "Ann"}}, ...],
      "next_row_id": 2
    }

Writes go to ``<table>.json.tmp`` first and are renamed over the live
record with ``os.replace``, so a crash mid-write leaves the previous
record intact. There is still no atomicity across tables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr
from pydantic import ValidationError as RecordValidationError

from minidb.domain.entities import StoredRow, Table
from minidb.domain.errors import MiniDBError
from minidb.domain.value_objects import Column, ColumnType, RowId
from minidb.infrastructure.logging import get_logger
from minidb.ports.outbound import SyncMode


RECORD_SUFFIX = ".json"
TEMP_SUFFIX = ".tmp"

logger = get_logger(__name__)


class ColumnRecord(BaseModel):
    """Persisted column definition."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    type: Literal["INT", "TEXT"]
    primary_key: bool = Field(default=False, alias="primaryKey")
    unique: bool = False

    @classmethod
    def from_column(cls, column: Column) -> ColumnRecord:
        return cls(
            name=column.name,
            type=column.column_type.value,
            primary_key=column.primary_key,
            unique=column.unique,
        )

    def to_column(self) -> Column:
        return Column(
            name=self.name,
            column_type=ColumnType(self.type),
            primary_key=self.primary_key,
            unique=self.unique,
        )


class RowRecord(BaseModel):
    """Persisted row with its internal identifier."""

    row_id: int = Field(..., ge=1)
    values: dict[str, Optional[Union[StrictInt, StrictStr]]] = Field(default_factory=dict)


class TableRecord(BaseModel):
    """One table's full persisted state."""

    name: str = Field(..., min_length=1)
    columns: list[ColumnRecord] = Field(..., min_length=1)
    rows: list[RowRecord] = Field(default_factory=list)
    next_row_id: Optional[int] = Field(default=None, ge=1)

    @classmethod
    def from_table(cls, table: Table) -> TableRecord:
        return cls(
            name=table.name,
            columns=[ColumnRecord.from_column(c) for c in table.columns],
            rows=[RowRecord(row_id=r.row_id, values=r.values) for r in table.serialize()],
            next_row_id=table.next_row_id,
        )

    def to_table(self) -> Table:
        """Reconstruct the table, re-validating rows and rebuilding indexes."""
        return Table.from_rows(
            self.name,
            [c.to_column() for c in self.columns],
            [StoredRow(RowId(r.row_id), dict(r.values)) for r in self.rows],
            next_row_id=self.next_row_id,
        )


class JsonTableStore:
    """File-based implementation of the TableStore protocol.

    Attributes:
        data_dir: Directory holding one record per table.
        sync_mode: Whether records are fsynced before being renamed in.
    """

    def __init__(
        self,
        data_dir: str | Path,
        sync_mode: SyncMode = SyncMode.FSYNC,
    ) -> None:
        """Initialize the store, creating the directory if needed.

        Args:
            data_dir: Storage root.
            sync_mode: Durability of each write.
        """
        self._data_dir = Path(data_dir)
        self._sync_mode = sync_mode
        self._data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def sync_mode(self) -> SyncMode:
        return self._sync_mode

    def record_path(self, name: str) -> Path:
        """Path of the record for table ``name``."""
        return self._data_dir / f"{name}{RECORD_SUFFIX}"

    def load_all(self) -> list[Table]:
        """Load every parsable record, skipping (and logging) the rest."""
        tables: list[Table] = []
        for path in sorted(self._data_dir.glob(f"*{RECORD_SUFFIX}")):
            try:
                record = TableRecord.model_validate_json(path.read_bytes())
                table = record.to_table()
            except (OSError, RecordValidationError, MiniDBError) as e:
                logger.warning("table_record_skipped", path=str(path), error=str(e))
                continue

            logger.info(
                "table_loaded",
                table=table.name,
                rows=table.row_count,
                next_row_id=table.next_row_id,
            )
            tables.append(table)
        return tables

    def save(self, table: Table) -> None:
        """Write the full record of ``table`` and rename it into place."""
        path = self.record_path(table.name)
        temp_path = path.with_name(path.name + TEMP_SUFFIX)
        payload = TableRecord.from_table(table).model_dump_json(by_alias=True, indent=2)

        with open(temp_path, "w", encoding="utf-8") as f:
            f.write(payload)
            if self._sync_mode == SyncMode.FSYNC:
                f.flush()
                os.fsync(f.fileno())

        os.replace(temp_path, path)
        logger.debug("table_persisted", table=table.name, rows=table.row_count, path=str(path))

    def delete(self, name: str) -> None:
        """Remove the record of ``name``; no-op if there is none."""
        self.record_path(name).unlink(missing_ok=True)
