"""Table entity: typed row storage for one schema.

A table owns its rows and one equality index per primary-key/unique
column, and keeps the indexes consistent with every mutation:

    - A row id is in a column's bucket for ``v`` iff the live row's
      value for that column is ``v``.
    - A unique bucket never holds more than one row id.
    - Row ids are strictly increasing and never reused, including
      across a save/load cycle.

Rows are plain ``dict`` mappings of column name to value. The internal
row id is never part of a row handed to callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from minidb.domain.entities.index import EqualityIndex
from minidb.domain.errors import DuplicateKeyError, ValidationError
from minidb.domain.value_objects import (
    FIRST_ROW_ID,
    Column,
    RowId,
    Value,
    WhereClause,
    values_equal,
)


@dataclass(frozen=True)
class StoredRow:
    """A row together with its internal identifier, as persisted."""

    row_id: RowId
    values: dict[str, Value] = field(default_factory=dict)


class Table:
    """Typed row storage with index-consistent mutation.

    Example:
        >>> users = Table("users", [
        ...     Column("id", ColumnType.INT, primary_key=True),
        ...     Column("name", ColumnType.TEXT),
        ... ])
        >>> users.insert({"id": 1, "name": "Ann"})
        {'id': 1, 'name': 'Ann'}
        >>> users.select(WhereClause("id", 1))
        [{'id': 1, 'name': 'Ann'}]
    """

    def __init__(self, name: str, columns: Sequence[Column]) -> None:
        """Initialize an empty table.

        Args:
            name: Table name.
            columns: Column definitions in declared order.

        Raises:
            ValidationError: If there are no columns or a name repeats.
        """
        if not columns:
            raise ValidationError(f"Table '{name}' must declare at least one column")

        seen: set[str] = set()
        for column in columns:
            if column.name in seen:
                raise ValidationError(
                    f"Duplicate column '{column.name}' in table '{name}'"
                )
            seen.add(column.name)

        self._name = name
        self._columns = tuple(columns)
        self._by_name = {column.name: column for column in self._columns}
        self._indexes = {
            column.name: EqualityIndex(column)
            for column in self._columns
            if column.indexed
        }
        self._rows: dict[RowId, dict[str, Value]] = {}
        self._next_row_id = FIRST_ROW_ID

    @classmethod
    def from_rows(
        cls,
        name: str,
        columns: Sequence[Column],
        rows: Iterable[StoredRow],
        next_row_id: int | None = None,
    ) -> Table:
        """Rebuild a table from persisted rows.

        Rows are type-checked and re-indexed; the row-id counter moves
        past the largest id seen and never below ``next_row_id``.

        Raises:
            ValidationError: On a type mismatch or a repeated row id.
            DuplicateKeyError: If persisted rows violate a unique index.
        """
        table = cls(name, columns)
        for stored in sorted(rows, key=lambda r: r.row_id):
            table._load_row(stored)
        if next_row_id is not None:
            table._next_row_id = RowId(max(table._next_row_id, next_row_id))
        return table

    @property
    def name(self) -> str:
        return self._name

    @property
    def columns(self) -> tuple[Column, ...]:
        return self._columns

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self._columns]

    @property
    def next_row_id(self) -> RowId:
        """The id the next insert will receive."""
        return self._next_row_id

    @property
    def row_count(self) -> int:
        return len(self._rows)

    def column(self, name: str) -> Column | None:
        """Look up a column definition by name."""
        return self._by_name.get(name)

    def has_column(self, name: str) -> bool:
        return name in self._by_name

    def get_index(self, column: str) -> EqualityIndex | None:
        """Return the index on ``column``, if the column is indexed."""
        return self._indexes.get(column)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def insert(self, values: Mapping[str, Any]) -> dict[str, Value]:
        """Insert one row.

        Every declared column is type-checked (missing columns are null)
        and the row is applied to all indexes before it is stored.

        Returns:
            The stored row without its internal id.

        Raises:
            ValidationError: On a type mismatch.
            DuplicateKeyError: If a unique index already holds a value.
                No index entry of the rejected row remains.
        """
        row_id = self._allocate_row_id()
        row = self._prepare_row(values)
        self._index_row(row_id, row)
        self._rows[row_id] = row
        return dict(row)

    def select(self, where: WhereClause | None = None) -> list[dict[str, Value]]:
        """Return copies of all rows matching ``where`` (all rows if None)."""
        return [dict(self._rows[row_id]) for row_id in self._find_row_ids(where)]

    def update(self, where: WhereClause | None, updates: Mapping[str, Any]) -> int:
        """Replace the named columns of every matching row.

        Keys of ``updates`` that are not columns of this table are
        ignored. The statement is all-or-nothing: if a unique index
        rejects a new value, rows already changed are restored first.

        Returns:
            Number of rows matched and updated.
        """
        row_ids = self._find_row_ids(where)
        changes = {
            name: self._by_name[name].validate(value)
            for name, value in updates.items()
            if name in self._by_name
        }

        applied: list[tuple[RowId, dict[str, Value]]] = []
        try:
            for row_id in row_ids:
                row = self._rows[row_id]
                previous = {name: row[name] for name in changes}
                self._move_index_entries(row_id, previous, changes)
                row.update(changes)
                applied.append((row_id, previous))
        except DuplicateKeyError:
            for row_id, previous in reversed(applied):
                row = self._rows[row_id]
                self._move_index_entries(row_id, {name: row[name] for name in previous}, previous)
                row.update(previous)
            raise

        return len(row_ids)

    def delete(self, where: WhereClause | None = None) -> int:
        """Delete every matching row (all rows if ``where`` is None).

        Returns:
            Number of rows deleted.
        """
        row_ids = self._find_row_ids(where)
        for row_id in row_ids:
            row = self._rows[row_id]
            for name, index in self._indexes.items():
                index.remove(row[name], row_id)
            del self._rows[row_id]
        return len(row_ids)

    # ------------------------------------------------------------------
    # Reads used by joins and persistence
    # ------------------------------------------------------------------

    def lookup_rows(self, column: str, value: Value) -> list[dict[str, Value]]:
        """Rows whose ``column`` equals ``value``, index-assisted if possible."""
        return self.select(WhereClause(column, value))

    def all_rows(self) -> list[dict[str, Value]]:
        return [dict(row) for row in self._rows.values()]

    def serialize(self) -> list[StoredRow]:
        """All rows with their internal ids, in id order."""
        return [StoredRow(row_id, dict(row)) for row_id, row in self._rows.items()]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _allocate_row_id(self) -> RowId:
        row_id = self._next_row_id
        self._next_row_id = RowId(row_id + 1)
        return row_id

    def _prepare_row(self, values: Mapping[str, Any]) -> dict[str, Value]:
        return {column.name: column.validate(values.get(column.name)) for column in self._columns}

    def _index_row(self, row_id: RowId, row: dict[str, Value]) -> None:
        indexed: list[EqualityIndex] = []
        try:
            for name, index in self._indexes.items():
                index.insert(row[name], row_id)
                indexed.append(index)
        except (DuplicateKeyError, ValidationError):
            for index in reversed(indexed):
                index.remove(row[index.column], row_id)
            raise

    def _move_index_entries(
        self,
        row_id: RowId,
        old: Mapping[str, Value],
        new: Mapping[str, Value],
    ) -> None:
        moved: list[str] = []
        try:
            for name, value in new.items():
                index = self._indexes.get(name)
                if index is None:
                    continue
                index.update(old[name], value, row_id)
                moved.append(name)
        except DuplicateKeyError:
            for name in reversed(moved):
                self._indexes[name].update(new[name], old[name], row_id)
            raise

    def _load_row(self, stored: StoredRow) -> None:
        if stored.row_id in self._rows:
            raise ValidationError(
                f"Row id {stored.row_id} appears twice in table '{self._name}'"
            )
        row = self._prepare_row(stored.values)
        self._index_row(stored.row_id, row)
        self._rows[stored.row_id] = row
        self._next_row_id = RowId(max(self._next_row_id, stored.row_id + 1))

    def _find_row_ids(self, where: WhereClause | None) -> list[RowId]:
        if where is None:
            return list(self._rows)

        if where.column not in self._by_name:
            raise ValidationError(
                f"Unknown column '{where.column}' in table '{self._name}'"
            )

        index = self._indexes.get(where.column)
        if index is not None:
            return sorted(index.lookup(where.value))

        return [
            row_id
            for row_id, row in self._rows.items()
            if values_equal(row[where.column], where.value)
        ]

    def __len__(self) -> int:
        return len(self._rows)

    def __repr__(self) -> str:
        cols = ", ".join(str(c) for c in self._columns)
        return f"Table({self._name}, [{cols}], rows={len(self._rows)})"
