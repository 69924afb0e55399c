"""Equality index: column value → set of owning row identifiers.

Each index instance is typed by its owning column: it only ever holds
keys of the column's declared type (plus null). Looking up a value of
any other type yields nothing, so ``1.0`` never finds the bucket for
``1`` even though they hash alike.
"""

from __future__ import annotations

from minidb.domain.errors import DuplicateKeyError, ValidationError
from minidb.domain.value_objects import Column, RowId, Value


class EqualityIndex:
    """Hash index over one column, optionally enforcing uniqueness.

    Example:
        >>> index = EqualityIndex(Column("id", ColumnType.INT, primary_key=True))
        >>> index.insert(1, RowId(1))
        >>> index.lookup(1)
        {1}
    """

    def __init__(self, column: Column, unique: bool | None = None) -> None:
        """Initialize an empty index.

        Args:
            column: The indexed column; its type bounds the key type.
            unique: Enforce at most one row id per key. Defaults to the
                column's primary-key/unique flags.
        """
        self._column = column
        self._unique = column.indexed if unique is None else unique
        self._buckets: dict[Value, set[RowId]] = {}

    @property
    def column(self) -> str:
        return self._column.name

    @property
    def unique(self) -> bool:
        return self._unique

    def insert(self, value: Value, row_id: RowId) -> None:
        """Add ``row_id`` to the bucket for ``value``.

        Raises:
            DuplicateKeyError: If the index is unique and the bucket
                already holds an entry. Nothing is mutated in that case.
            ValidationError: If the key does not match the column type.
        """
        if not self._accepts(value):
            raise ValidationError(
                f"Index on '{self.column}' cannot hold {value!r}"
            )
        bucket = self._buckets.get(value)
        if bucket and self._unique:
            raise DuplicateKeyError(self.column, value)
        if bucket is None:
            bucket = self._buckets[value] = set()
        bucket.add(row_id)

    def remove(self, value: Value, row_id: RowId) -> None:
        """Remove ``row_id`` from the bucket for ``value``; no-op if absent."""
        if not self._accepts(value):
            return
        bucket = self._buckets.get(value)
        if bucket is None:
            return
        bucket.discard(row_id)
        if not bucket:
            del self._buckets[value]

    def update(self, old_value: Value, new_value: Value, row_id: RowId) -> None:
        """Move ``row_id`` from ``old_value`` to ``new_value``.

        If the insert of the new key is rejected, the old entry is put
        back before the error propagates.
        """
        if old_value == new_value and type(old_value) is type(new_value):
            return
        self.remove(old_value, row_id)
        try:
            self.insert(new_value, row_id)
        except (DuplicateKeyError, ValidationError):
            self.insert(old_value, row_id)
            raise

    def lookup(self, value: Value) -> set[RowId]:
        """Return a snapshot copy of the row ids holding ``value``."""
        if not self._accepts(value):
            return set()
        return set(self._buckets.get(value, ()))

    def _accepts(self, value: Value) -> bool:
        return value is None or self._column.column_type.accepts(value)

    def __len__(self) -> int:
        """Number of distinct keys currently indexed."""
        return len(self._buckets)

    def __contains__(self, value: object) -> bool:
        return self._accepts(value) and value in self._buckets

    def __repr__(self) -> str:
        kind = "unique" if self._unique else "non-unique"
        return f"EqualityIndex({self.column}, {kind}, keys={len(self)})"
