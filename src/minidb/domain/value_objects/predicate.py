"""Single-equality WHERE predicate."""

from __future__ import annotations

from dataclasses import dataclass

from minidb.domain.value_objects.column import Value, values_equal


@dataclass(frozen=True)
class WhereClause:
    """``column = value``; the only predicate form the dialect supports.

    ``column`` may be qualified (``table.column``) as written by the
    user; the executor resolves it before handing it to a table.
    """

    column: str
    value: Value

    def matches(self, row: dict) -> bool:
        """Check a row (column name → value) against the predicate."""
        return self.column in row and values_equal(row[self.column], self.value)

    def __str__(self) -> str:
        if isinstance(self.value, str):
            return f"{self.column} = '{self.value}'"
        if self.value is None:
            return f"{self.column} = NULL"
        return f"{self.column} = {self.value}"
