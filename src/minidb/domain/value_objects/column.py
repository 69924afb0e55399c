"""Column schema and the closed value model.

A cell value is one of ``int`` (Integer), ``str`` (Text) or ``None``
(null). Values are validated against the column's declared type at the
boundary (insert/update/load) and compared strictly everywhere else: an
Integer never equals a Text, a float never equals an Integer, and
``bool`` is not an Integer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from minidb.domain.errors import ValidationError


Value = Union[int, str, None]
"""A cell value: Integer, Text or null."""


class ColumnType(Enum):
    """Declared column value types."""

    INT = "INT"
    TEXT = "TEXT"

    @classmethod
    def from_name(cls, name: str) -> ColumnType | None:
        """Resolve a type word (``INT``, ``INTEGER``, ``TEXT``), any case."""
        return _TYPE_NAMES.get(name.upper())

    def accepts(self, value: Any) -> bool:
        """Check whether a non-null value belongs to this type."""
        if self is ColumnType.INT:
            return isinstance(value, int) and not isinstance(value, bool)
        return isinstance(value, str)


_TYPE_NAMES = {
    "INT": ColumnType.INT,
    "INTEGER": ColumnType.INT,
    "TEXT": ColumnType.TEXT,
}


@dataclass(frozen=True)
class Column:
    """Static description of one table attribute.

    Attributes:
        name: Column name, unique within its table (case-sensitive).
        column_type: Declared value type.
        primary_key: Whether the column is the primary key.
        unique: Whether the column carries a uniqueness constraint. A
            primary key is always unique.
    """

    name: str
    column_type: ColumnType
    primary_key: bool = False
    unique: bool = False

    def __post_init__(self) -> None:
        if self.primary_key and not self.unique:
            object.__setattr__(self, "unique", True)

    @property
    def indexed(self) -> bool:
        """Primary-key and unique columns own an equality index."""
        return self.primary_key or self.unique

    def validate(self, value: Any) -> Value:
        """Type-check a value for this column.

        Raises:
            ValidationError: If the value is not null and not of the
                declared type.
        """
        if value is None or self.column_type.accepts(value):
            return value
        raise ValidationError(
            f"Column '{self.name}' expects {self.column_type.value}, got {value!r}"
        )

    def __str__(self) -> str:
        flags = ""
        if self.primary_key:
            flags = " PRIMARY KEY"
        elif self.unique:
            flags = " UNIQUE"
        return f"{self.name} {self.column_type.value}{flags}"


def values_equal(left: Any, right: Any) -> bool:
    """Strict equality: same type and same value, no coercion."""
    return type(left) is type(right) and left == right
