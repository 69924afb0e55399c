"""Error kinds raised by the query engine.

Every error is raised where it is detected and propagates unchanged to
the ``Executor.execute`` boundary. Collaborators (REST boundary, console)
map them to their own presentation but never rewrite the message.
"""

from __future__ import annotations

from typing import Any


class MiniDBError(Exception):
    """Base class for all engine errors."""

    pass


class ParseError(MiniDBError):
    """Malformed or unsupported statement, clause or column type."""

    pass


class ValidationError(MiniDBError):
    """Statement is well-formed but inconsistent with the schema."""

    pass


class AmbiguousColumnError(ValidationError):
    """An unqualified column name matches both sides of a join."""

    def __init__(self, column: str, tables: tuple[str, str]) -> None:
        super().__init__(
            f"Ambiguous column '{column}': present in both '{tables[0]}' and '{tables[1]}'"
        )
        self.column = column
        self.tables = tables


class NotFoundError(MiniDBError):
    """A referenced object is not registered."""

    pass


class TableNotFoundError(NotFoundError):
    """A referenced table is not registered in the database."""

    def __init__(self, table: str) -> None:
        super().__init__(f"Table not found: {table}")
        self.table = table


class DuplicateKeyError(MiniDBError):
    """A unique or primary-key column already holds the value."""

    def __init__(self, column: str, value: Any) -> None:
        super().__init__(f"Duplicate value for unique column '{column}': {value!r}")
        self.column = column
        self.value = value
