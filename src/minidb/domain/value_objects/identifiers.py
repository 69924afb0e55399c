"""Core identifiers for the query engine."""

from __future__ import annotations

from typing import NewType


RowId = NewType("RowId", int)
"""Internal row identifier. Strictly increasing per table, never reused."""

FIRST_ROW_ID = RowId(1)

QUALIFIER_SEPARATOR = "."
"""Separator between a table name and a column name (``table.column``)."""


def qualify(table: str, column: str) -> str:
    """Return the qualified name ``table.column``."""
    return f"{table}{QUALIFIER_SEPARATOR}{column}"


def split_qualified(name: str) -> tuple[str | None, str]:
    """Split ``table.column`` into ``(table, column)``.

    Only the last segment is the column; anything before it is the
    qualifier. An unqualified name yields ``(None, name)``.
    """
    if QUALIFIER_SEPARATOR not in name:
        return None, name
    qualifier, _, column = name.rpartition(QUALIFIER_SEPARATOR)
    return qualifier, column
