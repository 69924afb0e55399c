"""Value objects for the query engine domain.

Value objects are immutable types that represent domain concepts.

Exports:
    Identifiers:
        - RowId: Internal row identifier
        - FIRST_ROW_ID: First identifier assigned by a fresh table
        - qualify / split_qualified: ``table.column`` helpers

    Schema:
        - ColumnType: Declared column types (INT, TEXT)
        - Column: Column definition with key flags
        - Value: Cell value union (int | str | None)
        - values_equal: Strict, non-coercing equality

    Predicates:
        - WhereClause: Single ``column = value`` predicate
"""

from minidb.domain.value_objects.column import Column, ColumnType, Value, values_equal
from minidb.domain.value_objects.identifiers import (
    FIRST_ROW_ID,
    QUALIFIER_SEPARATOR,
    RowId,
    qualify,
    split_qualified,
)
from minidb.domain.value_objects.predicate import WhereClause

__all__ = [
    # Identifiers
    "RowId",
    "FIRST_ROW_ID",
    "QUALIFIER_SEPARATOR",
    "qualify",
    "split_qualified",
    # Schema
    "Column",
    "ColumnType",
    "Value",
    "values_equal",
    # Predicates
    "WhereClause",
]
