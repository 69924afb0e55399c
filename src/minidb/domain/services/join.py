"""Pairwise inner equality join.

The left table always drives the loop. For each left row the matching
right rows are found either through the right table's index on the join
column or, when there is none, by scanning the whole right table once
per left row. The unindexed case is O(n·m) and stays that way: no hash
join is built behind the caller's back.

Output rows carry only qualified keys (``table.column``) so columns of
the two sides never collide. Rows without a partner are dropped.
A table cannot be joined with itself: both sides would share one prefix.
"""

from __future__ import annotations

from minidb.domain.entities import Table
from minidb.domain.errors import ValidationError
from minidb.domain.value_objects import Value, qualify, split_qualified, values_equal


def inner_join(
    left: Table,
    right: Table,
    left_key: str,
    right_key: str,
) -> list[dict[str, Value]]:
    """Join ``left`` and ``right`` on ``left_key = right_key``.

    Keys may be qualified (``a.id``); only the column part is used.

    Args:
        left: Driving table.
        right: Probed table.
        left_key: Join column of the left table.
        right_key: Join column of the right table.

    Returns:
        Combined rows in left-row order, then right-row order.

    Raises:
        ValidationError: If both sides are the same table.
    """
    if left.name == right.name:
        raise ValidationError(f"Self-join is not supported: '{left.name}'")

    _, left_column = split_qualified(left_key)
    _, right_column = split_qualified(right_key)

    indexed = right.get_index(right_column) is not None
    right_rows = [] if indexed else right.all_rows()

    results: list[dict[str, Value]] = []
    for left_row in left.all_rows():
        value = left_row.get(left_column)
        if indexed:
            matches = right.lookup_rows(right_column, value)
        else:
            matches = [
                row for row in right_rows
                if right_column in row and values_equal(row[right_column], value)
            ]

        for right_row in matches:
            combined = prefix_row(left_row, left.name)
            combined.update(prefix_row(right_row, right.name))
            results.append(combined)

    return results


def prefix_row(row: dict[str, Value], table_name: str) -> dict[str, Value]:
    """Qualify every key of ``row`` with ``table_name``."""
    return {qualify(table_name, column): value for column, value in row.items()}
