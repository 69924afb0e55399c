"""Outbound adapters - implementations of outbound ports.

These adapters implement external dependencies such as durable table
storage.
"""

from minidb.adapters.outbound.json_table_store import (
    ColumnRecord,
    JsonTableStore,
    RowRecord,
    TableRecord,
)

__all__ = [
    "ColumnRecord",
    "JsonTableStore",
    "RowRecord",
    "TableRecord",
]
