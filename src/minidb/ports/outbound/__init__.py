"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for external systems that the
engine depends on, such as durable table storage.
"""

from minidb.ports.outbound.table_store import SyncMode, TableStore

__all__ = [
    "SyncMode",
    "TableStore",
]
