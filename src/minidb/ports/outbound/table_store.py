"""Table store port for durable per-table records.

This outbound port defines the contract for persisting tables. Each
table is stored as one self-contained record holding its name, its
column schema in declared order and its full row set including the
internal row ids.

Writes are whole-record replaces: saving a table overwrites its previous
record entirely. There is no write-ahead log and no atomicity across
tables; the last writer wins.
"""

from __future__ import annotations

from abc import abstractmethod
from enum import Enum
from typing import Protocol

from minidb.domain.entities import Table


class SyncMode(Enum):
    """Durability of a table write.

    FSYNC: Flush and fsync the record before it is renamed into place
    NONE: Rely on OS buffering (fastest, for tests)
    """

    FSYNC = "fsync"
    NONE = "none"


class TableStore(Protocol):
    """Protocol for durable table records.

    Thread Safety:
        Single-writer assumed. The engine serializes all statements.
    """

    @abstractmethod
    def load_all(self) -> list[Table]:
        """Load every parsable table record.

        Records that cannot be read or do not reconstruct a consistent
        table are skipped.

        Returns:
            Reconstructed tables with identical rows, next-row-id state
            and index membership as when they were saved.
        """
        ...

    @abstractmethod
    def save(self, table: Table) -> None:
        """Replace the record of ``table`` with its current state.

        Raises:
            OSError: If the write fails. In-memory state has already
                changed at that point and is not rolled back.
        """
        ...

    @abstractmethod
    def delete(self, name: str) -> None:
        """Remove the record of table ``name`` if one exists."""
        ...
