"""Database: the registry of tables and owner of their durable records.

On construction every parsable persisted table is loaded into the
registry. After that the registry is the source of truth; the store is
written one whole table at a time, synchronously, after each mutation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from minidb.adapters.outbound.json_table_store import JsonTableStore
from minidb.domain.entities import Table
from minidb.domain.errors import TableNotFoundError, ValidationError
from minidb.domain.value_objects import Column
from minidb.infrastructure.logging import get_logger
from minidb.infrastructure.metrics import MetricsRegistry, get_metrics
from minidb.ports.outbound import SyncMode, TableStore


logger = get_logger(__name__)


class Database:
    """Registry mapping table name → Table, backed by a TableStore.

    Thread Safety:
        None. Callers sharing one instance must serialize access
        (see DatabaseEngine).
    """

    def __init__(
        self,
        data_dir: str | Path,
        store: TableStore | None = None,
        sync_mode: SyncMode = SyncMode.FSYNC,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Open the database and load persisted tables.

        Args:
            data_dir: Storage root; created if missing.
            store: Table store to use (defaults to JSON files in data_dir).
            sync_mode: Durability of writes for the default store.
            metrics: Metrics registry (defaults to the global one).
        """
        self._data_dir = Path(data_dir)
        self._store: TableStore = store or JsonTableStore(self._data_dir, sync_mode=sync_mode)
        self._metrics = metrics or get_metrics()
        self._tables: dict[str, Table] = {}

        for table in self._store.load_all():
            if table.name in self._tables:
                logger.warning("table_record_duplicate", table=table.name)
                continue
            self._tables[table.name] = table
        self._metrics.tables.set(len(self._tables))

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def create_table(self, name: str, columns: Sequence[Column]) -> Table:
        """Register a new empty table and persist it.

        Raises:
            ValidationError: If the name is taken or the schema is invalid.
        """
        if name in self._tables:
            raise ValidationError(f"Table already exists: {name}")
        table = Table(name, columns)
        self._tables[name] = table
        self._metrics.tables.set(len(self._tables))
        self.persist_table(name)
        logger.info("table_created", table=name, columns=table.column_names)
        return table

    def drop_table(self, name: str) -> None:
        """Unregister a table and delete its record.

        Raises:
            TableNotFoundError: If the table is not registered.
        """
        if name not in self._tables:
            raise TableNotFoundError(name)
        del self._tables[name]
        self._store.delete(name)
        self._metrics.tables.set(len(self._tables))
        logger.info("table_dropped", table=name)

    def get_table(self, name: str) -> Table:
        """Look up a table.

        Raises:
            TableNotFoundError: If the table is not registered.
        """
        table = self._tables.get(name)
        if table is None:
            raise TableNotFoundError(name)
        return table

    def has_table(self, name: str) -> bool:
        return name in self._tables

    def list_tables(self) -> list[str]:
        """Registered table names in registration order."""
        return list(self._tables)

    def persist_table(self, name: str) -> None:
        """Overwrite the durable record of ``name`` with its current state.

        Raises:
            TableNotFoundError: If the table is not registered.
            OSError: If the write fails; memory is not rolled back.
        """
        table = self.get_table(name)
        try:
            self._store.save(table)
        except OSError:
            self._metrics.table_persists_total.labels(status="error").inc()
            raise
        self._metrics.table_persists_total.labels(status="success").inc()

    def __len__(self) -> int:
        return len(self._tables)

    def __contains__(self, name: object) -> bool:
        return name in self._tables
