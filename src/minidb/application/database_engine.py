"""Database Engine - Unified entry point for the database.

This module provides the DatabaseEngine class that owns one Database and
one Executor and serializes every statement through a single lock. The
core assumes exactly one logical reader/writer; the engine is what lets
a network boundary or several threads share it.

Usage:
    from minidb.application import DatabaseEngine

    with DatabaseEngine(data_dir="/path/to/data") as db:
        db.execute("CREATE TABLE users(id INTEGER PRIMARY KEY, name TEXT)")
        db.execute("INSERT INTO users VALUES(1, 'Ann')")
        rows = db.execute("SELECT * FROM users")
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

from minidb.application.database import Database
from minidb.application.executor import ExecutionResult, Executor
from minidb.infrastructure.config import Config
from minidb.infrastructure.logging import get_logger
from minidb.infrastructure.metrics import MetricsRegistry
from minidb.ports.outbound import SyncMode


logger = get_logger(__name__)


class DatabaseEngine:
    """Serialized facade over Database + Executor.

    Thread Safety:
        Every public method that touches tables holds the engine lock,
        so statements from different threads never interleave.
    """

    def __init__(
        self,
        data_dir: str | Path | None = None,
        config: Config | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the engine (tables are loaded on start()).

        Args:
            data_dir: Storage root. Overrides ``config.storage.data_dir``.
            config: Configuration; defaults are used if None.
            metrics: Metrics registry (defaults to the global one).
        """
        self._config = config or Config()
        self._data_dir = Path(data_dir) if data_dir is not None else self._config.storage.data_dir
        self._sync_mode = SyncMode(self._config.storage.sync_mode)
        self._metrics = metrics

        self._lock = threading.Lock()
        self._database: Database | None = None
        self._executor: Executor | None = None
        self._started = False

    @property
    def data_dir(self) -> Path:
        """Get the data directory path."""
        return self._data_dir

    @property
    def is_started(self) -> bool:
        """Check if the engine is started."""
        return self._started

    @property
    def database(self) -> Database:
        """The underlying database (engine must be started)."""
        self._check_started()
        return self._database

    def start(self) -> None:
        """Load all persisted tables and get ready to execute.

        Raises:
            RuntimeError: If already started.
        """
        with self._lock:
            if self._started:
                raise RuntimeError("Database engine already started")

            self._database = Database(
                self._data_dir,
                sync_mode=self._sync_mode,
                metrics=self._metrics,
            )
            self._executor = Executor(self._database, metrics=self._metrics)
            self._started = True

        logger.info(
            "engine_started",
            data_dir=str(self._data_dir),
            tables=len(self._database),
        )

    def stop(self) -> None:
        """Release the database.

        Every statement has already been persisted when it returned, so
        there is nothing to flush.

        Raises:
            RuntimeError: If not started.
        """
        with self._lock:
            self._check_started()
            self._executor = None
            self._database = None
            self._started = False

        logger.info("engine_stopped", data_dir=str(self._data_dir))

    def execute(self, sql: str) -> ExecutionResult:
        """Execute one statement under the engine lock.

        Raises:
            RuntimeError: If the engine is not started.
            MiniDBError: Whatever the statement raises, unchanged.
        """
        with self._lock:
            self._check_started()
            return self._executor.execute(sql)

    def execute_many(self, statements: list[str]) -> list[ExecutionResult]:
        """Execute statements in order, stopping at the first error."""
        return [self.execute(sql) for sql in statements]

    def list_tables(self) -> list[str]:
        with self._lock:
            self._check_started()
            return self._database.list_tables()

    def get_stats(self) -> dict[str, Any]:
        """Get engine statistics.

        Returns:
            Dictionary with the data directory and per-table row counts.
        """
        with self._lock:
            stats: dict[str, Any] = {
                "started": self._started,
                "data_dir": str(self._data_dir),
                "sync_mode": self._sync_mode.value,
            }
            if self._database is not None:
                tables = {
                    name: {
                        "rows": self._database.get_table(name).row_count,
                        "next_row_id": self._database.get_table(name).next_row_id,
                    }
                    for name in self._database.list_tables()
                }
                stats["table_count"] = len(tables)
                stats["tables"] = tables
            return stats

    def _check_started(self) -> None:
        if not self._started:
            raise RuntimeError("Database engine not started")

    def __enter__(self) -> "DatabaseEngine":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.stop()
