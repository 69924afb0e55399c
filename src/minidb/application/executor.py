"""Statement executor.

The executor is the single ``execute(sql)`` entry point of the engine. It
parses one statement, dispatches on its kind, and returns a plain Python
result:

    CREATE  -> {"message": "Table <name> created"}
    INSERT  -> the inserted row (column -> value)
    SELECT  -> list of rows, projected to the requested columns
    UPDATE  -> {"updated": <count>}
    DELETE  -> {"deleted": <count>}

Every mutating statement re-writes the affected table's record once the
in-memory change has succeeded. Errors propagate unchanged; the executor
only observes them (log line, metrics, span status) on the way out.
"""

from __future__ import annotations

import time
from typing import Any, Union

from minidb.adapters.inbound.sql_parser import (
    CreateTableStatement,
    DeleteStatement,
    InsertStatement,
    JoinClause,
    SelectStatement,
    SQLParser,
    Statement,
    UpdateStatement,
)
from minidb.application.database import Database
from minidb.domain.entities import Table
from minidb.domain.errors import AmbiguousColumnError, ValidationError
from minidb.domain.services import inner_join
from minidb.domain.value_objects import Value, WhereClause, qualify, split_qualified
from minidb.infrastructure.logging import get_logger
from minidb.infrastructure.metrics import MetricsRegistry, get_metrics
from minidb.infrastructure.tracing import statement_span


Row = dict[str, Value]
ExecutionResult = Union[dict[str, Any], list[Row]]

logger = get_logger(__name__)


class Executor:
    """Parses and runs statements against a Database.

    Thread Safety:
        None. Use DatabaseEngine to share one executor between callers.
    """

    def __init__(
        self,
        database: Database,
        parser: SQLParser | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._db = database
        self._parser = parser or SQLParser()
        self._metrics = metrics or get_metrics()

    @property
    def database(self) -> Database:
        return self._db

    def execute(self, sql: str) -> ExecutionResult:
        """Execute one statement.

        Args:
            sql: Statement text.

        Returns:
            The statement's result (see module docstring).

        Raises:
            ParseError: Malformed or unsupported statement.
            ValidationError: Schema, type or arity violation.
            NotFoundError: Unknown table.
            DuplicateKeyError: Unique or primary-key violation.
            OSError: The table record could not be written.
        """
        start = time.perf_counter()
        statement_type = "unknown"
        table_name: str | None = None

        with statement_span(sql) as span:
            try:
                statement = self._parser.parse(sql)
                statement_type = statement.statement_type.value
                table_name = statement.table_name
                span.set_attribute("minidb.statement_type", statement_type)
                span.set_attribute("minidb.table", table_name)

                result = self._dispatch(statement)
            except Exception as e:
                duration = time.perf_counter() - start
                self._metrics.statements_total.labels(
                    statement_type=statement_type, status="error"
                ).inc()
                self._metrics.statement_latency_seconds.labels(
                    statement_type=statement_type
                ).observe(duration)
                logger.warning(
                    "statement_failed",
                    statement_type=statement_type,
                    table=table_name,
                    error_type=type(e).__name__,
                    error=str(e),
                    duration_ms=round(duration * 1000, 3),
                )
                raise

        duration = time.perf_counter() - start
        self._metrics.statements_total.labels(
            statement_type=statement_type, status="success"
        ).inc()
        self._metrics.statement_latency_seconds.labels(
            statement_type=statement_type
        ).observe(duration)
        logger.debug(
            "statement_executed",
            statement_type=statement_type,
            table=table_name,
            duration_ms=round(duration * 1000, 3),
        )
        return result

    def _dispatch(self, statement: Statement) -> ExecutionResult:
        if isinstance(statement, CreateTableStatement):
            return self._execute_create_table(statement)
        elif isinstance(statement, InsertStatement):
            return self._execute_insert(statement)
        elif isinstance(statement, SelectStatement):
            return self._execute_select(statement)
        elif isinstance(statement, UpdateStatement):
            return self._execute_update(statement)
        elif isinstance(statement, DeleteStatement):
            return self._execute_delete(statement)
        raise ValidationError(f"Unsupported statement: {statement}")

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _execute_create_table(self, stmt: CreateTableStatement) -> dict[str, Any]:
        self._db.create_table(stmt.table_name, stmt.columns)
        return {"message": f"Table {stmt.table_name} created"}

    def _execute_insert(self, stmt: InsertStatement) -> Row:
        table = self._db.get_table(stmt.table_name)
        if len(stmt.values) != len(table.columns):
            raise ValidationError(
                "Values count does not match table schema: "
                f"expected {len(table.columns)}, got {len(stmt.values)}"
            )

        row = table.insert(dict(zip(table.column_names, stmt.values)))
        self._db.persist_table(table.name)
        return row

    def _execute_select(self, stmt: SelectStatement) -> list[Row]:
        table = self._db.get_table(stmt.table_name)
        if stmt.join is not None:
            return self._execute_join(table, stmt.join, stmt)

        projection = None
        if stmt.columns is not None:
            projection = {name: self._resolve_column(table, name) for name in stmt.columns}

        rows = table.select(self._resolve_where(table, stmt.where))
        if projection is None:
            return rows
        return [{key: row[column] for key, column in projection.items()} for row in rows]

    def _execute_join(
        self,
        left: Table,
        join: JoinClause,
        stmt: SelectStatement,
    ) -> list[Row]:
        right = self._db.get_table(join.table_name)
        if right.name == left.name:
            raise ValidationError(f"Self-join is not supported: '{left.name}'")

        left_key, right_key = join.left_key, join.right_key
        left_qualifier, _ = split_qualified(left_key)
        right_qualifier, _ = split_qualified(right_key)
        if left_qualifier == right.name and right_qualifier == left.name:
            left_key, right_key = right_key, left_key

        left_column = self._resolve_join_key(left, left_key)
        right_column = self._resolve_join_key(right, right_key)

        projection = None
        if stmt.columns is not None:
            projection = {
                name: self._resolve_joined_column(left, right, name) for name in stmt.columns
            }
        where = None
        if stmt.where is not None:
            where = WhereClause(
                self._resolve_joined_column(left, right, stmt.where.column),
                stmt.where.value,
            )

        rows = inner_join(left, right, left_column, right_column)
        if where is not None:
            rows = [row for row in rows if where.matches(row)]
        if projection is None:
            return rows
        return [{key: row[column] for key, column in projection.items()} for row in rows]

    def _execute_update(self, stmt: UpdateStatement) -> dict[str, Any]:
        table = self._db.get_table(stmt.table_name)
        updated = table.update(self._resolve_where(table, stmt.where), stmt.assignments)
        self._db.persist_table(table.name)
        return {"updated": updated}

    def _execute_delete(self, stmt: DeleteStatement) -> dict[str, Any]:
        table = self._db.get_table(stmt.table_name)
        deleted = table.delete(self._resolve_where(table, stmt.where))
        self._db.persist_table(table.name)
        return {"deleted": deleted}

    # ------------------------------------------------------------------
    # Name resolution
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_column(table: Table, name: str) -> str:
        """Strip any qualifier and check the column exists in ``table``."""
        _, column = split_qualified(name)
        if not table.has_column(column):
            raise ValidationError(f"Unknown column '{column}' in table '{table.name}'")
        return column

    def _resolve_where(self, table: Table, where: WhereClause | None) -> WhereClause | None:
        if where is None:
            return None
        return WhereClause(self._resolve_column(table, where.column), where.value)

    @staticmethod
    def _resolve_join_key(table: Table, key: str) -> str:
        qualifier, column = split_qualified(key)
        if qualifier is not None and qualifier != table.name:
            raise ValidationError(f"Join key '{key}' does not refer to table '{table.name}'")
        if not table.has_column(column):
            raise ValidationError(f"Unknown column '{column}' in table '{table.name}'")
        return column

    @staticmethod
    def _resolve_joined_column(left: Table, right: Table, name: str) -> str:
        """Map a column reference to its qualified key in joined rows."""
        qualifier, column = split_qualified(name)

        if qualifier is not None:
            for table in (left, right):
                if table.name == qualifier:
                    if not table.has_column(column):
                        raise ValidationError(
                            f"Unknown column '{column}' in table '{table.name}'"
                        )
                    return qualify(table.name, column)
            raise ValidationError(f"Table '{qualifier}' is not part of the join")

        owners = [table for table in (left, right) if table.has_column(column)]
        if len(owners) > 1:
            raise AmbiguousColumnError(column, (left.name, right.name))
        if not owners:
            raise ValidationError(
                f"Unknown column '{column}' in tables '{left.name}' and '{right.name}'"
            )
        return qualify(owners[0].name, column)
