"""Application layer for the database engine.

The application layer orchestrates domain logic to fulfill use cases:
keeping the table registry, executing statements and serializing
access for shared callers.

Exports:
    DatabaseEngine:
        - DatabaseEngine: Lock-serialized entry point for the database
    Database:
        - Database: Table registry backed by a TableStore
    Executor:
        - Executor: Parses and runs one statement at a time
        - ExecutionResult: Result of a statement
"""

from minidb.application.database import Database
from minidb.application.database_engine import DatabaseEngine
from minidb.application.executor import ExecutionResult, Executor, Row

__all__ = [
    "Database",
    "DatabaseEngine",
    "Executor",
    "ExecutionResult",
    "Row",
]
