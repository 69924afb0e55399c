"""Inbound adapters for the database engine.

Inbound adapters handle incoming requests and convert them to
internal domain operations.

Exports:
    SQL Parser:
        - SQLParser: Parser that converts statement text to statements
        - Statement: Base class for parsed statements
        - StatementType: The five statement kinds

The REST API (``minidb.adapters.inbound.rest_api``) and the command line
(``minidb.adapters.inbound.console``) sit on top of the application
layer and are imported from their own modules.
"""

from minidb.adapters.inbound.sql_parser import (
    CreateTableStatement,
    DeleteStatement,
    InsertStatement,
    JoinClause,
    SelectStatement,
    SQLParser,
    Statement,
    StatementTokenizer,
    StatementType,
    UpdateStatement,
)

__all__ = [
    # SQL Parser
    "SQLParser",
    "StatementTokenizer",
    # Types
    "StatementType",
    # Statements
    "Statement",
    "CreateTableStatement",
    "InsertStatement",
    "JoinClause",
    "SelectStatement",
    "UpdateStatement",
    "DeleteStatement",
]
