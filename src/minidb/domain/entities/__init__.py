"""Domain entities for the query engine.

Entities have identity and a lifecycle: a table lives from CREATE (or
load) until it is dropped; an index lives and dies with its table.

Exports:
    - Table: Typed row storage owning its equality indexes
    - StoredRow: A row paired with its internal id, as persisted
    - EqualityIndex: Column value → row-id set, optionally unique
"""

from minidb.domain.entities.index import EqualityIndex
from minidb.domain.entities.table import StoredRow, Table

__all__ = [
    "EqualityIndex",
    "StoredRow",
    "Table",
]
