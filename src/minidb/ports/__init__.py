"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Outbound ports: Dependencies on external systems (e.g., TableStore)

Adapters implement these ports with concrete functionality.
"""

from minidb.ports.outbound import SyncMode, TableStore

__all__ = [
    # Outbound ports
    "SyncMode",
    "TableStore",
]
