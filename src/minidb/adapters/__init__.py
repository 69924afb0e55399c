"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Inbound adapters: Handle incoming requests (SQL text, REST, CLI)
- Outbound adapters: Implement external dependencies (table records on disk)
"""

from minidb.adapters.outbound import JsonTableStore

__all__ = [
    # Outbound adapters
    "JsonTableStore",
]
