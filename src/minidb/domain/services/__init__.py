"""Domain services for logic that spans more than one entity."""

from minidb.domain.services.join import inner_join, prefix_row

__all__ = [
    "inner_join",
    "prefix_row",
]
