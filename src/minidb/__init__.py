"""
minidb - embedded single-process relational engine

Parses a restricted SQL dialect, keeps typed tables with equality
indexes, executes CRUD statements and pairwise inner joins, and persists
each table to its own JSON record.
"""

__version__ = "0.1.0"
