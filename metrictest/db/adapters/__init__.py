"""Database adapters for the supported backends."""

from .postgresql import PostgreSQLAdapter
from .sqlite import SQLiteAdapter

__all__ = ["PostgreSQLAdapter", "SQLiteAdapter"]
