"""Database adapters, base structure and ephemeral database lifecycle."""

from metrictest.db.base import BaseAdapter
from metrictest.db.connection import AdapterFactory
from metrictest.db.adapters import PostgreSQLAdapter, SQLiteAdapter
from metrictest.db.lifecycle import (
    DEFAULT_PROTECTED_DATABASES,
    DatabaseLifecycleManager,
    EphemeralDatabase,
    ensure_not_protected,
    ephemeral_database,
)
from metrictest.db.schema import apply_structure, metadata

__all__ = [
    "BaseAdapter",
    "AdapterFactory",
    "PostgreSQLAdapter",
    "SQLiteAdapter",
    "DEFAULT_PROTECTED_DATABASES",
    "DatabaseLifecycleManager",
    "EphemeralDatabase",
    "ensure_not_protected",
    "ephemeral_database",
    "apply_structure",
    "metadata",
]
