"""Adapter factory."""

from typing import Dict, Type

from metrictest.config.models import DatabaseConfig, DatabaseType
from metrictest.db.base import BaseAdapter
from metrictest.db.adapters.postgresql import PostgreSQLAdapter
from metrictest.db.adapters.sqlite import SQLiteAdapter
from metrictest.exceptions import DatabaseError


class AdapterFactory:
    """Factory for creating database adapters."""

    _adapters: Dict[DatabaseType, Type[BaseAdapter]] = {
        DatabaseType.POSTGRESQL: PostgreSQLAdapter,
        DatabaseType.SQLITE: SQLiteAdapter,
    }

    @classmethod
    def create_adapter(cls, config: DatabaseConfig) -> BaseAdapter:
        """Create a database adapter based on configuration.

        Raises:
            DatabaseError: If database type is not supported.
        """
        adapter_class = cls._adapters.get(config.type)
        if not adapter_class:
            supported_types = [t.value for t in cls._adapters]
            raise DatabaseError(
                f"Unsupported database type: {config.type}. "
                f"Supported types: {supported_types}"
            )

        return adapter_class(config)

    @classmethod
    def get_supported_types(cls) -> list[DatabaseType]:
        """Get list of supported database types."""
        return list(cls._adapters.keys())
