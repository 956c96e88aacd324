"""PostgreSQL database adapter."""

from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional
from urllib.parse import quote_plus

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from metrictest.config.models import DatabaseConfig
from metrictest.db.base import BaseAdapter
from metrictest.exceptions import DatabaseError


class PostgreSQLAdapter(BaseAdapter):
    """PostgreSQL database adapter.

    CREATE/DROP DATABASE cannot run inside a transaction block nor against the
    database being dropped, so they go through an AUTOCOMMIT connection to the
    configured maintenance database.
    """

    def __init__(self, config: DatabaseConfig) -> None:
        """Initialize PostgreSQL adapter."""
        super().__init__(config)

        # Set default port if not specified
        if self.config.port is None:
            self.config.port = 5432

    def get_driver_name(self) -> str:
        """Get the driver name for PostgreSQL."""
        return "psycopg2"

    def build_connection_string(self, database: Optional[str] = None) -> str:
        """Build PostgreSQL connection string.

        Args:
            database: Database to connect to, the test database by default.

        Raises:
            DatabaseError: If required configuration is missing.
        """
        if not all([self.config.host, self.config.database, self.config.username]):
            raise DatabaseError("PostgreSQL requires host, database and username")

        credentials = self.config.username
        if self.config.password:
            # URL encode password to handle special characters
            credentials = f"{credentials}:{quote_plus(self.config.password)}"

        connection_string = (
            f"postgresql+psycopg2://{credentials}@"
            f"{self.config.host}:{self.config.port}/{database or self.config.database}"
        )

        options = {
            k: v for k, v in self.config.options.items()
            if k not in ('connect_timeout', 'application_name')
        }
        if 'sslmode' not in options:
            options['sslmode'] = 'prefer'

        option_string = "&".join([f"{k}={v}" for k, v in options.items()])
        return f"{connection_string}?{option_string}"

    def _get_engine_options(self) -> Dict[str, Any]:
        """Get PostgreSQL-specific engine options."""
        return {
            'connect_args': {
                'connect_timeout': self.config.options.get('connect_timeout', 10),
                'application_name': self.config.options.get('application_name', 'metrictest'),
            }
        }

    @contextmanager
    def _maintenance_connection(self) -> Generator[Connection, None, None]:
        engine = create_engine(
            self.build_connection_string(self.config.maintenance_database),
            poolclass=NullPool,
            isolation_level="AUTOCOMMIT",
            **self._get_engine_options(),
        )
        try:
            with engine.connect() as connection:
                yield connection
        finally:
            engine.dispose()

    def _quoted_name(self, connection: Connection) -> str:
        return connection.dialect.identifier_preparer.quote(self.database_name)

    def database_exists(self) -> bool:
        """Check pg_database for the test database."""
        try:
            with self._maintenance_connection() as conn:
                row = conn.execute(
                    text("SELECT 1 FROM pg_database WHERE datname = :name"),
                    {"name": self.database_name},
                ).fetchone()
                return row is not None
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Failed to look up database '{self.database_name}': {e}",
                database_name=self.database_name,
            ) from e

    def drop_database(self) -> None:
        """Drop the test database if it exists."""
        self.close()
        try:
            with self._maintenance_connection() as conn:
                conn.execute(text(f"DROP DATABASE IF EXISTS {self._quoted_name(conn)}"))
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Failed to drop database '{self.database_name}': {e}",
                database_name=self.database_name,
            ) from e

    def create_database(self) -> bool:
        """Create the test database unless it already exists."""
        try:
            with self._maintenance_connection() as conn:
                exists = conn.execute(
                    text("SELECT 1 FROM pg_database WHERE datname = :name"),
                    {"name": self.database_name},
                ).fetchone()
                if exists is not None:
                    return False
                conn.execute(text(f"CREATE DATABASE {self._quoted_name(conn)}"))
                return True
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Failed to create database '{self.database_name}': {e}",
                database_name=self.database_name,
            ) from e
