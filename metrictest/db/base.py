"""Base database adapter and connection management."""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from metrictest.config.models import DatabaseConfig
from metrictest.exceptions import DatabaseError


class BaseAdapter(ABC):
    """Base class for database adapters.

    An adapter owns the engine bound to the test database and knows how to
    drop and create that database on its backend.
    """

    def __init__(self, config: DatabaseConfig) -> None:
        """Initialize database adapter.

        Args:
            config: Database configuration.
        """
        self.config = config
        self._engine: Optional[Engine] = None

    @property
    def database_name(self) -> str:
        return self.config.database_name

    @abstractmethod
    def build_connection_string(self) -> str:
        """Build the connection string of the test database."""
        pass

    @abstractmethod
    def get_driver_name(self) -> str:
        """Get the driver name for this adapter."""
        pass

    @abstractmethod
    def database_exists(self) -> bool:
        """Check whether the test database currently exists."""
        pass

    @abstractmethod
    def drop_database(self) -> None:
        """Drop the test database if it exists.

        Raises:
            DatabaseError: If the backend refuses the drop.
        """
        pass

    @abstractmethod
    def create_database(self) -> bool:
        """Create the test database.

        Returns:
            True if a new database was created, False if it already existed.

        Raises:
            DatabaseError: If the backend refuses the create.
        """
        pass

    def get_engine(self) -> Engine:
        """Get or create SQLAlchemy engine.

        Connections are not pooled: closing one really closes it, so the
        database can be dropped right after use.

        Raises:
            DatabaseError: If engine creation fails.
        """
        if self._engine is None:
            try:
                engine_args = {
                    'poolclass': NullPool,
                    'echo': False,  # Set to True for SQL debugging
                }
                engine_args.update(self._get_engine_options())

                engine = create_engine(self.build_connection_string(), **engine_args)
                self._configure_engine(engine)
                self._engine = engine

            except SQLAlchemyError as e:
                raise DatabaseError(
                    f"Failed to create database engine: {e}",
                    database_name=self.database_name,
                ) from e

        return self._engine

    def _get_engine_options(self) -> Dict[str, Any]:
        """Get database-specific engine options."""
        return {}

    def _configure_engine(self, engine: Engine) -> None:
        """Hook for backend specific engine event listeners."""
        pass

    @contextmanager
    def get_connection(self) -> Generator[Connection, None, None]:
        """Get database connection with automatic cleanup.

        The transaction is committed when the block exits normally and rolled
        back otherwise. Database driver errors are re-raised as DatabaseError;
        any other exception propagates unchanged.

        Yields:
            SQLAlchemy connection.
        """
        engine = self.get_engine()
        connection = None

        try:
            connection = engine.connect()
            yield connection
            connection.commit()

        except SQLAlchemyError as e:
            if connection is not None:
                self._rollback_quietly(connection)
            raise DatabaseError(
                f"Database connection error: {e}",
                database_name=self.database_name,
            ) from e

        except Exception:
            if connection is not None:
                self._rollback_quietly(connection)
            raise

        finally:
            if connection is not None:
                connection.close()

    @staticmethod
    def _rollback_quietly(connection: Connection) -> None:
        try:
            connection.rollback()
        except SQLAlchemyError:
            pass  # connection is discarded right after

    def test_connection(self) -> bool:
        """Test database connection.

        Raises:
            DatabaseError: If connection test fails.
        """
        with self.get_connection() as conn:
            conn.execute(text("SELECT 1 as test")).fetchone()
        return True

    def close(self) -> None:
        """Dispose the engine bound to the test database."""
        if self._engine:
            self._engine.dispose()
            self._engine = None
