"""SQLite database adapter."""

import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Pattern

from sqlalchemy import event
from sqlalchemy.engine import Engine

from metrictest.config.models import DatabaseConfig
from metrictest.db.base import BaseAdapter
from metrictest.exceptions import DatabaseError


@lru_cache(maxsize=64)
def _compile(pattern: str) -> Pattern[str]:
    return re.compile(pattern)


def regexp(pattern: Optional[str], value: Optional[str]) -> Optional[bool]:
    """Backs the ``value REGEXP pattern`` operator."""
    if pattern is None or value is None:
        return None
    return _compile(pattern).search(value) is not None


def regexp_substr(value: Optional[str], pattern: Optional[str]) -> Optional[str]:
    """Return the first capture group of the first match, or the whole match.

    Mirrors PostgreSQL's ``substring(value from pattern)``: NULL when nothing
    matches.
    """
    if pattern is None or value is None:
        return None
    match = _compile(pattern).search(value)
    if match is None:
        return None
    if match.re.groups:
        return match.group(1)
    return match.group(0)


class SQLiteAdapter(BaseAdapter):
    """SQLite database adapter.

    The database is the file at ``config.path``: dropping unlinks it and
    creating it opens a first connection.
    """

    def __init__(self, config: DatabaseConfig) -> None:
        """Initialize SQLite adapter."""
        super().__init__(config)

        if not self.config.path:
            raise DatabaseError("SQLite requires a database file path")

    @property
    def database_path(self) -> Path:
        # Convert relative paths to absolute paths
        db_path = Path(self.config.path)
        if not db_path.is_absolute():
            db_path = Path.cwd() / db_path
        return db_path

    def get_driver_name(self) -> str:
        """Get the driver name for SQLite."""
        return "sqlite"

    def build_connection_string(self) -> str:
        """Build SQLite connection string."""
        return f"sqlite:///{self.database_path}"

    def _get_engine_options(self) -> Dict[str, Any]:
        """Get SQLite-specific engine options."""
        return {
            'connect_args': {
                'check_same_thread': False,
                'timeout': self.config.options.get('timeout', 30),
            }
        }

    def _configure_engine(self, engine: Engine) -> None:
        """Register the regular expression functions metric templates use."""

        @event.listens_for(engine, "connect")
        def register_functions(dbapi_connection, connection_record):
            dbapi_connection.create_function("regexp", 2, regexp, deterministic=True)
            dbapi_connection.create_function("regexp_substr", 2, regexp_substr, deterministic=True)

    def database_exists(self) -> bool:
        """Check whether the database file is present."""
        return self.database_path.exists()

    def drop_database(self) -> None:
        """Remove the database file if it exists."""
        self.close()
        try:
            self.database_path.unlink(missing_ok=True)
        except OSError as e:
            raise DatabaseError(
                f"Failed to drop database '{self.database_name}': {e}",
                database_name=self.database_name,
            ) from e

    def create_database(self) -> bool:
        """Create the database file by opening a first connection."""
        if self.database_exists():
            return False
        try:
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DatabaseError(
                f"Failed to create database '{self.database_name}': {e}",
                database_name=self.database_name,
            ) from e
        with self.get_connection():
            pass
        return True
