"""Provisioning and teardown of the per-case ephemeral database."""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Generator, Iterable

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from metrictest.config.models import DatabaseConfig
from metrictest.db.base import BaseAdapter
from metrictest.db.connection import AdapterFactory
from metrictest.db.schema import apply_structure
from metrictest.exceptions import (
    DatabaseError,
    DatabaseProvisioningError,
    ProtectedTargetError,
)

logger = logging.getLogger(__name__)

DEFAULT_PROTECTED_DATABASES = ("gha",)


def ensure_not_protected(name: str, protected_names: Iterable[str] = DEFAULT_PROTECTED_DATABASES) -> None:
    """Refuse to go on when ``name`` is one of the protected databases.

    Raises:
        ProtectedTargetError: If ``name`` is protected.
    """
    if name in set(protected_names):
        raise ProtectedTargetError(name)


@dataclass
class EphemeralDatabase:
    """A freshly created test database."""
    name: str
    adapter: BaseAdapter
    created_at: datetime = field(default_factory=datetime.now)
    schema_applied: bool = False

    @property
    def engine(self) -> Engine:
        return self.adapter.get_engine()

    def connect(self):
        """Context manager yielding a connection committed on success."""
        return self.adapter.get_connection()


class DatabaseLifecycleManager:
    """Drops, creates, structures and finally drops again the test database."""

    def __init__(
        self,
        adapter: BaseAdapter,
        protected_names: Iterable[str] = DEFAULT_PROTECTED_DATABASES,
    ) -> None:
        self.adapter = adapter
        self.protected_names = frozenset(protected_names)

    @classmethod
    def from_config(
        cls,
        config: DatabaseConfig,
        protected_names: Iterable[str] = DEFAULT_PROTECTED_DATABASES,
    ) -> "DatabaseLifecycleManager":
        return cls(AdapterFactory.create_adapter(config), protected_names)

    @property
    def database_name(self) -> str:
        return self.adapter.database_name

    def ensure_not_protected(self) -> None:
        ensure_not_protected(self.database_name, self.protected_names)

    def provision(self) -> EphemeralDatabase:
        """Drop any database with the target name and create it again.

        Raises:
            ProtectedTargetError: If the target is a protected database.
            DatabaseProvisioningError: If the drop or create fails, or the
                backend reports the database was not created.
        """
        self.ensure_not_protected()
        name = self.database_name

        try:
            self.adapter.drop_database()
            created = self.adapter.create_database()
        except DatabaseError as e:
            raise DatabaseProvisioningError(name, reason=e.message) from e

        if not created:
            raise DatabaseProvisioningError(name, reason="database still exists after drop")

        logger.info(f"Provisioned database '{name}'")
        return EphemeralDatabase(name=name, adapter=self.adapter)

    def apply_schema(self, db: EphemeralDatabase) -> None:
        """Create the base structure in ``db``.

        Raises:
            DatabaseProvisioningError: If any table cannot be created.
        """
        try:
            apply_structure(db.engine)
        except (SQLAlchemyError, DatabaseError) as e:
            raise DatabaseProvisioningError(
                db.name, reason=f"applying base structure failed: {e}"
            ) from e
        db.schema_applied = True
        logger.debug(f"Applied base structure to '{db.name}'")

    def teardown(self) -> None:
        """Dispose the engine and drop the target database.

        Raises:
            ProtectedTargetError: If the target is a protected database.
        """
        self.ensure_not_protected()
        self.adapter.drop_database()
        logger.info(f"Dropped database '{self.database_name}'")

    @contextmanager
    def ephemeral_database(
        self, debug: bool = False, apply_schema: bool = True
    ) -> Generator[EphemeralDatabase, None, None]:
        """Provision a database for the duration of the block.

        The database is dropped on every exit path unless ``debug`` is set, in
        which case it is left in place for inspection. A failed drop while the
        block is raising is logged so the original exception propagates.
        """
        db = self.provision()
        try:
            if apply_schema:
                self.apply_schema(db)
            yield db
        except BaseException:
            self._release(db, debug, unwinding=True)
            raise
        self._release(db, debug)

    def _release(self, db: EphemeralDatabase, debug: bool, unwinding: bool = False) -> None:
        if debug:
            self.adapter.close()
            logger.warning(f"Debug mode: database '{db.name}' left in place")
            return
        try:
            self.teardown()
        except Exception as e:
            if not unwinding:
                raise
            logger.error(f"Teardown of '{db.name}' failed: {e}")


@contextmanager
def ephemeral_database(
    config: DatabaseConfig,
    protected_names: Iterable[str] = DEFAULT_PROTECTED_DATABASES,
    debug: bool = False,
) -> Generator[EphemeralDatabase, None, None]:
    """Shortcut building the lifecycle manager from configuration."""
    manager = DatabaseLifecycleManager.from_config(config, protected_names)
    with manager.ephemeral_database(debug=debug) as db:
        yield db
