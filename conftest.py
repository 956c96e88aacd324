from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from metrictest.config.models import DatabaseConfig, DatabaseType
from metrictest.db.adapters.sqlite import SQLiteAdapter
from metrictest.db.lifecycle import DatabaseLifecycleManager

REPO_ROOT = Path(__file__).parent

FROZEN_NOW = datetime(2020, 1, 2, 3, 4, 5)


@pytest.fixture
def metrics_dir() -> Path:
    """Metric templates shipped with the repository."""
    return REPO_ROOT / "metrics"


@pytest.fixture
def frozen_clock():
    return lambda: FROZEN_NOW


@pytest.fixture
def sqlite_config(tmp_path: Path) -> DatabaseConfig:
    return DatabaseConfig(type=DatabaseType.SQLITE, path=str(tmp_path / "gha_test.db"))


@pytest.fixture
def sqlite_adapter(sqlite_config: DatabaseConfig):
    adapter = SQLiteAdapter(sqlite_config)
    try:
        yield adapter
    finally:
        adapter.close()


@pytest.fixture
def lifecycle(sqlite_adapter: SQLiteAdapter) -> DatabaseLifecycleManager:
    return DatabaseLifecycleManager(sqlite_adapter, protected_names=["gha"])


@pytest.fixture
def database(lifecycle: DatabaseLifecycleManager):
    """Ephemeral database with the base structure applied."""
    with lifecycle.ephemeral_database() as db:
        yield db


@pytest.fixture
def connection(database):
    with database.connect() as conn:
        yield conn
