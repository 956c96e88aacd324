"""Tests for configuration models and the YAML parser."""
from textwrap import dedent

import pytest
import yaml
from pydantic import ValidationError

from metrictest.config import (
    ConfigParser,
    DatabaseConfig,
    DatabaseType,
    HarnessConfig,
    create_sample_config,
)
from metrictest.exceptions import ConfigurationError


def write(path, content):
    path.write_text(dedent(content), encoding="utf-8")
    return path


class TestDatabaseConfig:

    def test_sqlite_path_from_database_name(self):
        config = DatabaseConfig(type="sqlite", database="gha_test")
        assert config.path == "gha_test.db"
        assert config.database_name == "gha_test"

    def test_sqlite_name_from_path(self):
        config = DatabaseConfig(type="sqlite", path="/tmp/runs/gha_ci.db")
        assert config.database_name == "gha_ci"

    def test_driver_alias(self):
        assert DatabaseConfig(driver="sqlite", path="x.db").type == DatabaseType.SQLITE

    def test_sqlite_memory_rejected(self):
        with pytest.raises(ValidationError, match="memory"):
            DatabaseConfig(type="sqlite", path=":memory:")

    def test_sqlite_requires_location(self):
        with pytest.raises(ValidationError):
            DatabaseConfig(type="sqlite")

    def test_postgresql_requires_fields(self):
        with pytest.raises(ValidationError, match="username"):
            DatabaseConfig(type="postgresql", host="localhost", database="gha_test")

    def test_postgresql_password_optional(self):
        config = DatabaseConfig(type="postgresql", host="localhost", database="gha_test", username="gha_admin")
        assert config.password is None
        assert config.maintenance_database == "postgres"

    def test_port_range(self):
        with pytest.raises(ValidationError, match="Port"):
            DatabaseConfig(type="postgresql", host="h", database="d", username="u", port=70000)


class TestHarnessConfig:

    def test_defaults(self):
        config = HarnessConfig(database={"type": "sqlite", "path": "gha_test.db"})
        assert config.protected_databases == ["gha"]
        assert config.metrics.directory == "metrics"
        assert config.metrics.dialect == "sqlite"
        assert config.cases is None

    def test_postgresql_uses_catalog_root(self):
        config = HarnessConfig(database={"type": "postgresql", "host": "h", "database": "d", "username": "u"})
        assert config.metrics.dialect is None

    def test_explicit_dialect_kept(self):
        config = HarnessConfig(
            database={"type": "sqlite", "path": "gha_test.db"},
            metrics={"dialect": "custom"},
        )
        assert config.metrics.dialect == "custom"


class TestConfigParser:

    def test_load_with_env_vars(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PG_DB", "gha_ci")
        monkeypatch.delenv("PG_HOST", raising=False)
        path = write(tmp_path / "metrictest.yaml", """
            database:
              type: postgresql
              host: ${PG_HOST:-localhost}
              database: ${PG_DB}
              username: gha_admin
            protected_databases: [gha, gha_prod]
        """)

        config = ConfigParser().load_config(path)

        assert config.database.host == "localhost"
        assert config.database.database == "gha_ci"
        assert config.protected_databases == ["gha", "gha_prod"]

    def test_missing_env_var(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PG_DB_UNSET", raising=False)
        path = write(tmp_path / "metrictest.yaml", """
            database:
              type: sqlite
              database: ${PG_DB_UNSET}
        """)
        with pytest.raises(ConfigurationError, match="PG_DB_UNSET"):
            ConfigParser().load_config(path)

    def test_include_merges_and_local_wins(self, tmp_path):
        write(tmp_path / "base.yaml", """
            database:
              type: sqlite
              path: base.db
            metrics:
              directory: shared_metrics
        """)
        path = write(tmp_path / "metrictest.yaml", """
            include: base.yaml
            database:
              path: local.db
        """)

        config = ConfigParser().load_config(path)

        assert config.database.path == "local.db"
        assert config.metrics.directory == "shared_metrics"

    def test_missing_include(self, tmp_path):
        path = write(tmp_path / "metrictest.yaml", "include: nope.yaml\n")
        with pytest.raises(ConfigurationError, match="nope.yaml"):
            ConfigParser().load_config(path)

    def test_empty_file(self, tmp_path):
        path = write(tmp_path / "metrictest.yaml", "")
        with pytest.raises(ConfigurationError, match="empty"):
            ConfigParser().load_config(path)

    def test_validation_error(self, tmp_path):
        path = write(tmp_path / "metrictest.yaml", "database:\n  type: oracle\n")
        with pytest.raises(ConfigurationError, match="validation failed"):
            ConfigParser().load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            ConfigParser().load_config(tmp_path / "absent.yaml")

    def test_default_location(self, tmp_path, monkeypatch):
        write(tmp_path / "metrictest.yaml", "database:\n  type: sqlite\n  path: found.db\n")
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("METRICTEST_CONFIG_FILE", raising=False)

        assert ConfigParser().load_config().database.path == "found.db"


def test_sample_config(tmp_path, monkeypatch):
    for name in ("PG_HOST", "PG_DB", "PG_USER", "PG_PASS"):
        monkeypatch.delenv(name, raising=False)
    path = tmp_path / "sample.yaml"
    create_sample_config(path)

    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert raw["database"]["type"] == "postgresql"
    assert raw["protected_databases"] == ["gha"]

    config = ConfigParser().load_config(path)
    assert config.database.database == "gha_test"
