"""Pydantic models for metrictest configuration."""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    Field,
    field_validator,
    model_validator,
    AliasChoices,
    ConfigDict,
)
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseType(str, Enum):
    """Supported database types."""
    POSTGRESQL = "postgresql"
    SQLITE = "sqlite"


class DatabaseConfig(BaseModel):
    """Connection parameters of the ephemeral test database."""

    model_config = ConfigDict(populate_by_name=True)

    type: DatabaseType = Field(validation_alias=AliasChoices("type", "driver"))
    host: Optional[str] = None
    port: Optional[int] = None
    database: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    path: Optional[str] = None  # For SQLite
    maintenance_database: str = Field(
        default="postgres",
        description="Database used to issue CREATE/DROP DATABASE on server backends",
    )
    options: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('port')
    def validate_port(cls, v):
        """Validate port number range."""
        if v is not None and (v < 1 or v > 65535):
            raise ValueError("Port must be between 1 and 65535")
        return v

    @model_validator(mode='after')
    def validate_database_config(self):
        """Validate database-specific required fields."""
        if self.type == DatabaseType.SQLITE:
            if not (self.path or self.database):
                raise ValueError("SQLite databases require a 'path' or 'database' field")
            if not self.path:
                # Allow configs that specify `database` instead of `path`
                object.__setattr__(self, "path", f"{self.database}.db")
            if self.path == ":memory:":
                raise ValueError("SQLite test databases must be files, ':memory:' cannot be dropped and recreated")
            return self

        required_fields = ['host', 'database', 'username']
        for field in required_fields:
            if not getattr(self, field):
                raise ValueError(f"{self.type.value} databases require '{field}' field")
        return self

    @property
    def database_name(self) -> str:
        """Name used for the protected-target check and in error messages."""
        if self.database:
            return self.database
        return Path(self.path).stem


class MetricsSettings(BaseModel):
    """Where metric templates live and which dialect folder to prefer."""
    directory: str = Field(default="metrics")
    dialect: Optional[str] = Field(
        default=None,
        description="Sub-directory tried before the catalog root; defaults to the database type",
    )


class HarnessConfig(BaseModel):
    """Main configuration model for metrictest."""
    database: DatabaseConfig
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)
    protected_databases: List[str] = Field(default_factory=lambda: ["gha"])
    cases: Optional[str] = Field(default=None, description="YAML file with case declarations")

    @model_validator(mode='after')
    def default_metrics_dialect(self):
        """Prefer the dialect folder matching the configured backend."""
        if self.metrics.dialect is None and self.database.type == DatabaseType.SQLITE:
            self.metrics.dialect = DatabaseType.SQLITE.value
        return self


class EnvironmentSettings(BaseSettings):
    """Environment-specific settings."""

    model_config = SettingsConfigDict(env_prefix="METRICTEST_", case_sensitive=False)

    log_level: str = Field(default="INFO")
    debug: bool = Field(default=False)
    config_file: Optional[str] = Field(default=None)
