"""Configuration management for metrictest."""

from metrictest.config.models import (
    DatabaseType,
    DatabaseConfig,
    MetricsSettings,
    HarnessConfig,
    EnvironmentSettings,
)
from metrictest.config.parser import (
    ConfigParser,
    get_config,
    validate_config_file,
    create_sample_config,
)

__all__ = [
    # Models
    "DatabaseType",
    "DatabaseConfig",
    "MetricsSettings",
    "HarnessConfig",
    "EnvironmentSettings",
    # Parser
    "ConfigParser",
    "get_config",
    "validate_config_file",
    "create_sample_config",
]
