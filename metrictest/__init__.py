"""metrictest: fixture test harness for GitHub Archive SQL metrics.

metrictest provides:
- Ephemeral, schema-complete test databases (PostgreSQL or SQLite)
- Fixture builders for events, pull requests, labels and texts
- Date-window rendering and execution of metric SQL templates
- Generic decoding of arbitrary-shaped result sets
- A sequential case runner with guaranteed teardown and a debug halt
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Core exports
from metrictest.exceptions import (
    HarnessError,
    ConfigurationError,
    DatabaseError,
    ProtectedTargetError,
    DatabaseProvisioningError,
    FixtureError,
    ArityError,
    QueryError,
)

__all__ = [
    "__version__",
    "HarnessError",
    "ConfigurationError",
    "DatabaseError",
    "ProtectedTargetError",
    "DatabaseProvisioningError",
    "FixtureError",
    "ArityError",
    "QueryError",
]
