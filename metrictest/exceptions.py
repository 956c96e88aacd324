"""Core exceptions for metrictest."""

from typing import Any, Dict, Optional


class HarnessError(Exception):
    """Base exception for all metrictest errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(HarnessError):
    """Raised when there's an error in configuration parsing or validation."""
    pass


class DatabaseError(HarnessError):
    """Raised when there's an error connecting to or querying a database."""

    def __init__(
        self,
        message: str,
        database_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.database_name = database_name


class ProtectedTargetError(DatabaseError):
    """Raised when the harness is pointed at a database it must never touch.

    This aborts the whole suite before any case runs.
    """

    def __init__(self, database_name: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            f'tests cannot be run on "{database_name}" database',
            database_name=database_name,
            details=details,
        )


class DatabaseProvisioningError(DatabaseError):
    """Raised when dropping, creating or structuring the ephemeral database fails."""

    def __init__(
        self,
        database_name: str,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        message = f'failed to create database "{database_name}"'
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, database_name=database_name, details=details)
        self.reason = reason


class FixtureError(HarnessError):
    """Raised when fixture rows cannot be built or inserted."""

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.table = table


class ArityError(FixtureError):
    """Raised when a positional fixture row has the wrong number of values."""

    def __init__(self, entity: str, expected: int, actual: int, table: Optional[str] = None):
        super().__init__(
            f"{entity}: expects {expected} positional values, got {actual}",
            table=table,
        )
        self.entity = entity
        self.expected = expected
        self.actual = actual


class DenormalizationError(FixtureError):
    """Raised when duplicated columns disagree with the owning event."""
    pass


class QueryError(HarnessError):
    """Raised when a metric cannot be resolved, executed or decoded."""

    def __init__(
        self,
        message: str,
        metric: Optional[str] = None,
        sql_query: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.metric = metric
        self.sql_query = sql_query


class MetricNotFoundError(QueryError):
    """Raised when the metric catalog has no template for a name."""
    pass
