"""
Metric template rendering and execution.

A metric template is plain SQL with ``{{from}}`` and ``{{to}}`` placeholders
for the bounds of the half-open date window.
"""
import logging
import time
from datetime import datetime

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from metrictest.exceptions import QueryError
from .catalog import MetricCatalog
from .materializer import decode
from .models import MetricResult

logger = logging.getLogger(__name__)

FROM_PLACEHOLDER = "{{from}}"
TO_PLACEHOLDER = "{{to}}"


def format_timestamp(value: datetime) -> str:
    """Format as ``YYYY-MM-DD HH:MM:SS``, zero padded, 24 hour, no zone."""
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d} "
        f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )


def render_metric(template: str, date_from: datetime, date_to: datetime) -> str:
    """Substitute every window placeholder in ``template``."""
    return (
        template
        .replace(FROM_PLACEHOLDER, format_timestamp(date_from))
        .replace(TO_PLACEHOLDER, format_timestamp(date_to))
    )


class MetricExecutor:
    """Runs catalog metrics over a window and decodes what they return."""

    def __init__(self, catalog: MetricCatalog):
        """
        Initialize metric executor.

        Args:
            catalog: Where metric templates are looked up
        """
        self.catalog = catalog

    def render(self, metric: str, date_from: datetime, date_to: datetime) -> str:
        return render_metric(self.catalog.load(metric), date_from, date_to)

    def execute(
        self,
        connection: Connection,
        metric: str,
        date_from: datetime,
        date_to: datetime,
    ) -> MetricResult:
        """
        Execute a metric as a single read query.

        Args:
            connection: Open connection to the test database
            metric: Metric name in the catalog
            date_from: Inclusive window start
            date_to: Exclusive window end

        Returns:
            Column names and decoded rows in result order

        Raises:
            QueryError: If the metric is unknown, the database rejects it or a
                returned value cannot be decoded
        """
        sql = self.render(metric, date_from, date_to)
        logger.debug(f"Executing metric '{metric}':\n{sql}")

        start = time.perf_counter()
        try:
            result = connection.execute(text(sql))
            columns = list(result.keys())
            rows = decode(result)
        except SQLAlchemyError as e:
            raise QueryError(
                f"Metric '{metric}' failed: {e}", metric=metric, sql_query=sql
            ) from e
        except ValueError as e:
            raise QueryError(
                f"Metric '{metric}' returned a value that cannot be decoded: {e}",
                metric=metric,
                sql_query=sql,
            ) from e
        elapsed = time.perf_counter() - start

        logger.info(f"Metric '{metric}' returned {len(rows)} rows in {elapsed:.3f}s")
        return MetricResult(
            metric=metric,
            columns=columns,
            rows=rows,
            sql=sql,
            execution_time=elapsed,
        )
