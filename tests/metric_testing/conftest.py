"""
Pytest fixtures for metric testing components.

Runners here are wired to a SQLite database file under the test's temporary
directory and to the bundled metric templates.
"""
import pytest

from metrictest.modules.metric_testing.catalog import MetricCatalog
from metrictest.modules.metric_testing.executor import MetricExecutor
from metrictest.modules.metric_testing.runner import MetricTestRunner


@pytest.fixture
def catalog(metrics_dir):
    return MetricCatalog(metrics_dir, "sqlite")


@pytest.fixture
def runner(lifecycle, catalog, frozen_clock):
    return MetricTestRunner(lifecycle, MetricExecutor(catalog), clock=frozen_clock)
