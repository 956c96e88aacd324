"""
Metric fixture testing for metrictest.

This module runs parameterized metric SQL against hand-built fixtures:
- Ephemeral database per case, dropped again on every exit path
- Fixture builder for the event store tables
- Metric template rendering and execution with generic row decoding
- Exact comparison of decoded rows with expected matrices
- YAML case declarations and JSON result export
"""
from .assertions import ComparisonResult, compare, describe_mismatch, matrices_equal
from .catalog import MetricCatalog
from .config_loader import CaseConfigLoader, MetricCaseConfig, load_cases
from .executor import MetricExecutor, format_timestamp, render_metric
from .fixtures import (
    EventFixture,
    FixtureBuilder,
    IssueEventLabelFixture,
    IssuePullRequestFixture,
    PullRequestFixture,
    TextFixture,
)
from .materializer import decode, decode_cell, iter_rows, raw_text
from .models import (
    CaseResult,
    CaseState,
    CaseStatus,
    Cell,
    CellKind,
    Matrix,
    MetricResult,
    MetricTestCase,
    SuiteResult,
    select_cases,
)
from .reporting import export_results
from .runner import MetricTestRunner
from .scenarios import SETUP_REGISTRY, default_cases

__all__ = [
    # Runner
    'MetricTestRunner',

    # Models
    'MetricTestCase',
    'MetricResult',
    'CaseResult',
    'CaseState',
    'CaseStatus',
    'SuiteResult',
    'Cell',
    'CellKind',
    'Matrix',
    'select_cases',

    # Fixtures
    'FixtureBuilder',
    'EventFixture',
    'PullRequestFixture',
    'IssuePullRequestFixture',
    'IssueEventLabelFixture',
    'TextFixture',

    # Execution and decoding
    'MetricCatalog',
    'MetricExecutor',
    'format_timestamp',
    'render_metric',
    'raw_text',
    'decode_cell',
    'iter_rows',
    'decode',

    # Comparison
    'ComparisonResult',
    'compare',
    'matrices_equal',
    'describe_mismatch',

    # Cases and reports
    'CaseConfigLoader',
    'MetricCaseConfig',
    'load_cases',
    'SETUP_REGISTRY',
    'default_cases',
    'export_results',
]
