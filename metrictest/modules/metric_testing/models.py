"""
Core models for metric fixture testing.

This module defines the cell values produced by the row materializer, the test
case declaration, and the per-case and per-suite results of a run.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Union
from dataclasses import dataclass, field

# A decoded result cell: Integer, Text or Absent.
Cell = Optional[Union[int, str]]
Row = List[Cell]
Matrix = List[Row]


class CellKind(str, Enum):
    """Tag of a decoded cell."""
    INTEGER = "integer"
    TEXT = "text"
    ABSENT = "absent"

    @classmethod
    def of(cls, value: Cell) -> "CellKind":
        if value is None:
            return cls.ABSENT
        # bool is an int subclass but never a decoded cell
        if isinstance(value, int) and not isinstance(value, bool):
            return cls.INTEGER
        if isinstance(value, str):
            return cls.TEXT
        raise TypeError(f"Not a cell value: {value!r}")


class CaseState(str, Enum):
    """Lifecycle states of a single test case."""
    PROVISIONED = "provisioned"
    SCHEMA_APPLIED = "schema_applied"
    FIXTURES_LOADED = "fixtures_loaded"
    EXECUTED = "executed"
    COMPARED = "compared"
    TORN_DOWN = "torn_down"
    ABORTED = "aborted"


class CaseStatus(str, Enum):
    """Outcome of a single test case."""
    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"


# Populates the fixture tables through a FixtureBuilder.
SetupProcedure = Callable[[Any], None]


@dataclass
class MetricTestCase:
    """One metric run against one set of fixtures.

    The window is half-open: rows at ``date_from`` count, rows at ``date_to``
    do not.
    """
    setup: SetupProcedure
    metric: str
    date_from: datetime
    date_to: datetime
    expected: Matrix
    debug: bool = False
    name: Optional[str] = None

    def __post_init__(self):
        if not self.metric:
            raise ValueError("Test case requires a metric name")
        if self.date_from > self.date_to:
            raise ValueError(
                f"Test case window starts after it ends: {self.date_from} > {self.date_to}"
            )
        if self.name is None:
            self.name = f"{self.metric} {self.date_from:%Y-%m-%d %H:%M}..{self.date_to:%Y-%m-%d %H:%M}"

    @property
    def setup_name(self) -> str:
        return getattr(self.setup, "__name__", repr(self.setup))


@dataclass
class MetricResult:
    """Decoded output of one metric execution."""
    metric: str
    columns: List[str]
    rows: Matrix
    sql: str
    execution_time: float = 0.0

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass
class CaseResult:
    """Represents the result of a single test case execution."""
    index: int  # 1-based position in the suite
    name: str
    metric: str
    start_time: datetime
    end_time: Optional[datetime] = None
    status: CaseStatus = CaseStatus.PENDING
    states: List[CaseState] = field(default_factory=list)
    expected: Optional[Matrix] = None
    actual: Optional[Matrix] = None
    columns: List[str] = field(default_factory=list)
    sql: Optional[str] = None
    error_message: Optional[str] = None
    error_type: Optional[str] = None
    mismatch: Optional[str] = None
    debug: bool = False

    @property
    def state(self) -> Optional[CaseState]:
        return self.states[-1] if self.states else None

    @property
    def torn_down(self) -> bool:
        return CaseState.TORN_DOWN in self.states

    @property
    def passed(self) -> bool:
        """Check if case passed."""
        return self.status == CaseStatus.PASSED

    @property
    def failed(self) -> bool:
        """Check if case failed or errored."""
        return self.status in [CaseStatus.FAILED, CaseStatus.ERROR]

    @property
    def execution_time(self) -> Optional[float]:
        if self.end_time and self.start_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'index': self.index,
            'name': self.name,
            'metric': self.metric,
            'status': self.status.value,
            'states': [s.value for s in self.states],
            'expected': self.expected,
            'actual': self.actual,
            'columns': self.columns,
            'sql': self.sql,
            'error_type': self.error_type,
            'error_message': self.error_message,
            'mismatch': self.mismatch,
            'debug': self.debug,
            'start_time': self.start_time.isoformat(),
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'execution_time': self.execution_time,
        }


@dataclass
class SuiteResult:
    """Represents the results of running a list of cases."""
    database_name: str
    start_time: datetime
    end_time: Optional[datetime] = None
    case_results: List[CaseResult] = field(default_factory=list)
    halted_for_debug: bool = False
    total_cases: int = 0  # cases submitted, including those skipped by a debug halt

    @property
    def passed_cases(self) -> int:
        return sum(1 for r in self.case_results if r.status == CaseStatus.PASSED)

    @property
    def failed_cases(self) -> int:
        return sum(1 for r in self.case_results if r.status == CaseStatus.FAILED)

    @property
    def error_cases(self) -> int:
        return sum(1 for r in self.case_results if r.status == CaseStatus.ERROR)

    @property
    def skipped_cases(self) -> int:
        return max(self.total_cases - len(self.case_results), 0)

    @property
    def successful(self) -> bool:
        """True when no executed case failed or errored."""
        return self.failed_cases == 0 and self.error_cases == 0

    @property
    def execution_time(self) -> Optional[float]:
        """Calculate total execution time."""
        if self.end_time and self.start_time:
            return (self.end_time - self.start_time).total_seconds()
        return None


def select_cases(
    cases: Sequence[MetricTestCase],
    name_filter: Optional[str] = None,
    metrics: Optional[Sequence[str]] = None,
) -> List[MetricTestCase]:
    """Keep cases whose name contains ``name_filter`` and whose metric is listed."""
    selected = []
    for case in cases:
        if name_filter and name_filter.lower() not in case.name.lower():
            continue
        if metrics and case.metric not in metrics:
            continue
        selected.append(case)
    return selected
