"""Sequential execution of metric test cases against an ephemeral database."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from metrictest.config.models import HarnessConfig
from metrictest.db.lifecycle import DatabaseLifecycleManager
from .assertions import compare
from .catalog import MetricCatalog
from .executor import MetricExecutor
from .fixtures import FixtureBuilder
from .models import CaseResult, CaseState, CaseStatus, MetricTestCase, SuiteResult

logger = logging.getLogger(__name__)


class MetricTestRunner:
    """Runs cases one at a time, each in a freshly provisioned database.

    Per case: provision, apply schema, load fixtures, execute, compare, and
    tear down on every exit path. A case in debug mode keeps its database and
    stops the suite so the next case cannot drop it.
    """

    def __init__(
        self,
        lifecycle: DatabaseLifecycleManager,
        executor: MetricExecutor,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize metric test runner.

        Args:
            lifecycle: Provisions and drops the test database
            executor: Renders and runs metric templates
            clock: Source of "now" for timings and synthesized fixture columns
        """
        self.lifecycle = lifecycle
        self.executor = executor
        self.clock = clock

    @classmethod
    def from_config(
        cls,
        config: HarnessConfig,
        metrics_dir: Optional[Union[str, Path]] = None,
    ) -> "MetricTestRunner":
        lifecycle = DatabaseLifecycleManager.from_config(
            config.database, config.protected_databases
        )
        catalog = MetricCatalog(metrics_dir or config.metrics.directory, config.metrics.dialect)
        return cls(lifecycle, MetricExecutor(catalog))

    def run_case(self, case: MetricTestCase, index: int) -> CaseResult:
        """
        Run a single case.

        Failures inside the case are recorded on the result.

        Raises:
            ProtectedTargetError: Before anything is dropped or created, if the
                configured database is protected.
        """
        self.lifecycle.ensure_not_protected()

        result = CaseResult(
            index=index,
            name=case.name,
            metric=case.metric,
            start_time=self.clock(),
            expected=case.expected,
            debug=case.debug,
        )
        logger.info(f"Case {index} ({case.name}): setup={case.setup_name}")

        try:
            db = self.lifecycle.provision()
            result.states.append(CaseState.PROVISIONED)

            self.lifecycle.apply_schema(db)
            result.states.append(CaseState.SCHEMA_APPLIED)

            with db.connect() as connection:
                builder = FixtureBuilder(connection, clock=self.clock)
                case.setup(builder)
                result.states.append(CaseState.FIXTURES_LOADED)
                logger.debug(f"Case {index} fixtures: {builder.summary()}")

                metric_result = self.executor.execute(
                    connection, case.metric, case.date_from, case.date_to
                )
                result.states.append(CaseState.EXECUTED)

            result.sql = metric_result.sql
            result.columns = metric_result.columns
            result.actual = metric_result.rows

            comparison = compare(case.expected, metric_result.rows)
            result.states.append(CaseState.COMPARED)
            if comparison.passed:
                result.status = CaseStatus.PASSED
            else:
                result.status = CaseStatus.FAILED
                result.mismatch = comparison.message
                logger.error(
                    f"Case {index} ({case.name}): expected {case.expected}, "
                    f"got {metric_result.rows} ({comparison.message})"
                )

        except Exception as e:
            result.states.append(CaseState.ABORTED)
            result.status = CaseStatus.ERROR
            result.error_type = type(e).__name__
            result.error_message = str(e)
            logger.error(f"Case {index} ({case.name}): {e}")

        finally:
            if case.debug:
                self.lifecycle.adapter.close()
            else:
                self._teardown(result)
            result.end_time = self.clock()

        return result

    def _teardown(self, result: CaseResult) -> None:
        try:
            self.lifecycle.teardown()
        except Exception as e:
            logger.error(f"Case {result.index} ({result.name}): teardown failed: {e}")
            if result.status != CaseStatus.ERROR:
                result.status = CaseStatus.ERROR
                result.error_type = type(e).__name__
                result.error_message = f"teardown failed: {e}"
            return
        result.states.append(CaseState.TORN_DOWN)

    def run_suite(self, cases: Iterable[MetricTestCase]) -> SuiteResult:
        """
        Run cases in order.

        Raises:
            ProtectedTargetError: Before any case runs, if the configured
                database is protected.
        """
        cases = list(cases)
        self.lifecycle.ensure_not_protected()

        suite = SuiteResult(
            database_name=self.lifecycle.database_name,
            start_time=self.clock(),
            total_cases=len(cases),
        )

        for index, case in enumerate(cases, start=1):
            result = self.run_case(case, index)
            suite.case_results.append(result)

            if case.debug:
                suite.halted_for_debug = True
                logger.warning(
                    f"Case {index} ({case.name}): returning early in debug mode, "
                    f"database '{self.lifecycle.database_name}' kept for inspection"
                )
                break

        suite.end_time = self.clock()
        logger.info(
            f"Ran {len(suite.case_results)}/{suite.total_cases} cases: "
            f"{suite.passed_cases} passed, {suite.failed_cases} failed, "
            f"{suite.error_cases} errors"
        )
        return suite
