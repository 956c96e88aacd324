"""End-to-end runs of the bundled scenarios on SQLite."""
import pytest

from metrictest.modules.metric_testing.models import CaseState, CaseStatus, MetricTestCase
from metrictest.modules.metric_testing.scenarios import (
    SETUP_REGISTRY,
    default_cases,
    ft,
    setup_reviewers_metric,
)


@pytest.mark.parametrize("case", default_cases(), ids=lambda case: case.name)
def test_default_case_passes(runner, case):
    result = runner.run_case(case, 1)

    assert result.status == CaseStatus.PASSED, result.mismatch or result.error_message
    assert result.actual == case.expected
    assert result.states[-1] == CaseState.TORN_DOWN


def test_default_suite(runner):
    suite = runner.run_suite(default_cases())

    assert suite.total_cases == 6
    assert suite.passed_cases == 6
    assert suite.successful
    assert not suite.halted_for_debug


def test_registry_names():
    assert sorted(SETUP_REGISTRY) == ["opened_to_merged", "prs_merged", "reviewers", "sig_mentions"]


def test_ymdhms_defaults():
    assert ft(2017) == ft(2017, 1, 1, 0, 0, 0)
    assert ft(2017, 7, 5, 21, 15).minute == 15


class TestWindowBoundaries:
    """Windows include ``from`` and exclude ``to``."""

    @staticmethod
    def texts(builder):
        builder.add_texts([
            (1, "@kubernetes/sig-node", ft(2017, 7, 1)),
            (2, "@kubernetes/sig-node", ft(2017, 7, 1, 0, 0, 1)),
            (3, "@kubernetes/sig-node", ft(2017, 8, 1)),
        ])

    def test_row_at_from_is_counted(self, runner):
        case = MetricTestCase(self.texts, "sig_mentions", ft(2017, 7), ft(2017, 8), [["sig-node", 2]])
        assert runner.run_case(case, 1).status == CaseStatus.PASSED

    def test_row_at_to_is_not_counted(self, runner):
        case = MetricTestCase(self.texts, "sig_mentions", ft(2017, 7, 1, 0, 0, 1), ft(2017, 8), [["sig-node", 1]])
        assert runner.run_case(case, 1).status == CaseStatus.PASSED

    def test_empty_window(self, runner):
        case = MetricTestCase(self.texts, "sig_mentions", ft(2017, 7), ft(2017, 7), [])
        assert runner.run_case(case, 1).status == CaseStatus.PASSED


class TestSigMentions:

    def run(self, runner, bodies, expected):
        def setup(builder):
            builder.add_texts([(i, body, ft(2017, 7, 1)) for i, body in enumerate(bodies, start=1)])

        result = runner.run_case(MetricTestCase(setup, "sig_mentions", ft(2017, 7), ft(2017, 8), expected), 1)
        assert result.status == CaseStatus.PASSED, result.mismatch or result.error_message

    def test_suffix_is_stripped_and_case_folded(self, runner):
        self.run(runner, ["@Kubernetes/SIG-Apps-Bugs", "@kubernetes/sig-apps"], [["sig-apps", 2]])

    def test_mention_needs_leading_whitespace(self, runner):
        self.run(runner, ["cc:@kubernetes/sig-apps", "cc: @kubernetes/sig-apps"], [["sig-apps", 1]])

    def test_ties_sorted_by_name(self, runner):
        self.run(
            runner,
            ["@kubernetes/sig-b", "@kubernetes/sig-a", "@kubernetes/sig-c", "@kubernetes/sig-c"],
            [["sig-c", 2], ["sig-a", 1], ["sig-b", 1]],
        )


class TestReviewers:

    def test_lgtm_must_be_alone_on_its_line(self, runner):
        def setup(builder):
            builder.add_events([
                (1, "T", 1, 1, True, ft(2017, 7, 2), "Actor 1", "Repo 1", None),
                (2, "T", 2, 1, True, ft(2017, 7, 2), "Actor 2", "Repo 1", None),
                (3, "T", 3, 1, True, ft(2017, 7, 2), "Actor 3", "Repo 1", None),
            ])
            builder.add_texts([
                (1, "looks good\n  /lgtm  \nthanks", ft(2017, 7, 2)),
                (2, "/lgtm please", ft(2017, 7, 2)),
                (3, "not /lgtm", ft(2017, 7, 2)),
            ])

        case = MetricTestCase(setup, "reviewers", ft(2017, 7), ft(2017, 8), [[1]])
        assert runner.run_case(case, 1).status == CaseStatus.PASSED

    def test_window_cuts_reviewers(self, runner):
        case = MetricTestCase(setup_reviewers_metric, "reviewers", ft(2017, 7, 13), ft(2017, 7, 16), [[2]])
        result = runner.run_case(case, 1)
        assert result.status == CaseStatus.PASSED, result.mismatch
