"""Tests for fixture rows and the fixture builder."""
from datetime import datetime

import pytest
from sqlalchemy import select

from metrictest.db.schema import Events, PullRequests, Texts
from metrictest.exceptions import ArityError, DenormalizationError, FixtureError
from metrictest.modules.metric_testing.fixtures import (
    BASE_SHA,
    HEAD_SHA,
    EventFixture,
    FixtureBuilder,
    IssueEventLabelFixture,
    IssuePullRequestFixture,
    PullRequestFixture,
    TextFixture,
)

EVENT_ROW = (1, "T", 1, 1, True, datetime(2017, 7, 1), "Actor 1", "Repo 1", 1)
PR_ROW = (
    1, 1, 1, 1, 1, 1, "closed", "PR 1", "Body PR 1",
    datetime(2017, 6, 20), datetime(2017, 7, 1), datetime(2017, 7, 1), True,
    1, "Repo 1", 1, "Actor 1",
)


class TestPositionalRows:
    """Arity checks of positional fixture rows."""

    @pytest.mark.parametrize("fixture_cls,arity", [
        (EventFixture, 9),
        (PullRequestFixture, 17),
        (IssuePullRequestFixture, 6),
        (IssueEventLabelFixture, 11),
        (TextFixture, 3),
    ])
    def test_required_arity(self, fixture_cls, arity):
        assert fixture_cls.required_arity() == arity

    def test_short_row_is_rejected(self):
        with pytest.raises(ArityError) as exc_info:
            EventFixture.from_row(EVENT_ROW[:8])

        error = exc_info.value
        assert (error.entity, error.expected, error.actual) == ("event", 9, 8)
        assert str(error) == "event: expects 9 positional values, got 8"

    def test_long_row_is_rejected(self):
        with pytest.raises(ArityError) as exc_info:
            PullRequestFixture.from_row(PR_ROW + (None,))
        assert exc_info.value.actual == 18

    def test_text_takes_exactly_three_values(self):
        with pytest.raises(ArityError):
            TextFixture.from_row((1, "body", datetime(2017, 7, 1), 5))

    def test_from_row_maps_fields_in_order(self):
        pr = PullRequestFixture.from_row(PR_ROW)
        assert pr.merged_by_id == 1
        assert pr.state == "closed"
        assert pr.repo_name == "Repo 1"
        assert pr.actor_login == "Actor 1"


class TestFixtureBuilder:
    """Insertion into the event store."""

    @pytest.fixture
    def builder(self, connection, frozen_clock):
        return FixtureBuilder(connection, clock=frozen_clock)

    def test_event_insert(self, builder, connection):
        builder.add_event(EVENT_ROW)

        row = connection.execute(select(Events)).mappings().one()
        assert row["id"] == 1
        assert row["dup_actor_login"] == "Actor 1"
        assert row["dup_repo_name"] == "Repo 1"
        assert row["org_id"] == 1
        assert row["created_at"] == datetime(2017, 7, 1)

    def test_arity_error_inserts_nothing(self, builder, connection):
        with pytest.raises(ArityError):
            builder.add_event(EVENT_ROW[:-1])
        assert connection.execute(select(Events)).all() == []

    def test_pull_request_synthesized_columns(self, builder, connection):
        builder.add_pull_request(PR_ROW)

        row = connection.execute(select(PullRequests)).mappings().one()
        assert row["base_sha"] == BASE_SHA
        assert row["head_sha"] == HEAD_SHA
        assert row["merge_commit_sha"] == HEAD_SHA
        assert row["milestone_id"] is None
        assert row["locked"] is False
        assert row["mergeable"] is True
        assert row["rebaseable"] is True
        assert row["mergeable_state"] == "clean"
        assert row["maintainer_can_modify"] is True
        for column in ("comments", "review_comments", "commits", "additions", "deletions", "changed_files"):
            assert row[column] == 1
        assert row["updated_at"] == datetime(2020, 1, 2, 3, 4, 5)
        assert row["dup_user_login"] == ""
        assert row["dupn_assignee_login"] is None
        assert row["dupn_merged_by_login"] is None

    def test_pull_request_without_known_event(self, builder, connection):
        builder.add_pull_request(PR_ROW)

        row = connection.execute(select(PullRequests)).mappings().one()
        assert row["dup_type"] == "T"
        assert row["dup_created_at"] == datetime(2020, 1, 2, 3, 4, 5)

    def test_pull_request_mirrors_owning_event(self, builder, connection):
        builder.add_event((5, "PullRequestEvent", 3, 1, True, datetime(2017, 7, 5), "Actor 3", "Repo 1", 1))
        builder.add_pull_request((
            2, 5, 3, 2, 3, 2, "closed", "PR 2", "Body PR 2",
            datetime(2017, 7, 1), datetime(2017, 7, 5), datetime(2017, 7, 5), True,
            1, "Repo 1", 3, "Actor 3",
        ))

        row = connection.execute(select(PullRequests)).mappings().one()
        assert row["dup_type"] == "PullRequestEvent"
        assert row["dup_created_at"] == datetime(2017, 7, 5)
        assert (row["dup_actor_id"], row["dup_actor_login"]) == (3, "Actor 3")
        assert (row["dup_repo_id"], row["dup_repo_name"]) == (1, "Repo 1")

    def test_pull_request_disagreeing_with_event(self, builder, connection):
        builder.add_event(EVENT_ROW)
        mismatched = PR_ROW[:15] + (2, "Actor 2")

        with pytest.raises(DenormalizationError) as exc_info:
            builder.add_pull_request(mismatched)
        assert exc_info.value.table == "gha_pull_requests"
        assert connection.execute(select(PullRequests)).all() == []

    def test_text_defaults(self, builder, connection):
        builder.add_text((3, "/lgtm", datetime(2017, 7, 12)))

        row = connection.execute(select(Texts)).mappings().one()
        assert row["repo_id"] == 0
        assert row["repo_name"] == ""
        assert row["actor_id"] == 0
        assert row["actor_login"] == ""
        assert row["type"] == "D"

    def test_dataclass_and_rows_accepted(self, builder, connection):
        builder.add_texts([
            TextFixture(1, "first", datetime(2017, 7, 1), repo_name="Repo 1"),
            (2, "second", datetime(2017, 7, 2)),
        ])

        rows = connection.execute(select(Texts.c.event_id, Texts.c.repo_name).order_by(Texts.c.event_id)).all()
        assert [tuple(r) for r in rows] == [(1, "Repo 1"), (2, "")]
        assert builder.row_counts == {"gha_texts": 2}

    def test_wrong_fixture_type(self, builder):
        with pytest.raises(FixtureError):
            builder.add_event(TextFixture(1, "body", datetime(2017, 7, 1)))

    def test_database_failure_names_table(self, builder):
        builder.add_event(EVENT_ROW)
        with pytest.raises(FixtureError) as exc_info:
            builder.add_event(EVENT_ROW)
        assert exc_info.value.table == "gha_events"

    def test_issue_links_and_labels(self, builder, connection):
        builder.add_issue_pull_request((1, 1, 1, 1, "R1", datetime(2017, 7, 1)))
        builder.add_issue_event_label(
            (6, 9, 1, "lgtm", datetime(2017, 7, 18), 5, "Repo 5", 7, "Actor 7", "T", 6)
        )
        assert builder.row_counts == {"gha_issues_pull_requests": 1, "gha_issues_events_labels": 1}
        assert builder.summary() == "gha_issues_events_labels=1, gha_issues_pull_requests=1"
