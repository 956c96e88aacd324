"""
Fixture rows for the event store tables.

Each entity has a dataclass with one field per column a test author supplies.
``from_row`` accepts the same values positionally, which keeps scenario data
compact; the number of values must match exactly. ``FixtureBuilder`` inserts
fixtures one statement at a time and fills in the columns the metrics under
test never look at.
"""
import logging
from dataclasses import dataclass, fields, MISSING
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Union

from sqlalchemy import Table
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from metrictest.db.schema import (
    Events,
    IssuesEventsLabels,
    IssuesPullRequests,
    PullRequests,
    Texts,
)
from metrictest.exceptions import ArityError, DenormalizationError, FixtureError

logger = logging.getLogger(__name__)

# Placeholder commit hashes for synthesized pull request columns.
BASE_SHA = "250aac33d5aae922aac08bba4f06bd139c1c8994"
HEAD_SHA = "9c31bcbc683a491c3d4122adcfe4caaab6e2d0fc"
MERGE_COMMIT_SHA = HEAD_SHA

# Event type recorded on pull requests whose event is not part of the fixtures.
DEFAULT_PR_EVENT_TYPE = "T"


class PositionalFixture:
    """Mixin building a fixture dataclass from a positional row."""

    entity = "fixture"

    @classmethod
    def required_arity(cls) -> int:
        return sum(
            1 for f in fields(cls)
            if f.default is MISSING and f.default_factory is MISSING
        )

    @classmethod
    def from_row(cls, row: Sequence[Any]):
        """Build from values in column order.

        Raises:
            ArityError: If ``row`` does not hold exactly the required values.
        """
        expected = cls.required_arity()
        if len(row) != expected:
            raise ArityError(cls.entity, expected, len(row))
        return cls(*row)


@dataclass
class EventFixture(PositionalFixture):
    """Row of ``gha_events``."""
    entity = "event"

    id: int
    type: str
    actor_id: int
    repo_id: int
    public: bool
    created_at: datetime
    actor_login: str
    repo_name: str
    org_id: Optional[int]


@dataclass
class PullRequestFixture(PositionalFixture):
    """Author-supplied columns of ``gha_pull_requests``.

    ``repo_*`` and ``actor_*`` are the duplicated identity of the owning event.
    """
    entity = "pull request"

    id: int
    event_id: int
    user_id: int
    merged_by_id: Optional[int]
    assignee_id: Optional[int]
    number: int
    state: str
    title: str
    body: Optional[str]
    created_at: datetime
    closed_at: Optional[datetime]
    merged_at: Optional[datetime]
    merged: Optional[bool]
    repo_id: int
    repo_name: str
    actor_id: int
    actor_login: str


@dataclass
class IssuePullRequestFixture(PositionalFixture):
    """Row of ``gha_issues_pull_requests``."""
    entity = "issue pull request"

    issue_id: int
    pull_request_id: int
    number: int
    repo_id: int
    repo_name: str
    created_at: datetime


@dataclass
class IssueEventLabelFixture(PositionalFixture):
    """Row of ``gha_issues_events_labels``."""
    entity = "issue event label"

    issue_id: int
    event_id: int
    label_id: int
    label_name: str
    created_at: datetime
    repo_id: int
    repo_name: str
    actor_id: int
    actor_login: str
    type: str
    issue_number: int


@dataclass
class TextFixture(PositionalFixture):
    """Row of ``gha_texts``; duplicated identity columns are placeholders."""
    entity = "text"

    event_id: int
    body: Optional[str]
    created_at: datetime
    repo_id: int = 0
    repo_name: str = ""
    actor_id: int = 0
    actor_login: str = ""
    type: str = "D"


FixtureRow = Union[PositionalFixture, Sequence[Any]]


class FixtureBuilder:
    """Inserts fixtures through an open connection.

    Events inserted through the builder are remembered so pull requests can
    copy their event type and timestamp, and have their duplicated identity
    checked against the event.
    """

    def __init__(self, connection: Connection, clock: Callable[[], datetime] = datetime.now):
        """
        Initialize fixture builder.

        Args:
            connection: Connection to the ephemeral database
            clock: Source of "now" for synthesized update timestamps
        """
        self.connection = connection
        self.clock = clock
        self._events: Dict[int, EventFixture] = {}
        self.row_counts: Dict[str, int] = {}

    def _insert(self, table: Table, values: Dict[str, Any]) -> None:
        try:
            self.connection.execute(table.insert().values(**values))
        except SQLAlchemyError as e:
            raise FixtureError(
                f"Failed to insert into {table.name}: {e}", table=table.name
            ) from e
        self.row_counts[table.name] = self.row_counts.get(table.name, 0) + 1

    @staticmethod
    def _coerce(fixture_cls, item: FixtureRow):
        if isinstance(item, fixture_cls):
            return item
        if isinstance(item, PositionalFixture):
            raise FixtureError(
                f"Expected {fixture_cls.__name__}, got {type(item).__name__}"
            )
        return fixture_cls.from_row(item)

    def add_event(self, event: FixtureRow) -> EventFixture:
        event = self._coerce(EventFixture, event)
        self._insert(Events, {
            'id': event.id,
            'type': event.type,
            'actor_id': event.actor_id,
            'repo_id': event.repo_id,
            'public': event.public,
            'created_at': event.created_at,
            'dup_actor_login': event.actor_login,
            'dup_repo_name': event.repo_name,
            'org_id': event.org_id,
        })
        self._events[event.id] = event
        return event

    def _event_duplicates(self, pr: PullRequestFixture) -> Dict[str, Any]:
        """Duplicated event columns of a pull request row."""
        event = self._events.get(pr.event_id)
        if event is None:
            return {'dup_type': DEFAULT_PR_EVENT_TYPE, 'dup_created_at': self.clock()}

        supplied = (pr.actor_id, pr.actor_login, pr.repo_id, pr.repo_name)
        owning = (event.actor_id, event.actor_login, event.repo_id, event.repo_name)
        if supplied != owning:
            raise DenormalizationError(
                f"pull request {pr.id}: actor/repo {supplied} differ from "
                f"event {event.id} {owning}",
                table=PullRequests.name,
            )
        return {'dup_type': event.type, 'dup_created_at': event.created_at}

    def add_pull_request(self, pr: FixtureRow) -> PullRequestFixture:
        pr = self._coerce(PullRequestFixture, pr)
        now = self.clock()
        values = {
            'id': pr.id,
            'event_id': pr.event_id,
            'user_id': pr.user_id,
            'base_sha': BASE_SHA,
            'head_sha': HEAD_SHA,
            'merged_by_id': pr.merged_by_id,
            'assignee_id': pr.assignee_id,
            'milestone_id': None,
            'number': pr.number,
            'state': pr.state,
            'locked': False,
            'title': pr.title,
            'body': pr.body,
            'created_at': pr.created_at,
            'updated_at': now,
            'closed_at': pr.closed_at,
            'merged_at': pr.merged_at,
            'merge_commit_sha': MERGE_COMMIT_SHA,
            'merged': pr.merged,
            'mergeable': True,
            'rebaseable': True,
            'mergeable_state': "clean",
            'comments': 1,
            'review_comments': 1,
            'maintainer_can_modify': True,
            'commits': 1,
            'additions': 1,
            'deletions': 1,
            'changed_files': 1,
            'dup_actor_id': pr.actor_id,
            'dup_actor_login': pr.actor_login,
            'dup_repo_id': pr.repo_id,
            'dup_repo_name': pr.repo_name,
            'dup_user_login': "",
            'dupn_assignee_login': None,
            'dupn_merged_by_login': None,
        }
        values.update(self._event_duplicates(pr))
        self._insert(PullRequests, values)
        return pr

    def add_issue_pull_request(self, link: FixtureRow) -> IssuePullRequestFixture:
        link = self._coerce(IssuePullRequestFixture, link)
        self._insert(IssuesPullRequests, {
            'issue_id': link.issue_id,
            'pull_request_id': link.pull_request_id,
            'number': link.number,
            'repo_id': link.repo_id,
            'repo_name': link.repo_name,
            'created_at': link.created_at,
        })
        return link

    def add_issue_event_label(self, label: FixtureRow) -> IssueEventLabelFixture:
        label = self._coerce(IssueEventLabelFixture, label)
        self._insert(IssuesEventsLabels, {
            'issue_id': label.issue_id,
            'event_id': label.event_id,
            'label_id': label.label_id,
            'label_name': label.label_name,
            'created_at': label.created_at,
            'repo_id': label.repo_id,
            'repo_name': label.repo_name,
            'actor_id': label.actor_id,
            'actor_login': label.actor_login,
            'type': label.type,
            'issue_number': label.issue_number,
        })
        return label

    def add_text(self, text: FixtureRow) -> TextFixture:
        text = self._coerce(TextFixture, text)
        self._insert(Texts, {
            'event_id': text.event_id,
            'body': text.body,
            'created_at': text.created_at,
            'repo_id': text.repo_id,
            'repo_name': text.repo_name,
            'actor_id': text.actor_id,
            'actor_login': text.actor_login,
            'type': text.type,
        })
        return text

    def add_events(self, rows: Iterable[FixtureRow]) -> None:
        for row in rows:
            self.add_event(row)

    def add_pull_requests(self, rows: Iterable[FixtureRow]) -> None:
        for row in rows:
            self.add_pull_request(row)

    def add_issue_pull_requests(self, rows: Iterable[FixtureRow]) -> None:
        for row in rows:
            self.add_issue_pull_request(row)

    def add_issue_event_labels(self, rows: Iterable[FixtureRow]) -> None:
        for row in rows:
            self.add_issue_event_label(row)

    def add_texts(self, rows: Iterable[FixtureRow]) -> None:
        for row in rows:
            self.add_text(row)

    def summary(self) -> str:
        return ", ".join(f"{table}={count}" for table, count in sorted(self.row_counts.items())) or "no rows"
