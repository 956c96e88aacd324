"""Base structure of the GitHub Archive event store.

Only the tables the fixture builder writes and the metrics read are declared.
Secondary indexes are left out: fixture databases hold a few dozen rows.
"""

import logging

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

metadata = MetaData()


def _id(name: str, **kwargs) -> Column:
    return Column(name, BigInteger, autoincrement=False, **kwargs)


Events = Table(
    "gha_events",
    metadata,
    _id("id", primary_key=True),
    Column("type", String(40), nullable=False),
    _id("actor_id", nullable=False),
    _id("repo_id", nullable=False),
    Column("public", Boolean, nullable=False),
    Column("created_at", DateTime, nullable=False),
    _id("org_id", nullable=True),
    Column("dup_actor_login", String(120), nullable=False),
    Column("dup_repo_name", String(160), nullable=False),
)


PullRequests = Table(
    "gha_pull_requests",
    metadata,
    _id("id", primary_key=True),
    _id("event_id", primary_key=True),
    _id("user_id", nullable=False),
    Column("base_sha", String(40), nullable=False),
    Column("head_sha", String(40), nullable=False),
    _id("merged_by_id", nullable=True),
    _id("assignee_id", nullable=True),
    _id("milestone_id", nullable=True),
    Column("number", Integer, nullable=False),
    Column("state", String(20), nullable=False),
    Column("locked", Boolean, nullable=False),
    Column("title", Text, nullable=False),
    Column("body", Text, nullable=True),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
    Column("closed_at", DateTime, nullable=True),
    Column("merged_at", DateTime, nullable=True),
    Column("merge_commit_sha", String(40), nullable=True),
    Column("merged", Boolean, nullable=True),
    Column("mergeable", Boolean, nullable=True),
    Column("rebaseable", Boolean, nullable=True),
    Column("mergeable_state", String(20), nullable=False),
    Column("comments", Integer, nullable=False),
    Column("review_comments", Integer, nullable=False),
    Column("maintainer_can_modify", Boolean, nullable=False),
    Column("commits", Integer, nullable=False),
    Column("additions", Integer, nullable=False),
    Column("deletions", Integer, nullable=False),
    Column("changed_files", Integer, nullable=False),
    _id("dup_actor_id", nullable=False),
    Column("dup_actor_login", String(120), nullable=False),
    _id("dup_repo_id", nullable=False),
    Column("dup_repo_name", String(160), nullable=False),
    Column("dup_type", String(40), nullable=False),
    Column("dup_created_at", DateTime, nullable=False),
    Column("dup_user_login", String(120), nullable=False),
    Column("dupn_assignee_login", String(120), nullable=True),
    Column("dupn_merged_by_login", String(120), nullable=True),
)


IssuesPullRequests = Table(
    "gha_issues_pull_requests",
    metadata,
    _id("issue_id", primary_key=True),
    _id("pull_request_id", primary_key=True),
    Column("number", Integer, nullable=False),
    _id("repo_id", nullable=False),
    Column("repo_name", String(160), nullable=False),
    Column("created_at", DateTime, nullable=False),
)


# Label transitions carry no key: one event can add several labels.
IssuesEventsLabels = Table(
    "gha_issues_events_labels",
    metadata,
    _id("issue_id", nullable=False),
    _id("event_id", nullable=False),
    _id("label_id", nullable=False),
    Column("label_name", String(160), nullable=False),
    Column("created_at", DateTime, nullable=False),
    _id("repo_id", nullable=False),
    Column("repo_name", String(160), nullable=False),
    _id("actor_id", nullable=False),
    Column("actor_login", String(120), nullable=False),
    Column("type", String(40), nullable=False),
    Column("issue_number", Integer, nullable=False),
)


Texts = Table(
    "gha_texts",
    metadata,
    _id("event_id", nullable=False),
    Column("body", Text, nullable=True),
    Column("created_at", DateTime, nullable=False),
    _id("repo_id", nullable=False),
    Column("repo_name", String(160), nullable=False),
    _id("actor_id", nullable=False),
    Column("actor_login", String(120), nullable=False),
    Column("type", String(40), nullable=False),
)




def apply_structure(engine: Engine) -> None:
    """Create every table of the base structure on ``engine``.

    Driver errors propagate as ``SQLAlchemyError``.
    """
    metadata.create_all(engine)
    logger.debug(f"Created tables: {', '.join(sorted(metadata.tables))}")
