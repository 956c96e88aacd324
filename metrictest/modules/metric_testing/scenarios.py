"""
Built-in fixture scenarios and the cases that exercise them.

Each setup procedure fills a fresh database with rows designed around one
business rule of a bundled metric. Row comments describe why a row is, or is
not, expected to count.
"""
from datetime import datetime
from typing import Dict, List

from .fixtures import FixtureBuilder
from .models import MetricTestCase, SetupProcedure


def ymdhms(year: int, month: int = 1, day: int = 1,
           hour: int = 0, minute: int = 0, second: int = 0) -> datetime:
    """Naive timestamp with omitted parts defaulting to the start of the period."""
    return datetime(year, month, day, hour, minute, second)


ft = ymdhms


def setup_opened_to_merged_metric(builder: FixtureBuilder) -> None:
    """Pull requests linked to issues, six of them created and merged in July 2017."""
    # prid, eid, uid, merged_id, assignee_id, num, state, title, body, created_at, closed_at, merged_at, merged,
    # repo_id, repo_name, actor_id, actor_login
    builder.add_pull_requests([
        # average of PR 1-6 created -> merged is 48 hours
        (1, 1, 1, 1, 1, 1, "closed", "PR 1", "Body PR 1", ft(2017, 7, 1), ft(2017, 7, 3), ft(2017, 7, 3), True, 1, "R1", 1, "A1"),
        (2, 2, 1, 1, 1, 2, "closed", "PR 2", "Body PR 2", ft(2017, 7, 2), ft(2017, 7, 3), ft(2017, 7, 3), True, 1, "R1", 1, "A1"),
        (3, 3, 1, 1, 1, 3, "closed", "PR 3", "Body PR 3", ft(2017, 7, 3), ft(2017, 7, 6), ft(2017, 7, 6), True, 1, "R1", 1, "A1"),
        (4, 4, 1, 1, 1, 4, "closed", "PR 4", "Body PR 4", ft(2017, 7, 4), ft(2017, 7, 5, 21, 15), ft(2017, 7, 5, 21, 15), True, 1, "R1", 1, "A1"),
        (5, 5, 1, 1, 1, 5, "closed", "PR 5", "Body PR 5", ft(2017, 7, 5), ft(2017, 7, 6, 20), ft(2017, 7, 6, 20), True, 1, "R1", 1, "A1"),
        (6, 6, 1, 1, 1, 6, "closed", "PR 6", "Body PR 6", ft(2017, 7, 6), ft(2017, 7, 8, 6, 45), ft(2017, 7, 8, 6, 45), True, 1, "R1", 1, "A1"),
        # created before the window
        (7, 7, 1, 1, 1, 7, "closed", "PR 7", "Body PR 7", ft(2017, 6, 30), ft(2017, 7, 10), ft(2017, 7, 10), True, 1, "R1", 1, "A1"),
        # never merged
        (8, 1, 1, None, 1, 8, "closed", "PR 8", "Body PR 8", ft(2017, 7, 2), ft(2017, 7, 8), None, True, 1, "R1", 1, "A1"),
        (9, 1, 1, None, 1, 9, "open", "PR 9", "Body PR 9", ft(2017, 7, 8), None, None, True, 1, "R1", 1, "A1"),
    ])

    # issue_id, pr_id, number, repo_id, repo_name, created_at
    builder.add_issue_pull_requests([
        (1, 1, 1, 1, "R1", ft(2017, 7, 1)),
        (2, 2, 2, 1, "R1", ft(2017, 7, 2)),
        (3, 3, 3, 1, "R1", ft(2017, 7, 3)),
        (4, 4, 4, 1, "R1", ft(2017, 7, 4)),
        (5, 5, 5, 1, "R1", ft(2017, 7, 5)),
        (6, 6, 6, 1, "R1", ft(2017, 7, 6)),
        (7, 7, 7, 1, "R1", ft(2017, 6, 30)),
        (8, 8, 8, 1, "R1", ft(2017, 7, 2)),
        (9, 9, 9, 1, "R1", ft(2017, 7, 8)),
    ])


def setup_prs_merged_metric(builder: FixtureBuilder) -> None:
    """Nine pull requests over three repositories, six merged in July 2017."""
    # eid, etype, aid, rid, public, created_at, aname, rname, orgid
    builder.add_events([
        (1, "T", 1, 1, True, ft(2017, 7, 1), "Actor 1", "Repo 1", 1),
        (2, "T", 1, 2, True, ft(2017, 7, 2), "Actor 1", "Repo 2", 1),
        (3, "T", 2, 3, True, ft(2017, 7, 3), "Actor 2", "Repo 3", None),
        (4, "T", 2, 1, True, ft(2017, 7, 4), "Actor 2", "Repo 1", 1),
        (5, "T", 3, 1, True, ft(2017, 7, 5), "Actor 3", "Repo 1", 1),
        (6, "T", 4, 2, True, ft(2017, 7, 6), "Actor 4", "Repo 2", 1),
        (7, "T", 1, 1, True, ft(2017, 8), "Actor 1", "Repo 1", 1),
        (8, "T", 2, 2, True, ft(2017, 7, 7), "Actor 2", "Repo 2", 1),
        (9, "T", 3, 3, True, ft(2017, 7, 8), "Actor 3", "Repo 3", None),
    ])

    # prid, eid, uid, merged_id, assignee_id, num, state, title, body, created_at, closed_at, merged_at, merged,
    # repo_id, repo_name, actor_id, actor_login
    builder.add_pull_requests([
        (1, 1, 1, 1, 1, 1, "closed", "PR 1", "Body PR 1", ft(2017, 6, 20), ft(2017, 7, 1), ft(2017, 7, 1), True, 1, "Repo 1", 1, "Actor 1"),
        (2, 5, 3, 2, 3, 2, "closed", "PR 2", "Body PR 2", ft(2017, 7, 1), ft(2017, 7, 5), ft(2017, 7, 5), True, 1, "Repo 1", 3, "Actor 3"),
        (3, 4, 2, 3, 2, 3, "closed", "PR 3", "Body PR 3", ft(2017, 7, 2), ft(2017, 7, 4), ft(2017, 7, 4), True, 1, "Repo 1", 2, "Actor 2"),
        (4, 2, 2, 4, 4, 4, "closed", "PR 4", "Body PR 4", ft(2017, 6, 10), ft(2017, 7, 2), ft(2017, 7, 2), True, 2, "Repo 2", 1, "Actor 1"),
        (5, 6, 4, 4, 4, 5, "closed", "PR 5", "Body PR 5", ft(2017, 7, 5), ft(2017, 7, 6), ft(2017, 7, 6), True, 2, "Repo 2", 4, "Actor 4"),
        (6, 3, 2, 2, 4, 6, "closed", "PR 6", "Body PR 6", ft(2017, 7, 2), ft(2017, 7, 3), ft(2017, 7, 3), True, 3, "Repo 3", 2, "Actor 2"),
        # merged exactly at the window end
        (7, 7, 1, 1, 1, 7, "closed", "PR 7", "Body PR 7", ft(2017, 7, 1), ft(2017, 8), ft(2017, 8), True, 1, "Repo 1", 1, "Actor 1"),
        # closed or open, never merged
        (8, 8, 2, None, 2, 8, "closed", "PR 8", "Body PR 8", ft(2017, 7, 7), ft(2017, 7, 8), None, True, 2, "Repo 2", 2, "Actor 2"),
        (9, 9, 3, None, 1, 9, "open", "PR 9", "Body PR 9", ft(2017, 7, 8), None, None, True, 3, "Repo 3", 3, "Actor 3"),
    ])


def setup_sig_mentions_metric(builder: FixtureBuilder) -> None:
    """Comment bodies mentioning SIG teams, some of them malformed."""
    # eid, body, created_at
    builder.add_texts([
        (1, "Hello @kubernetes/sig-group-1", ft(2017, 7, 1)),
        (2, "@kubernetes/sig-group-1-bugs, do you know about this bug?", ft(2017, 7, 2)),
        (3, "kubernetes/sig-group missing @ - not counted", ft(2017, 7, 3)),
        (4, "@kubernetes/sig-group-1- not included, group cannot end with -", ft(2017, 7, 4)),
        (5, "XYZ@kubernetes/sig-group-1 - not included, there must be white space or beggining of string before @", ft(2017, 7, 5)),
        (6, " \t@kubernetes/sig-group-1-feature-request: we should consider adding new bot... \n ", ft(2017, 7, 6)),
        (7, "Hi @kubernetes/sig-group2-bugs; I wanted to report bug", ft(2017, 7, 7)),
        (8, "I have reviewed this PR, @kubernetes/sig-group2-pr-reviews ping!", ft(2017, 7, 8)),
        # one mention per text
        (9, "Is there a @kubernetes/sig-a-b-c? Or maybe @kubernetes/sig-a-b-c-bugs?", ft(2017, 7, 9)),
        (10, "@kubernetes/sig-group2-bugs? @kubernetes/sig-group2? @kubernetes/sig-group2-pr-review? anybody?", ft(2017, 7, 10)),
        (11, "@kubernetes/sig-group2-feature-requests out of test range", ft(2017, 8, 11)),
    ])


def setup_reviewers_metric(builder: FixtureBuilder) -> None:
    """Reviewers come from first 'lgtm' labels per issue and '/lgtm' comment lines."""
    # eid, etype, aid, rid, public, created_at, aname, rname, orgid
    builder.add_events([
        (1, "T", 1, 1, True, ft(2017, 7, 10), "Actor 1", "Repo 1", 1),
        (2, "T", 2, 2, True, ft(2017, 7, 11), "Actor 2", "Repo 2", 1),
        (3, "T", 3, 1, True, ft(2017, 7, 12), "Actor 3", "Repo 1", 1),
        (4, "T", 4, 3, True, ft(2017, 7, 13), "Actor 4", "Repo 3", 2),
        (5, "T", 5, 2, True, ft(2017, 7, 14), "Actor 5", "Repo 2", 1),
        (6, "T", 5, 2, True, ft(2017, 7, 15), "Actor 5", "Repo 2", 1),
        (7, "T", 3, 2, True, ft(2017, 7, 16), "Actor 5", "Repo 2", 1),
        (8, "T", 6, 4, True, ft(2017, 7, 17), "Actor 6", "Repo 4", 2),
        (9, "T", 7, 5, True, ft(2017, 7, 18), "Actor 7", "Repo 5", None),
        (10, "T", 8, 5, True, ft(2017, 7, 19), "Actor 8", "Repo 5", None),
        (11, "T", 9, 5, True, ft(2017, 7, 20), "Actor 9", "Repo 5", None),
        (12, "T", 9, 5, True, ft(2017, 8, 10), "Actor X", "Repo 5", None),
        (13, "T", 10, 1, True, ft(2017, 7, 21), "Actor Y", "Repo 1", 1),
    ])

    # iid, eid, lid, lname, created_at, repo_id, repo_name, actor_id, actor_login, type, issue_number
    builder.add_issue_event_labels([
        # 4 labels match, but 5 and 6 have the same actor: 3 reviewers
        (1, 1, 1, "lgtm", ft(2017, 7, 10), 1, "Repo 1", 1, "Actor 1", "T", 1),
        (2, 2, 2, "lgtm", ft(2017, 7, 11), 2, "Repo 2", 2, "Actor 2", "T", 2),
        (5, 5, 5, "lgtm", ft(2017, 7, 14), 2, "Repo 2", 5, "Actor 5", "T", 5),
        (6, 6, 6, "lgtm", ft(2017, 7, 15), 2, "Repo 2", 5, "Actor 5", "T", 6),
        # issue 6 already got its lgtm above
        (6, 9, 1, "lgtm", ft(2017, 7, 18), 5, "Repo 5", 7, "Actor 7", "T", 6),
        # not lgtm
        (10, 10, 10, "other", ft(2017, 7, 19), 5, "Repo 5", 8, "Actor 8", "T", 10),
        # out of range
        (12, 12, 1, "lgtm", ft(2017, 8, 10), 5, "Repo 5", 9, "Actor 9", "T", 12),
    ])

    # eid, body, created_at
    builder.add_texts([
        # event 7 is by an actor already counted from labels
        (3, "/lgtm", ft(2017, 7, 12)),
        # 4 more reviewers from comments, 7 in total
        (4, " /LGTM ", ft(2017, 7, 13)),
        (7, " /LGtm ", ft(2017, 7, 16)),
        (8, "\t/lgTM\n", ft(2017, 7, 17)),
        # trailing text on the command line
        (11, "/lGtM with additional text", ft(2017, 7, 20)),
        # command alone on its own line
        (13, "Line 1\n/lGtM\nLine 2", ft(2017, 7, 21)),
    ])


SETUP_REGISTRY: Dict[str, SetupProcedure] = {
    "opened_to_merged": setup_opened_to_merged_metric,
    "prs_merged": setup_prs_merged_metric,
    "sig_mentions": setup_sig_mentions_metric,
    "reviewers": setup_reviewers_metric,
}


def default_cases() -> List[MetricTestCase]:
    """Cases run when no case file is configured."""
    return [
        MetricTestCase(
            setup=setup_reviewers_metric,
            metric="reviewers",
            date_from=ft(2017, 7, 9),
            date_to=ft(2017, 7, 25),
            expected=[[7]],
        ),
        MetricTestCase(
            setup=setup_reviewers_metric,
            metric="reviewers",
            date_from=ft(2017, 6),
            date_to=ft(2017, 7, 12, 23),
            expected=[[3]],
        ),
        MetricTestCase(
            setup=setup_sig_mentions_metric,
            metric="sig_mentions",
            date_from=ft(2017, 7),
            date_to=ft(2017, 8),
            expected=[
                ["sig-group-1", 3],
                ["sig-group2", 3],
                ["sig-a-b-c", 1],
            ],
        ),
        MetricTestCase(
            setup=setup_prs_merged_metric,
            metric="prs_merged",
            date_from=ft(2017, 7),
            date_to=ft(2017, 8),
            expected=[
                ["Repo 1", 3],
                ["Repo 2", 2],
                ["Repo 3", 1],
            ],
        ),
        MetricTestCase(
            setup=setup_prs_merged_metric,
            metric="all_prs_merged",
            date_from=ft(2017, 7),
            date_to=ft(2017, 8),
            expected=[[6]],
        ),
        MetricTestCase(
            setup=setup_opened_to_merged_metric,
            metric="opened_to_merged",
            date_from=ft(2017, 7),
            date_to=ft(2017, 8),
            expected=[[48]],
        ),
    ]
