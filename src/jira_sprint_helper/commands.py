"""Subcommand implementations: fetch from Jira, shape, and print tables."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .assignees import ESTIMATE, REMAINING, SPENT, AssigneeLedger, aggregate_field, format_days
from .errors import ConfigurationError
from .jira_client import JiraClient
from .models import Board
from .queries import ISSUE_FIELDS, REPORT_FIELDS, issues_jql, report_jql, sprint_state
from .rollup import issue_matches, issue_row, partition
from .tables import format_date, print_table

logger = logging.getLogger(__name__)

NO_ISSUES_MESSAGE = "No issues were found to match your search"


def resolve_board(client: JiraClient, board_id: Optional[int], sprint_id: Optional[int]) -> Board:
    """Return the board to query, from ``board_id`` or the sprint's origin board.

    Raises:
        ConfigurationError: If neither id is given, or the sprint does not
            name the board it belongs to.
    """
    if board_id is None:
        if sprint_id is None:
            raise ConfigurationError("sprint")
        sprint = client.get_sprint(sprint_id)
        if sprint.origin_board_id is None:
            raise ConfigurationError("board")
        board_id = sprint.origin_board_id
        logger.debug("Resolved board from sprint", extra={"sprint_id": sprint_id, "board_id": board_id})

    return client.get_board(board_id)


def list_boards(client: JiraClient) -> None:
    """Print every board the user can see, ordered by id."""
    boards = sorted(client.list_boards(), key=lambda board: board.id)
    rows = [[str(board.id), board.name, board.type_name] for board in boards]

    print_table(["ID", "Name", "Type"], rows, "No boards were found which you have access to")


def list_sprints(client: JiraClient, board_id: int, show_all: bool, active: bool, future: bool) -> None:
    """Print the sprints of a board, newest first."""
    board = client.get_board(board_id)
    state = sprint_state(show_all, active, future)

    sprints = sorted(client.list_sprints(board, state), key=lambda sprint: sprint.id, reverse=True)
    rows = [
        [
            str(sprint.id),
            sprint.name,
            sprint.state or "unknown",
            format_date(sprint.start_date),
            format_date(sprint.end_date),
        ]
        for sprint in sprints
    ]

    print_table(["ID", "Name", "State", "Start", "End"], rows, "No sprints were found for this board")


def list_issues(
    client: JiraClient,
    board_id: Optional[int],
    sprint_id: Optional[int],
    assignee: Optional[str],
    issue_key: Optional[str],
    show_all: bool,
    no_subtasks: bool,
    width: Optional[float],
) -> None:
    """Print board issues with their subtasks folded into each row."""
    board = resolve_board(client, board_id, sprint_id)
    jql = issues_jql(issue_key, show_all, no_subtasks, sprint_id)

    issues = client.list_issues(board, jql, ISSUE_FIELDS)
    tasks, subtasks = partition(issues, assignee=assignee, issue_key=issue_key)

    rows: List[List[str]] = [
        issue_row(subtasks, issue, width)
        for issue in tasks
        if issue_matches(subtasks, issue, assignee=assignee, issue_key=issue_key)
    ]

    logger.info(
        "Listed issues",
        extra={
            "board_id": board.id,
            "issues_total": len(issues),
            "top_level": len(tasks),
            "rows": len(rows),
        },
    )

    print_table(
        [
            "Key",
            "Type",
            "Summary",
            "Sub-Tasks",
            "Status",
            "Assignee",
            "Estimated",
            "Remaining",
            "Time Spent",
        ],
        rows,
        NO_ISSUES_MESSAGE,
        boxed=True,
    )


def time_tracking_fields(estimate_seconds: int, remaining_seconds: int) -> Dict[str, Dict[str, str]]:
    """Build the edit payload setting estimates in whole minutes."""
    return {
        "timetracking": {
            "originalEstimate": f"{estimate_seconds // 60}m",
            "remainingEstimate": f"{remaining_seconds // 60}m",
        }
    }


def report(
    client: JiraClient,
    board_id: Optional[int],
    sprint_id: Optional[int],
    planning: bool,
    update: bool,
) -> None:
    """Print per-assignee estimate, remaining and spent days.

    With ``update`` every top-level issue gets its estimates replaced by the
    totals of its subtasks, one request per issue in query order. The first
    failing update aborts the report; issues updated before it stay updated.
    """
    board = resolve_board(client, board_id, sprint_id)
    jql = report_jql(planning, sprint_id)

    issues = client.list_issues(board, jql, REPORT_FIELDS)
    tasks, subtasks = partition(issues)

    ledger = AssigneeLedger()
    for issue in tasks:
        estimate = aggregate_field(subtasks, issue, ledger, ESTIMATE)
        remaining = aggregate_field(subtasks, issue, ledger, REMAINING)

        if update:
            client.edit_issue(issue.id, time_tracking_fields(estimate, remaining))

        aggregate_field(subtasks, issue, ledger, SPENT)

    if update:
        logger.info("Updated issue estimates", extra={"board_id": board.id, "issues_updated": len(tasks)})

    headers = ["Assignee", "Issues", "Estimated"]
    if not planning:
        headers.extend(["Remaining", "Time Spent"])

    rows: List[List[str]] = []
    for assignee, totals in ledger:
        row = [assignee, str(totals.issue_count), format_days(totals.original_estimate_days())]
        if not planning:
            row.append(format_days(totals.remaining_estimate_days()))
            row.append(format_days(totals.time_spent_days()))
        rows.append(row)

    print_table(headers, rows, NO_ISSUES_MESSAGE)
