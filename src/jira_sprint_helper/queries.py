"""JQL and sprint-state selection for board queries."""

from __future__ import annotations

from typing import List, Optional

ISSUE_FIELDS = [
    "assignee",
    "issuetype",
    "key",
    "parent",
    "status",
    "summary",
    "timetracking",
]

REPORT_FIELDS = [
    "assignee",
    "issuetype",
    "key",
    "parent",
    "timetracking",
]

NOT_DONE = "status!=Done"
NO_SUBTASKS = "issuetype!=Sub-Task"


def sprint_state(show_all: bool, active: bool, future: bool) -> str:
    """Map the sprint listing flags to the Agile API ``state`` parameter.

    Exactly one flag selects that state (``show_all`` selects every state, including
    closed); no flag, or any combination, falls back to open sprints.
    """
    if show_all and not active and not future:
        return ""
    if active and not show_all and not future:
        return "active"
    if future and not show_all and not active:
        return "future"
    return "active,future"


def build_jql(filters: List[str], order_by: str) -> str:
    """Join filter fragments with ``AND`` and append the ordering clause."""
    clause = " AND ".join(filters)
    if not clause:
        return f"ORDER BY {order_by}"
    return f"{clause} ORDER BY {order_by}"


def issues_jql(
    issue_key: Optional[str],
    show_all: bool,
    no_subtasks: bool,
    sprint_id: Optional[int],
) -> str:
    """Build the query used by the issue listing.

    Looking up a specific issue disables the status and type fragments so the
    issue is found whatever its state.
    """
    filters: List[str] = []
    if issue_key is None:
        if not show_all:
            filters.append(NOT_DONE)
        if no_subtasks:
            filters.append(NO_SUBTASKS)

    if sprint_id is not None:
        filters.append(f"sprint={sprint_id}")

    return build_jql(filters, "issuekey")


def report_jql(planning: bool, sprint_id: Optional[int]) -> str:
    """Build the query used by the time-tracking report."""
    filters: List[str] = [NOT_DONE] if planning else []
    if sprint_id is not None:
        filters.append(f"sprint={sprint_id}")
    return build_jql(filters, "assignee")
