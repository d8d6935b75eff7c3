"""Subtask grouping and per-column display rollups for issue listings.

Issues come back from Jira as one flat, key-ordered list in which subtasks sit
next to their parents. This module rebuilds the parent/subtask grouping and
folds each group into multi-line table cells:

- :func:`partition` splits the list into top-level issues and a subtask map,
  filtering subtasks by assignee and issue key on the way.
- :func:`issue_matches` applies the same filters to top-level issues, taking
  their surviving subtasks into account.
- :func:`render_field` renders one column for an issue, one line per subtask.
- :func:`truncate` shortens summaries to a share of the available width.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .models import Issue, TimeTracking

SubtaskMap = Dict[str, List[Issue]]

SENTINELS: Dict[str, str] = {
    "type": "Unknown",
    "summary": "n/a",
    "status": "n/a",
    "assignee": "Unassigned",
    "original_estimate": "n/a",
    "remaining_estimate": "n/a",
    "time_spent": "n/a",
    "subtasks": "-",
}

ELLIPSIS = "..."
SUMMARY_FRACTION = 0.40
SUBTASK_SUMMARY_FRACTION = 0.60


def assignee_of(issue: Issue) -> str:
    """Return the assignee display name, or ``"Unassigned"`` when absent."""
    if issue.assignee_name is None:
        return SENTINELS["assignee"]
    return issue.assignee_name


def partition(
    issues: Sequence[Issue],
    assignee: Optional[str] = None,
    issue_key: Optional[str] = None,
) -> Tuple[List[Issue], SubtaskMap]:
    """Split issues into top-level issues and subtasks grouped by parent key.

    Top-level issues are always kept, in input order; filtering them is left to
    :func:`issue_matches`. Subtasks are dropped when they have no parent key,
    when ``assignee`` is given and does not match their own assignee, or when
    ``issue_key`` is given and matches neither their key nor their parent's.
    Within each group subtasks keep input order.
    """
    tasks: List[Issue] = []
    subtasks: SubtaskMap = {}

    for issue in issues:
        if not issue.is_subtask:
            tasks.append(issue)
            continue

        parent = issue.parent_key
        if parent is None:
            continue
        if assignee is not None and assignee_of(issue) != assignee:
            continue
        if issue_key is not None and issue.key != issue_key and parent != issue_key:
            continue

        subtasks.setdefault(parent, []).append(issue)

    return tasks, subtasks


def issue_matches(
    subtasks: SubtaskMap,
    issue: Issue,
    assignee: Optional[str] = None,
    issue_key: Optional[str] = None,
) -> bool:
    """Return whether a top-level issue should be listed under the given filters.

    An issue passes a filter when it matches itself or when any of its subtasks
    (as left by :func:`partition`) matches.
    """
    group = subtasks.get(issue.key, [])

    if assignee is not None:
        if assignee_of(issue) != assignee and not any(
            assignee_of(subtask) == assignee for subtask in group
        ):
            return False

    if issue_key is not None:
        if issue.key != issue_key and not any(subtask.key == issue_key for subtask in group):
            return False

    return True


def render_field(subtasks: SubtaskMap, issue: Issue, extractor: Callable[[Issue], str]) -> str:
    """Render one column for ``issue``, one line per subtask when it has any."""
    group = subtasks.get(issue.key)
    if group is None:
        return extractor(issue)
    return "\n".join(extractor(subtask) for subtask in group)


def _tracking(issue: Issue) -> TimeTracking:
    return issue.time_tracking or TimeTracking()


def _or_sentinel(value: Optional[str], field: str) -> str:
    return SENTINELS[field] if value is None else value


def type_name(issue: Issue) -> str:
    return _or_sentinel(issue.issue_type_name, "type")


def status_name(issue: Issue) -> str:
    return _or_sentinel(issue.status_name, "status")


def summary_text(issue: Issue) -> str:
    return _or_sentinel(issue.summary, "summary")


def original_estimate(issue: Issue) -> str:
    return _or_sentinel(_tracking(issue).original_estimate, "original_estimate")


def remaining_estimate(issue: Issue) -> str:
    return _or_sentinel(_tracking(issue).remaining_estimate, "remaining_estimate")


def time_spent(issue: Issue) -> str:
    return _or_sentinel(_tracking(issue).time_spent, "time_spent")


def truncate(text: str, fraction: float, width: Optional[float]) -> str:
    """Cut ``text`` to ``floor(width * fraction)`` characters.

    An ellipsis is appended only when characters were actually removed. A
    ``width`` of ``None`` means the terminal size is unknown and nothing is cut.
    """
    if width is None:
        return text

    limit = math.floor(width * fraction)
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def subtask_lines(subtasks: SubtaskMap, issue: Issue, width: Optional[float]) -> str:
    """Render the Sub-Tasks column as ``"KEY: summary"`` lines."""
    group = subtasks.get(issue.key)
    if group is None:
        return SENTINELS["subtasks"]
    return "\n".join(
        truncate(f"{subtask.key}: {summary_text(subtask)}", SUBTASK_SUMMARY_FRACTION, width)
        for subtask in group
    )


def issue_row(subtasks: SubtaskMap, issue: Issue, width: Optional[float]) -> List[str]:
    """Build one issue listing row with subtasks folded into each column."""
    return [
        issue.key,
        type_name(issue),
        truncate(summary_text(issue), SUMMARY_FRACTION, width),
        subtask_lines(subtasks, issue, width),
        render_field(subtasks, issue, status_name),
        render_field(subtasks, issue, assignee_of),
        render_field(subtasks, issue, original_estimate),
        render_field(subtasks, issue, remaining_estimate),
        render_field(subtasks, issue, time_spent),
    ]
