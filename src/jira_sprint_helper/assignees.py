"""Per-assignee time-tracking totals for the sprint report.

The report walks top-level issues once and, for each of them, sums a
time-tracking field over the issue or its subtasks. The same pass books every
contribution against the assignee it belongs to, so the per-issue totals (used
to update Jira) and the per-assignee totals (used for the report table) come
out of a single fold over the data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

from .models import Issue, TimeTracking
from .rollup import SubtaskMap, assignee_of

SECONDS_PER_WORKDAY = 8 * 60 * 60

ESTIMATE = "estimate"
REMAINING = "remaining"
SPENT = "spent"

_SECONDS_FIELDS: Dict[str, str] = {
    ESTIMATE: "original_estimate_seconds",
    REMAINING: "remaining_estimate_seconds",
    SPENT: "time_spent_seconds",
}


@dataclass(slots=True)
class AssigneeTotals:
    """Accumulated issue count and time totals for one assignee."""

    issue_count: int = 0
    estimate_seconds: float = 0.0
    remaining_seconds: float = 0.0
    spent_seconds: float = 0.0

    def original_estimate_days(self) -> float:
        return self.estimate_seconds / SECONDS_PER_WORKDAY

    def remaining_estimate_days(self) -> float:
        return self.remaining_seconds / SECONDS_PER_WORKDAY

    def time_spent_days(self) -> float:
        return self.spent_seconds / SECONDS_PER_WORKDAY


class AssigneeLedger:
    """Mutable per-assignee accumulator keyed by assignee display name.

    Iterating the ledger drains it: entries are yielded in ascending name order
    and removed as they go, so a ledger is meant to be read exactly once.
    """

    def __init__(self) -> None:
        self._totals: Dict[str, AssigneeTotals] = {}

    def __len__(self) -> int:
        return len(self._totals)

    def __contains__(self, assignee: object) -> bool:
        return assignee in self._totals

    def get(self, assignee: str) -> Optional[AssigneeTotals]:
        return self._totals.get(assignee)

    def record_seconds(self, assignee: str, field: str, value: Optional[int]) -> Optional[int]:
        """Book ``value`` seconds of ``field`` against ``assignee``.

        Nothing is recorded when ``value`` is ``None``. Each recorded estimate
        counts as one assignment. The value is returned unchanged so callers can
        sum contributions while booking them.

        Raises:
            ValueError: If ``field`` is not one of ``estimate``, ``remaining``
                or ``spent``.
        """
        if field not in _SECONDS_FIELDS:
            raise ValueError(f"Unknown time-tracking field: {field!r}")

        if value is None:
            return None

        totals = self._totals.setdefault(assignee, AssigneeTotals())
        if field == ESTIMATE:
            totals.issue_count += 1
            totals.estimate_seconds += value
        elif field == REMAINING:
            totals.remaining_seconds += value
        else:
            totals.spent_seconds += value

        return value

    def __iter__(self) -> Iterator[Tuple[str, AssigneeTotals]]:
        for assignee in sorted(self._totals):
            yield assignee, self._totals.pop(assignee)


def seconds_of(issue: Issue, field: str) -> Optional[int]:
    """Return the raw seconds value of a time-tracking field, if present."""
    tracking = issue.time_tracking or TimeTracking()
    return getattr(tracking, _SECONDS_FIELDS[field])


def aggregate_field(subtasks: SubtaskMap, issue: Issue, ledger: AssigneeLedger, field: str) -> int:
    """Sum ``field`` seconds for ``issue``, booking each contribution in ``ledger``.

    When the issue has subtasks only the subtasks contribute, each under its own
    assignee; otherwise the issue contributes under its assignee. Missing values
    add nothing and are not booked.
    """
    group = subtasks.get(issue.key)
    if group is None:
        group = [issue]

    total = 0
    for item in group:
        recorded = ledger.record_seconds(assignee_of(item), field, seconds_of(item, field))
        total += recorded or 0
    return total


def format_days(days: float) -> str:
    """Format a workday count with one decimal, e.g. ``1.5d``."""
    return f"{days:.1f}d"
