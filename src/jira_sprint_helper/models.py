"""Domain models for Jira board, sprint and issue data.

These dataclasses intentionally model only the subset of API payload fields that
are required for listing and time-tracking reports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class Board:
    """Represents an agile board returned by the Jira API."""

    id: int
    name: str
    type_name: str


@dataclass(slots=True)
class Sprint:
    """Represents a sprint belonging to a board."""

    id: int
    name: str
    state: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    origin_board_id: Optional[int] = None


@dataclass(slots=True)
class TimeTracking:
    """Represents the time-tracking block of an issue.

    Display strings are kept exactly as Jira formats them (``"1d 2h"``); the
    ``*_seconds`` values are used for aggregation. Every field is independently
    optional and a missing value is not the same as zero.
    """

    original_estimate: Optional[str] = None
    remaining_estimate: Optional[str] = None
    time_spent: Optional[str] = None
    original_estimate_seconds: Optional[int] = None
    remaining_estimate_seconds: Optional[int] = None
    time_spent_seconds: Optional[int] = None


@dataclass(slots=True)
class Issue:
    """Represents the minimal issue data needed for rollups and reports."""

    id: str
    key: str
    is_subtask: bool = False
    parent_key: Optional[str] = None
    issue_type_name: Optional[str] = None
    status_name: Optional[str] = None
    assignee_name: Optional[str] = None
    summary: Optional[str] = None
    time_tracking: Optional[TimeTracking] = None
