"""Jira Cloud REST API client for board, sprint and issue retrieval."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import requests
from requests.auth import HTTPBasicAuth

from .config import Config
from .errors import ApiError, AuthenticationError
from .models import Board, Issue, Sprint, TimeTracking

logger = logging.getLogger(__name__)


class JiraClient:
    """Small, typed client for the Jira Agile and issue edit APIs."""

    _AGILE_PATH = "rest/agile/1.0"
    _ISSUE_PATH = "rest/api/2/issue"
    _PAGE_SIZE = 50
    _MAX_RETRIES = 5
    _MAX_BACKOFF_SECONDS = 30

    def __init__(self, config: Config, timeout_seconds: int = 30) -> None:
        """Initialize an authenticated Jira API client.

        Args:
            config: Validated runtime configuration including organization and
                credentials.
            timeout_seconds: Per-request timeout in seconds.
        """
        self._config = config
        self._timeout_seconds = timeout_seconds
        self._base_url = config.base_url

        self._session = requests.Session()
        self._session.auth = HTTPBasicAuth(config.user, config.token)
        self._session.headers.update({"Accept": "application/json"})

    def _build_url(self, path: str) -> str:
        """Build a fully qualified API URL from a path below the site root."""
        return f"{self._base_url}/{path.lstrip('/')}"

    def _extract_backoff_seconds(self, response: requests.Response, attempt: int) -> int:
        """Compute exponential backoff seconds, honoring Retry-After when available."""
        retry_after_header = response.headers.get("Retry-After")
        if retry_after_header:
            try:
                retry_after_seconds = int(retry_after_header)
                return min(self._MAX_BACKOFF_SECONDS, max(1, retry_after_seconds))
            except ValueError:
                pass

        return min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1))

    def _raise_for_status(self, method: str, url: str, response: requests.Response) -> None:
        status_code = response.status_code
        if status_code in (401, 403):
            raise AuthenticationError(
                f"Jira rejected the credentials for user '{self._config.user}': "
                f"{method} {url} returned {status_code}"
            )
        if status_code >= 400:
            raise ApiError(
                f"Jira API request failed: {method} {url} returned {status_code} - {response.text}"
            )

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Execute a GET request with retry logic for 429/5xx responses.

        Raises:
            AuthenticationError: If Jira answers 401 or 403.
            ApiError: If the request repeatedly fails, returns HTTP >= 400,
                or does not return valid JSON.
        """
        url = self._build_url(path)
        last_error: Optional[Exception] = None

        for attempt in range(1, self._MAX_RETRIES + 1):
            try:
                response = self._session.get(url, params=params, timeout=self._timeout_seconds)
            except requests.RequestException as exc:
                last_error = exc
                if attempt == self._MAX_RETRIES:
                    raise ApiError(f"Jira request failed after retries: GET {url}") from exc
                time.sleep(min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1)))
                continue

            status_code = response.status_code
            is_retryable = status_code == 429 or 500 <= status_code <= 599

            if is_retryable and attempt < self._MAX_RETRIES:
                backoff = self._extract_backoff_seconds(response, attempt)
                logger.debug(
                    "Retrying Jira request",
                    extra={"url": url, "status_code": status_code, "backoff_seconds": backoff},
                )
                time.sleep(backoff)
                continue

            self._raise_for_status("GET", url, response)

            try:
                payload = response.json()
            except ValueError as exc:
                raise ApiError(f"Jira API returned invalid JSON: GET {url}") from exc

            if not isinstance(payload, dict):
                raise ApiError(f"Jira API returned unexpected payload shape: GET {url}")

            return payload

        raise ApiError(f"Jira request failed after retries: GET {url}") from last_error

    def _get_values(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Collect ``values`` across Agile API pages until ``isLast`` is reported."""
        values: List[Dict[str, Any]] = []
        start_at = 0

        while True:
            query = dict(params or {})
            query["startAt"] = start_at
            query["maxResults"] = self._PAGE_SIZE

            payload = self._get_json(path, params=query)
            page_items = payload.get("values", [])
            values.extend(page_items)

            if payload.get("isLast", True) or not page_items:
                break

            start_at += len(page_items)

        return values

    def _parse_board(self, item: Dict[str, Any]) -> Board:
        board_id = item.get("id")
        if board_id is None:
            raise ApiError(f"Jira board payload is missing required fields: payload={item}")
        return Board(
            id=int(board_id),
            name=str(item.get("name", "")),
            type_name=str(item.get("type", "")),
        )

    def _parse_sprint(self, item: Dict[str, Any]) -> Sprint:
        sprint_id = item.get("id")
        if sprint_id is None:
            raise ApiError(f"Jira sprint payload is missing required fields: payload={item}")
        origin_board_id = item.get("originBoardId")
        return Sprint(
            id=int(sprint_id),
            name=str(item.get("name", "")),
            state=item.get("state"),
            start_date=item.get("startDate"),
            end_date=item.get("endDate"),
            origin_board_id=int(origin_board_id) if origin_board_id is not None else None,
        )

    def _parse_issue(self, item: Dict[str, Any]) -> Issue:
        issue_id = item.get("id")
        key = item.get("key")
        if issue_id is None or not key:
            raise ApiError(f"Jira issue payload is missing required fields: payload={item}")

        fields = item.get("fields") or {}
        issue_type = fields.get("issuetype") or {}
        parent = fields.get("parent") or {}
        status = fields.get("status") or {}
        assignee = fields.get("assignee") or {}
        tracking = fields.get("timetracking")

        time_tracking = None
        if tracking:
            time_tracking = TimeTracking(
                original_estimate=tracking.get("originalEstimate"),
                remaining_estimate=tracking.get("remainingEstimate"),
                time_spent=tracking.get("timeSpent"),
                original_estimate_seconds=tracking.get("originalEstimateSeconds"),
                remaining_estimate_seconds=tracking.get("remainingEstimateSeconds"),
                time_spent_seconds=tracking.get("timeSpentSeconds"),
            )

        return Issue(
            id=str(issue_id),
            key=str(key),
            is_subtask=bool(issue_type.get("subtask", False)),
            parent_key=parent.get("key"),
            issue_type_name=issue_type.get("name"),
            status_name=status.get("name"),
            assignee_name=assignee.get("displayName"),
            summary=fields.get("summary"),
            time_tracking=time_tracking,
        )

    def list_boards(self) -> List[Board]:
        """List all boards the configured user has access to."""
        return [self._parse_board(item) for item in self._get_values(f"{self._AGILE_PATH}/board")]

    def get_board(self, board_id: int) -> Board:
        """Fetch a single board by id."""
        return self._parse_board(self._get_json(f"{self._AGILE_PATH}/board/{board_id}"))

    def list_sprints(self, board: Board, state: str = "") -> List[Sprint]:
        """List sprints of a board, optionally limited to a comma-separated ``state``."""
        params: Dict[str, Any] = {}
        if state:
            params["state"] = state

        items = self._get_values(f"{self._AGILE_PATH}/board/{board.id}/sprint", params=params)
        return [self._parse_sprint(item) for item in items]

    def get_sprint(self, sprint_id: int) -> Sprint:
        """Fetch a single sprint by id."""
        return self._parse_sprint(self._get_json(f"{self._AGILE_PATH}/sprint/{sprint_id}"))

    def list_issues(self, board: Board, jql: str, fields: List[str]) -> List[Issue]:
        """List board issues matching ``jql``, requesting only ``fields``.

        Uses offset pagination via ``startAt``/``maxResults`` until ``total``
        issues have been read. Ordering is whatever the JQL asks for.
        """
        issues: List[Issue] = []
        start_at = 0

        while True:
            payload = self._get_json(
                f"{self._AGILE_PATH}/board/{board.id}/issue",
                params={
                    "jql": jql,
                    "fields": ",".join(fields),
                    "startAt": start_at,
                    "maxResults": self._PAGE_SIZE,
                },
            )

            page_items = payload.get("issues", [])
            issues.extend(self._parse_issue(item) for item in page_items)
            start_at += len(page_items)

            total = payload.get("total", 0)
            if not page_items or start_at >= total:
                break

        logger.debug(
            "Fetched board issues",
            extra={"board_id": board.id, "jql": jql, "issues_total": len(issues)},
        )
        return issues

    def edit_issue(self, issue_id: str, fields: Dict[str, Any]) -> None:
        """Update fields of an issue.

        Edits are sent once and never retried.

        Raises:
            AuthenticationError: If Jira answers 401 or 403.
            ApiError: If the request fails or Jira rejects the update.
        """
        url = self._build_url(f"{self._ISSUE_PATH}/{issue_id}")
        try:
            response = self._session.put(
                url,
                json={"fields": fields},
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            raise ApiError(f"Jira request failed: PUT {url}") from exc

        self._raise_for_status("PUT", url, response)
        logger.debug("Updated issue", extra={"issue_id": issue_id, "fields": sorted(fields)})
