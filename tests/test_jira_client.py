"""Tests for Jira API client behavior with mocked HTTP."""

import sys
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
import requests

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from jira_sprint_helper.config import Config
from jira_sprint_helper.errors import ApiError, AuthenticationError
from jira_sprint_helper.jira_client import JiraClient
from jira_sprint_helper.models import Board


def _build_client() -> JiraClient:
    config = Config(organization="acme", user="dev@acme.test", token="api-token")
    return JiraClient(config=config)


def _response(status_code: int, payload: dict | None = None, text: str = "", headers: dict | None = None):
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.headers = headers or {}
    response.json.return_value = payload if payload is not None else {}
    return response


def _issue_item(issue_id: int, subtask: bool = False, parent: str | None = None) -> dict:
    fields = {
        "issuetype": {"name": "Sub-task" if subtask else "Story", "subtask": subtask},
        "status": {"name": "In Progress"},
        "assignee": {"displayName": "Alice"},
        "summary": f"Issue {issue_id}",
        "timetracking": {
            "originalEstimate": "1d",
            "originalEstimateSeconds": 28800,
            "timeSpent": "2h",
            "timeSpentSeconds": 7200,
        },
    }
    if parent:
        fields["parent"] = {"key": parent}
    return {"id": str(10000 + issue_id), "key": f"KEY-{issue_id}", "fields": fields}


def test_client_uses_organization_site_and_basic_auth():
    """Verify the client targets the organization's Atlassian site with user/token auth."""
    client = _build_client()

    assert client._build_url("/rest/agile/1.0/board") == "https://acme.atlassian.net/rest/agile/1.0/board"
    assert client._session.auth.username == "dev@acme.test"
    assert client._session.auth.password == "api-token"


def test_get_json_retries_on_429_and_succeeds():
    """Verify _get_json retries after HTTP 429 and eventually returns JSON payload."""
    client = _build_client()
    first = _response(429, payload={}, headers={"Retry-After": "2"})
    second = _response(200, payload={"id": 1})

    client._session.get = Mock(side_effect=[first, second])

    with patch("jira_sprint_helper.jira_client.time.sleep") as sleep_mock:
        payload = client._get_json("rest/agile/1.0/board/1")

    assert payload == {"id": 1}
    assert client._session.get.call_count == 2
    sleep_mock.assert_called_once_with(2)


def test_get_json_retries_on_5xx_and_raises_after_max_retries():
    """Verify _get_json retries retryable server errors and raises ApiError after limit."""
    client = _build_client()
    server_error = _response(503, payload={}, text="service unavailable")
    client._session.get = Mock(side_effect=[server_error] * client._MAX_RETRIES)

    with patch("jira_sprint_helper.jira_client.time.sleep") as sleep_mock:
        with pytest.raises(ApiError):
            client._get_json("rest/agile/1.0/board")

    assert client._session.get.call_count == client._MAX_RETRIES
    assert sleep_mock.call_count == client._MAX_RETRIES - 1


def test_get_json_unauthorized_raises_authentication_error_without_retry():
    """Verify 401 responses surface as AuthenticationError immediately."""
    client = _build_client()
    client._session.get = Mock(return_value=_response(401, text="unauthorized"))

    with pytest.raises(AuthenticationError):
        client._get_json("rest/agile/1.0/board")

    assert client._session.get.call_count == 1


def test_get_json_not_found_raises_api_error():
    """Verify 404 responses surface as ApiError."""
    client = _build_client()
    client._session.get = Mock(return_value=_response(404, text="Board does not exist"))

    with pytest.raises(ApiError, match="404"):
        client._get_json("rest/agile/1.0/board/99")


def test_list_boards_follows_is_last_pagination():
    """Verify board listing keeps paging until the API reports the last page."""
    client = _build_client()
    client._get_json = Mock(
        side_effect=[
            {"isLast": False, "values": [{"id": 2, "name": "Team", "type": "scrum"}]},
            {"isLast": True, "values": [{"id": 1, "name": "Ops", "type": "kanban"}]},
        ]
    )

    boards = client.list_boards()

    assert boards == [Board(id=2, name="Team", type_name="scrum"), Board(id=1, name="Ops", type_name="kanban")]
    first_call, second_call = client._get_json.call_args_list
    assert first_call.kwargs["params"]["startAt"] == 0
    assert second_call.kwargs["params"]["startAt"] == 1


def test_list_sprints_sends_state_only_when_set():
    """Verify the sprint state filter is omitted for the all-states query."""
    client = _build_client()
    client._get_json = Mock(
        return_value={
            "isLast": True,
            "values": [
                {
                    "id": 5,
                    "name": "Sprint 5",
                    "state": "active",
                    "startDate": "2026-01-05T09:00:00.000Z",
                    "originBoardId": 3,
                }
            ],
        }
    )
    board = Board(id=3, name="Team", type_name="scrum")

    sprints = client.list_sprints(board, "active,future")
    client.list_sprints(board, "")

    assert sprints[0].id == 5
    assert sprints[0].origin_board_id == 3
    assert sprints[0].end_date is None
    first_call, second_call = client._get_json.call_args_list
    assert first_call.args[0] == "rest/agile/1.0/board/3/sprint"
    assert first_call.kwargs["params"]["state"] == "active,future"
    assert "state" not in second_call.kwargs["params"]


def test_get_sprint_without_origin_board():
    """Verify a sprint payload without originBoardId parses to None."""
    client = _build_client()
    client._get_json = Mock(return_value={"id": 8, "name": "Sprint 8"})

    sprint = client.get_sprint(8)

    assert sprint.origin_board_id is None
    assert sprint.state is None


def test_list_issues_paginates_until_total_and_parses_fields():
    """Verify issue listing uses startAt/maxResults paging and maps issue fields."""
    client = _build_client()
    first_page = {"total": 3, "issues": [_issue_item(1), _issue_item(2, subtask=True, parent="KEY-1")]}
    second_page = {"total": 3, "issues": [_issue_item(3)]}
    client._get_json = Mock(side_effect=[first_page, second_page])
    board = Board(id=3, name="Team", type_name="scrum")

    issues = client.list_issues(board, "ORDER BY issuekey", ["assignee", "parent"])

    assert [issue.key for issue in issues] == ["KEY-1", "KEY-2", "KEY-3"]
    subtask = issues[1]
    assert subtask.id == "10002"
    assert subtask.is_subtask
    assert subtask.parent_key == "KEY-1"
    assert subtask.assignee_name == "Alice"
    assert subtask.time_tracking.original_estimate == "1d"
    assert subtask.time_tracking.original_estimate_seconds == 28800
    assert subtask.time_tracking.remaining_estimate_seconds is None
    assert issues[0].parent_key is None

    first_call, second_call = client._get_json.call_args_list
    assert first_call.kwargs["params"]["jql"] == "ORDER BY issuekey"
    assert first_call.kwargs["params"]["fields"] == "assignee,parent"
    assert second_call.kwargs["params"]["startAt"] == 2


def test_list_issues_without_optional_fields():
    """Verify issues without assignee, type or time tracking parse with empty values."""
    client = _build_client()
    client._get_json = Mock(return_value={"total": 1, "issues": [{"id": "7", "key": "KEY-7", "fields": {}}]})

    (issue,) = client.list_issues(Board(id=1, name="b", type_name="scrum"), "ORDER BY issuekey", [])

    assert issue.assignee_name is None
    assert issue.issue_type_name is None
    assert issue.is_subtask is False
    assert issue.time_tracking is None


def test_list_issues_missing_key_raises_api_error():
    """Verify an issue payload without key is rejected."""
    client = _build_client()
    client._get_json = Mock(return_value={"total": 1, "issues": [{"id": "7", "fields": {}}]})

    with pytest.raises(ApiError):
        client.list_issues(Board(id=1, name="b", type_name="scrum"), "ORDER BY issuekey", [])


def test_edit_issue_puts_fields_once():
    """Verify issue edits send a single PUT with the fields payload."""
    client = _build_client()
    client._session.put = Mock(return_value=_response(204))
    fields = {"timetracking": {"originalEstimate": "120m", "remainingEstimate": "60m"}}

    client.edit_issue("10001", fields)

    client._session.put.assert_called_once_with(
        "https://acme.atlassian.net/rest/api/2/issue/10001",
        json={"fields": fields},
        timeout=30,
    )


def test_edit_issue_failure_is_not_retried():
    """Verify a failing edit raises ApiError without retrying."""
    client = _build_client()
    client._session.put = Mock(return_value=_response(503, text="unavailable"))

    with pytest.raises(ApiError):
        client.edit_issue("10001", {})

    assert client._session.put.call_count == 1


def test_edit_issue_transport_error_raises_api_error():
    """Verify connection failures during edits are wrapped in ApiError."""
    client = _build_client()
    client._session.put = Mock(side_effect=requests.ConnectionError("boom"))

    with pytest.raises(ApiError):
        client.edit_issue("10001", {})
