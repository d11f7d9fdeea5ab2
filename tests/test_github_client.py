"""Tests for GitHub API client behavior with mocked HTTP."""

from datetime import datetime, timezone
from unittest.mock import Mock, patch

import pytest
import requests

from reposcan.errors import ApiError
from reposcan.github_client import GitHubClient


def _build_client() -> GitHubClient:
    return GitHubClient(token="gh-token")


def _response(status_code: int, payload=None, text: str = "", headers=None):
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.headers = headers or {}
    response.json.return_value = payload if payload is not None else {}
    return response


def _pr_node(login="alice", state="MERGED", merged="2024-01-10T12:00:00Z", closed="2024-01-10T12:00:00Z"):
    return {
        "author": {"login": login} if login is not None else None,
        "createdAt": "2024-01-02T09:00:00Z",
        "closedAt": closed,
        "mergedAt": merged,
        "additions": 20,
        "deletions": 10,
        "state": state,
    }


def _page(nodes, has_next=False, cursor=None, total=None):
    return {
        "repository": {
            "createdAt": "2023-06-01T00:00:00Z",
            "pullRequests": {
                "totalCount": total if total is not None else len(nodes),
                "pageInfo": {"endCursor": cursor, "hasNextPage": has_next},
                "nodes": nodes,
            },
        }
    }


def test_client_sends_bearer_token():
    """Verify the session is authenticated with the configured token."""
    client = _build_client()

    assert client._session.headers["Authorization"] == "bearer gh-token"


def test_post_graphql_retries_on_429_and_succeeds():
    """Verify _post_graphql retries after HTTP 429 and returns the data object."""
    client = _build_client()
    first = _response(429, headers={"Retry-After": "1"})
    second = _response(200, payload={"data": {"viewer": {"login": "alice"}}})

    client._session.post = Mock(side_effect=[first, second])

    with patch("reposcan.github_client.time.sleep") as sleep_mock:
        data = client._post_graphql("query { viewer { login } }", {})

    assert data == {"viewer": {"login": "alice"}}
    assert client._session.post.call_count == 2
    sleep_mock.assert_called_once_with(1)


def test_post_graphql_retries_on_5xx_and_raises_after_max_retries():
    """Verify retryable server errors raise ApiError once retries are exhausted."""
    client = _build_client()
    server_error = _response(502, text="bad gateway")
    client._session.post = Mock(side_effect=[server_error] * client._MAX_RETRIES)

    with patch("reposcan.github_client.time.sleep") as sleep_mock:
        with pytest.raises(ApiError):
            client._post_graphql("query", {})

    assert client._session.post.call_count == client._MAX_RETRIES
    assert sleep_mock.call_count == client._MAX_RETRIES - 1


def test_post_graphql_retries_transport_errors():
    """Verify connection failures are retried before succeeding."""
    client = _build_client()
    client._session.post = Mock(
        side_effect=[requests.ConnectionError("reset"), _response(200, payload={"data": {}})]
    )

    with patch("reposcan.github_client.time.sleep") as sleep_mock:
        assert client._post_graphql("query", {}) == {}

    sleep_mock.assert_called_once_with(1)


def test_post_graphql_client_error_raises_without_retry():
    """Verify non-retryable HTTP errors raise immediately."""
    client = _build_client()
    client._session.post = Mock(return_value=_response(401, text="Bad credentials"))

    with pytest.raises(ApiError, match="401"):
        client._post_graphql("query", {})

    assert client._session.post.call_count == 1


def test_post_graphql_graphql_errors_raise():
    """Verify GraphQL error arrays are surfaced as ApiError."""
    client = _build_client()
    client._session.post = Mock(
        return_value=_response(200, payload={"errors": [{"message": "Could not resolve to a Repository"}]})
    )

    with pytest.raises(ApiError, match="Could not resolve"):
        client._post_graphql("query", {})


def test_fetch_repository_paginates_with_cursor():
    """Verify pull requests are collected across pages using the end cursor."""
    client = _build_client()
    client._post_graphql = Mock(
        side_effect=[
            _page([_pr_node(), _pr_node(state="OPEN", merged=None, closed=None)], has_next=True, cursor="c1", total=3),
            _page([_pr_node(state="CLOSED", merged=None)], total=3),
        ]
    )

    snapshot = client.fetch_repository("org", "repo")

    assert snapshot.name == "org/repo"
    assert snapshot.created_at == datetime(2023, 6, 1, tzinfo=timezone.utc)
    assert len(snapshot.pull_requests) == 3
    assert [pr.state for pr in snapshot.pull_requests] == ["MERGED", "OPEN", "CLOSED"]
    assert snapshot.pull_requests[0].size == 30
    assert snapshot.pull_requests[0].merged_at == datetime(2024, 1, 10, 12, tzinfo=timezone.utc)

    first_variables = client._post_graphql.call_args_list[0].args[1]
    second_variables = client._post_graphql.call_args_list[1].args[1]
    assert first_variables["cursor"] is None
    assert first_variables["pageSize"] == client._PULL_REQUEST_PAGE_SIZE
    assert second_variables["cursor"] == "c1"
    assert second_variables["owner"] == "org"
    assert second_variables["name"] == "repo"


def test_fetch_repository_missing_author_becomes_empty_login():
    """Verify pull requests from deleted accounts carry an empty login."""
    client = _build_client()
    client._post_graphql = Mock(return_value=_page([_pr_node(login=None)]))

    snapshot = client.fetch_repository("org", "repo")

    assert snapshot.pull_requests[0].author == ""


def test_fetch_repository_not_found_raises():
    """Verify a null repository payload raises ApiError."""
    client = _build_client()
    client._post_graphql = Mock(return_value={"repository": None})

    with pytest.raises(ApiError):
        client.fetch_repository("org", "missing")


def test_fetch_repository_inconsistent_pull_request_raises():
    """Verify a closed pull request without a close time is rejected."""
    client = _build_client()
    client._post_graphql = Mock(return_value=_page([_pr_node(state="CLOSED", merged=None, closed=None)]))

    with pytest.raises(ApiError):
        client.fetch_repository("org", "repo")
