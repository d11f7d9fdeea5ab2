"""GitHub GraphQL API client for pull request history retrieval."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from .errors import ApiError, DataValidationError
from .models import PullRequestRecord, RepositorySnapshot

logger = logging.getLogger(__name__)

PULL_REQUESTS_QUERY = """
query($owner: String!, $name: String!, $pageSize: Int!, $cursor: String) {
  repository(owner: $owner, name: $name) {
    createdAt
    pullRequests(first: $pageSize, after: $cursor) {
      totalCount
      pageInfo {
        endCursor
        hasNextPage
      }
      nodes {
        author { login }
        createdAt
        closedAt
        mergedAt
        additions
        deletions
        state
      }
    }
  }
}
"""


class GitHubClient:
    """Small, typed client for the GitHub GraphQL pull request API."""

    _GRAPHQL_URL = "https://api.github.com/graphql"
    _PULL_REQUEST_PAGE_SIZE = 100
    _MAX_RETRIES = 5
    _MAX_BACKOFF_SECONDS = 30

    def __init__(self, token: str, timeout_seconds: int = 30) -> None:
        """Initialize an authenticated GitHub API client.

        Args:
            token: GitHub personal access token.
            timeout_seconds: Per-request timeout in seconds.
        """
        self._timeout_seconds = timeout_seconds

        self._session = requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"bearer {token}",
                "Accept": "application/json",
            }
        )

    def _parse_datetime(self, value: Optional[str]) -> Optional[datetime]:
        """Parse GitHub ISO8601 timestamps into timezone-aware datetimes."""
        if not value:
            return None

        normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
        parsed = datetime.fromisoformat(normalized)
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed

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

    def _post_graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """Execute a GraphQL query with retry logic for 429/5xx responses.

        Returns:
            The ``data`` object of the GraphQL response.

        Raises:
            ApiError: If the request repeatedly fails, returns HTTP >= 400,
                does not return valid JSON, or reports GraphQL errors.
        """
        url = self._GRAPHQL_URL
        body = {"query": query, "variables": variables}

        last_error: Optional[Exception] = None

        for attempt in range(1, self._MAX_RETRIES + 1):
            try:
                response = self._session.post(url, json=body, timeout=self._timeout_seconds)
            except requests.RequestException as exc:
                last_error = exc
                if attempt == self._MAX_RETRIES:
                    raise ApiError(f"GitHub request failed after retries: POST {url}") from exc
                time.sleep(min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1)))
                continue

            status_code = response.status_code
            is_retryable = status_code == 429 or 500 <= status_code <= 599

            if is_retryable and attempt < self._MAX_RETRIES:
                time.sleep(self._extract_backoff_seconds(response, attempt))
                continue

            if status_code >= 400:
                raise ApiError(
                    "GitHub API request failed: "
                    f"POST {url} returned {status_code} - {response.text}"
                )

            try:
                payload = response.json()
            except ValueError as exc:
                raise ApiError(f"GitHub API returned invalid JSON: POST {url}") from exc

            if not isinstance(payload, dict):
                raise ApiError(f"GitHub API returned unexpected payload shape: POST {url}")

            errors = payload.get("errors")
            if errors:
                messages = "; ".join(str(error.get("message", error)) for error in errors)
                raise ApiError(f"GitHub GraphQL query failed: {messages}")

            data = payload.get("data")
            if not isinstance(data, dict):
                raise ApiError(f"GitHub API response is missing 'data': POST {url}")

            return data

        raise ApiError(f"GitHub request failed after retries: POST {url}") from last_error

    def _parse_pull_request(self, name: str, item: Dict[str, Any]) -> PullRequestRecord:
        author = item.get("author") or {}
        created_at = self._parse_datetime(item.get("createdAt"))
        state = item.get("state")

        if created_at is None or not state:
            raise ApiError(
                "GitHub pull request payload is missing required fields: "
                f"repo={name}, payload={item}"
            )

        try:
            return PullRequestRecord(
                author=str(author.get("login") or ""),
                created_at=created_at,
                closed_at=self._parse_datetime(item.get("closedAt")),
                merged_at=self._parse_datetime(item.get("mergedAt")),
                additions=int(item.get("additions") or 0),
                deletions=int(item.get("deletions") or 0),
                state=str(state),
            )
        except DataValidationError as exc:
            raise ApiError(f"GitHub pull request payload is inconsistent: repo={name}: {exc}") from exc

    def fetch_repository(self, org: str, repo: str) -> RepositorySnapshot:
        """Fetch a repository's creation time and its complete pull request history.

        Uses cursor pagination over ``pullRequests`` until ``hasNextPage`` is false.

        Raises:
            ApiError: If the repository does not exist or a payload is malformed.
        """
        name = f"{org}/{repo}"
        cursor: Optional[str] = None
        pull_requests: List[PullRequestRecord] = []
        created_at: Optional[datetime] = None

        while True:
            data = self._post_graphql(
                PULL_REQUESTS_QUERY,
                {
                    "owner": org,
                    "name": repo,
                    "pageSize": self._PULL_REQUEST_PAGE_SIZE,
                    "cursor": cursor,
                },
            )
            repository = data.get("repository")
            if not isinstance(repository, dict):
                raise ApiError(f"Repository '{name}' was not found.")

            created_at = self._parse_datetime(repository.get("createdAt"))
            connection = repository.get("pullRequests") or {}

            for item in connection.get("nodes") or []:
                pull_requests.append(self._parse_pull_request(name, item))

            logger.info(
                "%s: reading pr history (%d/%d)...",
                name,
                len(pull_requests),
                connection.get("totalCount") or len(pull_requests),
            )

            page_info = connection.get("pageInfo") or {}
            if not page_info.get("hasNextPage"):
                break

            cursor = page_info.get("endCursor")

        if created_at is None:
            raise ApiError(f"GitHub repository payload is missing 'createdAt': repo={name}")

        return RepositorySnapshot(name=name, created_at=created_at, pull_requests=pull_requests)
