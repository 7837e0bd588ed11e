"""GitHub API wrapper for issue comments and commit pull requests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

GITHUB_API_BASE_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
DEFAULT_PER_PAGE = 100


class GitHubInputError(ValueError):
    """Raised when repository or PR input values are invalid."""


class GitHubApiError(RuntimeError):
    """Raised when a GitHub API request fails."""

    def __init__(self, message: str, *, status_code: int, endpoint: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint


class GitHubRateLimitError(GitHubApiError):
    """Raised when GitHub API rate limiting prevents request completion."""


@dataclass(frozen=True, slots=True)
class IssueComment:
    """Comment on an issue or pull request conversation."""

    id: int
    body: str
    html_url: str = ""


@dataclass(frozen=True, slots=True)
class PullRequestRef:
    """Pull request associated with a commit."""

    number: int
    state: str
    head_sha: str


def _ensure_mapping(value: object, *, context: str) -> dict[str, Any]:
    """Ensure a response fragment is a JSON object."""
    if not isinstance(value, dict):
        raise GitHubApiError(
            f"Expected JSON object for {context}.",
            status_code=500,
            endpoint=context,
        )
    return value


def _require_str(payload: dict[str, Any], *, key: str, endpoint: str) -> str:
    """Read a required string field from payload."""
    value = payload.get(key)
    if not isinstance(value, str):
        raise GitHubApiError(
            f"Expected string field '{key}' in GitHub response.",
            status_code=500,
            endpoint=endpoint,
        )
    return value


def _require_int(payload: dict[str, Any], *, key: str, endpoint: str) -> int:
    """Read a required integer field from payload."""
    value = payload.get(key)
    if not isinstance(value, int) or isinstance(value, bool):
        raise GitHubApiError(
            f"Expected integer field '{key}' in GitHub response.",
            status_code=500,
            endpoint=endpoint,
        )
    return value


def _optional_str(payload: dict[str, Any], *, key: str, endpoint: str) -> str:
    """Read a string-or-null field, normalizing null to an empty string."""
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise GitHubApiError(
            f"Expected '{key}' to be a string or null in GitHub response.",
            status_code=500,
            endpoint=endpoint,
        )
    return value


def _is_rate_limited(response: httpx.Response) -> bool:
    """Return whether a response signals primary or secondary rate limiting."""
    if response.status_code == 429:
        return True
    return response.status_code == 403 and response.headers.get("X-RateLimit-Remaining") == "0"


def _raise_http_error(response: httpx.Response, endpoint: str) -> None:
    """Raise a typed error for a non-success GitHub API response."""
    message = f"GitHub API request failed with status {response.status_code} for '{endpoint}'."
    if _is_rate_limited(response):
        raise GitHubRateLimitError(
            message,
            status_code=response.status_code,
            endpoint=endpoint,
        )
    raise GitHubApiError(
        message,
        status_code=response.status_code,
        endpoint=endpoint,
    )


def _send(
    client: httpx.Client,
    method: str,
    endpoint: str,
    *,
    json_body: dict[str, Any] | None = None,
) -> httpx.Response:
    """Send one request and raise on a non-success status."""
    response = client.request(method, endpoint, json=json_body)
    if response.status_code >= 400:
        _raise_http_error(response, endpoint)
    return response


def _decode_json(response: httpx.Response, endpoint: str) -> object:
    """Decode a response body, treating non-JSON payloads as API failures."""
    try:
        return response.json()
    except ValueError as error:
        raise GitHubApiError(
            "Expected JSON body in GitHub response.",
            status_code=response.status_code,
            endpoint=endpoint,
        ) from error


def _request_json_list(client: httpx.Client, endpoint: str) -> list[dict[str, Any]]:
    """Perform a GET request that returns an array of objects."""
    payload = _decode_json(_send(client, "GET", endpoint), endpoint)
    if not isinstance(payload, list):
        raise GitHubApiError(
            "Expected JSON array in GitHub response.",
            status_code=500,
            endpoint=endpoint,
        )
    rows: list[dict[str, Any]] = []
    for item in payload:
        if not isinstance(item, dict):
            raise GitHubApiError(
                "Expected all array items to be JSON objects in GitHub response.",
                status_code=500,
                endpoint=endpoint,
            )
        rows.append(item)
    return rows


def _paginate(client: httpx.Client, base_endpoint: str) -> list[dict[str, Any]]:
    """Collect every page of a list endpoint."""
    rows: list[dict[str, Any]] = []
    page = 1
    while True:
        endpoint = f"{base_endpoint}?per_page={DEFAULT_PER_PAGE}&page={page}"
        page_rows = _request_json_list(client, endpoint)
        rows.extend(page_rows)
        if len(page_rows) < DEFAULT_PER_PAGE:
            break
        page += 1
    return rows


def _parse_comment(payload: dict[str, Any], *, endpoint: str) -> IssueComment:
    return IssueComment(
        id=_require_int(payload, key="id", endpoint=endpoint),
        body=_optional_str(payload, key="body", endpoint=endpoint),
        html_url=_optional_str(payload, key="html_url", endpoint=endpoint),
    )


def list_issue_comments(
    *,
    client: httpx.Client,
    repo_full_name: str,
    issue_number: int,
) -> tuple[IssueComment, ...]:
    """Fetch all comments on an issue or pull request conversation."""
    owner, repo = parse_repo_full_name(repo_full_name)
    normalized_number = validate_pr_number(issue_number)
    endpoint = f"/repos/{owner}/{repo}/issues/{normalized_number}/comments"
    return tuple(_parse_comment(row, endpoint=endpoint) for row in _paginate(client, endpoint))


def create_issue_comment(
    *,
    client: httpx.Client,
    repo_full_name: str,
    issue_number: int,
    body: str,
) -> IssueComment:
    """Create a comment on an issue or pull request conversation."""
    owner, repo = parse_repo_full_name(repo_full_name)
    normalized_number = validate_pr_number(issue_number)
    endpoint = f"/repos/{owner}/{repo}/issues/{normalized_number}/comments"
    response = _send(client, "POST", endpoint, json_body={"body": body})
    payload = _ensure_mapping(_decode_json(response, endpoint), context=endpoint)
    return _parse_comment(payload, endpoint=endpoint)


def update_issue_comment(
    *,
    client: httpx.Client,
    repo_full_name: str,
    comment_id: int,
    body: str,
) -> IssueComment:
    """Replace the body of an existing comment."""
    owner, repo = parse_repo_full_name(repo_full_name)
    endpoint = f"/repos/{owner}/{repo}/issues/comments/{comment_id}"
    response = _send(client, "PATCH", endpoint, json_body={"body": body})
    payload = _ensure_mapping(_decode_json(response, endpoint), context=endpoint)
    return _parse_comment(payload, endpoint=endpoint)


def list_pull_requests_for_commit(
    *,
    client: httpx.Client,
    repo_full_name: str,
    commit_sha: str,
) -> tuple[PullRequestRef, ...]:
    """Fetch pull requests whose history contains a commit."""
    owner, repo = parse_repo_full_name(repo_full_name)
    if not commit_sha:
        raise GitHubInputError("Invalid commit sha ''. Expected a non-empty sha.")
    endpoint = f"/repos/{owner}/{repo}/commits/{commit_sha}/pulls"
    pull_requests: list[PullRequestRef] = []
    for row in _paginate(client, endpoint):
        head = row.get("head")
        head_sha = head.get("sha") if isinstance(head, dict) else None
        pull_requests.append(
            PullRequestRef(
                number=_require_int(row, key="number", endpoint=endpoint),
                state=_require_str(row, key="state", endpoint=endpoint),
                head_sha=head_sha if isinstance(head_sha, str) else "",
            )
        )
    return tuple(pull_requests)


def parse_repo_full_name(repo_full_name: str) -> tuple[str, str]:
    """Parse and validate repository input in owner/repo format."""
    owner, separator, repo = repo_full_name.strip().partition("/")
    if not separator or not owner or not repo or "/" in repo:
        raise GitHubInputError(
            f"Invalid repo '{repo_full_name}'. Expected format is owner/repo."
        )
    return owner, repo


def validate_pr_number(pr_number: int) -> int:
    """Validate and normalize pull request number input."""
    if pr_number <= 0:
        raise GitHubInputError(f"Invalid PR number '{pr_number}'. Expected a positive integer.")
    return pr_number


def build_github_client(
    token: str,
    *,
    base_url: str = GITHUB_API_BASE_URL,
    timeout_seconds: int = 20,
    trust_env: bool = True,
) -> httpx.Client:
    """Build an authenticated GitHub HTTP client."""
    headers = {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {token}",
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
    }
    return httpx.Client(
        base_url=base_url,
        headers=headers,
        timeout=timeout_seconds,
        trust_env=trust_env,
    )
