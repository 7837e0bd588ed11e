"""Unit tests for GitHub client behavior."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest
from run_report.github_client import (
    GitHubApiError,
    GitHubInputError,
    GitHubRateLimitError,
    build_github_client,
    create_issue_comment,
    list_issue_comments,
    list_pull_requests_for_commit,
    parse_repo_full_name,
    update_issue_comment,
    validate_pr_number,
)


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
    """Create an HTTP client backed by mock transport."""
    transport = httpx.MockTransport(handler)
    return httpx.Client(base_url="https://api.github.com", transport=transport)


def make_comment_payload(comment_id: int, body: str | None = "Looks good") -> dict[str, object]:
    """Build a minimal valid issue comment payload."""
    return {
        "id": comment_id,
        "body": body,
        "html_url": f"https://github.com/acme/rocket/pull/42#issuecomment-{comment_id}",
        "user": {"login": "github-actions[bot]"},
    }


@pytest.mark.unit
def test_parse_repo_full_name_accepts_owner_repo() -> None:
    owner, repo = parse_repo_full_name("acme/rocket")
    assert owner == "acme"
    assert repo == "rocket"


@pytest.mark.unit
@pytest.mark.parametrize("value", ["acme", "", "acme/rocket/extra"])
def test_parse_repo_full_name_rejects_invalid_format(value: str) -> None:
    with pytest.raises(GitHubInputError):
        parse_repo_full_name(value)


@pytest.mark.unit
def test_validate_pr_number_rejects_non_positive() -> None:
    with pytest.raises(GitHubInputError):
        validate_pr_number(0)


@pytest.mark.unit
def test_list_issue_comments_paginates_until_last_page() -> None:
    requested_pages: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == "/repos/acme/rocket/issues/42/comments"
        page = request.url.params.get("page") or ""
        requested_pages.append(page)
        if page == "1":
            return httpx.Response(
                status_code=200,
                json=[make_comment_payload(index) for index in range(1, 101)],
            )
        return httpx.Response(status_code=200, json=[make_comment_payload(101, body=None)])

    with make_client(handler) as client:
        comments = list_issue_comments(
            client=client,
            repo_full_name="acme/rocket",
            issue_number=42,
        )

    assert requested_pages == ["1", "2"]
    assert len(comments) == 101
    assert comments[0].id == 1
    assert comments[-1].body == ""


@pytest.mark.unit
def test_list_issue_comments_rejects_invalid_shape() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, json={"message": "not a list"})

    with make_client(handler) as client, pytest.raises(GitHubApiError):
        list_issue_comments(client=client, repo_full_name="acme/rocket", issue_number=42)


@pytest.mark.unit
def test_create_issue_comment_posts_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/repos/acme/rocket/issues/42/comments"
        assert json.loads(request.content) == {"body": "report"}
        return httpx.Response(status_code=201, json=make_comment_payload(7, body="report"))

    with make_client(handler) as client:
        comment = create_issue_comment(
            client=client,
            repo_full_name="acme/rocket",
            issue_number=42,
            body="report",
        )

    assert comment.id == 7
    assert comment.body == "report"


@pytest.mark.unit
def test_update_issue_comment_patches_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "PATCH"
        assert request.url.path == "/repos/acme/rocket/issues/comments/99"
        assert json.loads(request.content) == {"body": "updated"}
        return httpx.Response(status_code=200, json=make_comment_payload(99, body="updated"))

    with make_client(handler) as client:
        comment = update_issue_comment(
            client=client,
            repo_full_name="acme/rocket",
            comment_id=99,
            body="updated",
        )

    assert comment.id == 99


@pytest.mark.unit
def test_create_issue_comment_raises_on_forbidden() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=403, json={"message": "Resource not accessible"})

    with make_client(handler) as client, pytest.raises(GitHubApiError) as error_info:
        create_issue_comment(
            client=client,
            repo_full_name="acme/rocket",
            issue_number=42,
            body="report",
        )

    assert not isinstance(error_info.value, GitHubRateLimitError)
    assert error_info.value.status_code == 403
    assert error_info.value.endpoint == "/repos/acme/rocket/issues/42/comments"


@pytest.mark.unit
def test_create_issue_comment_raises_on_non_json_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=201, text="<html>bad gateway</html>")

    with make_client(handler) as client, pytest.raises(GitHubApiError) as error_info:
        create_issue_comment(
            client=client,
            repo_full_name="acme/rocket",
            issue_number=42,
            body="report",
        )

    assert error_info.value.status_code == 201
    assert error_info.value.endpoint == "/repos/acme/rocket/issues/42/comments"


@pytest.mark.unit
def test_list_issue_comments_raises_on_non_json_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, text="not json")

    with make_client(handler) as client, pytest.raises(GitHubApiError, match="JSON body"):
        list_issue_comments(client=client, repo_full_name="acme/rocket", issue_number=42)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("status_code", "headers"),
    [(429, {}), (403, {"X-RateLimit-Remaining": "0"})],
)
def test_rate_limited_responses_raise_rate_limit_error(
    status_code: int,
    headers: dict[str, str],
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=status_code, headers=headers, json={})

    with make_client(handler) as client, pytest.raises(GitHubRateLimitError):
        list_issue_comments(client=client, repo_full_name="acme/rocket", issue_number=42)


@pytest.mark.unit
def test_list_pull_requests_for_commit_parses_rows() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/repos/acme/rocket/commits/abc123/pulls"
        return httpx.Response(
            status_code=200,
            json=[
                {"number": 3, "state": "closed", "head": {"sha": "abc123"}},
                {"number": 5, "state": "open", "head": None},
            ],
        )

    with make_client(handler) as client:
        pull_requests = list_pull_requests_for_commit(
            client=client,
            repo_full_name="acme/rocket",
            commit_sha="abc123",
        )

    assert [(pr.number, pr.state, pr.head_sha) for pr in pull_requests] == [
        (3, "closed", "abc123"),
        (5, "open", ""),
    ]


@pytest.mark.unit
def test_list_pull_requests_for_commit_requires_sha() -> None:
    with make_client(lambda request: httpx.Response(200, json=[])) as client:
        with pytest.raises(GitHubInputError):
            list_pull_requests_for_commit(
                client=client,
                repo_full_name="acme/rocket",
                commit_sha="",
            )


@pytest.mark.unit
def test_build_github_client_sets_auth_headers() -> None:
    with build_github_client("secret", base_url="https://ghe.example.com/api/v3") as client:
        assert client.headers["Authorization"] == "Bearer secret"
        assert client.headers["X-GitHub-Api-Version"] == "2022-11-28"
        assert str(client.base_url) == "https://ghe.example.com/api/v3/"
