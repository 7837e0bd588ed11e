"""Load the run report and publish it as a PR comment and job summary."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

import httpx

from run_report import workflow
from run_report.config import ActionInputs, GitHubContext, RenderContext
from run_report.github_client import (
    GitHubApiError,
    GitHubInputError,
    IssueComment,
    build_github_client,
    create_issue_comment,
    list_issue_comments,
    list_pull_requests_for_commit,
    update_issue_comment,
)
from run_report.output import RenderOptions, get_comment_token, render_markdown_report
from run_report.schema import RunReport
from run_report.sorting import sort_report

REPORT_DIR = Path(".moon/cache")
REPORT_FILE_NAMES = ("ciReport.json", "runReport.json")

ClientFactory = Callable[[str, str], httpx.Client]


@dataclass(frozen=True, slots=True)
class CommentResult:
    """Outcome of the best-effort comment step."""

    created: bool
    comment_id: int | None = None
    updated: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class PublishOutcome:
    """Outcome of one full publish run."""

    markdown: str | None
    comment: CommentResult | None = None
    summary_written: bool = False

    @property
    def report_found(self) -> bool:
        return self.markdown is not None


def find_report_path(workspace_root: Path) -> Path | None:
    """Return the first existing report file under the moon cache directory."""
    for file_name in REPORT_FILE_NAMES:
        report_path = workspace_root / REPORT_DIR / file_name
        workflow.debug(f"Finding run report at {report_path}")
        if report_path.is_file():
            workflow.debug("Found!")
            return report_path
    return None


def load_report(workspace_root: Path) -> RunReport | None:
    """Load the run report, or None when moon did not write one."""
    report_path = find_report_path(workspace_root)
    if report_path is None:
        return None
    return RunReport.model_validate_json(report_path.read_text(encoding="utf-8"))


def find_existing_comment(
    comments: Iterable[IssueComment],
    comment_token: str,
) -> IssueComment | None:
    """Return the first comment carrying the de-duplication marker."""
    for comment in comments:
        if comment_token in comment.body:
            return comment
    return None


def resolve_pull_request_number(*, client: httpx.Client, github: GitHubContext) -> int | None:
    """Find the PR to comment on, falling back to PRs that contain the commit."""
    number = github.pull_request_number
    if number is not None:
        return number
    if not github.sha:
        return None

    pull_requests = list_pull_requests_for_commit(
        client=client,
        repo_full_name=github.repository,
        commit_sha=github.sha,
    )
    open_pull_requests = [pr for pr in pull_requests if pr.state == "open"]
    candidates = open_pull_requests or list(pull_requests)
    head_matches = [pr for pr in candidates if pr.head_sha == github.sha]
    candidates = head_matches or candidates
    if not candidates:
        return None
    workflow.debug(f"Resolved pull request #{candidates[0].number} from commit {github.sha}")
    return candidates[0].number


def save_comment(
    *,
    client: httpx.Client,
    github: GitHubContext,
    comment_token: str,
    markdown: str,
) -> CommentResult:
    """Update the marker-tagged comment or create a new one.

    API and network failures are returned as a failed result.
    """
    try:
        issue_number = resolve_pull_request_number(client=client, github=github)
        if issue_number is None:
            workflow.warning("No pull request or issue found, will not add a comment.")
            return CommentResult(created=False)

        comments = list_issue_comments(
            client=client,
            repo_full_name=github.repository,
            issue_number=issue_number,
        )
        existing_comment = find_existing_comment(comments, comment_token)

        if existing_comment is not None:
            workflow.debug(f"Updating existing comment #{existing_comment.id}")
            comment = update_issue_comment(
                client=client,
                repo_full_name=github.repository,
                comment_id=existing_comment.id,
                body=markdown,
            )
            return CommentResult(created=True, comment_id=comment.id, updated=True)

        workflow.debug("Creating a new comment")
        comment = create_issue_comment(
            client=client,
            repo_full_name=github.repository,
            issue_number=issue_number,
            body=markdown,
        )
        return CommentResult(created=True, comment_id=comment.id)
    except GitHubApiError as error:
        return CommentResult(
            created=False,
            error=f"{error} (status={error.status_code} endpoint={error.endpoint})",
        )
    except GitHubInputError as error:
        return CommentResult(created=False, error=str(error))
    except httpx.HTTPError as error:
        return CommentResult(created=False, error=f"network error ({error})")


def save_summary(markdown: str, *, environ: Mapping[str, str] | None = None) -> bool:
    return workflow.write_summary(markdown, environ=environ)


def publish_report(
    inputs: ActionInputs,
    context: RenderContext,
    *,
    client_factory: ClientFactory | None = None,
    environ: Mapping[str, str] | None = None,
) -> PublishOutcome:
    """Render the run report and publish it; see `CommentResult` for comment failures."""
    workflow.debug(f"Using workspace root {inputs.workspace_root}")

    report = load_report(inputs.workspace_root)
    # `moon ci` may have run without affecting anything, which is not an error.
    if report is None:
        workflow.info("Run report does not exist, has `moon ci` ran?")
        return PublishOutcome(markdown=None)

    if inputs.sort_by:
        sort_report(report, inputs.sort_by, inputs.sort_dir)

    markdown = render_markdown_report(
        report,
        RenderOptions(
            limit=inputs.limit,
            slow_threshold=inputs.slow_threshold,
            workspace_root=str(inputs.workspace_root),
        ),
        context,
    )

    comment: CommentResult | None = None
    if inputs.skip_comment:
        workflow.debug("Skipping comment, `skip-comment` is enabled.")
    else:
        factory = client_factory or _default_client_factory
        with factory(inputs.access_token, context.github.api_url) as client:
            comment = save_comment(
                client=client,
                github=context.github,
                comment_token=get_comment_token(context),
                markdown=markdown,
            )
        if comment.ok:
            with workflow.group("Comment body"):
                workflow.info(markdown)
        else:
            workflow.warning(f"Failed to create or update the run report comment: {comment.error}")
            workflow.notice(
                "The token may lack permission to comment, which is expected for pull "
                "requests from forks. The report is printed below and written to the "
                "job summary instead."
            )
            workflow.info(markdown)

    summary_written = save_summary(markdown, environ=environ)
    workflow.set_output(
        "comment-created",
        "true" if comment is not None and comment.created else "false",
        environ=environ,
    )
    workflow.set_output("report", markdown, environ=environ)

    return PublishOutcome(markdown=markdown, comment=comment, summary_written=summary_written)


def _default_client_factory(token: str, api_url: str) -> httpx.Client:
    return build_github_client(token, base_url=api_url)
