"""PR comment and job summary rendering."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from run_report.config import RenderContext
from run_report.durations import (
    calculate_savings_percentage,
    format_duration,
    round_half_up,
)
from run_report.schema import (
    Action,
    ComparisonEstimate,
    Duration,
    NoComparison,
    ProjectedSavings,
    RunReport,
)
from run_report.status import (
    get_icon_for_status,
    get_label_for_status,
    is_flaky,
    is_slow,
)

COMMENT_MARKER_PREFIX = "<!-- moon-run-report: "
COMMENT_MARKER_SUFFIX = " -->"
UNKNOWN_MATRIX = "unknown"
TABLE_HEADERS = (
    "|     | Action | Time | Status | Info |",
    "| :-: | :----- | ---: | :----- | :--- |",
)


@dataclass(frozen=True, slots=True)
class RenderOptions:
    """Caller-controlled rendering knobs."""

    limit: int = 20
    slow_threshold: float = 120.0
    workspace_root: str = ""


def get_comment_token(context: RenderContext) -> str:
    """Return the hidden marker identifying this matrix cell's comment."""
    descriptor = context.matrix_descriptor or UNKNOWN_MATRIX
    return f"{COMMENT_MARKER_PREFIX}{descriptor}{COMMENT_MARKER_SUFFIX}"


def _stringify(value: object) -> str:
    """Render a JSON value the way it reads in a workflow file."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool) or value is None:
        return json.dumps(value)
    if isinstance(value, int | float):
        return str(value)
    return json.dumps(value, sort_keys=True)


def create_code_block(content: Mapping[str, object] | Iterable[str]) -> list[str]:
    """Fence a list of lines, or a mapping rendered as `key = value` lines."""
    code = ["```"]
    if isinstance(content, Mapping):
        code.extend(f"{key} = {_stringify(value)}" for key, value in content.items())
    else:
        code.extend(content)
    code.append("```")
    return code


def create_details_section(title: str, body: Iterable[str]) -> list[str]:
    """Wrap lines in a collapsible block."""
    return [
        "",
        f"<details><summary><strong>{title}</strong></summary><div>",
        "",
        *body,
        "",
        "</div></details>",
    ]


def _format_savings(savings: Duration | None, percent: int) -> str | None:
    if percent == 0:
        return None
    label, direction = ("savings", "faster") if percent > 0 else ("loss", "slower")
    if savings is None:
        return f"Estimated {label}: {abs(percent)}% {direction}"
    return f"Estimated {label}: {format_duration(savings)} ({abs(percent)}% {direction})"


def format_total_time(report: RunReport) -> str:
    """Render the summary line: total time, baseline, and savings or loss."""
    parts = [f"Total time: {format_duration(report.duration)}"]
    comparison = report.comparison
    savings_part: str | None = None

    match comparison:
        case ProjectedSavings(duration=projected, savings=savings):
            parts.append(f"Projected time: {format_duration(projected)}")
            if savings is not None:
                percent = calculate_savings_percentage(projected, savings)
                savings_part = _format_savings(savings, percent)
        case ComparisonEstimate(duration=estimated, percent=percent, gain=gain, loss=loss):
            parts.append(f"Estimated time: {format_duration(estimated)}")
            rounded = round_half_up(percent)
            amount = gain if rounded > 0 else loss
            savings_part = _format_savings(amount or gain or loss, rounded)
        case NoComparison():
            pass

    if savings_part:
        parts.append(savings_part)
    return " | ".join(parts)


def _action_comments(action: Action, slow_threshold: float) -> list[str]:
    comments: list[str] = []
    if is_flaky(action):
        comments.append("**FLAKY**")
    if action.attempts and len(action.attempts) > 1:
        comments.append(f"{len(action.attempts)} attempts")
    if is_slow(action, slow_threshold):
        comments.append("**SLOW**")
    return comments


def format_action_row(action: Action, slow_threshold: float) -> str:
    """Render one action as a table row."""
    comments = ", ".join(_action_comments(action, slow_threshold))
    return (
        f"| {get_icon_for_status(action.status)} | `{action.label}` "
        f"| {format_duration(action.duration)} | {get_label_for_status(action.status)} "
        f"| {comments} |"
    )


def _format_heading(context: RenderContext) -> str:
    commit = context.github.commit_info()
    heading = (
        f"## Run report for [{commit.sha[:8]}]({commit.url})" if commit else "## Run report"
    )
    if context.matrix:
        values = ", ".join(_stringify(value) for value in context.matrix.values())
        heading += f" `({values})`"
    return heading


def _relative_path(file_path: str, workspace_root: str) -> str:
    if not workspace_root:
        return file_path
    root = workspace_root.rstrip("/")
    if file_path == root:
        return ""
    if root and file_path.startswith(f"{root}/"):
        return file_path[len(root) + 1 :]
    return file_path


def render_markdown_report(
    report: RunReport,
    options: RenderOptions,
    context: RenderContext,
) -> str:
    """Render a run report as a Markdown comment body."""
    markdown = [get_comment_token(context), "", _format_heading(context)]

    if report.duration is not None:
        markdown.extend(["", format_total_time(report)])

    markdown.append("")
    markdown.extend(TABLE_HEADERS)

    rows = [format_action_row(action, options.slow_threshold) for action in report.actions]
    markdown.extend(rows[: options.limit])

    overflow_count = len(rows) - options.limit
    if overflow_count > 0:
        markdown.append(f"| | And {overflow_count} more... | | | |")
        markdown.extend(create_details_section("Expanded report", [*TABLE_HEADERS, *rows]))

    env_vars = None if context.is_test else context.env_vars
    if context.matrix or env_vars:
        os_name = "Test" if context.is_test else context.runner_os or "unknown"
        section = [f"**OS:** {os_name}"]
        if context.matrix:
            section.extend(["", "**Matrix:**", *create_code_block(context.matrix)])
        if env_vars:
            section.extend(["", "**Variables:**", *create_code_block(env_vars)])
        markdown.extend(create_details_section("Environment", section))

    touched_files = report.context.touched_files
    if touched_files:
        files = sorted(
            _relative_path(file_path, options.workspace_root) for file_path in touched_files
        )
        markdown.extend(create_details_section("Touched files", create_code_block(files)))

    return "\n".join(markdown)
