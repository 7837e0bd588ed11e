"""Action inputs and GitHub runner context."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

DEFAULT_SLOW_THRESHOLD_SECONDS = 120.0
DEFAULT_LIMIT = 20
DEFAULT_SORT_DIR = "desc"
DEFAULT_SERVER_URL = "https://github.com"
DEFAULT_API_URL = "https://api.github.com"
ENV_VAR_PREFIXES = ("MOON_", "PROTO_")
RUN_ENV_VAR = "RUN_REPORT_ENV"
TRUE_VALUES = frozenset({"true", "True", "TRUE"})
FALSE_VALUES = frozenset({"false", "False", "FALSE"})


class ConfigError(ValueError):
    """Raised when action inputs or runner context are invalid."""


@dataclass(frozen=True, slots=True)
class CommitInfo:
    """Commit the report is linked to."""

    sha: str
    url: str


@dataclass(frozen=True, slots=True)
class GitHubContext:
    """Subset of the workflow run context used for linking and commenting."""

    repository: str = ""
    sha: str = ""
    server_url: str = DEFAULT_SERVER_URL
    api_url: str = DEFAULT_API_URL
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def pull_request_number(self) -> int | None:
        """Return the PR (or issue) number attached to the triggering event."""
        for key in ("pull_request", "issue"):
            entry = self.payload.get(key)
            if isinstance(entry, dict):
                number = entry.get("number")
                if isinstance(number, int) and not isinstance(number, bool):
                    return number
                if isinstance(number, str) and number.isdigit():
                    return int(number)
        return None

    @property
    def pull_request_head_sha(self) -> str | None:
        pull_request = self.payload.get("pull_request")
        if not isinstance(pull_request, dict):
            return None
        head = pull_request.get("head")
        if isinstance(head, dict) and isinstance(head.get("sha"), str):
            return head["sha"]
        return None

    def commit_info(self) -> CommitInfo | None:
        """Return the commit to link to, preferring the PR head commit."""
        sha = self.pull_request_head_sha or self.sha
        if not sha or not self.repository:
            return None
        return CommitInfo(
            sha=sha,
            url=f"{self.server_url}/{self.repository}/commit/{sha}",
        )


@dataclass(frozen=True, slots=True)
class RenderContext:
    """Process-wide values the renderer needs beyond the report itself."""

    github: GitHubContext = field(default_factory=GitHubContext)
    matrix_descriptor: str = ""
    matrix: dict[str, Any] | None = None
    runner_os: str | None = None
    env_vars: dict[str, str] | None = None
    is_test: bool = False


@dataclass(frozen=True, slots=True)
class ActionInputs:
    """Inputs declared by the action."""

    access_token: str
    workspace_root: Path
    slow_threshold: float = DEFAULT_SLOW_THRESHOLD_SECONDS
    limit: int = DEFAULT_LIMIT
    sort_by: str = ""
    sort_dir: str = DEFAULT_SORT_DIR
    skip_comment: bool = False


def _environ(environ: Mapping[str, str] | None) -> Mapping[str, str]:
    if environ is not None:
        return environ
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    return os.environ


def get_input(name: str, environ: Mapping[str, str]) -> str:
    """Read an action input from its `INPUT_<NAME>` environment variable."""
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    return environ.get(key, "").strip()


def get_boolean_input(name: str, environ: Mapping[str, str], *, default: bool = False) -> bool:
    """Read a YAML 1.2 core-schema boolean input."""
    value = get_input(name, environ)
    if not value:
        return default
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigError(
        f"Input '{name}' must be one of true|True|TRUE|false|False|FALSE, got '{value}'."
    )


def _get_number_input(name: str, environ: Mapping[str, str], *, default: float) -> float:
    value = get_input(name, environ)
    if not value:
        return default
    try:
        return float(value)
    except ValueError as error:
        raise ConfigError(f"Input '{name}' must be a number, got '{value}'.") from error


def _get_int_input(name: str, environ: Mapping[str, str], *, default: int) -> int:
    value = get_input(name, environ)
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError as error:
        raise ConfigError(f"Input '{name}' must be an integer, got '{value}'.") from error
    if parsed < 0:
        raise ConfigError(f"Input '{name}' must not be negative, got '{value}'.")
    return parsed


def parse_matrix(value: str) -> dict[str, Any] | None:
    """Parse the `matrix` input, a JSON object such as `${{ toJSON(matrix) }}`."""
    if not value:
        return None
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as error:
        raise ConfigError(f"Input 'matrix' is not valid JSON: {error.msg}.") from error
    if parsed is None:
        return None
    if not isinstance(parsed, dict):
        raise ConfigError("Input 'matrix' must be a JSON object.")
    return parsed


def collect_env_vars(
    environ: Mapping[str, str],
    prefixes: tuple[str, ...] = ENV_VAR_PREFIXES,
) -> dict[str, str] | None:
    """Collect non-empty variables owned by moon, or None when there are none."""
    collected = {
        key: value
        for key, value in environ.items()
        if value and key.startswith(prefixes)
    }
    return collected or None


def _read_event_payload(event_path: str) -> dict[str, Any]:
    if not event_path:
        return {}
    path = Path(event_path)
    if not path.is_file():
        return {}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise ConfigError(f"Event payload at {event_path} is not valid JSON.") from error
    return payload if isinstance(payload, dict) else {}


def load_github_context(environ: Mapping[str, str] | None = None) -> GitHubContext:
    """Build the GitHub context from the runner's default environment variables."""
    values = _environ(environ)
    return GitHubContext(
        repository=values.get("GITHUB_REPOSITORY", ""),
        sha=values.get("GITHUB_SHA", ""),
        server_url=values.get("GITHUB_SERVER_URL") or DEFAULT_SERVER_URL,
        api_url=values.get("GITHUB_API_URL") or DEFAULT_API_URL,
        payload=_read_event_payload(values.get("GITHUB_EVENT_PATH", "")),
    )


def load_render_context(environ: Mapping[str, str] | None = None) -> RenderContext:
    """Build the renderer context; env variables are never collected under test."""
    values = _environ(environ)
    matrix_descriptor = get_input("matrix", values)
    is_test = values.get(RUN_ENV_VAR) == "test"
    return RenderContext(
        github=load_github_context(values),
        matrix_descriptor=matrix_descriptor,
        matrix=parse_matrix(matrix_descriptor),
        runner_os=values.get("RUNNER_OS") or None,
        env_vars=None if is_test else collect_env_vars(values),
        is_test=is_test,
    )


def load_action_inputs(environ: Mapping[str, str] | None = None) -> ActionInputs:
    """Read and validate action inputs."""
    values = _environ(environ)
    access_token = (
        get_input("access-token", values)
        or values.get("GITHUB_TOKEN", "")
        or values.get("GH_TOKEN", "")
    )
    if not access_token:
        raise ConfigError("An `access-token` input is required.")

    workspace_root = (
        get_input("workspace-root", values) or values.get("GITHUB_WORKSPACE") or os.getcwd()
    )
    return ActionInputs(
        access_token=access_token,
        workspace_root=Path(workspace_root),
        slow_threshold=_get_number_input(
            "slow-threshold", values, default=DEFAULT_SLOW_THRESHOLD_SECONDS
        ),
        limit=_get_int_input("limit", values, default=DEFAULT_LIMIT),
        sort_by=get_input("sort-by", values),
        sort_dir=get_input("sort-dir", values) or DEFAULT_SORT_DIR,
        skip_comment=get_boolean_input("skip-comment", values),
    )
