"""GitHub Actions workflow commands, step outputs and job summary."""

from __future__ import annotations

import os
import uuid
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path

import typer

GITHUB_OUTPUT_ENV_VAR = "GITHUB_OUTPUT"
GITHUB_STEP_SUMMARY_ENV_VAR = "GITHUB_STEP_SUMMARY"


def escape_data(value: str) -> str:
    """Escape a workflow command message the way the Actions toolkit does."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _issue_command(command: str, message: str) -> None:
    typer.echo(f"::{command}::{escape_data(message)}")


def debug(message: str) -> None:
    _issue_command("debug", message)


def info(message: str) -> None:
    typer.echo(message)


def notice(message: str) -> None:
    _issue_command("notice", message)


def warning(message: str) -> None:
    _issue_command("warning", message)


def error(message: str) -> None:
    _issue_command("error", message)


@contextmanager
def group(title: str) -> Iterator[None]:
    """Fold everything logged inside the block under one expandable line."""
    typer.echo(f"::group::{escape_data(title)}")
    try:
        yield
    finally:
        typer.echo("::endgroup::")


def _file_from_env(env_var: str, environ: Mapping[str, str] | None) -> Path | None:
    values = os.environ if environ is None else environ
    file_path = values.get(env_var)
    if not file_path:
        return None
    return Path(file_path)


def set_output(name: str, value: str, *, environ: Mapping[str, str] | None = None) -> bool:
    """Append a step output using a heredoc delimiter; return whether it was written."""
    output_path = _file_from_env(GITHUB_OUTPUT_ENV_VAR, environ)
    if output_path is None:
        debug(f"{GITHUB_OUTPUT_ENV_VAR} is not set; skipping output '{name}'.")
        return False

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    if delimiter in name or delimiter in value:
        raise ValueError(f"Output '{name}' unexpectedly contains its own delimiter.")

    with output_path.open("a", encoding="utf-8") as handle:
        handle.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
    return True


def write_summary(markdown: str, *, environ: Mapping[str, str] | None = None) -> bool:
    """Append Markdown to the job summary; return whether it was written."""
    summary_path = _file_from_env(GITHUB_STEP_SUMMARY_ENV_VAR, environ)
    if summary_path is None:
        debug(f"{GITHUB_STEP_SUMMARY_ENV_VAR} is not set; skipping job summary.")
        return False

    with summary_path.open("a", encoding="utf-8") as handle:
        handle.write(markdown)
        if not markdown.endswith("\n"):
            handle.write("\n")
    return True
