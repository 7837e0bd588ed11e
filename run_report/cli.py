"""Typer CLI for the moon run report publisher."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from run_report import workflow
from run_report.config import (
    DEFAULT_LIMIT,
    DEFAULT_SLOW_THRESHOLD_SECONDS,
    DEFAULT_SORT_DIR,
    ConfigError,
    load_action_inputs,
    load_render_context,
)
from run_report.output import RenderOptions, render_markdown_report
from run_report.publisher import publish_report
from run_report.schema import RunReport
from run_report.sorting import sort_report

app = typer.Typer(help="Publish moon run reports to GitHub pull requests.")


def _fail(message: str) -> None:
    workflow.set_output("comment-created", "false")
    workflow.error(message)


@app.command("publish")
def publish_command() -> None:
    """Publish the run report using the action inputs from the environment."""
    try:
        inputs = load_action_inputs()
        context = load_render_context()
        publish_report(inputs, context)
    except ConfigError as error:
        _fail(str(error))
        raise typer.Exit(code=1) from error
    except ValidationError as error:
        _fail(f"Run report could not be parsed: {error}")
        raise typer.Exit(code=1) from error
    except OSError as error:
        _fail(f"Run report could not be read: {error}")
        raise typer.Exit(code=1) from error


@app.command("render")
def render_command(
    report_path: Annotated[
        Path, typer.Argument(help="Path to a moon ciReport.json or runReport.json.")
    ],
    limit: Annotated[int, typer.Option(help="Maximum number of inline action rows.", min=0)] = (
        DEFAULT_LIMIT
    ),
    slow_threshold: Annotated[
        float, typer.Option(help="Seconds after which an action is marked slow.")
    ] = DEFAULT_SLOW_THRESHOLD_SECONDS,
    workspace_root: Annotated[
        str, typer.Option(help="Prefix stripped from touched file paths.")
    ] = "",
    sort_by: Annotated[str | None, typer.Option(help="Sort actions by: time|label.")] = None,
    sort_dir: Annotated[str, typer.Option(help="Sort direction: asc|desc.")] = DEFAULT_SORT_DIR,
) -> None:
    """Render a report file to Markdown on stdout without publishing it."""
    try:
        report = RunReport.model_validate_json(report_path.read_text(encoding="utf-8"))
        context = load_render_context()
    except (ConfigError, ValidationError, OSError) as error:
        typer.echo(f"Render failed: {error}", err=True)
        raise typer.Exit(code=1) from error

    if sort_by:
        sort_report(report, sort_by, sort_dir)

    typer.echo(
        render_markdown_report(
            report,
            RenderOptions(
                limit=limit,
                slow_threshold=slow_threshold,
                workspace_root=workspace_root,
            ),
            context,
        )
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
