"""In-place ordering of report actions."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from run_report import workflow
from run_report.schema import Action, RunReport


def _time_key(action: Action) -> float:
    return action.duration.millis if action.duration is not None else 0.0


def _label_key(action: Action) -> tuple[str, str]:
    label = action.label or ""
    return label.casefold(), label


_SORT_KEYS: dict[str, Callable[[Action], Any]] = {
    "time": _time_key,
    "label": _label_key,
}


def sort_report(report: RunReport, sort_by: str, sort_dir: str) -> None:
    """Sort report actions by `time` or `label`.

    `asc` sorts ascending; any other direction sorts descending. Ties keep
    their original relative order. Unknown fields leave the order untouched.
    """
    key = _SORT_KEYS.get(sort_by)
    if key is None:
        workflow.debug(f'Unknown sort by field "{sort_by}".')
        return

    report.actions.sort(key=key, reverse=sort_dir != "asc")
