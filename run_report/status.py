"""Action status classification."""

from __future__ import annotations

from run_report.schema import Action, ActionStatus

FALLBACK_ICON = "⬛️"

STATUS_ICONS: dict[ActionStatus, str] = {
    ActionStatus.PASSED: "🟩",
    ActionStatus.CACHED: "🟪",
    ActionStatus.CACHED_FROM_REMOTE: "🟦",
    ActionStatus.FAILED: "🟥",
    ActionStatus.FAILED_AND_ABORT: "🟥",
    ActionStatus.INVALID: "🟨",
    ActionStatus.TIMED_OUT: "🟧",
    ActionStatus.ABORTED: "🟫",
    ActionStatus.SKIPPED: "⬜️",
}

STATUS_LABELS: dict[ActionStatus, str] = {
    ActionStatus.PASSED: "Passed",
    ActionStatus.CACHED: "Cached",
    ActionStatus.CACHED_FROM_REMOTE: "Cached (remote)",
    ActionStatus.FAILED: "Failed",
    ActionStatus.FAILED_AND_ABORT: "Failed (aborted)",
    ActionStatus.INVALID: "Invalid",
    ActionStatus.TIMED_OUT: "Timed out",
    ActionStatus.ABORTED: "Aborted",
    ActionStatus.SKIPPED: "Skipped",
    ActionStatus.RUNNING: "Running",
}

FAILED_STATUSES = frozenset({ActionStatus.FAILED, ActionStatus.FAILED_AND_ABORT})
PASSED_STATUSES = frozenset({ActionStatus.PASSED, ActionStatus.CACHED})


def get_icon_for_status(status: ActionStatus) -> str:
    return STATUS_ICONS.get(status, FALLBACK_ICON)


def get_label_for_status(status: ActionStatus) -> str:
    return STATUS_LABELS.get(status, "Unknown")


def has_failed(status: ActionStatus) -> bool:
    return status in FAILED_STATUSES


def has_passed(status: ActionStatus) -> bool:
    return status in PASSED_STATUSES


def is_flaky(action: Action) -> bool:
    """Return whether the action passed after failing on an earlier attempt."""
    if not action.attempts:
        return False
    return has_passed(action.status) and any(
        has_failed(attempt.status) for attempt in action.attempts
    )


def is_slow(action: Action, slow_threshold: float) -> bool:
    """Return whether the action ran longer than the threshold in seconds."""
    if action.duration is None:
        return False
    return action.duration.millis > slow_threshold * 1000
