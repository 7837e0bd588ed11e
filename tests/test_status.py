"""Unit tests for action status classification."""

from __future__ import annotations

import pytest
from run_report.schema import Action, ActionStatus, Attempt, Duration
from run_report.status import (
    FALLBACK_ICON,
    get_icon_for_status,
    get_label_for_status,
    has_failed,
    has_passed,
    is_flaky,
    is_slow,
)


def make_action(
    status: str,
    *,
    attempts: list[str] | None = None,
    secs: int | None = None,
) -> Action:
    """Build an action from a status and optional attempt statuses."""
    return Action(
        label="app:build",
        status=status,
        attempts=[Attempt(status=item) for item in attempts] if attempts is not None else None,
        duration=Duration(secs=secs) if secs is not None else None,
    )


@pytest.mark.unit
def test_has_failed_statuses() -> None:
    assert has_failed(ActionStatus.FAILED)
    assert has_failed(ActionStatus.FAILED_AND_ABORT)
    assert not has_failed(ActionStatus.PASSED)
    assert not has_failed(ActionStatus.TIMED_OUT)


@pytest.mark.unit
def test_has_passed_statuses() -> None:
    assert has_passed(ActionStatus.PASSED)
    assert has_passed(ActionStatus.CACHED)
    assert not has_passed(ActionStatus.SKIPPED)
    assert not has_passed(ActionStatus.FAILED)


@pytest.mark.unit
def test_is_flaky_when_passed_after_failed_attempt() -> None:
    assert is_flaky(make_action("passed", attempts=["failed", "passed"]))


@pytest.mark.unit
def test_is_flaky_false_without_attempts() -> None:
    assert not is_flaky(make_action("passed", attempts=[]))
    assert not is_flaky(make_action("passed"))


@pytest.mark.unit
def test_is_flaky_false_when_never_passed() -> None:
    assert not is_flaky(make_action("failed", attempts=["failed"]))


@pytest.mark.unit
def test_is_flaky_false_when_attempts_all_passed() -> None:
    assert not is_flaky(make_action("cached", attempts=["passed"]))


@pytest.mark.unit
def test_is_slow_compares_against_threshold_seconds() -> None:
    assert is_slow(make_action("passed", secs=61), 60)
    assert not is_slow(make_action("passed", secs=60), 60)


@pytest.mark.unit
def test_is_slow_false_without_duration() -> None:
    assert not is_slow(make_action("passed"), 0)


@pytest.mark.unit
def test_icons_and_labels_for_known_statuses() -> None:
    assert get_icon_for_status(ActionStatus.PASSED) == "🟩"
    assert get_icon_for_status(ActionStatus.FAILED_AND_ABORT) == "🟥"
    assert get_label_for_status(ActionStatus.CACHED_FROM_REMOTE) == "Cached (remote)"
    assert get_label_for_status(ActionStatus.TIMED_OUT) == "Timed out"


@pytest.mark.unit
def test_unknown_status_uses_neutral_fallback() -> None:
    action = make_action("some-future-status")

    assert action.status is ActionStatus.UNKNOWN
    assert get_icon_for_status(action.status) == FALLBACK_ICON
    assert get_label_for_status(action.status) == "Unknown"
    assert get_icon_for_status(ActionStatus.RUNNING) == FALLBACK_ICON
    assert get_label_for_status(ActionStatus.RUNNING) == "Running"
