"""Duration formatting and cache savings helpers."""

from __future__ import annotations

import math

from run_report.schema import Duration

MISSING_DURATION = "--"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves rounded toward positive infinity."""
    return math.floor(value + 0.5)


def duration_to_millis(duration: Duration) -> float:
    """Convert a duration to milliseconds."""
    return duration.millis


def _format_decimal(value: float) -> str:
    """Render at most one decimal place, dropping a trailing `.0`."""
    text = f"{value:.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    return text


def format_time(mins: int, secs: int, millis: float) -> str:
    """Pick the display tier for a decomposed duration.

    Minutes hide milliseconds entirely, seconds fold the milliseconds into
    a single decimal, and milliseconds are only shown on their own.
    """
    if mins == 0 and secs == 0 and millis == 0:
        return "0s"

    if mins > 0:
        value = f"{mins}m"
        if secs > 0:
            value += f" {secs}s"
        return value

    if secs > 0:
        return f"{_format_decimal((secs * 1000 + millis) / 1000)}s"

    if millis > 0:
        return f"{_format_decimal(millis)}ms"

    return "0s"


def format_duration(duration: Duration | None) -> str:
    """Format a duration as a compact string like `1m 30s` or `450ms`."""
    if duration is None:
        return MISSING_DURATION
    if duration.is_zero():
        return "0s"

    mins, secs = divmod(duration.secs, 60)
    millis = duration.nanos / 1_000_000
    return format_time(mins, secs, millis)


def calculate_savings_percentage(projected: Duration, savings: Duration) -> int:
    """Return the savings as a signed percentage of the projected duration.

    Positive values mean the run was faster than projected. A zero projected
    duration has no meaningful percentage and yields 0.
    """
    base = duration_to_millis(projected)
    if base == 0:
        return 0
    diff = duration_to_millis(savings)
    return round_half_up(diff * 100 / base)
