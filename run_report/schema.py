"""Schema contract for moon run reports."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

NANOS_PER_MILLI = 1_000_000


class ActionStatus(StrEnum):
    """Final outcome of an action, as emitted by moon."""

    PASSED = "passed"
    FAILED = "failed"
    FAILED_AND_ABORT = "failed-and-abort"
    CACHED = "cached"
    CACHED_FROM_REMOTE = "cached-from-remote"
    INVALID = "invalid"
    SKIPPED = "skipped"
    ABORTED = "aborted"
    TIMED_OUT = "timed-out"
    RUNNING = "running"
    UNKNOWN = "unknown"


KNOWN_STATUSES = frozenset(status.value for status in ActionStatus)


class _ReportModel(BaseModel):
    """Base model accepting camelCase report keys and ignoring unknown fields."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Duration(_ReportModel):
    """Elapsed wall-clock time."""

    model_config = ConfigDict(frozen=True)

    secs: int = Field(default=0, ge=0)
    nanos: int = Field(default=0, ge=0, le=999_999_999)

    @property
    def millis(self) -> float:
        return self.secs * 1000 + self.nanos / NANOS_PER_MILLI

    def is_zero(self) -> bool:
        return self.secs == 0 and self.nanos == 0


def _coerce_status(value: object) -> object:
    """Map status codes this tool does not know about to the fallback."""
    if isinstance(value, str) and value not in KNOWN_STATUSES:
        return ActionStatus.UNKNOWN
    return value


class Attempt(_ReportModel):
    """One earlier execution of a retried action."""

    status: ActionStatus = ActionStatus.UNKNOWN
    duration: Duration | None = None

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, value: object) -> object:
        return _coerce_status(value)


class Action(_ReportModel):
    """One executed unit of work in a run."""

    label: str = ""
    status: ActionStatus = ActionStatus.UNKNOWN
    duration: Duration | None = None
    attempts: list[Attempt] | None = None
    error: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, value: object) -> object:
        return _coerce_status(value)

    @field_validator("label", mode="before")
    @classmethod
    def validate_label(cls, value: object) -> object:
        return "" if value is None else value


class ComparisonEstimateData(_ReportModel):
    """Cache efficiency estimate as emitted by newer moon releases."""

    duration: Duration
    percent: float = 0.0
    gain: Duration | None = None
    loss: Duration | None = None


class RunContext(_ReportModel):
    """Workspace context captured alongside the actions."""

    touched_files: list[str] = Field(default_factory=list)


@dataclass(frozen=True, slots=True)
class NoComparison:
    """The report carries no cache efficiency data."""


@dataclass(frozen=True, slots=True)
class ProjectedSavings:
    """Baseline duration plus the delta the cache saved (or lost)."""

    duration: Duration
    savings: Duration | None = None


@dataclass(frozen=True, slots=True)
class ComparisonEstimate:
    """Baseline duration plus a precomputed percentage and gain or loss."""

    duration: Duration
    percent: float
    gain: Duration | None = None
    loss: Duration | None = None


Comparison = NoComparison | ProjectedSavings | ComparisonEstimate


class RunReport(_ReportModel):
    """Root aggregate of one moon run."""

    actions: list[Action] = Field(default_factory=list)
    duration: Duration | None = None
    projected_duration: Duration | None = None
    estimated_savings: Duration | None = None
    comparison_estimate: ComparisonEstimateData | None = None
    context: RunContext = Field(default_factory=RunContext)

    @field_validator("context", mode="before")
    @classmethod
    def validate_context(cls, value: object) -> object:
        return {} if value is None else value

    @property
    def comparison(self) -> Comparison:
        """Return whichever cache efficiency shape this report carries."""
        if self.comparison_estimate is not None:
            estimate = self.comparison_estimate
            return ComparisonEstimate(
                duration=estimate.duration,
                percent=estimate.percent,
                gain=estimate.gain,
                loss=estimate.loss,
            )
        if self.projected_duration is not None:
            return ProjectedSavings(
                duration=self.projected_duration,
                savings=self.estimated_savings,
            )
        return NoComparison()
