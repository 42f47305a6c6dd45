"""Result types produced by the roast engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, NamedTuple, TypedDict

from .const import MessageKey, ReasonCode


class RateResult(NamedTuple):
    """Windowed heating rate estimate."""
    rate: float | None  # °F/h
    r2: float
    sample_count: int


class PredictionResult(NamedTuple):
    minutes: int | None
    target_time: datetime | None


class ScheduleVariance(NamedTuple):
    variance_minutes: int | None  # Positive = late
    status: str


class Progress(TypedDict):
    """How far the session is from clearing a blocker."""
    current: int
    required: int
    message: str


@dataclass(frozen=True)
class ConfidenceResult:
    level: str
    code: ReasonCode
    reason: str


@dataclass(frozen=True)
class Eligibility:
    """Outcome of the recommendation eligibility gate."""
    can_recommend: bool
    blocker_type: str | None = None
    blocker_key: MessageKey | None = None
    blocker_params: dict[str, Any] = field(default_factory=dict)
    progress: Progress | None = None


@dataclass(frozen=True)
class CalculationResult:
    """Everything the display needs about rate, ETA and schedule."""
    current_temp: float | None
    current_rate: float | None
    average_rate: float | None
    r2: float
    predicted_minutes_to_target: int | None
    predicted_target_time: datetime | None
    schedule_variance_minutes: int | None
    schedule_status: str
    confidence: ConfidenceResult
    progress_percent: int = 0
    target_reached: bool = False


@dataclass(frozen=True)
class Recommendation:
    """
    Oven adjustment advice.

    message_key (or blocker_key when blocked) is rendered with message_params at
    the display boundary (display.py). The engine never formats temperatures.
    """
    action: str
    severity: str
    can_recommend: bool
    suggested_temp: float | None = None
    change_amount: float | None = None
    message_key: MessageKey | None = None
    message_params: dict[str, Any] = field(default_factory=dict)
    reasoning: str | None = None
    blocker_type: str | None = None
    blocker_key: MessageKey | None = None
    progress: Progress | None = None

    # Oven-off restart plan
    alternative_key: MessageKey | None = None
    restart_time: datetime | None = None
    restart_temp: float | None = None
    minutes_until_restart: int | None = None
    should_restart_now: bool = False
    estimated_current_meat_temp: float | None = None


class ResponsivenessSegment(NamedTuple):
    oven_temp: float
    heating_rate: float  # °F/h
    duration: float  # minutes
    reading_count: int


@dataclass(frozen=True)
class ResponsivenessResult:
    segments: list[ResponsivenessSegment]
    correlation: float
    responsiveness: float  # °F/h change per °F of oven change
    description: MessageKey


@dataclass(frozen=True)
class EngineResult:
    """Output of one full pipeline pass."""
    calculation: CalculationResult
    recommendation: Recommendation
    responsiveness: ResponsivenessResult | None
    evaluated_at: datetime
