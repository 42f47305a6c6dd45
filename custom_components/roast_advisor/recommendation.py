"""Oven adjustment recommendations.

Two stages: an eligibility gate that blocks advice built on inadequate data,
then an action calculator that proposes a bounded oven change. A separate
restart advisor handles sessions where the oven is logged as off.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Sequence

from .const import (
    ACTION_HOLD,
    ACTION_LOWER,
    ACTION_NONE,
    ACTION_OVEN_OFF,
    ACTION_RAISE,
    BLOCKER_BAD_RATE,
    BLOCKER_INSUFFICIENT_CONFIDENCE,
    BLOCKER_INSUFFICIENT_READINGS,
    BLOCKER_INSUFFICIENT_TIME,
    BLOCKER_NO_OVEN_DATA,
    BLOCKER_NO_SERVE_TIME,
    BLOCKER_STALE_OVEN_DATA,
    BLOCKER_UNSTABLE_RATE,
    FALLBACK_OVEN_TEMP,
    LATE_LARGE_MIN,
    LATE_MEDIUM_MIN,
    LEVEL_INSUFFICIENT,
    LEVEL_LOW,
    RESTART_STEP,
    RESTART_URGENT_STEP,
    SEVERITY_INFO,
    SEVERITY_MODERATE,
    SEVERITY_NORMAL,
    SEVERITY_UNKNOWN,
    SEVERITY_URGENT,
    SEVERITY_WARNING,
    STATUS_EARLY,
    STATUS_LATE,
    STATUS_ON_TRACK,
    STEP_FACTOR_LARGE,
    STEP_FACTOR_MEDIUM,
    TYPICAL_RATE_AT_225,
    MessageKey,
    ReasonCode,
)
from .math_roast import estimate_meat_cooling
from .rate_estimator import reading_span_minutes
from .time_utils import minutes_between
from .types import (
    CalculationResult,
    ConfidenceResult,
    Eligibility,
    Progress,
    Recommendation,
)

if TYPE_CHECKING:
    from .session import OvenEvent, Reading, RoastSettings

_LOGGER = logging.getLogger(__name__)


def check_eligibility(
    readings: Sequence[Reading],
    oven_events: Sequence[OvenEvent],
    desired_serve_time: datetime | None,
    settings: RoastSettings,
    confidence: ConfidenceResult,
    now: datetime,
) -> Eligibility:
    """Run the gate checks in priority order; the first failure wins."""
    # 1. Enough readings
    required = settings.min_readings_for_recommendation
    if len(readings) < required:
        needed = required - len(readings)
        return Eligibility(
            False,
            BLOCKER_INSUFFICIENT_READINGS,
            MessageKey.NEED_MORE_READINGS,
            {"count": required},
            Progress(
                current=len(readings),
                required=required,
                message=f"{needed} more reading{'s' if needed > 1 else ''} needed",
            ),
        )

    # 2. Enough history
    span = reading_span_minutes(readings)
    if span < settings.min_time_span_minutes:
        needed = math.ceil(settings.min_time_span_minutes - span)
        return Eligibility(
            False,
            BLOCKER_INSUFFICIENT_TIME,
            MessageKey.NEED_MORE_TIME,
            {"minutes": settings.min_time_span_minutes},
            Progress(
                current=round(span),
                required=round(settings.min_time_span_minutes),
                message=f"~{needed} more minutes of data needed",
            ),
        )

    # 3. Oven data present
    if not oven_events:
        return Eligibility(False, BLOCKER_NO_OVEN_DATA, MessageKey.NO_OVEN_DATA)

    last_event = oven_events[-1]
    oven_off = last_event.is_off

    # 4. Oven data fresh. An "off" entry stays valid until the oven is restarted.
    age = minutes_between(last_event.timestamp, now)
    if not oven_off and age > settings.oven_temp_stale_minutes:
        return Eligibility(
            False,
            BLOCKER_STALE_OVEN_DATA,
            MessageKey.OVEN_TEMP_STALE,
            {},
            Progress(
                current=round(age),
                required=round(settings.oven_temp_stale_minutes),
                message="Please confirm your current oven setting",
            ),
        )

    # 5. Any confidence at all (restart advice does not depend on the rate)
    if not oven_off and confidence.level == LEVEL_INSUFFICIENT:
        return Eligibility(
            False,
            BLOCKER_INSUFFICIENT_CONFIDENCE,
            MessageKey.INSUFFICIENT_CONFIDENCE,
            {"reason": confidence.reason},
        )

    # 6. A goal to schedule against
    if desired_serve_time is None:
        return Eligibility(False, BLOCKER_NO_SERVE_TIME, MessageKey.NO_SERVE_TIME)

    # 7. Rate quality
    if not oven_off and confidence.level == LEVEL_LOW:
        if confidence.code == ReasonCode.RATE_TOO_LOW:
            return Eligibility(False, BLOCKER_BAD_RATE, MessageKey.RATE_TOO_LOW)
        if confidence.code == ReasonCode.RATE_UNSTABLE:
            return Eligibility(False, BLOCKER_UNSTABLE_RATE, MessageKey.RATE_UNSTABLE)

    return Eligibility(True)


def _step_for(abs_variance: float, settings: RoastSettings) -> tuple[float, str]:
    """Step size and tier for a lateness/earliness magnitude."""
    step = settings.recommendation_step
    if abs_variance > LATE_LARGE_MIN:
        return min(settings.recommendation_max_step, step * STEP_FACTOR_LARGE), "large"
    if abs_variance > LATE_MEDIUM_MIN:
        return min(settings.recommendation_max_step, step * STEP_FACTOR_MEDIUM), "medium"
    return step, "small"


def calculate_action(
    current_oven_temp: float,
    variance_minutes: float | None,
    schedule_status: str,
    settings: RoastSettings,
) -> Recommendation:
    """Translate schedule status into a bounded oven change."""
    if schedule_status == STATUS_ON_TRACK:
        return Recommendation(
            action=ACTION_HOLD,
            severity=SEVERITY_NORMAL,
            can_recommend=True,
            suggested_temp=current_oven_temp,
            change_amount=0,
            message_key=MessageKey.HOLD,
            message_params={"oven_temp": current_oven_temp},
            reasoning=(
                f"Predicted to finish within {settings.on_track_threshold_minutes:g} "
                "minutes of your target time."
            ),
        )

    if schedule_status not in (STATUS_LATE, STATUS_EARLY) or variance_minutes is None:
        return Recommendation(
            action=ACTION_NONE,
            severity=SEVERITY_UNKNOWN,
            can_recommend=True,
            message_key=MessageKey.UNKNOWN_STATUS,
            reasoning="Insufficient data to calculate timing.",
        )

    abs_variance = abs(variance_minutes)
    minutes = round(abs_variance)
    change, tier = _step_for(abs_variance, settings)

    if schedule_status == STATUS_LATE:
        severity = {"large": SEVERITY_URGENT, "medium": SEVERITY_MODERATE}.get(tier, SEVERITY_NORMAL)
        suggested = min(current_oven_temp + change, settings.oven_temp_max)
        change = suggested - current_oven_temp

        if change <= 0:
            return Recommendation(
                action=ACTION_HOLD,
                severity=SEVERITY_WARNING,
                can_recommend=True,
                suggested_temp=current_oven_temp,
                change_amount=0,
                message_key=MessageKey.AT_MAX_TEMP,
                message_params={"max_temp": settings.oven_temp_max},
                reasoning=(
                    f"Running {minutes} minutes late, but oven is already at the "
                    "upper limit for low-and-slow cooking."
                ),
            )

        return Recommendation(
            action=ACTION_RAISE,
            severity=severity,
            can_recommend=True,
            suggested_temp=round(suggested),
            change_amount=round(change),
            message_key=MessageKey.RAISE_LARGE if tier == "large" else MessageKey.RAISE_SMALL,
            message_params={"suggested_temp": round(suggested)},
            reasoning=(
                f"Running approximately {minutes} minutes late. "
                "Increasing oven temperature will speed up heating."
            ),
        )

    # Early
    severity = SEVERITY_MODERATE if tier == "large" else SEVERITY_NORMAL
    suggested = max(current_oven_temp - change, settings.oven_temp_min)
    change = current_oven_temp - suggested

    if change <= 0:
        return Recommendation(
            action=ACTION_HOLD,
            severity=SEVERITY_INFO,
            can_recommend=True,
            suggested_temp=current_oven_temp,
            change_amount=0,
            message_key=MessageKey.AT_MIN_TEMP,
            message_params={"min_temp": settings.oven_temp_min},
            reasoning=(
                f"Running {minutes} minutes early, but oven is already at the "
                "lower limit for food safety."
            ),
        )

    return Recommendation(
        action=ACTION_LOWER,
        severity=severity,
        can_recommend=True,
        suggested_temp=round(suggested),
        change_amount=round(change),
        message_key=MessageKey.LOWER_LARGE if tier == "large" else MessageKey.LOWER_SMALL,
        message_params={"suggested_temp": round(suggested)},
        reasoning=(
            f"Running approximately {minutes} minutes early. "
            "Lowering oven temperature will slow down heating."
        ),
    )


@dataclass(frozen=True)
class RestartPlan:
    restart_time: datetime
    restart_temp: float
    minutes_until_restart: int
    should_restart_now: bool
    estimated_current_meat_temp: float
    reasoning: str


def estimate_rate_at(new_oven_temp: float, current_rate: float | None, current_oven_temp: float | None) -> float:
    """Scale the observed rate proportionally to the oven set point."""
    if not current_rate or current_rate <= 0 or not current_oven_temp:
        return (new_oven_temp / FALLBACK_OVEN_TEMP) * TYPICAL_RATE_AT_225
    return current_rate * (new_oven_temp / current_oven_temp)


def calculate_restart(
    last_meat_temp: float,
    target_temp: float,
    minutes_since_off: float,
    desired_serve_time: datetime,
    previous_oven_temp: float,
    current_rate: float | None,
    settings: RoastSettings,
    now: datetime,
) -> RestartPlan:
    """Work out when, and how hot, to restart an oven that was turned off."""
    estimated = estimate_meat_cooling(last_meat_temp, minutes_since_off)
    deficit = target_temp - estimated

    if deficit <= 0:
        return RestartPlan(
            now, previous_oven_temp, 0, True, estimated,
            "Meat is already at or past target temperature.",
        )

    minutes_to_serve = minutes_between(now, desired_serve_time)
    if minutes_to_serve <= 0:
        urgent = min(previous_oven_temp + RESTART_URGENT_STEP, settings.oven_temp_max)
        return RestartPlan(
            now, urgent, 0, True, estimated,
            "Past desired serve time - restart immediately at higher temperature.",
        )

    required_rate = deficit / minutes_to_serve * 60.0

    restart_temp = previous_oven_temp
    if current_rate and current_rate > 0:
        if required_rate > current_rate * 1.2:
            restart_temp = min(previous_oven_temp + RESTART_STEP, settings.oven_temp_max)
        elif required_rate < current_rate * 0.8:
            restart_temp = max(previous_oven_temp - RESTART_STEP, settings.oven_temp_min)

    rate_at_restart = estimate_rate_at(restart_temp, current_rate, previous_oven_temp)
    minutes_needed = deficit / rate_at_restart * 60.0

    restart_time = desired_serve_time - timedelta(minutes=minutes_needed)
    until = minutes_between(now, restart_time)

    if until > 0:
        reasoning = f"Wait {round(until)} minutes to finish on time."
    else:
        reasoning = "Restart now to reach target by desired serve time."

    return RestartPlan(restart_time, round(restart_temp), round(until), until <= 0, estimated, reasoning)


def _blocked(eligibility: Eligibility) -> Recommendation:
    return Recommendation(
        action=ACTION_NONE,
        severity=SEVERITY_UNKNOWN,
        can_recommend=False,
        message_params=dict(eligibility.blocker_params),
        blocker_type=eligibility.blocker_type,
        blocker_key=eligibility.blocker_key,
        progress=eligibility.progress,
    )


def generate_recommendation(
    *,
    readings: Sequence[Reading],
    oven_events: Sequence[OvenEvent],
    current_oven_temp: float | None,
    target_temp: float,
    desired_serve_time: datetime | None,
    calculation: CalculationResult,
    settings: RoastSettings,
    now: datetime,
) -> Recommendation:
    """Eligibility gate first, then restart advice or an oven adjustment."""
    eligibility = check_eligibility(
        readings, oven_events, desired_serve_time, settings, calculation.confidence, now
    )
    if not eligibility.can_recommend:
        _LOGGER.debug("Recommendation blocked: %s", eligibility.blocker_type)
        return _blocked(eligibility)

    last_event = oven_events[-1]
    if last_event.is_off and desired_serve_time is not None:
        previous = last_event.previous_temp or current_oven_temp or FALLBACK_OVEN_TEMP
        plan = calculate_restart(
            last_meat_temp=readings[-1].temp,
            target_temp=target_temp,
            minutes_since_off=minutes_between(last_event.timestamp, now),
            desired_serve_time=desired_serve_time,
            previous_oven_temp=previous,
            current_rate=calculation.current_rate,
            settings=settings,
            now=now,
        )
        _LOGGER.debug("Oven off: restart at %s (%.0f°F), now=%s", plan.restart_time, plan.restart_temp, plan.should_restart_now)
        return Recommendation(
            action=ACTION_OVEN_OFF,
            severity=SEVERITY_MODERATE if plan.should_restart_now else SEVERITY_NORMAL,
            can_recommend=True,
            suggested_temp=plan.restart_temp,
            message_key=MessageKey.OVEN_RESTART_NOW if plan.should_restart_now else MessageKey.OVEN_RESTART_TIMED,
            message_params={
                "restart_temp": plan.restart_temp,
                "restart_time": plan.restart_time,
                "minutes_until_restart": plan.minutes_until_restart,
                "estimated_temp": round(plan.estimated_current_meat_temp, 1),
            },
            reasoning=plan.reasoning,
            alternative_key=MessageKey.OVEN_OFF_COOLING,
            restart_time=plan.restart_time,
            restart_temp=plan.restart_temp,
            minutes_until_restart=plan.minutes_until_restart,
            should_restart_now=plan.should_restart_now,
            estimated_current_meat_temp=round(plan.estimated_current_meat_temp, 1),
        )

    oven_temp = current_oven_temp if current_oven_temp is not None else last_event.set_temp
    result = calculate_action(
        oven_temp,
        calculation.schedule_variance_minutes,
        calculation.schedule_status,
        settings,
    )
    _LOGGER.debug("Recommendation: %s (%s) -> %s", result.action, result.severity, result.suggested_temp)
    return result
