"""Time-to-target prediction and schedule variance."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta

from .const import (
    DEFAULT_ON_TRACK_THRESHOLD,
    MIN_RATE_FOR_PREDICTION,
    STATUS_EARLY,
    STATUS_LATE,
    STATUS_ON_TRACK,
    STATUS_UNKNOWN,
)
from .time_utils import minutes_between
from .types import PredictionResult, ScheduleVariance

_LOGGER = logging.getLogger(__name__)


def predict_time_to_target(
    current_temp: float,
    target_temp: float,
    rate: float | None,
    now: datetime,
) -> PredictionResult:
    """Project when the roast hits target at the current rate (°F/h)."""
    remaining = target_temp - current_temp
    if remaining <= 0:
        return PredictionResult(0, now)

    # Refuse to extrapolate flat or falling curves
    if rate is None or rate <= MIN_RATE_FOR_PREDICTION:
        _LOGGER.debug("No prediction at rate %s°F/h", rate)
        return PredictionResult(None, None)

    minutes = round(60.0 * remaining / rate)
    return PredictionResult(minutes, now + timedelta(minutes=minutes))


def classify_schedule_variance(
    predicted_target_time: datetime | None,
    desired_serve_time: datetime | None,
    threshold_minutes: float = DEFAULT_ON_TRACK_THRESHOLD,
) -> ScheduleVariance:
    """Positive variance means the roast finishes after the serve time."""
    if predicted_target_time is None or desired_serve_time is None:
        return ScheduleVariance(None, STATUS_UNKNOWN)

    variance = minutes_between(desired_serve_time, predicted_target_time)

    if variance < -threshold_minutes:
        status = STATUS_EARLY
    elif variance > threshold_minutes:
        status = STATUS_LATE
    else:
        status = STATUS_ON_TRACK

    return ScheduleVariance(round(variance), status)


def progress_percent(start_temp: float, current_temp: float, target_temp: float) -> int:
    """Progress toward target in percent (0-100)."""
    if target_temp <= start_temp:
        return 100
    progress = (current_temp - start_temp) / (target_temp - start_temp)
    return min(100, max(0, round(progress * 100)))
