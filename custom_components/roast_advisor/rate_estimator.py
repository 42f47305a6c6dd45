"""Heating rate estimation from internal temperature readings."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from .const import (
    MIN_AVERAGE_RATE_HOURS,
    MIN_READINGS_FOR_RATE,
    SMOOTHING_TIME,
)
from .math_roast import linear_regression
from .time_utils import hours_between, minutes_between
from .types import RateResult

if TYPE_CHECKING:
    from .session import Reading, RoastSettings

_LOGGER = logging.getLogger(__name__)


def estimate_current_rate(readings: Sequence[Reading], window_size: int = 3) -> RateResult:
    """
    Fit a line through the most recent readings.

    x = hours since the first reading of the window, y = temperature.
    The slope is the current rate (°F/h). Returns rate None when fewer than
    two readings are available or the window has no usable time span.
    """
    if len(readings) < MIN_READINGS_FOR_RATE:
        return RateResult(None, 0.0, len(readings))

    window = list(readings[-window_size:]) if window_size > 0 else []
    if len(window) < 2:
        return RateResult(None, 0.0, len(window))

    first_time = window[0].timestamp
    x_data = [hours_between(first_time, r.timestamp) for r in window]
    y_data = [r.temp for r in window]

    fit = linear_regression(x_data, y_data)
    if fit is None:
        return RateResult(None, 0.0, len(window))

    return RateResult(round(fit.slope, 2), round(fit.r2, 3), len(window))


def window_readings(readings: Sequence[Reading], settings: RoastSettings) -> list[Reading]:
    """
    Select the regression window for the configured smoothing mode.

    'readings' keeps the last N readings. 'time' keeps readings within the
    trailing window minutes of the latest one, but never fewer than two.
    """
    if settings.smoothing_mode != SMOOTHING_TIME or not readings:
        return list(readings[-settings.smoothing_window_readings:])

    latest = readings[-1].timestamp
    recent = [
        r for r in readings
        if minutes_between(r.timestamp, latest) <= settings.smoothing_window_minutes
    ]
    if len(recent) < 2:
        return list(readings[-2:])
    return recent


def estimate_rate_for_settings(readings: Sequence[Reading], settings: RoastSettings) -> RateResult:
    window = window_readings(readings, settings)
    return estimate_current_rate(window, window_size=len(window))


def estimate_average_rate(readings: Sequence[Reading]) -> float | None:
    """Whole-session secant rate from first to last reading (°F/h)."""
    if len(readings) < 2:
        return None

    first = readings[0]
    last = readings[-1]
    hours = hours_between(first.timestamp, last.timestamp)
    if hours < MIN_AVERAGE_RATE_HOURS:
        return None

    return round((last.temp - first.temp) / hours, 2)


def reading_span_minutes(readings: Sequence[Reading]) -> float:
    if len(readings) < 2:
        return 0.0
    return minutes_between(readings[0].timestamp, readings[-1].timestamp)
