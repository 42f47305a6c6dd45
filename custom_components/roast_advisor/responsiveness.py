"""Observed oven responsiveness: how heating rate tracks the oven set point."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Sequence

from .const import (
    CORRELATION_LIMITED,
    MIN_EVENTS_FOR_RESPONSIVENESS,
    MIN_READINGS_FOR_RESPONSIVENESS,
    MIN_SEGMENT_HOURS,
    RESPONSIVENESS_HIGH,
    THERMAL_LAG_MIN,
    MessageKey,
)
from .math_roast import pearson_correlation
from .time_utils import hours_between, minutes_between
from .types import ResponsivenessResult, ResponsivenessSegment

if TYPE_CHECKING:
    from .session import OvenEvent, Reading

_LOGGER = logging.getLogger(__name__)


def _segments(
    readings: Sequence[Reading],
    oven_events: Sequence[OvenEvent],
    now: datetime,
) -> list[ResponsivenessSegment]:
    segments: list[ResponsivenessSegment] = []

    for i, event in enumerate(oven_events):
        if event.is_off:
            continue

        end = oven_events[i + 1].timestamp if i + 1 < len(oven_events) else now
        # Meat lags the oven; ignore the first readings after a change
        effective_start = event.timestamp + timedelta(minutes=THERMAL_LAG_MIN)

        window = [r for r in readings if effective_start <= r.timestamp < end]
        if len(window) < 2:
            continue

        first, last = window[0], window[-1]
        hours = hours_between(first.timestamp, last.timestamp)
        if hours <= MIN_SEGMENT_HOURS:
            continue

        segments.append(
            ResponsivenessSegment(
                oven_temp=event.set_temp,
                heating_rate=(last.temp - first.temp) / hours,
                duration=minutes_between(event.timestamp, end),
                reading_count=len(window),
            )
        )

    return segments


def analyze_oven_responsiveness(
    readings: Sequence[Reading],
    oven_events: Sequence[OvenEvent],
    now: datetime,
) -> ResponsivenessResult | None:
    """
    Compare heating rates across oven set point segments.

    Returns None unless there are at least two oven events, five readings and
    two usable segments. responsiveness is °F/h of rate change per °F of oven
    change.
    """
    if len(oven_events) < MIN_EVENTS_FOR_RESPONSIVENESS or len(readings) < MIN_READINGS_FOR_RESPONSIVENESS:
        return None

    segments = _segments(readings, oven_events, now)
    if len(segments) < 2:
        _LOGGER.debug("Responsiveness: only %d usable segment(s)", len(segments))
        return None

    oven_temps = [s.oven_temp for s in segments]
    rates = [s.heating_rate for s in segments]

    correlation = pearson_correlation(oven_temps, rates)

    oven_range = max(oven_temps) - min(oven_temps)
    rate_range = max(rates) - min(rates)
    responsiveness = rate_range / oven_range if oven_range > 0 else 0.0

    if correlation < CORRELATION_LIMITED:
        description = MessageKey.RESPONSIVENESS_LIMITED
    elif responsiveness > RESPONSIVENESS_HIGH:
        description = MessageKey.RESPONSIVENESS_HIGH
    else:
        description = MessageKey.RESPONSIVENESS_MODERATE

    return ResponsivenessResult(
        segments=segments,
        correlation=correlation,
        responsiveness=responsiveness,
        description=description,
    )
