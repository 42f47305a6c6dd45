"""Confidence classification for the heating rate estimate."""
from __future__ import annotations

import logging

from .const import (
    CONFIDENCE_HIGH_READINGS,
    CONFIDENCE_HIGH_SPAN,
    CONFIDENCE_MIN_SPAN,
    LEVEL_HIGH,
    LEVEL_INSUFFICIENT,
    LEVEL_LOW,
    LEVEL_MEDIUM,
    MIN_RATE_FOR_PREDICTION,
    R2_GOOD,
    R2_UNSTABLE,
    ReasonCode,
)
from .types import ConfidenceResult

REASONS: dict[ReasonCode, str] = {
    ReasonCode.NO_READINGS: "No readings recorded yet",
    ReasonCode.INSUFFICIENT_READINGS: "Need at least 2 readings to calculate rate",
    ReasonCode.ONLY_TWO_READINGS: "Only 2 readings available; predictions may be inaccurate",
    ReasonCode.RATE_TOO_LOW: "Heating rate is very slow or negative; check thermometer placement",
    ReasonCode.SPAN_TOO_SHORT: "Readings span less than 15 minutes; wait for more data",
    ReasonCode.RATE_UNSTABLE: "Temperature readings are fluctuating; predictions may be unstable",
    ReasonCode.MODERATE_VARIATION: "Good data quality with moderate variation",
    ReasonCode.STRONG_FIT: "Strong data quality with consistent heating pattern",
    ReasonCode.ADEQUATE_DATA: "Adequate data for reasonable predictions",
}

LEVEL_ORDER = (LEVEL_INSUFFICIENT, LEVEL_LOW, LEVEL_MEDIUM, LEVEL_HIGH)

_LOGGER = logging.getLogger(__name__)


def _result(level: str, code: ReasonCode) -> ConfidenceResult:
    _LOGGER.debug("Confidence %s (%s)", level, code)
    return ConfidenceResult(level=level, code=code, reason=REASONS[code])


def no_readings() -> ConfidenceResult:
    return _result(LEVEL_INSUFFICIENT, ReasonCode.NO_READINGS)


def assess_confidence(
    reading_count: int,
    time_span_minutes: float,
    r2: float,
    rate: float | None,
) -> ConfidenceResult:
    """
    Classify the rate estimate. First matching rule wins:

    1. < 2 readings               -> insufficient
    2. < 3 readings               -> low
    3. rate <= 0.1 °F/h           -> low (slow or negative)
    4. span < 15 min              -> low
    5. R2 < 0.7                   -> low (fluctuating)
    6. R2 < 0.9                   -> medium
    7. >= 4 readings, >= 30 min   -> high
    8. otherwise                  -> medium
    """
    if reading_count < 2:
        return _result(LEVEL_INSUFFICIENT, ReasonCode.INSUFFICIENT_READINGS)

    if reading_count < 3:
        return _result(LEVEL_LOW, ReasonCode.ONLY_TWO_READINGS)

    if rate is not None and rate <= MIN_RATE_FOR_PREDICTION:
        return _result(LEVEL_LOW, ReasonCode.RATE_TOO_LOW)

    if time_span_minutes < CONFIDENCE_MIN_SPAN:
        return _result(LEVEL_LOW, ReasonCode.SPAN_TOO_SHORT)

    if r2 < R2_UNSTABLE:
        return _result(LEVEL_LOW, ReasonCode.RATE_UNSTABLE)

    if r2 < R2_GOOD:
        return _result(LEVEL_MEDIUM, ReasonCode.MODERATE_VARIATION)

    if reading_count >= CONFIDENCE_HIGH_READINGS and time_span_minutes >= CONFIDENCE_HIGH_SPAN:
        return _result(LEVEL_HIGH, ReasonCode.STRONG_FIT)

    return _result(LEVEL_MEDIUM, ReasonCode.ADEQUATE_DATA)
