"""Explicit calculation pipeline over a full session snapshot."""
from __future__ import annotations

import logging
from datetime import datetime

from .confidence import assess_confidence, no_readings
from .const import STATUS_UNKNOWN
from .predictor import classify_schedule_variance, predict_time_to_target, progress_percent
from .rate_estimator import estimate_average_rate, estimate_rate_for_settings, reading_span_minutes
from .recommendation import generate_recommendation
from .responsiveness import analyze_oven_responsiveness
from .session import RoastSession, RoastSettings
from .types import CalculationResult, EngineResult

_LOGGER = logging.getLogger(__name__)


def calculate(session: RoastSession, settings: RoastSettings, now: datetime) -> CalculationResult:
    """rate -> confidence -> prediction -> variance."""
    readings = session.readings
    config = session.config

    if not readings:
        return CalculationResult(
            current_temp=None,
            current_rate=None,
            average_rate=None,
            r2=0.0,
            predicted_minutes_to_target=None,
            predicted_target_time=None,
            schedule_variance_minutes=None,
            schedule_status=STATUS_UNKNOWN,
            confidence=no_readings(),
        )

    rate = estimate_rate_for_settings(readings, settings)
    average = estimate_average_rate(readings)
    span = reading_span_minutes(readings)
    confidence = assess_confidence(len(readings), span, rate.r2, rate.rate)

    current = readings[-1].temp
    prediction = predict_time_to_target(current, config.target_temp, rate.rate, now)
    variance = classify_schedule_variance(
        prediction.target_time,
        config.desired_serve_time,
        settings.on_track_threshold_minutes,
    )

    start_temp = config.starting_temp if config.starting_temp is not None else readings[0].temp

    return CalculationResult(
        current_temp=current,
        current_rate=rate.rate,
        average_rate=average,
        r2=rate.r2,
        predicted_minutes_to_target=prediction.minutes,
        predicted_target_time=prediction.target_time,
        schedule_variance_minutes=variance.variance_minutes,
        schedule_status=variance.status,
        confidence=confidence,
        progress_percent=progress_percent(start_temp, current, config.target_temp),
        target_reached=current >= config.target_temp,
    )


def run_pipeline(session: RoastSession, settings: RoastSettings, now: datetime) -> EngineResult:
    """
    Compute every derived result from one snapshot.

    Pure: the same session, settings and now always give the same result.
    """
    calculation = calculate(session, settings, now)

    recommendation = generate_recommendation(
        readings=session.readings,
        oven_events=session.oven_events,
        current_oven_temp=session.current_oven_temp,
        target_temp=session.config.target_temp,
        desired_serve_time=session.config.desired_serve_time,
        calculation=calculation,
        settings=settings,
        now=now,
    )

    responsiveness = analyze_oven_responsiveness(session.readings, session.oven_events, now)

    _LOGGER.debug(
        "Pipeline: %d readings, rate=%s, status=%s, action=%s",
        len(session.readings), calculation.current_rate,
        calculation.schedule_status, recommendation.action,
    )
    return EngineResult(
        calculation=calculation,
        recommendation=recommendation,
        responsiveness=responsiveness,
        evaluated_at=now,
    )
