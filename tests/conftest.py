"""Shared fixtures for Roast Advisor tests."""
from datetime import datetime, timedelta, timezone

import pytest

from custom_components.roast_advisor.session import OvenEvent, Reading, RoastSettings

UTC = timezone.utc
NOW = datetime(2026, 1, 10, 18, 0, tzinfo=UTC)


def make_readings(temps, start=None, interval_min=20.0):
    """Readings at a fixed interval, deltas filled in."""
    start = start or NOW - timedelta(minutes=interval_min * (len(temps) - 1))
    readings = []
    for i, temp in enumerate(temps):
        readings.append(
            Reading(
                temp=float(temp),
                timestamp=start + timedelta(minutes=interval_min * i),
                delta_from_start=float(temp - temps[0]),
                delta_from_previous=float(temp - temps[i - 1]) if i else 0.0,
            )
        )
    return readings


def make_event(set_temp, minutes_ago, is_off=False, previous_temp=None):
    return OvenEvent(
        set_temp=float(set_temp),
        timestamp=NOW - timedelta(minutes=minutes_ago),
        previous_temp=previous_temp,
        is_off=is_off,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def settings():
    return RoastSettings()
