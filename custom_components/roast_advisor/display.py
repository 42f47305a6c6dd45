"""
Display boundary.

The engine works in °F only. Everything user facing passes through here:
unit conversion for values shown in the session unit, conversion of service
input back to °F, and rendering of message keys with their params.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from homeassistant.const import UnitOfTemperature
from homeassistant.util import dt as dt_util
from homeassistant.util.unit_conversion import TemperatureConverter

from .const import RESPONSIVENESS_REFERENCE_STEP, UNIT_C, MessageKey
from .time_utils import format_duration

# Params holding absolute temperatures (°F in, session unit out)
TEMP_PARAMS = frozenset(
    {"oven_temp", "suggested_temp", "max_temp", "min_temp", "restart_temp", "estimated_temp"}
)
# Params holding temperature differences or rates
DELTA_PARAMS = frozenset({"rate_change", "oven_step"})

MESSAGES: dict[MessageKey, str] = {
    MessageKey.HOLD: "Hold steady at {oven_temp}. You're on track to hit your target.",
    MessageKey.RAISE_SMALL: "Consider raising oven to {suggested_temp} to speed things up.",
    MessageKey.RAISE_LARGE: "Running late. Consider raising oven to {suggested_temp}.",
    MessageKey.LOWER_SMALL: "Running ahead of schedule. Consider lowering oven to {suggested_temp}.",
    MessageKey.LOWER_LARGE: "Running very early. Lower oven to {suggested_temp} to avoid overshooting.",
    MessageKey.AT_MAX_TEMP: (
        "Already at maximum recommended temperature ({max_temp}). "
        "Consider extending your timeline if possible."
    ),
    MessageKey.AT_MIN_TEMP: "Already at minimum recommended temperature ({min_temp}). You may finish early.",
    MessageKey.UNKNOWN_STATUS: "Unable to determine schedule status.",
    MessageKey.OVEN_RESTART_NOW: "Turn the oven back on now at {restart_temp}.",
    MessageKey.OVEN_RESTART_TIMED: (
        "Turn the oven back on at {restart_time} ({minutes_until_restart}) set to {restart_temp}."
    ),
    MessageKey.OVEN_OFF_COOLING: "Oven is off. Meat is estimated at {estimated_temp} and cooling.",
    MessageKey.NO_SESSION: "No active roast session. Start one to get recommendations.",
    MessageKey.NEED_MORE_READINGS: "Need at least {count} readings to make recommendations.",
    MessageKey.NEED_MORE_TIME: "Need readings spanning at least {minutes} minutes.",
    MessageKey.NO_OVEN_DATA: "Log your oven temperature to get recommendations.",
    MessageKey.OVEN_TEMP_STALE: (
        "Oven temperature hasn't been updated recently. Please confirm current oven setting."
    ),
    MessageKey.INSUFFICIENT_CONFIDENCE: "Not enough data yet: {reason}.",
    MessageKey.NO_SERVE_TIME: "Set a desired serve time to get timing recommendations.",
    MessageKey.RATE_TOO_LOW: "Heating rate is very slow or negative. Check thermometer placement.",
    MessageKey.RATE_UNSTABLE: "Temperature readings are fluctuating. Wait for more stable data.",
    MessageKey.RESPONSIVENESS_LIMITED: "Limited correlation between oven changes and heating rate so far.",
    MessageKey.RESPONSIVENESS_HIGH: "Responsive: about {rate_change} per hour faster for each {oven_step} oven increase.",
    MessageKey.RESPONSIVENESS_MODERATE: "Moderate response to oven temperature changes.",
}


def _ha_unit(units: str) -> UnitOfTemperature:
    return UnitOfTemperature.CELSIUS if units == UNIT_C else UnitOfTemperature.FAHRENHEIT


def unit_symbol(units: str) -> str:
    return _ha_unit(units).value


def to_display_temp(temp_f: float | None, units: str) -> float | None:
    """°F to the session unit, one decimal."""
    if temp_f is None:
        return None
    value = TemperatureConverter.convert(temp_f, UnitOfTemperature.FAHRENHEIT, _ha_unit(units))
    return round(value, 1)


def to_display_delta(delta_f: float | None, units: str) -> float | None:
    """Temperature difference or rate (°F/h) in the session unit; no offset."""
    if delta_f is None:
        return None
    value = TemperatureConverter.convert_interval(delta_f, UnitOfTemperature.FAHRENHEIT, _ha_unit(units))
    return round(value, 1)


def to_canonical_temp(temp: float, units: str) -> float:
    """Service input in the session unit to °F."""
    value = TemperatureConverter.convert(temp, _ha_unit(units), UnitOfTemperature.FAHRENHEIT)
    return round(value, 1)


def format_temp(temp_f: float | None, units: str) -> str:
    value = to_display_temp(temp_f, units)
    if value is None:
        return "--"
    return f"{value:g}{unit_symbol(units)}"


def _format_param(name: str, value: Any, units: str) -> Any:
    if value is None:
        return "--"
    if name in TEMP_PARAMS:
        return format_temp(value, units)
    if name in DELTA_PARAMS:
        return f"{to_display_delta(value, units):g}{unit_symbol(units)}"
    if name == "minutes_until_restart":
        return f"in {format_duration(value)}"
    if isinstance(value, datetime):
        return dt_util.as_local(value).strftime("%H:%M")
    return value


def render_message(key: MessageKey | None, params: dict[str, Any] | None, units: str) -> str | None:
    """Render a message key with its params in the session unit."""
    if key is None:
        return None
    template = MESSAGES[key]
    formatted = {name: _format_param(name, value, units) for name, value in (params or {}).items()}
    return template.format_map(formatted)


def responsiveness_params(responsiveness: float) -> dict[str, float]:
    """Rate change (°F/h) for a reference oven step (°F)."""
    return {
        "rate_change": round(responsiveness * RESPONSIVENESS_REFERENCE_STEP, 1),
        "oven_step": RESPONSIVENESS_REFERENCE_STEP,
    }
