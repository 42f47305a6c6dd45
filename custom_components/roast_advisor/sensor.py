"""Sensor platform for Roast Advisor."""
from __future__ import annotations

from typing import Any
from datetime import datetime

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import UnitOfTime
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .confidence import LEVEL_ORDER
from .const import (
    DOMAIN,
    VERSION,
    DISCLAIMER,
    ACTION_NONE,
    ACTION_HOLD,
    ACTION_RAISE,
    ACTION_LOWER,
    ACTION_OVEN_OFF,
    BLOCKER_NO_SESSION,
    MessageKey,
)
from .coordinator import RoastCoordinator
from .display import (
    render_message,
    responsiveness_params,
    to_display_delta,
    to_display_temp,
    unit_symbol,
)
from .time_utils import format_duration, to_iso
from .types import CalculationResult


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up sensors."""
    coordinator: RoastCoordinator = entry.runtime_data

    sensors = [
        InternalTempSensor(coordinator, entry),
        RateSensor(coordinator, entry, "current_rate", "current_rate"),
        RateSensor(coordinator, entry, "average_rate", "average_rate"),
        TimeToTargetSensor(coordinator, entry),
        TargetTimeSensor(coordinator, entry),
        ScheduleVarianceSensor(coordinator, entry),
        RoastConfidenceSensor(coordinator, entry),
        RecommendationSensor(coordinator, entry),
        OvenResponsivenessSensor(coordinator, entry),
    ]

    async_add_entities(sensors)


class RoastBaseSensor(CoordinatorEntity[RoastCoordinator], SensorEntity):
    """Base sensor."""
    _attr_has_entity_name = True
    _key: str

    def __init__(self, coordinator: RoastCoordinator, entry: ConfigEntry) -> None:
        super().__init__(coordinator)
        self._entry = entry
        self._attr_device_info = {
            "identifiers": {(DOMAIN, entry.entry_id)},
            "name": entry.title,
            "manufacturer": "Roast Advisor",
            "model": "Slow Roast Advisor",
            "sw_version": VERSION,
        }

    @property
    def unique_id(self) -> str:
        return f"{self._entry.entry_id}_{self._key}"

    @property
    def units(self) -> str:
        return self.coordinator.units

    @property
    def calculation(self) -> CalculationResult | None:
        result = self.coordinator.data.result
        return result.calculation if result else None


class InternalTempSensor(RoastBaseSensor):
    """Latest internal meat temperature."""
    _key = "internal_temp"
    _attr_translation_key = "internal_temp"
    _attr_device_class = SensorDeviceClass.TEMPERATURE
    _attr_state_class = SensorStateClass.MEASUREMENT

    @property
    def native_unit_of_measurement(self) -> str:
        return unit_symbol(self.units)

    @property
    def native_value(self) -> float | None:
        calc = self.calculation
        return to_display_temp(calc.current_temp, self.units) if calc else None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        session = self.coordinator.data.session
        if session is None:
            return {"session_active": False}

        calc = self.calculation
        config = session.config
        return {
            "session_active": True,
            "target_temp": to_display_temp(config.target_temp, self.units),
            "oven_set_temp": to_display_temp(session.current_oven_temp, self.units),
            "oven_off": session.is_oven_off,
            "progress_percent": calc.progress_percent if calc else 0,
            "target_reached": calc.target_reached if calc else False,
            "reading_count": len(session.readings),
            "meat_type": config.meat_type,
            "meat_cut": config.meat_cut,
            "readings": [
                {
                    "temp": to_display_temp(r.temp, self.units),
                    "timestamp": to_iso(r.timestamp),
                    "delta_from_previous": to_display_delta(r.delta_from_previous, self.units),
                }
                for r in session.readings
            ],
        }


class RateSensor(RoastBaseSensor):
    """Heating rate (windowed or whole session)."""
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_icon = "mdi:thermometer-chevron-up"

    def __init__(self, coordinator, entry, key, translation_key):
        super().__init__(coordinator, entry)
        self._key = key
        self._attr_translation_key = translation_key

    @property
    def native_unit_of_measurement(self) -> str:
        return f"{unit_symbol(self.units)}/h"

    @property
    def native_value(self) -> float | None:
        calc = self.calculation
        if calc is None:
            return None
        return to_display_delta(getattr(calc, self._key), self.units)

    @property
    def extra_state_attributes(self) -> dict[str, Any] | None:
        calc = self.calculation
        if self._key != "current_rate" or calc is None:
            return None
        return {"r2": calc.r2}


class TimeToTargetSensor(RoastBaseSensor):
    """Predicted minutes until the target temperature."""
    _key = "time_to_target"
    _attr_translation_key = "time_to_target"
    _attr_device_class = SensorDeviceClass.DURATION
    _attr_native_unit_of_measurement = UnitOfTime.MINUTES
    _attr_icon = "mdi:timer-sand"

    @property
    def native_value(self) -> int | None:
        calc = self.calculation
        return calc.predicted_minutes_to_target if calc else None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        calc = self.calculation
        return {"formatted": format_duration(calc.predicted_minutes_to_target if calc else None)}


class TargetTimeSensor(RoastBaseSensor):
    """Predicted wall-clock time of reaching target."""
    _key = "target_time"
    _attr_translation_key = "target_time"
    _attr_device_class = SensorDeviceClass.TIMESTAMP

    @property
    def native_value(self) -> datetime | None:
        calc = self.calculation
        return calc.predicted_target_time if calc else None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        session = self.coordinator.data.session
        serve = session.config.desired_serve_time if session else None
        return {"desired_serve_time": to_iso(serve)}


class ScheduleVarianceSensor(RoastBaseSensor):
    """Minutes late (positive) or early (negative) against the serve time."""
    _key = "schedule_variance"
    _attr_translation_key = "schedule_variance"
    _attr_native_unit_of_measurement = UnitOfTime.MINUTES
    _attr_icon = "mdi:clock-alert-outline"

    @property
    def native_value(self) -> int | None:
        calc = self.calculation
        return calc.schedule_variance_minutes if calc else None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        calc = self.calculation
        return {"status": calc.schedule_status if calc else None}


class RoastConfidenceSensor(RoastBaseSensor):
    """Confidence in the rate estimate."""
    _key = "confidence"
    _attr_translation_key = "confidence"
    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = list(LEVEL_ORDER)
    _attr_icon = "mdi:shield-check"

    @property
    def native_value(self) -> str | None:
        calc = self.calculation
        return calc.confidence.level if calc else None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        calc = self.calculation
        if calc is None:
            return {}
        return {
            "reason": calc.confidence.reason,
            "reason_code": calc.confidence.code.value,
            "r2": calc.r2,
        }


class RecommendationSensor(RoastBaseSensor):
    """Oven adjustment advice."""
    _key = "recommendation"
    _attr_translation_key = "recommendation"
    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = [ACTION_NONE, ACTION_HOLD, ACTION_RAISE, ACTION_LOWER, ACTION_OVEN_OFF]
    _attr_icon = "mdi:stove"

    @property
    def native_value(self) -> str:
        result = self.coordinator.data.result
        return result.recommendation.action if result else ACTION_NONE

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        result = self.coordinator.data.result
        units = self.units
        if result is None:
            return {
                "can_recommend": False,
                "blocker_type": BLOCKER_NO_SESSION,
                "message": render_message(MessageKey.NO_SESSION, None, units),
                "disclaimer": DISCLAIMER,
            }

        rec = result.recommendation
        attrs: dict[str, Any] = {
            "can_recommend": rec.can_recommend,
            "severity": rec.severity,
            "message": render_message(rec.message_key or rec.blocker_key, rec.message_params, units),
            "reasoning": rec.reasoning,
            "suggested_temp": to_display_temp(rec.suggested_temp, units),
            "change_amount": to_display_delta(rec.change_amount, units),
            "disclaimer": DISCLAIMER,
        }
        if not rec.can_recommend:
            attrs["blocker_type"] = rec.blocker_type
            attrs["progress"] = dict(rec.progress) if rec.progress else None
        if rec.restart_time is not None:
            attrs.update({
                "restart_time": to_iso(rec.restart_time),
                "restart_temp": to_display_temp(rec.restart_temp, units),
                "minutes_until_restart": rec.minutes_until_restart,
                "should_restart_now": rec.should_restart_now,
                "estimated_current_meat_temp": to_display_temp(rec.estimated_current_meat_temp, units),
                "alternative_message": render_message(rec.alternative_key, rec.message_params, units),
            })
        return attrs


class OvenResponsivenessSensor(RoastBaseSensor):
    """Observed heating-rate change per degree of oven change."""
    _key = "oven_responsiveness"
    _attr_translation_key = "oven_responsiveness"
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_icon = "mdi:chart-line"

    @property
    def native_value(self) -> float | None:
        result = self.coordinator.data.result
        if result is None or result.responsiveness is None:
            return None
        # Ratio of two temperature intervals; same value in °F and °C
        return round(result.responsiveness.responsiveness, 3)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        result = self.coordinator.data.result
        if result is None or result.responsiveness is None:
            return {}

        analysis = result.responsiveness
        units = self.units
        return {
            "correlation": round(analysis.correlation, 2),
            "description": render_message(
                analysis.description, responsiveness_params(analysis.responsiveness), units
            ),
            "segments": [
                {
                    "oven_temp": to_display_temp(s.oven_temp, units),
                    "heating_rate": to_display_delta(s.heating_rate, units),
                    "duration_min": round(s.duration),
                    "reading_count": s.reading_count,
                }
                for s in analysis.segments
            ],
        }
