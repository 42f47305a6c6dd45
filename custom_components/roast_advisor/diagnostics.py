"""Diagnostics support for Roast Advisor."""
from __future__ import annotations

from dataclasses import asdict
from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .coordinator import RoastCoordinator
from .time_utils import to_iso

TO_REDACT = {"unique_id", "entry_id", "notes"}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    coordinator: RoastCoordinator = entry.runtime_data
    data = coordinator.data

    session = coordinator.session.to_dict() if coordinator.session else None
    if session:
        session["config"] = async_redact_data(session["config"], TO_REDACT)

    results: dict[str, Any] | None = None
    if data is not None and data.result is not None:
        calc = data.result.calculation
        rec = data.result.recommendation
        results = {
            "evaluated_at": to_iso(data.result.evaluated_at),
            "calculation": {
                "current_rate": calc.current_rate,
                "average_rate": calc.average_rate,
                "r2": calc.r2,
                "predicted_minutes_to_target": calc.predicted_minutes_to_target,
                "predicted_target_time": to_iso(calc.predicted_target_time),
                "schedule_variance_minutes": calc.schedule_variance_minutes,
                "schedule_status": calc.schedule_status,
                "confidence": calc.confidence.level,
                "confidence_code": calc.confidence.code.value,
            },
            "recommendation": {
                "action": rec.action,
                "severity": rec.severity,
                "can_recommend": rec.can_recommend,
                "suggested_temp": rec.suggested_temp,
                "change_amount": rec.change_amount,
                "message_key": rec.message_key.value if rec.message_key else None,
                "blocker_type": rec.blocker_type,
                "should_restart_now": rec.should_restart_now,
                "restart_time": to_iso(rec.restart_time),
            },
            "responsiveness": (
                {
                    "correlation": data.result.responsiveness.correlation,
                    "responsiveness": data.result.responsiveness.responsiveness,
                    "segments": [s._asdict() for s in data.result.responsiveness.segments],
                }
                if data.result.responsiveness else None
            ),
        }

    return {
        "entry_data": async_redact_data(entry.data, TO_REDACT),
        "entry_options": async_redact_data(entry.options, TO_REDACT),
        "settings": asdict(coordinator.settings),
        "session": session,
        "results": results,
    }
