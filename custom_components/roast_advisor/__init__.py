"""The Roast Advisor integration."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import voluptuous as vol

from homeassistant.config_entries import ConfigEntry, ConfigEntryState
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import ServiceValidationError
from homeassistant.helpers import config_validation as cv

from .const import (
    DOMAIN,
    UNIT_C,
    UNIT_F,
    MEAT_PRESETS,
    SERVICE_LOG_READING,
    SERVICE_UPDATE_READING,
    SERVICE_DELETE_READING,
    SERVICE_LOG_OVEN_TEMP,
    SERVICE_UPDATE_OVEN_EVENT,
    SERVICE_DELETE_OVEN_EVENT,
    SERVICE_LOG_OVEN_OFF,
    SERVICE_LOG_OVEN_ON,
    SERVICE_SET_SERVE_TIME,
    SERVICE_START_SESSION,
    SERVICE_END_SESSION,
    ATTR_CONFIG_ENTRY_ID,
    ATTR_TEMPERATURE,
    ATTR_TIMESTAMP,
    ATTR_INDEX,
    ATTR_SERVE_TIME,
    ATTR_MINUTES_FROM_NOW,
    ATTR_UNITS,
    ATTR_MEAT_PRESET,
    ATTR_TARGET_TEMP,
    ATTR_OVEN_TEMP,
    ATTR_STARTING_TEMP,
    ATTR_MEAT_CUT,
    ATTR_WEIGHT,
    ATTR_NOTES,
)

if TYPE_CHECKING:
    from .coordinator import RoastCoordinator

_LOGGER = logging.getLogger(__name__)

PLATFORMS: list[Platform] = [Platform.SENSOR, Platform.BUTTON]

CONFIG_SCHEMA = cv.config_entry_only_config_schema(DOMAIN)

RoastConfigEntry = ConfigEntry  # [RoastCoordinator]

_ENTRY = {vol.Optional(ATTR_CONFIG_ENTRY_ID): cv.string}
_INDEX = vol.All(vol.Coerce(int), vol.Range(min=0))

SCHEMA_LOG_READING = vol.Schema({
    **_ENTRY,
    vol.Required(ATTR_TEMPERATURE): vol.Coerce(float),
    vol.Optional(ATTR_TIMESTAMP): cv.datetime,
})
SCHEMA_UPDATE_ENTRY = vol.Schema({
    **_ENTRY,
    vol.Required(ATTR_INDEX): _INDEX,
    vol.Optional(ATTR_TEMPERATURE): vol.Coerce(float),
    vol.Optional(ATTR_TIMESTAMP): cv.datetime,
})
SCHEMA_INDEX = vol.Schema({
    **_ENTRY,
    vol.Required(ATTR_INDEX): _INDEX,
})
SCHEMA_TIMESTAMP = vol.Schema({
    **_ENTRY,
    vol.Optional(ATTR_TIMESTAMP): cv.datetime,
})
SCHEMA_SET_SERVE_TIME = vol.Schema({
    **_ENTRY,
    vol.Exclusive(ATTR_SERVE_TIME, "serve"): cv.datetime,
    vol.Exclusive(ATTR_MINUTES_FROM_NOW, "serve"): vol.All(vol.Coerce(float), vol.Range(min=0)),
})
SCHEMA_START_SESSION = vol.Schema({
    **_ENTRY,
    vol.Optional(ATTR_TARGET_TEMP): vol.Coerce(float),
    vol.Optional(ATTR_OVEN_TEMP): vol.Coerce(float),
    vol.Optional(ATTR_STARTING_TEMP): vol.Coerce(float),
    vol.Optional(ATTR_SERVE_TIME): cv.datetime,
    vol.Optional(ATTR_UNITS): vol.In([UNIT_F, UNIT_C]),
    vol.Optional(ATTR_MEAT_PRESET): vol.In(list(MEAT_PRESETS)),
    vol.Optional(ATTR_MEAT_CUT): cv.string,
    vol.Optional(ATTR_WEIGHT): vol.All(vol.Coerce(float), vol.Range(min=0, min_included=False, max=100)),
    vol.Optional(ATTR_NOTES): vol.All(cv.string, vol.Length(max=500)),
})
SCHEMA_ENTRY_ONLY = vol.Schema(_ENTRY)


def _get_coordinator(hass: HomeAssistant, call: ServiceCall) -> RoastCoordinator:
    """Resolve the target entry; optional when exactly one is loaded."""
    entries = [
        e for e in hass.config_entries.async_entries(DOMAIN)
        if e.state is ConfigEntryState.LOADED
    ]
    entry_id = call.data.get(ATTR_CONFIG_ENTRY_ID)

    if entry_id:
        entries = [e for e in entries if e.entry_id == entry_id]
        if not entries:
            raise ServiceValidationError(f"Roast Advisor entry {entry_id} is not loaded")
    elif len(entries) != 1:
        raise ServiceValidationError(
            "Specify config_entry_id; there are %d Roast Advisor entries loaded" % len(entries)
        )

    return entries[0].runtime_data


def _async_register_services(hass: HomeAssistant) -> None:

    async def log_reading(call: ServiceCall) -> None:
        await _get_coordinator(hass, call).async_log_reading(
            call.data[ATTR_TEMPERATURE], call.data.get(ATTR_TIMESTAMP)
        )

    async def update_reading(call: ServiceCall) -> None:
        await _get_coordinator(hass, call).async_update_reading(
            call.data[ATTR_INDEX], call.data.get(ATTR_TEMPERATURE), call.data.get(ATTR_TIMESTAMP)
        )

    async def delete_reading(call: ServiceCall) -> None:
        await _get_coordinator(hass, call).async_delete_reading(call.data[ATTR_INDEX])

    async def log_oven_temp(call: ServiceCall) -> None:
        await _get_coordinator(hass, call).async_log_oven_temp(
            call.data[ATTR_TEMPERATURE], call.data.get(ATTR_TIMESTAMP)
        )

    async def update_oven_event(call: ServiceCall) -> None:
        await _get_coordinator(hass, call).async_update_oven_event(
            call.data[ATTR_INDEX], call.data.get(ATTR_TEMPERATURE), call.data.get(ATTR_TIMESTAMP)
        )

    async def delete_oven_event(call: ServiceCall) -> None:
        await _get_coordinator(hass, call).async_delete_oven_event(call.data[ATTR_INDEX])

    async def log_oven_off(call: ServiceCall) -> None:
        await _get_coordinator(hass, call).async_log_oven_off(call.data.get(ATTR_TIMESTAMP))

    async def log_oven_on(call: ServiceCall) -> None:
        await _get_coordinator(hass, call).async_log_oven_on(
            call.data[ATTR_TEMPERATURE], call.data.get(ATTR_TIMESTAMP)
        )

    async def set_serve_time(call: ServiceCall) -> None:
        await _get_coordinator(hass, call).async_set_serve_time(
            call.data.get(ATTR_SERVE_TIME), call.data.get(ATTR_MINUTES_FROM_NOW)
        )

    async def start_session(call: ServiceCall) -> None:
        await _get_coordinator(hass, call).async_start_session(
            target_temp=call.data.get(ATTR_TARGET_TEMP),
            oven_temp=call.data.get(ATTR_OVEN_TEMP),
            starting_temp=call.data.get(ATTR_STARTING_TEMP),
            serve_time=call.data.get(ATTR_SERVE_TIME),
            units=call.data.get(ATTR_UNITS),
            meat_preset=call.data.get(ATTR_MEAT_PRESET),
            meat_cut=call.data.get(ATTR_MEAT_CUT),
            weight=call.data.get(ATTR_WEIGHT),
            notes=call.data.get(ATTR_NOTES),
        )

    async def end_session(call: ServiceCall) -> None:
        await _get_coordinator(hass, call).async_end_session()

    services = (
        (SERVICE_LOG_READING, log_reading, SCHEMA_LOG_READING),
        (SERVICE_UPDATE_READING, update_reading, SCHEMA_UPDATE_ENTRY),
        (SERVICE_DELETE_READING, delete_reading, SCHEMA_INDEX),
        (SERVICE_LOG_OVEN_TEMP, log_oven_temp, SCHEMA_LOG_READING),
        (SERVICE_UPDATE_OVEN_EVENT, update_oven_event, SCHEMA_UPDATE_ENTRY),
        (SERVICE_DELETE_OVEN_EVENT, delete_oven_event, SCHEMA_INDEX),
        (SERVICE_LOG_OVEN_OFF, log_oven_off, SCHEMA_TIMESTAMP),
        (SERVICE_LOG_OVEN_ON, log_oven_on, SCHEMA_LOG_READING),
        (SERVICE_SET_SERVE_TIME, set_serve_time, SCHEMA_SET_SERVE_TIME),
        (SERVICE_START_SESSION, start_session, SCHEMA_START_SESSION),
        (SERVICE_END_SESSION, end_session, SCHEMA_ENTRY_ONLY),
    )
    for name, handler, schema in services:
        hass.services.async_register(DOMAIN, name, handler, schema=schema)


async def async_setup(hass: HomeAssistant, config: dict) -> bool:
    """Set up the Roast Advisor component globally."""
    _async_register_services(hass)
    return True


async def async_setup_entry(hass: HomeAssistant, entry: RoastConfigEntry) -> bool:
    """Set up Roast Advisor from a config entry."""
    from .coordinator import RoastCoordinator
    coordinator = RoastCoordinator(hass, entry)

    await coordinator.async_load_data()
    await coordinator.async_config_entry_first_refresh()

    entry.runtime_data = coordinator

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    entry.async_on_unload(entry.add_update_listener(async_reload_entry))

    return True


async def async_unload_entry(hass: HomeAssistant, entry: RoastConfigEntry) -> bool:
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        # Flush the pending delayed save before a reload re-reads the store
        await entry.runtime_data.async_save_data()
    return unload_ok


async def async_reload_entry(hass: HomeAssistant, entry: RoastConfigEntry) -> None:
    """Reload config entry when options change."""
    await hass.config_entries.async_reload(entry.entry_id)
