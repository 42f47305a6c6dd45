"""Coordinator for the Roast Advisor integration."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
from typing import Any, TYPE_CHECKING

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers.storage import Store
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator
from homeassistant.util import dt as dt_util

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry

from .const import (
    DOMAIN,
    CONF_TARGET_TEMP,
    CONF_INITIAL_OVEN_TEMP,
    CONF_UNITS,
    CONF_MEAT_PRESET,
    DEFAULT_TARGET_TEMP,
    DEFAULT_INITIAL_OVEN_TEMP,
    DEFAULT_UNITS,
    MEAT_PRESETS,
    MEAT_TEMP_MIN,
    MEAT_TEMP_MAX,
    OVEN_TEMP_INPUT_MIN,
    OVEN_TEMP_INPUT_MAX,
    READING_JUMP_WARN,
    STORAGE_VERSION,
    STORAGE_KEY_TEMPLATE,
    SAVE_DELAY_SEC,
)
from .display import to_canonical_temp
from .engine import run_pipeline
from .session import RoastSession, RoastSettings, SessionConfig
from .time_utils import add_minutes
from .types import EngineResult

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoastData:
    """Class to hold coordinator data."""
    session: RoastSession | None
    result: EngineResult | None
    evaluated_at: datetime

    @property
    def active(self) -> bool:
        return self.session is not None


class RoastCoordinator(DataUpdateCoordinator[RoastData]):
    """Owns the roast session of one config entry and recomputes it."""

    def __init__(self, hass: HomeAssistant, entry: ConfigEntry) -> None:
        """Initialize coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            name=f"{DOMAIN}_{entry.entry_id}",
            # Refresh keeps "now"-dependent results (staleness, ETA) current
            update_interval=timedelta(minutes=1),
            config_entry=entry,
        )
        self.entry = entry
        self.device_name = entry.title

        self._store = Store(hass, STORAGE_VERSION, STORAGE_KEY_TEMPLATE.format(entry.entry_id))
        self.session: RoastSession | None = None

    def _get_conf(self, key: str, default: Any = None) -> Any:
        """Get config value from options, falling back to entry data and defaults."""
        if key in self.entry.options:
            return self.entry.options[key]
        return self.entry.data.get(key, default)

    @property
    def settings(self) -> RoastSettings:
        return RoastSettings.from_options({**self.entry.data, **self.entry.options})

    @property
    def units(self) -> str:
        """Display unit of the active session, else the configured default."""
        if self.session is not None:
            return self.session.config.units
        return self._get_conf(CONF_UNITS, DEFAULT_UNITS)

    # --- Storage ---

    async def async_load_data(self) -> None:
        """Restore the persisted session, if any."""
        data = await self._store.async_load()
        if not data or not data.get("session"):
            _LOGGER.debug("No stored roast session for %s", self.device_name)
            return

        try:
            self.session = RoastSession.from_dict(data["session"])
        except (KeyError, TypeError, ValueError):
            _LOGGER.exception("Stored roast session is corrupt, starting empty")
            self.session = None
            await self.async_save_data()
            return

        _LOGGER.info(
            "Restored roast session: %d readings, %d oven events",
            len(self.session.readings), len(self.session.oven_events),
        )

    def _get_data_for_storage(self) -> dict:
        """Prepare data for storage (sync helper)."""
        return {
            "version": STORAGE_VERSION,
            "session": self.session.to_dict() if self.session else None,
        }

    async def async_save_data(self) -> None:
        """Save the session immediately."""
        try:
            await self._store.async_save(self._get_data_for_storage())
        except (HomeAssistantError, OSError) as err:
            _LOGGER.error("Failed to save roast data: %s", err)

    def _schedule_save(self) -> None:
        self._store.async_delay_save(self._get_data_for_storage, SAVE_DELAY_SEC)

    # --- Calculation ---

    def _compute(self, now: datetime) -> RoastData:
        if self.session is None:
            return RoastData(session=None, result=None, evaluated_at=now)
        return RoastData(
            session=self.session,
            result=run_pipeline(self.session, self.settings, now),
            evaluated_at=now,
        )

    async def _async_update_data(self) -> RoastData:
        return self._compute(dt_util.utcnow())

    def _commit(self) -> None:
        """Persist and push a full recompute to every entity."""
        self._schedule_save()
        self.async_set_updated_data(self._compute(dt_util.utcnow()))

    # --- Input helpers ---

    def _require_session(self) -> RoastSession:
        if self.session is None:
            raise ServiceValidationError("No active roast session. Start one first.")
        return self.session

    def _meat_temp(self, value: float, units: str | None = None) -> float:
        temp = to_canonical_temp(value, units or self.units)
        if not MEAT_TEMP_MIN <= temp <= MEAT_TEMP_MAX:
            raise ServiceValidationError(
                f"Meat temperature {value} is outside the plausible range "
                f"({MEAT_TEMP_MIN:g}-{MEAT_TEMP_MAX:g}°F)"
            )
        return temp

    def _oven_temp(self, value: float, units: str | None = None) -> float:
        temp = to_canonical_temp(value, units or self.units)
        if not OVEN_TEMP_INPUT_MIN <= temp <= OVEN_TEMP_INPUT_MAX:
            raise ServiceValidationError(
                f"Oven temperature {value} is outside the supported range "
                f"({OVEN_TEMP_INPUT_MIN:g}-{OVEN_TEMP_INPUT_MAX:g}°F)"
            )
        return temp

    @staticmethod
    def _when(timestamp: datetime | None) -> datetime:
        return dt_util.as_utc(timestamp) if timestamp else dt_util.utcnow()

    # --- Session lifecycle ---

    async def async_start_session(
        self,
        target_temp: float | None = None,
        oven_temp: float | None = None,
        starting_temp: float | None = None,
        serve_time: datetime | None = None,
        units: str | None = None,
        meat_preset: str | None = None,
        meat_cut: str | None = None,
        weight: float | None = None,
        notes: str | None = None,
    ) -> None:
        """Start a new session, replacing any active one."""
        units = units or self._get_conf(CONF_UNITS, DEFAULT_UNITS)
        preset_key = meat_preset or self._get_conf(CONF_MEAT_PRESET)
        preset = MEAT_PRESETS.get(preset_key) if preset_key else None

        def default(conf_key: str, field_name: str, fallback: float) -> float:
            # A preset named in the call beats the temperatures stored on the entry
            if meat_preset and preset:
                return preset[field_name]
            return self._get_conf(conf_key, preset[field_name] if preset else fallback)

        # Entry data is stored in °F; service input is in the session unit
        target = (
            self._meat_temp(target_temp, units) if target_temp is not None
            else default(CONF_TARGET_TEMP, "target", DEFAULT_TARGET_TEMP)
        )
        oven = (
            self._oven_temp(oven_temp, units) if oven_temp is not None
            else default(CONF_INITIAL_OVEN_TEMP, "oven", DEFAULT_INITIAL_OVEN_TEMP)
        )

        if self.session is not None:
            _LOGGER.info("Replacing active roast session")

        config = SessionConfig(
            target_temp=float(target),
            initial_oven_temp=float(oven),
            starting_temp=self._meat_temp(starting_temp, units) if starting_temp is not None else None,
            desired_serve_time=dt_util.as_utc(serve_time) if serve_time else None,
            units=units,
            meat_type=preset["name"] if preset else None,
            meat_cut=meat_cut,
            weight=weight,
            notes=notes,
        )
        self.session = RoastSession.start(config, dt_util.utcnow())
        self._commit()

    async def async_end_session(self) -> None:
        if self.session is None:
            _LOGGER.debug("End session requested without an active session")
            return
        _LOGGER.info(
            "Roast session ended after %d readings", len(self.session.readings)
        )
        self.session = None
        self._commit()

    # --- Readings ---

    async def async_log_reading(self, temperature: float, timestamp: datetime | None = None) -> None:
        session = self._require_session()
        temp = self._meat_temp(temperature)

        last = session.latest_reading
        if last is not None and abs(temp - last.temp) > READING_JUMP_WARN:
            _LOGGER.warning(
                "Large jump from last reading (%.1f°F -> %.1f°F); check thermometer placement",
                last.temp, temp,
            )

        session.add_reading(temp, self._when(timestamp))
        self._commit()

    async def async_update_reading(
        self,
        index: int,
        temperature: float | None = None,
        timestamp: datetime | None = None,
    ) -> None:
        session = self._require_session()
        temp = self._meat_temp(temperature) if temperature is not None else None
        try:
            session.update_reading(index, temp, dt_util.as_utc(timestamp) if timestamp else None)
        except IndexError as err:
            raise ServiceValidationError(f"No reading at index {index}") from err
        self._commit()

    async def async_delete_reading(self, index: int) -> None:
        session = self._require_session()
        try:
            session.delete_reading(index)
        except IndexError as err:
            raise ServiceValidationError(f"No reading at index {index}") from err
        self._commit()

    # --- Oven ---

    async def async_log_oven_temp(self, temperature: float, timestamp: datetime | None = None) -> None:
        session = self._require_session()
        session.add_oven_event(self._oven_temp(temperature), self._when(timestamp))
        self._commit()

    async def async_update_oven_event(
        self,
        index: int,
        temperature: float | None = None,
        timestamp: datetime | None = None,
    ) -> None:
        session = self._require_session()
        temp = self._oven_temp(temperature) if temperature is not None else None
        try:
            session.update_oven_event(index, temp, dt_util.as_utc(timestamp) if timestamp else None)
        except IndexError as err:
            raise ServiceValidationError(f"No oven event at index {index}") from err
        except ValueError as err:
            raise ServiceValidationError(str(err)) from err
        self._commit()

    async def async_delete_oven_event(self, index: int) -> None:
        session = self._require_session()
        try:
            session.delete_oven_event(index)
        except IndexError as err:
            raise ServiceValidationError(f"No oven event at index {index}") from err
        self._commit()

    async def async_log_oven_off(self, timestamp: datetime | None = None) -> None:
        session = self._require_session()
        if session.is_oven_off:
            raise ServiceValidationError("Oven is already logged as off")
        session.log_oven_off(self._when(timestamp))
        self._commit()

    async def async_log_oven_on(self, temperature: float, timestamp: datetime | None = None) -> None:
        session = self._require_session()
        session.log_oven_on(self._oven_temp(temperature), self._when(timestamp))
        self._commit()

    # --- Goal ---

    async def async_set_serve_time(
        self,
        serve_time: datetime | None = None,
        minutes_from_now: float | None = None,
    ) -> None:
        """Set (or clear, with neither argument) the desired serve time."""
        session = self._require_session()
        if minutes_from_now is not None:
            serve_time = add_minutes(dt_util.utcnow(), minutes_from_now)
        session.set_serve_time(dt_util.as_utc(serve_time) if serve_time else None)
        self._commit()
