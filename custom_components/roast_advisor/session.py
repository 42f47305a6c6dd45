"""Roast session state: readings, oven events, config and settings."""
from __future__ import annotations

import bisect
import logging
from dataclasses import asdict, dataclass, field, fields, replace
from datetime import datetime
from typing import Any

from homeassistant.util import dt as dt_util

from .const import (
    CONF_MAX_STEP,
    CONF_MIN_READINGS,
    CONF_MIN_SPAN,
    CONF_ON_TRACK_THRESHOLD,
    CONF_OVEN_MAX,
    CONF_OVEN_MIN,
    CONF_SMOOTHING_MODE,
    CONF_SMOOTHING_WINDOW_MINUTES,
    CONF_SMOOTHING_WINDOW_READINGS,
    CONF_STALE_MINUTES,
    CONF_STEP,
    DEFAULT_INITIAL_OVEN_TEMP,
    DEFAULT_MAX_STEP,
    DEFAULT_MIN_READINGS,
    DEFAULT_MIN_SPAN,
    DEFAULT_ON_TRACK_THRESHOLD,
    DEFAULT_OVEN_MAX,
    DEFAULT_OVEN_MIN,
    DEFAULT_SMOOTHING_WINDOW_MINUTES,
    DEFAULT_SMOOTHING_WINDOW_READINGS,
    DEFAULT_STALE_MINUTES,
    DEFAULT_STEP,
    DEFAULT_TARGET_TEMP,
    DEFAULT_UNITS,
    SMOOTHING_READINGS,
)
from .time_utils import to_datetime, to_iso

_LOGGER = logging.getLogger(__name__)


@dataclass
class Reading:
    """Internal temperature measurement (°F)."""
    temp: float
    timestamp: datetime
    delta_from_start: float | None = None
    delta_from_previous: float | None = None

    def to_dict(self) -> dict:
        return {
            "temp": self.temp,
            "timestamp": to_iso(self.timestamp),
            "delta_from_start": self.delta_from_start,
            "delta_from_previous": self.delta_from_previous,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Reading:
        return cls(
            temp=float(data["temp"]),
            timestamp=to_datetime(data["timestamp"]),
            delta_from_start=data.get("delta_from_start"),
            delta_from_previous=data.get("delta_from_previous"),
        )


@dataclass
class OvenEvent:
    """Step change of the oven set point (°F). Off events carry set_temp 0."""
    set_temp: float
    timestamp: datetime
    previous_temp: float | None = None
    is_off: bool = False

    def to_dict(self) -> dict:
        return {
            "set_temp": self.set_temp,
            "previous_temp": self.previous_temp,
            "timestamp": to_iso(self.timestamp),
            "is_off": self.is_off,
        }

    @classmethod
    def from_dict(cls, data: dict) -> OvenEvent:
        return cls(
            set_temp=float(data["set_temp"]),
            timestamp=to_datetime(data["timestamp"]),
            previous_temp=data.get("previous_temp"),
            is_off=bool(data.get("is_off", False)),
        )


@dataclass(frozen=True)
class RoastSettings:
    """Policy thresholds. Temperatures in °F, times in minutes."""
    smoothing_window_readings: int = DEFAULT_SMOOTHING_WINDOW_READINGS
    smoothing_window_minutes: int = DEFAULT_SMOOTHING_WINDOW_MINUTES
    smoothing_mode: str = SMOOTHING_READINGS
    on_track_threshold_minutes: float = DEFAULT_ON_TRACK_THRESHOLD
    recommendation_step: float = DEFAULT_STEP
    recommendation_max_step: float = DEFAULT_MAX_STEP
    oven_temp_min: float = DEFAULT_OVEN_MIN
    oven_temp_max: float = DEFAULT_OVEN_MAX
    min_readings_for_recommendation: int = DEFAULT_MIN_READINGS
    min_time_span_minutes: float = DEFAULT_MIN_SPAN
    oven_temp_stale_minutes: float = DEFAULT_STALE_MINUTES

    @classmethod
    def from_options(cls, options: dict[str, Any]) -> RoastSettings:
        """Build settings from config entry options, falling back to defaults."""
        mapping = {
            CONF_SMOOTHING_WINDOW_READINGS: "smoothing_window_readings",
            CONF_SMOOTHING_WINDOW_MINUTES: "smoothing_window_minutes",
            CONF_SMOOTHING_MODE: "smoothing_mode",
            CONF_ON_TRACK_THRESHOLD: "on_track_threshold_minutes",
            CONF_STEP: "recommendation_step",
            CONF_MAX_STEP: "recommendation_max_step",
            CONF_OVEN_MIN: "oven_temp_min",
            CONF_OVEN_MAX: "oven_temp_max",
            CONF_MIN_READINGS: "min_readings_for_recommendation",
            CONF_MIN_SPAN: "min_time_span_minutes",
            CONF_STALE_MINUTES: "oven_temp_stale_minutes",
        }
        kwargs = {attr: options[key] for key, attr in mapping.items() if options.get(key) is not None}

        # Selectors hand back floats for integer counts
        for attr in ("smoothing_window_readings", "smoothing_window_minutes", "min_readings_for_recommendation"):
            if attr in kwargs:
                kwargs[attr] = int(kwargs[attr])
        return cls(**kwargs)


@dataclass
class SessionConfig:
    """Per-session goal and metadata."""
    target_temp: float = DEFAULT_TARGET_TEMP
    initial_oven_temp: float = DEFAULT_INITIAL_OVEN_TEMP
    starting_temp: float | None = None
    desired_serve_time: datetime | None = None
    units: str = DEFAULT_UNITS
    meat_type: str | None = None
    meat_cut: str | None = None
    weight: float | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        for key in ("desired_serve_time", "created_at", "updated_at"):
            data[key] = to_iso(data[key])
        return data

    @classmethod
    def from_dict(cls, data: dict) -> SessionConfig:
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        for key in ("desired_serve_time", "created_at", "updated_at"):
            if kwargs.get(key):
                kwargs[key] = to_datetime(kwargs[key])
        return cls(**kwargs)


@dataclass
class RoastSession:
    """
    One cooking session.

    Readings and oven events are kept in timestamp order, backfilled entries
    included. Any edit or delete recomputes reading deltas and oven links.
    """
    config: SessionConfig = field(default_factory=SessionConfig)
    readings: list[Reading] = field(default_factory=list)
    oven_events: list[OvenEvent] = field(default_factory=list)

    @classmethod
    def start(
        cls,
        config: SessionConfig,
        now: datetime | None = None,
    ) -> RoastSession:
        """Create a session, seeding the first oven event and optional reading."""
        now = now or dt_util.utcnow()
        config = replace(config, created_at=now, updated_at=now)
        session = cls(config=config)

        if config.initial_oven_temp:
            session.oven_events.append(OvenEvent(set_temp=config.initial_oven_temp, timestamp=now))
        if config.starting_temp is not None:
            session.readings.append(Reading(config.starting_temp, now, 0.0, 0.0))

        _LOGGER.info(
            "Roast session started. Target %.1f°F, oven %.1f°F",
            config.target_temp, config.initial_oven_temp,
        )
        return session

    @property
    def latest_reading(self) -> Reading | None:
        return self.readings[-1] if self.readings else None

    @property
    def last_oven_event(self) -> OvenEvent | None:
        return self.oven_events[-1] if self.oven_events else None

    @property
    def current_oven_temp(self) -> float | None:
        """Most recent oven set point (0 while off), else the configured initial temp."""
        if self.oven_events:
            return self.oven_events[-1].set_temp
        return self.config.initial_oven_temp

    @property
    def is_oven_off(self) -> bool:
        event = self.last_oven_event
        return event is not None and event.is_off

    def add_reading(self, temp: float, timestamp: datetime) -> Reading:
        last = self.latest_reading
        if last is not None and timestamp < last.timestamp:
            # Backfilled reading
            reading = Reading(temp, timestamp)
            self.readings.append(reading)
            self.readings.sort(key=lambda r: r.timestamp)
            self.recalculate_deltas()
            self._touch()
            return reading

        if last is not None:
            reading = Reading(temp, timestamp, temp - self.readings[0].temp, temp - last.temp)
        else:
            reading = Reading(temp, timestamp, 0.0, 0.0)
        self.readings.append(reading)
        self._touch(timestamp)
        return reading

    def update_reading(
        self,
        index: int,
        temp: float | None = None,
        timestamp: datetime | None = None,
    ) -> Reading:
        """Edit a reading in place. Raises IndexError for an unknown index."""
        reading = self.readings[index]
        if temp is not None:
            reading.temp = temp
        if timestamp is not None:
            reading.timestamp = timestamp
            self.readings.sort(key=lambda r: r.timestamp)
        self.recalculate_deltas()
        self._touch()
        return reading

    def delete_reading(self, index: int) -> Reading:
        reading = self.readings.pop(index)
        self.recalculate_deltas()
        self._touch()
        return reading

    def add_oven_event(self, set_temp: float, timestamp: datetime) -> OvenEvent:
        return self._insert_oven_event(OvenEvent(set_temp=set_temp, timestamp=timestamp))

    def update_oven_event(
        self,
        index: int,
        set_temp: float | None = None,
        timestamp: datetime | None = None,
    ) -> OvenEvent:
        """Edit an oven event in place. Raises IndexError for an unknown index."""
        event = self.oven_events[index]
        if set_temp is not None:
            if event.is_off:
                raise ValueError("An oven-off entry has no set temperature")
            event.set_temp = set_temp
        if timestamp is not None:
            event.timestamp = timestamp
            self.oven_events.sort(key=lambda e: e.timestamp)
        self._relink_oven_events()
        self._touch()
        return event

    def delete_oven_event(self, index: int) -> OvenEvent:
        event = self.oven_events.pop(index)
        self._relink_oven_events()
        self._touch()
        return event

    def log_oven_off(self, timestamp: datetime) -> OvenEvent:
        event = self._insert_oven_event(OvenEvent(set_temp=0.0, timestamp=timestamp, is_off=True))
        _LOGGER.info("Oven turned OFF (was %s°F)", event.previous_temp)
        return event

    def log_oven_on(self, set_temp: float, timestamp: datetime) -> OvenEvent:
        event = self._insert_oven_event(OvenEvent(set_temp=set_temp, timestamp=timestamp))
        _LOGGER.info("Oven turned back ON at %.1f°F", set_temp)
        return event

    def _insert_oven_event(self, event: OvenEvent) -> OvenEvent:
        """Insert in timestamp order; a backdated entry lands before later ones."""
        index = bisect.bisect_right(self.oven_events, event.timestamp, key=lambda e: e.timestamp)
        backfilled = index < len(self.oven_events)
        self.oven_events.insert(index, event)
        if index == 0:
            event.previous_temp = self.config.initial_oven_temp
        self._relink_oven_events()

        if backfilled:
            _LOGGER.debug("Backfilled oven event at position %d", index)
            self._touch()
        else:
            self._touch(event.timestamp)
        return event

    def _relink_oven_events(self) -> None:
        """previous_temp of each event is the set point of the one before it."""
        for prev, event in zip(self.oven_events, self.oven_events[1:]):
            event.previous_temp = prev.set_temp

    def set_serve_time(self, serve_time: datetime | None) -> None:
        self.config.desired_serve_time = serve_time
        self._touch()

    def recalculate_deltas(self) -> None:
        """Recompute deltas over the whole ordered list."""
        if not self.readings:
            return

        first_temp = self.readings[0].temp
        self.readings[0].delta_from_start = 0.0
        self.readings[0].delta_from_previous = 0.0

        for prev, reading in zip(self.readings, self.readings[1:]):
            reading.delta_from_start = reading.temp - first_temp
            reading.delta_from_previous = reading.temp - prev.temp

    def _touch(self, when: datetime | None = None) -> None:
        self.config.updated_at = when or dt_util.utcnow()

    def to_dict(self) -> dict:
        return {
            "config": self.config.to_dict(),
            "readings": [r.to_dict() for r in self.readings],
            "oven_events": [e.to_dict() for e in self.oven_events],
        }

    @classmethod
    def from_dict(cls, data: dict) -> RoastSession:
        return cls(
            config=SessionConfig.from_dict(data.get("config", {})),
            readings=[Reading.from_dict(r) for r in data.get("readings", [])],
            oven_events=[OvenEvent.from_dict(e) for e in data.get("oven_events", [])],
        )
