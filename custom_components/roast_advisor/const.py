"""Constants for the Roast Advisor integration."""
from enum import StrEnum
from typing import Final

DOMAIN: Final = "roast_advisor"
VERSION = "1.2.0"

# Session config keys
CONF_TARGET_TEMP: Final = "target_temp"
CONF_INITIAL_OVEN_TEMP: Final = "initial_oven_temp"
CONF_UNITS: Final = "units"
CONF_MEAT_PRESET: Final = "meat_preset"

UNIT_F: Final = "F"
UNIT_C: Final = "C"

# Settings keys (options flow)
CONF_SMOOTHING_WINDOW_READINGS: Final = "smoothing_window_readings"
CONF_SMOOTHING_WINDOW_MINUTES: Final = "smoothing_window_minutes"
CONF_SMOOTHING_MODE: Final = "smoothing_mode"
CONF_ON_TRACK_THRESHOLD: Final = "on_track_threshold_minutes"
CONF_STEP: Final = "recommendation_step"
CONF_MAX_STEP: Final = "recommendation_max_step"
CONF_OVEN_MIN: Final = "oven_temp_min"
CONF_OVEN_MAX: Final = "oven_temp_max"
CONF_MIN_READINGS: Final = "min_readings_for_recommendation"
CONF_MIN_SPAN: Final = "min_time_span_minutes"
CONF_STALE_MINUTES: Final = "oven_temp_stale_minutes"

SMOOTHING_READINGS: Final = "readings"
SMOOTHING_TIME: Final = "time"

# Session defaults (canonical unit: Fahrenheit)
DEFAULT_TARGET_TEMP: Final = 125.0
DEFAULT_INITIAL_OVEN_TEMP: Final = 200.0
DEFAULT_UNITS: Final = UNIT_F

# Settings defaults
DEFAULT_SMOOTHING_WINDOW_READINGS: Final = 3
DEFAULT_SMOOTHING_WINDOW_MINUTES: Final = 30
DEFAULT_ON_TRACK_THRESHOLD: Final = 10
DEFAULT_STEP: Final = 10
DEFAULT_MAX_STEP: Final = 25
DEFAULT_OVEN_MIN: Final = 150
DEFAULT_OVEN_MAX: Final = 300
DEFAULT_MIN_READINGS: Final = 3
DEFAULT_MIN_SPAN: Final = 30
DEFAULT_STALE_MINUTES: Final = 60

# Calculation thresholds
MIN_READINGS_FOR_RATE: Final = 2
MIN_RATE_FOR_PREDICTION: Final = 0.1  # °F/h
DEGENERATE_DENOMINATOR: Final = 0.0001
MIN_AVERAGE_RATE_HOURS: Final = 0.01

# Confidence thresholds
CONFIDENCE_MIN_SPAN: Final = 15
CONFIDENCE_HIGH_SPAN: Final = 30
CONFIDENCE_HIGH_READINGS: Final = 4
R2_UNSTABLE: Final = 0.7
R2_GOOD: Final = 0.9

# Action calculator
LATE_LARGE_MIN: Final = 30
LATE_MEDIUM_MIN: Final = 15
STEP_FACTOR_LARGE: Final = 2.5
STEP_FACTOR_MEDIUM: Final = 1.5

# Oven-off restart advisor
AMBIENT_TEMP: Final = 70.0
COOLING_CONSTANT: Final = 0.02  # per minute
FALLBACK_OVEN_TEMP: Final = 225.0
RESTART_STEP: Final = 25.0
RESTART_URGENT_STEP: Final = 50.0
TYPICAL_RATE_AT_225: Final = 12.0  # °F/h

# Responsiveness analysis
THERMAL_LAG_MIN: Final = 15
MIN_SEGMENT_HOURS: Final = 0.1
MIN_EVENTS_FOR_RESPONSIVENESS: Final = 2
MIN_READINGS_FOR_RESPONSIVENESS: Final = 5
CORRELATION_LIMITED: Final = 0.3
RESPONSIVENESS_HIGH: Final = 0.1
RESPONSIVENESS_REFERENCE_STEP: Final = 25

# Input validation (°F)
MEAT_TEMP_MIN: Final = 32.0
MEAT_TEMP_MAX: Final = 212.0
OVEN_TEMP_INPUT_MIN: Final = 100.0
OVEN_TEMP_INPUT_MAX: Final = 550.0
READING_JUMP_WARN: Final = 20.0

# Confidence levels
LEVEL_INSUFFICIENT: Final = "insufficient"
LEVEL_LOW: Final = "low"
LEVEL_MEDIUM: Final = "medium"
LEVEL_HIGH: Final = "high"

# Schedule status
STATUS_UNKNOWN: Final = "unknown"
STATUS_EARLY: Final = "early"
STATUS_LATE: Final = "late"
STATUS_ON_TRACK: Final = "on-track"

# Actions
ACTION_NONE: Final = "none"
ACTION_HOLD: Final = "hold"
ACTION_RAISE: Final = "raise"
ACTION_LOWER: Final = "lower"
ACTION_OVEN_OFF: Final = "oven_off"

# Severity
SEVERITY_NORMAL: Final = "normal"
SEVERITY_MODERATE: Final = "moderate"
SEVERITY_URGENT: Final = "urgent"
SEVERITY_WARNING: Final = "warning"
SEVERITY_INFO: Final = "info"
SEVERITY_UNKNOWN: Final = "unknown"

# Blockers
BLOCKER_NO_SESSION: Final = "no_session"
BLOCKER_INSUFFICIENT_READINGS: Final = "insufficient_readings"
BLOCKER_INSUFFICIENT_TIME: Final = "insufficient_time"
BLOCKER_NO_OVEN_DATA: Final = "no_oven_data"
BLOCKER_STALE_OVEN_DATA: Final = "stale_oven_data"
BLOCKER_INSUFFICIENT_CONFIDENCE: Final = "insufficient_confidence"
BLOCKER_NO_SERVE_TIME: Final = "no_serve_time"
BLOCKER_BAD_RATE: Final = "bad_rate"
BLOCKER_UNSTABLE_RATE: Final = "unstable_rate"


class ReasonCode(StrEnum):
    """Why the confidence assessor picked a level."""

    NO_READINGS = "no_readings"
    INSUFFICIENT_READINGS = "insufficient_readings"
    ONLY_TWO_READINGS = "only_two_readings"
    RATE_TOO_LOW = "rate_too_low"
    SPAN_TOO_SHORT = "span_too_short"
    RATE_UNSTABLE = "rate_unstable"
    MODERATE_VARIATION = "moderate_variation"
    STRONG_FIT = "strong_fit"
    ADEQUATE_DATA = "adequate_data"


class MessageKey(StrEnum):
    """Keys of user-facing messages; rendered in display.py."""

    HOLD = "hold"
    RAISE_SMALL = "raise_small"
    RAISE_LARGE = "raise_large"
    LOWER_SMALL = "lower_small"
    LOWER_LARGE = "lower_large"
    AT_MAX_TEMP = "at_max_temp"
    AT_MIN_TEMP = "at_min_temp"
    UNKNOWN_STATUS = "unknown_status"
    OVEN_RESTART_NOW = "oven_restart_now"
    OVEN_RESTART_TIMED = "oven_restart_timed"
    OVEN_OFF_COOLING = "oven_off_cooling"
    NO_SESSION = "no_session"
    NEED_MORE_READINGS = "need_more_readings"
    NEED_MORE_TIME = "need_more_time"
    NO_OVEN_DATA = "no_oven_data"
    OVEN_TEMP_STALE = "oven_temp_stale"
    INSUFFICIENT_CONFIDENCE = "insufficient_confidence"
    NO_SERVE_TIME = "no_serve_time"
    RATE_TOO_LOW = "rate_too_low"
    RATE_UNSTABLE = "rate_unstable"
    RESPONSIVENESS_LIMITED = "responsiveness_limited"
    RESPONSIVENESS_HIGH = "responsiveness_high"
    RESPONSIVENESS_MODERATE = "responsiveness_moderate"


# Meat presets (temperatures in °F)
MEAT_PRESETS: Final = {
    "prime_rib": {
        "name": "Prime Rib",
        "cuts": ["Bone-in", "Boneless"],
        "target": 125,
        "oven": 200,
        "notes": "Remove 5°F below target for carryover",
    },
    "beef_tenderloin": {
        "name": "Beef Tenderloin",
        "cuts": ["Whole", "Center-cut"],
        "target": 125,
        "oven": 225,
        "notes": "Cooks faster due to smaller diameter",
    },
    "pork_loin": {
        "name": "Pork Loin",
        "cuts": ["Bone-in", "Boneless"],
        "target": 140,
        "oven": 225,
        "notes": "USDA recommends 145°F minimum",
    },
    "pork_shoulder": {
        "name": "Pork Shoulder",
        "cuts": ["Bone-in", "Boneless"],
        "target": 195,
        "oven": 225,
        "notes": "For pulled pork, aim for 195-205°F",
    },
    "leg_of_lamb": {
        "name": "Leg of Lamb",
        "cuts": ["Bone-in", "Boneless"],
        "target": 130,
        "oven": 225,
        "notes": "Remove 5°F below target for carryover",
    },
}
PRESET_CUSTOM: Final = "custom"

DISCLAIMER: Final = (
    "Ovens and roasts vary. Use this as a guide and rely on thermometer readings. "
    "This does not provide food safety guarantees."
)

# Storage
STORAGE_VERSION: Final = 1
STORAGE_KEY_TEMPLATE: Final = "roast_advisor.{}"
SAVE_DELAY_SEC: Final = 10.0

# Services
SERVICE_LOG_READING: Final = "log_reading"
SERVICE_UPDATE_READING: Final = "update_reading"
SERVICE_DELETE_READING: Final = "delete_reading"
SERVICE_LOG_OVEN_TEMP: Final = "log_oven_temp"
SERVICE_UPDATE_OVEN_EVENT: Final = "update_oven_event"
SERVICE_DELETE_OVEN_EVENT: Final = "delete_oven_event"
SERVICE_LOG_OVEN_OFF: Final = "log_oven_off"
SERVICE_LOG_OVEN_ON: Final = "log_oven_on"
SERVICE_SET_SERVE_TIME: Final = "set_serve_time"
SERVICE_START_SESSION: Final = "start_session"
SERVICE_END_SESSION: Final = "end_session"

ATTR_CONFIG_ENTRY_ID: Final = "config_entry_id"
ATTR_TEMPERATURE: Final = "temperature"
ATTR_TIMESTAMP: Final = "timestamp"
ATTR_INDEX: Final = "index"
ATTR_SERVE_TIME: Final = "serve_time"
ATTR_MINUTES_FROM_NOW: Final = "minutes_from_now"
ATTR_UNITS: Final = "units"
ATTR_MEAT_PRESET: Final = "meat_preset"
ATTR_TARGET_TEMP: Final = "target_temp"
ATTR_OVEN_TEMP: Final = "oven_temp"
ATTR_STARTING_TEMP: Final = "starting_temp"
ATTR_MEAT_CUT: Final = "meat_cut"
ATTR_WEIGHT: Final = "weight"
ATTR_NOTES: Final = "notes"
