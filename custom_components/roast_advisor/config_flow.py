"""Config flow for Roast Advisor integration."""
from __future__ import annotations

from typing import Any
import voluptuous as vol

from homeassistant import config_entries
from homeassistant.const import CONF_NAME
from homeassistant.core import callback
from homeassistant.data_entry_flow import FlowResult
from homeassistant.helpers import selector

from .const import (
    DOMAIN,
    CONF_TARGET_TEMP,
    CONF_INITIAL_OVEN_TEMP,
    CONF_UNITS,
    CONF_MEAT_PRESET,
    UNIT_F,
    UNIT_C,
    MEAT_PRESETS,
    PRESET_CUSTOM,
    DEFAULT_TARGET_TEMP,
    DEFAULT_INITIAL_OVEN_TEMP,
    DEFAULT_UNITS,
    MEAT_TEMP_MIN,
    MEAT_TEMP_MAX,
    OVEN_TEMP_INPUT_MIN,
    OVEN_TEMP_INPUT_MAX,
    # Settings
    CONF_SMOOTHING_WINDOW_READINGS,
    CONF_SMOOTHING_WINDOW_MINUTES,
    CONF_SMOOTHING_MODE,
    CONF_ON_TRACK_THRESHOLD,
    CONF_STEP,
    CONF_MAX_STEP,
    CONF_OVEN_MIN,
    CONF_OVEN_MAX,
    CONF_MIN_READINGS,
    CONF_MIN_SPAN,
    CONF_STALE_MINUTES,
    SMOOTHING_READINGS,
    SMOOTHING_TIME,
    DEFAULT_SMOOTHING_WINDOW_READINGS,
    DEFAULT_SMOOTHING_WINDOW_MINUTES,
    DEFAULT_ON_TRACK_THRESHOLD,
    DEFAULT_STEP,
    DEFAULT_MAX_STEP,
    DEFAULT_OVEN_MIN,
    DEFAULT_OVEN_MAX,
    DEFAULT_MIN_READINGS,
    DEFAULT_MIN_SPAN,
    DEFAULT_STALE_MINUTES,
)
from .display import to_canonical_temp


class RoastAdvisorConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Roast Advisor."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        """Handle the initial step."""
        errors = {}

        if user_input is not None:
            units = user_input.get(CONF_UNITS, DEFAULT_UNITS)
            preset = MEAT_PRESETS.get(user_input.get(CONF_MEAT_PRESET, PRESET_CUSTOM))

            # Entered in the chosen unit, stored in °F
            if user_input.get(CONF_TARGET_TEMP) is not None:
                target = to_canonical_temp(user_input[CONF_TARGET_TEMP], units)
            else:
                target = preset["target"] if preset else DEFAULT_TARGET_TEMP
            if user_input.get(CONF_INITIAL_OVEN_TEMP) is not None:
                oven = to_canonical_temp(user_input[CONF_INITIAL_OVEN_TEMP], units)
            else:
                oven = preset["oven"] if preset else DEFAULT_INITIAL_OVEN_TEMP

            if not MEAT_TEMP_MIN <= target <= MEAT_TEMP_MAX:
                errors[CONF_TARGET_TEMP] = "target_out_of_range"
            if not OVEN_TEMP_INPUT_MIN <= oven <= OVEN_TEMP_INPUT_MAX:
                errors[CONF_INITIAL_OVEN_TEMP] = "oven_out_of_range"

            if not errors:
                return self.async_create_entry(
                    title=user_input[CONF_NAME],
                    data={
                        CONF_UNITS: units,
                        CONF_MEAT_PRESET: user_input.get(CONF_MEAT_PRESET, PRESET_CUSTOM),
                        CONF_TARGET_TEMP: float(target),
                        CONF_INITIAL_OVEN_TEMP: float(oven),
                    },
                )

        preset_options = [
            {"value": k, "label": v["name"]}
            for k, v in MEAT_PRESETS.items()
        ]
        preset_options.append({"value": PRESET_CUSTOM, "label": "Custom"})

        data_schema = vol.Schema({
            vol.Required(CONF_NAME, default="Roast"): str,
            vol.Required(CONF_MEAT_PRESET, default="prime_rib"): selector.SelectSelector(
                selector.SelectSelectorConfig(
                    options=preset_options,
                    mode=selector.SelectSelectorMode.DROPDOWN,
                    translation_key="meat_preset"
                )
            ),
            vol.Required(CONF_UNITS, default=DEFAULT_UNITS): selector.SelectSelector(
                selector.SelectSelectorConfig(
                    options=[
                        {"value": UNIT_F, "label": "°F"},
                        {"value": UNIT_C, "label": "°C"},
                    ],
                    mode=selector.SelectSelectorMode.LIST,
                )
            ),
            # Leave empty to use the preset
            vol.Optional(CONF_TARGET_TEMP): selector.NumberSelector(
                selector.NumberSelectorConfig(min=0, max=250, step=1, mode="box")
            ),
            vol.Optional(CONF_INITIAL_OVEN_TEMP): selector.NumberSelector(
                selector.NumberSelectorConfig(min=30, max=550, step=5, mode="box")
            ),
        })

        return self.async_show_form(step_id="user", data_schema=data_schema, errors=errors)

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: config_entries.ConfigEntry) -> RoastAdvisorOptionsFlow:
        return RoastAdvisorOptionsFlow()


class RoastAdvisorOptionsFlow(config_entries.OptionsFlow):
    """Handle options flow (calculation settings, °F and minutes)."""

    def _get_val(self, key, default=None):
        return self.config_entry.options.get(key, self.config_entry.data.get(key, default))

    async def async_step_init(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        """Manage options."""
        errors = {}

        if user_input is not None:
            if user_input[CONF_OVEN_MIN] >= user_input[CONF_OVEN_MAX]:
                errors[CONF_OVEN_MIN] = "oven_range_invalid"
            if user_input[CONF_STEP] > user_input[CONF_MAX_STEP]:
                errors[CONF_STEP] = "step_above_max"

            if not errors:
                return self.async_create_entry(title="", data=user_input)

        return self.async_show_form(
            step_id="init",
            data_schema=self._build_schema(user_input),
            errors=errors,
        )

    def _build_schema(self, user_input: dict[str, Any] | None = None) -> vol.Schema:
        defaults = {
            CONF_UNITS: DEFAULT_UNITS,
            CONF_SMOOTHING_MODE: SMOOTHING_READINGS,
            CONF_SMOOTHING_WINDOW_READINGS: DEFAULT_SMOOTHING_WINDOW_READINGS,
            CONF_SMOOTHING_WINDOW_MINUTES: DEFAULT_SMOOTHING_WINDOW_MINUTES,
            CONF_ON_TRACK_THRESHOLD: DEFAULT_ON_TRACK_THRESHOLD,
            CONF_STEP: DEFAULT_STEP,
            CONF_MAX_STEP: DEFAULT_MAX_STEP,
            CONF_OVEN_MIN: DEFAULT_OVEN_MIN,
            CONF_OVEN_MAX: DEFAULT_OVEN_MAX,
            CONF_MIN_READINGS: DEFAULT_MIN_READINGS,
            CONF_MIN_SPAN: DEFAULT_MIN_SPAN,
            CONF_STALE_MINUTES: DEFAULT_STALE_MINUTES,
        }
        data = {key: self._get_val(key, default) for key, default in defaults.items()}
        if user_input:
            data.update(user_input)

        schema = {
            vol.Required(CONF_UNITS): selector.SelectSelector(
                selector.SelectSelectorConfig(
                    options=[
                        {"value": UNIT_F, "label": "°F"},
                        {"value": UNIT_C, "label": "°C"},
                    ],
                    mode=selector.SelectSelectorMode.LIST,
                )
            ),
            vol.Required(CONF_SMOOTHING_MODE): selector.SelectSelector(
                selector.SelectSelectorConfig(
                    options=[SMOOTHING_READINGS, SMOOTHING_TIME],
                    mode=selector.SelectSelectorMode.DROPDOWN,
                    translation_key="smoothing_mode"
                )
            ),
            vol.Required(CONF_SMOOTHING_WINDOW_READINGS): selector.NumberSelector(
                selector.NumberSelectorConfig(min=2, max=10, step=1, mode="box")
            ),
            vol.Required(CONF_SMOOTHING_WINDOW_MINUTES): selector.NumberSelector(
                selector.NumberSelectorConfig(min=5, max=120, step=5, unit_of_measurement="min", mode="box")
            ),
            vol.Required(CONF_ON_TRACK_THRESHOLD): selector.NumberSelector(
                selector.NumberSelectorConfig(min=1, max=60, step=1, unit_of_measurement="min", mode="box")
            ),
            vol.Required(CONF_STEP): selector.NumberSelector(
                selector.NumberSelectorConfig(min=5, max=50, step=5, unit_of_measurement="°F", mode="box")
            ),
            vol.Required(CONF_MAX_STEP): selector.NumberSelector(
                selector.NumberSelectorConfig(min=5, max=100, step=5, unit_of_measurement="°F", mode="box")
            ),
            vol.Required(CONF_OVEN_MIN): selector.NumberSelector(
                selector.NumberSelectorConfig(min=100, max=400, step=5, unit_of_measurement="°F", mode="box")
            ),
            vol.Required(CONF_OVEN_MAX): selector.NumberSelector(
                selector.NumberSelectorConfig(min=150, max=550, step=5, unit_of_measurement="°F", mode="box")
            ),
            vol.Required(CONF_MIN_READINGS): selector.NumberSelector(
                selector.NumberSelectorConfig(min=2, max=10, step=1, mode="box")
            ),
            vol.Required(CONF_MIN_SPAN): selector.NumberSelector(
                selector.NumberSelectorConfig(min=5, max=180, step=5, unit_of_measurement="min", mode="box")
            ),
            vol.Required(CONF_STALE_MINUTES): selector.NumberSelector(
                selector.NumberSelectorConfig(min=15, max=240, step=5, unit_of_measurement="min", mode="box")
            ),
        }

        return self.add_suggested_values_to_schema(vol.Schema(schema), data)
