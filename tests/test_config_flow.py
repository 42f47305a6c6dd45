"""Test the Roast Advisor config flow."""
import asyncio
import unittest
from unittest.mock import MagicMock, patch

from homeassistant.const import CONF_NAME

from custom_components.roast_advisor.config_flow import (
    RoastAdvisorConfigFlow,
    RoastAdvisorOptionsFlow,
)
from custom_components.roast_advisor.const import (
    CONF_INITIAL_OVEN_TEMP,
    CONF_MAX_STEP,
    CONF_MEAT_PRESET,
    CONF_OVEN_MAX,
    CONF_OVEN_MIN,
    CONF_STEP,
    CONF_TARGET_TEMP,
    CONF_UNITS,
    PRESET_CUSTOM,
)


class TestUserStep(unittest.TestCase):

    def setUp(self):
        self.flow = RoastAdvisorConfigFlow()
        self.flow.async_create_entry = MagicMock(return_value={"type": "create_entry"})
        self.flow.async_show_form = MagicMock(return_value={"type": "form"})

    def submit(self, **user_input):
        return asyncio.run(self.flow.async_step_user({CONF_NAME: "Roast", **user_input}))

    def test_shows_form(self):
        asyncio.run(self.flow.async_step_user())
        self.assertEqual(self.flow.async_show_form.call_args.kwargs["errors"], {})

    def test_preset_defaults(self):
        self.submit(**{CONF_MEAT_PRESET: "beef_tenderloin", CONF_UNITS: "F"})
        data = self.flow.async_create_entry.call_args.kwargs["data"]
        self.assertEqual(data[CONF_TARGET_TEMP], 125.0)
        self.assertEqual(data[CONF_INITIAL_OVEN_TEMP], 225.0)

    def test_celsius_input_stored_in_fahrenheit(self):
        self.submit(**{
            CONF_MEAT_PRESET: PRESET_CUSTOM,
            CONF_UNITS: "C",
            CONF_TARGET_TEMP: 52,
            CONF_INITIAL_OVEN_TEMP: 110,
        })
        data = self.flow.async_create_entry.call_args.kwargs["data"]
        self.assertEqual(data[CONF_UNITS], "C")
        self.assertEqual(data[CONF_TARGET_TEMP], 125.6)
        self.assertEqual(data[CONF_INITIAL_OVEN_TEMP], 230.0)

    def test_out_of_range(self):
        self.submit(**{
            CONF_MEAT_PRESET: PRESET_CUSTOM,
            CONF_UNITS: "F",
            CONF_TARGET_TEMP: 240,
            CONF_INITIAL_OVEN_TEMP: 50,
        })
        self.flow.async_create_entry.assert_not_called()
        errors = self.flow.async_show_form.call_args.kwargs["errors"]
        self.assertEqual(errors, {
            CONF_TARGET_TEMP: "target_out_of_range",
            CONF_INITIAL_OVEN_TEMP: "oven_out_of_range",
        })


class TestOptionsStep(unittest.TestCase):

    def setUp(self):
        self.flow = RoastAdvisorOptionsFlow()
        self.flow.async_create_entry = MagicMock(return_value={"type": "create_entry"})
        self.flow.async_show_form = MagicMock(return_value={"type": "form"})

    def submit(self, **user_input):
        base = {CONF_OVEN_MIN: 150, CONF_OVEN_MAX: 300, CONF_STEP: 10, CONF_MAX_STEP: 25}
        with patch.object(RoastAdvisorOptionsFlow, "_build_schema"):
            return asyncio.run(self.flow.async_step_init({**base, **user_input}))

    def test_valid(self):
        self.submit()
        self.flow.async_create_entry.assert_called_once()

    def test_inverted_oven_range(self):
        self.submit(**{CONF_OVEN_MIN: 300, CONF_OVEN_MAX: 250})
        errors = self.flow.async_show_form.call_args.kwargs["errors"]
        self.assertEqual(errors, {CONF_OVEN_MIN: "oven_range_invalid"})

    def test_step_above_max(self):
        self.submit(**{CONF_STEP: 30})
        errors = self.flow.async_show_form.call_args.kwargs["errors"]
        self.assertEqual(errors, {CONF_STEP: "step_above_max"})
