"""
Unit tests for the Roast Advisor coordinator.

The DataUpdateCoordinator base and the Store are patched out; the session,
engine and display code run for real.
"""
import asyncio
import unittest
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

from homeassistant.exceptions import ServiceValidationError
from homeassistant.util import dt as dt_util

from custom_components.roast_advisor.const import (
    CONF_INITIAL_OVEN_TEMP,
    CONF_MEAT_PRESET,
    CONF_TARGET_TEMP,
    CONF_UNITS,
)
from custom_components.roast_advisor.coordinator import RoastCoordinator, RoastData
from custom_components.roast_advisor.session import RoastSession, SessionConfig

MODULE = "custom_components.roast_advisor.coordinator"


def _entry(data=None, options=None):
    entry = MagicMock()
    entry.entry_id = "test_entry"
    entry.title = "Sunday Roast"
    entry.data = data or {}
    entry.options = options or {}
    return entry


class CoordinatorTestCase(unittest.TestCase):

    def setUp(self):
        patches = [
            patch(f"{MODULE}.DataUpdateCoordinator.__init__", return_value=None),
            patch(f"{MODULE}.Store"),
            patch.object(RoastCoordinator, "async_set_updated_data"),
        ]
        mocks = [p.start() for p in patches]
        for p in patches:
            self.addCleanup(p.stop)

        self.store = mocks[1].return_value
        self.store.async_load = AsyncMock(return_value=None)
        self.store.async_save = AsyncMock()
        self.set_updated = mocks[2]

    def make(self, **kwargs):
        return RoastCoordinator(MagicMock(), _entry(**kwargs))

    def run_async(self, coro):
        return asyncio.run(coro)

    @property
    def pushed(self) -> RoastData:
        return self.set_updated.call_args[0][0]


class TestSessionLifecycle(CoordinatorTestCase):

    def test_commands_need_a_session(self):
        coordinator = self.make()
        with self.assertRaises(ServiceValidationError):
            self.run_async(coordinator.async_log_reading(100.0))
        with self.assertRaises(ServiceValidationError):
            self.run_async(coordinator.async_set_serve_time(minutes_from_now=60))

    def test_start_with_entry_defaults(self):
        coordinator = self.make(data={CONF_TARGET_TEMP: 130.0, CONF_INITIAL_OVEN_TEMP: 250.0})
        self.run_async(coordinator.async_start_session())

        config = coordinator.session.config
        self.assertEqual(config.target_temp, 130.0)
        self.assertEqual(config.initial_oven_temp, 250.0)
        self.assertEqual(config.units, "F")
        self.assertTrue(self.pushed.active)
        self.assertIsNotNone(self.pushed.result)
        self.store.async_delay_save.assert_called_once()

    # Entry data as the config flow writes it
    PRIME_RIB_ENTRY = {CONF_MEAT_PRESET: "prime_rib", CONF_TARGET_TEMP: 125.0, CONF_INITIAL_OVEN_TEMP: 200.0}

    def test_start_uses_entry_preset_temps(self):
        coordinator = self.make(data=self.PRIME_RIB_ENTRY)
        self.run_async(coordinator.async_start_session())

        config = coordinator.session.config
        self.assertEqual(config.target_temp, 125.0)
        self.assertEqual(config.initial_oven_temp, 200.0)
        self.assertEqual(config.meat_type, "Prime Rib")

    def test_start_with_other_preset(self):
        coordinator = self.make(data=self.PRIME_RIB_ENTRY)
        self.run_async(coordinator.async_start_session(meat_preset="pork_shoulder", meat_cut="Bone-in"))

        config = coordinator.session.config
        self.assertEqual(config.target_temp, 195.0)
        self.assertEqual(config.initial_oven_temp, 225.0)
        self.assertEqual(config.meat_type, "Pork Shoulder")
        self.assertEqual(config.meat_cut, "Bone-in")

    def test_explicit_temps_beat_preset(self):
        coordinator = self.make(data=self.PRIME_RIB_ENTRY)
        self.run_async(coordinator.async_start_session(meat_preset="pork_shoulder", target_temp=203.0))

        config = coordinator.session.config
        self.assertEqual(config.target_temp, 203.0)
        self.assertEqual(config.initial_oven_temp, 225.0)

    def test_start_in_celsius(self):
        coordinator = self.make(data={CONF_UNITS: "C"})
        self.run_async(coordinator.async_start_session(target_temp=52.0, oven_temp=107.0, starting_temp=5.0))

        config = coordinator.session.config
        self.assertEqual(config.units, "C")
        self.assertEqual(config.target_temp, 125.6)
        self.assertEqual(config.initial_oven_temp, 224.6)
        self.assertEqual(coordinator.session.readings[0].temp, 41.0)

    def test_start_rejects_implausible_target(self):
        coordinator = self.make()
        with self.assertRaises(ServiceValidationError):
            self.run_async(coordinator.async_start_session(target_temp=400.0))
        self.assertIsNone(coordinator.session)

    def test_end_session(self):
        coordinator = self.make()
        self.run_async(coordinator.async_start_session())
        self.run_async(coordinator.async_end_session())

        self.assertIsNone(coordinator.session)
        self.assertFalse(self.pushed.active)
        self.assertIsNone(self.pushed.result)


class TestSessionCommands(CoordinatorTestCase):

    def setUp(self):
        super().setUp()
        self.coordinator = self.make()
        self.run_async(self.coordinator.async_start_session(oven_temp=225.0, starting_temp=60.0))

    def test_log_reading(self):
        self.run_async(self.coordinator.async_log_reading(65.0))
        self.assertEqual(len(self.coordinator.session.readings), 2)
        self.assertEqual(self.coordinator.session.readings[-1].delta_from_previous, 5.0)

    def test_log_reading_out_of_range(self):
        with self.assertRaises(ServiceValidationError):
            self.run_async(self.coordinator.async_log_reading(250.0))
        self.assertEqual(len(self.coordinator.session.readings), 1)

    def test_large_jump_is_logged(self):
        with self.assertLogs(MODULE, level="WARNING"):
            self.run_async(self.coordinator.async_log_reading(95.0))
        self.assertEqual(len(self.coordinator.session.readings), 2)

    def test_backfilled_reading(self):
        earlier = dt_util.utcnow() - timedelta(minutes=30)
        self.run_async(self.coordinator.async_log_reading(55.0, earlier))
        self.assertEqual(self.coordinator.session.readings[0].temp, 55.0)

    def test_bad_index(self):
        with self.assertRaises(ServiceValidationError):
            self.run_async(self.coordinator.async_delete_reading(4))
        with self.assertRaises(ServiceValidationError):
            self.run_async(self.coordinator.async_update_reading(4, temperature=70.0))
        with self.assertRaises(ServiceValidationError):
            self.run_async(self.coordinator.async_delete_oven_event(4))
        with self.assertRaises(ServiceValidationError):
            self.run_async(self.coordinator.async_update_oven_event(4, temperature=250.0))

    def test_oven_out_of_range(self):
        with self.assertRaises(ServiceValidationError):
            self.run_async(self.coordinator.async_log_oven_temp(600.0))

    def test_oven_off_then_on(self):
        self.run_async(self.coordinator.async_log_oven_off())
        self.assertTrue(self.coordinator.session.is_oven_off)

        with self.assertRaises(ServiceValidationError):
            self.run_async(self.coordinator.async_log_oven_off())

        self.run_async(self.coordinator.async_log_oven_on(250.0))
        self.assertFalse(self.coordinator.session.is_oven_off)
        self.assertEqual(self.coordinator.session.current_oven_temp, 250.0)

    def test_update_oven_event(self):
        self.run_async(self.coordinator.async_log_oven_temp(250.0))
        self.run_async(self.coordinator.async_update_oven_event(1, temperature=275.0))
        self.assertEqual(self.coordinator.session.current_oven_temp, 275.0)

    def test_update_oven_off_temperature_rejected(self):
        self.run_async(self.coordinator.async_log_oven_off())
        with self.assertRaises(ServiceValidationError):
            self.run_async(self.coordinator.async_update_oven_event(1, temperature=250.0))

    def test_backfilled_oven_temp(self):
        self.run_async(self.coordinator.async_log_oven_temp(250.0))
        earlier = dt_util.utcnow() - timedelta(minutes=45)
        self.run_async(self.coordinator.async_log_oven_temp(200.0, earlier))
        self.assertEqual(self.coordinator.session.current_oven_temp, 250.0)

    def test_serve_time(self):
        before = dt_util.utcnow()
        self.run_async(self.coordinator.async_set_serve_time(minutes_from_now=120))
        serve = self.coordinator.session.config.desired_serve_time
        self.assertGreaterEqual(serve, before + timedelta(minutes=120))

        self.run_async(self.coordinator.async_set_serve_time())
        self.assertIsNone(self.coordinator.session.config.desired_serve_time)


class TestStorage(CoordinatorTestCase):

    def test_no_stored_data(self):
        coordinator = self.make()
        self.run_async(coordinator.async_load_data())
        self.assertIsNone(coordinator.session)

    def test_restore_session(self):
        session = RoastSession.start(SessionConfig(target_temp=130.0, starting_temp=50.0))
        self.store.async_load.return_value = {"version": 1, "session": session.to_dict()}

        coordinator = self.make()
        self.run_async(coordinator.async_load_data())
        self.assertEqual(coordinator.session, session)

    def test_corrupt_data_resets(self):
        self.store.async_load.return_value = {"session": {"readings": [{"temp": 100.0}]}}

        coordinator = self.make()
        with self.assertLogs(MODULE, level="ERROR"):
            self.run_async(coordinator.async_load_data())

        self.assertIsNone(coordinator.session)
        self.store.async_save.assert_awaited_once_with({"version": 1, "session": None})

    def test_save_failure_is_logged(self):
        self.store.async_save.side_effect = OSError("disk full")
        coordinator = self.make()
        with self.assertLogs(MODULE, level="ERROR"):
            self.run_async(coordinator.async_save_data())


if __name__ == "__main__":
    unittest.main()
