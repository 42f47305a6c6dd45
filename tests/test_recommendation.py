"""Eligibility gate, action calculator and oven restart advice."""
import math
import unittest
from datetime import timedelta

from custom_components.roast_advisor.confidence import assess_confidence
from custom_components.roast_advisor.const import MessageKey, ReasonCode
from custom_components.roast_advisor.recommendation import (
    calculate_action,
    calculate_restart,
    check_eligibility,
    estimate_rate_at,
)
from custom_components.roast_advisor.session import RoastSettings
from custom_components.roast_advisor.types import ConfidenceResult

from conftest import NOW, make_event, make_readings

HIGH = ConfidenceResult("high", ReasonCode.STRONG_FIT, "")
SERVE = NOW + timedelta(hours=2)


class TestEligibility(unittest.TestCase):

    def setUp(self):
        self.settings = RoastSettings()
        self.readings = make_readings([90, 95, 100, 105])  # 60 minute span
        self.events = [make_event(225, 10)]

    def check(self, readings=None, events=None, serve=SERVE, confidence=HIGH):
        return check_eligibility(
            self.readings if readings is None else readings,
            self.events if events is None else events,
            serve,
            self.settings,
            confidence,
            NOW,
        )

    def test_eligible(self):
        result = self.check()
        self.assertTrue(result.can_recommend)
        self.assertIsNone(result.blocker_type)

    def test_insufficient_readings(self):
        result = self.check(readings=self.readings[:2])
        self.assertEqual(result.blocker_type, "insufficient_readings")
        self.assertEqual(result.blocker_key, MessageKey.NEED_MORE_READINGS)
        self.assertEqual(result.progress["current"], 2)
        self.assertEqual(result.progress["required"], 3)
        self.assertEqual(result.progress["message"], "1 more reading needed")

    def test_insufficient_readings_plural(self):
        result = self.check(readings=[])
        self.assertEqual(result.progress["message"], "3 more readings needed")

    def test_insufficient_time(self):
        readings = make_readings([90, 92, 94], interval_min=10)  # 20 minutes
        result = self.check(readings=readings)
        self.assertEqual(result.blocker_type, "insufficient_time")
        self.assertEqual(result.progress["message"], "~10 more minutes of data needed")
        self.assertEqual(result.progress["current"], 20)

    def test_no_oven_data(self):
        self.assertEqual(self.check(events=[]).blocker_type, "no_oven_data")

    def test_stale_oven_data(self):
        result = self.check(events=[make_event(225, 61)])
        self.assertEqual(result.blocker_type, "stale_oven_data")
        self.assertEqual(result.progress["message"], "Please confirm your current oven setting")

    def test_stale_not_applied_when_oven_off(self):
        events = [make_event(225, 180), make_event(0, 90, is_off=True, previous_temp=225)]
        self.assertTrue(self.check(events=events).can_recommend)

    def test_insufficient_confidence(self):
        confidence = ConfidenceResult("insufficient", ReasonCode.INSUFFICIENT_READINGS, "x")
        self.assertEqual(self.check(confidence=confidence).blocker_type, "insufficient_confidence")

    def test_no_serve_time(self):
        result = self.check(serve=None)
        self.assertEqual(result.blocker_type, "no_serve_time")
        self.assertEqual(result.blocker_key, MessageKey.NO_SERVE_TIME)

    def test_bad_rate(self):
        confidence = assess_confidence(4, 60, 0.99, 0.05)
        self.assertEqual(self.check(confidence=confidence).blocker_type, "bad_rate")

    def test_unstable_rate(self):
        confidence = assess_confidence(4, 60, 0.5, 10.0)
        self.assertEqual(self.check(confidence=confidence).blocker_type, "unstable_rate")

    def test_other_low_confidence_passes(self):
        confidence = ConfidenceResult("low", ReasonCode.SPAN_TOO_SHORT, "")
        self.assertTrue(self.check(confidence=confidence).can_recommend)

    def test_rate_checks_skipped_when_oven_off(self):
        events = [make_event(225, 60), make_event(0, 5, is_off=True, previous_temp=225)]
        confidence = assess_confidence(4, 60, 0.99, -2.0)
        self.assertTrue(self.check(events=events, confidence=confidence).can_recommend)

    def test_priority_readings_before_everything(self):
        result = self.check(readings=self.readings[:1], events=[], serve=None)
        self.assertEqual(result.blocker_type, "insufficient_readings")

    def test_priority_readings_before_stale_oven(self):
        result = self.check(readings=self.readings[:2], events=[make_event(225, 120)])
        self.assertEqual(result.blocker_type, "insufficient_readings")

    def test_priority_stale_before_serve_time(self):
        result = self.check(events=[make_event(225, 120)], serve=None)
        self.assertEqual(result.blocker_type, "stale_oven_data")

    def test_priority_confidence_before_serve_time(self):
        confidence = ConfidenceResult("insufficient", ReasonCode.INSUFFICIENT_READINGS, "x")
        result = self.check(serve=None, confidence=confidence)
        self.assertEqual(result.blocker_type, "insufficient_confidence")

    def test_priority_serve_time_before_rate(self):
        confidence = assess_confidence(4, 60, 0.5, 10.0)
        result = self.check(serve=None, confidence=confidence)
        self.assertEqual(result.blocker_type, "no_serve_time")


class TestCalculateAction(unittest.TestCase):

    def setUp(self):
        self.settings = RoastSettings()

    def test_on_track_holds(self):
        rec = calculate_action(225.0, 4, "on-track", self.settings)
        self.assertEqual(rec.action, "hold")
        self.assertEqual(rec.suggested_temp, 225.0)
        self.assertEqual(rec.change_amount, 0)
        self.assertEqual(rec.severity, "normal")
        self.assertEqual(rec.message_key, MessageKey.HOLD)
        self.assertEqual(rec.message_params, {"oven_temp": 225.0})

    def test_very_late(self):
        rec = calculate_action(225.0, 40, "late", self.settings)
        self.assertEqual(rec.action, "raise")
        self.assertEqual(rec.suggested_temp, 250)  # min(25, 10 * 2.5)
        self.assertEqual(rec.change_amount, 25)
        self.assertEqual(rec.severity, "urgent")
        self.assertEqual(rec.message_key, MessageKey.RAISE_LARGE)
        self.assertIn("40 minutes late", rec.reasoning)

    def test_moderately_late(self):
        rec = calculate_action(225.0, 20, "late", self.settings)
        self.assertEqual(rec.suggested_temp, 240)
        self.assertEqual(rec.severity, "moderate")
        self.assertEqual(rec.message_key, MessageKey.RAISE_SMALL)

    def test_slightly_late(self):
        rec = calculate_action(225.0, 12, "late", self.settings)
        self.assertEqual(rec.suggested_temp, 235)
        self.assertEqual(rec.severity, "normal")

    def test_max_step_caps_large_step(self):
        settings = RoastSettings(recommendation_step=20, recommendation_max_step=25)
        rec = calculate_action(200.0, 50, "late", settings)
        self.assertEqual(rec.change_amount, 25)

    def test_late_clamped_to_ceiling(self):
        rec = calculate_action(290.0, 40, "late", self.settings)
        self.assertEqual(rec.action, "raise")
        self.assertEqual(rec.suggested_temp, 300)
        self.assertEqual(rec.change_amount, 10)

    def test_late_at_ceiling_holds(self):
        rec = calculate_action(300.0, 40, "late", self.settings)
        self.assertEqual(rec.action, "hold")
        self.assertEqual(rec.change_amount, 0)
        self.assertEqual(rec.severity, "warning")
        self.assertEqual(rec.message_key, MessageKey.AT_MAX_TEMP)
        self.assertEqual(rec.message_params, {"max_temp": 300})

    def test_very_early(self):
        rec = calculate_action(225.0, -40, "early", self.settings)
        self.assertEqual(rec.action, "lower")
        self.assertEqual(rec.suggested_temp, 200)
        self.assertEqual(rec.change_amount, 25)
        self.assertEqual(rec.severity, "moderate")
        self.assertEqual(rec.message_key, MessageKey.LOWER_LARGE)

    def test_moderately_early(self):
        rec = calculate_action(225.0, -20, "early", self.settings)
        self.assertEqual(rec.suggested_temp, 210)
        self.assertEqual(rec.severity, "normal")
        self.assertEqual(rec.message_key, MessageKey.LOWER_SMALL)

    def test_early_clamped_to_floor(self):
        rec = calculate_action(160.0, -40, "early", self.settings)
        self.assertEqual(rec.suggested_temp, 150)
        self.assertEqual(rec.change_amount, 10)

    def test_early_at_floor_holds(self):
        rec = calculate_action(150.0, -40, "early", self.settings)
        self.assertEqual(rec.action, "hold")
        self.assertEqual(rec.severity, "info")
        self.assertEqual(rec.message_key, MessageKey.AT_MIN_TEMP)

    def test_unknown_status(self):
        rec = calculate_action(225.0, None, "unknown", self.settings)
        self.assertEqual(rec.action, "none")
        self.assertEqual(rec.severity, "unknown")
        self.assertIsNone(rec.suggested_temp)

    def test_suggestion_stays_in_bounds(self):
        for oven in range(140, 320, 5):
            for variance, status in ((45, "late"), (-45, "early"), (16, "late"), (-16, "early")):
                rec = calculate_action(float(oven), variance, status, self.settings)
                if rec.action in ("raise", "lower"):
                    self.assertGreaterEqual(rec.suggested_temp, 150)
                    self.assertLessEqual(rec.suggested_temp, 300)


class TestRestart(unittest.TestCase):

    def setUp(self):
        self.settings = RoastSettings()

    def test_wait_then_restart_lower(self):
        # Needs 5°F in 60 min (5°F/h) against 10°F/h observed: restart 25° lower
        plan = calculate_restart(120.0, 125.0, 0, NOW + timedelta(minutes=60), 225.0, 10.0, self.settings, NOW)
        self.assertEqual(plan.restart_temp, 200)
        expected_needed = 5.0 / (10.0 * 200.0 / 225.0) * 60.0
        self.assertEqual(plan.minutes_until_restart, round(60 - expected_needed))
        self.assertFalse(plan.should_restart_now)

    def test_restart_higher_when_behind(self):
        # Needs 30°F in 60 min against 10°F/h
        plan = calculate_restart(95.0, 125.0, 0, NOW + timedelta(minutes=60), 225.0, 10.0, self.settings, NOW)
        self.assertEqual(plan.restart_temp, 250)
        self.assertTrue(plan.should_restart_now)

    def test_past_serve_time(self):
        plan = calculate_restart(110.0, 125.0, 20, NOW - timedelta(minutes=5), 225.0, 10.0, self.settings, NOW)
        self.assertTrue(plan.should_restart_now)
        self.assertEqual(plan.restart_temp, 275.0)

    def test_past_serve_time_respects_ceiling(self):
        plan = calculate_restart(110.0, 125.0, 20, NOW - timedelta(minutes=5), 275.0, 10.0, self.settings, NOW)
        self.assertEqual(plan.restart_temp, 300)

    def test_already_at_target(self):
        plan = calculate_restart(130.0, 125.0, 0, SERVE, 225.0, 10.0, self.settings, NOW)
        self.assertTrue(plan.should_restart_now)
        self.assertEqual(plan.restart_temp, 225.0)

    def test_cooling_estimate(self):
        plan = calculate_restart(120.0, 125.0, 30, SERVE, 225.0, 10.0, self.settings, NOW)
        self.assertAlmostEqual(plan.estimated_current_meat_temp, 70.0 + 50.0 * math.exp(-0.6))

    def test_rate_fallback_without_observed_rate(self):
        self.assertAlmostEqual(estimate_rate_at(225.0, None, 225.0), 12.0)
        self.assertAlmostEqual(estimate_rate_at(250.0, 0.0, 225.0), 250.0 / 225.0 * 12.0)
        self.assertAlmostEqual(estimate_rate_at(250.0, 9.0, 225.0), 10.0)
