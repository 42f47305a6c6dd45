import math
import unittest

from custom_components.roast_advisor import math_roast


class TestLinearRegression(unittest.TestCase):

    def test_exact_line(self):
        """Perfectly linear data gives the exact slope and R2 = 1."""
        x = [0.0, 0.5, 1.0, 1.5]
        y = [60.0, 65.0, 70.0, 75.0]
        fit = math_roast.linear_regression(x, y)
        self.assertAlmostEqual(fit.slope, 10.0)
        self.assertAlmostEqual(fit.intercept, 60.0)
        self.assertAlmostEqual(fit.r2, 1.0)

    def test_identical_x_is_degenerate(self):
        fit = math_roast.linear_regression([1.0, 1.0, 1.0], [60.0, 61.0, 62.0])
        self.assertIsNone(fit)

    def test_tiny_spread_is_degenerate(self):
        # Two readings 1 second apart: denominator ~ 1.5e-7
        fit = math_roast.linear_regression([0.0, 1 / 3600], [60.0, 60.1])
        self.assertIsNone(fit)

    def test_constant_y_has_zero_r2(self):
        fit = math_roast.linear_regression([0.0, 1.0, 2.0], [80.0, 80.0, 80.0])
        self.assertEqual(fit.slope, 0.0)
        self.assertEqual(fit.r2, 0.0)

    def test_too_few_points(self):
        self.assertIsNone(math_roast.linear_regression([0.0], [60.0]))
        self.assertIsNone(math_roast.linear_regression([], []))

    def test_noisy_fit_below_one(self):
        fit = math_roast.linear_regression([0, 1, 2, 3], [60, 72, 78, 91])
        self.assertGreater(fit.slope, 0)
        self.assertLess(fit.r2, 1.0)
        self.assertGreater(fit.r2, 0.9)


class TestPearson(unittest.TestCase):

    def test_perfect_positive(self):
        self.assertAlmostEqual(math_roast.pearson_correlation([200, 225, 250], [8, 10, 12]), 1.0)

    def test_perfect_negative(self):
        self.assertAlmostEqual(math_roast.pearson_correlation([200, 225, 250], [12, 10, 8]), -1.0)

    def test_zero_spread_returns_zero(self):
        self.assertEqual(math_roast.pearson_correlation([225, 225], [8, 12]), 0.0)
        self.assertEqual(math_roast.pearson_correlation([200, 250], [10, 10]), 0.0)

    def test_single_point(self):
        self.assertEqual(math_roast.pearson_correlation([225], [10]), 0.0)


class TestCooling(unittest.TestCase):

    def test_no_elapsed_time(self):
        self.assertEqual(math_roast.estimate_meat_cooling(120.0, 0), 120.0)
        self.assertEqual(math_roast.estimate_meat_cooling(120.0, -5), 120.0)

    def test_newton_cooling(self):
        expected = 70.0 + 50.0 * math.exp(-0.02 * 30)
        self.assertAlmostEqual(math_roast.estimate_meat_cooling(120.0, 30), expected)

    def test_approaches_ambient(self):
        self.assertAlmostEqual(math_roast.estimate_meat_cooling(120.0, 10_000), 70.0, places=3)
