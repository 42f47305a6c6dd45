"""Math helpers for the roast engine."""
from __future__ import annotations

import logging
import math
from typing import NamedTuple

from .const import AMBIENT_TEMP, COOLING_CONSTANT, DEGENERATE_DENOMINATOR

_LOGGER = logging.getLogger(__name__)


class Fit(NamedTuple):
    slope: float
    intercept: float
    r2: float


def linear_regression(x: list[float], y: list[float]) -> Fit | None:
    """
    Ordinary least squares fit of y = slope * x + intercept.

    Returns None when the normal equations are degenerate, i.e. all x values
    (nearly) coincide. R2 is 0.0 for constant y (SS_tot == 0).
    """
    n = len(x)
    if n < 2 or n != len(y):
        return None

    sum_x = sum(x)
    sum_y = sum(y)
    sum_xy = sum(xi * yi for xi, yi in zip(x, y))
    sum_xx = sum(xi * xi for xi in x)

    denominator = n * sum_xx - sum_x * sum_x
    if abs(denominator) < DEGENERATE_DENOMINATOR:
        _LOGGER.debug("Degenerate regression (denominator %.6f), no fit", denominator)
        return None

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n

    # R2
    y_mean = sum_y / n
    ss_tot = sum((yi - y_mean) ** 2 for yi in y)
    ss_res = sum((yi - (slope * xi + intercept)) ** 2 for xi, yi in zip(x, y))
    r2 = 1 - (ss_res / ss_tot) if ss_tot > 0 else 0.0

    return Fit(slope, intercept, r2)


def pearson_correlation(x: list[float], y: list[float]) -> float:
    """Pearson correlation coefficient; 0.0 when undefined."""
    n = len(x)
    if n < 2 or n != len(y):
        return 0.0

    sum_x = sum(x)
    sum_y = sum(y)
    sum_xy = sum(xi * yi for xi, yi in zip(x, y))
    sum_xx = sum(xi * xi for xi in x)
    sum_yy = sum(yi * yi for yi in y)

    numerator = n * sum_xy - sum_x * sum_y
    spread = (n * sum_xx - sum_x * sum_x) * (n * sum_yy - sum_y * sum_y)
    if spread <= 0:
        return 0.0

    return numerator / math.sqrt(spread)


def estimate_meat_cooling(
    initial_temp: float,
    minutes_elapsed: float,
    ambient_temp: float = AMBIENT_TEMP,
    cooling_constant: float = COOLING_CONSTANT,
) -> float:
    """
    Newton's law of cooling.

    T(t) = T_ambient + (T_initial - T_ambient) * exp(-k * t), t in minutes.
    """
    if minutes_elapsed <= 0:
        return initial_temp
    return ambient_temp + (initial_temp - ambient_temp) * math.exp(-cooling_constant * minutes_elapsed)
