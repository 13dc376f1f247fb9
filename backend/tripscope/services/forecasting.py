"""Forecasting primitives: least-squares trend, double exponential smoothing, moving average.

All functions are pure and never raise on empty input:
- linear_regression(): closed-form slope/intercept with R², floored predictions
- exponential_smoothing(): Holt-style level + trend forecast of non-negative integers
- moving_average(): trailing window, shorter at the start of the series
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

logger = logging.getLogger(__name__)

# Trend smoothing factor for exponential_smoothing()
TREND_BETA = 0.1


def round_half_up(value: float) -> int:
    """Round .5 toward +inf (2.5 -> 3, -2.5 -> -2), like the dashboard's Math.round."""
    floor = math.floor(value)
    return floor + 1 if value - floor >= 0.5 else floor


@dataclass(frozen=True)
class DataPoint:
    x: float
    y: float


@dataclass(frozen=True)
class RegressionResult:
    """Fitted line. `r2` is already floored at 0."""
    slope: float
    intercept: float
    r2: float

    def predict(self, x: float) -> float:
        # Forecasted counts are never negative
        return max(0.0, self.slope * x + self.intercept)

    def to_dict(self) -> dict:
        return {"slope": self.slope, "intercept": self.intercept, "r2": self.r2}


def _coerce_point(point: DataPoint | Mapping | Sequence) -> DataPoint:
    if isinstance(point, DataPoint):
        return point
    if isinstance(point, Mapping):
        return DataPoint(float(point["x"]), float(point["y"]))
    x, y = point
    return DataPoint(float(x), float(y))


def linear_regression(points: Iterable[DataPoint | Mapping | Sequence]) -> RegressionResult:
    """Ordinary least squares over (x, y) points.

    Points may be DataPoint, {"x", "y"} mappings or (x, y) pairs.
    Fewer than 2 points gives a zero line; zero variance in x gives a flat
    line at mean(y).
    """
    pts = [_coerce_point(p) for p in points]
    n = len(pts)
    if n < 2:
        return RegressionResult(slope=0.0, intercept=0.0, r2=0.0)

    sum_x = sum_y = sum_xy = sum_x2 = 0.0
    for p in pts:
        sum_x += p.x
        sum_y += p.y
        sum_xy += p.x * p.y
        sum_x2 += p.x * p.x

    denom = n * sum_x2 - sum_x * sum_x
    if denom == 0:
        return RegressionResult(slope=0.0, intercept=sum_y / n, r2=0.0)

    slope = (n * sum_xy - sum_x * sum_y) / denom
    intercept = (sum_y - slope * sum_x) / n

    y_mean = sum_y / n
    ss_tot = 0.0
    ss_res = 0.0
    for p in pts:
        ss_tot += (p.y - y_mean) ** 2
        ss_res += (p.y - (slope * p.x + intercept)) ** 2
    r2 = 0.0 if ss_tot == 0 else 1 - ss_res / ss_tot

    logger.debug(f"Regression over {n} points: slope={slope:.4f} intercept={intercept:.4f} r2={r2:.4f}")
    return RegressionResult(slope=slope, intercept=intercept, r2=max(0.0, r2))


def exponential_smoothing(
    data: Sequence[float],
    alpha: float = 0.3,
    forecast_periods: int = 7,
) -> list[int]:
    """Forecast `forecast_periods` values with double exponential smoothing.

    Level is seeded from the first observation and trend from the first
    difference (0 for a single observation). Forecasts are rounded and
    floored at 0. Empty input forecasts zeros.
    """
    periods = max(0, forecast_periods)
    if not data:
        return [0] * periods

    level = float(data[0])
    trend = float(data[1] - data[0]) if len(data) > 1 else 0.0

    for value in data[1:]:
        prev_level = level
        level = alpha * value + (1 - alpha) * (level + trend)
        trend = TREND_BETA * (level - prev_level) + (1 - TREND_BETA) * trend

    return [max(0, round_half_up(level + trend * i)) for i in range(1, periods + 1)]


def moving_average(data: Sequence[float], window: int = 7) -> list[float]:
    """Trailing mean over up to `window` values ending at each index."""
    window = max(1, window)
    result = []
    for i in range(len(data)):
        chunk = data[max(0, i - window + 1):i + 1]
        result.append(sum(chunk) / len(chunk))
    return result
