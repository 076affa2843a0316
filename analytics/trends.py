# hospital_analytics_root/analytics/trends.py
#
# Trend & Seasonality Analysis
# Fits a least-squares line through per-period visit counts and checks monthly
# series for a yearly pattern.

import logging
from typing import Sequence

import numpy as np
from scipy import stats

try:
    from data_processing import RecordCollection, records_to_frame, round_half_up
except ImportError as e:
    logging.basicConfig(level="CRITICAL")
    logging.critical(f"FATAL ERROR in trends.py: A core dependency is missing. {e}", exc_info=True)
    raise

from .grouping import TimeUnit, bucket_counts
from .results import TrendAnalysis

logger = logging.getLogger(__name__)

SLOPE_THRESHOLD = 0.1
SEASONAL_LAG = 12
SEASONAL_MIN_POINTS = 12
SEASONAL_CORRELATION_THRESHOLD = 0.3


def detect_seasonality(values: Sequence[float]) -> bool:
    """
    Lag autocorrelation test for a yearly pattern in a monthly series.

    The lag is min(12, n // 2), so a series of 12 to 23 months is compared
    against itself half a series later. Variance is the population variance.
    """
    series = np.asarray(values, dtype=float)
    n = series.size
    if n < SEASONAL_MIN_POINTS:
        return False

    mean = series.mean()
    variance = series.var()
    if variance == 0:
        return False

    lag = min(SEASONAL_LAG, n // 2)
    deviations = series - mean
    correlation = np.sum(deviations[:-lag] * deviations[lag:]) / ((n - lag) * variance)
    logger.debug(f"Lag-{lag} autocorrelation over {n} periods: {correlation:.3f}")
    return bool(abs(correlation) > SEASONAL_CORRELATION_THRESHOLD)


def analyze_trend(records: RecordCollection, time_unit: TimeUnit = "monthly") -> TrendAnalysis:
    """
    Classifies the direction of visit volume over time.

    Counts visits per period, fits an ordinary least-squares line over the
    period index and labels the slope: above 0.1 increasing, below -0.1
    decreasing, otherwise stable. Fewer than two periods is always stable.
    """
    counts = bucket_counts(records_to_frame(records), time_unit)
    values = counts.to_numpy(dtype=float)
    n = values.size

    if n < 2:
        logger.warning(f"Only {n} {time_unit} period(s) of data. Reporting a stable trend.")
        return TrendAnalysis(trend="stable", percent_change=0.0, seasonal_pattern=False, confidence=0.0, periods=n)

    slope = float(stats.linregress(np.arange(n), values).slope)
    if slope > SLOPE_THRESHOLD:
        trend = "increasing"
    elif slope < -SLOPE_THRESHOLD:
        trend = "decreasing"
    else:
        trend = "stable"

    first_value, last_value = values[0], values[-1]
    percent_change = ((last_value - first_value) / first_value) * 100 if first_value > 0 else 0.0
    seasonal_pattern = time_unit == "monthly" and detect_seasonality(values)

    logger.info(f"{time_unit.capitalize()} trend over {n} periods: {trend} (slope={slope:.3f}).")
    return TrendAnalysis(
        trend=trend,
        percent_change=round_half_up(percent_change),
        seasonal_pattern=seasonal_pattern,
        confidence=round_half_up(abs(slope)),
        slope=round_half_up(slope, 3),
        periods=n,
    )
