# hospital_analytics_root/analytics/forecasting.py
#
# Case Volume Forecasting
# Projects monthly visit counts with a cascading moving average.
#
# Cascading means each projected month is appended to the working series
# before the next month is averaged, so from the fourth step onward the
# forecast averages only earlier forecasts. It is not a fixed-window average
# over the history, which would repeat a single value for every month.
# Projections are appended unrounded; only the output is rounded.

import logging
from typing import List, Optional

import numpy as np
import pandas as pd

try:
    from data_processing import RecordCollection, records_to_frame, round_half_up
except ImportError as e:
    logging.basicConfig(level="CRITICAL")
    logging.critical(f"FATAL ERROR in forecasting.py: A core dependency is missing. {e}", exc_info=True)
    raise

from .grouping import bucket_counts

logger = logging.getLogger(__name__)

MIN_HISTORY_MONTHS = 3
MOVING_AVERAGE_WINDOW = 3


def monthly_history(records: RecordCollection) -> pd.Series:
    """Visits per month ('YYYY-MM'), months without visits omitted."""
    return bucket_counts(records_to_frame(records), 'monthly')


def _prepare_history(history: pd.Series, min_points: int = MIN_HISTORY_MONTHS) -> Optional[List[float]]:
    """Returns the history as floats, or None if it is too short to forecast from."""
    if len(history) < min_points:
        logger.warning(f"Insufficient data for forecast ({len(history)} months). "
                       f"A minimum of {min_points} is required.")
        return None
    return history.astype(float).tolist()


def _run_moving_average_forecast(values: List[float], periods: int, window: int) -> List[int]:
    working = list(values)
    forecast: List[int] = []
    for _ in range(periods):
        average = float(np.mean(working[-window:]))
        forecast.append(int(round_half_up(average, 0)))
        working.append(average)
    return forecast


def forecast_cases(records: RecordCollection, periods: int = 6) -> List[int]:
    """
    Forecasts visit counts for the next `periods` months.

    Returns:
        `periods` integers. All zeros when fewer than three months of history
        exist.
    """
    if periods < 0:
        raise ValueError(f"Forecast periods must not be negative, got {periods}.")

    logger.info(f"Generating {periods}-month case forecast...")
    values = _prepare_history(monthly_history(records))
    if values is None:
        return [0] * periods

    window = min(MOVING_AVERAGE_WINDOW, len(values))
    return _run_moving_average_forecast(values, periods, window)
