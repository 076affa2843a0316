# hospital_analytics_root/analytics/grouping.py
#
# Time Bucketing & Grouping Helpers
# Turns a normalised record frame into per-period visit counts and per-value
# record groups. Shared by the trend, surveillance and forecasting engines.

import logging
from typing import Dict, Literal

import pandas as pd

logger = logging.getLogger(__name__)

TimeUnit = Literal["daily", "weekly", "monthly", "yearly"]

TIME_UNITS = ("daily", "weekly", "monthly", "yearly")


def _bucket_keys(dates: pd.Series, time_unit: str) -> pd.Series:
    if time_unit == 'daily':
        return dates.dt.strftime('%Y-%m-%d')
    if time_unit == 'weekly':
        # Weeks start on Sunday; the key is the ISO date of that Sunday.
        days_since_sunday = (dates.dt.dayofweek + 1) % 7
        week_start = dates.dt.normalize() - pd.to_timedelta(days_since_sunday, unit='D')
        return week_start.dt.strftime('%Y-%m-%d')
    if time_unit == 'monthly':
        return dates.dt.strftime('%Y-%m')
    return dates.dt.strftime('%Y')


def bucket_counts(df: pd.DataFrame, time_unit: TimeUnit = "monthly") -> pd.Series:
    """
    Counts visits per calendar period.

    Only periods containing at least one visit appear (no zero-filling), in
    chronological order. Records without a valid `visit_date` are ignored.

    Returns:
        An int64 Series indexed by period key ('YYYY-MM-DD', 'YYYY-MM' or 'YYYY').
    """
    if time_unit not in TIME_UNITS:
        raise ValueError(f"Unsupported time unit '{time_unit}'. Expected one of {TIME_UNITS}.")

    dates = pd.to_datetime(df['visit_date'], errors='coerce').dropna()
    if dates.empty:
        return pd.Series(dtype='int64', name='count')

    keys = _bucket_keys(dates, time_unit)
    counts = keys.value_counts().sort_index().astype('int64')
    counts.index.name = 'period'
    counts.name = 'count'
    return counts


def group_by(df: pd.DataFrame, column: str) -> Dict[str, pd.DataFrame]:
    """Splits records by the string value of `column`, ordered by key."""
    if df.empty:
        return {}
    keys = df[column].astype(str)
    return {str(key): group for key, group in df.groupby(keys, sort=True)}
