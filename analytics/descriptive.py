# hospital_analytics_root/analytics/descriptive.py
#
# Descriptive Statistics
# Summaries of a numeric record field (age, waiting time, length of stay).

import logging
import math
from typing import Dict, Optional

import numpy as np

try:
    from data_processing import RecordCollection, records_to_frame, extract_numeric_values, round_half_up
except ImportError as e:
    logging.basicConfig(level="CRITICAL")
    logging.critical(f"FATAL ERROR in descriptive.py: A core dependency is missing. {e}", exc_info=True)
    raise

from .grouping import group_by
from .results import DescriptiveStats

logger = logging.getLogger(__name__)


def calculate_descriptive_stats(records: RecordCollection, field: str = "age") -> Optional[DescriptiveStats]:
    """
    Computes count, mean, median, sample standard deviation, range and
    quartiles of a numeric field.

    Quartiles are picked by index from the sorted values (floor(n*0.25) and
    floor(n*0.75)), not interpolated. A single value has a standard deviation
    of 0. All figures are rounded half-up to 2 decimals.

    Returns:
        None when the field holds no valid numeric value.
    """
    values = extract_numeric_values(records_to_frame(records), field)
    if values.size == 0:
        logger.warning(f"No valid numeric values for '{field}'. Descriptive statistics unavailable.")
        return None

    sorted_values = np.sort(values)
    n = sorted_values.size
    std_dev = float(np.std(sorted_values, ddof=1)) if n > 1 else 0.0

    return DescriptiveStats(
        count=n,
        mean=round_half_up(float(np.mean(sorted_values))),
        median=round_half_up(float(np.median(sorted_values))),
        std_dev=round_half_up(std_dev),
        min=round_half_up(float(sorted_values[0])),
        max=round_half_up(float(sorted_values[-1])),
        q1=round_half_up(float(sorted_values[math.floor(n * 0.25)])),
        q3=round_half_up(float(sorted_values[math.floor(n * 0.75)])),
    )


def count_by_category(records: RecordCollection, column: str = "diagnosis") -> Dict[str, int]:
    """Number of records per value of a categorical column, most frequent first."""
    df = records_to_frame(records)
    counts = {key: len(group) for key, group in group_by(df, column).items()}
    return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))
