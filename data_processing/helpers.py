# hospital_analytics_root/data_processing/helpers.py
#
# Core Data Utilities
# NA-aware numeric coercion and the half-up rounding used by every
# published statistic.

import logging
import re
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# Pre-compiled regex for finding various "Not Available" strings.
NA_REGEX_PATTERN = re.compile(
    r'(?i)^\s*(nan|none|n/a|#n/a|na|null|nil|<na>|undefined|unknown|-|)\s*$'
)


def is_na_like(value: Any) -> bool:
    """True for None, NaN/NaT and the textual "Not Available" spellings."""
    if isinstance(value, str):
        return bool(NA_REGEX_PATTERN.match(value))
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def convert_to_numeric(data: Any, default_value: Any = np.nan) -> Any:
    """
    Robustly converts a scalar or a pandas Series to floats.

    Booleans and anything that does not parse as a number (including the
    "Not Available" spellings) become `default_value`. Numeric strings such as
    "42" are parsed.

    Args:
        data: The input data, a scalar or a pandas Series.
        default_value: The value to use for items that cannot be converted.

    Returns:
        The converted data in the same format as the input (scalar or Series).
    """
    is_series = isinstance(data, pd.Series)
    series = data if is_series else pd.Series([data], dtype=object)

    series = series.astype(object).map(
        lambda v: np.nan if isinstance(v, (bool, np.bool_)) or is_na_like(v) else v
    )
    numeric_series = pd.to_numeric(series, errors='coerce').astype(float)
    if not pd.isna(default_value):
        numeric_series = numeric_series.fillna(default_value)

    if is_series:
        return numeric_series
    return numeric_series.iloc[0] if not numeric_series.empty else default_value


def round_half_up(value: float, places: int = 2) -> float:
    """
    Rounds to `places` decimals, ties away from zero (2.675 -> 2.68).

    The decimal is built from the float's shortest repr, so the rounding acts
    on the value as printed rather than on its binary approximation. Any
    finite float is accepted, including sys.float_info.max.
    """
    if not np.isfinite(value):
        raise ValueError(f"Cannot round non-finite value {value!r}.")
    exact = Decimal(repr(float(value)))
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, exact.adjusted() + places + 2)
        return float(exact.quantize(quantum, rounding=ROUND_HALF_UP))
