# hospital_analytics_root/analytics/hypothesis.py
#
# Statistical Hypothesis Tests
# Two-group comparisons of a numeric field (t-test, Mann-Whitney U) and of
# outcome distributions (chi-square).
#
# P-values are approximations: the t statistic and the U z-score are referred
# to the standard normal rather than to their exact distributions, and the
# chi-square CDF is exact only for 1 and 2 degrees of freedom. Higher degrees
# of freedom fall back to a normal approximation of the chi-square.

import logging
import math
import sys
from typing import Literal, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy import stats

try:
    from data_processing import RecordCollection, records_to_frame, extract_numeric_values, round_half_up
except ImportError as e:
    logging.basicConfig(level="CRITICAL")
    logging.critical(f"FATAL ERROR in hypothesis.py: A core dependency is missing. {e}", exc_info=True)
    raise

from .results import StatisticalTestResult

logger = logging.getLogger(__name__)

TestType = Literal["t-test", "mann-whitney", "chi-square"]

TEST_TYPES = ("t-test", "mann-whitney", "chi-square")

OUTCOME_CATEGORIES = ("Discharged", "Admitted", "Referred", "Died")
SIGNIFICANCE_LEVEL = 0.05
Z_CRITICAL_95 = 1.96

# t statistic reported when both groups are constant but their means differ.
SEPARATED_T_STATISTIC = sys.float_info.max


class InsufficientDataError(ValueError):
    """Raised when a comparison cannot be answered from the data supplied."""


def _rounded(value: float) -> float:
    return round_half_up(value, 3)


def two_tailed_p_value(z: float) -> float:
    """Two-tailed p-value of a z-score under the standard normal."""
    return float(2 * stats.norm.sf(abs(z)))


def chi_square_cdf(x: float, df: int) -> float:
    """
    Approximate chi-square CDF.

    Exact for df 1 and 2. For df >= 3 the statistic is treated as normal with
    mean df and variance 2*df, which is coarse for small df.
    """
    if x <= 0:
        return 0.0
    if df == 1:
        return float(2 * stats.norm.cdf(math.sqrt(x)) - 1)
    if df == 2:
        return float(1 - math.exp(-x / 2))
    return float(stats.norm.cdf((x - df) / math.sqrt(2 * df)))


def _sample_variance(values: np.ndarray) -> float:
    return float(np.var(values, ddof=1)) if values.size > 1 else 0.0


def _build_result(
    test: str,
    statistic: float,
    p_value: float,
    ci: Tuple[float, float],
    interpretations: Tuple[str, str],
    df: Optional[int] = None
) -> StatisticalTestResult:
    is_significant = p_value < SIGNIFICANCE_LEVEL
    return StatisticalTestResult(
        test=test,
        statistic=_rounded(statistic),
        p_value=_rounded(p_value),
        confidence_interval=(_rounded(ci[0]), _rounded(ci[1])),
        interpretation=interpretations[0] if is_significant else interpretations[1],
        is_significant=is_significant,
        degrees_of_freedom=df,
    )


def t_test(values1: Sequence[float], values2: Sequence[float]) -> StatisticalTestResult:
    """
    Independent two-sample t-test with a Welch standard error.

    The 95% confidence interval is the mean difference +/- 1.96 SE. When both
    groups are constant the SE is 0: equal means give t = 0 and p = 1, different
    means give t = +/-SEPARATED_T_STATISTIC, p = 0 and a zero-width interval.
    """
    a = np.asarray(values1, dtype=float)
    b = np.asarray(values2, dtype=float)
    mean_diff = float(a.mean() - b.mean())
    std_error = math.sqrt(_sample_variance(a) / a.size + _sample_variance(b) / b.size)

    if std_error == 0:
        if mean_diff != 0:
            logger.debug(f"Both groups are constant with a mean difference of {mean_diff}; groups are fully separated.")
            t_statistic, p_value = math.copysign(SEPARATED_T_STATISTIC, mean_diff), 0.0
        else:
            t_statistic, p_value = 0.0, 1.0
    else:
        t_statistic = mean_diff / std_error
        p_value = two_tailed_p_value(t_statistic)

    ci = (mean_diff - Z_CRITICAL_95 * std_error, mean_diff + Z_CRITICAL_95 * std_error)
    return _build_result(
        "Independent t-test", t_statistic, p_value, ci,
        ("Significant difference detected", "No significant difference"),
    )


def mann_whitney_u_test(values1: Sequence[float], values2: Sequence[float]) -> StatisticalTestResult:
    """
    Mann-Whitney U test with a normal approximation.

    Ranks are positional over the combined sorted values (group 1 first), so
    tied values receive distinct ranks and no tie correction is applied.
    """
    a = np.asarray(values1, dtype=float)
    b = np.asarray(values2, dtype=float)
    n1, n2 = a.size, b.size

    ranks = stats.rankdata(np.concatenate([a, b]), method='ordinal')
    rank_sum1 = float(ranks[:n1].sum())
    rank_sum2 = float(ranks[n1:].sum())
    u1 = rank_sum1 - n1 * (n1 + 1) / 2
    u2 = rank_sum2 - n2 * (n2 + 1) / 2
    u = min(u1, u2)

    expected_u = n1 * n2 / 2
    std_u = math.sqrt(n1 * n2 * (n1 + n2 + 1) / 12)
    p_value = two_tailed_p_value((u - expected_u) / std_u)

    return _build_result(
        "Mann-Whitney U test", u, p_value, (0.0, 0.0),
        ("Significant difference detected", "No significant difference"),
    )


def chi_square_test(group1: pd.DataFrame, group2: pd.DataFrame) -> StatisticalTestResult:
    """
    Pearson chi-square test of the outcome distribution of two groups over
    the fixed outcome categories. Outcomes outside the categories are ignored.
    """
    observed = np.array([
        [int((group['outcome'] == outcome).sum()) for outcome in OUTCOME_CATEGORIES]
        for group in (group1, group2)
    ], dtype=float)

    total = observed.sum()
    chi_square = 0.0
    if total > 0:
        expected = np.outer(observed.sum(axis=1), observed.sum(axis=0)) / total
        nonzero = expected > 0
        chi_square = float(np.sum((observed[nonzero] - expected[nonzero]) ** 2 / expected[nonzero]))

    df = (len(OUTCOME_CATEGORIES) - 1) * (2 - 1)
    p_value = 1 - chi_square_cdf(chi_square, df)

    return _build_result(
        "Chi-square test", chi_square, p_value, (0.0, 0.0),
        ("Significant association detected", "No significant association"),
        df=df,
    )


def perform_statistical_test(
    group1: RecordCollection,
    group2: RecordCollection,
    field: str = "age",
    test_type: TestType = "t-test"
) -> StatisticalTestResult:
    """
    Compares two groups of records.

    Both groups must hold at least one valid numeric value for `field`, for
    every test type.

    Raises:
        InsufficientDataError: If either group has no numeric values.
        ValueError: If `test_type` is not supported.
    """
    if test_type not in TEST_TYPES:
        raise ValueError(f"Unsupported test type '{test_type}'. Expected one of {TEST_TYPES}.")

    df1 = records_to_frame(group1)
    df2 = records_to_frame(group2)
    values1 = extract_numeric_values(df1, field)
    values2 = extract_numeric_values(df2, field)

    if values1.size == 0 or values2.size == 0:
        raise InsufficientDataError(
            f"Insufficient data for statistical test: '{field}' has "
            f"{values1.size} and {values2.size} numeric values in the two groups."
        )

    logger.info(f"Running {test_type} on '{field}' (n1={values1.size}, n2={values2.size}).")
    if test_type == "t-test":
        return t_test(values1, values2)
    if test_type == "mann-whitney":
        return mann_whitney_u_test(values1, values2)
    return chi_square_test(df1, df2)
