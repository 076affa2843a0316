# hospital_analytics_root/analytics/__init__.py
#
# Analytics Package API
# This file initializes the analytics package and defines its public API: the
# pure statistics engine, its typed results and the query dispatcher.

"""
Initializes the analytics package, making key functions and classes
available at the top level for easier, cleaner imports in other modules.
"""

# --- Descriptive Statistics ---
from .descriptive import calculate_descriptive_stats, count_by_category

# --- Epidemiological Metrics ---
from .epidemiology import calculate_epidemiological_metrics

# --- Trend & Seasonality ---
from .trends import analyze_trend, detect_seasonality

# --- Hypothesis Tests ---
from .hypothesis import perform_statistical_test, InsufficientDataError

# --- Outbreak Surveillance ---
from .surveillance import detect_outbreak

# --- Forecasting ---
from .forecasting import forecast_cases

# --- Time Bucketing ---
from .grouping import bucket_counts, group_by

# --- Result Models ---
from .results import (
    AnalyticsResult,
    DescriptiveStats,
    EpidemiologicalMetrics,
    TrendAnalysis,
    StatisticalTestResult,
    SurveillanceAlert
)

# --- Query Dispatch ---
from .dispatch import (
    AnalyticsDispatcher,
    Narrative,
    NarrativeRequest,
    Narrator,
    determine_analysis_type
)


# --- Define the public API for the analytics package ---
# This list controls what is imported when a user does `from analytics import *`
# and is considered the canonical list of public-facing components.
__all__ = [
    # Engine
    "calculate_descriptive_stats",
    "count_by_category",
    "calculate_epidemiological_metrics",
    "analyze_trend",
    "detect_seasonality",
    "perform_statistical_test",
    "InsufficientDataError",
    "detect_outbreak",
    "forecast_cases",
    "bucket_counts",
    "group_by",

    # Results
    "AnalyticsResult",
    "DescriptiveStats",
    "EpidemiologicalMetrics",
    "TrendAnalysis",
    "StatisticalTestResult",
    "SurveillanceAlert",

    # Dispatch
    "AnalyticsDispatcher",
    "Narrative",
    "NarrativeRequest",
    "Narrator",
    "determine_analysis_type",
]
