# hospital_analytics_root/analytics/results.py
#
# Analytics Result Models
# Typed outputs of every engine function plus the AnalyticsResult envelope,
# whose `results` is a union discriminated by analysis type.

from datetime import datetime, timezone
from typing import Annotated, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

AnalysisType = Literal["descriptive", "trend", "epidemiological", "statistical", "surveillance", "forecasting"]

ANALYSIS_TYPES: Tuple[str, ...] = (
    "descriptive", "trend", "epidemiological", "statistical", "surveillance", "forecasting"
)


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- Engine Outputs ---

class DescriptiveStats(_Frozen):
    count: int
    mean: float
    median: float
    std_dev: float
    min: float
    max: float
    q1: float
    q3: float


class EpidemiologicalMetrics(_Frozen):
    """Rates per 1000 population and percentages, rounded to 2 decimals."""
    total_cases: int
    new_cases: int
    deaths: int
    incidence: float
    prevalence: float
    case_fatality_rate: float
    proportional_morbidity_ratio: Optional[float] = None
    cause_specific_mortality_fraction: Optional[float] = None


class TrendAnalysis(_Frozen):
    """
    `confidence` is |slope| in visits per period: a relative magnitude for
    ranking trends, not a probability.
    """
    trend: Literal["increasing", "decreasing", "stable"]
    percent_change: float
    seasonal_pattern: bool
    confidence: float
    slope: float = 0.0
    periods: int = 0


class StatisticalTestResult(_Frozen):
    test: str
    statistic: float
    p_value: float
    confidence_interval: Tuple[float, float]
    interpretation: str
    is_significant: bool
    degrees_of_freedom: Optional[int] = None


class SurveillanceAlert(_Frozen):
    alert_level: Literal["low", "moderate", "high", "critical"]
    diagnosis: str
    week_start: str
    threshold: float
    observed_value: int
    expected_value: float
    message: str
    recommendations: List[str]


# --- Result Payloads (one variant per analysis type) ---

class DescriptivePayload(_Frozen):
    analysis_type: Literal["descriptive"] = "descriptive"
    field: str
    stats: Optional[DescriptiveStats]
    diagnosis_counts: Dict[str, int] = Field(default_factory=dict)


class TrendPayload(_Frozen):
    analysis_type: Literal["trend"] = "trend"
    time_unit: str
    analysis: TrendAnalysis


class EpidemiologicalPayload(_Frozen):
    analysis_type: Literal["epidemiological"] = "epidemiological"
    population: int
    time_period_days: int
    metrics: EpidemiologicalMetrics


class StatisticalPayload(_Frozen):
    analysis_type: Literal["statistical"] = "statistical"
    field: str
    test_type: str
    group_labels: Tuple[str, str]
    result: Optional[StatisticalTestResult] = None
    error: Optional[str] = None


class SurveillancePayload(_Frozen):
    analysis_type: Literal["surveillance"] = "surveillance"
    threshold_multiplier: float
    alerts: List[SurveillanceAlert]


class ForecastingPayload(_Frozen):
    analysis_type: Literal["forecasting"] = "forecasting"
    periods: int
    history: Dict[str, int]
    forecast: List[int]


AnalysisPayload = Annotated[
    Union[
        DescriptivePayload,
        TrendPayload,
        EpidemiologicalPayload,
        StatisticalPayload,
        SurveillancePayload,
        ForecastingPayload,
    ],
    Field(discriminator="analysis_type"),
]


class AnalyticsResult(_Frozen):
    """Envelope persisted by the record store for each answered query."""
    query: str
    results: AnalysisPayload
    interpretation: str
    recommendations: List[str]
    dataset_id: Optional[str] = None
    generated_by: str = "system"
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    narrative_source: Literal["engine", "narrator"] = "engine"

    @computed_field
    @property
    def analysis_type(self) -> AnalysisType:
        return self.results.analysis_type
