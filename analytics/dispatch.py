# hospital_analytics_root/analytics/dispatch.py
#
# Query Dispatcher
# Maps a free-text question to one of the six analysis types, runs the engine
# and wraps the numbers with an interpretation and recommendations. Prose
# comes from an optional narrative collaborator; whenever it is missing,
# disabled or failing, the engine's own wording is used.

import logging
from typing import Any, Dict, List, Optional, Protocol, Tuple

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

try:
    from config.settings import Settings, settings as default_settings
    from data_processing import Dataset, RecordCollection, records_to_frame
except ImportError as e:
    logging.basicConfig(level="CRITICAL")
    logging.critical(f"FATAL ERROR in dispatch.py: A core dependency is missing. {e}", exc_info=True)
    raise

from .descriptive import calculate_descriptive_stats, count_by_category
from .epidemiology import calculate_epidemiological_metrics
from .forecasting import MIN_HISTORY_MONTHS, forecast_cases, monthly_history
from .hypothesis import InsufficientDataError, perform_statistical_test
from .results import (
    ANALYSIS_TYPES, AnalysisPayload, AnalysisType, AnalyticsResult,
    DescriptivePayload, EpidemiologicalPayload, ForecastingPayload,
    StatisticalPayload, SurveillancePayload, TrendPayload
)
from .surveillance import detect_outbreak
from .trends import analyze_trend

logger = logging.getLogger(__name__)

# Checked in order; the first analysis type with a matching keyword wins.
ANALYSIS_KEYWORDS: List[Tuple[AnalysisType, Tuple[str, ...]]] = [
    ("trend", ("trend", "pattern", "over time")),
    ("epidemiological", ("incidence", "prevalence", "rate")),
    ("surveillance", ("outbreak", "alert", "abnormal")),
    ("statistical", ("compare", "difference", "test")),
    ("forecasting", ("forecast", "predict", "future")),
]

COMPARISON_GROUPS: Tuple[str, str] = ("male", "female")

FIELD_UNITS: Dict[str, str] = {'age': 'years', 'waiting_time': 'minutes', 'length_of_stay': 'days'}


def determine_analysis_type(query: str) -> AnalysisType:
    """Classifies a question by keyword substring; descriptive when nothing matches."""
    lower_query = query.lower()
    for analysis_type, keywords in ANALYSIS_KEYWORDS:
        if any(keyword in lower_query for keyword in keywords):
            return analysis_type
    return "descriptive"


class Narrative(BaseModel):
    """Prose produced for a computed result."""
    model_config = ConfigDict(frozen=True)

    interpretation: str = Field(min_length=1)
    recommendations: List[str] = Field(default_factory=list)


class NarrativeRequest(BaseModel):
    """Everything a narrative collaborator is given to write about."""
    model_config = ConfigDict(frozen=True)

    query: str
    analysis_type: AnalysisType
    payload: AnalysisPayload
    dataset: Optional[Dataset] = None
    sample_records: List[Dict[str, Any]] = Field(default_factory=list)


class Narrator(Protocol):
    """An external text service, e.g. a hosted language model client."""

    def narrate(self, request: NarrativeRequest) -> Narrative:
        ...


def _describe(payload: DescriptivePayload) -> Narrative:
    diagnoses = len(payload.diagnosis_counts)
    total = sum(payload.diagnosis_counts.values())
    summary = f"Found {total} total records with {diagnoses} different diagnoses."
    if payload.stats is None:
        return Narrative(
            interpretation=f"No valid {payload.field} values are available. {summary}",
            recommendations=['Analyze most common conditions', 'Focus on high-burden diseases'],
        )

    average = f"{payload.stats.mean} {FIELD_UNITS.get(payload.field, '')}".strip()
    label = payload.field.replace('_', ' ')
    interpretation = (
        f"The average patient {label} is {average} with a standard deviation "
        f"of {payload.stats.std_dev}. {summary}"
    )
    if payload.field == 'age':
        recommendations = ['Consider age-specific interventions', 'Monitor age-related disease patterns']
    else:
        recommendations = ['Analyze most common conditions', 'Focus on high-burden diseases']
    return Narrative(interpretation=interpretation, recommendations=recommendations)


def _describe_trend(payload: TrendPayload) -> Narrative:
    analysis = payload.analysis
    interpretation = f"The data shows a {analysis.trend} trend with {analysis.percent_change}% change."
    if analysis.seasonal_pattern:
        interpretation += " A recurring yearly pattern is present."
    if analysis.trend == "increasing":
        recommendations = ['Monitor the increasing trend', 'Prepare for increased service demand']
    elif analysis.trend == "decreasing":
        recommendations = ['Investigate causes of decline', 'Maintain current interventions']
    else:
        recommendations = ['Continue routine monitoring', 'Maintain current interventions']
    return Narrative(interpretation=interpretation, recommendations=recommendations)


def _describe_epidemiology(payload: EpidemiologicalPayload) -> Narrative:
    metrics = payload.metrics
    return Narrative(
        interpretation=(
            f"The incidence rate is {metrics.incidence} per 1000 population with a case fatality "
            f"rate of {metrics.case_fatality_rate}%."
        ),
        recommendations=['Strengthen prevention measures', 'Improve case management', 'Enhance surveillance'],
    )


def _describe_statistics(payload: StatisticalPayload) -> Narrative:
    first, second = payload.group_labels
    if payload.result is None:
        return Narrative(
            interpretation=f"Statistical comparison unavailable: {payload.error}",
            recommendations=['Collect more records for both groups before comparing'],
        )
    result = payload.result
    interpretation = (
        f"{result.test} comparing {payload.field.replace('_', ' ')} between {first} and {second} "
        f"patients: {result.interpretation} (p = {result.p_value})."
    )
    if result.is_significant:
        recommendations = ['Investigate factors behind the difference between groups', 'Consider group-specific interventions']
    else:
        recommendations = ['No group-specific action indicated', 'Re-test as more data accumulates']
    return Narrative(interpretation=interpretation, recommendations=recommendations)


def _describe_surveillance(payload: SurveillancePayload) -> Narrative:
    if payload.alerts:
        return Narrative(
            interpretation=f"{len(payload.alerts)} potential outbreak(s) detected requiring immediate attention.",
            recommendations=list(payload.alerts[0].recommendations),
        )
    return Narrative(
        interpretation='No unusual patterns detected. Current situation is stable.',
        recommendations=['Continue routine surveillance', 'Maintain current prevention measures'],
    )


def _describe_forecast(payload: ForecastingPayload) -> Narrative:
    recommendations = ['Plan staffing and supplies for projected demand', 'Compare projections with actual volumes monthly']
    if len(payload.history) < MIN_HISTORY_MONTHS:
        return Narrative(
            interpretation=f"Only {len(payload.history)} month(s) of history; at least {MIN_HISTORY_MONTHS} are needed to forecast visit volume.",
            recommendations=['Continue collecting monthly data before forecasting'],
        )
    projected = ", ".join(str(value) for value in payload.forecast)
    return Narrative(
        interpretation=f"Projected visits for the next {payload.periods} months: {projected}.",
        recommendations=recommendations,
    )


_DESCRIBERS = {
    "descriptive": _describe,
    "trend": _describe_trend,
    "epidemiological": _describe_epidemiology,
    "statistical": _describe_statistics,
    "surveillance": _describe_surveillance,
    "forecasting": _describe_forecast,
}


class AnalyticsDispatcher:
    """
    Runs the analysis a query asks for, using parameters from the settings
    it is constructed with.
    """
    def __init__(self, settings: Optional[Settings] = None, narrator: Optional[Narrator] = None):
        self.settings = settings or default_settings
        self.narrator = narrator
        logger.debug(f"Dispatcher ready for {self.settings.app_banner}; narrator={'yes' if narrator else 'no'}.")

    def compute(self, records: RecordCollection, analysis_type: AnalysisType) -> AnalysisPayload:
        """Runs the engine function for `analysis_type` and returns its typed payload."""
        if analysis_type not in ANALYSIS_TYPES:
            raise ValueError(f"Unsupported analysis type '{analysis_type}'. Expected one of {ANALYSIS_TYPES}.")

        cfg = self.settings
        df = records_to_frame(records)

        if analysis_type == "descriptive":
            field = cfg.hypothesis.comparison_field
            return DescriptivePayload(
                field=field,
                stats=calculate_descriptive_stats(df, field),
                diagnosis_counts=count_by_category(df, 'diagnosis'),
            )

        if analysis_type == "trend":
            return TrendPayload(
                time_unit=cfg.trends.time_unit,
                analysis=analyze_trend(df, cfg.trends.time_unit),
            )

        if analysis_type == "epidemiological":
            return EpidemiologicalPayload(
                population=cfg.epidemiology.population,
                time_period_days=cfg.epidemiology.time_period_days,
                metrics=calculate_epidemiological_metrics(
                    df, cfg.epidemiology.population, cfg.epidemiology.time_period_days
                ),
            )

        if analysis_type == "statistical":
            return self._compare_groups(df)

        if analysis_type == "surveillance":
            multiplier = cfg.surveillance.threshold_multiplier
            return SurveillancePayload(threshold_multiplier=multiplier, alerts=detect_outbreak(df, multiplier))

        history = monthly_history(df)
        return ForecastingPayload(
            periods=cfg.forecasting.periods,
            history={str(period): int(count) for period, count in history.items()},
            forecast=forecast_cases(df, cfg.forecasting.periods),
        )

    def _compare_groups(self, df: pd.DataFrame) -> StatisticalPayload:
        field = self.settings.hypothesis.comparison_field
        test_type = self.settings.hypothesis.test_type
        first, second = COMPARISON_GROUPS
        try:
            result = perform_statistical_test(df[df['sex'] == first], df[df['sex'] == second], field, test_type)
        except InsufficientDataError as e:
            logger.warning(f"Group comparison on '{field}' not possible: {e}")
            return StatisticalPayload(field=field, test_type=test_type, group_labels=COMPARISON_GROUPS, error=str(e))
        return StatisticalPayload(field=field, test_type=test_type, group_labels=COMPARISON_GROUPS, result=result)

    def _narrate(self, request: NarrativeRequest) -> Optional[Narrative]:
        if self.narrator is None or not self.settings.narrative.enabled:
            return None
        try:
            return self.narrator.narrate(request)
        except Exception as e:
            logger.error(f"Narrative collaborator failed; using engine interpretation. Error: {e}", exc_info=True)
            return None

    def run(
        self,
        records: RecordCollection,
        query: str,
        dataset: Optional[Dataset] = None,
        generated_by: str = "system"
    ) -> AnalyticsResult:
        """Answers a free-text query about a record collection."""
        df = records_to_frame(records)
        analysis_type = determine_analysis_type(query)
        logger.info(f"Query classified as '{analysis_type}' over {len(df)} records.")
        payload = self.compute(df, analysis_type)

        request = NarrativeRequest(
            query=query,
            analysis_type=analysis_type,
            payload=payload,
            dataset=dataset,
            sample_records=df.head(self.settings.narrative.sample_size).to_dict('records'),
        )
        narrative = self._narrate(request)
        source = "narrator" if narrative is not None else "engine"
        if narrative is None:
            narrative = _DESCRIBERS[analysis_type](payload)

        return AnalyticsResult(
            query=query,
            results=payload,
            interpretation=narrative.interpretation,
            recommendations=list(narrative.recommendations),
            dataset_id=dataset.id if dataset is not None else None,
            generated_by=generated_by,
            narrative_source=source,
        )
