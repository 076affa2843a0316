# hospital_analytics_root/analytics/epidemiology.py
#
# Epidemiological Metrics
# Incidence, prevalence and fatality ratios over a record collection.

import logging
from typing import Optional

import pandas as pd

try:
    from data_processing import RecordCollection, records_to_frame, round_half_up
except ImportError as e:
    logging.basicConfig(level="CRITICAL")
    logging.critical(f"FATAL ERROR in epidemiology.py: A core dependency is missing. {e}", exc_info=True)
    raise

from .results import EpidemiologicalMetrics

logger = logging.getLogger(__name__)

DEATH_OUTCOME = "Died"


def calculate_epidemiological_metrics(
    records: RecordCollection,
    population: int = 10000,
    time_period_days: int = 365,
    all_cause_cases: Optional[int] = None,
    all_cause_deaths: Optional[int] = None
) -> EpidemiologicalMetrics:
    """
    Calculates incidence and prevalence per 1000 population and fatality
    percentages.

    Args:
        records: The cases under study.
        population: Catchment population; must be positive.
        time_period_days: Cases dated up to this many days after the earliest
                          visit count as new cases for incidence.
        all_cause_cases: Total cases of all causes in the same population. The
                         proportional morbidity ratio is only reported when given.
        all_cause_deaths: Total deaths of all causes. The cause-specific
                          mortality fraction is only reported when given.
    """
    if population <= 0:
        raise ValueError(f"Population must be positive, got {population}.")
    for name, value in (('all_cause_cases', all_cause_cases), ('all_cause_deaths', all_cause_deaths)):
        if value is not None and value <= 0:
            raise ValueError(f"{name} must be positive when given, got {value}.")

    df = records_to_frame(records)
    total_cases = len(df)
    deaths = int((df['outcome'] == DEATH_OUTCOME).sum())

    visit_dates = pd.to_datetime(df['visit_date'], errors='coerce').dropna()
    if visit_dates.empty:
        new_cases = 0
    else:
        days_since_start = (visit_dates - visit_dates.min()) / pd.Timedelta(days=1)
        new_cases = int((days_since_start <= time_period_days).sum())

    case_fatality_rate = (deaths / total_cases) * 100 if total_cases > 0 else 0.0
    pmr = (total_cases / all_cause_cases) * 100 if all_cause_cases else None
    csmf = (deaths / all_cause_deaths) * 100 if all_cause_deaths else None

    logger.debug(f"Epidemiological metrics over {total_cases} cases, {deaths} deaths, population {population}.")
    return EpidemiologicalMetrics(
        total_cases=total_cases,
        new_cases=new_cases,
        deaths=deaths,
        incidence=round_half_up((new_cases / population) * 1000),
        prevalence=round_half_up((total_cases / population) * 1000),
        case_fatality_rate=round_half_up(case_fatality_rate),
        proportional_morbidity_ratio=round_half_up(pmr) if pmr is not None else None,
        cause_specific_mortality_fraction=round_half_up(csmf) if csmf is not None else None,
    )
