# hospital_analytics_root/analytics/surveillance.py
#
# Outbreak Surveillance
# Flags diagnoses whose recent weekly case counts exceed a multiple of their
# early baseline.

import logging
from typing import List

try:
    from data_processing import RecordCollection, records_to_frame, round_half_up
except ImportError as e:
    logging.basicConfig(level="CRITICAL")
    logging.critical(f"FATAL ERROR in surveillance.py: A core dependency is missing. {e}", exc_info=True)
    raise

from .grouping import bucket_counts, group_by
from .results import SurveillanceAlert

logger = logging.getLogger(__name__)

BASELINE_WEEKS = 4
RECENT_WEEKS = 4

OUTBREAK_ACTIONS = [
    'Investigate potential outbreak source',
    'Enhance surveillance and case finding',
    'Review infection control measures',
    'Consider public health intervention',
]


def _alert_level(observed: float, threshold: float) -> str:
    if observed > threshold * 2:
        return "critical"
    if observed > threshold * 1.5:
        return "high"
    return "moderate"


def detect_outbreak(records: RecordCollection, threshold_multiplier: float = 2.0) -> List[SurveillanceAlert]:
    """
    Scans each diagnosis for weeks with abnormally many cases.

    The baseline is the mean of a diagnosis's first four weekly counts and the
    threshold is baseline x multiplier. Every one of the latest four weeks
    above the threshold yields its own alert; weeks without cases do not
    count as weeks. Diagnoses with fewer than four weeks of cases are skipped.
    """
    df = records_to_frame(records)
    alerts: List[SurveillanceAlert] = []

    for diagnosis, diagnosis_df in group_by(df, 'diagnosis').items():
        weekly_counts = bucket_counts(diagnosis_df, 'weekly')
        if len(weekly_counts) < BASELINE_WEEKS:
            logger.debug(f"Skipping '{diagnosis}': {len(weekly_counts)} week(s) of data, baseline needs {BASELINE_WEEKS}.")
            continue

        baseline = float(weekly_counts.iloc[:BASELINE_WEEKS].mean())
        threshold = baseline * threshold_multiplier

        for week_start, observed in weekly_counts.iloc[-RECENT_WEEKS:].items():
            if observed <= threshold:
                continue
            level = _alert_level(observed, threshold)
            alerts.append(SurveillanceAlert(
                alert_level=level,
                diagnosis=diagnosis,
                week_start=str(week_start),
                threshold=round_half_up(threshold),
                observed_value=int(observed),
                expected_value=round_half_up(baseline),
                message=f"Unusual increase in {diagnosis} cases detected",
                recommendations=list(OUTBREAK_ACTIONS),
            ))
            logger.warning(
                f"{level.upper()} alert for '{diagnosis}' in week of {week_start}: "
                f"{int(observed)} cases against threshold {threshold:.2f}."
            )

    return alerts
