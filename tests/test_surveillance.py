from datetime import date, timedelta

import pytest

from analytics import detect_outbreak
from analytics.surveillance import OUTBREAK_ACTIONS


@pytest.mark.parametrize("spike, level", [
    (25, "critical"),   # > 2 x threshold of 10
    (20, "high"),       # > 1.5 x threshold, not > 2 x
    (12, "moderate"),
])
def test_single_spike_after_flat_baseline(weekly_records, spike, level):
    records = weekly_records([5, 5, 5, 5, spike])

    alerts = detect_outbreak(records, threshold_multiplier=2.0)

    assert len(alerts) == 1
    alert = alerts[0]
    assert alert.alert_level == level
    assert alert.observed_value == spike
    assert alert.expected_value == 5.0
    assert alert.threshold == 10.0
    assert alert.week_start == "2024-02-04"
    assert alert.diagnosis == "Malaria"
    assert alert.message == "Unusual increase in Malaria cases detected"
    assert alert.recommendations == OUTBREAK_ACTIONS
    assert len(alert.recommendations) == 4


def test_count_at_threshold_does_not_alert(weekly_records):
    assert detect_outbreak(weekly_records([5, 5, 5, 5, 10])) == []


def test_fewer_than_four_weeks_is_skipped(weekly_records):
    assert detect_outbreak(weekly_records([1, 1, 50])) == []


def test_every_breaching_week_alerts_separately(weekly_records):
    records = weekly_records([2, 2, 2, 2, 10, 10], diagnosis="Cholera")
    records += weekly_records([3, 3, 3, 3, 3, 3], diagnosis="Malaria")

    alerts = detect_outbreak(records)

    assert [a.diagnosis for a in alerts] == ["Cholera", "Cholera"]
    assert [a.week_start for a in alerts] == ["2024-02-04", "2024-02-11"]
    assert all(a.alert_level == "critical" for a in alerts)


def test_independent_alerts_per_diagnosis(weekly_records):
    records = weekly_records([1, 1, 1, 1, 9], diagnosis="Typhoid Fever")
    records += weekly_records([4, 4, 4, 4, 9], diagnosis="Dengue Fever")

    alerts = detect_outbreak(records)

    assert {(a.diagnosis, a.alert_level) for a in alerts} == {
        ("Typhoid Fever", "critical"),
        ("Dengue Fever", "moderate"),
    }


def test_multiplier_raises_the_threshold(weekly_records):
    records = weekly_records([5, 5, 5, 5, 12])

    assert detect_outbreak(records, threshold_multiplier=3.0) == []


def test_weeks_without_cases_are_not_buckets(weekly_records):
    # Only weeks with cases count, so the last four buckets are 5, 5, 5, 30.
    records = weekly_records([5, 5, 5, 5, 0, 0, 0, 30])

    alerts = detect_outbreak(records)

    assert len(alerts) == 1
    assert alerts[0].week_start == "2024-02-25"
    assert alerts[0].alert_level == "critical"


def test_visits_in_one_week_share_a_sunday_bucket(make_record):
    week_days = [date(2024, 1, 7) + timedelta(days=d) for d in range(7)]   # Sunday..Saturday
    records = []
    for week in range(4):
        records += [make_record(visit_date=d + timedelta(weeks=week)) for d in week_days[:2]]
    records += [make_record(visit_date=date(2024, 2, 4) + timedelta(days=d % 7)) for d in range(20)]

    alerts = detect_outbreak(records)

    assert len(alerts) == 1
    assert alerts[0].expected_value == 2.0
    assert alerts[0].observed_value == 20


def test_empty_collection_has_no_alerts():
    assert detect_outbreak([]) == []
