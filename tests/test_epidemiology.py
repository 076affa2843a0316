from datetime import date, timedelta

import pytest

from analytics import calculate_epidemiological_metrics


@pytest.fixture
def hundred_cases(make_record):
    deaths = [make_record(outcome="Died") for _ in range(5)]
    survivors = [make_record(outcome="Discharged") for _ in range(95)]
    return deaths + survivors


def test_rates_per_thousand_and_fatality(hundred_cases):
    metrics = calculate_epidemiological_metrics(hundred_cases, population=10000)

    assert metrics.total_cases == 100
    assert metrics.deaths == 5
    assert metrics.case_fatality_rate == 5.0
    assert metrics.prevalence == 10.0
    assert metrics.incidence == 10.0


def test_incidence_counts_only_cases_within_the_window(make_record):
    start = date(2024, 1, 1)
    records = [
        make_record(visit_date=start),
        make_record(visit_date=start + timedelta(days=365)),
        make_record(visit_date=start + timedelta(days=366)),
    ]

    metrics = calculate_epidemiological_metrics(records, population=1000, time_period_days=365)

    assert metrics.new_cases == 2
    assert metrics.incidence == 2.0
    assert metrics.prevalence == 3.0


def test_window_starts_at_earliest_visit_regardless_of_order(make_record):
    records = [
        make_record(visit_date=date(2024, 3, 1)),
        make_record(visit_date=date(2024, 1, 1)),
        make_record(visit_date=date(2024, 1, 20)),
    ]

    metrics = calculate_epidemiological_metrics(records, population=1000, time_period_days=30)

    assert metrics.new_cases == 2


def test_empty_collection_yields_zero_rates():
    metrics = calculate_epidemiological_metrics([])

    assert metrics.total_cases == 0
    assert metrics.incidence == 0.0
    assert metrics.prevalence == 0.0
    assert metrics.case_fatality_rate == 0.0


def test_ratios_need_all_cause_totals(hundred_cases):
    default = calculate_epidemiological_metrics(hundred_cases)
    assert default.proportional_morbidity_ratio is None
    assert default.cause_specific_mortality_fraction is None

    metrics = calculate_epidemiological_metrics(hundred_cases, all_cause_cases=400, all_cause_deaths=20)
    assert metrics.proportional_morbidity_ratio == 25.0
    assert metrics.cause_specific_mortality_fraction == 25.0


def test_rates_are_rounded_half_up(make_record):
    records = [make_record(outcome="Died")] + [make_record() for _ in range(2)]

    metrics = calculate_epidemiological_metrics(records, population=3000)

    assert metrics.case_fatality_rate == 33.33
    assert metrics.prevalence == 1.0


@pytest.mark.parametrize("kwargs", [
    {"population": 0},
    {"population": -5},
    {"all_cause_cases": 0},
    {"all_cause_deaths": -1},
])
def test_invalid_denominators_raise(make_record, kwargs):
    with pytest.raises(ValueError):
        calculate_epidemiological_metrics([make_record()], **kwargs)
