from datetime import date

import pytest

from analytics import calculate_epidemiological_metrics
from data_processing import generate_patient_records
from data_processing.synthetic import COMMON_DIAGNOSES

START, END = date(2024, 1, 1), date(2024, 3, 31)


def test_same_seed_same_records():
    first = generate_patient_records(50, START, END, "ds", seed=7)
    second = generate_patient_records(50, START, END, "ds", seed=7)

    assert first == second


def test_records_are_dated_in_range_and_sorted():
    records = generate_patient_records(120, START, END, "ds", seed=1)

    dates = [r.visit_date for r in records]
    assert len(records) == 120
    assert dates == sorted(dates)
    assert START <= dates[0] and dates[-1] <= END
    assert len({r.id for r in records}) == 120


def test_opd_records_carry_waiting_time():
    records = generate_patient_records(40, START, END, "ds", "opd", seed=2)

    assert all(10 <= r.waiting_time < 130 for r in records)
    assert all(r.length_of_stay is None for r in records)
    assert all(COMMON_DIAGNOSES[r.diagnosis] == r.icd10_code for r in records)


def test_ipd_records_carry_length_of_stay():
    records = generate_patient_records(40, START, END, "ds", "ipd", seed=3)

    assert all(1 <= r.length_of_stay <= 14 for r in records)
    assert all(r.waiting_time is None for r in records)


def test_maternal_rch_visits_are_female_adults():
    records = generate_patient_records(200, START, END, "ds", "rch", seed=4)

    maternal = [r for r in records if r.diagnosis in ("ANC Visit", "PNC Visit", "Family Planning")]
    assert maternal
    assert all(r.sex == "female" and 15 <= r.age < 40 for r in maternal)
    assert all(r.age < 5 for r in records if r not in maternal)


def test_generated_records_feed_the_engine():
    records = generate_patient_records(300, START, END, "ds", "ipd", seed=5)

    metrics = calculate_epidemiological_metrics(records, population=10000)

    assert metrics.total_cases == 300
    assert 0 < metrics.deaths < 300


@pytest.mark.parametrize("department, start, end", [
    ("pharmacy", START, END),
    ("opd", END, START),
])
def test_invalid_arguments_raise(department, start, end):
    with pytest.raises(ValueError):
        generate_patient_records(5, start, end, "ds", department)
