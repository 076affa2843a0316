"""
Shared pytest fixtures for the analytics engine tests.

Record factories build PatientRecord instances with sensible defaults so each
test only spells out the fields it cares about.
"""

import itertools
from datetime import date, timedelta
from typing import List, Sequence

import pytest

from data_processing import PatientRecord

# 2024-01-07 is a Sunday, the first day of a surveillance week.
FIRST_SUNDAY = date(2024, 1, 7)

_record_ids = itertools.count()


def _build_record(visit_date: date = date(2024, 1, 15), **overrides) -> PatientRecord:
    n = next(_record_ids)
    fields = dict(
        id=f"rec-{n}",
        dataset_id="ds-test",
        patient_id=f"PAT-{n:05d}",
        age=30,
        sex="female",
        department="opd",
        diagnosis="Malaria",
        service_provided="Consultation",
        visit_date=visit_date,
        outcome="Discharged",
        referral_status="Not Referred",
    )
    fields.update(overrides)
    return PatientRecord(**fields)


def _monthly_records(counts: Sequence[int], start: date = date(2024, 1, 1), **overrides) -> List[PatientRecord]:
    records = []
    for offset, count in enumerate(counts):
        year = start.year + (start.month - 1 + offset) // 12
        month = (start.month - 1 + offset) % 12 + 1
        records.extend(_build_record(date(year, month, 15), **overrides) for _ in range(count))
    return records


def _weekly_records(counts: Sequence[int], first_sunday: date = FIRST_SUNDAY, **overrides) -> List[PatientRecord]:
    records = []
    for week, count in enumerate(counts):
        tuesday = first_sunday + timedelta(weeks=week, days=2)
        records.extend(_build_record(tuesday, **overrides) for _ in range(count))
    return records


@pytest.fixture
def make_record():
    """Factory for a single PatientRecord."""
    return _build_record


@pytest.fixture
def monthly_records():
    """Factory for records with the given number of visits in consecutive months."""
    return _monthly_records


@pytest.fixture
def weekly_records():
    """Factory for records with the given number of visits in consecutive Sunday-start weeks."""
    return _weekly_records
