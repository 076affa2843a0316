# hospital_analytics_root/data_processing/synthetic.py
#
# Synthetic Patient Records
# Generates realistic, reproducible visit records for demonstrations and
# tests, mirroring the vocabulary of the hospital's departments.

import logging
from datetime import date, timedelta
from typing import Dict, List, Literal, Optional

import numpy as np

from .records import PatientRecord

logger = logging.getLogger(__name__)

Department = Literal["opd", "ipd", "laboratory", "rch"]

COMMON_DIAGNOSES: Dict[str, str] = {
    'Malaria': 'B54',
    'Pneumonia': 'J18.9',
    'Diarrhea': 'A09',
    'Hypertension': 'I10',
    'Diabetes Mellitus': 'E14.9',
    'Upper Respiratory Infection': 'J06.9',
    'Gastroenteritis': 'A09.9',
    'Typhoid Fever': 'A01.0',
    'Urinary Tract Infection': 'N39.0',
    'Dengue Fever': 'A91',
    'COVID-19': 'U07.1',
    'Anemia': 'D64.9',
    'Peptic Ulcer Disease': 'K27.9',
    'Asthma': 'J45.9',
    'Meningitis': 'G03.9',
}

LABORATORY_REASONS = ['Laboratory Investigation', 'Routine Check', 'Pre-operative', 'Post-operative']
RCH_SERVICES_BY_VISIT = ['ANC Visit', 'PNC Visit', 'Family Planning', 'Immunization', 'Well Baby Visit', 'Growth Monitoring']

SERVICES: Dict[str, List[str]] = {
    'opd': ['Consultation', 'Laboratory Test', 'X-Ray', 'Ultrasound', 'ECG', 'Vaccination', 'Health Education'],
    'ipd': ['Admission', 'Surgery', 'Blood Transfusion', 'IV Therapy', 'Oxygen Therapy', 'Physiotherapy'],
    'laboratory': ['Blood Test', 'Urine Test', 'Stool Test', 'CSF Analysis', 'Culture & Sensitivity', 'Histopathology'],
    'rch': ['ANC Visit', 'PNC Visit', 'Family Planning', 'Immunization', 'Growth Monitoring', 'Nutrition Counseling'],
}

OUTCOMES: Dict[str, List[str]] = {
    'opd': ['Discharged', 'Referred', 'Admitted', 'Left Against Medical Advice'],
    'ipd': ['Discharged', 'Transferred', 'Referred', 'Died', 'Left Against Medical Advice'],
    'laboratory': ['Test Completed', 'Sample Rejected', 'Referred'],
    'rch': ['Service Completed'],
}

REFERRAL_PROBABILITY: Dict[str, float] = {'opd': 0.2, 'ipd': 0.3, 'laboratory': 0.0, 'rch': 0.1}

# (probability, low, high) bands; ages drawn uniformly in [low, high).
AGE_BANDS = [(0.15, 0, 5), (0.20, 5, 20), (0.40, 20, 50), (0.15, 50, 70), (0.10, 70, 100)]


def _general_age(rng: np.random.Generator) -> int:
    probabilities = [band[0] for band in AGE_BANDS]
    _, low, high = AGE_BANDS[rng.choice(len(AGE_BANDS), p=probabilities)]
    return int(rng.integers(low, high))


def _rch_age(rng: np.random.Generator, visit_type: str) -> int:
    if visit_type in ('ANC Visit', 'PNC Visit', 'Family Planning'):
        return int(rng.integers(15, 40))
    return int(rng.integers(0, 5))


def generate_patient_records(
    count: int,
    start: date,
    end: date,
    dataset_id: str,
    department: Department = "opd",
    seed: Optional[int] = None
) -> List[PatientRecord]:
    """
    Generates `count` synthetic visit records dated between `start` and `end`
    inclusive, sorted by visit date. The same seed yields the same records.
    """
    if department not in SERVICES:
        raise ValueError(f"Unsupported department '{department}'.")
    if end < start:
        raise ValueError("End date must not precede start date.")

    rng = np.random.default_rng(seed)
    span_days = (end - start).days
    records: List[PatientRecord] = []

    for i in range(count):
        icd10_code = None
        if department == 'laboratory':
            diagnosis = str(rng.choice(LABORATORY_REASONS))
        elif department == 'rch':
            diagnosis = str(rng.choice(RCH_SERVICES_BY_VISIT))
        else:
            diagnosis = str(rng.choice(list(COMMON_DIAGNOSES)))
            icd10_code = COMMON_DIAGNOSES[diagnosis]

        if department == 'rch':
            age = _rch_age(rng, diagnosis)
            is_maternal = diagnosis in ('ANC Visit', 'PNC Visit', 'Family Planning')
            sex = 'female' if is_maternal else str(rng.choice(['male', 'female']))
        else:
            age = _general_age(rng)
            sex = str(rng.choice(['male', 'female']))

        records.append(PatientRecord(
            id=f"{dataset_id}-{i:06d}",
            dataset_id=dataset_id,
            patient_id=f"PAT-{int(rng.integers(0, 100000)):05d}",
            age=age,
            sex=sex,
            department=department,
            diagnosis=diagnosis,
            icd10_code=icd10_code,
            service_provided=str(rng.choice(SERVICES[department])),
            visit_date=start + timedelta(days=int(rng.integers(0, span_days + 1))),
            outcome=str(rng.choice(OUTCOMES[department])),
            referral_status='Referred' if rng.random() < REFERRAL_PROBABILITY[department] else 'Not Referred',
            waiting_time=int(rng.integers(10, 130)) if department == 'opd' else None,
            length_of_stay=int(rng.integers(1, 15)) if department == 'ipd' else None,
        ))

    records.sort(key=lambda r: r.visit_date)
    logger.info(f"Generated {len(records)} synthetic '{department}' records for dataset '{dataset_id}'.")
    return records
