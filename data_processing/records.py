# hospital_analytics_root/data_processing/records.py
#
# Patient Record Data Contract
# Typed models for the records the engine consumes and the helpers that turn
# any supported record collection into a normalised, caller-independent
# DataFrame.

import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .helpers import convert_to_numeric
from .pipeline import DataPipeline

logger = logging.getLogger(__name__)


class PatientRecord(BaseModel):
    """One hospital visit/encounter. Immutable once created."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: str
    dataset_id: str
    patient_id: str
    age: int = Field(ge=0, le=120)
    sex: Literal["male", "female"]
    department: str
    diagnosis: str
    icd10_code: Optional[str] = None
    service_provided: str = ""
    visit_date: date
    outcome: str = ""
    referral_status: str = ""
    waiting_time: Optional[int] = Field(default=None, ge=0)      # minutes
    length_of_stay: Optional[int] = Field(default=None, ge=0)    # days


class Dataset(BaseModel):
    """Metadata for an uploaded collection of patient records."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: str
    name: str
    description: str = ""
    department: str
    file_type: Literal["excel", "csv", "tsv", "pdf", "image", "bulk"] = "csv"
    uploaded_by: str = "system"
    uploaded_at: Optional[datetime] = None
    row_count: int = Field(default=0, ge=0)
    columns: List[str] = Field(default_factory=list)
    is_processed: bool = False
    tags: List[str] = Field(default_factory=list)


RecordCollection = Union[pd.DataFrame, Iterable[Union[PatientRecord, Mapping[str, Any]]]]

RECORD_COLUMNS: List[str] = list(PatientRecord.model_fields)

# camelCase keys as a record store returns them -> canonical column names.
CAMEL_TO_SNAKE: Dict[str, str] = {
    to_camel(name): name for name in RECORD_COLUMNS if to_camel(name) != name
}

CATEGORICAL_DEFAULTS: Dict[str, str] = {
    'sex': 'Unknown',
    'department': 'Unknown',
    'diagnosis': 'Unknown',
    'outcome': 'Unknown',
}

# Inclusive valid ranges applied on top of numeric coercion.
NUMERIC_FIELD_BOUNDS: Dict[str, Tuple[float, float]] = {
    'age': (0, 120),
    'waiting_time': (0, np.inf),
    'length_of_stay': (0, np.inf),
}


def records_to_frame(records: RecordCollection) -> pd.DataFrame:
    """
    Builds a normalised DataFrame from PatientRecord models, plain mappings or
    an existing DataFrame.

    Every record column is present, `visit_date` is datetime64 (unparseable
    dates become NaT) and missing categorical values read "Unknown". The input
    is never modified.
    """
    if isinstance(records, pd.DataFrame):
        df = records
    else:
        rows = [
            r.model_dump() if isinstance(r, PatientRecord)
            else {CAMEL_TO_SNAKE.get(key, key): value for key, value in dict(r).items()}
            for r in records
        ]
        df = pd.DataFrame(rows) if rows else pd.DataFrame(columns=RECORD_COLUMNS)

    return (
        DataPipeline(df)
        .rename_columns(CAMEL_TO_SNAKE)
        .ensure_columns(RECORD_COLUMNS)
        .convert_date_columns(['visit_date'])
        .standardize_missing_values(CATEGORICAL_DEFAULTS)
        .get_df()
    )


def extract_numeric_values(df: pd.DataFrame, field: str) -> np.ndarray:
    """
    Returns the valid numeric values of `field` as floats, in record order.

    Non-numeric, missing and non-finite entries are dropped silently, as are
    values outside the field's valid range (e.g. ages outside 0-120).
    """
    if field not in df.columns:
        logger.warning(f"Numeric extraction skipped: Column '{field}' not found.")
        return np.array([], dtype=float)

    numeric = convert_to_numeric(df[field])
    numeric = numeric[np.isfinite(numeric)]
    bounds = NUMERIC_FIELD_BOUNDS.get(field)
    if bounds is not None:
        numeric = numeric[numeric.between(*bounds)]

    dropped = len(df) - len(numeric)
    if dropped:
        logger.debug(f"Excluded {dropped} of {len(df)} '{field}' values as non-numeric or out of range.")
    return numeric.to_numpy(dtype=float)
