# hospital_analytics_root/data_processing/__init__.py
#
# Data Processing Package API
# This file initializes the data_processing package and defines its public API:
# the patient record contract, the normalisation pipeline and the synthetic
# record generator.

"""
Initializes the data_processing package, making key functions and classes
available at the top level for easier, cleaner imports in other modules.
"""

# --- Record Contract & Normalisation ---
from .records import (
    PatientRecord,
    Dataset,
    RecordCollection,
    records_to_frame,
    extract_numeric_values
)

# --- Data Preparation ---
# The DataPipeline provides a fluent (chainable) interface for applying a
# sequence of cleaning and transformation steps.
from .pipeline import DataPipeline

# --- Shared Numeric Helpers ---
from .helpers import convert_to_numeric, round_half_up

# --- Synthetic Data ---
from .synthetic import generate_patient_records


__all__ = [
    # --- Records ---
    "PatientRecord",
    "Dataset",
    "RecordCollection",
    "records_to_frame",
    "extract_numeric_values",

    # --- Preparation ---
    "DataPipeline",

    # --- Helpers ---
    "convert_to_numeric",
    "round_half_up",

    # --- Synthetic ---
    "generate_patient_records",
]
