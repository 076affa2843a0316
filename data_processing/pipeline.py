# hospital_analytics_root/data_processing/pipeline.py
#
# Fluent Record Preparation Pipeline
# A chainable class that applies the normalisation steps every analysis relies
# on. It always works on a copy, so caller-owned frames are never mutated.

import logging
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from .helpers import NA_REGEX_PATTERN

logger = logging.getLogger(__name__)


class DataPipeline:
    """
    A fluent interface for applying a sequence of data processing operations.

    Usage:
        processed_df = (
            DataPipeline(raw_df)
            .rename_columns({'visitDate': 'visit_date'})
            .ensure_columns(['visit_date', 'diagnosis'])
            .convert_date_columns(['visit_date'])
            .standardize_missing_values({'diagnosis': 'Unknown'})
            .get_df()
        )
    """
    def __init__(self, df: pd.DataFrame):
        if not isinstance(df, pd.DataFrame):
            raise TypeError("DataPipeline must be initialized with a pandas DataFrame.")
        self._df = df.copy()

    def get_df(self) -> pd.DataFrame:
        """Returns the processed DataFrame at the end of the pipeline."""
        return self._df

    def rename_columns(self, rename_map: Dict[str, str]) -> 'DataPipeline':
        """
        Renames columns based on a provided dictionary. A source column is
        skipped when its target name already exists, so snake_case data is
        never overwritten by a camelCase duplicate.
        """
        if not rename_map:
            return self
        applicable = {
            src: dst for src, dst in rename_map.items()
            if src in self._df.columns and dst not in self._df.columns
        }
        self._df = self._df.rename(columns=applicable)
        return self

    def ensure_columns(self, columns: List[str]) -> 'DataPipeline':
        """Adds any missing column, filled with nulls."""
        for col in columns:
            if col not in self._df.columns:
                self._df[col] = pd.Series([None] * len(self._df), index=self._df.index, dtype=object)
        return self

    def convert_date_columns(self, date_columns: List[str], errors: str = 'coerce') -> 'DataPipeline':
        """
        Converts specified columns to naive datetime objects.

        Values are parsed as ISO 8601 one by one, so date-only strings, local
        timestamps and offset-qualified timestamps may be mixed in a column.
        Offset-qualified values are normalised to UTC before the offset is
        dropped.

        Args:
            date_columns: A list of column names to convert.
            errors: Behavior for parsing errors ('coerce' sets invalid to NaT).
        """
        if not date_columns:
            return self

        for col in date_columns:
            if col in self._df.columns:
                original = self._df[col]
                parsed = pd.to_datetime(original, errors=errors, format='ISO8601', utc=True).dt.tz_localize(None)
                unparsed = int((parsed.isna() & original.notna()).sum())
                if unparsed:
                    logger.warning(f"{unparsed} value(s) in '{col}' are not ISO 8601 dates and were set to NaT.")
                self._df[col] = parsed
            else:
                logger.warning(f"Date conversion skipped: Column '{col}' not found in DataFrame.")
        return self

    def standardize_missing_values(self, column_defaults: Dict[str, Any]) -> 'DataPipeline':
        """
        Replaces the various "Not Available" spellings and nulls in text
        columns with the provided defaults.
        """
        if not column_defaults:
            return self

        for col, default_val in column_defaults.items():
            if col not in self._df.columns:
                continue
            series_obj = self._df[col].astype(object)
            is_missing = series_obj.map(
                lambda v: v is None
                or (isinstance(v, float) and np.isnan(v))
                or (isinstance(v, str) and bool(NA_REGEX_PATTERN.match(v)))
            ).astype(bool)
            self._df[col] = series_obj.where(~is_missing, str(default_val)).map(
                lambda v: v if isinstance(v, str) else str(v)
            )
        return self
