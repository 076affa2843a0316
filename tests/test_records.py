import logging
import sys
from datetime import date

import numpy as np
import pandas as pd
import pytest
from pydantic import ValidationError

from analytics import analyze_trend
from data_processing import (
    DataPipeline, Dataset, PatientRecord, convert_to_numeric, extract_numeric_values,
    records_to_frame, round_half_up
)
from data_processing.records import RECORD_COLUMNS

CAMEL_ROW = {
    "id": "r1",
    "datasetId": "ds-1",
    "patientId": "PAT-00001",
    "age": 34,
    "sex": "male",
    "department": "ipd",
    "diagnosis": "Pneumonia",
    "icd10Code": "J18.9",
    "visitDate": "2024-04-02",
    "outcome": "Died",
    "lengthOfStay": 6,
}


class TestPatientRecord:

    def test_accepts_camel_case_payload(self):
        record = PatientRecord.model_validate(CAMEL_ROW)

        assert record.dataset_id == "ds-1"
        assert record.visit_date == date(2024, 4, 2)
        assert record.length_of_stay == 6
        assert record.model_dump(by_alias=True)["patientId"] == "PAT-00001"

    def test_records_are_immutable(self, make_record):
        record = make_record()
        with pytest.raises(ValidationError):
            record.age = 99

    @pytest.mark.parametrize("overrides", [
        {"age": 121},
        {"age": -1},
        {"sex": "other"},
        {"waiting_time": -5},
    ])
    def test_invalid_fields_are_rejected(self, make_record, overrides):
        with pytest.raises(ValidationError):
            make_record(**overrides)

    def test_dataset_metadata_defaults(self):
        dataset = Dataset(id="ds-1", name="OPD Q1", department="opd")

        assert dataset.file_type == "csv"
        assert dataset.row_count == 0
        assert dataset.is_processed is False


class TestRecordsToFrame:

    def test_mixed_record_styles_share_one_schema(self, make_record):
        df = records_to_frame([make_record(age=50), CAMEL_ROW, {"age": 7, "visit_date": "2024-05-01"}])

        assert list(df.columns[:len(RECORD_COLUMNS)]) == RECORD_COLUMNS
        assert list(df["age"]) == [50, 34, 7]
        assert df["visit_date"].dtype.kind == "M"
        assert df.loc[2, "diagnosis"] == "Unknown"

    def test_input_frame_is_not_mutated(self):
        raw = pd.DataFrame({"visitDate": ["2024-01-01", "garbage"], "diagnosis": ["N/A", "Malaria"]})
        snapshot = raw.copy()

        df = records_to_frame(raw)

        pd.testing.assert_frame_equal(raw, snapshot)
        assert list(df["diagnosis"]) == ["Unknown", "Malaria"]
        assert pd.isna(df.loc[1, "visit_date"])

    def test_mixed_iso_date_formats_are_all_parsed(self):
        rows = [
            {"visitDate": "2024-01-15"},
            {"visitDate": "2024-02-15T08:30:00"},
            {"visitDate": "2024-03-15T00:00:00.000Z"},
            {"visitDate": "2024-04-15T23:30:00-02:00"},
        ]

        df = records_to_frame(rows)

        assert df["visit_date"].dt.tz is None
        assert list(df["visit_date"]) == [
            pd.Timestamp("2024-01-15"),
            pd.Timestamp("2024-02-15 08:30"),
            pd.Timestamp("2024-03-15"),
            pd.Timestamp("2024-04-16 01:30"),
        ]

    def test_mixed_date_formats_keep_every_visit_in_the_trend(self):
        rows = [
            {"visitDate": "2024-01-15"},
            {"visitDate": "2024-02-15T08:30:00"},
            {"visitDate": "2024-03-15T00:00:00.000Z"},
        ]

        assert analyze_trend(rows, "monthly").periods == 3

    def test_unparseable_dates_are_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="data_processing.pipeline"):
            df = records_to_frame([{"visitDate": "2024-01-15"}, {"visitDate": "15/01/2024 noon"}])

        assert pd.isna(df.loc[1, "visit_date"])
        assert "1 value(s) in 'visit_date'" in caplog.text

    def test_empty_collection(self):
        df = records_to_frame([])

        assert df.empty
        assert set(RECORD_COLUMNS) <= set(df.columns)

    def test_numeric_extraction_applies_field_bounds(self):
        df = records_to_frame([{"age": 40}, {"age": 130}, {"age": "12"}, {"age": float("inf")}])

        assert extract_numeric_values(df, "age").tolist() == [40.0, 12.0]
        assert extract_numeric_values(df, "weight").size == 0


class TestHelpers:

    def test_convert_to_numeric_series(self):
        result = convert_to_numeric(pd.Series(["1", "x", None, True, 2.5, "N/A"]))

        assert result.iloc[0] == 1.0
        assert result.iloc[4] == 2.5
        assert result.iloc[[1, 2, 3, 5]].isna().all()

    def test_convert_to_numeric_scalar_with_default(self):
        assert convert_to_numeric("17") == 17.0
        assert convert_to_numeric("none", default_value=0) == 0
        assert np.isnan(convert_to_numeric(False))

    @pytest.mark.parametrize("value, places, expected", [
        (2.675, 2, 2.68),
        (2.5, 0, 3.0),
        (-2.5, 0, -3.0),
        (1.005, 2, 1.01),
        (33.333333, 2, 33.33),
        (1e30, 2, 1e30),
        (sys.float_info.max, 3, sys.float_info.max),
    ])
    def test_round_half_up(self, value, places, expected):
        assert round_half_up(value, places) == expected

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_round_half_up_rejects_non_finite(self, value):
        with pytest.raises(ValueError):
            round_half_up(value)


class TestDataPipeline:

    def test_rejects_non_dataframe_input(self):
        with pytest.raises(TypeError):
            DataPipeline([{"age": 1}])

    def test_rename_keeps_existing_target_column(self):
        raw = pd.DataFrame({"visit_date": ["2024-01-01"], "visitDate": ["1999-01-01"]})

        df = DataPipeline(raw).rename_columns({"visitDate": "visit_date"}).get_df()

        assert df.loc[0, "visit_date"] == "2024-01-01"
        assert "visitDate" in df.columns
