"""Tests for dataset loading and the pipeline context."""

from pathlib import Path

import pandas as pd
import pytest

from explorer.data import (
    DATA_PATH_ENV,
    DatasetError,
    get_dataset_path,
    load_dataset,
    prepare_context,
    read_survey_csv,
    round_half_up,
)
from explorer.fields import GROUP_FIELDS, MEASUREMENT_FIELDS
from explorer.filters import Selection


class TestLoadDataset:
    """Test reading and normalising the survey CSV."""

    def test_columns_renamed(self, survey_csv: Path) -> None:
        """NHANES column names are mapped to explorer names."""
        data_ctx = load_dataset(survey_csv)
        records = data_ctx["records"]
        assert data_ctx["row_count"] == 6
        assert data_ctx["source"] == str(survey_csv)
        for col in ["Race", "TotalCholesterol", "SystolicBP", "DiastolicBP", "BMICategory", "SmokingStatus", "DiabetesStatus"]:
            assert col in records.columns
        assert "Race1" not in records.columns

    def test_types_and_missing_values(self, survey_csv: Path) -> None:
        """Numerics are floats with NaN; categoricals are stripped strings with NA."""
        records = load_dataset(survey_csv)["records"]
        assert pd.api.types.is_numeric_dtype(records["BMI"])
        assert pd.isna(records.loc[2, "BMI"])
        assert records.loc[3, "Education"] == "Some College"
        assert pd.isna(records.loc[4, "Education"])
        assert pd.isna(records.loc[5, "Gender"])
        assert records.loc[0, "ID"] == "1"
        assert records.loc[0, "Gender"] == "female"

    def test_cached_per_file_version(self, survey_csv: Path) -> None:
        """Repeated loads return the same parsed table."""
        assert load_dataset(survey_csv) is load_dataset(survey_csv)

    def test_missing_file_fails_fast(self, tmp_path: Path) -> None:
        """An absent dataset raises DatasetError naming the path."""
        missing = tmp_path / "nope.csv"
        with pytest.raises(DatasetError, match="nope.csv"):
            load_dataset(missing)

    def test_read_survey_csv_directly(self, survey_csv: Path) -> None:
        """The parser works on a path without going through the cache."""
        records = read_survey_csv(survey_csv)
        assert len(records) == 6
        assert "TotalCholesterol" in records.columns

    def test_missing_file_checked_once(self, tmp_path: Path) -> None:
        """The not-found error comes from the loader, before any stat or parse."""
        missing = tmp_path / "gone.csv"
        with pytest.raises(DatasetError, match="Dataset file not found"):
            load_dataset(missing)

    def test_required_columns(self, tmp_path: Path) -> None:
        """A dataset without Age is rejected."""
        path = tmp_path / "no_age.csv"
        path.write_text("ID,BMI\n1,20\n", encoding="utf-8")
        with pytest.raises(DatasetError, match="Age"):
            load_dataset(path)

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch, survey_csv: Path) -> None:
        """NHANES_DATA_PATH points the loader at another file."""
        monkeypatch.setenv(DATA_PATH_ENV, str(survey_csv))
        assert get_dataset_path() == survey_csv
        assert load_dataset()["row_count"] == 6

    def test_bundled_dataset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The bundled extract carries every selectable field."""
        monkeypatch.delenv(DATA_PATH_ENV, raising=False)
        records = load_dataset()["records"]
        assert len(records) > 0
        for col in [*MEASUREMENT_FIELDS, *GROUP_FIELDS]:
            assert col in records.columns


class TestPrepareContext:
    """Test the per-selection pipeline context."""

    def test_accepts_raw_dict(self, survey_df: pd.DataFrame) -> None:
        """A raw dict is normalised before filtering."""
        ctx = prepare_context({"age_range": [0, 80], "exclude_missing": False}, {"records": survey_df})
        assert isinstance(ctx["selection"], Selection)
        assert ctx["dataset_rows"] == 7
        assert ctx["filtered_rows"] == 7

    def test_reports_dropped_rows(self, survey_df: pd.DataFrame) -> None:
        """Row counts show how much the filter removed."""
        ctx = prepare_context(Selection(), {"records": survey_df})
        assert ctx["dataset_rows"] == 7
        assert ctx["filtered_rows"] == 4
        assert len(ctx["filtered"]) == 4


@pytest.mark.parametrize(
    ("value", "ndigits", "expected"),
    [(1.005, 2, 1.01), (2.0, 2, 2.0), (22.344, 2, 22.34), (None, 2, None), (float("nan"), 2, None)],
)
def test_round_half_up(value, ndigits, expected) -> None:
    """Display rounding is half-up on the decimal representation."""
    assert round_half_up(value, ndigits) == expected
