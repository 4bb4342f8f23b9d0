from __future__ import annotations

from typing import Dict, Tuple

MEASUREMENT_FIELDS: Dict[str, str] = {
    "Age": "Age (years)",
    "BMI": "BMI (kg/m²)",
    "Height": "Height (cm)",
    "Weight": "Weight (kg)",
    "TotalCholesterol": "Total Cholesterol (mmol/L)",
    "SystolicBP": "Systolic BP (mmHg)",
    "DiastolicBP": "Diastolic BP (mmHg)",
}

GROUP_FIELDS: Dict[str, str] = {
    "Gender": "Gender",
    "Race": "Race/Ethnicity",
    "Education": "Education",
    "SmokingStatus": "Current Smoking Status",
    "DiabetesStatus": "Diabetes Status",
    "BMICategory": "BMI Category (WHO standards)",
    "AgeDecade": "Age Group (by decade)",
}

# NHANES package column -> explorer column
SOURCE_COLUMNS: Dict[str, str] = {
    "ID": "ID",
    "Age": "Age",
    "AgeDecade": "AgeDecade",
    "Gender": "Gender",
    "Race1": "Race",
    "Education": "Education",
    "BMI": "BMI",
    "BMI_WHO": "BMICategory",
    "Height": "Height",
    "Weight": "Weight",
    "TotChol": "TotalCholesterol",
    "BPSysAve": "SystolicBP",
    "BPDiaAve": "DiastolicBP",
    "SmokeNow": "SmokingStatus",
    "Diabetes": "DiabetesStatus",
}

ROW_TABLE_COLUMNS: Tuple[str, ...] = ("ID", "Age", "Gender", "Race", "Education", "BMI", "DiabetesStatus")

AGE_BOUNDS: Tuple[float, float] = (0.0, 80.0)
MISSING_GROUP_LABEL = "missing"
HISTOGRAM_BINS = 30
NO_DATA_MESSAGE = "No data available for selected criteria"


class InvalidFieldKind(ValueError):
    """A field was used in a role (numeric measurement / categorical group) it does not have."""

    def __init__(self, field: str, expected: str) -> None:
        self.field = field
        self.expected = expected
        super().__init__(f"{field!r} is not a {expected} field")


def require_measurement_field(name: str) -> str:
    if name not in MEASUREMENT_FIELDS:
        raise InvalidFieldKind(name, "numeric measurement")
    return name


def require_group_field(name: str) -> str:
    if name not in GROUP_FIELDS:
        raise InvalidFieldKind(name, "categorical grouping")
    return name


def field_label(name: str) -> str:
    return MEASUREMENT_FIELDS.get(name) or GROUP_FIELDS.get(name) or name
