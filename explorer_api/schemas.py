from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class SelectionModel(BaseModel):
    measurement_field: str = "BMI"
    group_field: str = "Gender"
    exclude_missing: bool = True
    age_min: float = 18.0
    age_max: float = 65.0
    age_range: Optional[List[float]] = None


class FieldOption(BaseModel):
    value: str
    label: str


class MetaFieldsResponse(BaseModel):
    measurement_fields: List[FieldOption]
    group_fields: List[FieldOption]
    age_bounds: List[float]
    defaults: SelectionModel
    dataset_rows: int
