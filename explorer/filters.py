from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import pandas as pd

from explorer.fields import AGE_BOUNDS


@dataclass(frozen=True)
class Selection:
    measurement_field: str = "BMI"
    group_field: str = "Gender"
    exclude_missing: bool = True
    age_min: float = 18.0
    age_max: float = 65.0

    @property
    def age_range(self) -> Tuple[float, float]:
        return (self.age_min, self.age_max)


DEFAULT_SELECTION = Selection()


def _as_float(value: object, default: float) -> float:
    if value is None:
        return default
    try:
        out = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    if pd.isna(out):
        return default
    return out


def _clamp_age(value: float) -> float:
    lo, hi = AGE_BOUNDS
    return max(lo, min(hi, value))


def _as_field(value: object, default: str) -> str:
    s = str(value).strip() if value is not None else ""
    return s or default


def normalize_selection(raw: Optional[dict]) -> Selection:
    raw = raw or {}

    age_min = raw.get("age_min")
    age_max = raw.get("age_max")
    age_range = raw.get("age_range")
    if isinstance(age_range, (list, tuple)) and len(age_range) == 2:
        age_min, age_max = age_range

    # An inverted range is kept as-is; filtering it simply yields no rows.
    return Selection(
        measurement_field=_as_field(raw.get("measurement_field"), DEFAULT_SELECTION.measurement_field),
        group_field=_as_field(raw.get("group_field"), DEFAULT_SELECTION.group_field),
        exclude_missing=bool(raw.get("exclude_missing", DEFAULT_SELECTION.exclude_missing)),
        age_min=_clamp_age(_as_float(age_min, DEFAULT_SELECTION.age_min)),
        age_max=_clamp_age(_as_float(age_max, DEFAULT_SELECTION.age_max)),
    )


def filter_records(records: pd.DataFrame, selection: Selection) -> pd.DataFrame:
    """Keep rows with age_min <= Age <= age_max and, when exclude_missing is set,
    a value in both the measurement and grouping columns.

    Row order follows ``records``; the input frame is never modified.
    """
    if records.empty or "Age" not in records.columns:
        return records.iloc[0:0].copy()

    age = pd.to_numeric(records["Age"], errors="coerce")
    mask = (age >= selection.age_min) & (age <= selection.age_max)

    if selection.exclude_missing:
        for col in dict.fromkeys([selection.measurement_field, selection.group_field]):
            if col in records.columns:
                mask &= records[col].notna()

    return records[mask].copy()
