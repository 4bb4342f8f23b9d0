from __future__ import annotations

import logging
import os
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

import pandas as pd

from explorer.fields import GROUP_FIELDS, MEASUREMENT_FIELDS, SOURCE_COLUMNS
from explorer.filters import Selection, filter_records, normalize_selection

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
DATASET_PATH = DATA_DIR / "nhanes.csv"
DATA_PATH_ENV = "NHANES_DATA_PATH"

REQUIRED_COLUMNS = ("ID", "Age")
NA_TOKENS = ["NA", "N/A", ""]


class DatasetError(RuntimeError):
    pass


def get_dataset_path() -> Path:
    override = os.environ.get(DATA_PATH_ENV, "").strip()
    return Path(override) if override else DATASET_PATH


def file_signature(path: Path) -> Tuple[str, float]:
    return (str(path), path.stat().st_mtime)


def numericize(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def coerce_str_safe(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            series = df[col].astype("string").str.strip()
            series = series.replace({"nan": pd.NA, "None": pd.NA, "": pd.NA})
            df[col] = series
    return df


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def read_survey_csv(path: Path) -> pd.DataFrame:
    try:
        df = pd.read_csv(path, na_values=NA_TOKENS, keep_default_na=True)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise DatasetError(f"Dataset file could not be parsed: {path}: {exc}") from exc

    df = df.rename(columns={k: v for k, v in SOURCE_COLUMNS.items() if k != v})
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise DatasetError(f"Dataset {path} is missing required columns: {', '.join(missing)}")

    df = numericize(df, ["Age", *MEASUREMENT_FIELDS])
    df = coerce_str_safe(df, ["ID", *GROUP_FIELDS])
    return df.reset_index(drop=True)


@lru_cache(maxsize=4)
def _load_dataset_cached(signature: Tuple[str, float]) -> Dict[str, object]:
    path = Path(signature[0])
    records = read_survey_csv(path)
    logger.info("Loaded %d survey records from %s", len(records), path)
    return {"source": str(path), "records": records, "row_count": int(len(records))}


def load_dataset(path: Optional[Path] = None) -> Dict[str, object]:
    """Return the survey table, parsed once per file version.

    The cached frame is shared; callers copy before changing it.
    """
    path = Path(path) if path is not None else get_dataset_path()
    if not path.is_file():
        raise DatasetError(f"Dataset file not found: {path}")
    return _load_dataset_cached(file_signature(path))


def prepare_context(selection: dict | Selection, data_ctx: Dict[str, object]) -> Dict[str, object]:
    records: pd.DataFrame = data_ctx.get("records", pd.DataFrame())
    sel = selection if isinstance(selection, Selection) else normalize_selection(selection)
    filtered = filter_records(records, sel)
    return {
        "selection": sel,
        "filtered": filtered,
        "dataset_rows": int(len(records)),
        "filtered_rows": int(len(filtered)),
    }
