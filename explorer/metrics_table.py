from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

import pandas as pd

from explorer.fields import ROW_TABLE_COLUMNS
from explorer.filters import Selection

PAGE_SIZE = 15


def projected_columns(measurement_field: str, group_field: str) -> List[str]:
    return list(dict.fromkeys([*ROW_TABLE_COLUMNS, measurement_field, group_field]))


def row_table(view: pd.DataFrame, measurement_field: str, group_field: str) -> pd.DataFrame:
    cols = [c for c in projected_columns(measurement_field, group_field) if c in view.columns]
    return view[cols].drop_duplicates().reset_index(drop=True)


def search_rows(table: pd.DataFrame, query: str) -> pd.DataFrame:
    q = (query or "").strip().lower()
    if not q or table.empty:
        return table
    mask = pd.Series(False, index=table.index)
    for col in table.columns:
        mask |= table[col].astype("string").str.lower().str.contains(q, regex=False, na=False)
    return table[mask]


def compute_data_table(
    selection: Selection,
    ctx: Dict[str, Any],
    *,
    q: str = "",
    page: int = 1,
    page_size: int = PAGE_SIZE,
) -> Dict[str, Any]:
    view: pd.DataFrame = ctx.get("filtered", pd.DataFrame())
    table = row_table(view, selection.measurement_field, selection.group_field)
    matched = search_rows(table, q)

    page_size = max(1, int(page_size))
    pages = max(1, -(-len(matched) // page_size))
    page = max(1, min(pages, int(page)))
    start = (page - 1) * page_size
    return {
        "selection": asdict(selection),
        "columns": list(table.columns),
        "total_rows": int(len(table)),
        "matched_rows": int(len(matched)),
        "page": page,
        "pages": pages,
        "page_size": page_size,
        "rows": matched.iloc[start : start + page_size].to_dict(orient="records"),
    }
