from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

import pandas as pd

from explorer.fields import NO_DATA_MESSAGE
from explorer.filters import Selection

SUMMARY_LABELS = [
    ("min", "Min."),
    ("q1", "1st Qu."),
    ("median", "Median"),
    ("mean", "Mean"),
    ("q3", "3rd Qu."),
    ("max", "Max."),
]


def summary_stats(view: pd.DataFrame, field: str) -> Optional[Dict[str, Any]]:
    if view.empty or field not in view.columns:
        return None
    values = pd.to_numeric(view[field], errors="coerce")
    present = values.dropna()
    if present.empty:
        return None
    return {
        "min": float(present.min()),
        "q1": float(present.quantile(0.25)),
        "median": float(present.median()),
        "mean": float(present.mean()),
        "q3": float(present.quantile(0.75)),
        "max": float(present.max()),
        "n": int(len(present)),
        "missing": int(values.isna().sum()),
    }


def format_summary(stats: Dict[str, Any], width: int = 8) -> str:
    """Render the summary as a header line over a value line, both right-aligned."""
    headers = [label for _, label in SUMMARY_LABELS]
    cells = [f"{stats[key]:.2f}" for key, _ in SUMMARY_LABELS]
    if stats.get("missing"):
        headers.append("NA's")
        cells.append(str(stats["missing"]))
    width = max(width, *(len(s) + 1 for s in headers + cells))
    return "\n".join(
        [
            "".join(h.rjust(width) for h in headers),
            "".join(c.rjust(width) for c in cells),
        ]
    )


def summary_text(view: pd.DataFrame, field: str) -> str:
    stats = summary_stats(view, field)
    if stats is None:
        return NO_DATA_MESSAGE
    return format_summary(stats)


def compute_summary(selection: Selection, ctx: Dict[str, Any]) -> Dict[str, Any]:
    view: pd.DataFrame = ctx.get("filtered", pd.DataFrame())
    stats = summary_stats(view, selection.measurement_field)
    return {
        "selection": asdict(selection),
        "dataset_rows": int(ctx.get("dataset_rows", 0)),
        "filtered_rows": int(ctx.get("filtered_rows", len(view))),
        "stats": stats,
        "text": format_summary(stats) if stats is not None else NO_DATA_MESSAGE,
    }
