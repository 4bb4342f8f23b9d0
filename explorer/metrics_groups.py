from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from explorer.data import round_half_up
from explorer.fields import MISSING_GROUP_LABEL, require_group_field, require_measurement_field
from explorer.filters import Selection

STAT_COLUMNS = ["Count", "Mean", "Median", "Standard Deviation"]


@dataclass(frozen=True)
class GroupSummary:
    """Descriptive statistics of one group; None marks an undefined statistic."""

    group_value: Any
    count: int
    mean: Optional[float]
    median: Optional[float]
    std: Optional[float]


def _metric_value(value: Any) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


def aggregate(view: pd.DataFrame, measurement_field: str, group_field: str) -> List[GroupSummary]:
    """Group ``view`` by ``group_field`` and describe ``measurement_field`` per group.

    Groups keep their first-appearance order. Rows without a group value form the
    ``"missing"`` group; missing measurements are left out of mean, median and
    standard deviation (sample, n-1) but still count toward the group size.
    """
    require_measurement_field(measurement_field)
    require_group_field(group_field)
    if view.empty or not {measurement_field, group_field}.issubset(view.columns):
        return []

    groups = view[group_field].astype(object)
    groups = groups.where(view[group_field].notna(), MISSING_GROUP_LABEL)
    frame = pd.DataFrame(
        {"group": groups, "value": pd.to_numeric(view[measurement_field], errors="coerce")},
        index=view.index,
    )
    stats = frame.groupby("group", sort=False)["value"].agg(
        count="size",
        mean="mean",
        median="median",
        std="std",
    )
    return [
        GroupSummary(
            group_value=group,
            count=int(row["count"]),
            mean=_metric_value(row["mean"]),
            median=_metric_value(row["median"]),
            std=_metric_value(row["std"]),
        )
        for group, row in stats.iterrows()
    ]


def group_stats_table(summaries: Sequence[GroupSummary], group_field: str = "group_value") -> pd.DataFrame:
    rows = [
        {group_field: s.group_value, "Count": s.count, "Mean": s.mean, "Median": s.median, "Standard Deviation": s.std}
        for s in summaries
    ]
    return pd.DataFrame(rows, columns=[group_field, *STAT_COLUMNS])


def format_group_stats(table: pd.DataFrame, decimals: int = 2) -> pd.DataFrame:
    formatted = table.copy().astype(object)
    for c in ["Mean", "Median", "Standard Deviation"]:
        if c in formatted.columns:
            formatted[c] = formatted[c].apply(lambda v: round_half_up(v, decimals))
    return formatted


def compute_group_stats(selection: Selection, ctx: Dict[str, Any]) -> Dict[str, Any]:
    view: pd.DataFrame = ctx.get("filtered", pd.DataFrame())
    summaries = aggregate(view, selection.measurement_field, selection.group_field)
    table = format_group_stats(group_stats_table(summaries, selection.group_field))
    return {
        "selection": asdict(selection),
        "filtered_rows": int(ctx.get("filtered_rows", len(view))),
        "columns": list(table.columns),
        "rows": table.to_dict(orient="records"),
    }
