from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import altair as alt
import pandas as pd

from explorer.charts import finish_chart
from explorer.fields import (
    HISTOGRAM_BINS,
    MISSING_GROUP_LABEL,
    field_label,
    require_group_field,
    require_measurement_field,
)
from explorer.filters import Selection


def distribution_spec(view: pd.DataFrame, field: str, *, bins: int = HISTOGRAM_BINS) -> Dict[str, Any]:
    title = f"Distribution of {field}"
    values = pd.Series(dtype=float)
    if not view.empty and field in view.columns:
        values = pd.to_numeric(view[field], errors="coerce").dropna()

    payload: Dict[str, Any] = {
        "field": field,
        "title": title,
        "values": [float(v) for v in values],
        "bins": bins,
        "spec": None,
    }
    if values.empty:
        return payload

    hist = (
        alt.Chart(pd.DataFrame({field: values.astype(float).to_numpy()}))
        .mark_bar(color="steelblue", opacity=0.7)
        .encode(
            x=alt.X(f"{field}:Q", bin=alt.Bin(maxbins=bins), title=field_label(field)),
            y=alt.Y("count():Q", title="Count"),
            tooltip=[alt.Tooltip("count():Q", title="Count")],
        )
    )
    payload["spec"] = finish_chart(hist, title)
    return payload


def group_comparison_spec(view: pd.DataFrame, measurement_field: str, group_field: str) -> Dict[str, Any]:
    require_measurement_field(measurement_field)
    require_group_field(group_field)
    title = f"{measurement_field} by {group_field}"
    payload: Dict[str, Any] = {
        "measurement_field": measurement_field,
        "group_field": group_field,
        "title": title,
        "groups": [],
        "values": [],
        "spec": None,
    }
    if view.empty or not {measurement_field, group_field}.issubset(view.columns):
        return payload

    groups = view[group_field].astype(object).where(view[group_field].notna(), MISSING_GROUP_LABEL)
    box_df = pd.DataFrame(
        {"group": groups.astype(str), "value": pd.to_numeric(view[measurement_field], errors="coerce")}
    ).dropna(subset=["value"])
    if box_df.empty:
        return payload

    order = list(pd.unique(box_df["group"]))
    box = (
        alt.Chart(box_df)
        .mark_boxplot(color="lightblue")
        .encode(
            x=alt.X("group:N", title=field_label(group_field), sort=order, axis=alt.Axis(labelAngle=-45)),
            y=alt.Y("value:Q", title=field_label(measurement_field)),
        )
    )
    payload["groups"] = order
    payload["values"] = box_df.to_dict(orient="records")
    payload["spec"] = finish_chart(box, title)
    return payload


def compute_charts(selection: Selection, ctx: Dict[str, Any]) -> Dict[str, Any]:
    view: pd.DataFrame = ctx.get("filtered", pd.DataFrame())
    return {
        "selection": asdict(selection),
        "distribution": distribution_spec(view, selection.measurement_field),
        "group_comparison": group_comparison_spec(view, selection.measurement_field, selection.group_field),
    }
