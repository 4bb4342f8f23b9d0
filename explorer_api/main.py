from __future__ import annotations

from dataclasses import asdict
import logging
import math
from typing import Any, Callable, Dict

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from fastapi.encoders import jsonable_encoder

from explorer.data import load_dataset, prepare_context
from explorer.fields import AGE_BOUNDS, GROUP_FIELDS, MEASUREMENT_FIELDS, InvalidFieldKind
from explorer.filters import DEFAULT_SELECTION, Selection, normalize_selection
from explorer.metrics_charts import compute_charts
from explorer.metrics_groups import aggregate, compute_group_stats, format_group_stats, group_stats_table
from explorer.metrics_summary import compute_summary
from explorer.metrics_table import compute_data_table, row_table
from explorer_api.schemas import FieldOption, MetaFieldsResponse, SelectionModel


app = FastAPI(title="NHANES Explorer API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _selection_from_model(model: SelectionModel) -> Selection:
    return normalize_selection(model.model_dump())


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


def _run(name: str, model: SelectionModel, compute: Callable[[Selection, Dict[str, Any]], Dict[str, Any]]) -> JSONResponse:
    try:
        data_ctx = load_dataset()
        selection = _selection_from_model(model)
        ctx = prepare_context(selection, data_ctx)
        return _json(compute(selection, ctx))
    except InvalidFieldKind as exc:
        return _error(400, exc)
    except Exception as exc:
        logger.exception("%s failed", name)
        return _error(500, exc)


@app.get("/meta/fields")
def meta_fields():
    try:
        data_ctx = load_dataset()
        payload = MetaFieldsResponse(
            measurement_fields=[FieldOption(value=k, label=v) for k, v in MEASUREMENT_FIELDS.items()],
            group_fields=[FieldOption(value=k, label=v) for k, v in GROUP_FIELDS.items()],
            age_bounds=list(AGE_BOUNDS),
            defaults=SelectionModel(**asdict(DEFAULT_SELECTION)),
            dataset_rows=int(data_ctx.get("row_count", 0)),
        )
        return _json(payload.model_dump())
    except Exception as exc:
        logger.exception("meta_fields failed")
        return _error(500, exc)


@app.post("/summary")
def summary(selection: SelectionModel):
    return _run("summary", selection, compute_summary)


@app.post("/group-stats")
def group_stats(selection: SelectionModel):
    return _run("group_stats", selection, compute_group_stats)


@app.post("/charts")
def charts(selection: SelectionModel):
    return _run("charts", selection, compute_charts)


@app.post("/data-table")
def data_table(
    selection: SelectionModel,
    q: str = Query(default=""),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=15, ge=1, le=500),
):
    return _run(
        "data_table",
        selection,
        lambda sel, ctx: compute_data_table(sel, ctx, q=q, page=page, page_size=page_size),
    )


@app.post("/export/{page}")
def export_page(page: str, selection: SelectionModel):
    if page not in {"group-stats", "data-table"}:
        return JSONResponse(status_code=404, content={"error": f"Unknown export page: {page}", "type": "NotFound"})
    try:
        data_ctx = load_dataset()
        sel = _selection_from_model(selection)
        view = prepare_context(sel, data_ctx)["filtered"]
        if page == "group-stats":
            summaries = aggregate(view, sel.measurement_field, sel.group_field)
            export_df = format_group_stats(group_stats_table(summaries, sel.group_field))
        else:
            export_df = row_table(view, sel.measurement_field, sel.group_field)
    except InvalidFieldKind as exc:
        return _error(400, exc)
    except Exception as exc:
        logger.exception("export %s failed", page)
        return _error(500, exc)

    filename = f"{page}.csv"
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
