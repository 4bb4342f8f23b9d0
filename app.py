import logging

import pandas as pd
import streamlit as st

from explorer.data import DatasetError, load_dataset, prepare_context
from explorer.fields import AGE_BOUNDS, GROUP_FIELDS, MEASUREMENT_FIELDS, NO_DATA_MESSAGE, InvalidFieldKind
from explorer.filters import DEFAULT_SELECTION, Selection
from explorer.metrics_charts import compute_charts
from explorer.metrics_groups import compute_group_stats
from explorer.metrics_summary import compute_summary
from explorer.metrics_table import PAGE_SIZE, row_table, search_rows

logging.basicConfig(level=logging.INFO)

NHANES_DOCS_URL = "https://cran.r-project.org/web/packages/NHANES/refman/NHANES.html"


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-subtitle {color: #6b7280;font-size: 1.0rem;margin-top: -8px;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin: 6px 0 12px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


def format_selection_summary(selection: Selection, dataset_rows: int, filtered_rows: int) -> str:
    chips = [
        f"Variable: {MEASUREMENT_FIELDS.get(selection.measurement_field, selection.measurement_field)}",
        f"Group: {GROUP_FIELDS.get(selection.group_field, selection.group_field)}",
        f"Age: {selection.age_min:.0f}–{selection.age_max:.0f}",
        f"Rows: {filtered_rows:,} of {dataset_rows:,}",
    ]
    if selection.exclude_missing:
        chips.append("Missing values removed")
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def render_summary_tab(selection: Selection, ctx: dict):
    st.subheader("Data Summary")
    summary = compute_summary(selection, ctx)
    st.code(summary["text"], language=None)

    st.subheader("Group Statistics")
    stats = compute_group_stats(selection, ctx)
    if not stats["rows"]:
        st.info(NO_DATA_MESSAGE)
        return
    # ~10 rows visible before scrolling
    st.dataframe(pd.DataFrame(stats["rows"], columns=stats["columns"]), hide_index=True, use_container_width=True, height=388)


def render_visualization_tab(selection: Selection, ctx: dict):
    charts = compute_charts(selection, ctx)

    st.subheader("Distribution Plot")
    dist = charts["distribution"]
    if dist["spec"] is None:
        st.info(NO_DATA_MESSAGE)
    else:
        st.vega_lite_chart(spec=dist["spec"], use_container_width=True)

    st.subheader("Box Plot by Group")
    box = charts["group_comparison"]
    if box["spec"] is None:
        st.info(NO_DATA_MESSAGE)
    else:
        st.vega_lite_chart(spec=box["spec"], use_container_width=True)


def render_data_table_tab(selection: Selection, ctx: dict):
    st.subheader("Filtered Data")
    table = row_table(ctx["filtered"], selection.measurement_field, selection.group_field)
    if table.empty:
        st.info(NO_DATA_MESSAGE)
        return

    q = st.text_input("Search", "", key="data_table_search")
    matched = search_rows(table, q)
    pages = max(1, -(-len(matched) // PAGE_SIZE))
    page = int(st.number_input("Page", min_value=1, max_value=pages, value=1, step=1))
    start = (page - 1) * PAGE_SIZE
    st.dataframe(matched.iloc[start : start + PAGE_SIZE], hide_index=True, use_container_width=True)
    st.caption(f"Showing {min(len(matched), start + 1)}–{min(len(matched), start + PAGE_SIZE)} of {len(matched):,} rows ({len(table):,} total)")
    st.download_button(
        "Export CSV",
        data=matched.to_csv(index=False).encode("utf-8"),
        file_name="nhanes_filtered.csv",
        mime="text/csv",
    )


# ---------- UI setup ----------
st.set_page_config(page_title="NHANES Data Explorer", layout="wide")
inject_base_styles()
st.title("NHANES Data Explorer: National Health and Nutrition Examination Survey")
st.markdown(
    f"<div class='app-subtitle'>Interactive analysis of US population health data (2009-2012) · "
    f"<a href='{NHANES_DOCS_URL}' target='_blank'>NHANES Documentation</a></div>",
    unsafe_allow_html=True,
)

try:
    data_ctx = load_dataset()
except DatasetError as exc:
    st.error(f"Could not load the NHANES dataset: {exc}")
    st.stop()

# ----- Sidebar: selection -----
measurement_options = list(MEASUREMENT_FIELDS)
group_options = list(GROUP_FIELDS)
with st.sidebar:
    measurement_field = st.selectbox(
        "Select Variable:",
        options=measurement_options,
        index=measurement_options.index(DEFAULT_SELECTION.measurement_field),
        format_func=MEASUREMENT_FIELDS.get,
    )
    group_field = st.selectbox(
        "Group By:",
        options=group_options,
        index=group_options.index(DEFAULT_SELECTION.group_field),
        format_func=GROUP_FIELDS.get,
    )
    exclude_missing = st.checkbox("Remove Missing Values", value=DEFAULT_SELECTION.exclude_missing)
    age_min, age_max = st.slider(
        "Age Range:",
        min_value=int(AGE_BOUNDS[0]),
        max_value=int(AGE_BOUNDS[1]),
        value=(int(DEFAULT_SELECTION.age_min), int(DEFAULT_SELECTION.age_max)),
    )

selection = Selection(
    measurement_field=measurement_field,
    group_field=group_field,
    exclude_missing=exclude_missing,
    age_min=float(age_min),
    age_max=float(age_max),
)
ctx = prepare_context(selection, data_ctx)
st.markdown(
    f"<div class='chip-row'>{format_selection_summary(selection, ctx['dataset_rows'], ctx['filtered_rows'])}</div>",
    unsafe_allow_html=True,
)

summary_tab, viz_tab, table_tab = st.tabs(["Summary", "Visualization", "Data Table"])
try:
    with summary_tab:
        render_summary_tab(selection, ctx)
    with viz_tab:
        render_visualization_tab(selection, ctx)
    with table_tab:
        render_data_table_tab(selection, ctx)
except InvalidFieldKind as exc:
    st.error(str(exc))
