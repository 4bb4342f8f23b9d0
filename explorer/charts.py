from __future__ import annotations

from typing import Any, Dict

import altair as alt

alt.data_transformers.disable_max_rows()

CHART_HEIGHT = 400


def finish_chart(chart: alt.Chart, title: str, *, height: int = CHART_HEIGHT) -> Dict[str, Any]:
    """Apply the explorer's shared title/height and return the Vega-Lite spec dict."""
    return chart.properties(title=title, height=height).to_dict()
