from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def top_categories_pie(ranked: Sequence[Tuple[str, int]], *, top_n: int = 10) -> Optional[alt.Chart]:
    top = list(ranked[: max(0, int(top_n))])
    if not top:
        return None
    df = pd.DataFrame(top, columns=["diagnosis", "count"])
    return (
        alt.Chart(df)
        .mark_arc(innerRadius=40)
        .encode(
            theta=alt.Theta("count:Q", stack=True),
            color=alt.Color("diagnosis:N", title="การวินิจฉัย"),
            order=alt.Order("count:Q", sort="descending"),
            tooltip=[
                alt.Tooltip("diagnosis:N", title="การวินิจฉัย"),
                alt.Tooltip("count:Q", title="จำนวน", format=","),
            ],
        )
    )
