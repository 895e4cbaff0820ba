from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from core import pagination
from core.charts import to_vega_spec, top_categories_pie
from core.filters import FilterState


DIAGNOSIS_FIELD = "การวินิจฉัย"
SENTINEL_LABEL = "-"

RankedEntry = Tuple[str, int]


def normalize_label(value: object) -> str:
    if value is None or (pd.api.types.is_scalar(value) and pd.isna(value)):
        return SENTINEL_LABEL
    label = str(value).strip()
    return label or SENTINEL_LABEL


def _diagnosis_value(row: object, field: str) -> object:
    if isinstance(row, Mapping):
        return row.get(field)
    return None


def aggregate(rows: Iterable[object], *, field: str = DIAGNOSIS_FIELD) -> Dict[str, int]:
    """Count rows per trimmed diagnosis label.

    Rows with a missing or blank diagnosis are counted under ``SENTINEL_LABEL``;
    nothing here raises for malformed rows.
    """
    labels = pd.Series([normalize_label(_diagnosis_value(row, field)) for row in rows], dtype=object)
    if labels.empty:
        return {}
    counts = labels.value_counts(sort=False)
    return {str(label): int(count) for label, count in counts.items()}


def rank(summary: Optional[Mapping[str, int]], filters: Optional[FilterState] = None) -> List[RankedEntry]:
    """Filter and order an aggregate mapping.

    The sentinel is dropped, labels are matched against the search text as a
    case-insensitive literal substring, and entries are ordered by count
    descending with ties broken by label ascending.
    """
    filters = filters or FilterState()
    if not summary:
        return []

    df = pd.DataFrame({"diagnosis": list(summary.keys()), "count": [int(v) for v in summary.values()]})
    df = df[df["diagnosis"] != SENTINEL_LABEL]

    query = filters.search_text.lower()
    if query:
        df = df[df["diagnosis"].str.lower().str.contains(query, regex=False, na=False)]

    df = df.sort_values(["count", "diagnosis"], ascending=[False, True], kind="mergesort")
    return [(str(label), int(count)) for label, count in zip(df["diagnosis"], df["count"])]


def ranked_frame(ranked: List[RankedEntry]) -> pd.DataFrame:
    df = pd.DataFrame(ranked, columns=["diagnosis", "count"])
    df.insert(0, "rank", range(1, len(df) + 1))
    return df


def compute_summary(
    filters: FilterState,
    ctx: Dict[str, Any],
    *,
    cursor: int = pagination.INITIAL_CURSOR,
    top_n: int = 10,
) -> Dict[str, Any]:
    summary: Dict[str, int] = ctx.get("summary", {}) or {}
    ranked: Optional[List[RankedEntry]] = ctx.get("ranked")
    if ranked is None:
        ranked = rank(summary, filters)

    cursor = max(0, int(cursor))
    window = ranked_frame(pagination.visible(ranked, cursor))

    pie = top_categories_pie(ranked, top_n=top_n)
    loaded = bool(ctx.get("loaded", False))

    return {
        "filters": asdict(filters),
        "loaded": loaded,
        "error": ctx.get("error"),
        "kpis": {
            "total_rows": int(sum(summary.values())),
            "unspecified_rows": int(summary.get(SENTINEL_LABEL, 0)),
            "distinct_diagnoses": len([k for k in summary if k != SENTINEL_LABEL]),
            "matching_diagnoses": len(ranked),
        },
        "rows": window.to_dict(orient="records"),
        "cursor": cursor,
        "has_more": pagination.has_more(ranked, cursor),
        "no_results": loaded and not ranked,
        "charts": {"top_pie": to_vega_spec(pie) if pie is not None else None},
    }
