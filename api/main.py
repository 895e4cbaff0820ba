from __future__ import annotations

import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

from api.schemas import FilterStateModel, MetaPeriodsResponse, RefreshResponse
from core import pagination
from core.data import load_dashboard_data, prepare_context, refresh_dashboard_data
from core.filters import FilterState, normalize_filters, period_options
from core.metrics_summary import compute_summary, ranked_frame


app = FastAPI(title="Diagnosis Summary API", version="0.1.0")
logger = logging.getLogger(__name__)


def _filters_from_model(model: FilterStateModel) -> FilterState:
    return normalize_filters(model.model_dump())


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
            },
        )
    )


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/health")
def health():
    try:
        data_ctx = load_dashboard_data()
        return {"status": "ok", "loaded": bool(data_ctx.get("loaded", False))}
    except Exception as exc:
        logger.exception("health failed")
        return _error(exc)


@app.get("/meta/periods", response_model=MetaPeriodsResponse)
def meta_periods():
    try:
        return {"periods": period_options()}
    except Exception as exc:
        logger.exception("meta_periods failed")
        return _error(exc)


@app.post("/summary")
def summary(
    filters: FilterStateModel,
    cursor: int = Query(default=pagination.INITIAL_CURSOR, ge=0),
    top_n: int = Query(default=10, ge=0, le=50),
):
    try:
        data_ctx = load_dashboard_data()
        f = _filters_from_model(filters)
        ctx = prepare_context(f, data_ctx)
        return _json(compute_summary(f, ctx, cursor=cursor, top_n=top_n))
    except Exception as exc:
        logger.exception("summary failed")
        return _error(exc)


@app.post("/refresh", response_model=RefreshResponse)
def refresh():
    try:
        data_ctx = refresh_dashboard_data()
        return {
            "loaded": bool(data_ctx.get("loaded", False)),
            "rows": len(data_ctx.get("rows", []) or []),
            "error": data_ctx.get("error"),
        }
    except Exception as exc:
        logger.exception("refresh failed")
        return _error(exc)


@app.post("/export/summary")
def export_summary(filters: FilterStateModel):
    data_ctx = load_dashboard_data()
    f = _filters_from_model(filters)
    ctx = prepare_context(f, data_ctx)
    export_df: pd.DataFrame = ranked_frame(ctx["ranked"])
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(
        content=csv_bytes,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=diagnosis_summary.csv"},
    )
