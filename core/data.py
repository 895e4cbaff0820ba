from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Dict, List, Optional
from urllib.parse import quote

import requests

from core.filters import FilterState, normalize_filters
from core.metrics_summary import DIAGNOSIS_FIELD, aggregate, rank


logger = logging.getLogger(__name__)

SHEET_ID = "1zHDxblHaHrcCrmTteVhij-3yfrl7bM9kYk-8dGiJuxE"
SHEET_NAME = "ตุลาคม 67"
DEFAULT_SOURCE_URL = f"https://opensheet.elk.sh/{SHEET_ID}/{quote(SHEET_NAME)}"
SOURCE_URL = os.getenv("DIAGNOSIS_SOURCE_URL", "").strip() or DEFAULT_SOURCE_URL

FETCH_TIMEOUT = 30


class SourceError(Exception):
    """The row source could not be fetched or did not return a JSON array."""


def fetch_rows(url: Optional[str] = None, *, timeout: Optional[float] = None) -> List[dict]:
    url = url or SOURCE_URL
    try:
        resp = requests.get(url, timeout=timeout or FETCH_TIMEOUT)
        resp.raise_for_status()
        payload = resp.json()
    except requests.JSONDecodeError as exc:
        # also a RequestException, so it has to be caught first
        raise SourceError(f"response from {url} is not JSON") from exc
    except requests.RequestException as exc:
        raise SourceError(f"fetch failed for {url}: {exc}") from exc

    if not isinstance(payload, list):
        raise SourceError(f"expected a JSON array from {url}, got {type(payload).__name__}")
    # Anything that is not a record is kept as an empty row so it still counts.
    return [row if isinstance(row, dict) else {} for row in payload]


# ---------------- Public API (Streamlit + FastAPI use) ----------------
@lru_cache(maxsize=4)
def _load_dashboard_data_cached(url: str) -> Dict[str, object]:
    try:
        rows = fetch_rows(url)
    except SourceError as exc:
        logger.exception("loading rows failed")
        return {"source_url": url, "loaded": False, "error": str(exc), "rows": [], "summary": {}}

    summary = aggregate(rows, field=DIAGNOSIS_FIELD)
    logger.info("loaded %d rows (%d labels) from %s", len(rows), len(summary), url)
    return {"source_url": url, "loaded": True, "error": None, "rows": rows, "summary": summary}


def load_dashboard_data(url: Optional[str] = None) -> Dict[str, object]:
    return _load_dashboard_data_cached(url or SOURCE_URL)


def refresh_dashboard_data(url: Optional[str] = None) -> Dict[str, object]:
    _load_dashboard_data_cached.cache_clear()
    return load_dashboard_data(url)


def prepare_context(filters: dict | FilterState, data_ctx: Dict[str, object]) -> Dict[str, object]:
    filt = filters if isinstance(filters, FilterState) else normalize_filters(filters)
    summary: Dict[str, int] = data_ctx.get("summary", {}) or {}
    return {
        "filters": filt,
        "loaded": bool(data_ctx.get("loaded", False)),
        "error": data_ctx.get("error"),
        "summary": summary,
        "ranked": rank(summary, filt),
    }
