from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional


BUDDHIST_ERA_OFFSET = 543
PERIOD_MONTH_LABEL = "มกราคม"


@dataclass(frozen=True)
class FilterState:
    search_text: str = ""
    # Accepted and carried through, but not applied to the ranked output yet.
    selected_period: str = ""


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def normalize_filters(raw: Optional[dict]) -> FilterState:
    raw = raw or {}
    return FilterState(
        search_text=_as_text(raw.get("search_text")),
        selected_period=_as_text(raw.get("selected_period")),
    )


def period_options(today: Optional[date] = None) -> List[str]:
    """January of this year and last year, in the Buddhist calendar."""
    today = today or date.today()
    current_year = today.year + BUDDHIST_ERA_OFFSET
    return [f"{PERIOD_MONTH_LABEL} {year}" for year in (current_year, current_year - 1)]
