from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence

from core import pagination
from core.filters import FilterState
from core.metrics_summary import RankedEntry, aggregate, rank


@dataclass
class DashboardSession:
    """UI state for one dashboard session.

    Holds the fetched rows, the current filters and the visible-row cursor.
    Everything shown on screen is re-derived from these three on each call;
    changing a filter puts the cursor back at its initial value.
    """

    rows: Sequence[object] = field(default_factory=list)
    filters: FilterState = field(default_factory=FilterState)
    cursor: int = pagination.INITIAL_CURSOR

    def set_rows(self, rows: Sequence[object]) -> None:
        self.rows = rows
        self.reset_window()

    def set_search(self, text: Optional[str]) -> None:
        self._set_filters(replace(self.filters, search_text=text or ""))

    def set_period(self, period: Optional[str]) -> None:
        self._set_filters(replace(self.filters, selected_period=period or ""))

    def _set_filters(self, filters: FilterState) -> None:
        if filters != self.filters:
            self.filters = filters
            self.reset_window()

    def advance_window(self) -> int:
        self.cursor = pagination.advance(self.cursor)
        return self.cursor

    def reset_window(self) -> int:
        self.cursor = pagination.reset()
        return self.cursor

    def summary(self) -> Dict[str, int]:
        return aggregate(self.rows)

    def ranked(self) -> List[RankedEntry]:
        return rank(self.summary(), self.filters)

    def visible(self) -> List[RankedEntry]:
        return pagination.visible(self.ranked(), self.cursor)

    def has_more(self) -> bool:
        return pagination.has_more(self.ranked(), self.cursor)
