from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class FilterStateModel(BaseModel):
    search_text: str = ""
    selected_period: str = ""


class MetaPeriodsResponse(BaseModel):
    periods: List[str]


class RefreshResponse(BaseModel):
    loaded: bool
    rows: int
    error: Optional[str] = None
