"""Core (UI-agnostic) dashboard logic.

This package contains:
- row loading (opensheet JSON -> list of records)
- filter normalization and period options
- diagnosis aggregation, ranking and pagination
- chart helpers (Altair -> Vega-Lite spec dict)
"""
