"""Core (UI-agnostic) data grid logic.

This package contains:
- record loading (JSON / pandas -> indexed DataFrame)
- fuzzy ranking and per-column filters
- composite sorting with rank-aware comparators
- faceted statistics (unique values, min/max)
- pagination and the page-number window
- the grid engine that threads a single ViewState through all of the above
"""
