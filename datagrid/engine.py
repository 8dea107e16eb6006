from __future__ import annotations

import logging
from dataclasses import asdict, replace
from typing import Any, Dict, List, Optional, Sequence, Union

import pandas as pd

from datagrid.data import ColumnDef, GridData
from datagrid.errors import InvalidConfiguration
from datagrid.facets import Facet, build_facet
from datagrid.filters import FilterResult, filter_rows, normalize_filter_value, pre_filter
from datagrid.pagination import check_page_size, clamp_page_index, page_count, page_window, paginate
from datagrid.sorting import SortKey, sort_rows
from datagrid.state import (
    DEFAULT_WINDOW_RADIUS,
    ViewState,
    default_view_state,
    normalize_sort,
    state_to_dict,
    visible_columns,
)


logger = logging.getLogger(__name__)


def filtered_rows(data: GridData, state: ViewState) -> FilterResult:
    return filter_rows(data, state.filters, state.global_filter)


def sorted_rows(data: GridData, state: ViewState) -> pd.DataFrame:
    result = filtered_rows(data, state)
    return sort_rows(result.frame, state.sort, data.column_map, result.ranks)


def facet_rows(data: GridData, state: ViewState, column: ColumnDef) -> pd.DataFrame:
    if column.facet_scope == "post_filter":
        return filtered_rows(data, state).frame
    return pre_filter(data, state.filters, column.id, state.global_filter)


def compute_facet(data: GridData, state: ViewState, column_id: str) -> Facet:
    column = data.column(column_id)
    return build_facet(facet_rows(data, state, column), column)


def page_records(frame: pd.DataFrame, columns: Sequence[ColumnDef]) -> List[Dict[str, Any]]:
    return frame[[c.id for c in columns]].to_dict(orient="records")


def compute_grid(state: ViewState, data: GridData, *, radius: int = DEFAULT_WINDOW_RADIUS) -> Dict[str, Any]:
    """Everything a grid view needs for one render, JSON-serializable."""
    rows = sorted_rows(data, state)
    pages = page_count(len(rows), state.page_size)
    page_index = clamp_page_index(state.page_index, len(rows), state.page_size)
    page = paginate(rows, page_index, state.page_size)
    shown = visible_columns(data.columns, state)

    facets = {}
    for column in data.columns:
        if column.filterable:
            facets[column.id] = asdict(compute_facet(data, state, column.id))

    return {
        "state": state_to_dict(replace(state, page_index=page_index)),
        "columns": [{"id": c.id, "header": c.label, "kind": c.kind} for c in shown],
        "total_rows": int(len(data.frame)),
        "filtered_rows": int(len(rows)),
        "page_count": pages,
        "page_window": page_window(page_index + 1, pages, radius),
        "row_ids": [int(i) for i in page.index],
        "rows": page_records(page, shown),
        "facets": facets,
    }


class GridEngine:
    """Holds the records and the one mutable ViewState; every query recomputes."""

    def __init__(self, data: GridData, state: Optional[ViewState] = None):
        self.data = data
        self.state = state if state is not None else default_view_state(data.columns)

    @property
    def columns(self) -> List[ColumnDef]:
        return list(self.data.columns)

    def _update(self, **changes: Any) -> ViewState:
        self.state = replace(self.state, **changes)
        return self.state

    # ---------------- mutations ----------------
    def set_state(self, state: ViewState) -> ViewState:
        self.state = state
        return state

    def reset(self) -> ViewState:
        self.state = default_view_state(self.data.columns, page_size=self.state.page_size)
        return self.state

    def set_filter(self, column_id: str, value: object) -> ViewState:
        column = self.data.column(column_id)
        normalized = normalize_filter_value(column, value)
        filters = dict(self.state.filters)
        if normalized.is_empty:
            filters.pop(column_id, None)
        else:
            filters[column_id] = normalized
        return self._update(filters=filters, page_index=0)

    def clear_filter(self, column_id: str) -> ViewState:
        self.data.column(column_id)
        filters = {k: v for k, v in self.state.filters.items() if k != column_id}
        return self._update(filters=filters, page_index=0)

    def set_global_filter(self, query: str) -> ViewState:
        return self._update(global_filter=(query or "").strip(), page_index=0)

    def set_sort(self, sort: Sequence[Union[SortKey, Dict[str, Any], Sequence[str]]]) -> ViewState:
        keys = normalize_sort(sort)
        columns = self.data.column_map
        for key in keys:
            column = columns.get(key.column_id)
            if column is not None and not column.sortable:
                raise InvalidConfiguration(f"Column {key.column_id!r} is not sortable")
        return self._update(sort=keys, page_index=0)

    def toggle_sort(self, column_id: str, desc: bool = False) -> ViewState:
        """Sort by a single column, like a header menu's Ascending/Descending items."""
        return self.set_sort([SortKey(column_id, "desc" if desc else "asc")])

    def set_page(self, page_index: int) -> ViewState:
        total = self.get_total_filtered_count()
        return self._update(page_index=clamp_page_index(page_index, total, self.state.page_size))

    def set_page_size(self, page_size: int) -> ViewState:
        check_page_size(page_size)
        top_row = self.state.page_index * self.state.page_size
        return self._update(page_size=page_size, page_index=top_row // page_size)

    def next_page(self) -> ViewState:
        if not self.can_next_page():
            return self.state
        return self._update(page_index=self._current_page_index() + 1)

    def previous_page(self) -> ViewState:
        if not self.can_previous_page():
            return self.state
        return self._update(page_index=self._current_page_index() - 1)

    def set_column_visibility(self, column_id: str, visible: bool) -> ViewState:
        self.data.column(column_id)
        visibility = dict(self.state.column_visibility)
        visibility[column_id] = bool(visible)
        return self._update(column_visibility=visibility)

    # ---------------- queries ----------------
    def get_sorted_rows(self) -> pd.DataFrame:
        return sorted_rows(self.data, self.state)

    def get_total_filtered_count(self) -> int:
        return int(len(filtered_rows(self.data, self.state).frame))

    def get_page_count(self) -> int:
        return page_count(self.get_total_filtered_count(), self.state.page_size)

    def _current_page_index(self) -> int:
        return clamp_page_index(self.state.page_index, self.get_total_filtered_count(), self.state.page_size)

    def can_previous_page(self) -> bool:
        return self._current_page_index() > 0

    def can_next_page(self) -> bool:
        return self._current_page_index() < self.get_page_count() - 1

    def get_visible_columns(self) -> List[ColumnDef]:
        return visible_columns(self.data.columns, self.state)

    def get_page(self) -> List[Dict[str, Any]]:
        rows = self.get_sorted_rows()
        page = paginate(rows, self.state.page_index, self.state.page_size)
        logger.debug("page %d: %d of %d rows", self.state.page_index, len(page), len(rows))
        return page_records(page, self.get_visible_columns())

    def get_facet(self, column_id: str) -> Union[List[Any], Optional[tuple]]:
        """Distinct values for text columns, ``(min, max)`` or ``None`` for numeric ones."""
        facet = compute_facet(self.data, self.state, column_id)
        if facet.kind == "numeric":
            return facet.min_max
        return facet.unique_values

    def get_page_window(self, radius: int = DEFAULT_WINDOW_RADIUS) -> List[int]:
        return page_window(self._current_page_index() + 1, self.get_page_count(), radius)

    def compute(self, *, radius: int = DEFAULT_WINDOW_RADIUS) -> Dict[str, Any]:
        return compute_grid(self.state, self.data, radius=radius)
