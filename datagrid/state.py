from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from datagrid.data import ColumnDef
from datagrid.errors import InvalidConfiguration
from datagrid.filters import FilterSpec, filter_to_raw, normalize_filters
from datagrid.pagination import check_page_size
from datagrid.sorting import SortKey, SortSpec


DEFAULT_PAGE_SIZE = 5
PAGE_SIZE_OPTIONS = (5, 10, 15, 25, 30)
DEFAULT_WINDOW_RADIUS = 2


@dataclass(frozen=True)
class ViewState:
    filters: FilterSpec = field(default_factory=dict)
    sort: SortSpec = field(default_factory=list)
    page_index: int = 0
    page_size: int = DEFAULT_PAGE_SIZE
    column_visibility: Dict[str, bool] = field(default_factory=dict)
    global_filter: str = ""


def default_view_state(columns: Sequence[ColumnDef], *, page_size: int = DEFAULT_PAGE_SIZE) -> ViewState:
    return ViewState(
        page_size=check_page_size(page_size),
        column_visibility={c.id: c.visible for c in columns},
    )


def normalize_sort(raw: Optional[Sequence[Any]]) -> SortSpec:
    out: SortSpec = []
    for item in raw or []:
        if isinstance(item, SortKey):
            out.append(item)
            continue
        if isinstance(item, Mapping):
            column_id = item.get("column_id", item.get("id"))
            if "direction" in item:
                direction = item["direction"]
            else:
                direction = "desc" if item.get("desc") else "asc"
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            column_id, direction = item
        else:
            raise InvalidConfiguration(f"Cannot read sort entry: {item!r}")
        if direction not in ("asc", "desc"):
            raise InvalidConfiguration(f"Sort direction must be 'asc' or 'desc', got {direction!r}")
        if not column_id:
            raise InvalidConfiguration(f"Sort entry is missing a column id: {item!r}")
        out.append(SortKey(str(column_id), direction))
    return out


def normalize_view_state(raw: Optional[Mapping[str, Any]], columns: Sequence[ColumnDef]) -> ViewState:
    """Build a ViewState from serialized fields, filling gaps with defaults."""
    raw = raw or {}
    column_map = {c.id: c for c in columns}
    defaults = default_view_state(columns)

    page_index = raw.get("page_index", 0)
    if isinstance(page_index, bool) or not isinstance(page_index, int) or page_index < 0:
        raise InvalidConfiguration(f"page_index must be a non-negative integer, got {page_index!r}")

    visibility = dict(defaults.column_visibility)
    for column_id, visible in (raw.get("column_visibility") or {}).items():
        if column_id not in column_map:
            raise InvalidConfiguration(f"Unknown column in visibility: {column_id!r}")
        visibility[column_id] = bool(visible)

    return ViewState(
        filters=normalize_filters(raw.get("filters"), column_map),
        sort=normalize_sort(raw.get("sort")),
        page_index=page_index,
        page_size=check_page_size(raw.get("page_size", DEFAULT_PAGE_SIZE)),
        column_visibility=visibility,
        global_filter=(raw.get("global_filter") or "").strip(),
    )


def state_to_dict(state: ViewState) -> Dict[str, Any]:
    return {
        "filters": {k: filter_to_raw(v) for k, v in state.filters.items()},
        "sort": [{"column_id": k.column_id, "direction": k.direction} for k in state.sort],
        "page_index": state.page_index,
        "page_size": state.page_size,
        "column_visibility": dict(state.column_visibility),
        "global_filter": state.global_filter,
    }


def visible_columns(columns: Sequence[ColumnDef], state: ViewState) -> List[ColumnDef]:
    return [c for c in columns if state.column_visibility.get(c.id, c.visible)]
