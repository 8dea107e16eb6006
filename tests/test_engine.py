from __future__ import annotations

import json

import pytest

from datagrid.data import ColumnDef, GridData, build_grid_data
from datagrid.engine import GridEngine, compute_grid
from datagrid.errors import InvalidConfiguration
from datagrid.filters import RangeFilter, TextFilter
from datagrid.pagination import ELLIPSIS
from datagrid.sorting import SortKey


def _names(rows) -> list:
    return [r["name"] for r in rows]


def test_default_page(engine: GridEngine) -> None:
    rows = engine.get_page()
    assert _names(rows) == ["Ann", "Anna", "Bob", "Joanna", "Dan"]
    assert list(rows[0]) == ["id", "name", "city", "age"]
    assert engine.get_total_filtered_count() == 6
    assert engine.get_page_count() == 2


def test_set_filter_and_clear(engine: GridEngine) -> None:
    engine.set_filter("name", "an")
    assert engine.state.filters == {"name": TextFilter("an")}
    assert engine.get_total_filtered_count() == 5
    engine.set_filter("name", "")
    assert engine.state.filters == {}
    engine.set_filter("age", [20, 35])
    assert engine.state.filters == {"age": RangeFilter(20.0, 35.0)}
    engine.clear_filter("age")
    assert engine.get_total_filtered_count() == 6


def test_filter_change_resets_page(engine: GridEngine) -> None:
    engine.set_page(1)
    assert engine.state.page_index == 1
    engine.set_filter("city", "o")
    assert engine.state.page_index == 0


def test_unknown_columns_raise(engine: GridEngine) -> None:
    with pytest.raises(InvalidConfiguration):
        engine.set_filter("salary", [1, 2])
    with pytest.raises(InvalidConfiguration):
        engine.clear_filter("salary")
    with pytest.raises(InvalidConfiguration):
        engine.set_column_visibility("salary", False)
    with pytest.raises(InvalidConfiguration):
        engine.get_facet("salary")


def test_sort_by_rank_when_filtered(engine: GridEngine) -> None:
    engine.set_filter("name", "ann")
    engine.toggle_sort("name")
    assert _names(engine.get_page()) == ["Ann", "Anna", "Hannah", "Joanna"]


def test_set_sort_tolerates_stale_columns(engine: GridEngine) -> None:
    engine.set_sort([{"column_id": "removed"}, {"column_id": "age", "direction": "desc"}])
    assert _names(engine.get_page()) == ["Bob", "Ann", "Joanna", "Dan", "Hannah"]


def test_set_sort_rejects_unsortable_column() -> None:
    data = build_grid_data(
        [{"id": 1, "avatar": "a.png"}],
        (ColumnDef("id", kind="numeric"), ColumnDef("avatar", sortable=False)),
    )
    with pytest.raises(InvalidConfiguration):
        GridEngine(data).toggle_sort("avatar")


def test_page_navigation(numbered_data: GridData) -> None:
    engine = GridEngine(numbered_data)
    assert not engine.can_previous_page()
    engine.set_page(99)
    assert engine.state.page_index == 4
    assert not engine.can_next_page()
    assert [r["id"] for r in engine.get_page()] == [21, 22, 23]
    engine.previous_page()
    assert engine.state.page_index == 3
    engine.next_page()
    engine.next_page()
    assert engine.state.page_index == 4
    with pytest.raises(InvalidConfiguration):
        engine.set_page(-1)


def test_page_size_keeps_top_row(numbered_data: GridData) -> None:
    engine = GridEngine(numbered_data)
    engine.set_page(3)  # rows 16-20
    engine.set_page_size(10)
    assert engine.state.page_index == 1
    assert engine.get_page()[0]["id"] == 11
    with pytest.raises(InvalidConfiguration):
        engine.set_page_size(0)


def test_page_window(numbered_data: GridData) -> None:
    engine = GridEngine(numbered_data)
    engine.set_page_size(2)  # 12 pages
    assert engine.get_page_window(2) == [1, 2, 3, ELLIPSIS, 12]
    engine.set_page(5)
    assert engine.get_page_window(2) == [1, ELLIPSIS, 4, 5, 6, 7, 8, ELLIPSIS, 12]
    with pytest.raises(InvalidConfiguration):
        engine.get_page_window(-1)


def test_column_visibility(engine: GridEngine) -> None:
    engine.set_column_visibility("id", False)
    assert [c.id for c in engine.get_visible_columns()] == ["name", "city", "age"]
    assert list(engine.get_page()[0]) == ["name", "city", "age"]


def test_facets_exclude_own_filter(engine: GridEngine) -> None:
    engine.set_filter("age", [25, 50])
    assert engine.get_facet("age") == (12, 45)
    engine.set_filter("city", "oslo")
    # Ann 30, Bob 45, Hannah 19 remain once city is filtered
    assert engine.get_facet("age") == (19, 45)
    assert engine.get_facet("city") == ["Bergen", "Oslo", "Tromso"]
    assert engine.get_facet("name") == ["Ann", "Bob"]


def test_facets_follow_other_filters(engine: GridEngine) -> None:
    assert engine.get_facet("age") == (12, 45)
    engine.set_filter("name", "zzz")
    assert engine.get_facet("age") is None
    engine.clear_filter("name")
    assert engine.get_facet("age") == (12, 45)


def test_post_filter_facet_scope(people: list) -> None:
    columns = (
        ColumnDef("id", kind="numeric"),
        ColumnDef("name", fuzzy=True),
        ColumnDef("city"),
        ColumnDef("age", kind="numeric", facet_scope="post_filter"),
    )
    engine = GridEngine(build_grid_data(people, columns))
    engine.set_filter("age", [25, 35])
    assert engine.get_facet("age") == (27, 30)


def test_global_filter(engine: GridEngine) -> None:
    engine.set_global_filter("bergen")
    assert _names(engine.get_page()) == ["Anna", "Dan"]
    assert engine.get_facet("city") == ["Bergen"]


def test_reset(engine: GridEngine) -> None:
    engine.set_filter("name", "an")
    engine.set_page_size(10)
    engine.reset()
    assert engine.state.filters == {}
    assert engine.state.page_size == 10


def test_identical_state_gives_identical_output(people_data: GridData) -> None:
    a = GridEngine(people_data)
    b = GridEngine(people_data)
    for e in (a, b):
        e.set_filter("name", "an")
        e.set_sort([SortKey("age", "desc")])
    assert a.get_page() == b.get_page()
    assert a.get_page() == a.get_page()


def test_compute_grid_payload_is_json_ready(engine: GridEngine) -> None:
    engine.set_filter("name", "an")
    engine.set_page(1)
    payload = compute_grid(engine.state, engine.data)
    assert payload["filtered_rows"] == 5
    assert payload["page_count"] == 1
    assert payload["state"]["page_index"] == 0
    assert payload["page_window"] == [1]
    assert payload["row_ids"] == [1, 2, 4, 5, 6]
    assert payload["facets"]["age"]["min_max"] == (12, 30)
    json.dumps(payload)


def test_empty_dataset() -> None:
    engine = GridEngine(build_grid_data([], (ColumnDef("id", kind="numeric"), ColumnDef("name", fuzzy=True))))
    assert engine.get_page() == []
    assert engine.get_page_count() == 0
    assert engine.get_page_window() == []
    assert engine.get_facet("id") is None
    assert engine.get_facet("name") == []
