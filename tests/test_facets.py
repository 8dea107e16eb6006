from __future__ import annotations

from datagrid.data import ColumnDef, GridData, build_grid_data
from datagrid.facets import build_facet, min_max, unique_values, value_counts


def test_min_max_of_ages() -> None:
    data = build_grid_data(
        [{"id": 1, "age": 30}, {"id": 2, "age": 12}, {"id": 3, "age": 45}],
        (ColumnDef("id", kind="numeric"), ColumnDef("age", kind="numeric")),
    )
    bounds = min_max(data.frame, data.column("age"))
    assert bounds == (12, 45)
    assert all(type(v) is int for v in bounds)


def test_min_max_empty_or_text_is_none(people_data: GridData) -> None:
    assert min_max(people_data.frame.iloc[0:0], people_data.column("age")) is None
    assert min_max(people_data.frame, people_data.column("city")) is None


def test_unique_values_are_sorted_raw_values(people_data: GridData) -> None:
    assert unique_values(people_data.frame, "city") == ["Bergen", "Oslo", "Tromso"]
    assert unique_values(people_data.frame, "age") == [12, 19, 27, 30, 45]


def test_unique_values_keep_case() -> None:
    data = build_grid_data(
        [{"id": 1, "tag": "beta"}, {"id": 2, "tag": "Alpha"}, {"id": 3, "tag": "alpha"}],
        (ColumnDef("id", kind="numeric"), ColumnDef("tag")),
    )
    assert unique_values(data.frame, "tag") == ["Alpha", "alpha", "beta"]


def test_value_counts(people_data: GridData) -> None:
    assert value_counts(people_data.frame, "city") == {"Bergen": 2, "Oslo": 3, "Tromso": 1}


def test_build_facet_by_kind(people_data: GridData) -> None:
    numeric = build_facet(people_data.frame, people_data.column("age"))
    assert numeric.min_max == (12, 45)
    assert numeric.unique_values == []

    text = build_facet(people_data.frame, people_data.column("city"))
    assert text.min_max is None
    assert text.unique_values == ["Bergen", "Oslo", "Tromso"]
    assert text.counts["Oslo"] == 3
