from __future__ import annotations

from typing import List

import pytest

from datagrid.data import ColumnDef, GridData, build_grid_data
from datagrid.engine import GridEngine


PEOPLE_COLUMNS = (
    ColumnDef("id", kind="numeric", header="ID"),
    ColumnDef("name", header="Name", fuzzy=True),
    ColumnDef("city", header="City"),
    ColumnDef("age", kind="numeric", header="Age"),
)


@pytest.fixture()
def people() -> List[dict]:
    return [
        {"id": 1, "name": "Ann", "city": "Oslo", "age": 30},
        {"id": 2, "name": "Anna", "city": "Bergen", "age": 12},
        {"id": 3, "name": "Bob", "city": "Oslo", "age": 45},
        {"id": 4, "name": "Joanna", "city": "Tromso", "age": 30},
        {"id": 5, "name": "Dan", "city": "Bergen", "age": 27},
        {"id": 6, "name": "Hannah", "city": "Oslo", "age": 19},
    ]


@pytest.fixture()
def people_data(people: List[dict]) -> GridData:
    return build_grid_data(people, PEOPLE_COLUMNS)


@pytest.fixture()
def numbered_data() -> GridData:
    records = [{"id": i, "label": f"row {i}"} for i in range(1, 24)]
    return build_grid_data(records, (ColumnDef("id", kind="numeric"), ColumnDef("label", fuzzy=True)))


@pytest.fixture()
def engine(people_data: GridData) -> GridEngine:
    return GridEngine(people_data)
