from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Literal, Mapping, Optional, Sequence, Tuple

import pandas as pd

from datagrid.errors import InvalidConfiguration


DATA_DIR = Path(__file__).resolve().parents[1] / "data"
USERS_PATH = DATA_DIR / "users.json"

ColumnKind = Literal["text", "numeric"]
FacetScope = Literal["pre_filter", "post_filter"]
Accessor = Callable[[Mapping[str, Any]], Any]


@dataclass(frozen=True)
class ColumnDef:
    """Describes one grid column.

    ``facet_scope`` picks the rows facets are computed over: ``"pre_filter"``
    applies every filter except the column's own, ``"post_filter"`` applies all
    of them.
    """

    id: str
    kind: ColumnKind = "text"
    header: Optional[str] = None
    accessor: Optional[Accessor] = field(default=None, compare=False)
    fuzzy: bool = False
    filterable: bool = True
    sortable: bool = True
    visible: bool = True
    facet_scope: FacetScope = "pre_filter"

    @property
    def label(self) -> str:
        return self.header or self.id


@dataclass(frozen=True, eq=False)
class GridData:
    """Read-only records (indexed by record id) plus their column descriptors."""

    frame: pd.DataFrame
    columns: Tuple[ColumnDef, ...]

    @property
    def column_map(self) -> Dict[str, ColumnDef]:
        return {c.id: c for c in self.columns}

    def column(self, column_id: str) -> ColumnDef:
        try:
            return self.column_map[column_id]
        except KeyError:
            raise InvalidConfiguration(f"Unknown column: {column_id!r}") from None


USER_COLUMNS: Tuple[ColumnDef, ...] = (
    ColumnDef("id", kind="numeric", header="ID"),
    ColumnDef("avatar", header="Avatar", filterable=False, sortable=False),
    ColumnDef("name", header="Name", fuzzy=True),
    ColumnDef("email", header="Email"),
    ColumnDef("address", header="Address"),
    ColumnDef("phone", header="Phone"),
)


def numericize(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def coerce_str_safe(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            df[col] = df[col].fillna("").astype(str)
    return df


def infer_columns(records: Sequence[Mapping[str, Any]]) -> Tuple[ColumnDef, ...]:
    """Guess descriptors from the first record: numbers become numeric columns."""
    if not records:
        return ()
    first = records[0]
    out: List[ColumnDef] = []
    for key, value in first.items():
        numeric = isinstance(value, (int, float)) and not isinstance(value, bool)
        out.append(ColumnDef(key, kind="numeric" if numeric else "text", fuzzy=not numeric))
    return tuple(out)


def build_grid_data(
    records: Sequence[Mapping[str, Any]],
    columns: Optional[Sequence[ColumnDef]] = None,
    *,
    id_key: str = "id",
) -> GridData:
    """Materialize column values once and index them by record id.

    Records without ``id_key`` get their load position as id.
    """
    columns = tuple(columns) if columns is not None else infer_columns(records)
    seen = set()
    for col in columns:
        if col.id in seen:
            raise InvalidConfiguration(f"Duplicate column id: {col.id!r}")
        seen.add(col.id)

    ids: List[int] = []
    rows: List[Dict[str, Any]] = []
    for pos, rec in enumerate(records):
        raw_id = rec.get(id_key, pos)
        try:
            ids.append(int(raw_id))
        except (TypeError, ValueError):
            raise InvalidConfiguration(f"Record {pos} has a non-integer id: {raw_id!r}") from None
        rows.append({c.id: (c.accessor(rec) if c.accessor else rec.get(c.id)) for c in columns})

    index = pd.Index(ids, name="row_id", dtype="int64")
    if index.has_duplicates:
        dupes = sorted(set(index[index.duplicated()].tolist()))
        raise InvalidConfiguration(f"Duplicate record ids: {dupes}")

    frame = pd.DataFrame(rows, index=index, columns=[c.id for c in columns])
    frame = numericize(frame, [c.id for c in columns if c.kind == "numeric"])
    frame = coerce_str_safe(frame, [c.id for c in columns if c.kind == "text"])
    return GridData(frame=frame, columns=columns)


def file_signature(path: Path) -> Tuple[str, float]:
    return str(path), path.stat().st_mtime


@lru_cache(maxsize=4)
def _load_records_cached(file_sig: Tuple[str, float]) -> Tuple[Dict[str, Any], ...]:
    path = Path(file_sig[0])
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        raise InvalidConfiguration(f"{path.name} must contain a JSON array of records")
    return tuple(raw)


def load_records(path: Path = USERS_PATH) -> List[Dict[str, Any]]:
    if not path.exists():
        return []
    return [dict(r) for r in _load_records_cached(file_signature(path))]


def load_grid_data(path: Path = USERS_PATH, columns: Optional[Sequence[ColumnDef]] = None) -> GridData:
    records = load_records(path)
    if columns is None and path == USERS_PATH:
        columns = USER_COLUMNS
    return build_grid_data(records, columns)
