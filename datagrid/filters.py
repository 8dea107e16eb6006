from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple, Union

import pandas as pd

from datagrid.data import ColumnDef, GridData
from datagrid.errors import InvalidConfiguration
from datagrid.ranking import RankResult, as_text, rank


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextFilter:
    query: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.query


@dataclass(frozen=True)
class RangeFilter:
    lo: Optional[float] = None
    hi: Optional[float] = None

    def __post_init__(self) -> None:
        if self.lo is not None and self.hi is not None and self.lo > self.hi:
            raise InvalidConfiguration(f"Range lower bound {self.lo} is above upper bound {self.hi}")

    @property
    def is_empty(self) -> bool:
        return self.lo is None and self.hi is None


FilterValue = Union[TextFilter, RangeFilter]
FilterSpec = Dict[str, FilterValue]
RankContext = Dict[Tuple[int, str], RankResult]


@dataclass(frozen=True, eq=False)
class FilterResult:
    frame: pd.DataFrame
    ranks: RankContext = field(default_factory=dict)


def _as_bound(value: object, column_id: str) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise InvalidConfiguration(f"Range bound for {column_id!r} is not a number: {value!r}") from None


def normalize_filter_value(column: ColumnDef, raw: object) -> FilterValue:
    """Turn a raw JSON filter value into the variant matching the column kind."""
    if isinstance(raw, (TextFilter, RangeFilter)):
        value = raw
    elif column.kind == "numeric":
        if not isinstance(raw, (list, tuple)) or len(raw) != 2:
            raise InvalidConfiguration(f"Filter for numeric column {column.id!r} must be a [lo, hi] pair")
        value = RangeFilter(_as_bound(raw[0], column.id), _as_bound(raw[1], column.id))
    else:
        if raw is not None and not isinstance(raw, str):
            raise InvalidConfiguration(f"Filter for text column {column.id!r} must be a string")
        value = TextFilter((raw or "").strip())
    check_filter_value(column, value)
    return value


def check_filter_value(column: ColumnDef, value: FilterValue) -> None:
    if not column.filterable:
        raise InvalidConfiguration(f"Column {column.id!r} is not filterable")
    if column.kind == "numeric" and not isinstance(value, RangeFilter):
        raise InvalidConfiguration(f"Numeric column {column.id!r} needs a range filter")
    if column.kind == "text" and not isinstance(value, TextFilter):
        raise InvalidConfiguration(f"Text column {column.id!r} needs a text filter")


def normalize_filters(raw: Optional[Mapping[str, object]], columns: Mapping[str, ColumnDef]) -> FilterSpec:
    out: FilterSpec = {}
    for column_id, raw_value in (raw or {}).items():
        if column_id not in columns:
            raise InvalidConfiguration(f"Unknown filter column: {column_id!r}")
        value = normalize_filter_value(columns[column_id], raw_value)
        if not value.is_empty:
            out[column_id] = value
    return out


def filter_to_raw(value: FilterValue) -> object:
    if isinstance(value, TextFilter):
        return value.query
    return [value.lo, value.hi]


def _rank_series(series: pd.Series, query: str) -> pd.Series:
    return series.map(lambda v: rank(v, query))


def _range_mask(series: pd.Series, value: RangeFilter) -> pd.Series:
    mask = series.notna()
    if value.lo is not None:
        mask &= series >= value.lo
    if value.hi is not None:
        mask &= series <= value.hi
    return mask


def _contains_mask(series: pd.Series, query: str) -> pd.Series:
    return series.map(as_text).str.lower().str.contains(query.lower(), regex=False)


def _column_mask(column: ColumnDef, series: pd.Series, value: FilterValue, ranks: RankContext) -> pd.Series:
    check_filter_value(column, value)
    if isinstance(value, RangeFilter):
        return _range_mask(series, value)
    if not column.fuzzy:
        return _contains_mask(series, value.query)
    results = _rank_series(series, value.query)
    for row_id, result in results.items():
        if result.passed:
            ranks[(row_id, column.id)] = result
    return results.map(lambda r: r.passed).astype(bool)


def _global_mask(data: GridData, frame: pd.DataFrame, query: str, skip: set, ranks: RankContext) -> pd.Series:
    mask = pd.Series(False, index=frame.index)
    for column in data.columns:
        if not column.filterable:
            continue
        results = _rank_series(frame[column.id], query)
        passed = results.map(lambda r: r.passed).astype(bool)
        # only fuzzy text columns sort by rank; numeric ones keep value order
        if column.kind == "text" and column.fuzzy and column.id not in skip:
            for row_id, result in results[passed].items():
                ranks[(row_id, column.id)] = result
        mask |= passed
    return mask


def filter_rows(
    data: GridData,
    filters: Mapping[str, FilterValue],
    global_filter: str = "",
    *,
    exclude: Optional[str] = None,
) -> FilterResult:
    """Apply every column filter (AND) and the global query.

    ``exclude`` drops one column's own filter, which is how facet widgets see the
    candidate range of their column. Rank results of fuzzy matches are returned
    alongside the rows so sorting never has to rank again.
    """
    frame = data.frame
    columns = data.column_map
    ranks: RankContext = {}
    mask = pd.Series(True, index=frame.index)

    for column_id, value in filters.items():
        if column_id == exclude or value.is_empty:
            continue
        if column_id not in columns:
            raise InvalidConfiguration(f"Unknown filter column: {column_id!r}")
        mask &= _column_mask(columns[column_id], frame[column_id], value, ranks)

    query = (global_filter or "").strip()
    if query:
        mask &= _global_mask(data, frame, query, set(filters), ranks)

    filtered = frame[mask]
    logger.debug("filtered %d of %d rows (exclude=%s)", len(filtered), len(frame), exclude)
    return FilterResult(frame=filtered, ranks=ranks)


def pre_filter(
    data: GridData,
    filters: Mapping[str, FilterValue],
    column_id: str,
    global_filter: str = "",
) -> pd.DataFrame:
    data.column(column_id)
    return filter_rows(data, filters, global_filter, exclude=column_id).frame
