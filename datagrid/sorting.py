from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Callable, List, Literal, Mapping, Optional, Sequence

import pandas as pd

from datagrid.data import ColumnDef
from datagrid.filters import RankContext
from datagrid.ranking import Ranking, RankResult, as_text, compare_ranks


logger = logging.getLogger(__name__)

SortDirection = Literal["asc", "desc"]
Comparator = Callable[[int, int], int]

_ALNUM_SPLIT = re.compile(r"([0-9]+)")
_UNRANKED = RankResult(passed=False, rank=float(Ranking.NO_MATCH), tier=Ranking.NO_MATCH)


@dataclass(frozen=True)
class SortKey:
    column_id: str
    direction: SortDirection = "asc"

    @property
    def desc(self) -> bool:
        return self.direction == "desc"


SortSpec = List[SortKey]


def compare_alphanumeric(a: object, b: object) -> int:
    """Natural, case-insensitive comparison: ``"item 2"`` sorts before ``"item 10"``."""
    a_parts = [p for p in _ALNUM_SPLIT.split(as_text(a).lower()) if p]
    b_parts = [p for p in _ALNUM_SPLIT.split(as_text(b).lower()) if p]
    for aa, bb in zip(a_parts, b_parts):
        a_num, b_num = aa.isdigit(), bb.isdigit()
        if not a_num and not b_num:
            if aa != bb:
                return 1 if aa > bb else -1
            continue
        if a_num != b_num:
            # text runs sort before digit runs
            return -1 if b_num else 1
        an, bn = int(aa), int(bb)
        if an != bn:
            return 1 if an > bn else -1
    return (len(a_parts) > len(b_parts)) - (len(a_parts) < len(b_parts))


def is_missing(value: object) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def compare_basic(a: object, b: object) -> int:
    a_missing, b_missing = is_missing(a), is_missing(b)
    if a_missing or b_missing:
        # missing after present; sort_rows keeps them last when descending too
        return (a_missing > b_missing) - (a_missing < b_missing)
    if a == b:
        return 0
    return 1 if a > b else -1  # type: ignore[operator]


def _column_comparator(
    column: ColumnDef,
    row_ids: List[int],
    values: List[object],
    ranks: Optional[RankContext],
) -> Comparator:
    generic = compare_basic if column.kind == "numeric" else compare_alphanumeric
    ranked = (
        column.kind == "text"
        and column.fuzzy
        and bool(ranks)
        and any(key[1] == column.id for key in ranks)  # type: ignore[union-attr]
    )
    if not ranked:
        return lambda i, j: generic(values[i], values[j])

    def compare(i: int, j: int) -> int:
        # a row that passed through another column ranks below every match here
        ra = ranks.get((row_ids[i], column.id), _UNRANKED)  # type: ignore[union-attr]
        rb = ranks.get((row_ids[j], column.id), _UNRANKED)  # type: ignore[union-attr]
        return compare_ranks(ra, rb) or compare_alphanumeric(values[i], values[j])

    return compare


def sort_rows(
    frame: pd.DataFrame,
    sort: Sequence[SortKey],
    columns: Mapping[str, ColumnDef],
    ranks: Optional[RankContext] = None,
) -> pd.DataFrame:
    """Order rows by the sort chain; equal rows keep their input order.

    Keys naming columns that no longer exist are skipped, so stale view state
    still renders.
    """
    row_ids = frame.index.tolist()
    chain = []
    for key in sort:
        column = columns.get(key.column_id)
        if column is None or key.column_id not in frame.columns:
            logger.warning("ignoring sort on unknown column %r", key.column_id)
            continue
        values = frame[key.column_id].tolist()
        sign = -1 if key.desc else 1
        missing = [is_missing(v) for v in values] if column.kind == "numeric" else None
        chain.append((_column_comparator(column, row_ids, values, ranks), sign, missing))

    if not chain or len(frame) < 2:
        return frame

    def compare(i: int, j: int) -> int:
        for comparator, sign, missing in chain:
            if missing is not None and missing[i] != missing[j]:
                return 1 if missing[i] else -1
            result = comparator(i, j)
            if result:
                return result * sign
        return 0

    order = sorted(range(len(frame)), key=cmp_to_key(compare))
    return frame.iloc[order]
