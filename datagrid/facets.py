from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from datagrid.data import ColumnDef


def _native(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    return value


@dataclass(frozen=True)
class Facet:
    column_id: str
    kind: str
    unique_values: List[Any] = field(default_factory=list)
    counts: Dict[Any, int] = field(default_factory=dict)
    min_max: Optional[Tuple[Any, Any]] = None


def unique_values(frame: pd.DataFrame, column_id: str) -> List[Any]:
    """Sorted distinct raw values of ``column_id`` in ``frame``."""
    values = frame[column_id].dropna().unique().tolist()
    return sorted(_native(v) for v in values)


def value_counts(frame: pd.DataFrame, column_id: str) -> Dict[Any, int]:
    counts = frame[column_id].dropna().value_counts(sort=False)
    return {_native(k): int(v) for k, v in sorted(counts.items(), key=lambda kv: kv[0])}


def min_max(frame: pd.DataFrame, column: ColumnDef) -> Optional[Tuple[Any, Any]]:
    if column.kind != "numeric" or frame.empty:
        return None
    series = frame[column.id].dropna()
    if series.empty:
        return None
    return _native(series.min()), _native(series.max())


def build_facet(frame: pd.DataFrame, column: ColumnDef) -> Facet:
    if column.kind == "numeric":
        return Facet(column_id=column.id, kind=column.kind, min_max=min_max(frame, column))
    return Facet(
        column_id=column.id,
        kind=column.kind,
        unique_values=unique_values(frame, column.id),
        counts=value_counts(frame, column.id),
    )
