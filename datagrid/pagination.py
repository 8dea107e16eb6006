"""Page slicing and the ellipsis-compressed page-number window.

``page_window`` output mixes 1-based page numbers with ``ELLIPSIS`` markers, e.g.
``page_window(5, 10, 2) == [1, ELLIPSIS, 3, 4, 5, 6, 7, ELLIPSIS, 10]``.
"""

from __future__ import annotations

import math
from typing import List

import pandas as pd

from datagrid.errors import InvalidConfiguration


ELLIPSIS = -1


def check_page_size(page_size: int) -> int:
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
        raise InvalidConfiguration(f"page_size must be a positive integer, got {page_size!r}")
    return page_size


def page_count(total_rows: int, page_size: int) -> int:
    check_page_size(page_size)
    return math.ceil(total_rows / page_size) if total_rows > 0 else 0


def clamp_page_index(page_index: int, total_rows: int, page_size: int) -> int:
    if page_index < 0:
        raise InvalidConfiguration(f"page_index must be >= 0, got {page_index}")
    pages = page_count(total_rows, page_size)
    return min(page_index, max(pages - 1, 0))


def paginate(frame: pd.DataFrame, page_index: int, page_size: int) -> pd.DataFrame:
    """Slice one page; indexes past the end land on the last page."""
    page_index = clamp_page_index(page_index, len(frame), page_size)
    start = page_index * page_size
    return frame.iloc[start : start + page_size]


def page_window(current_page: int, total_pages: int, radius: int, *, fill_single_gaps: bool = False) -> List[int]:
    if radius < 0:
        raise InvalidConfiguration(f"radius must be >= 0, got {radius}")
    if total_pages <= 0:
        return []
    current_page = min(max(current_page, 1), total_pages)

    pages = {1, total_pages}
    pages.update(range(max(current_page - radius, 1), min(current_page + radius, total_pages) + 1))

    window: List[int] = []
    prev = 0
    for page in sorted(pages):
        if prev:
            gap = page - prev - 1
            if gap == 1 and fill_single_gaps:
                window.append(prev + 1)
            elif gap >= 1:
                window.append(ELLIPSIS)
        window.append(page)
        prev = page
    return window
