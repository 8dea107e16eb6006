"""Fuzzy ranking of a candidate string against a query.

Rankings follow the match-sorter tiers: an exact case-sensitive hit beats an
exact case-insensitive hit, which beats a prefix, a word prefix, a substring,
an acronym and finally a scattered in-order subsequence. Subsequence matches
carry a closeness bonus in (0, 1] so tighter matches sort first.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum


class Ranking(IntEnum):
    NO_MATCH = 0
    MATCHES = 1
    ACRONYM = 2
    CONTAINS = 3
    WORD_STARTS_WITH = 4
    STARTS_WITH = 5
    EQUAL = 6
    CASE_SENSITIVE_EQUAL = 7


@dataclass(frozen=True)
class RankResult:
    passed: bool
    rank: float
    tier: Ranking


_WORD_SPLIT = re.compile(r"[ -]+")


def as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def get_acronym(text: str) -> str:
    return "".join(word[0] for word in _WORD_SPLIT.split(text) if word)


def _closeness_rank(candidate: str, query: str) -> float:
    in_order = 0
    cursor = 0

    def find(char: str) -> int:
        nonlocal in_order
        idx = candidate.find(char, cursor)
        if idx < 0:
            return -1
        in_order += 1
        return idx + 1

    first = find(query[0])
    if first < 0:
        return float(Ranking.NO_MATCH)
    cursor = first
    for char in query[1:]:
        cursor = find(char)
        if cursor < 0:
            return float(Ranking.NO_MATCH)

    # spread >= 1: a contiguous hit is caught as CONTAINS before we get here.
    spread_pct = 1.0 / (cursor - first)
    in_order_pct = in_order / len(query)
    return float(Ranking.MATCHES) + in_order_pct * spread_pct


def match_ranking(candidate: str, query: str) -> float:
    if len(query) > len(candidate):
        return float(Ranking.NO_MATCH)
    if candidate == query:
        return float(Ranking.CASE_SENSITIVE_EQUAL)

    candidate = candidate.lower()
    query = query.lower()
    if candidate == query:
        return float(Ranking.EQUAL)
    if candidate.startswith(query):
        return float(Ranking.STARTS_WITH)
    if f" {query}" in candidate:
        return float(Ranking.WORD_STARTS_WITH)
    if query in candidate:
        return float(Ranking.CONTAINS)
    if len(query) == 1:
        return float(Ranking.NO_MATCH)
    if query in get_acronym(candidate):
        return float(Ranking.ACRONYM)
    return _closeness_rank(candidate, query)


def rank(candidate: object, query: str, *, threshold: Ranking = Ranking.MATCHES) -> RankResult:
    """Rank ``candidate`` against ``query``.

    An empty query always passes with rank ``1.0``, below any real match.
    ``threshold`` is the lowest tier that still counts as passing.
    """
    if not query:
        return RankResult(passed=True, rank=float(Ranking.MATCHES), tier=Ranking.MATCHES)
    score = match_ranking(as_text(candidate), query)
    tier = Ranking(int(score))
    return RankResult(passed=tier >= threshold and tier != Ranking.NO_MATCH, rank=score, tier=tier)


def compare_ranks(a: RankResult, b: RankResult) -> int:
    """Order better ranks first: -1 when ``a`` ranks higher than ``b``."""
    if a.rank == b.rank:
        return 0
    return -1 if a.rank > b.rank else 1
