"""
Relevance scoring and ranking of areas against free-text queries.

Each predicate below is an independent signal of intent; an area's
score is the weighted sum of every predicate it satisfies plus a small
length bonus, so multi-signal matches outrank single coincidences.
Scores only order candidates relative to each other. Zero means the
area is excluded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from areafinder.models import FlattenedArea
from areafinder.text import compact, normalize

MAX_RESULTS = 10
BROWSE_SIZE = 8
_LENGTH_BONUS_CAP = 8

WEIGHTS = {
    "exact_full": 1000,
    "exact_primary": 900,
    "town_exact": 850,
    "token_starts_with_query": 750,
    "town_starts_with_query": 650,
    "prefix_exact": 400,
    "prefix_starts_with_query": 250,
    "query_starts_with_token": 120,
    "haystack_full": 150,
    "haystack_primary": 100,
}


@dataclass(frozen=True)
class _Query:
    trimmed: str
    primary_token: str
    primary_compact: str
    full_compact: str

    @classmethod
    def parse(cls, raw: str) -> Optional[_Query]:
        trimmed = normalize(raw)
        if not trimmed:
            return None
        primary = trimmed.split()[0]
        return cls(
            trimmed=trimmed,
            primary_token=primary,
            primary_compact=compact(primary),
            full_compact=compact(trimmed),
        )


def _predicates(q: _Query, area: FlattenedArea) -> dict[str, bool]:
    tokens = area.search_tokens
    town = normalize(area.town)
    prefix = area.prefix.lower()
    haystack = area.haystack
    full = q.full_compact

    return {
        "exact_full": full in tokens,
        "exact_primary": (
            q.primary_compact != full and q.primary_compact in tokens
        ),
        "token_starts_with_query": any(t.startswith(full) for t in tokens),
        # The bare area letters are skipped, otherwise every district in
        # an area would match any code typed inside it ('ba16' vs BA5).
        "query_starts_with_token": any(
            len(t) > 1 and t != prefix and full.startswith(t)
            for t in tokens
        ),
        "town_exact": town == q.trimmed,
        "town_starts_with_query": town.startswith(q.trimmed),
        "prefix_exact": prefix == q.primary_compact,
        "prefix_starts_with_query": (
            len(q.primary_compact) > 1
            and prefix.startswith(q.primary_compact)
        ),
        "haystack_full": q.trimmed in haystack,
        "haystack_primary": (
            q.primary_token != q.trimmed and q.primary_token in haystack
        ),
    }


def _score(q: _Query, area: FlattenedArea) -> int:
    hits = [name for name, hit in _predicates(q, area).items() if hit]
    if not hits:
        return 0
    total = sum(WEIGHTS[name] for name in hits)
    return total + min(len(q.trimmed), _LENGTH_BONUS_CAP)


def score(query: str, area: FlattenedArea) -> int:
    """Relevance of *area* for *query*; 0 when nothing matches."""
    q = _Query.parse(query)
    if q is None:
        return 0
    return _score(q, area)


def explain(query: str, area: FlattenedArea) -> list[str]:
    """Names of the predicates *area* satisfies for *query*, for debugging."""
    q = _Query.parse(query)
    if q is None:
        return []
    return [name for name, hit in _predicates(q, area).items() if hit]


def rank(
    query: str,
    index: Sequence[FlattenedArea],
    limit: int = MAX_RESULTS,
) -> tuple[FlattenedArea, ...]:
    """
    Return the best-matching areas for *query*, at most *limit* of them.

    Ordered by score descending; equal scores keep directory order.
    An empty query matches nothing. Use ``browse`` for a default list.
    """
    q = _Query.parse(query)
    if q is None:
        return ()

    scored = []
    for ordinal, area in enumerate(index):
        area_score = _score(q, area)
        if area_score > 0:
            scored.append((-area_score, ordinal, area))

    scored.sort(key=lambda entry: (entry[0], entry[1]))
    cap = max(0, min(limit, MAX_RESULTS))
    return tuple(area for _, _, area in scored[:cap])


def browse(
    index: Sequence[FlattenedArea], limit: int = BROWSE_SIZE
) -> tuple[FlattenedArea, ...]:
    """First *limit* directory entries verbatim, with no scoring."""
    return tuple(index[:max(0, limit)])
