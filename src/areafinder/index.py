"""Flattening the area directory into a search-ready index."""

from __future__ import annotations

from functools import lru_cache

from areafinder.directory import AreaDirectory, default_directory
from areafinder.models import FlattenedArea
from areafinder.text import normalize, tokens_for_code


def build_index(directory: AreaDirectory) -> tuple[FlattenedArea, ...]:
    """
    Emit one FlattenedArea per directory record, in directory order.

    Search tokens are computed here once and never per query. The
    position of each entry is the tie-break ordinal used by the ranker.
    """
    routes = directory.detail_routes
    return tuple(
        FlattenedArea(
            id=f"{prefix}-{record.code}",
            prefix=prefix,
            code=record.code,
            town=record.town,
            keywords=record.keywords,
            href=routes.get(record.code),
            search_tokens=(
                tokens_for_code(prefix, record.code)
                | {normalize(record.town)}
            ),
        )
        for prefix, record in directory.records()
    )


@lru_cache(maxsize=1)
def default_index() -> tuple[FlattenedArea, ...]:
    """Index of the process-wide directory, built on first use."""
    return build_index(default_directory())
