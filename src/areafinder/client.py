"""AreaFinder client: the main entry point for the library."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from areafinder import matcher
from areafinder.directory import AreaDirectory, default_directory, load_directory
from areafinder.index import build_index, default_index
from areafinder.models import CoverageResult, FlattenedArea, SearchResult
from areafinder.postcode import (
    build_coverage,
    default_coverage,
    resolve_coverage,
)
from areafinder.redirect import DEFAULT_BOOKING_PATH, SelectionController


class AreaFinder:
    """
    Postcode and town search over a static service-area directory.

    With no arguments the process-wide bundled directory is used and its
    index and coverage set are shared. Pass a directory (or a path to
    one) to work over different data. The index and coverage set are
    built, and the data validated, on construction.
    """

    def __init__(
        self,
        directory: AreaDirectory | str | Path | None = None,
        booking_path: str = DEFAULT_BOOKING_PATH,
    ):
        self._booking_path = booking_path
        if directory is None:
            self._directory = default_directory()
            self._index = default_index()
            self._coverage = default_coverage()
        else:
            if not isinstance(directory, AreaDirectory):
                directory = load_directory(directory)
            self._directory = directory
            self._index = build_index(directory)
            self._coverage = build_coverage(directory)
        self._by_id = {area.id: area for area in self._index}

    # ── Public API ────────────────────────────────────────────────

    @property
    def directory(self) -> AreaDirectory:
        return self._directory

    @property
    def areas(self) -> tuple[FlattenedArea, ...]:
        return self._index

    def search(self, query: str, browse_when_empty: bool = False) -> SearchResult:
        """
        Rank areas against *query*.

        An empty query returns nothing, or the default browse list when
        *browse_when_empty* is set.
        """
        if browse_when_empty and not query.strip():
            return SearchResult(query=query, areas=self.browse())
        return SearchResult(query=query, areas=matcher.rank(query, self._index))

    def first_match(self, query: str) -> Optional[FlattenedArea]:
        """Top-ranked area for *query*, as picked by pressing Enter."""
        ranked = matcher.rank(query, self._index, limit=1)
        return ranked[0] if ranked else None

    def browse(self, limit: int = matcher.BROWSE_SIZE) -> tuple[FlattenedArea, ...]:
        return matcher.browse(self._index, limit)

    def get(self, area_id: str) -> Optional[FlattenedArea]:
        return self._by_id.get(area_id)

    def check_coverage(self, postcode: str) -> CoverageResult:
        """Strict yes/no coverage check for a full or partial postcode."""
        return resolve_coverage(postcode, self._coverage)

    def controller(
        self, navigate: Callable[[str], None], scheduler=None
    ) -> SelectionController:
        """New selection controller bound to this finder's booking path."""
        return SelectionController(
            navigate, scheduler=scheduler, booking_path=self._booking_path
        )

    def health_check(self) -> dict:
        """Summary of the loaded data, for start-up checks."""
        return {
            "healthy": bool(self._index) and len(self._coverage) > 0,
            "source": self._directory.source,
            "groups": len(self._directory.groups),
            "areas": len(self._index),
            "districts": len(self._coverage),
        }
