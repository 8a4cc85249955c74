"""Typed records for areafinder."""

import re
from dataclasses import dataclass, field
from typing import Optional

from areafinder.text import expand_code

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]", re.IGNORECASE)


@dataclass(frozen=True)
class AreaRecord:
    """One town/locality entry within a postcode group."""

    code: str                # may be compound, e.g. 'BA20/21/22'
    town: str
    keywords: str = ""


@dataclass(frozen=True)
class AreaGroup:
    """All areas sharing one two-letter postcode prefix."""

    prefix: str
    display_name: str
    areas: tuple[AreaRecord, ...] = ()


@dataclass(frozen=True)
class FlattenedArea:
    """Search-ready view of one AreaRecord, built once by the index."""

    id: str
    prefix: str
    code: str
    town: str
    keywords: str = ""
    href: Optional[str] = None
    search_tokens: frozenset[str] = field(default_factory=frozenset)

    @property
    def haystack(self) -> str:
        """Lower-case prefix, code, town and keywords, space joined."""
        return " ".join(
            (self.prefix, self.code, self.town, self.keywords)
        ).lower()

    @property
    def dom_id(self) -> str:
        """Anchor id of this area on the areas page."""
        code = _NON_ALNUM_RE.sub("", self.code).lower()
        return f"area-{self.prefix}-{code}"

    @property
    def primary_district(self) -> str:
        """First district of the code, upper-case, e.g. 'BA20' for 'BA20/21/22'."""
        districts = expand_code(self.prefix, self.code)
        if districts:
            return districts[0].upper()
        return self.prefix.upper()

    def to_dict(self) -> dict:
        """Convert to the plain dictionary the UI renders."""
        return {
            "id": self.id,
            "code": self.code,
            "town": self.town,
            "keywords": self.keywords,
            "prefix": self.prefix,
            "href": self.href,
        }


@dataclass(frozen=True)
class SearchResult:
    """Ranked areas for one query. Never persisted."""

    query: str
    areas: tuple[FlattenedArea, ...] = ()

    @property
    def no_matches(self) -> bool:
        """True when the user typed something and nothing matched."""
        return bool(self.query.strip()) and not self.areas

    def __len__(self) -> int:
        return len(self.areas)

    def __iter__(self):
        return iter(self.areas)

    def to_dict(self) -> dict:
        return {
            "query": self.query,
            "areas": [area.to_dict() for area in self.areas],
            "no_matches": self.no_matches,
        }


@dataclass(frozen=True)
class CoverageResult:
    """Outcome of a strict 'do we cover this postcode' check."""

    covered: bool
    district_name: Optional[str] = None
    district: Optional[str] = None    # matched district, e.g. 'BA16'

    def to_dict(self) -> dict:
        """Convert to a plain dictionary (useful for JSON serialisation)."""
        result: dict = {"covered": self.covered}
        if self.covered:
            result["district_name"] = self.district_name
            result["district"] = self.district
        return result
