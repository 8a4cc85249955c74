"""UK postcode validation, formatting and service coverage checks."""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Optional

from areafinder.directory import AreaDirectory, default_directory
from areafinder.exceptions import CoverageConflict, PostcodeInvalid
from areafinder.models import CoverageResult
from areafinder.text import expand_code

log = logging.getLogger(__name__)

_UK_POSTCODE_RE = re.compile(
    r"^[A-Z]{1,2}\d[A-Z\d]?\s?\d[A-Z]{2}$",
    re.IGNORECASE,
)
_DISTRICT_SHAPE_RE = re.compile(r"^[A-Z]{1,2}\d")
_MIN_LENGTH = 3
# Districts are 3 or 4 characters (BA5, BA16); longer first.
_DISTRICT_WIDTHS = (4, 3)


def validate(raw: str) -> bool:
    """Return True if *raw* looks like a valid UK postcode."""
    return bool(_UK_POSTCODE_RE.match(raw.strip()))


def normalise(raw: str) -> str:
    """
    Normalise to the canonical 'AREA NNN' format, e.g. 'ba51aa' -> 'BA5 1AA'.

    Raises PostcodeInvalid if the input is not a valid UK postcode.
    """
    if not validate(raw):
        raise PostcodeInvalid(raw)
    stripped = _squash(raw)
    return f"{stripped[:-3]} {stripped[-3:]}"


def format_postcode(raw: str) -> str:
    """
    Lenient display formatting for partial input.

    Upper-cases and removes whitespace, then puts a single space
    before the last three characters once there are at least five.
    """
    cleaned = _squash(raw)
    if len(cleaned) >= 5:
        return f"{cleaned[:-3]} {cleaned[-3:]}"
    return cleaned


def display_postcode(raw: str) -> str:
    """Canonical form of a full postcode, lenient formatting otherwise."""
    if validate(raw):
        return normalise(raw)
    return format_postcode(raw)


def _squash(raw: str) -> str:
    return "".join(raw.split()).upper()


class CoverageSet:
    """Read-only mapping of covered districts to their display names."""

    def __init__(self, names: Mapping[str, str]):
        self._names = MappingProxyType(dict(names))

    @property
    def districts(self) -> frozenset[str]:
        return frozenset(self._names)

    def name_for(self, district: str) -> Optional[str]:
        return self._names.get(district)

    def __contains__(self, district: object) -> bool:
        return district in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"CoverageSet({len(self._names)} districts)"


def build_coverage(directory: AreaDirectory) -> CoverageSet:
    """
    Derive the covered districts from *directory*.

    Compound codes expand to each district they stand for, named after
    the record's town. The directory's ``coverage_names`` are applied
    last and may rename a district or add one with no search entry.
    Raises CoverageConflict if two records claim one district under
    different names.
    """
    names: dict[str, str] = {}
    for prefix, record in directory.records():
        for district in expand_code(prefix, record.code):
            district = district.upper()
            existing = names.get(district)
            if existing is not None and existing != record.town:
                raise CoverageConflict(district, (existing, record.town))
            names[district] = record.town
    names.update(directory.coverage_names)
    return CoverageSet(names)


@lru_cache(maxsize=1)
def default_coverage() -> CoverageSet:
    """Coverage set of the process-wide directory, built on first use."""
    return build_coverage(default_directory())


def resolve_coverage(
    raw: str, coverage: Optional[CoverageSet] = None
) -> CoverageResult:
    """
    Decide whether the postcode in *raw* falls inside a covered district.

    Whitespace and case are ignored. Input that does not start with one
    or two letters and a digit is rejected without a lookup. The
    4-character prefix is tried before the 3-character one since
    districts are not fixed-width.
    """
    if coverage is None:
        coverage = default_coverage()

    candidate = _squash(raw)
    if len(candidate) < _MIN_LENGTH or not _DISTRICT_SHAPE_RE.match(candidate):
        log.debug("Rejected coverage input %r", raw)
        return CoverageResult(covered=False)

    for width in _DISTRICT_WIDTHS:
        district = candidate[:width]
        name = coverage.name_for(district)
        if name is not None:
            return CoverageResult(
                covered=True, district_name=name, district=district
            )

    log.debug("No covered district for %r", raw)
    return CoverageResult(covered=False)
