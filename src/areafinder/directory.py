"""Loading and validating the static area directory."""

from __future__ import annotations

import json
import logging
import os
import re
from functools import lru_cache
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from areafinder.exceptions import (
    DirectoryInvalid,
    DirectoryNotFound,
    MalformedAreaCode,
)
from areafinder.models import AreaGroup, AreaRecord
from areafinder.text import expand_code

log = logging.getLogger(__name__)

DIRECTORY_ENV = "AREAFINDER_DIRECTORY"
_BUNDLED = "service_areas.json"

_PREFIX_RE = re.compile(r"^[A-Z]{2}$")
_FULL_SEGMENT_RE = re.compile(r"^[A-Z]{1,2}\d[A-Z\d]?$", re.IGNORECASE)
_SUFFIX_SEGMENT_RE = re.compile(r"^\d{1,2}$")
_DISTRICT_RE = re.compile(r"^[A-Z]{1,2}\d[A-Z\d]?$")
# Coverage lookups only try 4- and 3-character prefixes.
_DISTRICT_LENGTHS = (3, 4)


def _is_district(value: str) -> bool:
    return len(value) in _DISTRICT_LENGTHS and bool(_DISTRICT_RE.match(value))


class AreaDirectory:
    """
    Immutable collection of area groups, keyed by postcode prefix.

    Construct through ``from_mapping`` or ``load_directory`` so the
    data is validated once, up front. Any defect is a data-authoring
    bug and raises before the directory is ever searched.
    """

    def __init__(
        self,
        groups: tuple[AreaGroup, ...],
        detail_routes: Mapping[str, str] | None = None,
        coverage_names: Mapping[str, str] | None = None,
        source: str = "<memory>",
    ):
        self._groups = tuple(groups)
        self._by_prefix = MappingProxyType({g.prefix: g for g in self._groups})
        self._detail_routes = MappingProxyType(dict(detail_routes or {}))
        self._coverage_names = MappingProxyType(dict(coverage_names or {}))
        self.source = source

    # ── Construction ──────────────────────────────────────────────

    @classmethod
    def from_mapping(cls, data: Mapping, source: str = "<memory>") -> AreaDirectory:
        """Validate a decoded JSON document and build a directory from it."""
        if not isinstance(data, Mapping) or "groups" not in data:
            raise DirectoryInvalid(source, "missing 'groups'")
        if not isinstance(data["groups"], list):
            raise DirectoryInvalid(source, "'groups' must be a list")

        groups: list[AreaGroup] = []
        seen_prefixes: set[str] = set()
        for raw_group in data["groups"]:
            group = _parse_group(raw_group, source)
            if group.prefix in seen_prefixes:
                raise DirectoryInvalid(
                    source, f"duplicate prefix '{group.prefix}'"
                )
            seen_prefixes.add(group.prefix)
            groups.append(group)

        detail_routes = _string_mapping(data, "detail_routes", source)
        coverage_names = {
            "".join(k.split()).upper(): v
            for k, v in _string_mapping(data, "coverage_names", source).items()
        }
        for district in coverage_names:
            if not _is_district(district):
                raise DirectoryInvalid(
                    source, f"bad coverage district '{district}'"
                )

        return cls(tuple(groups), detail_routes, coverage_names, source)

    # ── Read-only views ───────────────────────────────────────────

    @property
    def groups(self) -> tuple[AreaGroup, ...]:
        return self._groups

    @property
    def prefixes(self) -> tuple[str, ...]:
        return tuple(self._by_prefix)

    @property
    def detail_routes(self) -> Mapping[str, str]:
        return self._detail_routes

    @property
    def coverage_names(self) -> Mapping[str, str]:
        return self._coverage_names

    def group(self, prefix: str) -> Optional[AreaGroup]:
        return self._by_prefix.get(prefix.strip().upper())

    def records(self) -> Iterator[tuple[str, AreaRecord]]:
        """Yield ``(prefix, record)`` in directory order."""
        for group in self._groups:
            for record in group.areas:
                yield group.prefix, record

    def __len__(self) -> int:
        return sum(len(g.areas) for g in self._groups)

    def __repr__(self) -> str:
        return (
            f"AreaDirectory(source={self.source!r}, "
            f"groups={len(self._groups)}, areas={len(self)})"
        )


def _string_mapping(data: Mapping, key: str, source: str) -> dict[str, str]:
    """Optional ``{str: str}`` section of the document, empty when absent."""
    section = data.get(key) or {}
    if not isinstance(section, Mapping) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in section.items()
    ):
        raise DirectoryInvalid(source, f"'{key}' must map strings to strings")
    return dict(section)


def _parse_group(raw: Mapping, source: str) -> AreaGroup:
    if not isinstance(raw, Mapping):
        raise DirectoryInvalid(source, "each group must be an object")
    try:
        prefix = str(raw["prefix"]).strip().upper()
        name = str(raw["name"]).strip()
        raw_areas = raw["areas"]
    except (KeyError, TypeError) as exc:
        raise DirectoryInvalid(source, f"group missing field {exc}") from exc

    if not _PREFIX_RE.match(prefix):
        raise DirectoryInvalid(source, f"bad prefix '{prefix}'")
    if not isinstance(raw_areas, list):
        raise DirectoryInvalid(source, f"areas of '{prefix}' must be a list")

    areas: list[AreaRecord] = []
    seen_codes: set[str] = set()
    for raw_area in raw_areas:
        if not isinstance(raw_area, Mapping):
            raise DirectoryInvalid(
                source, f"area under '{prefix}' must be an object"
            )
        try:
            code = str(raw_area["code"]).strip()
            town = str(raw_area["town"]).strip()
        except (KeyError, TypeError) as exc:
            raise DirectoryInvalid(
                source, f"area under '{prefix}' missing field {exc}"
            ) from exc
        if not town:
            raise DirectoryInvalid(source, f"empty town for '{code}'")
        check_code(prefix, code, source)
        if code.upper() in seen_codes:
            raise DirectoryInvalid(
                source, f"duplicate code '{code}' under '{prefix}'"
            )
        seen_codes.add(code.upper())
        areas.append(
            AreaRecord(
                code=code,
                town=town,
                keywords=str(raw_area.get("keywords") or "").strip(),
            )
        )
    return AreaGroup(prefix=prefix, display_name=name, areas=tuple(areas))


def check_code(prefix: str, code: str, source: str = "<memory>") -> None:
    """
    Raise MalformedAreaCode unless every '/'-separated segment of *code*
    is a full district ('BA20') or a bare 1-2 digit suffix ('21'), and
    every district it expands to is 3 or 4 characters long.
    """
    segments = ["".join(s.split()) for s in code.split("/")]
    if not segments or not all(segments):
        raise MalformedAreaCode(source, prefix, code)
    for segment in segments:
        if not (
            _FULL_SEGMENT_RE.match(segment)
            or _SUFFIX_SEGMENT_RE.match(segment)
        ):
            raise MalformedAreaCode(source, prefix, code)
    for district in expand_code(prefix, code):
        if not _is_district(district.upper()):
            raise MalformedAreaCode(source, prefix, code)


def load_directory(path: str | Path) -> AreaDirectory:
    """
    Read and validate a directory JSON file.

    Raises DirectoryNotFound if *path* does not exist and
    DirectoryInvalid if it cannot be parsed.
    """
    path = Path(path)
    if not path.is_file():
        raise DirectoryNotFound(str(path))
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise DirectoryInvalid(str(path), f"not valid JSON ({exc})") from exc
    directory = AreaDirectory.from_mapping(data, source=str(path))
    log.info("Loaded %d areas in %d groups from %s",
             len(directory), len(directory.groups), path)
    return directory


def _load_bundled() -> AreaDirectory:
    data_file = resources.files("areafinder.data").joinpath(_BUNDLED)
    data = json.loads(data_file.read_text(encoding="utf-8"))
    directory = AreaDirectory.from_mapping(data, source=_BUNDLED)
    log.info("Loaded %d bundled areas in %d groups",
             len(directory), len(directory.groups))
    return directory


@lru_cache(maxsize=1)
def default_directory() -> AreaDirectory:
    """
    Return the process-wide directory, loading it on first use.

    The file named by AREAFINDER_DIRECTORY wins over the bundled data.
    """
    override = os.environ.get(DIRECTORY_ENV)
    if override:
        return load_directory(override)
    return _load_bundled()
