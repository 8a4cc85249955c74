"""Query normalisation and search-token derivation for area codes."""

import re

_WHITESPACE_RE = re.compile(r"\s+")
_LEADING_LETTERS_RE = re.compile(r"^[a-z]+")
_DISTRICT_RE = re.compile(r"^[a-z]+\d")
_NUMERIC_START_RE = re.compile(r"^\d")


def normalize(raw: str) -> str:
    """Trim and lower-case."""
    return raw.strip().lower()


def compact(raw: str) -> str:
    """Normalise and drop every whitespace character."""
    return _WHITESPACE_RE.sub("", normalize(raw))


def _segments(code: str) -> list[str]:
    """Split a compound code on '/' into whitespace-free, lower-case parts."""
    parts = (_WHITESPACE_RE.sub("", part).lower() for part in code.split("/"))
    return [part for part in parts if part]


def _walk(prefix: str, code: str):
    """
    Yield ``(segment, district)`` pairs for each segment of *code*.

    *district* is the segment with the carried-forward letters applied,
    or None when the segment is neither a full district nor a bare
    numeric suffix. Letters carry from the most recent segment that
    starts with letters, falling back to the group prefix, so that
    'BA20/21/22' reads as BA20, BA21, BA22.
    """
    letters = prefix.lower()
    for segment in _segments(code):
        lead = _LEADING_LETTERS_RE.match(segment)
        if lead:
            letters = lead.group(0)

        if _DISTRICT_RE.match(segment):
            yield segment, segment
        elif _NUMERIC_START_RE.match(segment) and letters:
            yield segment, letters + segment
        else:
            yield segment, None


def expand_code(prefix: str, code: str) -> list[str]:
    """
    Return the lower-case districts a (compound) code stands for, in order.

    'TA6/7' under 'TA' -> ['ta6', 'ta7'].
    """
    districts: list[str] = []
    for _, district in _walk(prefix, code):
        if district and district not in districts:
            districts.append(district)
    return districts


def tokens_for_code(prefix: str, code: str) -> frozenset[str]:
    """
    Build the search tokens for one directory code.

    Besides each expanded district, the bare prefix and the whole
    compacted code are always included. Segments that are not
    recognisable districts are kept verbatim.
    """
    tokens = {prefix.lower(), compact(code)}
    for segment, district in _walk(prefix, code):
        tokens.add(district or segment)
    tokens.discard("")
    return frozenset(tokens)
