"""
Service Area Finder — Interactive CLI
=====================================
Thin wrapper around the areafinder library.

Usage:
    areafinder                        # interactive mode
    areafinder search "wells"         # ranked matches for a query
    areafinder check "BA5 1AA"        # strict coverage check

Configuration is read from environment variables:
    AREAFINDER_DIRECTORY     Path to a directory JSON (default: bundled data)
    AREAFINDER_BOOKING_PATH  Booking form path (default: /book-appointment)
    AREAFINDER_LOG_LEVEL     Logging level (default: WARNING)
"""

import logging
import os
import re
import sys

from areafinder import AreaFinder
from areafinder.exceptions import AreaFinderError
from areafinder.models import CoverageResult, SearchResult
from areafinder.postcode import display_postcode
from areafinder.redirect import DEFAULT_BOOKING_PATH, booking_url, coverage_url

_BOOKING_PATH = os.environ.get("AREAFINDER_BOOKING_PATH", DEFAULT_BOOKING_PATH)
_LOG_LEVEL = os.environ.get("AREAFINDER_LOG_LEVEL", "WARNING").upper()

_POSTCODE_SHAPE_RE = re.compile(r"^[A-Z]{1,2}\d", re.IGNORECASE)

_BANNER = """\
╔══════════════════════════════════════╗
║        Service Area Finder           ║
║    Postcode or town → Coverage       ║
╚══════════════════════════════════════╝
Type 'q' to quit.
"""


def _print_results(result: SearchResult) -> None:
    if result.no_matches:
        print("  ✗ No matches found. Try a different postcode or town name.")
        return
    if not result.areas:
        return
    for position, area in enumerate(result, start=1):
        print(f"  {position:>2}. {area.code:<12} {area.town:<20} {area.keywords}")
    top = result.areas[0]
    print(f"\n  → {top.href or booking_url(top, _BOOKING_PATH)}")


def _print_coverage(postcode: str, result: CoverageResult) -> None:
    if result.covered:
        print(f"  ✓ We cover {result.district_name} ({result.district}).")
        print(f"  → {coverage_url(postcode, result, _BOOKING_PATH)}")
    else:
        print(f"  ✗ Sorry, we don't currently cover {display_postcode(postcode)}.")


def _run_interactive(finder: AreaFinder) -> None:
    print(_BANNER)

    while True:
        try:
            query = input("\nPostcode or town:  ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            break

        if query.lower() in ("q", "quit", "exit"):
            print("Bye!")
            break
        if not query:
            for area in finder.browse():
                print(f"  • {area.code:<12} {area.town}")
            continue

        if _POSTCODE_SHAPE_RE.match(query) and len("".join(query.split())) >= 3:
            _print_coverage(query, finder.check_coverage(query))
        _print_results(finder.search(query))


def main() -> None:
    """Entry point; supports both CLI args and interactive mode."""
    logging.basicConfig(
        level=getattr(logging, _LOG_LEVEL, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        finder = AreaFinder(
            os.environ.get("AREAFINDER_DIRECTORY") or None,
            booking_path=_BOOKING_PATH,
        )
    except AreaFinderError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        print(
            "Set AREAFINDER_DIRECTORY to a valid directory file, "
            "or unset it to use the bundled areas.",
            file=sys.stderr,
        )
        sys.exit(2)

    if len(sys.argv) == 3 and sys.argv[1] in ("search", "check"):
        command, value = sys.argv[1], sys.argv[2]
        if command == "search":
            result = finder.search(value)
            _print_results(result)
            if result.no_matches:
                sys.exit(1)
        else:
            coverage = finder.check_coverage(value)
            _print_coverage(value, coverage)
            if not coverage.covered:
                sys.exit(1)
    elif len(sys.argv) == 1:
        _run_interactive(finder)
    else:
        print(__doc__, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
