"""
Selection state and the single delayed redirect to the booking form.

A controller is either idle or confirming. Confirming means a
confirmation message is showing and exactly one navigation is
scheduled. Every new selection, and teardown, cancels the pending
timer before anything else happens.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import parse_qs, urlencode

from areafinder.models import CoverageResult, FlattenedArea
from areafinder.postcode import display_postcode

log = logging.getLogger(__name__)

AREA_REDIRECT_DELAY = 1.2
COVERAGE_REDIRECT_DELAY = 1.5
DEFAULT_BOOKING_PATH = "/book-appointment"

IDLE = "idle"
CONFIRMING = "confirming"


class ThreadingScheduler:
    """
    Runs callbacks on a ``threading.Timer``.

    Any object with ``call_later(delay, callback)`` returning a handle
    that has ``cancel()`` can stand in, including an asyncio event loop.
    """

    def call_later(self, delay: float, callback: Callable[[], None]):
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


def booking_url(area: FlattenedArea, booking_path: str = DEFAULT_BOOKING_PATH) -> str:
    """Quote-form link for a selected area."""
    params = {"intent": "quote", "postcode": area.primary_district}
    if area.town:
        params["area"] = area.town
    return f"{booking_path}?{urlencode(params)}"


def coverage_url(
    postcode: str,
    result: CoverageResult,
    booking_path: str = DEFAULT_BOOKING_PATH,
) -> str:
    """Booking-form link after a successful coverage check."""
    params = {"intent": "book"}
    formatted = display_postcode(postcode)
    if formatted:
        params["postcode"] = formatted
    if result.district_name:
        params["coverageArea"] = result.district_name
    return f"{booking_path}?{urlencode(params)}"


@dataclass(frozen=True)
class Prefill:
    """Postcode and town handed back to the booking page."""

    postcode: Optional[str] = None
    town: Optional[str] = None


def parse_prefill(query_string: str) -> Prefill:
    """
    Read pre-seeded values from a booking-page query string.

    Understands both redirect flavours: 'area' from a search selection
    and 'coverageArea' from a coverage check.
    """
    params = parse_qs(query_string.lstrip("?"))

    def first(key: str) -> Optional[str]:
        values = [v.strip() for v in params.get(key, []) if v.strip()]
        return values[0] if values else None

    postcode = first("postcode")
    return Prefill(
        postcode=display_postcode(postcode) if postcode else None,
        town=first("area") or first("coverageArea"),
    )


class SelectionController:
    """
    Turns a chosen area (or a covered postcode) into one navigation.

    *navigate* receives the destination URL. Areas that own a detail
    page are navigated to immediately; everything else waits a short,
    readable delay behind a confirmation message.
    """

    def __init__(
        self,
        navigate: Callable[[str], None],
        scheduler=None,
        booking_path: str = DEFAULT_BOOKING_PATH,
        area_delay: float = AREA_REDIRECT_DELAY,
        coverage_delay: float = COVERAGE_REDIRECT_DELAY,
    ):
        self._navigate = navigate
        self._scheduler = scheduler or ThreadingScheduler()
        self._booking_path = booking_path
        self._area_delay = area_delay
        self._coverage_delay = coverage_delay

        self._lock = threading.Lock()
        self._handle = None
        self._generation = 0
        self._pending_area: Optional[FlattenedArea] = None
        self._pending_url: Optional[str] = None
        self._message: Optional[str] = None

    # ── State ─────────────────────────────────────────────────────

    @property
    def state(self) -> str:
        return CONFIRMING if self._pending_url is not None else IDLE

    @property
    def pending_area(self) -> Optional[FlattenedArea]:
        return self._pending_area

    @property
    def pending_url(self) -> Optional[str]:
        return self._pending_url

    @property
    def confirmation_message(self) -> Optional[str]:
        return self._message

    # ── Actions ───────────────────────────────────────────────────

    def select(self, area: FlattenedArea) -> str:
        """
        Handle a user picking *area* from the result list.

        Returns the destination URL, whether it was navigated to now
        or scheduled.
        """
        if area.href:
            self.cancel()
            log.debug("Navigating straight to %s", area.href)
            self._navigate(area.href)
            return area.href

        url = booking_url(area, self._booking_path)
        self._schedule(
            url,
            self._area_delay,
            f"Yes! We cover {area.town}. Redirecting to the quote form...",
            area,
        )
        return url

    def confirm_coverage(
        self, postcode: str, result: CoverageResult
    ) -> Optional[str]:
        """
        Schedule the booking redirect for a covered postcode.

        Uncovered results cancel any pending redirect and return None.
        """
        if not result.covered:
            self.cancel()
            return None
        url = coverage_url(postcode, result, self._booking_path)
        name = result.district_name or "your area"
        self._schedule(
            url,
            self._coverage_delay,
            f"Congratulations! We cover {name}. "
            "Redirecting to the quote form...",
            None,
        )
        return url

    def cancel(self) -> None:
        """Drop the pending redirect, if any, and return to idle."""
        with self._lock:
            self._clear()

    def close(self) -> None:
        """Tear down; no navigation fires after this."""
        self.cancel()

    def __enter__(self) -> SelectionController:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ── Private helpers ───────────────────────────────────────────

    def _schedule(
        self,
        url: str,
        delay: float,
        message: str,
        area: Optional[FlattenedArea],
    ) -> None:
        with self._lock:
            self._clear()
            generation = self._generation
            self._pending_area = area
            self._pending_url = url
            self._message = message

        # Outside the lock: a scheduler may run the callback right away.
        handle = self._scheduler.call_later(
            delay, lambda: self._fire(generation)
        )
        with self._lock:
            current = (
                generation == self._generation
                and self._pending_url is not None
            )
            if current:
                self._handle = handle
        if not current:
            handle.cancel()
            return
        log.debug("Scheduled redirect to %s in %.1fs", url, delay)

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A superseded timer that could not be cancelled in time.
            if generation != self._generation or self._pending_url is None:
                return
            url = self._pending_url
            self._handle = None
            self._pending_area = None
            self._pending_url = None
            self._message = None
        log.debug("Redirecting to %s", url)
        self._navigate(url)

    def _clear(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            log.debug("Cancelled redirect to %s", self._pending_url)
        self._handle = None
        self._generation += 1
        self._pending_area = None
        self._pending_url = None
        self._message = None
