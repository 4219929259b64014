"""
Gap detection — unbooked intervals inside a coach's availability.

The walk keeps a cursor that never regresses, so overlapping and
back-to-back bookings collapse into one occupied run::

    window  |-----------------------------------------------|
    booked       |====|   |=======|
                      |=====|              (overlap)
    gaps    |----|                |-----------------------|

Detection is a pure function of the snapshot: calling it twice on the
same data returns identical gaps.
"""

from __future__ import annotations

import datetime
import logging
from typing import Iterable, Optional, Sequence

from sqlmodel import Session

from app.db.repositories.booking import AvailabilityRepository, BookingRepository
from app.schemas.interval import Gap, TimeSlot, minutes_to_time, time_to_minutes

log = logging.getLogger(__name__)

DEFAULT_MIN_GAP_MINUTES = 15


# ======================================================================
# Pure walk
# ======================================================================


def _clip(slots: Iterable[TimeSlot], window_start: int, window_end: int) -> list[tuple[int, int]]:
    """Minute ranges of ``slots`` intersected with the window, sorted by start."""
    clipped = []
    for slot in slots:
        start = max(slot.start_minutes, window_start)
        end = min(slot.end_minutes, window_end)
        if start < end:
            clipped.append((start, end))
    clipped.sort()
    return clipped


def occupied_minutes(slots: Iterable[TimeSlot], window_start: int, window_end: int) -> int:
    """Minutes of the window covered by ``slots``; overlaps count once."""
    total = 0
    cursor = window_start
    for start, end in _clip(slots, window_start, window_end):
        start = max(start, cursor)
        if end > start:
            total += end - start
            cursor = end
    return total


def find_gaps(window_start: int, window_end: int, date: datetime.date, booked_slots: Iterable[TimeSlot],
              min_gap_minutes: int = DEFAULT_MIN_GAP_MINUTES, ) -> list[Gap]:
    """Return the gaps of one availability window.

    Parameters
    ----------
    window_start, window_end : int
        Window bounds in minutes since midnight.
    date : datetime.date
        Date stamped on every returned gap.
    booked_slots : iterable of TimeSlot
        Active bookings of the day; anything outside the window is ignored.
    min_gap_minutes : int
        Gaps shorter than this are dropped.
    """
    if window_end <= window_start:
        return []

    gaps: list[Gap] = []
    cursor = window_start

    for start, end in _clip(booked_slots, window_start, window_end):
        if start - cursor >= min_gap_minutes:
            gaps.append(_gap(date, cursor, start))
        cursor = max(cursor, end)

    if window_end - cursor >= min_gap_minutes:
        gaps.append(_gap(date, cursor, window_end))

    return gaps


def _gap(date: datetime.date, start: int, end: int) -> Gap:
    return Gap(date=date, start_time=minutes_to_time(start), end_time=minutes_to_time(end),
               duration_minutes=end - start, )


def find_gaps_for_day(date: datetime.date, windows: Sequence, bookings: Sequence,
                      min_gap_minutes: int = DEFAULT_MIN_GAP_MINUTES, ) -> list[Gap]:
    """Gaps across every availability window of a day, in window order."""
    booked = [TimeSlot.of(b) for b in bookings if b.date == date]
    gaps: list[Gap] = []
    for window in sorted((w for w in windows if w.date == date), key=lambda w: w.start_time):
        gaps.extend(find_gaps(time_to_minutes(window.start_time), time_to_minutes(window.end_time), date, booked,
                              min_gap_minutes, ))
    return gaps


def slot_is_free(windows: Sequence, bookings: Sequence, slot: TimeSlot,
                 exclude_booking_id: Optional[int] = None, ) -> bool:
    """True when ``slot`` lies inside one window and overlaps no booking.

    ``exclude_booking_id`` lets a booking be checked against its own
    destination (the booking being moved does not block itself).
    """
    inside = any(TimeSlot.of(w).contains(slot) for w in windows if w.date == slot.date)
    if not inside:
        return False
    for booking in bookings:
        if exclude_booking_id is not None and booking.id == exclude_booking_id:
            continue
        if booking.date == slot.date and TimeSlot.of(booking).overlaps(slot):
            return False
    return True


# ======================================================================
# Main entry point
# ======================================================================


def detect_gaps(session: Session, coach_id: int, date: datetime.date,
                min_gap_minutes: int = DEFAULT_MIN_GAP_MINUTES, ) -> list[Gap]:
    """Fetch one snapshot of the day and return its gaps.

    No availability window → no gaps.  A window without bookings is one
    gap spanning the whole window.
    """
    windows = AvailabilityRepository(session).get_by_coach_and_date(coach_id, date)
    if not windows:
        return []
    bookings = BookingRepository(session).get_active_by_coach_and_date(coach_id, date)
    gaps = find_gaps_for_day(date, windows, bookings, min_gap_minutes)
    log.debug("[gaps] coach=%s date=%s windows=%d bookings=%d gaps=%d", coach_id, date, len(windows),
              len(bookings), len(gaps))
    return gaps
