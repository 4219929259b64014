"""
Optimization scoring — rank candidate moves into calendar gaps.

Two kinds of candidates are evaluated against every gap:

- **reschedule**: a ``scheduled`` booking on the same day that is not
  already optimally placed (free time precedes it inside its window)
  is moved to start at the gap start, keeping its duration, provided
  the day ends up with fewer gaps or a smaller largest gap (a move that
  only shifts a gap elsewhere is not proposed);
- **waitlist_fill**: an active waitlisted client whose stated
  preferences admit a default-length session at the gap start.

The benefit score is a weighted combination of three signals in
``[0, 1]``, each monotonic:

=================  ======  ============================================
signal             weight  meaning
=================  ======  ============================================
fit                0.5     share of the gap filled by the move
preference         0.3     closeness to the centre of the preferred
                           window (0.5 when no window is stated)
urgency            0.2     sooner target dates score higher
=================  ======  ============================================
"""

from __future__ import annotations

import datetime
from typing import Iterable, Mapping, Optional, Sequence

from pydantic import BaseModel, Field

from app.engine.gaps import DEFAULT_MIN_GAP_MINUTES, find_gaps_for_day
from app.models.booking import BookingStatus
from app.models.suggestion import SuggestionType
from app.schemas.interval import MINUTES_PER_DAY, Gap, TimeSlot, time_to_minutes
from app.schemas.optimization import Opportunity

# ======================================================================
# Configuration
# ======================================================================


class ScoringConfig(BaseModel):
    """Weights and limits of the optimization scorer."""

    fit_weight: float = Field(0.5, ge=0.0, le=1.0)
    preference_weight: float = Field(0.3, ge=0.0, le=1.0)
    urgency_weight: float = Field(0.2, ge=0.0, le=1.0)

    urgency_horizon_days: int = Field(14, ge=1, description="Targets this far out get zero urgency")
    neutral_preference: float = Field(0.5, ge=0.0, le=1.0)
    default_session_minutes: int = Field(60, ge=15, le=240, description="Length of a waitlist_fill session")
    min_gap_minutes: int = Field(DEFAULT_MIN_GAP_MINUTES, ge=1)
    min_benefit_score: int = Field(30, ge=0, le=100, description="Candidates below this are discarded")
    suggestion_ttl_days: int = Field(7, ge=1)


DEFAULT_CONFIG = ScoringConfig()

# ======================================================================
# Preference matching
# ======================================================================


def _preferred_bounds(start: Optional[datetime.time], end: Optional[datetime.time]) -> Optional[tuple[int, int]]:
    """Preferred window in minutes, or ``None`` when no bound is stated.

    A single stated bound is open on the other side of the day.
    """
    if start is None and end is None:
        return None
    low = time_to_minutes(start) if start is not None else 0
    high = time_to_minutes(end) if end is not None else MINUTES_PER_DAY
    return low, high


def fits_preferences(slot: TimeSlot, preferred_days: Sequence[int] = (),
                     preferred_time_start: Optional[datetime.time] = None,
                     preferred_time_end: Optional[datetime.time] = None, ) -> bool:
    """True when the slot falls on an accepted day and inside the preferred window."""
    if preferred_days and slot.weekday not in preferred_days:
        return False
    bounds = _preferred_bounds(preferred_time_start, preferred_time_end)
    if bounds is None:
        return True
    low, high = bounds
    return low <= slot.start_minutes and slot.end_minutes <= high


# ======================================================================
# Signals
# ======================================================================


def _fit_score(duration_minutes: int, gap_minutes: int) -> float:
    if gap_minutes <= 0:
        return 0.0
    return max(0.0, min(1.0, duration_minutes / gap_minutes))


def _preference_score(slot: TimeSlot, preferred_time_start: Optional[datetime.time],
                      preferred_time_end: Optional[datetime.time], neutral: float = 0.5, ) -> float:
    bounds = _preferred_bounds(preferred_time_start, preferred_time_end)
    if bounds is None:
        return neutral
    low, high = bounds
    half_width = max((high - low) / 2.0, 1.0)
    centre = low + (high - low) / 2.0
    return max(0.0, 1.0 - abs(slot.start_minutes - centre) / half_width)


def _urgency_score(target: datetime.date, today: datetime.date, horizon_days: int) -> float:
    days_ahead = max(0, (target - today).days)
    return max(0.0, 1.0 - days_ahead / horizon_days)


def compute_benefit_score(fit: float, preference: float, urgency: float,
                          config: Optional[ScoringConfig] = None, ) -> int:
    """Combine the three signals into an integer score in ``[0, 100]``."""
    if config is None:
        config = DEFAULT_CONFIG
    raw = config.fit_weight * fit + config.preference_weight * preference + config.urgency_weight * urgency
    return max(0, min(100, round(raw * 100)))


# ======================================================================
# Candidate search
# ======================================================================


def is_optimally_placed(booking, windows: Sequence, bookings: Sequence) -> bool:
    """A booking is optimally placed when no free time directly precedes it.

    That is: it starts at its window start, or another active booking
    covers the minute right before it.
    """
    start = time_to_minutes(booking.start_time)
    for window in windows:
        if window.date == booking.date and time_to_minutes(window.start_time) == start:
            return True
    for other in bookings:
        if other.id == booking.id or other.date != booking.date:
            continue
        if time_to_minutes(other.start_time) < start <= time_to_minutes(other.end_time):
            return True
    return False


def reduces_fragmentation(booking, target: TimeSlot, windows: Sequence, bookings: Sequence,
                          min_gap_minutes: int = DEFAULT_MIN_GAP_MINUTES, ) -> bool:
    """True when moving ``booking`` to ``target`` leaves fewer gaps or a smaller largest gap.

    The gaps are re-detected with the booking at its new position, so the
    hole it leaves behind counts against the move.
    """
    before = find_gaps_for_day(target.date, windows, bookings, min_gap_minutes)
    moved = [target if other is booking else other for other in bookings]
    after = find_gaps_for_day(target.date, windows, moved, min_gap_minutes)
    if len(after) < len(before):
        return True
    largest_before = max((g.duration_minutes for g in before), default=0)
    largest_after = max((g.duration_minutes for g in after), default=0)
    return largest_after < largest_before


def _opportunity(kind: SuggestionType, client_id: int, gap: Gap, target: TimeSlot, today: datetime.date,
                 preferred_time_start, preferred_time_end, config: ScoringConfig, reason: str,
                 source_booking_id: Optional[int] = None, waitlist_entry_id: Optional[int] = None, ) -> Opportunity:
    fit = _fit_score(target.duration_minutes, gap.duration_minutes)
    pref = _preference_score(target, preferred_time_start, preferred_time_end, config.neutral_preference)
    urgency = _urgency_score(target.date, today, config.urgency_horizon_days)
    return Opportunity(suggestion_type=kind, source_booking_id=source_booking_id,
                       waitlist_entry_id=waitlist_entry_id, client_id=client_id, target_gap=gap,
                       proposed_date=target.date, proposed_start_time=target.start_time,
                       proposed_end_time=target.end_time,
                       benefit_score=compute_benefit_score(fit, pref, urgency, config), fit_score=round(fit, 4),
                       preference_score=round(pref, 4), urgency_score=round(urgency, 4), reason=reason, )


def _reschedule_candidates(gap: Gap, day_bookings: Sequence, windows: Sequence, preferences: Mapping,
                           today: datetime.date, config: ScoringConfig, ) -> list[Opportunity]:
    found = []
    for booking in day_bookings:
        if booking.status != BookingStatus.scheduled or booking.date < today:
            continue
        current = TimeSlot.of(booking)
        if current.duration_minutes > gap.duration_minutes:
            continue
        target = TimeSlot.from_minutes(gap.date, gap.start_minutes, gap.start_minutes + current.duration_minutes)
        if target == current:
            continue
        if is_optimally_placed(booking, windows, day_bookings):
            continue
        if not reduces_fragmentation(booking, target, windows, day_bookings, config.min_gap_minutes):
            continue
        pref = preferences.get(booking.client_id)
        days = pref.preferred_days if pref is not None else ()
        p_start = pref.preferred_time_start if pref is not None else None
        p_end = pref.preferred_time_end if pref is not None else None
        if not fits_preferences(target, days, p_start, p_end):
            continue
        reason = (f"Move {current.start_time:%H:%M} session to {target.start_time:%H:%M} "
                  f"to fill a {gap.duration_minutes}min gap")
        found.append(_opportunity(SuggestionType.reschedule, booking.client_id, gap, target, today, p_start, p_end,
                                  config, reason, source_booking_id=booking.id, ))
    return found


def _waitlist_candidates(gap: Gap, waitlist: Sequence, today: datetime.date,
                         config: ScoringConfig, ) -> list[Opportunity]:
    length = config.default_session_minutes
    if gap.duration_minutes < length:
        return []
    target = TimeSlot.from_minutes(gap.date, gap.start_minutes, gap.start_minutes + length)
    found = []
    for entry in waitlist:
        if not fits_preferences(target, entry.preferred_days, entry.preferred_time_start, entry.preferred_time_end):
            continue
        reason = f"Offer {target.start_time:%H:%M} on {target.date.isoformat()} to a waitlisted client"
        found.append(_opportunity(SuggestionType.waitlist_fill, entry.client_id, gap, target, today,
                                  entry.preferred_time_start, entry.preferred_time_end, config, reason,
                                  waitlist_entry_id=entry.id, ))
    return found


def _sort_key(opp: Opportunity):
    return -opp.benefit_score, opp.proposed_date, opp.proposed_start_time


def find_opportunities(dates: Iterable[datetime.date], today: datetime.date, windows: Sequence,
                       bookings: Sequence, preferences: Mapping, waitlist: Sequence = (),
                       config: Optional[ScoringConfig] = None, ) -> list[Opportunity]:
    """Score every candidate move for the given dates, best first.

    Parameters
    ----------
    dates : iterable of date
        Days to analyse; days before ``today`` are skipped.
    windows, bookings : sequences
        Snapshot of availability and active bookings covering ``dates``.
    preferences : mapping
        ``client_id -> ClientPreference`` (missing clients have no constraint).
    waitlist : sequence
        Active waitlist entries.
    """
    if config is None:
        config = DEFAULT_CONFIG

    opportunities: list[Opportunity] = []
    for date in dates:
        if date < today:
            continue
        day_windows = [w for w in windows if w.date == date]
        if not day_windows:
            continue
        day_bookings = [b for b in bookings if b.date == date]
        for gap in find_gaps_for_day(date, day_windows, day_bookings, config.min_gap_minutes):
            opportunities.extend(_reschedule_candidates(gap, day_bookings, day_windows, preferences, today, config))
            opportunities.extend(_waitlist_candidates(gap, waitlist, today, config))

    opportunities = [o for o in opportunities if o.benefit_score >= config.min_benefit_score]
    opportunities.sort(key=_sort_key)
    return opportunities
