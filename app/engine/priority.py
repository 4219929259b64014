"""
Waitlist priority — recomputed on every read, never stored.

::

    score = base
          + min(wait_cap, wait_factor * ln(1 + days_waiting))
          + package_bonus            (active package with sessions left)
          + day_flexibility          (5 when any day, else 5 * days / 7)
          + time_flexibility         (5 when any time, else 5 * min(1, window / 12h))

clamped to ``[0, 100]``.  Sorting is by score descending with ties
broken by ``created_at`` ascending (first come, first served).
"""

from __future__ import annotations

import datetime
import math
from typing import Optional, Sequence

from pydantic import BaseModel, Field

from app.schemas.interval import TimeSlot, time_to_minutes
from app.engine.scoring import fits_preferences

# ======================================================================
# Configuration
# ======================================================================


class PriorityConfig(BaseModel):
    base_score: float = Field(50.0, ge=0.0, le=100.0)
    wait_factor: float = Field(8.0, ge=0.0)
    wait_cap: float = Field(20.0, ge=0.0)
    package_bonus: float = Field(20.0, ge=0.0)
    day_flexibility_max: float = Field(5.0, ge=0.0)
    time_flexibility_max: float = Field(5.0, ge=0.0)
    full_flexibility_window_minutes: int = Field(12 * 60, ge=60)
    offer_response_hours: int = Field(4, ge=1, description="Time a notified client has to answer")


DEFAULT_CONFIG = PriorityConfig()

# ======================================================================
# Score
# ======================================================================


def days_waiting(created_at: datetime.datetime, now: datetime.datetime) -> int:
    return max(0, (now - created_at).days)


def _flexibility(preferred_days: Sequence[int], preferred_time_start: Optional[datetime.time],
                 preferred_time_end: Optional[datetime.time], config: PriorityConfig, ) -> float:
    if preferred_days:
        day_part = config.day_flexibility_max * len(set(preferred_days)) / 7.0
    else:
        day_part = config.day_flexibility_max

    if preferred_time_start is None and preferred_time_end is None:
        time_part = config.time_flexibility_max
    else:
        low = time_to_minutes(preferred_time_start) if preferred_time_start else 0
        high = time_to_minutes(preferred_time_end) if preferred_time_end else 24 * 60
        width = max(0, high - low)
        time_part = config.time_flexibility_max * min(1.0, width / config.full_flexibility_window_minutes)

    return day_part + time_part


def compute_priority_score(entry, now: datetime.datetime, has_active_package: bool = False,
                           config: Optional[PriorityConfig] = None, ) -> int:
    """Priority in ``[0, 100]`` for a waitlist entry.

    Monotonic non-decreasing in time waited, in package ownership and in
    the flexibility of the stated preferences.
    """
    if config is None:
        config = DEFAULT_CONFIG

    waited = days_waiting(entry.created_at, now)
    score = config.base_score
    score += min(config.wait_cap, config.wait_factor * math.log1p(waited))
    if has_active_package:
        score += config.package_bonus
    score += _flexibility(entry.preferred_days, entry.preferred_time_start, entry.preferred_time_end, config)
    return int(max(0, min(100, round(score))))


# ======================================================================
# Ordering and matching
# ======================================================================


def sort_waitlist(entries: Sequence, scores: dict[int, int], sort_by: str = "priority") -> list:
    """Order entries for display.

    ``priority``: score descending, then oldest first.
    ``days_waiting``: oldest first.
    """
    if sort_by == "days_waiting":
        return sorted(entries, key=lambda e: (e.created_at, e.id))
    return sorted(entries, key=lambda e: (-scores.get(e.id, 0), e.created_at, e.id))


def slot_matches_entry(entry, slot: TimeSlot) -> bool:
    """True when the freed slot satisfies the entry's stated preferences."""
    return fits_preferences(slot, entry.preferred_days, entry.preferred_time_start, entry.preferred_time_end)
