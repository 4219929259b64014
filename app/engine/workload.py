"""
Workload monitor — daily density, overload and burnout streaks.

Two independent signals are reported:

- **overload** (intensity): a single day whose booked share of the
  available time reaches ``overload_threshold``;
- **burnout risk** (duration): more than ``burnout_streak_threshold``
  consecutive days with at least one active booking, regardless of how
  dense those days are.

Everything is derived on read from one snapshot; nothing is persisted.
"""

from __future__ import annotations

import datetime
import logging
from typing import Optional, Sequence

from pydantic import BaseModel, Field
from sqlmodel import Session

from app.db.repositories.booking import AvailabilityRepository, BookingRepository
from app.engine.gaps import occupied_minutes
from app.schemas.interval import MINUTES_PER_DAY, TimeSlot, time_to_minutes
from app.schemas.workload import DayDensity, TimeWindowOverload, WorkloadMetrics

log = logging.getLogger(__name__)

# ======================================================================
# Configuration
# ======================================================================


class WorkloadConfig(BaseModel):
    overload_threshold: float = Field(85.0, ge=0.0, le=100.0, description="Density (%) at which a day is overloaded")
    burnout_streak_threshold: int = Field(6, ge=1, description="Risk when the streak exceeds this")
    fallback_workday_minutes: int = Field(480, ge=60, description="Used when bookings exist without windows")
    streak_lookback_days: int = Field(60, ge=7)
    sessions_per_window_threshold: int = Field(6, ge=1)


DEFAULT_CONFIG = WorkloadConfig()

# ======================================================================
# Labelling
# ======================================================================

# (label, lower bound inclusive)
_LABELS: list[tuple[str, float]] = [("critical", 95.0), ("very_busy", 85.0), ("good", 60.0), ("light", 30.0),
                                    ("available", 0.0), ]


def density_label(density: float) -> str:
    for label, low in _LABELS:
        if density >= low:
            return label
    return "available"


# ======================================================================
# Pure computation
# ======================================================================


def compute_day_density(date: datetime.date, windows: Sequence, bookings: Sequence,
                        config: Optional[WorkloadConfig] = None, ) -> DayDensity:
    """Density of one day.  ``windows``/``bookings`` may span other days.

    Booked time is the union of the bookings clipped to the windows, so
    double bookings count once and density never exceeds 100.
    """
    if config is None:
        config = DEFAULT_CONFIG

    day_bookings = [b for b in bookings if b.date == date]
    day_windows = [TimeSlot.of(w) for w in windows if w.date == date]
    slots = [TimeSlot.of(b) for b in day_bookings]
    available = sum(w.duration_minutes for w in day_windows)

    if day_windows:
        booked = sum(occupied_minutes(slots, w.start_minutes, w.end_minutes) for w in day_windows)
    else:
        booked = occupied_minutes(slots, 0, MINUTES_PER_DAY)
        if day_bookings:
            available = config.fallback_workday_minutes

    density = round(booked / available * 100, 1) if available > 0 else 0.0
    return DayDensity(date=date, available_minutes=available, booked_minutes=booked, density=density,
                      session_count=len(day_bookings), is_overloaded=density >= config.overload_threshold,
                      label=density_label(density), )


def count_consecutive_work_days(work_dates: set[datetime.date], as_of: datetime.date, lookback_days: int = 60) -> int:
    """Days with bookings counted backward from ``as_of`` until the first empty day."""
    streak = 0
    day = as_of
    while streak < lookback_days and day in work_dates:
        streak += 1
        day -= datetime.timedelta(days=1)
    return streak


def _burnout_suggestion(streak: int, overloaded: int, config: WorkloadConfig) -> Optional[str]:
    if streak > config.burnout_streak_threshold:
        return f"You have worked {streak} days in a row. Consider blocking a rest day."
    if overloaded >= 3:
        return f"{overloaded} overloaded days this week. Consider spreading sessions out."
    return None


def summarize_workload(days: list[DayDensity], streak: int, as_of: datetime.date,
                       config: Optional[WorkloadConfig] = None, ) -> WorkloadMetrics:
    if config is None:
        config = DEFAULT_CONFIG

    overloaded = [d for d in days if d.is_overloaded]
    average = round(sum(d.density for d in days) / len(days), 1) if days else 0.0
    today = next((d for d in days if d.date == as_of), None)

    return WorkloadMetrics(today_density=today, overloaded_days=overloaded, consecutive_work_days=streak,
                           is_at_burnout_risk=streak > config.burnout_streak_threshold,
                           weekly_session_count=sum(d.session_count for d in days),
                           average_daily_density=average,
                           burnout_suggestion=_burnout_suggestion(streak, len(overloaded), config), days=days, )


# ======================================================================
# Main entry points
# ======================================================================


def get_workload_metrics(session: Session, coach_id: int, as_of: Optional[datetime.date] = None,
                             window_days: int = 7, config: Optional[WorkloadConfig] = None, ) -> WorkloadMetrics:
    """Workload over the trailing window ``[as_of - window_days + 1, as_of]``."""
    if config is None:
        config = DEFAULT_CONFIG
    if as_of is None:
        as_of = datetime.date.today()
    window_days = max(1, window_days)

    start = as_of - datetime.timedelta(days=window_days - 1)
    windows = AvailabilityRepository(session).get_by_coach_date_range(coach_id, start, as_of)
    bookings_repo = BookingRepository(session)
    bookings = bookings_repo.get_active_by_coach_date_range(coach_id, start, as_of)

    days = [compute_day_density(start + datetime.timedelta(days=i), windows, bookings, config)
            for i in range(window_days)]

    lookback_start = as_of - datetime.timedelta(days=config.streak_lookback_days - 1)
    work_dates = bookings_repo.get_work_dates(coach_id, lookback_start, as_of)
    streak = count_consecutive_work_days(work_dates, as_of, config.streak_lookback_days)

    metrics = summarize_workload(days, streak, as_of, config)
    log.debug("[workload] coach=%s as_of=%s avg=%.1f streak=%d overloaded=%d", coach_id, as_of,
              metrics.average_daily_density, streak, len(metrics.overloaded_days))
    return metrics


def check_time_window_overload(session: Session, coach_id: int, date: datetime.date, start_time: datetime.time,
                               window_hours: int = 3, config: Optional[WorkloadConfig] = None, ) -> TimeWindowOverload:
    """Flag too many sessions starting inside ``[start_time, start_time + window_hours)``."""
    if config is None:
        config = DEFAULT_CONFIG

    start = time_to_minutes(start_time)
    end = min(start + window_hours * 60, 24 * 60 - 1)
    end_time = datetime.time(end // 60, end % 60)
    count = BookingRepository(session).count_starting_between(coach_id, date, start_time, end_time)

    threshold = config.sessions_per_window_threshold
    return TimeWindowOverload(date=date, start_time=start_time, window_hours=window_hours, session_count=count,
                              threshold=threshold, is_overloaded=count >= threshold, )
