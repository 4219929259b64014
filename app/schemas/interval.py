"""
Interval primitives shared by every calendar component.

A :class:`TimeSlot` is a half-open ``[start, end)`` interval on a single
date with minute granularity.  Slots are immutable once created; every
arithmetic helper returns plain minutes or a new slot.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

MINUTES_PER_DAY = 24 * 60


def time_to_minutes(value: datetime.time) -> int:
    """Minutes since midnight (seconds are dropped)."""
    return value.hour * 60 + value.minute


def minutes_to_time(minutes: int) -> datetime.time:
    """Inverse of :func:`time_to_minutes`.  ``1440`` maps to ``23:59``."""
    minutes = max(0, min(minutes, MINUTES_PER_DAY - 1))
    return datetime.time(minutes // 60, minutes % 60)


class TimeSlot(BaseModel):
    """Half-open time range on a date.  Invariant: ``start_time < end_time``."""

    model_config = ConfigDict(frozen=True)

    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time

    @model_validator(mode="after")
    def _check_order(self) -> TimeSlot:
        if time_to_minutes(self.start_time) >= time_to_minutes(self.end_time):
            raise ValueError("start_time must be before end_time")
        return self

    # ------------------------------------------------------------------
    # Arithmetic helpers
    # ------------------------------------------------------------------

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end_time)

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    @property
    def weekday(self) -> int:
        """0=Monday ... 6=Sunday."""
        return self.date.weekday()

    def overlaps(self, other: TimeSlot) -> bool:
        return (self.date == other.date and self.start_minutes < other.end_minutes
                and other.start_minutes < self.end_minutes)

    def contains(self, other: TimeSlot) -> bool:
        return (self.date == other.date and self.start_minutes <= other.start_minutes
                and other.end_minutes <= self.end_minutes)

    @classmethod
    def from_minutes(cls, date: datetime.date, start: int, end: int) -> TimeSlot:
        return cls(date=date, start_time=minutes_to_time(start), end_time=minutes_to_time(end))

    @classmethod
    def of(cls, entry) -> TimeSlot:
        """Build a slot from any object with ``date``/``start_time``/``end_time``."""
        return cls(date=entry.date, start_time=entry.start_time, end_time=entry.end_time)


class Gap(BaseModel):
    """An unbooked interval inside an availability window (derived, never stored)."""

    model_config = ConfigDict(frozen=True)

    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time
    duration_minutes: int = Field(..., ge=0)

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end_time)

    def as_slot(self) -> TimeSlot:
        return TimeSlot(date=self.date, start_time=self.start_time, end_time=self.end_time)
