"""
Booking and availability database models.

A booking is never deleted: cancellations, completions and no-shows
are status transitions so the calendar keeps its audit trail.
"""

import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel

from app.core.clock import utcnow


class BookingStatus(str, Enum):
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"
    no_show = "no_show"


# Statuses that occupy time on the coach's calendar.
ACTIVE_BOOKING_STATUSES = (BookingStatus.scheduled, BookingStatus.completed, BookingStatus.no_show)


class Booking(SQLModel, table=True):
    """A scheduled session between a coach and a client."""

    __tablename__ = "bookings"

    id: Optional[int] = Field(default=None, primary_key=True)
    coach_id: int = Field(nullable=False, index=True)
    client_id: int = Field(nullable=False, index=True)

    date: datetime.date = Field(nullable=False, index=True)
    start_time: datetime.time = Field(nullable=False)
    end_time: datetime.time = Field(nullable=False)

    status: BookingStatus = Field(default=BookingStatus.scheduled, index=True)

    # Package the session draws from, and which member actually used it
    package_id: Optional[int] = Field(default=None, foreign_key="booking_packages.id", index=True)
    session_used_by_client_id: Optional[int] = Field(default=None)

    rescheduled_by_optimization: bool = Field(default=False)
    cancelled_at: Optional[datetime.datetime] = Field(default=None)
    cancellation_reason: Optional[str] = Field(default=None, max_length=500)

    # Timestamps
    created_at: datetime.datetime = Field(default_factory=utcnow)
    updated_at: datetime.datetime = Field(default_factory=utcnow)

    @property
    def duration_minutes(self) -> int:
        start = self.start_time.hour * 60 + self.start_time.minute
        end = self.end_time.hour * 60 + self.end_time.minute
        return end - start


class AvailabilityWindow(SQLModel, table=True):
    """Coach's bookable hours for one date.

    Several windows per date are allowed (e.g. a split day).
    """

    __tablename__ = "availability_windows"

    id: Optional[int] = Field(default=None, primary_key=True)
    coach_id: int = Field(nullable=False, index=True)
    date: datetime.date = Field(nullable=False, index=True)
    start_time: datetime.time = Field(nullable=False)
    end_time: datetime.time = Field(nullable=False)
