"""
Waitlist entry model.

The priority score is **not** stored: positions shift as entries age,
so it is recomputed on every read by :mod:`app.engine.priority`.
"""

import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from app.core.clock import utcnow


class WaitlistStatus(str, Enum):
    active = "active"
    notified = "notified"
    cancelled = "cancelled"
    converted = "converted"


class WaitlistEntry(SQLModel, table=True):
    """A client waiting for a slot with a coach."""

    __tablename__ = "waitlist_entries"

    id: Optional[int] = Field(default=None, primary_key=True)
    coach_id: int = Field(nullable=False, index=True)
    client_id: int = Field(nullable=False, index=True)

    # Preferences: 0=Monday ... 6=Sunday; empty means any day
    preferred_days: list[int] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    preferred_time_start: Optional[datetime.time] = Field(default=None)
    preferred_time_end: Optional[datetime.time] = Field(default=None)

    package_id: Optional[int] = Field(default=None, foreign_key="booking_packages.id")
    notes: Optional[str] = Field(default=None, max_length=1000)

    status: WaitlistStatus = Field(default=WaitlistStatus.active, index=True)

    # Current offer (set while notified)
    offered_date: Optional[datetime.date] = Field(default=None)
    offered_start_time: Optional[datetime.time] = Field(default=None)
    offered_end_time: Optional[datetime.time] = Field(default=None)
    notified_at: Optional[datetime.datetime] = Field(default=None)
    response_deadline: Optional[datetime.datetime] = Field(default=None, index=True)
    responded_at: Optional[datetime.datetime] = Field(default=None)

    # Timestamps
    created_at: datetime.datetime = Field(default_factory=utcnow)
    updated_at: datetime.datetime = Field(default_factory=utcnow)
