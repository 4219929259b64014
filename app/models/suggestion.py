"""
Calendar optimization suggestion model.

Created by the scorer, terminal once accepted or rejected, and expired
automatically when ``expires_at`` passes while still pending.
"""

import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel

from app.core.clock import utcnow


class SuggestionStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    expired = "expired"


class SuggestionType(str, Enum):
    reschedule = "reschedule"
    waitlist_fill = "waitlist_fill"


class OptimizationSuggestion(SQLModel, table=True):
    """A proposed move of a booking (or a waitlisted client) into a gap."""

    __tablename__ = "optimization_suggestions"

    id: Optional[int] = Field(default=None, primary_key=True)
    coach_id: int = Field(nullable=False, index=True)
    suggestion_type: SuggestionType = Field(default=SuggestionType.reschedule)

    # Exactly one of the two sources is set, depending on the type
    source_booking_id: Optional[int] = Field(default=None, foreign_key="bookings.id", index=True)
    waitlist_entry_id: Optional[int] = Field(default=None, foreign_key="waitlist_entries.id", index=True)
    client_id: int = Field(nullable=False)

    # Proposed slot
    proposed_date: datetime.date = Field(nullable=False)
    proposed_start_time: datetime.time = Field(nullable=False)
    proposed_end_time: datetime.time = Field(nullable=False)

    # Gap the proposal fills, as seen at analysis time
    gap_start_time: datetime.time = Field(nullable=False)
    gap_end_time: datetime.time = Field(nullable=False)

    benefit_score: int = Field(default=0, ge=0, le=100, index=True)
    reason: Optional[str] = Field(default=None, max_length=500)

    status: SuggestionStatus = Field(default=SuggestionStatus.pending, index=True)
    expires_at: datetime.datetime = Field(nullable=False)
    reviewed_at: Optional[datetime.datetime] = Field(default=None)
    applied_at: Optional[datetime.datetime] = Field(default=None)
    applied_booking_id: Optional[int] = Field(default=None)

    created_at: datetime.datetime = Field(default_factory=utcnow)
