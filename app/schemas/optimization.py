"""
Calendar optimization schemas.

An :class:`Opportunity` is an in-memory candidate produced by the scorer;
only the top-ranked ones become persisted suggestions.
"""

import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from app.core.config import settings
from app.models.suggestion import SuggestionStatus, SuggestionType
from app.schemas.interval import Gap


class Opportunity(BaseModel):
    """A candidate move into a gap, with its score breakdown."""

    suggestion_type: SuggestionType
    source_booking_id: Optional[int] = None
    waitlist_entry_id: Optional[int] = None
    client_id: int
    target_gap: Gap
    proposed_date: datetime.date
    proposed_start_time: datetime.time
    proposed_end_time: datetime.time

    benefit_score: int = Field(..., ge=0, le=100, description="Weighted ranking value (higher is better)")
    fit_score: float = Field(..., ge=0.0, le=1.0, description="Share of the gap filled by the move")
    preference_score: float = Field(..., ge=0.0, le=1.0, description="Proximity to the client's preferred time")
    urgency_score: float = Field(..., ge=0.0, le=1.0, description="Sooner moves score higher")
    reason: str


class SuggestionResponse(BaseModel):
    id: int
    coach_id: int
    suggestion_type: SuggestionType
    source_booking_id: Optional[int]
    waitlist_entry_id: Optional[int]
    client_id: int
    proposed_date: datetime.date
    proposed_start_time: datetime.time
    proposed_end_time: datetime.time
    gap_start_time: datetime.time
    gap_end_time: datetime.time
    benefit_score: int
    reason: Optional[str]
    status: SuggestionStatus
    expires_at: datetime.datetime
    reviewed_at: Optional[datetime.datetime]
    applied_at: Optional[datetime.datetime]
    applied_booking_id: Optional[int]
    created_at: datetime.datetime

    class Config:
        from_attributes = True


class SuggestionDecision(BaseModel):
    """Body for responding to a suggestion."""

    action: Literal["accept", "reject"]


class CreateSuggestionsRequest(BaseModel):
    start_date: datetime.date
    end_date: datetime.date
    limit: int = Field(settings.DEFAULT_SUGGESTION_LIMIT, ge=1, le=50)


class ApplyOptimizationResult(BaseModel):
    """Outcome of applying an accepted suggestion.

    ``error`` is set (and ``success`` false) when re-validation failed;
    the suggestion then stays ``accepted`` for manual resolution.
    """

    success: bool
    error: Optional[str] = None
    booking_id: Optional[int] = None


class ClientPreferenceUpdate(BaseModel):
    """Stated scheduling preferences of a client with a coach."""

    preferred_days: list[int] = Field(default_factory=list, description="0=Monday ... 6=Sunday; empty = any day")
    preferred_time_start: Optional[datetime.time] = None
    preferred_time_end: Optional[datetime.time] = None

    @field_validator("preferred_days")
    @classmethod
    def _valid_days(cls, value: list[int]) -> list[int]:
        if any(d < 0 or d > 6 for d in value):
            raise ValueError("preferred_days must contain values between 0 and 6")
        return sorted(set(value))


class ClientPreferenceResponse(ClientPreferenceUpdate):
    coach_id: int
    client_id: int

    class Config:
        from_attributes = True
