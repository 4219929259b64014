"""
Waitlist API schemas.
"""

import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from app.models.waitlist import WaitlistStatus


class WaitlistEntryCreate(BaseModel):
    client_id: int
    preferred_days: list[int] = Field(default_factory=list, description="0=Monday ... 6=Sunday; empty = any day")
    preferred_time_start: Optional[datetime.time] = None
    preferred_time_end: Optional[datetime.time] = None
    package_id: Optional[int] = None
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("preferred_days")
    @classmethod
    def _valid_days(cls, value: list[int]) -> list[int]:
        if any(d < 0 or d > 6 for d in value):
            raise ValueError("preferred_days must contain values between 0 and 6")
        return sorted(set(value))


class WaitlistEntryResponse(BaseModel):
    id: int
    coach_id: int
    client_id: int
    preferred_days: list[int]
    preferred_time_start: Optional[datetime.time]
    preferred_time_end: Optional[datetime.time]
    package_id: Optional[int]
    notes: Optional[str]
    status: WaitlistStatus
    priority_score: int = Field(..., ge=0, le=100)
    days_waiting: int
    has_active_package: bool
    offered_date: Optional[datetime.date] = None
    offered_start_time: Optional[datetime.time] = None
    offered_end_time: Optional[datetime.time] = None
    response_deadline: Optional[datetime.datetime] = None
    created_at: datetime.datetime


class OfferResponse(BaseModel):
    accept: bool


WaitlistSort = Literal["priority", "days_waiting"]
