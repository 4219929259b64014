"""
Booking lifecycle schemas.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.booking import BookingStatus


class BookingResponse(BaseModel):
    id: int
    coach_id: int
    client_id: int
    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time
    status: BookingStatus
    package_id: Optional[int]
    session_used_by_client_id: Optional[int]
    rescheduled_by_optimization: bool
    cancelled_at: Optional[datetime.datetime]
    cancellation_reason: Optional[str]

    class Config:
        from_attributes = True


class BookingCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)
    offer_to_waitlist: bool = True


class NotificationResponse(BaseModel):
    id: int
    recipient_id: int
    notification_type: str
    payload: dict
    status: str
    created_at: datetime.datetime

    class Config:
        from_attributes = True


class BookingCreate(BaseModel):
    coach_id: int
    client_id: int
    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time
    package_id: Optional[int] = None


class AvailabilityCreate(BaseModel):
    coach_id: int
    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time


class AvailabilityResponse(AvailabilityCreate):
    id: int

    class Config:
        from_attributes = True
