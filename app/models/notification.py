"""
Notification model.

Rows are queued here by the engine; delivery (email/push) is handled
elsewhere and only flips ``status``.
"""

import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from app.core.clock import utcnow


class NotificationType(str, Enum):
    waitlist_slot_available = "waitlist_slot_available"
    package_expiring_soon = "package_expiring_soon"
    no_show_alert = "no_show_alert"
    booking_rescheduled = "booking_rescheduled"


class NotificationStatus(str, Enum):
    pending = "pending"
    sent = "sent"
    failed = "failed"


class Notification(SQLModel, table=True):
    __tablename__ = "notifications"

    id: Optional[int] = Field(default=None, primary_key=True)
    recipient_id: int = Field(nullable=False, index=True)
    notification_type: NotificationType = Field(nullable=False, index=True)
    payload: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    status: NotificationStatus = Field(default=NotificationStatus.pending)

    created_at: datetime.datetime = Field(default_factory=utcnow, index=True)
