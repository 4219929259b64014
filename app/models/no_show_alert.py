"""
No-show alert model.

One row per coach/client.  Alerts are acknowledged by the coach,
never deleted.
"""

import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from app.core.clock import utcnow


class NoShowSeverity(str, Enum):
    warning = "warning"
    high = "high"
    critical = "critical"


class NoShowAlert(SQLModel, table=True):
    __tablename__ = "no_show_alerts"
    __table_args__ = (UniqueConstraint("coach_id", "client_id", name="uq_no_show_alert_coach_client"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    coach_id: int = Field(nullable=False, index=True)
    client_id: int = Field(nullable=False, index=True)

    no_show_count: int = Field(default=0, ge=0)
    session_count: int = Field(default=0, ge=0)
    no_show_rate: float = Field(default=0.0, ge=0.0, le=100.0)
    severity: NoShowSeverity = Field(default=NoShowSeverity.warning)

    acknowledged_at: Optional[datetime.datetime] = Field(default=None)
    coach_notes: Optional[str] = Field(default=None, max_length=1000)

    # Timestamps
    created_at: datetime.datetime = Field(default_factory=utcnow)
    updated_at: datetime.datetime = Field(default_factory=utcnow)
