"""
Client scheduling preference model.

Stated days and time window in which a client is willing to train with
a given coach.  Used by the optimization scorer to decide whether a
booking may be moved into a gap.
"""

import datetime
from typing import Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel

from app.core.clock import utcnow


class ClientPreference(SQLModel, table=True):
    __tablename__ = "client_preferences"
    __table_args__ = (UniqueConstraint("coach_id", "client_id", name="uq_client_preference_coach_client"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    coach_id: int = Field(nullable=False, index=True)
    client_id: int = Field(nullable=False, index=True)

    # 0=Monday ... 6=Sunday; empty means any day
    preferred_days: list[int] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    preferred_time_start: Optional[datetime.time] = Field(default=None)
    preferred_time_end: Optional[datetime.time] = Field(default=None)

    updated_at: datetime.datetime = Field(default_factory=utcnow)
