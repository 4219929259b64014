"""
No-show tracking schemas.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.no_show_alert import NoShowSeverity


class NoShowStats(BaseModel):
    client_id: int
    no_show_count: int
    session_count: int
    no_show_rate: float = Field(..., ge=0.0, le=100.0, description="Percentage of analysed sessions missed")
    exceeds_threshold: bool
    severity: Optional[NoShowSeverity] = None


class NoShowAlertResponse(BaseModel):
    id: int
    coach_id: int
    client_id: int
    no_show_count: int
    session_count: int
    no_show_rate: float
    severity: NoShowSeverity
    acknowledged_at: Optional[datetime.datetime]
    coach_notes: Optional[str]
    created_at: datetime.datetime
    updated_at: datetime.datetime

    class Config:
        from_attributes = True


class AcknowledgeAlertRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=1000)
