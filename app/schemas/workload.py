"""
Workload monitor schemas.

Overload is an **intensity** signal (density of a single day); burnout
risk is a **duration** signal (consecutive working days).  Both are
reported independently.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field


class DayDensity(BaseModel):
    date: datetime.date
    available_minutes: int
    booked_minutes: int
    density: float = Field(..., ge=0.0, description="booked / available * 100")
    session_count: int
    is_overloaded: bool
    label: str = Field(..., description="One of: available, light, good, very_busy, critical")


class WorkloadMetrics(BaseModel):
    today_density: Optional[DayDensity]
    overloaded_days: list[DayDensity]
    consecutive_work_days: int
    is_at_burnout_risk: bool
    weekly_session_count: int
    average_daily_density: float
    burnout_suggestion: Optional[str] = None
    days: list[DayDensity] = Field(default_factory=list, description="Every day of the analysed window")


class TimeWindowOverload(BaseModel):
    date: datetime.date
    start_time: datetime.time
    window_hours: int
    session_count: int
    threshold: int
    is_overloaded: bool
