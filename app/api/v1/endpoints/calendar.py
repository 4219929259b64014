"""
Calendar endpoints.

Gap detection, workload metrics and availability ingestion.
"""

import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.config import settings
from app.db.session import get_db
from app.engine.gaps import detect_gaps
from app.engine.workload import check_time_window_overload, get_workload_metrics
from app.schemas.booking import AvailabilityCreate, AvailabilityResponse
from app.schemas.interval import Gap
from app.schemas.workload import TimeWindowOverload, WorkloadMetrics
from app.services.booking_service import BookingService

router = APIRouter()


@router.post("/availability", summary="Add an availability window.", response_model=AvailabilityResponse,
             status_code=status.HTTP_201_CREATED, )
def add_availability(data: AvailabilityCreate, db: Session = Depends(get_db)):
    return BookingService(db).add_availability(data)


@router.get("/{coach_id}/gaps", summary="Unbooked gaps of a coach's day.", response_model=list[Gap], )
def get_gaps(coach_id: int, date: datetime.date,
             min_gap_minutes: int = Query(settings.DEFAULT_MIN_GAP_MINUTES, ge=1, le=720),
             db: Session = Depends(get_db), ):
    return detect_gaps(db, coach_id, date, min_gap_minutes)


@router.get("/{coach_id}/workload", summary="Density, overload and burnout metrics.",
            response_model=WorkloadMetrics, )
def get_workload(coach_id: int,
                 window_days: int = Query(settings.DEFAULT_WORKLOAD_WINDOW_DAYS, ge=1, le=60),
                 as_of: Optional[datetime.date] = Query(None, description="Last day of the window (default: today)"),
                 db: Session = Depends(get_db), ):
    return get_workload_metrics(db, coach_id, as_of=as_of, window_days=window_days)


@router.get("/{coach_id}/time-window", summary="Too many sessions starting in a short window?",
            response_model=TimeWindowOverload, )
def get_time_window_overload(coach_id: int, date: datetime.date, start_time: datetime.time,
                             window_hours: int = Query(3, ge=1, le=12), db: Session = Depends(get_db), ):
    return check_time_window_overload(db, coach_id, date, start_time, window_hours)
