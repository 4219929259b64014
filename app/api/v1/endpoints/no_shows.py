"""
No-show monitoring endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.db.session import get_db
from app.schemas.no_show import AcknowledgeAlertRequest, NoShowAlertResponse, NoShowStats
from app.services.no_show_service import NoShowService

router = APIRouter()


@router.post("/alerts/{alert_id}/acknowledge", summary="Acknowledge an alert.", response_model=NoShowAlertResponse)
def acknowledge(alert_id: int, data: AcknowledgeAlertRequest, db: Session = Depends(get_db)):
    return NoShowService(db).acknowledge_alert(alert_id, data.notes)


@router.get("/{coach_id}/alerts", summary="Unacknowledged alerts.", response_model=list[NoShowAlertResponse])
def get_pending(coach_id: int, db: Session = Depends(get_db)):
    return NoShowService(db).get_pending_alerts(coach_id)


@router.get("/{coach_id}/clients/{client_id}/stats", summary="Recent no-show statistics.",
            response_model=NoShowStats, )
def get_stats(coach_id: int, client_id: int, db: Session = Depends(get_db)):
    return NoShowService(db).get_client_no_show_stats(coach_id, client_id)


@router.post("/{coach_id}/clients/{client_id}/check", summary="Re-evaluate and raise an alert if needed.",
             response_model=Optional[NoShowAlertResponse], )
def check(coach_id: int, client_id: int, db: Session = Depends(get_db)):
    return NoShowService(db).check_and_trigger_alert(coach_id, client_id)
