"""
Periodic job endpoints.

Triggered by the scheduler; every job is safe to run repeatedly.
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.db.session import get_db
from app.schemas.expiration import ExpirationRunResult
from app.services.expiration_service import PackageExpirationService
from app.services.waitlist_service import WaitlistService

router = APIRouter()


@router.post("/expiration-alerts", summary="Emit package expiry alerts.", response_model=ExpirationRunResult)
def run_expiration_alerts(db: Session = Depends(get_db)):
    return PackageExpirationService(db).process_expiration_alerts()


@router.post("/expired-offers", summary="Reopen waitlist offers past their deadline.")
def run_expired_offers(db: Session = Depends(get_db)):
    return {"reopened": WaitlistService(db).process_expired_offers()}
