"""
Notification queue endpoints (read-only).
"""

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.db.session import get_db
from app.schemas.booking import NotificationResponse
from app.services.notification_service import NotificationService

router = APIRouter()


@router.get("/{recipient_id}", summary="Latest queued notifications of a recipient.",
            response_model=list[NotificationResponse], )
def get_notifications(recipient_id: int, limit: int = Query(50, ge=1, le=200), db: Session = Depends(get_db)):
    return NotificationService(db).get_for_recipient(recipient_id, limit)
