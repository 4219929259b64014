"""
Notification sink.

Notifications are only *queued* here (a pending row); delivery is done
by another process.  Queueing stages the row without committing so it
joins the caller's unit of work.
"""

import datetime
import logging
from typing import Optional

from sqlmodel import Session

from app.core.clock import utcnow
from app.db.repositories.notification import NotificationRepository
from app.models.notification import Notification, NotificationType
from app.schemas.booking import NotificationResponse

log = logging.getLogger(__name__)


class NotificationService:
    """Service for queueing and querying notifications."""

    def __init__(self, session: Session):
        self.repository = NotificationRepository(session)

    def queue_notification(self, notification_type: NotificationType, recipient_id: int, payload: dict,
                           now: Optional[datetime.datetime] = None, ) -> Notification:
        notification = Notification(recipient_id=recipient_id, notification_type=notification_type,
                                    payload=payload, created_at=now or utcnow(), )
        self.repository.stage(notification)
        log.info("[notify] queued %s for recipient=%s", notification_type.value, recipient_id)
        return notification

    def exists_recent(self, recipient_id: int, notification_type: NotificationType, within_hours: int,
                      now: Optional[datetime.datetime] = None, ) -> bool:
        """True when the same type was queued for the recipient inside the window."""
        since = (now or utcnow()) - datetime.timedelta(hours=within_hours)
        return self.repository.exists_since(recipient_id, notification_type, since)

    def get_for_recipient(self, recipient_id: int, limit: int = 50) -> list[NotificationResponse]:
        return [NotificationResponse.model_validate(n) for n in self.repository.get_by_recipient(recipient_id, limit)]
