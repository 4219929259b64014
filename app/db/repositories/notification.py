"""Notification repository."""

import datetime

from sqlalchemy import func
from sqlmodel import Session, col, select

from app.models.notification import Notification, NotificationType


class NotificationRepository:
    """Repository for Notification database operations."""

    def __init__(self, session: Session):
        self.session = session

    def stage(self, entry: Notification) -> Notification:
        self.session.add(entry)
        self.session.flush()
        return entry

    def exists_since(self, recipient_id: int, notification_type: NotificationType,
                     since: datetime.datetime, ) -> bool:
        statement = (select(func.count()).select_from(Notification).where(
            Notification.recipient_id == recipient_id,
            Notification.notification_type == notification_type,
            Notification.created_at >= since,
        ))
        return (self.session.exec(statement).first() or 0) > 0

    def get_by_recipient(self, recipient_id: int, limit: int = 50) -> list[Notification]:
        statement = (select(Notification).where(Notification.recipient_id == recipient_id)
                     .order_by(col(Notification.created_at).desc(), col(Notification.id).desc()).limit(limit))
        return list(self.session.exec(statement).all())
