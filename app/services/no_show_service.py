"""
No-show monitoring.

Stats are computed over the client's most recent concluded sessions;
crossing the alert threshold upserts one alert row per coach/client
and notifies the coach.
"""

import datetime
import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.clock import utcnow
from app.db.repositories.booking import BookingRepository
from app.db.repositories.no_show_alert import NoShowAlertRepository
from app.db.session import atomic
from app.engine.no_show import DEFAULT_CONFIG, NoShowConfig, compute_no_show_stats
from app.models.no_show_alert import NoShowAlert
from app.models.notification import NotificationType
from app.schemas.no_show import NoShowAlertResponse, NoShowStats
from app.services.notification_service import NotificationService

log = logging.getLogger(__name__)


class NoShowService:
    """Service for no-show statistics and alerts."""

    def __init__(self, session: Session, config: Optional[NoShowConfig] = None):
        self.session = session
        self.config = config or DEFAULT_CONFIG
        self.bookings = BookingRepository(session)
        self.repository = NoShowAlertRepository(session)
        self.notifications = NotificationService(session)

    def get_client_no_show_stats(self, coach_id: int, client_id: int) -> NoShowStats:
        recent = self.bookings.get_concluded_for_client(coach_id, client_id, self.config.sessions_to_analyze)
        return compute_no_show_stats(client_id, recent, self.config)

    def check_and_trigger_alert(self, coach_id: int, client_id: int,
                                now: Optional[datetime.datetime] = None, ) -> Optional[NoShowAlertResponse]:
        with atomic(self.session):
            alert = self.stage_alert_check(coach_id, client_id, now)
        return NoShowAlertResponse.model_validate(alert) if alert else None

    def stage_alert_check(self, coach_id: int, client_id: int,
                          now: Optional[datetime.datetime] = None, ) -> Optional[NoShowAlert]:
        """Upsert the alert inside the caller's transaction.  ``None`` when under threshold."""
        now = now or utcnow()
        self.session.flush()
        stats = self.get_client_no_show_stats(coach_id, client_id)
        if not stats.exceeds_threshold:
            return None

        alert = self.repository.get_for_client(coach_id, client_id)
        if alert is None:
            alert = NoShowAlert(coach_id=coach_id, client_id=client_id, created_at=now)
        alert.no_show_count = stats.no_show_count
        alert.session_count = stats.session_count
        alert.no_show_rate = stats.no_show_rate
        alert.severity = stats.severity
        alert.acknowledged_at = None
        alert.updated_at = now
        self.repository.stage(alert)

        self.notifications.queue_notification(NotificationType.no_show_alert, coach_id, {
            "client_id": client_id,
            "no_show_count": stats.no_show_count,
            "session_count": stats.session_count,
            "no_show_rate": stats.no_show_rate,
            "severity": stats.severity.value,
        }, now=now)
        log.info("[no-show] coach=%s client=%s rate=%.1f severity=%s", coach_id, client_id, stats.no_show_rate,
                 stats.severity.value)
        return alert

    def get_pending_alerts(self, coach_id: int) -> list[NoShowAlertResponse]:
        return [NoShowAlertResponse.model_validate(a) for a in self.repository.get_pending_by_coach(coach_id)]

    def acknowledge_alert(self, alert_id: int, notes: Optional[str] = None,
                          now: Optional[datetime.datetime] = None, ) -> NoShowAlertResponse:
        alert = self.repository.get_by_id(alert_id)
        if not alert:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Alert not found")
        if alert.acknowledged_at is not None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Alert already acknowledged")
        alert.acknowledged_at = now or utcnow()
        if notes is not None:
            alert.coach_notes = notes
        alert.updated_at = alert.acknowledged_at
        alert = self.repository.update(alert)
        return NoShowAlertResponse.model_validate(alert)
