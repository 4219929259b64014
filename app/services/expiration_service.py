"""
Package expiration alerts.

``process_expiration_alerts`` is meant for a periodic runner (see
``scripts/run_expiration_job.py``).  It is idempotent within the dedup
window, so overlapping or retried runs never double-alert.
"""

import datetime
import logging
from typing import Optional

from sqlmodel import Session

from app.core.clock import utcnow
from app.core.config import settings
from app.db.repositories.package import PackageRepository
from app.db.session import atomic
from app.engine.expiration import ExpirationConfig, days_remaining, group_by_urgency, is_alertable, to_expiring
from app.models.notification import NotificationType
from app.models.package import BookingPackage
from app.schemas.expiration import ExpirationRunResult, ExpiringPackage, ExpiringPackagesGrouped
from app.services.notification_service import NotificationService

log = logging.getLogger(__name__)


class PackageExpirationService:
    """Service for expiring-package queries and the alert job."""

    def __init__(self, session: Session, config: Optional[ExpirationConfig] = None):
        self.session = session
        self.config = config or ExpirationConfig(thresholds=settings.EXPIRATION_ALERT_THRESHOLDS,
                                                 dedup_hours=settings.NOTIFICATION_DEDUP_HOURS)
        self.packages = PackageRepository(session)
        self.notifications = NotificationService(session)

    def get_expiring_packages(self, coach_id: int, within_days: int = 7,
                              today: Optional[datetime.date] = None, ) -> list[ExpiringPackage]:
        today = today or datetime.date.today()
        expiring = []
        for package in self.packages.get_active_by_coach(coach_id):
            if package.end_date is None or package.sessions_remaining <= 0:
                continue
            if 0 <= days_remaining(package.end_date, today) <= within_days:
                expiring.append(to_expiring(package, today))
        expiring.sort(key=lambda p: (p.days_until_expiry, p.package_id))
        return expiring

    def get_expiring_packages_grouped(self, coach_id: int,
                                      today: Optional[datetime.date] = None, ) -> ExpiringPackagesGrouped:
        return group_by_urgency(self.get_expiring_packages(coach_id, 7, today))

    def _recipients(self, package: BookingPackage) -> list[int]:
        recipients = [package.client_id]
        for row in self.packages.get_usage_rows(package.id):
            if row.is_active and row.client_id not in recipients:
                recipients.append(row.client_id)
        return recipients

    def process_expiration_alerts(self, today: Optional[datetime.date] = None,
                                  now: Optional[datetime.datetime] = None, ) -> ExpirationRunResult:
        """Alert every recipient of packages sitting exactly on a threshold today."""
        now = now or utcnow()
        today = today or now.date()
        checked = 0
        alerted = 0

        with atomic(self.session):
            for package in self.packages.get_active_with_end_date():
                if package.sessions_remaining <= 0:
                    continue
                checked += 1
                if not is_alertable(package, today, self.config):
                    continue
                remaining = days_remaining(package.end_date, today)
                for recipient_id in self._recipients(package):
                    if self.notifications.exists_recent(recipient_id, NotificationType.package_expiring_soon,
                                                        self.config.dedup_hours, now):
                        log.debug("[expiration] suppressed duplicate for recipient=%s package=%s", recipient_id,
                                  package.id)
                        continue
                    self.notifications.queue_notification(NotificationType.package_expiring_soon, recipient_id, {
                        "package_id": package.id,
                        "package_name": package.name,
                        "end_date": package.end_date.isoformat(),
                        "days_remaining": remaining,
                        "sessions_remaining": package.sessions_remaining,
                    }, now=now)
                    alerted += 1

        log.info("[expiration] checked=%d alerted=%d", checked, alerted)
        return ExpirationRunResult(checked=checked, alerted=alerted)
