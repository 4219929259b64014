"""Database repositories."""

from app.db.repositories.booking import AvailabilityRepository, BookingRepository
from app.db.repositories.client_preference import ClientPreferenceRepository
from app.db.repositories.suggestion import SuggestionRepository
from app.db.repositories.waitlist import WaitlistRepository
from app.db.repositories.package import PackageRepository
from app.db.repositories.notification import NotificationRepository
from app.db.repositories.no_show_alert import NoShowAlertRepository

__all__ = [
    "AvailabilityRepository",
    "BookingRepository",
    "ClientPreferenceRepository",
    "SuggestionRepository",
    "WaitlistRepository",
    "PackageRepository",
    "NotificationRepository",
    "NoShowAlertRepository",
]
