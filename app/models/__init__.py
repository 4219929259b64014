"""SQLModel database models."""

from app.models.booking import AvailabilityWindow, Booking, BookingStatus
from app.models.client_preference import ClientPreference
from app.models.package import BookingPackage, PackageStatus, SharedPackageUsage
from app.models.waitlist import WaitlistEntry, WaitlistStatus
from app.models.suggestion import OptimizationSuggestion, SuggestionStatus, SuggestionType
from app.models.notification import Notification, NotificationStatus, NotificationType
from app.models.no_show_alert import NoShowAlert, NoShowSeverity

__all__ = [
    "AvailabilityWindow",
    "Booking",
    "BookingStatus",
    "ClientPreference",
    "BookingPackage",
    "PackageStatus",
    "SharedPackageUsage",
    "WaitlistEntry",
    "WaitlistStatus",
    "OptimizationSuggestion",
    "SuggestionStatus",
    "SuggestionType",
    "Notification",
    "NotificationStatus",
    "NotificationType",
    "NoShowAlert",
    "NoShowSeverity",
]
