"""Business logic services."""

from app.services.notification_service import NotificationService
from app.services.optimization_service import OptimizationService
from app.services.waitlist_service import WaitlistService
from app.services.shared_package_service import SharedPackageService
from app.services.expiration_service import PackageExpirationService
from app.services.no_show_service import NoShowService
from app.services.booking_service import BookingService

__all__ = [
    "NotificationService",
    "OptimizationService",
    "WaitlistService",
    "SharedPackageService",
    "PackageExpirationService",
    "NoShowService",
    "BookingService",
]
