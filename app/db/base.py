"""
Base database configuration.

Import all models here so Alembic can detect them for migrations.
"""

# Import all models for Alembic autogenerate
from app.models.booking import AvailabilityWindow, Booking  # noqa: F401
from app.models.client_preference import ClientPreference  # noqa: F401
from app.models.package import BookingPackage, SharedPackageUsage  # noqa: F401
from app.models.waitlist import WaitlistEntry  # noqa: F401
from app.models.suggestion import OptimizationSuggestion  # noqa: F401
from app.models.notification import Notification  # noqa: F401
from app.models.no_show_alert import NoShowAlert  # noqa: F401
