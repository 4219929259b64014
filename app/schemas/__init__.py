"""Pydantic schemas for request/response validation."""

from app.schemas.interval import Gap, TimeSlot
from app.schemas.optimization import (
    ApplyOptimizationResult,
    ClientPreferenceResponse,
    ClientPreferenceUpdate,
    CreateSuggestionsRequest,
    Opportunity,
    SuggestionDecision,
    SuggestionResponse,
)
from app.schemas.workload import DayDensity, TimeWindowOverload, WorkloadMetrics
from app.schemas.waitlist import OfferResponse, WaitlistEntryCreate, WaitlistEntryResponse
from app.schemas.package import (
    ClientUsage,
    PackageMemberRequest,
    PackageResponse,
    SharedPackageCreate,
    SharedPackageTerms,
    SharedPackageUsageResponse,
    TrackUsageRequest,
)
from app.schemas.expiration import ExpirationRunResult, ExpiringPackage, ExpiringPackagesGrouped
from app.schemas.no_show import AcknowledgeAlertRequest, NoShowAlertResponse, NoShowStats
from app.schemas.booking import (
    AvailabilityCreate,
    AvailabilityResponse,
    BookingCancel,
    BookingCreate,
    BookingResponse,
    NotificationResponse,
)

__all__ = [
    "Gap",
    "TimeSlot",
    "ApplyOptimizationResult",
    "ClientPreferenceResponse",
    "ClientPreferenceUpdate",
    "CreateSuggestionsRequest",
    "Opportunity",
    "SuggestionDecision",
    "SuggestionResponse",
    "DayDensity",
    "TimeWindowOverload",
    "WorkloadMetrics",
    "OfferResponse",
    "WaitlistEntryCreate",
    "WaitlistEntryResponse",
    "ClientUsage",
    "PackageMemberRequest",
    "PackageResponse",
    "SharedPackageCreate",
    "SharedPackageTerms",
    "SharedPackageUsageResponse",
    "TrackUsageRequest",
    "ExpirationRunResult",
    "ExpiringPackage",
    "ExpiringPackagesGrouped",
    "AcknowledgeAlertRequest",
    "NoShowAlertResponse",
    "NoShowStats",
    "AvailabilityCreate",
    "AvailabilityResponse",
    "BookingCancel",
    "BookingCreate",
    "BookingResponse",
    "NotificationResponse",
]
