"""
Shared package ledger schemas.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.package import PackageStatus


class SharedPackageTerms(BaseModel):
    """Commercial terms of a new package."""

    name: str = Field(..., max_length=255)
    total_sessions: int = Field(..., gt=0, le=500)
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None
    max_shared_users: Optional[int] = Field(None, ge=1, le=10)


class SharedPackageCreate(BaseModel):
    primary_client_id: int
    shared_with_client_ids: list[int] = Field(default_factory=list)
    terms: SharedPackageTerms


class PackageResponse(BaseModel):
    id: int
    coach_id: int
    client_id: int
    name: str
    total_sessions: int
    sessions_used: int
    sessions_remaining: int
    start_date: datetime.date
    end_date: Optional[datetime.date]
    status: PackageStatus
    is_shared: bool
    max_shared_users: int
    member_client_ids: list[int] = Field(default_factory=list)


class ClientUsage(BaseModel):
    client_id: int
    sessions_used: int
    is_primary: bool
    is_active: bool
    share_percentage: float = Field(..., description="Share of the package's used sessions")


class SharedPackageUsageResponse(BaseModel):
    package_id: int
    total_sessions: int
    sessions_used: int
    sessions_remaining: int
    clients: list[ClientUsage]


class PackageMemberRequest(BaseModel):
    client_id: int


class TrackUsageRequest(BaseModel):
    booking_id: int
    used_by_client_id: int
