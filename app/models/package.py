"""
Booking package and shared-usage ledger models.

A package is a finite pool of sessions.  Every member (primary client
plus shared clients) has one :class:`SharedPackageUsage` row, which
doubles as the membership list.  Invariant::

    sum(usage.sessions_used) == package.sessions_used <= package.total_sessions
"""

import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, UniqueConstraint
from sqlmodel import Field, SQLModel

from app.core.clock import utcnow


class PackageStatus(str, Enum):
    active = "active"
    completed = "completed"
    expired = "expired"
    cancelled = "cancelled"


class BookingPackage(SQLModel, table=True):
    __tablename__ = "booking_packages"
    __table_args__ = (CheckConstraint("sessions_used <= total_sessions", name="ck_booking_packages_usage_within_total"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    coach_id: int = Field(nullable=False, index=True)
    client_id: int = Field(nullable=False, index=True)  # primary client
    name: str = Field(nullable=False, max_length=255)

    total_sessions: int = Field(nullable=False, gt=0)
    sessions_used: int = Field(default=0, ge=0)

    start_date: datetime.date = Field(default_factory=datetime.date.today)
    end_date: Optional[datetime.date] = Field(default=None, index=True)
    status: PackageStatus = Field(default=PackageStatus.active, index=True)

    is_shared: bool = Field(default=False)
    max_shared_users: int = Field(default=1, ge=1, le=10)

    # Timestamps
    created_at: datetime.datetime = Field(default_factory=utcnow)
    updated_at: datetime.datetime = Field(default_factory=utcnow)

    @property
    def sessions_remaining(self) -> int:
        return max(0, self.total_sessions - self.sessions_used)


class SharedPackageUsage(SQLModel, table=True):
    """Per-client usage row (and membership) for a package.

    Removing a client only flips ``is_active``; historical usage stays.
    """

    __tablename__ = "shared_package_usage"
    __table_args__ = (UniqueConstraint("package_id", "client_id", name="uq_package_usage_package_client"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    package_id: int = Field(foreign_key="booking_packages.id", nullable=False, index=True)
    client_id: int = Field(nullable=False, index=True)
    sessions_used: int = Field(default=0, ge=0)

    is_primary: bool = Field(default=False)
    is_active: bool = Field(default=True)
    added_at: datetime.datetime = Field(default_factory=utcnow)
    removed_at: Optional[datetime.datetime] = Field(default=None)
