"""
Shared package ledger.

A package is a finite pool of sessions drawn by its members (primary
client plus shared clients).  Every draw increments the package
aggregate and the member's usage row inside one transaction; the
aggregate increment is a conditional UPDATE so the pool can never be
overdrawn, even by concurrent draws::

    UPDATE booking_packages SET sessions_used = sessions_used + 1
     WHERE id = :id AND status = 'active' AND sessions_used < total_sessions
"""

import datetime
import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.clock import utcnow
from app.db.repositories.booking import BookingRepository
from app.db.repositories.package import PackageRepository
from app.db.session import atomic
from app.models.booking import Booking
from app.models.package import BookingPackage, PackageStatus, SharedPackageUsage
from app.schemas.package import ClientUsage, PackageResponse, SharedPackageCreate, SharedPackageUsageResponse

log = logging.getLogger(__name__)

MAX_SHARED_USERS = 10


class SharedPackageService:
    """Service for shared package accounting."""

    def __init__(self, session: Session):
        self.session = session
        self.repository = PackageRepository(session)
        self.bookings = BookingRepository(session)

    # ------------------------------------------------------------------
    # Creation and membership
    # ------------------------------------------------------------------

    def create_shared_package(self, coach_id: int, data: SharedPackageCreate,
                              now: Optional[datetime.datetime] = None, ) -> PackageResponse:
        now = now or utcnow()
        terms = data.terms
        members = [c for c in dict.fromkeys(data.shared_with_client_ids) if c != data.primary_client_id]
        max_users = terms.max_shared_users or min(MAX_SHARED_USERS, len(members) + 1)

        if len(members) + 1 > max_users:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                                detail=f"{len(members) + 1} members exceed max_shared_users={max_users}", )
        start_date = terms.start_date or now.date()
        if terms.end_date is not None and terms.end_date < start_date:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end_date must not precede start_date")

        with atomic(self.session):
            package = self.repository.stage(BookingPackage(coach_id=coach_id, client_id=data.primary_client_id,
                                                           name=terms.name, total_sessions=terms.total_sessions,
                                                           start_date=start_date, end_date=terms.end_date,
                                                           is_shared=bool(members), max_shared_users=max_users,
                                                           created_at=now, updated_at=now, ))
            self.repository.stage(SharedPackageUsage(package_id=package.id, client_id=data.primary_client_id,
                                                     is_primary=True, added_at=now, ))
            for client_id in members:
                self.repository.stage(SharedPackageUsage(package_id=package.id, client_id=client_id, added_at=now))

        log.info("[ledger] coach=%s created package=%s sessions=%d members=%d", coach_id, package.id,
                 terms.total_sessions, len(members) + 1)
        return self._to_response(package)

    def get_package(self, package_id: int) -> PackageResponse:
        return self._to_response(self._get_or_404(package_id))

    def add_client_to_package(self, package_id: int, client_id: int,
                              now: Optional[datetime.datetime] = None, ) -> PackageResponse:
        now = now or utcnow()
        package = self._get_or_404(package_id)
        if package.status != PackageStatus.active:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT,
                                detail=f"Package is {package.status.value}, not active", )

        rows = self.repository.get_usage_rows(package_id)
        row = next((r for r in rows if r.client_id == client_id), None)
        if row is not None and row.is_active:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Client already shares this package")
        if sum(1 for r in rows if r.is_active) >= package.max_shared_users:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT,
                                detail=f"Package already has {package.max_shared_users} members", )

        with atomic(self.session):
            if row is None:
                self.repository.stage(SharedPackageUsage(package_id=package_id, client_id=client_id, added_at=now))
            else:
                # Rejoining keeps the historical usage
                row.is_active = True
                row.removed_at = None
                self.session.add(row)
            package.is_shared = True
            package.updated_at = now
            self.session.add(package)

        log.info("[ledger] package=%s added client=%s", package_id, client_id)
        return self._to_response(package)

    def remove_client_from_package(self, package_id: int, client_id: int,
                                   now: Optional[datetime.datetime] = None, ) -> PackageResponse:
        now = now or utcnow()
        package = self._get_or_404(package_id)
        row = self.repository.get_usage_row(package_id, client_id)
        if row is None or not row.is_active:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client is not a member of this package")
        if row.is_primary:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="The primary client cannot be removed")

        with atomic(self.session):
            row.is_active = False
            row.removed_at = now
            self.session.add(row)
            package.updated_at = now
            self.session.add(package)

        log.info("[ledger] package=%s removed client=%s (usage kept: %d)", package_id, client_id, row.sessions_used)
        return self._to_response(package)

    # ------------------------------------------------------------------
    # Usage
    # ------------------------------------------------------------------

    def track_session_usage(self, booking_id: int, used_by_client_id: int,
                            now: Optional[datetime.datetime] = None, ) -> SharedPackageUsageResponse:
        booking = self.bookings.get_by_id(booking_id)
        if not booking:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
        package = self.check_usage_allowed(booking, used_by_client_id)

        with atomic(self.session):
            self.stage_session_usage(booking, package, used_by_client_id, now)

        return self.get_shared_package_usage(package.id)

    def check_usage_allowed(self, booking: Booking, client_id: int) -> BookingPackage:
        """Validate every precondition of a draw before any write happens."""
        if booking.package_id is None:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                                detail="Booking is not linked to a package")
        if booking.session_used_by_client_id is not None:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                                detail="Session usage already tracked for this booking")
        package = self._get_or_404(booking.package_id)
        row = self.repository.get_usage_row(package.id, client_id)
        if row is None or not row.is_active:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                                detail=f"Client {client_id} cannot use package {package.id}")
        if package.status != PackageStatus.active or package.sessions_remaining <= 0:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                                detail="Package has no sessions remaining")
        return package

    def stage_session_usage(self, booking: Booking, package: BookingPackage, client_id: int,
                            now: Optional[datetime.datetime] = None, ) -> None:
        """Draw one session inside the caller's transaction.

        Raises 422 (and the caller's ``atomic`` rolls back) when the
        conditional update finds the pool exhausted at write time.
        """
        now = now or utcnow()
        if not self.repository.increment_package_usage(package.id):
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                                detail="Package has no sessions remaining")
        if not self.repository.increment_client_usage(package.id, client_id):
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                                detail=f"Client {client_id} cannot use package {package.id}")

        booking.session_used_by_client_id = client_id
        booking.updated_at = now
        self.session.add(booking)

        self.session.refresh(package)
        if package.sessions_used >= package.total_sessions:
            package.status = PackageStatus.completed
        package.updated_at = now
        self.session.add(package)
        log.info("[ledger] package=%s client=%s used %d/%d", package.id, client_id, package.sessions_used,
                 package.total_sessions)

    def get_shared_package_usage(self, package_id: int) -> SharedPackageUsageResponse:
        package = self._get_or_404(package_id)
        rows = self.repository.get_usage_rows(package_id)
        used = package.sessions_used
        clients = [ClientUsage(client_id=r.client_id, sessions_used=r.sessions_used, is_primary=r.is_primary,
                               is_active=r.is_active,
                               share_percentage=round(r.sessions_used / used * 100, 1) if used else 0.0, )
                   for r in rows]
        return SharedPackageUsageResponse(package_id=package.id, total_sessions=package.total_sessions,
                                          sessions_used=used, sessions_remaining=package.sessions_remaining,
                                          clients=clients, )

    def get_client_available_packages(self, coach_id: int, client_id: int) -> list[PackageResponse]:
        """Active packages with sessions left that the client may draw from."""
        member_of = {m.package_id for m in self.repository.get_active_memberships(client_id)}
        return [self._to_response(p) for p in self.repository.get_active_by_coach(coach_id)
                if p.id in member_of and p.sessions_remaining > 0]

    def can_client_use_package(self, package_id: int, client_id: int) -> bool:
        package = self.repository.get_by_id(package_id)
        if package is None or package.status != PackageStatus.active or package.sessions_remaining <= 0:
            return False
        row = self.repository.get_usage_row(package_id, client_id)
        return row is not None and row.is_active

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_or_404(self, package_id: int) -> BookingPackage:
        package = self.repository.get_by_id(package_id)
        if not package:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")
        return package

    def _to_response(self, package: BookingPackage) -> PackageResponse:
        members = [r.client_id for r in self.repository.get_usage_rows(package.id) if r.is_active]
        return PackageResponse(id=package.id, coach_id=package.coach_id, client_id=package.client_id,
                               name=package.name, total_sessions=package.total_sessions,
                               sessions_used=package.sessions_used, sessions_remaining=package.sessions_remaining,
                               start_date=package.start_date, end_date=package.end_date, status=package.status,
                               is_shared=package.is_shared, max_shared_users=package.max_shared_users,
                               member_client_ids=members, )
