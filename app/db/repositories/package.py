"""
Booking package repository.

The usage-increment methods issue conditional UPDATE statements so the
invariant ``sessions_used <= total_sessions`` is re-validated by the
database at write time instead of by a prior read.
"""

from typing import Optional

from sqlalchemy import update
from sqlmodel import Session, col, select

from app.models.package import BookingPackage, PackageStatus, SharedPackageUsage


class PackageRepository:
    """Repository for BookingPackage and SharedPackageUsage operations."""

    def __init__(self, session: Session):
        self.session = session

    def stage(self, entry):
        self.session.add(entry)
        self.session.flush()
        return entry

    def get_by_id(self, package_id: int) -> Optional[BookingPackage]:
        return self.session.get(BookingPackage, package_id)

    def get_active_with_end_date(self) -> list[BookingPackage]:
        statement = (select(BookingPackage).where(BookingPackage.status == PackageStatus.active,
                                                  col(BookingPackage.end_date).is_not(None), )
                     .order_by(BookingPackage.end_date, BookingPackage.id))
        return list(self.session.exec(statement).all())

    def get_active_by_coach(self, coach_id: int) -> list[BookingPackage]:
        statement = (select(BookingPackage).where(BookingPackage.coach_id == coach_id,
                                                  BookingPackage.status == PackageStatus.active, )
                     .order_by(BookingPackage.id))
        return list(self.session.exec(statement).all())

    # ------------------------------------------------------------------
    # Usage rows
    # ------------------------------------------------------------------

    def get_usage_rows(self, package_id: int) -> list[SharedPackageUsage]:
        statement = (select(SharedPackageUsage).where(SharedPackageUsage.package_id == package_id)
                     .order_by(col(SharedPackageUsage.is_primary).desc(), SharedPackageUsage.added_at,
                               SharedPackageUsage.id))
        return list(self.session.exec(statement).all())

    def get_usage_row(self, package_id: int, client_id: int) -> Optional[SharedPackageUsage]:
        statement = select(SharedPackageUsage).where(
            SharedPackageUsage.package_id == package_id,
            SharedPackageUsage.client_id == client_id,
        )
        return self.session.exec(statement).first()

    def get_active_memberships(self, client_id: int) -> list[SharedPackageUsage]:
        statement = select(SharedPackageUsage).where(
            SharedPackageUsage.client_id == client_id,
            SharedPackageUsage.is_active == True,  # noqa: E712
        )
        return list(self.session.exec(statement).all())

    # ------------------------------------------------------------------
    # Conditional increments (no commit; caller owns the transaction)
    # ------------------------------------------------------------------

    def increment_package_usage(self, package_id: int) -> bool:
        """Draw one session if any remain.  Returns False when exhausted."""
        statement = (update(BookingPackage)
                     .where(col(BookingPackage.id) == package_id,
                            col(BookingPackage.status) == PackageStatus.active,
                            col(BookingPackage.sessions_used) < col(BookingPackage.total_sessions))
                     .values(sessions_used=col(BookingPackage.sessions_used) + 1)
                     .execution_options(synchronize_session=False))
        return self.session.execute(statement).rowcount == 1

    def increment_client_usage(self, package_id: int, client_id: int) -> bool:
        statement = (update(SharedPackageUsage)
                     .where(col(SharedPackageUsage.package_id) == package_id,
                            col(SharedPackageUsage.client_id) == client_id,
                            col(SharedPackageUsage.is_active) == True)  # noqa: E712
                     .values(sessions_used=col(SharedPackageUsage.sessions_used) + 1)
                     .execution_options(synchronize_session=False))
        return self.session.execute(statement).rowcount == 1
