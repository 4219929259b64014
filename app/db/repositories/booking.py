"""
Booking and availability repositories.

Read methods return point-in-time snapshots; callers compute over the
returned lists instead of re-querying mid-computation.
"""

import datetime
from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, col, select

from app.models.booking import ACTIVE_BOOKING_STATUSES, AvailabilityWindow, Booking, BookingStatus


class BookingRepository:
    """Repository for Booking database operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, entry: Booking) -> Booking:
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry

    def stage(self, entry: Booking) -> Booking:
        """Add without committing (caller owns the transaction)."""
        self.session.add(entry)
        self.session.flush()
        return entry

    def get_by_id(self, entry_id: int) -> Optional[Booking]:
        return self.session.get(Booking, entry_id)

    def get_active_by_coach_and_date(self, coach_id: int, date: datetime.date) -> list[Booking]:
        statement = (select(Booking).where(Booking.coach_id == coach_id, Booking.date == date,
                                           col(Booking.status).in_(ACTIVE_BOOKING_STATUSES), )
                     .order_by(Booking.start_time))
        return list(self.session.exec(statement).all())

    def get_active_by_coach_date_range(self, coach_id: int, start: datetime.date,
                                       end: datetime.date, ) -> list[Booking]:
        statement = (select(Booking).where(Booking.coach_id == coach_id, Booking.date >= start, Booking.date <= end,
                                           col(Booking.status).in_(ACTIVE_BOOKING_STATUSES), )
                     .order_by(Booking.date, Booking.start_time))
        return list(self.session.exec(statement).all())

    def get_work_dates(self, coach_id: int, start: datetime.date, end: datetime.date) -> set[datetime.date]:
        """Distinct dates with at least one active booking (for streaks)."""
        statement = (select(Booking.date).where(Booking.coach_id == coach_id, Booking.date >= start,
                                                Booking.date <= end,
                                                col(Booking.status).in_(ACTIVE_BOOKING_STATUSES), ).distinct())
        return set(self.session.exec(statement).all())

    def count_starting_between(self, coach_id: int, date: datetime.date, start: datetime.time,
                               end: datetime.time, ) -> int:
        statement = (select(func.count()).select_from(Booking).where(Booking.coach_id == coach_id,
                                                                     Booking.date == date,
                                                                     Booking.start_time >= start,
                                                                     Booking.start_time < end,
                                                                     col(Booking.status).in_(
                                                                         ACTIVE_BOOKING_STATUSES), ))
        return self.session.exec(statement).first() or 0

    def get_concluded_for_client(self, coach_id: int, client_id: int, limit: int) -> list[Booking]:
        """Most recent completed / no-show sessions, newest first."""
        statement = (select(Booking).where(Booking.coach_id == coach_id, Booking.client_id == client_id,
                                           col(Booking.status).in_(
                                               (BookingStatus.completed, BookingStatus.no_show)), )
                     .order_by(col(Booking.date).desc(), col(Booking.start_time).desc()).limit(limit))
        return list(self.session.exec(statement).all())

    def update(self, entry: Booking) -> Booking:
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry


class AvailabilityRepository:
    """Repository for AvailabilityWindow database operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, window: AvailabilityWindow) -> AvailabilityWindow:
        self.session.add(window)
        self.session.commit()
        self.session.refresh(window)
        return window

    def get_by_coach_and_date(self, coach_id: int, date: datetime.date) -> list[AvailabilityWindow]:
        statement = (select(AvailabilityWindow).where(AvailabilityWindow.coach_id == coach_id,
                                                      AvailabilityWindow.date == date, )
                     .order_by(AvailabilityWindow.start_time))
        return list(self.session.exec(statement).all())

    def get_by_coach_date_range(self, coach_id: int, start: datetime.date,
                                end: datetime.date, ) -> list[AvailabilityWindow]:
        statement = (select(AvailabilityWindow).where(AvailabilityWindow.coach_id == coach_id,
                                                      AvailabilityWindow.date >= start,
                                                      AvailabilityWindow.date <= end, )
                     .order_by(AvailabilityWindow.date, AvailabilityWindow.start_time))
        return list(self.session.exec(statement).all())
