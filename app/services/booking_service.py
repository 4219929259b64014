"""
Booking lifecycle.

Only ``scheduled`` bookings transition; every other status is final::

    scheduled ──complete──► completed   (draws from the package)
              ──cancel────► cancelled   (frees the slot for the waitlist)
              ──no_show───► no_show     (re-evaluates the no-show alert)
"""

import datetime
import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.clock import utcnow
from app.db.repositories.booking import AvailabilityRepository, BookingRepository
from app.db.session import atomic
from app.engine.gaps import slot_is_free
from app.models.booking import AvailabilityWindow, Booking, BookingStatus
from app.schemas.booking import AvailabilityCreate, AvailabilityResponse, BookingCreate, BookingResponse
from app.schemas.interval import TimeSlot
from app.services.no_show_service import NoShowService
from app.services.shared_package_service import SharedPackageService
from app.services.waitlist_service import WaitlistService

log = logging.getLogger(__name__)


class BookingService:
    """Service for booking ingestion and status transitions."""

    def __init__(self, session: Session):
        self.session = session
        self.repository = BookingRepository(session)
        self.availability = AvailabilityRepository(session)

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def create_booking(self, data: BookingCreate) -> BookingResponse:
        self._check_order(data.start_time, data.end_time)
        slot = TimeSlot(date=data.date, start_time=data.start_time, end_time=data.end_time)
        windows = self.availability.get_by_coach_and_date(data.coach_id, data.date)
        bookings = self.repository.get_active_by_coach_and_date(data.coach_id, data.date)
        if not slot_is_free(windows, bookings, slot):
            log.info("[booking] coach=%s slot %s %s-%s rejected: not free", data.coach_id, data.date,
                     data.start_time, data.end_time)
            raise HTTPException(status_code=status.HTTP_409_CONFLICT,
                                detail="Slot is outside availability or overlaps another booking")
        entry = self.repository.create(Booking(coach_id=data.coach_id, client_id=data.client_id, date=data.date,
                                               start_time=data.start_time, end_time=data.end_time,
                                               package_id=data.package_id, ))
        return BookingResponse.model_validate(entry)

    def add_availability(self, data: AvailabilityCreate) -> AvailabilityResponse:
        self._check_order(data.start_time, data.end_time)
        window = self.availability.create(AvailabilityWindow(coach_id=data.coach_id, date=data.date,
                                                             start_time=data.start_time, end_time=data.end_time, ))
        return AvailabilityResponse.model_validate(window)

    def get_booking(self, booking_id: int) -> BookingResponse:
        return BookingResponse.model_validate(self._get_or_404(booking_id))

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def complete_booking(self, booking_id: int, now: Optional[datetime.datetime] = None) -> BookingResponse:
        now = now or utcnow()
        booking = self._get_scheduled_or_409(booking_id)

        ledger = SharedPackageService(self.session)
        package = ledger.check_usage_allowed(booking, booking.client_id) if booking.package_id else None

        with atomic(self.session):
            booking.status = BookingStatus.completed
            booking.updated_at = now
            self.session.add(booking)
            if package is not None:
                ledger.stage_session_usage(booking, package, booking.client_id, now)

        log.info("[booking] booking=%s completed", booking_id)
        return BookingResponse.model_validate(booking)

    def cancel_booking(self, booking_id: int, reason: Optional[str] = None, offer_to_waitlist: bool = True,
                       now: Optional[datetime.datetime] = None, ) -> BookingResponse:
        now = now or utcnow()
        booking = self._get_scheduled_or_409(booking_id)

        booking.status = BookingStatus.cancelled
        booking.cancelled_at = now
        booking.cancellation_reason = reason
        booking.updated_at = now
        booking = self.repository.update(booking)
        log.info("[booking] booking=%s cancelled", booking_id)

        if offer_to_waitlist:
            WaitlistService(self.session).offer_freed_slot(booking.coach_id, TimeSlot.of(booking), now)
        return BookingResponse.model_validate(booking)

    def mark_no_show(self, booking_id: int, now: Optional[datetime.datetime] = None) -> BookingResponse:
        now = now or utcnow()
        booking = self._get_scheduled_or_409(booking_id)

        with atomic(self.session):
            booking.status = BookingStatus.no_show
            booking.updated_at = now
            self.session.add(booking)
            NoShowService(self.session).stage_alert_check(booking.coach_id, booking.client_id, now)

        log.info("[booking] booking=%s marked no-show", booking_id)
        return BookingResponse.model_validate(booking)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_order(start: datetime.time, end: datetime.time) -> None:
        if start >= end:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="start_time must be before end_time")

    def _get_or_404(self, booking_id: int) -> Booking:
        booking = self.repository.get_by_id(booking_id)
        if not booking:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
        return booking

    def _get_scheduled_or_409(self, booking_id: int) -> Booking:
        booking = self._get_or_404(booking_id)
        if booking.status != BookingStatus.scheduled:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT,
                                detail=f"Booking is {booking.status.value}, not scheduled", )
        return booking
