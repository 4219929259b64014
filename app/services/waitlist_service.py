"""
Waitlist service.

Entry lifecycle::

    active ──notify──► notified ──accept──► converted
      ▲                   │
      └──decline/timeout──┘
    active | notified ──cancel──► cancelled

``cancelled`` and ``converted`` are terminal.  Priority is recomputed
on every read (see :mod:`app.engine.priority`).
"""

import datetime
import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.clock import utcnow
from app.db.repositories.booking import AvailabilityRepository, BookingRepository
from app.db.repositories.package import PackageRepository
from app.db.repositories.waitlist import WaitlistRepository
from app.db.session import atomic
from app.engine.gaps import slot_is_free
from app.engine.priority import (DEFAULT_CONFIG, PriorityConfig, compute_priority_score, days_waiting,
                                 slot_matches_entry, sort_waitlist, )
from app.models.booking import Booking
from app.models.notification import NotificationType
from app.models.package import PackageStatus
from app.models.waitlist import WaitlistEntry, WaitlistStatus
from app.schemas.interval import TimeSlot
from app.schemas.waitlist import WaitlistEntryCreate, WaitlistEntryResponse
from app.services.notification_service import NotificationService

log = logging.getLogger(__name__)

_TERMINAL = (WaitlistStatus.cancelled, WaitlistStatus.converted)


class WaitlistService:
    """Service for waitlist business logic."""

    def __init__(self, session: Session, config: Optional[PriorityConfig] = None):
        self.session = session
        self.config = config or DEFAULT_CONFIG
        self.repository = WaitlistRepository(session)
        self.packages = PackageRepository(session)
        self.bookings = BookingRepository(session)
        self.availability = AvailabilityRepository(session)
        self.notifications = NotificationService(session)

    def add_to_waitlist(self, coach_id: int, data: WaitlistEntryCreate,
                        now: Optional[datetime.datetime] = None, ) -> WaitlistEntryResponse:
        if (data.preferred_time_start and data.preferred_time_end
                and data.preferred_time_start >= data.preferred_time_end):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                                detail="preferred_time_start must be before preferred_time_end", )

        existing = self.repository.get_open_for_client(coach_id, data.client_id)
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT,
                                detail=f"Client {data.client_id} is already on this coach's waitlist", )

        now = now or utcnow()
        entry = WaitlistEntry(coach_id=coach_id, client_id=data.client_id, preferred_days=data.preferred_days,
                              preferred_time_start=data.preferred_time_start,
                              preferred_time_end=data.preferred_time_end, package_id=data.package_id,
                              notes=data.notes, created_at=now, updated_at=now, )
        entry = self.repository.create(entry)
        log.info("[waitlist] coach=%s added client=%s entry=%s", coach_id, data.client_id, entry.id)
        return self._to_response(entry, now)

    def get_entry(self, entry_id: int, now: Optional[datetime.datetime] = None) -> WaitlistEntryResponse:
        return self._to_response(self._get_or_404(entry_id), now)

    def get_coach_waitlist(self, coach_id: int, status_filter: Optional[WaitlistStatus] = WaitlistStatus.active,
                           sort_by: str = "priority",
                           now: Optional[datetime.datetime] = None, ) -> list[WaitlistEntryResponse]:
        now = now or utcnow()
        entries = self.repository.get_by_coach(coach_id, status_filter)
        return self._ranked(entries, sort_by, now)

    def find_candidates_for_slot(self, coach_id: int, slot: TimeSlot,
                                 now: Optional[datetime.datetime] = None, ) -> list[WaitlistEntryResponse]:
        """Active entries whose preferences admit ``slot``, best first."""
        now = now or utcnow()
        entries = [e for e in self.repository.get_by_coach(coach_id, WaitlistStatus.active)
                   if slot_matches_entry(e, slot)]
        return self._ranked(entries, "priority", now)

    def notify_candidate(self, entry_id: int, slot: TimeSlot,
                         now: Optional[datetime.datetime] = None, ) -> WaitlistEntryResponse:
        """Offer ``slot`` to an active entry and queue the notice."""
        now = now or utcnow()
        entry = self._get_or_404(entry_id)
        if entry.status != WaitlistStatus.active:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT,
                                detail=f"Waitlist entry is {entry.status.value}, not active", )

        deadline = now + datetime.timedelta(hours=self.config.offer_response_hours)
        with atomic(self.session):
            entry.status = WaitlistStatus.notified
            entry.offered_date = slot.date
            entry.offered_start_time = slot.start_time
            entry.offered_end_time = slot.end_time
            entry.notified_at = now
            entry.response_deadline = deadline
            entry.responded_at = None
            entry.updated_at = now
            self.session.add(entry)
            self.notifications.queue_notification(NotificationType.waitlist_slot_available, entry.client_id, {
                "waitlist_entry_id": entry.id,
                "coach_id": entry.coach_id,
                "date": slot.date.isoformat(),
                "start_time": slot.start_time.isoformat(timespec="minutes"),
                "end_time": slot.end_time.isoformat(timespec="minutes"),
                "response_deadline": deadline.isoformat(),
            }, now=now)

        log.info("[waitlist] entry=%s notified for %s %s", entry.id, slot.date, slot.start_time)
        return self._to_response(entry, now)

    def offer_freed_slot(self, coach_id: int, slot: TimeSlot,
                         now: Optional[datetime.datetime] = None, ) -> Optional[WaitlistEntryResponse]:
        """Notify the top candidate for a freed slot, if any."""
        candidates = self.find_candidates_for_slot(coach_id, slot, now)
        if not candidates:
            log.debug("[waitlist] no candidate for freed slot %s %s", slot.date, slot.start_time)
            return None
        return self.notify_candidate(candidates[0].id, slot, now)

    def respond_to_offer(self, entry_id: int, accept: bool,
                         now: Optional[datetime.datetime] = None, ) -> WaitlistEntryResponse:
        now = now or utcnow()
        entry = self._get_or_404(entry_id)
        if entry.status != WaitlistStatus.notified:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No pending offer for this entry")

        if entry.response_deadline is not None and entry.response_deadline < now:
            self._reopen(entry, now)
            self.session.commit()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Offer has expired")

        if not accept:
            self._reopen(entry, now)
            self.session.commit()
            self.session.refresh(entry)
            log.info("[waitlist] entry=%s declined offer", entry.id)
            return self._to_response(entry, now)

        slot = TimeSlot(date=entry.offered_date, start_time=entry.offered_start_time,
                        end_time=entry.offered_end_time)
        windows = self.availability.get_by_coach_and_date(entry.coach_id, slot.date)
        bookings = self.bookings.get_active_by_coach_and_date(entry.coach_id, slot.date)
        if not slot_is_free(windows, bookings, slot):
            self._reopen(entry, now)
            self.session.commit()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Offered slot is no longer free")

        with atomic(self.session):
            self.bookings.stage(Booking(coach_id=entry.coach_id, client_id=entry.client_id, date=slot.date,
                                        start_time=slot.start_time, end_time=slot.end_time,
                                        package_id=entry.package_id, created_at=now, updated_at=now, ))
            entry.status = WaitlistStatus.converted
            entry.responded_at = now
            entry.updated_at = now
            self.session.add(entry)

        log.info("[waitlist] entry=%s converted", entry.id)
        return self._to_response(entry, now)

    def process_expired_offers(self, now: Optional[datetime.datetime] = None) -> int:
        """Return unanswered offers past their deadline to the active queue."""
        now = now or utcnow()
        expired = self.repository.get_offers_past_deadline(now)
        with atomic(self.session):
            for entry in expired:
                self._reopen(entry, now)
        log.info("[waitlist] reopened %d expired offers", len(expired))
        return len(expired)

    def cancel_waitlist_entry(self, entry_id: int,
                              now: Optional[datetime.datetime] = None, ) -> WaitlistEntryResponse:
        now = now or utcnow()
        entry = self._get_or_404(entry_id)
        if entry.status in _TERMINAL:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT,
                                detail=f"Waitlist entry is already {entry.status.value}", )
        entry.status = WaitlistStatus.cancelled
        entry.updated_at = now
        entry = self.repository.update(entry)
        return self._to_response(entry, now)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _reopen(self, entry: WaitlistEntry, now: datetime.datetime) -> None:
        entry.status = WaitlistStatus.active
        entry.offered_date = None
        entry.offered_start_time = None
        entry.offered_end_time = None
        entry.response_deadline = None
        entry.responded_at = now
        entry.updated_at = now
        self.session.add(entry)

    def _has_active_package(self, entry: WaitlistEntry) -> bool:
        if entry.package_id is None:
            return False
        package = self.packages.get_by_id(entry.package_id)
        return package is not None and package.status == PackageStatus.active and package.sessions_remaining > 0

    def _ranked(self, entries: list[WaitlistEntry], sort_by: str,
                now: datetime.datetime, ) -> list[WaitlistEntryResponse]:
        packaged = {e.id: self._has_active_package(e) for e in entries}
        scores = {e.id: compute_priority_score(e, now, packaged[e.id], self.config) for e in entries}
        ordered = sort_waitlist(entries, scores, sort_by)
        return [self._build_response(e, scores[e.id], packaged[e.id], now) for e in ordered]

    def _to_response(self, entry: WaitlistEntry, now: Optional[datetime.datetime] = None) -> WaitlistEntryResponse:
        now = now or utcnow()
        packaged = self._has_active_package(entry)
        return self._build_response(entry, compute_priority_score(entry, now, packaged, self.config), packaged, now)

    @staticmethod
    def _build_response(entry: WaitlistEntry, score: int, packaged: bool,
                        now: datetime.datetime, ) -> WaitlistEntryResponse:
        return WaitlistEntryResponse(id=entry.id, coach_id=entry.coach_id, client_id=entry.client_id,
                                     preferred_days=list(entry.preferred_days),
                                     preferred_time_start=entry.preferred_time_start,
                                     preferred_time_end=entry.preferred_time_end, package_id=entry.package_id,
                                     notes=entry.notes, status=entry.status, priority_score=score,
                                     days_waiting=days_waiting(entry.created_at, now), has_active_package=packaged,
                                     offered_date=entry.offered_date, offered_start_time=entry.offered_start_time,
                                     offered_end_time=entry.offered_end_time,
                                     response_deadline=entry.response_deadline, created_at=entry.created_at, )

    def _get_or_404(self, entry_id: int) -> WaitlistEntry:
        entry = self.repository.get_by_id(entry_id)
        if not entry:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Waitlist entry not found")
        return entry
