"""
Calendar optimization service.

Turns scored opportunities into persisted suggestions and drives their
lifecycle::

    pending ──accept──► accepted ──apply──► (applied_at set)
       │    └─reject──► rejected
       └──(expires_at passed)──► expired

Accepted and rejected are terminal for ``respond_to_suggestion``.
Applying re-validates the target slot at execution time; when the gap
has closed the suggestion stays ``accepted`` for manual resolution.
"""

import datetime
import logging
from typing import NamedTuple, Optional

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.cache import TTLCache
from app.core.clock import utcnow
from app.core.config import settings
from app.db.repositories.booking import AvailabilityRepository, BookingRepository
from app.db.repositories.client_preference import ClientPreferenceRepository
from app.db.repositories.suggestion import SuggestionRepository
from app.db.repositories.waitlist import WaitlistRepository
from app.db.session import atomic
from app.engine.gaps import slot_is_free
from app.engine.scoring import DEFAULT_CONFIG, ScoringConfig, find_opportunities
from app.models.booking import Booking, BookingStatus
from app.models.client_preference import ClientPreference
from app.models.notification import NotificationType
from app.models.suggestion import OptimizationSuggestion, SuggestionStatus, SuggestionType
from app.models.waitlist import WaitlistStatus
from app.schemas.interval import TimeSlot
from app.schemas.optimization import (ApplyOptimizationResult, ClientPreferenceResponse, ClientPreferenceUpdate,
                                      Opportunity, SuggestionResponse, )
from app.services.notification_service import NotificationService

log = logging.getLogger(__name__)

MAX_ANALYSIS_DAYS = 31


class PreferenceSnapshot(NamedTuple):
    """Detached copy of a client's preferences, safe to keep in the cache."""

    preferred_days: tuple
    preferred_time_start: Optional[datetime.time]
    preferred_time_end: Optional[datetime.time]


_NO_PREFERENCE = PreferenceSnapshot((), None, None)


class OptimizationService:
    """Service for optimization suggestions."""

    def __init__(self, session: Session, cache: Optional[TTLCache] = None, config: Optional[ScoringConfig] = None):
        self.session = session
        self.cache = cache
        self.config = config or DEFAULT_CONFIG
        self.bookings = BookingRepository(session)
        self.availability = AvailabilityRepository(session)
        self.preferences = ClientPreferenceRepository(session)
        self.suggestions = SuggestionRepository(session)
        self.waitlist = WaitlistRepository(session)
        self.notifications = NotificationService(session)

    # ------------------------------------------------------------------
    # Client preferences (cached)
    # ------------------------------------------------------------------

    def _load_preferences(self, coach_id: int, client_ids: set[int]) -> dict[int, PreferenceSnapshot]:
        found: dict[int, PreferenceSnapshot] = {}
        missing = []
        for client_id in client_ids:
            cached = self.cache.get((coach_id, client_id)) if self.cache is not None else None
            if cached is None:
                missing.append(client_id)
            else:
                found[client_id] = cached

        if missing:
            rows = self.preferences.get_for_clients(coach_id, missing)
            for client_id in missing:
                row = rows.get(client_id)
                snapshot = (PreferenceSnapshot(tuple(row.preferred_days), row.preferred_time_start,
                                               row.preferred_time_end) if row else _NO_PREFERENCE)
                found[client_id] = snapshot
                if self.cache is not None:
                    self.cache.set((coach_id, client_id), snapshot)
        return found

    def set_client_preference(self, coach_id: int, client_id: int,
                              data: ClientPreferenceUpdate, ) -> ClientPreferenceResponse:
        if (data.preferred_time_start and data.preferred_time_end
                and data.preferred_time_start >= data.preferred_time_end):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                                detail="preferred_time_start must be before preferred_time_end", )
        preference = self.preferences.upsert(ClientPreference(coach_id=coach_id, client_id=client_id,
                                                              preferred_days=data.preferred_days,
                                                              preferred_time_start=data.preferred_time_start,
                                                              preferred_time_end=data.preferred_time_end, ))
        if self.cache is not None:
            self.cache.evict((coach_id, client_id))
        return ClientPreferenceResponse.model_validate(preference)

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def analyze_optimization_opportunities(self, coach_id: int, start_date: datetime.date, end_date: datetime.date,
                                           today: Optional[datetime.date] = None, ) -> list[Opportunity]:
        if end_date < start_date:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end_date must not precede start_date")
        span = (end_date - start_date).days + 1
        if span > MAX_ANALYSIS_DAYS:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                                detail=f"Range too large: {span} days (max {MAX_ANALYSIS_DAYS})", )
        if today is None:
            today = datetime.date.today()

        # One snapshot for the whole range
        windows = self.availability.get_by_coach_date_range(coach_id, start_date, end_date)
        bookings = self.bookings.get_active_by_coach_date_range(coach_id, start_date, end_date)
        waitlist = self.waitlist.get_by_coach(coach_id, WaitlistStatus.active)
        preferences = self._load_preferences(coach_id, {b.client_id for b in bookings})

        dates = [start_date + datetime.timedelta(days=i) for i in range(span)]
        opportunities = find_opportunities(dates, today, windows, bookings, preferences, waitlist, self.config)
        log.info("[optimization] coach=%s range=%s..%s opportunities=%d", coach_id, start_date, end_date,
                 len(opportunities))
        return opportunities

    # ------------------------------------------------------------------
    # Suggestions
    # ------------------------------------------------------------------

    def create_suggestions(self, coach_id: int, opportunities: list[Opportunity], limit: Optional[int] = None,
                           now: Optional[datetime.datetime] = None, ) -> list[SuggestionResponse]:
        """Persist the best ``limit`` opportunities, one per source."""
        if limit is None:
            limit = settings.DEFAULT_SUGGESTION_LIMIT
        if now is None:
            now = utcnow()
        pending_bookings, pending_entries = self.suggestions.get_pending_sources(coach_id)

        chosen: list[Opportunity] = []
        for opp in sorted(opportunities, key=lambda o: (-o.benefit_score, o.proposed_date, o.proposed_start_time)):
            if len(chosen) >= limit:
                break
            if opp.source_booking_id is not None:
                if opp.source_booking_id in pending_bookings:
                    continue
                pending_bookings.add(opp.source_booking_id)
            if opp.waitlist_entry_id is not None:
                if opp.waitlist_entry_id in pending_entries:
                    continue
                pending_entries.add(opp.waitlist_entry_id)
            chosen.append(opp)

        expires_at = now + datetime.timedelta(days=self.config.suggestion_ttl_days)
        created = []
        with atomic(self.session):
            for opp in chosen:
                suggestion = OptimizationSuggestion(coach_id=coach_id, suggestion_type=opp.suggestion_type,
                                                    source_booking_id=opp.source_booking_id,
                                                    waitlist_entry_id=opp.waitlist_entry_id,
                                                    client_id=opp.client_id, proposed_date=opp.proposed_date,
                                                    proposed_start_time=opp.proposed_start_time,
                                                    proposed_end_time=opp.proposed_end_time,
                                                    gap_start_time=opp.target_gap.start_time,
                                                    gap_end_time=opp.target_gap.end_time,
                                                    benefit_score=opp.benefit_score, reason=opp.reason,
                                                    expires_at=expires_at, created_at=now, )
                created.append(self.suggestions.stage(suggestion))

        log.info("[optimization] coach=%s created %d suggestions", coach_id, len(created))
        return [SuggestionResponse.model_validate(s) for s in created]

    def get_pending_suggestions(self, coach_id: int,
                                now: Optional[datetime.datetime] = None, ) -> list[SuggestionResponse]:
        entries = self.suggestions.get_pending_by_coach(coach_id, now or utcnow())
        return [SuggestionResponse.model_validate(s) for s in entries]

    def respond_to_suggestion(self, suggestion_id: int, action: str,
                              now: Optional[datetime.datetime] = None, ) -> SuggestionResponse:
        if action not in ("accept", "reject"):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown action: '{action}'")
        if now is None:
            now = utcnow()

        suggestion = self._get_or_404(suggestion_id)
        if suggestion.status != SuggestionStatus.pending:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT,
                                detail=f"Suggestion already {suggestion.status.value}", )
        if suggestion.expires_at <= now:
            suggestion.status = SuggestionStatus.expired
            self.suggestions.update(suggestion)
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Suggestion has expired")

        suggestion.status = SuggestionStatus.accepted if action == "accept" else SuggestionStatus.rejected
        suggestion.reviewed_at = now
        suggestion = self.suggestions.update(suggestion)
        return SuggestionResponse.model_validate(suggestion)

    def apply_optimization(self, suggestion_id: int,
                           now: Optional[datetime.datetime] = None, ) -> ApplyOptimizationResult:
        """Execute an accepted suggestion after re-validating the target slot."""
        if now is None:
            now = utcnow()

        suggestion = self._get_or_404(suggestion_id)
        if suggestion.status != SuggestionStatus.accepted:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT,
                                detail=f"Suggestion is {suggestion.status.value}, not accepted", )
        if suggestion.applied_at is not None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Suggestion already applied")

        target = TimeSlot(date=suggestion.proposed_date, start_time=suggestion.proposed_start_time,
                          end_time=suggestion.proposed_end_time)

        if suggestion.suggestion_type == SuggestionType.reschedule:
            return self._apply_reschedule(suggestion, target, now)
        return self._apply_waitlist_fill(suggestion, target, now)

    def _target_is_free(self, suggestion: OptimizationSuggestion, target: TimeSlot,
                        exclude_booking_id: Optional[int] = None, ) -> bool:
        windows = self.availability.get_by_coach_and_date(suggestion.coach_id, target.date)
        bookings = self.bookings.get_active_by_coach_and_date(suggestion.coach_id, target.date)
        return slot_is_free(windows, bookings, target, exclude_booking_id)

    def _apply_reschedule(self, suggestion: OptimizationSuggestion, target: TimeSlot,
                          now: datetime.datetime, ) -> ApplyOptimizationResult:
        booking = self.bookings.get_by_id(suggestion.source_booking_id) if suggestion.source_booking_id else None
        if booking is None or booking.status != BookingStatus.scheduled:
            return self._fail(suggestion, "Source booking is no longer scheduled")
        if not self._target_is_free(suggestion, target, exclude_booking_id=booking.id):
            return self._fail(suggestion, "Target slot is no longer free")

        previous = TimeSlot.of(booking)
        with atomic(self.session):
            booking.date = target.date
            booking.start_time = target.start_time
            booking.end_time = target.end_time
            booking.rescheduled_by_optimization = True
            booking.updated_at = now
            self.session.add(booking)
            suggestion.applied_at = now
            suggestion.applied_booking_id = booking.id
            self.session.add(suggestion)
            self.notifications.queue_notification(NotificationType.booking_rescheduled, booking.client_id, {
                "booking_id": booking.id,
                "previous_date": previous.date.isoformat(),
                "previous_start_time": previous.start_time.isoformat(timespec="minutes"),
                "new_date": target.date.isoformat(),
                "new_start_time": target.start_time.isoformat(timespec="minutes"),
            }, now=now)

        log.info("[optimization] applied suggestion=%s booking=%s -> %s %s", suggestion.id, booking.id, target.date,
                 target.start_time)
        return ApplyOptimizationResult(success=True, booking_id=booking.id)

    def _apply_waitlist_fill(self, suggestion: OptimizationSuggestion, target: TimeSlot,
                             now: datetime.datetime, ) -> ApplyOptimizationResult:
        entry = self.waitlist.get_by_id(suggestion.waitlist_entry_id) if suggestion.waitlist_entry_id else None
        if entry is None or entry.status != WaitlistStatus.active:
            return self._fail(suggestion, "Waitlist entry is no longer active")
        if not self._target_is_free(suggestion, target):
            return self._fail(suggestion, "Target slot is no longer free")

        with atomic(self.session):
            booking = self.bookings.stage(Booking(coach_id=suggestion.coach_id, client_id=entry.client_id,
                                                  date=target.date, start_time=target.start_time,
                                                  end_time=target.end_time, package_id=entry.package_id,
                                                  created_at=now, updated_at=now, ))
            entry.status = WaitlistStatus.converted
            entry.responded_at = now
            entry.updated_at = now
            self.session.add(entry)
            suggestion.applied_at = now
            suggestion.applied_booking_id = booking.id
            self.session.add(suggestion)

        log.info("[optimization] applied suggestion=%s new booking=%s for waitlist entry=%s", suggestion.id,
                 booking.id, entry.id)
        return ApplyOptimizationResult(success=True, booking_id=booking.id)

    @staticmethod
    def _fail(suggestion: OptimizationSuggestion, error: str) -> ApplyOptimizationResult:
        log.warning("[optimization] suggestion=%s not applied: %s", suggestion.id, error)
        return ApplyOptimizationResult(success=False, error=error)

    def expire_stale_suggestions(self, now: Optional[datetime.datetime] = None) -> int:
        expired = self.suggestions.expire_pending_before(now or utcnow())
        log.info("[optimization] expired %d stale suggestions", expired)
        return expired

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_or_404(self, suggestion_id: int) -> OptimizationSuggestion:
        suggestion = self.suggestions.get_by_id(suggestion_id)
        if not suggestion:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Suggestion not found")
        return suggestion
