"""Tests for the optimization suggestion lifecycle."""

import datetime

import pytest
from fastapi import HTTPException
from sqlmodel import select

from app.core.cache import TTLCache
from app.core.config import settings
from app.models.booking import Booking, BookingStatus
from app.models.notification import Notification, NotificationType
from app.models.suggestion import SuggestionStatus, SuggestionType
from app.models.waitlist import WaitlistEntry, WaitlistStatus
from app.schemas.optimization import ClientPreferenceUpdate, CreateSuggestionsRequest
from app.services.optimization_service import OptimizationService

MONDAY = datetime.date(2026, 10, 19)
TUESDAY = MONDAY + datetime.timedelta(days=1)
NOW = datetime.datetime(2026, 10, 19, 7, 0)
COACH = 1


@pytest.fixture
def reference_day(add_window, add_booking):
    """09-17 window; 09-10 (client 101), 11-12 (102) and 15-17 (103) booked."""
    add_window(COACH, MONDAY, "09:00", "17:00")
    return [add_booking(COACH, 101, MONDAY, "09:00", "10:00"),
            add_booking(COACH, 102, MONDAY, "11:00", "12:00"),
            add_booking(COACH, 103, MONDAY, "15:00", "17:00")]


@pytest.fixture
def next_day(add_window, add_booking):
    """Tuesday 09-12 window with one 10-11 booking (client 104) movable to either edge."""
    add_window(COACH, TUESDAY, "09:00", "12:00")
    return add_booking(COACH, 104, TUESDAY, "10:00", "11:00")


@pytest.fixture
def service(session):
    return OptimizationService(session, cache=TTLCache())


def _create(service, limit=5, end=MONDAY):
    opps = service.analyze_optimization_opportunities(COACH, MONDAY, end, today=MONDAY)
    return service.create_suggestions(COACH, opps, limit=limit, now=NOW)


class TestAnalyze:
    def test_reference_day(self, service, reference_day):
        opps = service.analyze_optimization_opportunities(COACH, MONDAY, MONDAY, today=MONDAY)
        assert opps[0].source_booking_id == reference_day[1].id
        assert opps[0].proposed_start_time == datetime.time(10, 0)

    def test_reversed_range(self, service):
        with pytest.raises(HTTPException) as exc:
            service.analyze_optimization_opportunities(COACH, MONDAY, MONDAY - datetime.timedelta(days=1))
        assert exc.value.status_code == 400

    def test_range_too_large(self, service):
        with pytest.raises(HTTPException) as exc:
            service.analyze_optimization_opportunities(COACH, MONDAY, MONDAY + datetime.timedelta(days=31))
        assert exc.value.status_code == 400

    def test_empty_calendar(self, service):
        assert service.analyze_optimization_opportunities(COACH, MONDAY, MONDAY, today=MONDAY) == []

    def test_preference_update_evicts_cache(self, service, reference_day):
        service.analyze_optimization_opportunities(COACH, MONDAY, MONDAY, today=MONDAY)
        assert (COACH, 102) in service.cache

        service.set_client_preference(COACH, 102, ClientPreferenceUpdate(preferred_days=[1, 2]))
        assert (COACH, 102) not in service.cache

        opps = service.analyze_optimization_opportunities(COACH, MONDAY, MONDAY, today=MONDAY)
        assert reference_day[1].id not in {o.source_booking_id for o in opps}

    def test_invalid_preference_window(self, service):
        data = ClientPreferenceUpdate(preferred_time_start=datetime.time(12, 0), preferred_time_end=datetime.time(9, 0))
        with pytest.raises(HTTPException) as exc:
            service.set_client_preference(COACH, 102, data)
        assert exc.value.status_code == 400


class TestCreateSuggestions:
    def test_one_suggestion_per_source(self, service, reference_day, next_day):
        created = _create(service, end=TUESDAY)
        sources = [s.source_booking_id for s in created]
        assert sorted(sources) == sorted([reference_day[1].id, next_day.id])
        assert all(s.status == SuggestionStatus.pending for s in created)
        assert all(s.expires_at == NOW + datetime.timedelta(days=7) for s in created)

    def test_gap_shifting_move_not_persisted(self, service, reference_day):
        created = _create(service)
        assert [s.source_booking_id for s in created] == [reference_day[1].id]

    def test_limit(self, service, reference_day, next_day):
        created = _create(service, limit=1, end=TUESDAY)
        assert len(created) == 1
        assert created[0].source_booking_id == reference_day[1].id

    def test_default_limit_from_settings(self, service, reference_day, next_day, monkeypatch):
        monkeypatch.setattr(settings, "DEFAULT_SUGGESTION_LIMIT", 1)
        opps = service.analyze_optimization_opportunities(COACH, MONDAY, TUESDAY, today=MONDAY)
        assert len(service.create_suggestions(COACH, opps, now=NOW)) == 1

    def test_request_limit_defaults_to_settings(self):
        request = CreateSuggestionsRequest(start_date=MONDAY, end_date=TUESDAY)
        assert request.limit == settings.DEFAULT_SUGGESTION_LIMIT

    def test_rerun_does_not_duplicate_pending(self, service, reference_day, next_day):
        _create(service, end=TUESDAY)
        assert _create(service, end=TUESDAY) == []
        assert len(service.get_pending_suggestions(COACH, now=NOW)) == 2

    def test_pending_ordered_by_benefit(self, service, reference_day, next_day):
        _create(service, end=TUESDAY)
        scores = [s.benefit_score for s in service.get_pending_suggestions(COACH, now=NOW)]
        assert scores == sorted(scores, reverse=True)


class TestRespond:
    def test_accept(self, service, reference_day):
        suggestion = _create(service, limit=1)[0]
        result = service.respond_to_suggestion(suggestion.id, "accept", now=NOW)
        assert result.status == SuggestionStatus.accepted
        assert result.reviewed_at == NOW

    def test_terminal_after_reject(self, service, reference_day):
        suggestion = _create(service, limit=1)[0]
        service.respond_to_suggestion(suggestion.id, "reject", now=NOW)
        with pytest.raises(HTTPException) as exc:
            service.respond_to_suggestion(suggestion.id, "accept", now=NOW)
        assert exc.value.status_code == 409

    def test_expired_suggestion(self, service, reference_day):
        suggestion = _create(service, limit=1)[0]
        with pytest.raises(HTTPException) as exc:
            service.respond_to_suggestion(suggestion.id, "accept", now=NOW + datetime.timedelta(days=8))
        assert exc.value.status_code == 409
        assert service.suggestions.get_by_id(suggestion.id).status == SuggestionStatus.expired

    def test_unknown_suggestion(self, service):
        with pytest.raises(HTTPException) as exc:
            service.respond_to_suggestion(999, "accept")
        assert exc.value.status_code == 404

    def test_unknown_action(self, service, reference_day):
        suggestion = _create(service, limit=1)[0]
        with pytest.raises(HTTPException) as exc:
            service.respond_to_suggestion(suggestion.id, "maybe", now=NOW)
        assert exc.value.status_code == 400

    def test_expire_stale(self, service, reference_day, next_day):
        _create(service, end=TUESDAY)
        assert service.expire_stale_suggestions(NOW + datetime.timedelta(days=1)) == 0
        assert service.expire_stale_suggestions(NOW + datetime.timedelta(days=7)) == 2
        assert service.get_pending_suggestions(COACH, now=NOW) == []


class TestApply:
    def test_reschedule(self, service, session, reference_day):
        suggestion = _create(service, limit=1)[0]
        service.respond_to_suggestion(suggestion.id, "accept", now=NOW)

        result = service.apply_optimization(suggestion.id, now=NOW)

        assert result.success
        booking = session.get(Booking, reference_day[1].id)
        assert (booking.start_time, booking.end_time) == (datetime.time(10, 0), datetime.time(11, 0))
        assert booking.rescheduled_by_optimization
        applied = service.suggestions.get_by_id(suggestion.id)
        assert applied.applied_at == NOW
        assert applied.applied_booking_id == booking.id

        notifications = session.exec(select(Notification).where(Notification.recipient_id == 102)).all()
        assert [n.notification_type for n in notifications] == [NotificationType.booking_rescheduled]
        assert notifications[0].payload["new_start_time"] == "10:00"

    def test_gap_closed_before_apply(self, service, session, add_booking, reference_day):
        suggestion = _create(service, limit=1)[0]
        service.respond_to_suggestion(suggestion.id, "accept", now=NOW)
        add_booking(COACH, 200, MONDAY, "10:00", "11:00")

        result = service.apply_optimization(suggestion.id, now=NOW)

        assert not result.success
        assert result.error
        assert service.suggestions.get_by_id(suggestion.id).status == SuggestionStatus.accepted
        booking = session.get(Booking, reference_day[1].id)
        assert booking.start_time == datetime.time(11, 0)

    def test_source_booking_cancelled(self, service, session, reference_day):
        suggestion = _create(service, limit=1)[0]
        service.respond_to_suggestion(suggestion.id, "accept", now=NOW)
        booking = session.get(Booking, reference_day[1].id)
        booking.status = BookingStatus.cancelled
        session.add(booking)
        session.commit()

        assert not service.apply_optimization(suggestion.id, now=NOW).success

    def test_pending_cannot_be_applied(self, service, reference_day):
        suggestion = _create(service, limit=1)[0]
        with pytest.raises(HTTPException) as exc:
            service.apply_optimization(suggestion.id, now=NOW)
        assert exc.value.status_code == 409

    def test_applied_only_once(self, service, reference_day):
        suggestion = _create(service, limit=1)[0]
        service.respond_to_suggestion(suggestion.id, "accept", now=NOW)
        service.apply_optimization(suggestion.id, now=NOW)
        with pytest.raises(HTTPException) as exc:
            service.apply_optimization(suggestion.id, now=NOW)
        assert exc.value.status_code == 409

    def test_waitlist_fill(self, service, session, reference_day):
        entry = WaitlistEntry(coach_id=COACH, client_id=500, preferred_days=[0], created_at=NOW)
        session.add(entry)
        session.commit()

        opps = service.analyze_optimization_opportunities(COACH, MONDAY, MONDAY, today=MONDAY)
        fills = [o for o in opps if o.suggestion_type == SuggestionType.waitlist_fill]
        created = service.create_suggestions(COACH, fills, now=NOW)
        assert len(created) == 1
        service.respond_to_suggestion(created[0].id, "accept", now=NOW)

        result = service.apply_optimization(created[0].id, now=NOW)

        assert result.success
        booking = session.get(Booking, result.booking_id)
        assert booking.client_id == 500
        assert booking.start_time == datetime.time(10, 0)
        assert session.get(WaitlistEntry, entry.id).status == WaitlistStatus.converted
