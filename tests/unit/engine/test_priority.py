"""Tests for waitlist priority scoring and ordering."""

import datetime

import pytest

from app.engine.priority import (DEFAULT_CONFIG, PriorityConfig, compute_priority_score, days_waiting,
                                 slot_matches_entry, sort_waitlist, )
from app.models.waitlist import WaitlistEntry
from app.schemas.interval import TimeSlot

NOW = datetime.datetime(2026, 10, 19, 12, 0)
MONDAY = NOW.date()


def _entry(entry_id: int = 1, waited_days: float = 0, days=(), start=None, end=None,
           created_at: datetime.datetime = None) -> WaitlistEntry:
    return WaitlistEntry(id=entry_id, coach_id=1, client_id=100 + entry_id, preferred_days=list(days),
                         preferred_time_start=start, preferred_time_end=end,
                         created_at=created_at or NOW - datetime.timedelta(days=waited_days))


class TestPriorityScore:
    def test_fresh_flexible_entry(self):
        # base 50 + full flexibility 10
        assert compute_priority_score(_entry(), NOW) == 60

    def test_base_without_flexibility(self):
        cfg = PriorityConfig(day_flexibility_max=0, time_flexibility_max=0)
        assert compute_priority_score(_entry(), NOW, config=cfg) == 50

    def test_increases_with_time_waited(self):
        scores = [compute_priority_score(_entry(waited_days=d), NOW) for d in (0, 1, 3, 7, 14, 30, 90)]
        assert scores == sorted(scores)
        assert scores[-1] > scores[0]

    def test_wait_bonus_is_capped(self):
        assert compute_priority_score(_entry(waited_days=10_000), NOW) == 80

    def test_package_owner_first(self):
        entry = _entry(waited_days=3)
        assert compute_priority_score(entry, NOW, has_active_package=True) > compute_priority_score(entry, NOW)

    def test_flexibility_nudges_up(self):
        rigid = _entry(days=[0], start=datetime.time(9, 0), end=datetime.time(10, 0))
        some = _entry(days=[0, 2, 4], start=datetime.time(8, 0), end=datetime.time(14, 0))
        free = _entry()
        assert (compute_priority_score(rigid, NOW) < compute_priority_score(some, NOW)
                <= compute_priority_score(free, NOW))

    def test_package_outweighs_flexibility(self):
        rigid_paid = _entry(days=[0], start=datetime.time(9, 0), end=datetime.time(10, 0))
        flexible = _entry()
        assert compute_priority_score(rigid_paid, NOW, True) > compute_priority_score(flexible, NOW)

    def test_clamped_to_100(self):
        cfg = PriorityConfig(base_score=95.0)
        assert compute_priority_score(_entry(waited_days=60), NOW, True, cfg) == 100

    def test_days_waiting_never_negative(self):
        assert days_waiting(NOW + datetime.timedelta(hours=5), NOW) == 0
        assert days_waiting(NOW - datetime.timedelta(days=3, hours=1), NOW) == 3

    def test_default_config(self):
        assert DEFAULT_CONFIG.offer_response_hours == 4


class TestSortWaitlist:
    def test_priority_descending(self):
        a, b, c = _entry(1, 1), _entry(2, 2), _entry(3, 3)
        ordered = sort_waitlist([a, b, c], {1: 60, 2: 80, 3: 70})
        assert [e.id for e in ordered] == [2, 3, 1]

    def test_ties_first_come_first_served(self):
        older = _entry(1, waited_days=5)
        newer = _entry(2, waited_days=1)
        ordered = sort_waitlist([newer, older], {1: 70, 2: 70})
        assert [e.id for e in ordered] == [1, 2]

    def test_days_waiting_view(self):
        a, b = _entry(1, waited_days=1), _entry(2, waited_days=9)
        ordered = sort_waitlist([a, b], {1: 99, 2: 10}, sort_by="days_waiting")
        assert [e.id for e in ordered] == [2, 1]


class TestSlotMatching:
    @pytest.mark.parametrize("days,start,end,expected", [
        ((), None, None, True),
        ((0,), None, None, True),
        ((1, 2), None, None, False),
        ((), datetime.time(9, 0), datetime.time(12, 0), True),
        ((), datetime.time(10, 30), datetime.time(12, 0), False),
    ])
    def test_matches(self, days, start, end, expected):
        slot = TimeSlot(date=MONDAY, start_time=datetime.time(10, 0), end_time=datetime.time(11, 0))
        assert slot_matches_entry(_entry(days=days, start=start, end=end), slot) is expected
