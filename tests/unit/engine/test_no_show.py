"""Tests for no-show statistics."""

import datetime

import pytest

from app.engine.no_show import DEFAULT_CONFIG, NoShowConfig, compute_no_show_stats, severity_for_rate
from app.models.booking import Booking, BookingStatus
from app.models.no_show_alert import NoShowSeverity


def _history(*statuses: BookingStatus) -> list[Booking]:
    """Newest first."""
    day = datetime.date(2026, 10, 19)
    return [Booking(id=i, coach_id=1, client_id=2, date=day - datetime.timedelta(days=i),
                    start_time=datetime.time(9, 0), end_time=datetime.time(10, 0), status=s)
            for i, s in enumerate(statuses)]


C, N = BookingStatus.completed, BookingStatus.no_show


class TestSeverity:
    @pytest.mark.parametrize("rate,expected", [(40.0, NoShowSeverity.warning), (49.9, NoShowSeverity.warning),
                                               (50.0, NoShowSeverity.high), (59.9, NoShowSeverity.high),
                                               (60.0, NoShowSeverity.critical), (100.0, NoShowSeverity.critical), ])
    def test_bands(self, rate, expected):
        assert severity_for_rate(rate) == expected


class TestStats:
    def test_no_history(self):
        stats = compute_no_show_stats(2, [])
        assert stats.session_count == 0
        assert stats.no_show_rate == 0.0
        assert not stats.exceeds_threshold
        assert stats.severity is None

    def test_two_of_five_hits_threshold(self):
        stats = compute_no_show_stats(2, _history(N, C, N, C, C))
        assert stats.no_show_rate == 40.0
        assert stats.exceeds_threshold
        assert stats.severity == NoShowSeverity.warning

    def test_one_of_five_below_threshold(self):
        stats = compute_no_show_stats(2, _history(N, C, C, C, C))
        assert stats.no_show_rate == 20.0
        assert not stats.exceeds_threshold

    def test_only_latest_sessions_analysed(self):
        stats = compute_no_show_stats(2, _history(C, C, C, C, C, N, N, N))
        assert stats.session_count == DEFAULT_CONFIG.sessions_to_analyze
        assert stats.no_show_count == 0

    def test_critical(self):
        stats = compute_no_show_stats(2, _history(N, N, N, C, C))
        assert stats.severity == NoShowSeverity.critical

    def test_custom_window(self):
        stats = compute_no_show_stats(2, _history(N, C, C), NoShowConfig(sessions_to_analyze=2))
        assert stats.session_count == 2
        assert stats.no_show_rate == 50.0
        assert stats.severity == NoShowSeverity.high
