"""Tests for the expiry thresholds.

The thresholds are matched **exactly**: a package 6 days from expiry
must not alert even though 6 <= 7.  Loosening this to "<=" would alert
every day of the final week.
"""

import datetime

import pytest

from app.engine.expiration import (DEFAULT_CONFIG, ExpirationConfig, days_remaining, group_by_urgency, is_alertable,
                                   should_alert, to_expiring, )
from app.models.package import BookingPackage

TODAY = datetime.date(2026, 10, 19)


def _package(days_left=7, total=10, used=0, package_id=1) -> BookingPackage:
    end = TODAY + datetime.timedelta(days=days_left) if days_left is not None else None
    return BookingPackage(id=package_id, coach_id=1, client_id=2, name="10-pack", total_sessions=total,
                          sessions_used=used, end_date=end)


class TestThresholds:
    @pytest.mark.parametrize("remaining", [7, 3, 1])
    def test_exact_threshold_alerts(self, remaining):
        assert should_alert(remaining, DEFAULT_CONFIG.thresholds)

    @pytest.mark.parametrize("remaining", [8, 6, 5, 4, 2, 0, -1])
    def test_between_thresholds_does_not_alert(self, remaining):
        assert not should_alert(remaining, DEFAULT_CONFIG.thresholds)

    def test_days_remaining(self):
        assert days_remaining(TODAY + datetime.timedelta(days=3), TODAY) == 3
        assert days_remaining(TODAY - datetime.timedelta(days=1), TODAY) == -1

    def test_custom_thresholds(self):
        cfg = ExpirationConfig(thresholds=[14])
        assert is_alertable(_package(days_left=14), TODAY, cfg)
        assert not is_alertable(_package(days_left=7), TODAY, cfg)


class TestAlertable:
    def test_active_package_on_threshold(self):
        assert is_alertable(_package(days_left=3), TODAY)

    def test_no_end_date(self):
        assert not is_alertable(_package(days_left=None), TODAY)

    def test_exhausted_package_excluded(self):
        assert not is_alertable(_package(days_left=7, total=5, used=5), TODAY)

    def test_ten_day_walk_alerts_three_times(self):
        package = _package(days_left=7)
        hits = [i for i in range(10) if is_alertable(package, TODAY + datetime.timedelta(days=i))]
        assert hits == [0, 4, 6]


class TestGrouping:
    def test_buckets(self):
        items = [to_expiring(_package(days_left=d, package_id=d + 1), TODAY) for d in (0, 1, 2, 3, 4, 7)]
        grouped = group_by_urgency(items)
        assert [p.days_until_expiry for p in grouped.today] == [0, 1]
        assert [p.days_until_expiry for p in grouped.three_days] == [2, 3]
        assert [p.days_until_expiry for p in grouped.seven_days] == [4, 7]

    def test_beyond_a_week_dropped(self):
        grouped = group_by_urgency([to_expiring(_package(days_left=10), TODAY)])
        assert grouped.today == grouped.three_days == grouped.seven_days == []
