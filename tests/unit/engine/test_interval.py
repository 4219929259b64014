"""Tests for the interval primitives."""

import datetime

import pytest
from pydantic import ValidationError

from app.schemas.interval import TimeSlot, minutes_to_time, time_to_minutes

DAY = datetime.date(2026, 10, 19)


def _slot(start: str, end: str, date: datetime.date = DAY) -> TimeSlot:
    sh, sm = start.split(":")
    eh, em = end.split(":")
    return TimeSlot(date=date, start_time=datetime.time(int(sh), int(sm)), end_time=datetime.time(int(eh), int(em)))


class TestMinuteArithmetic:
    @pytest.mark.parametrize("value,expected", [(datetime.time(0, 0), 0), (datetime.time(9, 30), 570),
                                                (datetime.time(23, 59), 1439), ])
    def test_time_to_minutes(self, value, expected):
        assert time_to_minutes(value) == expected

    def test_minutes_to_time_inverse(self):
        assert minutes_to_time(570) == datetime.time(9, 30)

    def test_minutes_to_time_clamps(self):
        assert minutes_to_time(-5) == datetime.time(0, 0)
        assert minutes_to_time(1440) == datetime.time(23, 59)


class TestTimeSlot:
    def test_start_must_precede_end(self):
        with pytest.raises(ValidationError):
            _slot("10:00", "10:00")
        with pytest.raises(ValidationError):
            _slot("11:00", "10:00")

    def test_is_immutable(self):
        slot = _slot("09:00", "10:00")
        with pytest.raises(ValidationError):
            slot.start_time = datetime.time(8, 0)

    def test_duration_and_weekday(self):
        slot = _slot("09:15", "10:45")
        assert slot.duration_minutes == 90
        assert slot.weekday == 0  # Monday

    def test_half_open_overlap(self):
        assert not _slot("09:00", "10:00").overlaps(_slot("10:00", "11:00"))
        assert _slot("09:00", "10:01").overlaps(_slot("10:00", "11:00"))

    def test_no_overlap_across_dates(self):
        other_day = DAY + datetime.timedelta(days=1)
        assert not _slot("09:00", "10:00").overlaps(_slot("09:00", "10:00", other_day))

    def test_contains(self):
        window = _slot("09:00", "17:00")
        assert window.contains(_slot("09:00", "10:00"))
        assert window.contains(_slot("16:00", "17:00"))
        assert not window.contains(_slot("16:30", "17:30"))

    def test_from_minutes(self):
        assert _slot("10:00", "11:30") == TimeSlot.from_minutes(DAY, 600, 690)
