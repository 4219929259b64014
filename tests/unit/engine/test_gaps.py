"""Tests for gap detection.

Pure tests over in-memory windows and bookings, plus the DB-backed
entry point on an in-memory SQLite session.
"""

import datetime
import random

import pytest

from app.engine.gaps import detect_gaps, find_gaps, find_gaps_for_day, occupied_minutes, slot_is_free
from app.models.booking import AvailabilityWindow, Booking, BookingStatus
from app.schemas.interval import TimeSlot, time_to_minutes

DAY = datetime.date(2026, 10, 19)


# ======================================================================
# Helpers
# ======================================================================


def _t(value: str) -> datetime.time:
    hour, minute = value.split(":")
    return datetime.time(int(hour), int(minute))


def _window(start: str, end: str, date: datetime.date = DAY) -> AvailabilityWindow:
    return AvailabilityWindow(coach_id=1, date=date, start_time=_t(start), end_time=_t(end))


def _booking(start: str, end: str, booking_id: int = 0, date: datetime.date = DAY) -> Booking:
    return Booking(id=booking_id, coach_id=1, client_id=10 + booking_id, date=date, start_time=_t(start),
                   end_time=_t(end))


def _as_pairs(gaps) -> list[tuple[str, str, int]]:
    return [(g.start_time.strftime("%H:%M"), g.end_time.strftime("%H:%M"), g.duration_minutes) for g in gaps]


# ======================================================================
# Walk
# ======================================================================


class TestFindGaps:
    def test_reference_day(self):
        """09-17 with 09-10, 11-12 and 15-17 booked leaves 10-11 and 12-15."""
        bookings = [_booking("09:00", "10:00", 1), _booking("11:00", "12:00", 2), _booking("15:00", "17:00", 3)]
        gaps = find_gaps_for_day(DAY, [_window("09:00", "17:00")], bookings, 15)
        assert _as_pairs(gaps) == [("10:00", "11:00", 60), ("12:00", "15:00", 180)]

    def test_no_window_means_no_gaps(self):
        assert find_gaps_for_day(DAY, [], [_booking("09:00", "10:00")], 15) == []

    def test_no_bookings_is_one_gap_spanning_window(self):
        gaps = find_gaps_for_day(DAY, [_window("08:00", "12:00")], [], 15)
        assert _as_pairs(gaps) == [("08:00", "12:00", 240)]

    def test_fully_covered_window(self):
        bookings = [_booking("09:00", "13:00", 1), _booking("13:00", "17:00", 2)]
        assert find_gaps_for_day(DAY, [_window("09:00", "17:00")], bookings, 15) == []

    def test_overlapping_bookings_collapse(self):
        bookings = [_booking("09:30", "11:00", 1), _booking("10:00", "12:00", 2), _booking("10:15", "10:45", 3)]
        gaps = find_gaps_for_day(DAY, [_window("09:00", "17:00")], bookings, 15)
        assert _as_pairs(gaps) == [("09:00", "09:30", 30), ("12:00", "17:00", 300)]

    def test_back_to_back_bookings_leave_no_gap(self):
        bookings = [_booking("09:00", "10:00", 1), _booking("10:00", "11:00", 2)]
        gaps = find_gaps_for_day(DAY, [_window("09:00", "12:00")], bookings, 15)
        assert _as_pairs(gaps) == [("11:00", "12:00", 60)]

    def test_sub_threshold_gap_dropped(self):
        bookings = [_booking("09:00", "10:00", 1), _booking("10:10", "12:00", 2)]
        gaps = find_gaps_for_day(DAY, [_window("09:00", "12:00")], bookings, 15)
        assert gaps == []

    def test_gap_exactly_at_threshold_kept(self):
        bookings = [_booking("09:00", "10:00", 1), _booking("10:15", "12:00", 2)]
        gaps = find_gaps_for_day(DAY, [_window("09:00", "12:00")], bookings, 15)
        assert _as_pairs(gaps) == [("10:00", "10:15", 15)]

    def test_bookings_outside_window_are_clipped(self):
        bookings = [_booking("07:00", "09:30", 1), _booking("16:30", "18:00", 2)]
        gaps = find_gaps_for_day(DAY, [_window("09:00", "17:00")], bookings, 15)
        assert _as_pairs(gaps) == [("09:30", "16:30", 420)]

    def test_multiple_windows(self):
        windows = [_window("14:00", "18:00"), _window("08:00", "12:00")]
        bookings = [_booking("08:00", "10:00", 1), _booking("14:00", "15:00", 2)]
        gaps = find_gaps_for_day(DAY, windows, bookings, 15)
        assert _as_pairs(gaps) == [("10:00", "12:00", 120), ("15:00", "18:00", 180)]

    def test_other_dates_ignored(self):
        other = DAY + datetime.timedelta(days=1)
        gaps = find_gaps_for_day(DAY, [_window("09:00", "10:00")], [_booking("09:00", "10:00", 1, other)], 15)
        assert _as_pairs(gaps) == [("09:00", "10:00", 60)]

    def test_empty_window_bounds(self):
        assert find_gaps(600, 600, DAY, [], 15) == []


class TestGapProperties:
    @staticmethod
    def _random_day(seed: int) -> list[TimeSlot]:
        """Non-overlapping bookings inside 08:00-20:00 on a 5-minute grid."""
        rng = random.Random(seed)
        slots = []
        cursor = 480
        while True:
            cursor += rng.choice([0, 5, 10, 20, 45, 90])
            length = rng.choice([30, 45, 60, 90])
            if cursor + length > 1200:
                break
            slots.append(TimeSlot.from_minutes(DAY, cursor, cursor + length))
            cursor += length
        return slots

    @pytest.mark.parametrize("seed", range(12))
    def test_durations_are_conserved(self, seed):
        """booked + emitted gaps + sub-threshold remainders == window."""
        slots = self._random_day(seed)
        booked = sum(s.duration_minutes for s in slots)
        all_free = find_gaps(480, 1200, DAY, slots, min_gap_minutes=1)
        kept = find_gaps(480, 1200, DAY, slots, min_gap_minutes=15)

        free_total = sum(g.duration_minutes for g in all_free)
        kept_total = sum(g.duration_minutes for g in kept)
        remainder = sum(g.duration_minutes for g in all_free if g.duration_minutes < 15)

        assert booked + free_total == 720
        assert booked + kept_total + remainder == 720

    @pytest.mark.parametrize("seed", range(5))
    def test_detection_is_idempotent(self, seed):
        slots = self._random_day(seed)
        assert find_gaps(480, 1200, DAY, slots, 15) == find_gaps(480, 1200, DAY, slots, 15)

    @pytest.mark.parametrize("seed", range(5))
    def test_gaps_overlap_no_booking(self, seed):
        slots = self._random_day(seed)
        for gap in find_gaps(480, 1200, DAY, slots, 1):
            assert not any(gap.as_slot().overlaps(s) for s in slots)


# ======================================================================
# Slot re-validation
# ======================================================================


class TestOccupiedMinutes:
    def _slots(self, *pairs):
        return [TimeSlot(date=DAY, start_time=_t(s), end_time=_t(e)) for s, e in pairs]

    def test_duplicates_count_once(self):
        slots = self._slots(("09:00", "10:00"), ("09:00", "10:00"))
        assert occupied_minutes(slots, 9 * 60, 10 * 60) == 60

    def test_nested_and_chained(self):
        slots = self._slots(("09:00", "12:00"), ("10:00", "11:00"), ("11:30", "13:00"))
        assert occupied_minutes(slots, 9 * 60, 17 * 60) == 240

    def test_clipped_to_window(self):
        slots = self._slots(("08:00", "09:30"), ("16:30", "18:00"))
        assert occupied_minutes(slots, 9 * 60, 17 * 60) == 60


class TestSlotIsFree:
    def test_free_slot_inside_window(self):
        slot = TimeSlot(date=DAY, start_time=_t("10:00"), end_time=_t("11:00"))
        assert slot_is_free([_window("09:00", "17:00")], [_booking("09:00", "10:00", 1)], slot)

    def test_outside_every_window(self):
        slot = TimeSlot(date=DAY, start_time=_t("16:30"), end_time=_t("17:30"))
        assert not slot_is_free([_window("09:00", "17:00")], [], slot)

    def test_overlapping_booking(self):
        slot = TimeSlot(date=DAY, start_time=_t("10:00"), end_time=_t("11:00"))
        assert not slot_is_free([_window("09:00", "17:00")], [_booking("10:30", "11:30", 1)], slot)

    def test_moved_booking_does_not_block_itself(self):
        slot = TimeSlot(date=DAY, start_time=_t("10:00"), end_time=_t("11:00"))
        bookings = [_booking("10:30", "11:30", 7)]
        assert slot_is_free([_window("09:00", "17:00")], bookings, slot, exclude_booking_id=7)


# ======================================================================
# DB entry point
# ======================================================================


class TestDetectGaps:
    def test_reads_snapshot(self, session, add_window, add_booking):
        add_window(1, DAY, "09:00", "17:00")
        add_booking(1, 10, DAY, "09:00", "10:00")
        add_booking(1, 11, DAY, "11:00", "12:00")
        add_booking(1, 12, DAY, "15:00", "17:00")
        gaps = detect_gaps(session, 1, DAY, 15)
        assert [(time_to_minutes(g.start_time), g.duration_minutes) for g in gaps] == [(600, 60), (720, 180)]

    def test_cancelled_bookings_free_their_time(self, session, add_window, add_booking):
        add_window(1, DAY, "09:00", "12:00")
        add_booking(1, 10, DAY, "09:00", "12:00", status=BookingStatus.cancelled)
        gaps = detect_gaps(session, 1, DAY)
        assert len(gaps) == 1 and gaps[0].duration_minutes == 180

    def test_no_window(self, session, add_booking):
        add_booking(1, 10, DAY, "09:00", "10:00")
        assert detect_gaps(session, 1, DAY) == []

    def test_other_coach_ignored(self, session, add_window, add_booking):
        add_window(1, DAY, "09:00", "10:00")
        add_booking(2, 10, DAY, "09:00", "10:00")
        assert len(detect_gaps(session, 1, DAY)) == 1
