"""Unit tests for date ranges and blocked-period arithmetic."""

from datetime import date, timedelta

import pytest

from ers.domain.exceptions import ValidationError
from ers.domain.model.booking import Booking
from ers.domain.model.date_range import (
    BufferPolicy,
    DateRange,
    calculate_blocked_period,
    ranges_overlap,
)


class TestRangesOverlap:

    def test_touching_on_a_single_day_overlaps(self):
        assert ranges_overlap(date(2025, 6, 1), date(2025, 6, 5), date(2025, 6, 5), date(2025, 6, 9))

    def test_adjacent_days_do_not_overlap(self):
        assert not ranges_overlap(
            date(2025, 6, 1), date(2025, 6, 4), date(2025, 6, 5), date(2025, 6, 9)
        )

    def test_containment_overlaps(self):
        assert ranges_overlap(date(2025, 6, 1), date(2025, 6, 30), date(2025, 6, 10), date(2025, 6, 11))


class TestBookingOverlaps:

    def test_blocked_period_is_inclusive_on_both_ends(self):
        booking = Booking(None, "a1", 1, 2, date(2025, 6, 5), date(2025, 6, 15))
        assert booking.overlaps(date(2025, 6, 15), date(2025, 6, 20))
        assert booking.overlaps(date(2025, 6, 1), date(2025, 6, 5))
        assert not booking.overlaps(date(2025, 6, 16), date(2025, 6, 20))


class TestDateRange:

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError):
            DateRange(date(2025, 6, 3), date(2025, 6, 1))


class TestCalculateBlockedPeriod:

    def test_default_buffers(self):
        period = calculate_blocked_period(date(2025, 6, 10), date(2025, 6, 12))
        assert period.start == date(2025, 6, 5)
        assert period.end == date(2025, 6, 15)

    def test_refurb_days_extend_prep_side_only(self):
        period = calculate_blocked_period(date(2025, 6, 10), date(2025, 6, 12), refurb_days=4)
        assert period.start == date(2025, 6, 1)
        assert period.end == date(2025, 6, 15)

    @pytest.mark.parametrize("length", [0, 1, 6])
    @pytest.mark.parametrize("refurb", [0, 2, 10])
    def test_blocked_length(self, length, refurb):
        start = date(2025, 7, 1)
        end = start + timedelta(days=length)
        period = calculate_blocked_period(start, end, refurb)
        assert (period.end - period.start).days == length + 5 + refurb + 3

    def test_custom_policy(self):
        policy = BufferPolicy(prep_buffer_days=1, return_buffer_days=0)
        period = calculate_blocked_period(date(2025, 6, 10), date(2025, 6, 12), policy=policy)
        assert period == DateRange(date(2025, 6, 9), date(2025, 6, 12))

    def test_negative_refurb_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            calculate_blocked_period(date(2025, 6, 10), date(2025, 6, 12), refurb_days=-1)

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError, match="on or after start"):
            calculate_blocked_period(date(2025, 6, 12), date(2025, 6, 10))

    def test_negative_policy_rejected(self):
        with pytest.raises(ValidationError):
            BufferPolicy(prep_buffer_days=-1)
