"""Tests for the read-only availability views and the quantity change."""

from datetime import date, datetime, timezone

import pytest

from ers.application.availability_queries import (
    AssetAvailabilitySummaryHandler,
    AssetCalendarHandler,
    CheckAvailabilityHandler,
)
from ers.application.set_asset_quantity import SetAssetQuantityHandler
from ers.domain.exceptions import EntityNotFoundError, ValidationError
from ers.domain.model.booking import Booking
from ers.domain.model.date_range import BufferPolicy
from tests.fakes import FakeUnitOfWork, fixed_clock, make_asset


def _uow(total_quantity=5, **asset_kwargs):
    return FakeUnitOfWork(
        assets=[make_asset("a1", total_quantity=total_quantity, name="LED Wall", **asset_kwargs)],
        bookings=[
            Booking(None, "a1", 1, 2, date(2025, 6, 5), date(2025, 6, 15)),
            Booking(None, "a1", 2, 3, date(2025, 6, 20), date(2025, 6, 25)),
        ],
    )


class TestCheckAvailability:

    def test_counts_bookings_overlapping_blocked_period(self):
        line = CheckAvailabilityHandler(_uow()).handle("a1", date(2025, 6, 10), date(2025, 6, 12))

        assert (line.booked_quantity, line.available_quantity) == (2, 3)
        assert (line.blocked_from, line.blocked_until) == ("2025-06-05", "2025-06-15")
        assert line.next_available_date == "2025-06-16"

    def test_buffers_reach_neighbouring_booking(self):
        # blocked 2025-06-12..2025-06-21 touches both bookings
        line = CheckAvailabilityHandler(_uow()).handle("a1", date(2025, 6, 17), date(2025, 6, 18))
        assert line.booked_quantity == 5
        assert line.available_quantity == 0

    def test_custom_policy_and_refurb_days(self):
        line = CheckAvailabilityHandler(_uow(refurb_days_estimate=2), BufferPolicy(1, 1)).handle(
            "a1", date(2025, 7, 10), date(2025, 7, 11)
        )
        assert (line.blocked_from, line.blocked_until) == ("2025-07-07", "2025-07-12")
        assert line.available_quantity == 5
        assert line.next_available_date is None

    def test_unknown_asset(self):
        with pytest.raises(EntityNotFoundError):
            CheckAvailabilityHandler(_uow()).handle("nope", date(2025, 6, 10), date(2025, 6, 12))


class TestAvailabilitySummary:

    def test_fully_booked_in_default_window(self):
        summary = AssetAvailabilitySummaryHandler(_uow(total_quantity=3), clock=fixed_clock()).handle("a1")

        assert not summary.is_available
        assert summary.next_available_date == "2025-06-16"
        assert summary.message == "Fully booked. Available from Jun 16, 2025"

    def test_partially_booked(self):
        summary = AssetAvailabilitySummaryHandler(_uow(total_quantity=8), clock=fixed_clock()).handle("a1")
        assert summary.message == "3 of 8 available"

    def test_explicit_free_window(self):
        summary = AssetAvailabilitySummaryHandler(_uow(), clock=fixed_clock()).handle(
            "a1", date(2025, 7, 1), date(2025, 7, 5)
        )
        assert summary.message == "All 5 units available"

    def test_inverted_window_rejected(self):
        with pytest.raises(ValidationError):
            AssetAvailabilitySummaryHandler(_uow(), clock=fixed_clock()).handle(
                "a1", date(2025, 7, 5), date(2025, 7, 1)
            )


class TestAssetCalendar:

    def test_all_bookings_earliest_first(self):
        lines = AssetCalendarHandler(_uow()).handle("a1")
        assert [(line.order_id, line.quantity) for line in lines] == [(1, 2), (2, 3)]

    def test_window_filter(self):
        lines = AssetCalendarHandler(_uow()).handle("a1", from_date=date(2025, 6, 16))
        assert [line.order_id for line in lines] == [2]


class TestSetAssetQuantity:

    def test_cannot_go_below_peak(self):
        uow = _uow()
        with pytest.raises(ValidationError, match="3 are already booked"):
            SetAssetQuantityHandler(uow, clock=fixed_clock()).handle("a1", 2)
        assert uow.assets.get_by_id("a1").total_quantity == 5

    def test_peak_is_allowed(self):
        asset = SetAssetQuantityHandler(_uow(), clock=fixed_clock()).handle("a1", 3)
        assert asset.total_quantity == 3

    def test_past_bookings_ignored(self):
        later = fixed_clock(datetime(2025, 6, 26, tzinfo=timezone.utc))
        asset = SetAssetQuantityHandler(_uow(), clock=later).handle("a1", 1)
        assert asset.total_quantity == 1

    def test_zero_rejected(self):
        with pytest.raises(ValidationError, match="at least 1"):
            SetAssetQuantityHandler(_uow(), clock=fixed_clock()).handle("a1", 0)
