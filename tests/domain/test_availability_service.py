"""Unit tests for the AvailabilityService domain service."""

from datetime import date

import pytest

from ers.domain.exceptions import AvailabilityError, EntityNotFoundError, ValidationError
from ers.domain.model.asset import AssetCondition
from ers.domain.model.booking import Booking
from ers.domain.model.date_range import BufferPolicy
from ers.domain.service.availability_service import AvailabilityService, ItemRequest
from tests.fakes import FakeAssetRepository, FakeBookingRepository, make_asset, make_order


def _booking(asset_id: str, qty: int, start: date, end: date, order_id: int = 99) -> Booking:
    return Booking(
        id=None, asset_id=asset_id, order_id=order_id, quantity=qty,
        blocked_from=start, blocked_until=end,
    )


def _service(assets, bookings=None, policy=None):
    asset_repo = FakeAssetRepository(assets)
    booking_repo = FakeBookingRepository(bookings)
    svc = AvailabilityService(asset_repo, booking_repo, policy or BufferPolicy())
    return svc, booking_repo


class TestGetAssetAvailability:

    def test_sums_overlapping_bookings(self):
        svc, _ = _service(
            [make_asset("a1", total_quantity=5)],
            [
                _booking("a1", 2, date(2025, 6, 1), date(2025, 6, 10)),
                _booking("a1", 1, date(2025, 6, 10), date(2025, 6, 20)),
                _booking("a1", 4, date(2025, 7, 1), date(2025, 7, 5)),
            ],
        )
        result = svc.get_asset_availability("a1", date(2025, 6, 5), date(2025, 6, 15))
        assert result.booked_quantity == 3
        assert result.available_quantity == 2
        assert result.next_available_date == date(2025, 6, 21)

    def test_never_negative(self):
        svc, _ = _service(
            [make_asset("a1", total_quantity=2)],
            [_booking("a1", 3, date(2025, 6, 1), date(2025, 6, 10))],
        )
        assert svc.get_asset_availability("a1", date(2025, 6, 1), date(2025, 6, 1)).available_quantity == 0

    def test_unknown_asset(self):
        svc, _ = _service([])
        with pytest.raises(EntityNotFoundError):
            svc.get_asset_availability("ghost", date(2025, 6, 1), date(2025, 6, 2))


class TestCheckMultipleAssets:

    def test_shortfall_reported_with_numbers(self):
        # 3 of 5 units are booked across the blocked period 06-05..06-15
        svc, _ = _service(
            [make_asset("a1", total_quantity=5, name="Stage Deck")],
            [_booking("a1", 3, date(2025, 6, 4), date(2025, 6, 6))],
        )
        report = svc.check_multiple_assets_availability(
            [ItemRequest("a1", 3)], date(2025, 6, 10), date(2025, 6, 12)
        )
        assert not report.all_available
        (shortfall,) = report.unavailable_items
        assert (shortfall.asset_name, shortfall.requested, shortfall.available) == ("Stage Deck", 3, 2)

    def test_booking_outside_blocked_period_ignored(self):
        svc, _ = _service(
            [make_asset("a1", total_quantity=5)],
            [_booking("a1", 5, date(2025, 6, 16), date(2025, 6, 20))],
        )
        report = svc.check_multiple_assets_availability(
            [ItemRequest("a1", 5)], date(2025, 6, 10), date(2025, 6, 12)
        )
        assert report.all_available

    def test_duplicate_lines_aggregated(self):
        svc, _ = _service([make_asset("a1", total_quantity=4)])
        report = svc.check_multiple_assets_availability(
            [ItemRequest("a1", 3), ItemRequest("a1", 2)], date(2025, 6, 10), date(2025, 6, 12)
        )
        assert not report.all_available
        assert report.unavailable_items[0].requested == 5

    def test_refurb_days_widen_the_check(self):
        # booking ends 06-02; without refurb the period starts 06-05
        asset = make_asset("a1", total_quantity=1, condition=AssetCondition.RED, refurb_days_estimate=4)
        svc, _ = _service([asset], [_booking("a1", 1, date(2025, 5, 30), date(2025, 6, 2))])
        report = svc.check_multiple_assets_availability(
            [ItemRequest("a1", 1)], date(2025, 6, 10), date(2025, 6, 12)
        )
        assert not report.all_available

    def test_unknown_asset_is_a_shortfall(self):
        svc, _ = _service([])
        report = svc.check_multiple_assets_availability(
            [ItemRequest("ghost", 1)], date(2025, 6, 10), date(2025, 6, 12)
        )
        assert report.unavailable_items[0].available == 0


class TestCreateBookings:

    def test_blocked_period_stored_on_booking(self):
        asset = make_asset("a1", total_quantity=5)
        svc, repo = _service([asset])
        booking = svc.create_booking("a1", 1, 2, date(2025, 6, 10), date(2025, 6, 12))
        assert (booking.blocked_from, booking.blocked_until) == (date(2025, 6, 5), date(2025, 6, 15))
        assert booking.id is not None

    def test_create_booking_rechecks(self):
        svc, _ = _service(
            [make_asset("a1", total_quantity=2)],
            [_booking("a1", 2, date(2025, 6, 1), date(2025, 6, 30))],
        )
        with pytest.raises(AvailabilityError):
            svc.create_booking("a1", 1, 1, date(2025, 6, 10), date(2025, 6, 12))

    def test_zero_quantity_rejected(self):
        svc, _ = _service([make_asset("a1")])
        with pytest.raises(ValidationError):
            svc.create_booking("a1", 1, 0, date(2025, 6, 10), date(2025, 6, 12))

    def test_one_booking_per_item(self):
        a = make_asset("a1", total_quantity=5)
        b = make_asset("b1", total_quantity=5)
        svc, repo = _service([a, b])
        order = make_order([(a, 2), (b, 3)])

        created = svc.create_bookings_for_order(order)

        assert len(created) == 2
        assert sum(bk.quantity for bk in repo.list_for_order(1)) == order.total_quantity

    def test_all_or_nothing_validation(self):
        a = make_asset("a1", total_quantity=5)
        b = make_asset("b1", total_quantity=1, name="Bar Counter")
        svc, repo = _service([a, b])
        order = make_order([(a, 2), (b, 3)])

        with pytest.raises(AvailabilityError, match="Bar Counter: requested 3, available 1"):
            svc.create_bookings_for_order(order)
        assert repo.all() == []

    def test_unsaved_order_rejected(self):
        a = make_asset("a1")
        svc, _ = _service([a])
        with pytest.raises(ValidationError, match="must be saved"):
            svc.create_bookings_for_order(make_order([(a, 1)], order_id=None))

    def test_no_overbooking_across_orders(self):
        a = make_asset("a1", total_quantity=3)
        svc, repo = _service([a])
        svc.create_bookings_for_order(make_order([(a, 2)], order_id=1))
        with pytest.raises(AvailabilityError):
            svc.create_bookings_for_order(make_order([(a, 2)], order_id=2))
        svc.create_bookings_for_order(make_order([(a, 1)], order_id=3))

        booked = svc.get_asset_availability("a1", date(2025, 6, 5), date(2025, 6, 15)).booked_quantity
        assert booked == 3


class TestReleaseBookings:

    def test_release_is_idempotent(self):
        a = make_asset("a1")
        svc, repo = _service([a])
        svc.create_bookings_for_order(make_order([(a, 2)]))

        assert svc.release_bookings_for_order(1) == 1
        assert svc.release_bookings_for_order(1) == 0
        assert repo.list_for_order(1) == []


class TestSummaryAndPeak:

    def test_all_units_available(self):
        svc, _ = _service([make_asset("a1", total_quantity=4)])
        summary = svc.get_availability_summary("a1", today=date(2025, 6, 1))
        assert summary.message == "All 4 units available"

    def test_partially_booked(self):
        svc, _ = _service(
            [make_asset("a1", total_quantity=4)],
            [_booking("a1", 1, date(2025, 6, 3), date(2025, 6, 8))],
        )
        assert svc.get_availability_summary("a1", today=date(2025, 6, 1)).message == "3 of 4 available"

    def test_fully_booked_gives_next_date(self):
        svc, _ = _service(
            [make_asset("a1", total_quantity=2)],
            [_booking("a1", 2, date(2025, 6, 3), date(2025, 6, 8))],
        )
        summary = svc.get_availability_summary("a1", today=date(2025, 6, 1))
        assert not summary.is_available
        assert summary.next_available_date == date(2025, 6, 9)
        assert summary.message == "Fully booked. Available from Jun 09, 2025"

    def test_peak_counts_only_concurrent_days(self):
        svc, _ = _service(
            [make_asset("a1", total_quantity=5)],
            [
                _booking("a1", 2, date(2025, 6, 1), date(2025, 6, 5)),
                _booking("a1", 2, date(2025, 6, 6), date(2025, 6, 9)),
                _booking("a1", 1, date(2025, 6, 5), date(2025, 6, 6)),
            ],
        )
        assert svc.max_concurrent_booked("a1", date(2025, 6, 1)) == 3

    def test_peak_ignores_past_bookings(self):
        svc, _ = _service(
            [make_asset("a1", total_quantity=5)],
            [_booking("a1", 4, date(2025, 5, 1), date(2025, 5, 9))],
        )
        assert svc.max_concurrent_booked("a1", date(2025, 6, 1)) == 0
