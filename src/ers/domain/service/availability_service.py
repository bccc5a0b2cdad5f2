"""Domain service: Asset Availability.

Answers "can N units of this asset be reserved for these dates?" and
writes the booking ledger when an order is confirmed.

Availability is never stored; it is recomputed from the bookings that
overlap the requested blocked period:

    available = max(0, total_quantity - sum(overlapping booking quantities))

Every check uses the *blocked* period (event dates widened by the prep,
refurbishment and return buffers), not the raw event dates.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta

from ers.domain.exceptions import (
    AvailabilityError,
    EntityNotFoundError,
    Shortfall,
    ValidationError,
)
from ers.domain.model.booking import Booking
from ers.domain.model.date_range import (
    DEFAULT_BUFFER_POLICY,
    BufferPolicy,
    DateRange,
    calculate_blocked_period,
)
from ers.domain.model.order import Order
from ers.domain.repository.asset_repository import AssetRepository
from ers.domain.repository.booking_repository import BookingRepository

logger = logging.getLogger(__name__)

SUMMARY_WINDOW_DAYS = 30


@dataclass(frozen=True)
class ItemRequest:
    """One asset/quantity pair to check."""

    asset_id: str
    quantity: int


@dataclass(frozen=True)
class AssetAvailability:
    total_quantity: int
    available_quantity: int
    booked_quantity: int
    bookings: tuple[Booking, ...]

    @property
    def next_available_date(self) -> date | None:
        """The day after the latest overlapping booking ends."""
        if not self.bookings:
            return None
        return max(b.blocked_until for b in self.bookings) + timedelta(days=1)


@dataclass(frozen=True)
class AvailabilityReport:
    all_available: bool
    unavailable_items: tuple[Shortfall, ...]


@dataclass(frozen=True)
class AvailabilitySummary:
    is_available: bool
    available_quantity: int
    total_quantity: int
    next_available_date: date | None
    message: str


class AvailabilityService:

    def __init__(
        self,
        asset_repo: AssetRepository,
        booking_repo: BookingRepository,
        policy: BufferPolicy = DEFAULT_BUFFER_POLICY,
    ) -> None:
        self._asset_repo = asset_repo
        self._booking_repo = booking_repo
        self._policy = policy

    def blocked_period(self, event_start: date, event_end: date, refurb_days: int = 0) -> DateRange:
        return calculate_blocked_period(event_start, event_end, refurb_days, self._policy)

    # --- Queries --------------------------------------------------------------

    def get_asset_availability(self, asset_id: str, start: date, end: date) -> AssetAvailability:
        asset = self._asset_repo.get_by_id(asset_id)
        if asset is None:
            raise EntityNotFoundError(f"Asset '{asset_id}' not found")

        overlapping = self._booking_repo.list_overlapping(asset_id, start, end)
        booked = sum(b.quantity for b in overlapping)
        return AssetAvailability(
            total_quantity=asset.total_quantity,
            available_quantity=max(0, asset.total_quantity - booked),
            booked_quantity=booked,
            bookings=tuple(overlapping),
        )

    def check_multiple_assets_availability(
        self,
        items: list[ItemRequest],
        event_start: date,
        event_end: date,
    ) -> AvailabilityReport:
        """Check every line against its asset's own blocked period.

        Lines for the same asset are added up first so an order cannot
        pass by splitting one request over several lines.
        """
        requested: dict[str, int] = defaultdict(int)
        for item in items:
            if item.quantity <= 0:
                raise ValidationError("Quantity must be positive")
            requested[item.asset_id] += item.quantity

        unavailable: list[Shortfall] = []
        for asset_id, quantity in requested.items():
            asset = self._asset_repo.get_by_id(asset_id)
            if asset is None:
                logger.warning("Availability check for unknown asset %s", asset_id)
                unavailable.append(
                    Shortfall(asset_id=asset_id, asset_name="Unknown", requested=quantity, available=0)
                )
                continue

            period = self.blocked_period(event_start, event_end, asset.refurb_days)
            availability = self.get_asset_availability(asset_id, period.start, period.end)
            logger.debug(
                "Asset %s (%s): blocked %s, total=%d booked=%d available=%d requested=%d",
                asset.id,
                asset.name,
                period,
                availability.total_quantity,
                availability.booked_quantity,
                availability.available_quantity,
                quantity,
            )
            if availability.available_quantity < quantity:
                unavailable.append(
                    Shortfall(
                        asset_id=asset_id,
                        asset_name=asset.name,
                        requested=quantity,
                        available=availability.available_quantity,
                        next_available_date=availability.next_available_date,
                    )
                )

        if unavailable:
            logger.warning(
                "Availability shortfall for %s..%s: %s",
                event_start,
                event_end,
                "; ".join(s.describe() for s in unavailable),
            )
        return AvailabilityReport(
            all_available=not unavailable, unavailable_items=tuple(unavailable)
        )

    def get_asset_bookings(
        self,
        asset_id: str,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> list[Booking]:
        """Bookings of an asset for a calendar view, earliest first."""
        bookings = [
            b
            for b in self._booking_repo.list_for_asset(asset_id)
            if (from_date is None or b.blocked_until >= from_date)
            and (to_date is None or b.blocked_from <= to_date)
        ]
        return sorted(bookings, key=lambda b: (b.blocked_from, b.id or 0))

    def get_availability_summary(
        self,
        asset_id: str,
        today: date,
        start: date | None = None,
        end: date | None = None,
    ) -> AvailabilitySummary:
        """Short availability line for catalog display.

        Without dates the window is the next thirty days.
        """
        start = start or today
        end = end or start + timedelta(days=SUMMARY_WINDOW_DAYS)
        availability = self.get_asset_availability(asset_id, start, end)
        total = availability.total_quantity
        available = availability.available_quantity

        next_date: date | None = None
        if available == 0:
            upcoming = [
                b for b in self._booking_repo.list_for_asset(asset_id) if b.blocked_from >= start
            ]
            if upcoming:
                next_date = min(b.blocked_until for b in upcoming) + timedelta(days=1)
                message = f"Fully booked. Available from {next_date.strftime('%b %d, %Y')}"
            else:
                message = "Currently unavailable"
        elif available < total:
            message = f"{available} of {total} available"
        else:
            message = f"All {total} units available"

        return AvailabilitySummary(
            is_available=available > 0,
            available_quantity=available,
            total_quantity=total,
            next_available_date=next_date,
            message=message,
        )

    def max_concurrent_booked(self, asset_id: str, from_date: date) -> int:
        """Peak quantity booked on any single day from ``from_date`` on.

        Sweeps booking start/end events in date order; a booking counts on
        both its first and its last blocked day.
        """
        deltas: dict[date, int] = defaultdict(int)
        for booking in self._booking_repo.list_for_asset(asset_id):
            if booking.blocked_until < from_date:
                continue
            deltas[max(booking.blocked_from, from_date)] += booking.quantity
            deltas[booking.blocked_until + timedelta(days=1)] -= booking.quantity

        peak = current = 0
        for day in sorted(deltas):
            current += deltas[day]
            peak = max(peak, current)
        return peak

    # --- Ledger writes --------------------------------------------------------

    def create_booking(
        self,
        asset_id: str,
        order_id: int,
        quantity: int,
        event_start: date,
        event_end: date,
        refurb_days: int = 0,
    ) -> Booking:
        """Insert one booking after re-checking that the quantity still fits.

        The re-check guards against a booking committed between an earlier
        availability check and this call.
        """
        if quantity <= 0:
            raise ValidationError("Booking quantity must be positive")

        period = self.blocked_period(event_start, event_end, refurb_days)
        availability = self.get_asset_availability(asset_id, period.start, period.end)
        if availability.available_quantity < quantity:
            asset = self._asset_repo.get_by_id(asset_id)
            raise AvailabilityError(
                [
                    Shortfall(
                        asset_id=asset_id,
                        asset_name=asset.name if asset else asset_id,
                        requested=quantity,
                        available=availability.available_quantity,
                        next_available_date=availability.next_available_date,
                    )
                ]
            )

        booking = Booking(
            id=None,
            asset_id=asset_id,
            order_id=order_id,
            quantity=quantity,
            blocked_from=period.start,
            blocked_until=period.end,
        )
        self._booking_repo.add(booking)
        return booking

    def create_bookings_for_order(self, order: Order) -> list[Booking]:
        """Book every line item of the order.

        Uses a two-phase approach:
          Phase 1, validate: every asset must cover the order's demand
                   over its blocked period.  Reports all shortfalls at
                   once, before any insert.
          Phase 2, insert: ``create_booking`` per item, which re-checks.

        Refurbishment days come from the item snapshot, not the live asset.
        Callers run this inside a unit of work so a failure in phase 2
        leaves no partial bookings behind.
        """
        if order.id is None:
            raise ValidationError("Order must be saved before it can be booked")
        if order.event_start is None or order.event_end is None:
            raise ValidationError("Order must have event dates")

        # Phase 1: aggregate per asset and validate
        demand: dict[str, int] = defaultdict(int)
        refurb: dict[str, int] = {}
        names: dict[str, str] = {}
        for item in order.items:
            demand[item.asset_id] += item.quantity.value
            refurb[item.asset_id] = max(refurb.get(item.asset_id, 0), item.refurb_days)
            names[item.asset_id] = item.asset_name

        shortfalls: list[Shortfall] = []
        for asset_id, quantity in demand.items():
            period = self.blocked_period(order.event_start, order.event_end, refurb[asset_id])
            availability = self.get_asset_availability(asset_id, period.start, period.end)
            if availability.available_quantity < quantity:
                shortfalls.append(
                    Shortfall(
                        asset_id=asset_id,
                        asset_name=names[asset_id],
                        requested=quantity,
                        available=availability.available_quantity,
                        next_available_date=availability.next_available_date,
                    )
                )
        if shortfalls:
            raise AvailabilityError(shortfalls)

        # Phase 2: insert
        created = [
            self.create_booking(
                item.asset_id,
                order.id,
                item.quantity.value,
                order.event_start,
                order.event_end,
                item.refurb_days,
            )
            for item in order.items
        ]
        logger.info("Created %d booking(s) for order %s", len(created), order.display_id)
        return created

    def release_bookings_for_order(self, order_id: int) -> int:
        """Delete every booking of an order.  Releasing nothing is fine."""
        removed = self._booking_repo.delete_for_order(order_id)
        logger.info("Released %d booking(s) for order #%s", removed, order_id)
        return removed
