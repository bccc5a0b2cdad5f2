"""Application services: asset availability queries.

Read-only views over the booking ledger.  All of them work on blocked
periods, so the numbers shown match what submission and confirmation
will check.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ers.application.clock import Clock, utc_now
from ers.domain.exceptions import EntityNotFoundError, ValidationError
from ers.domain.model.date_range import DEFAULT_BUFFER_POLICY, BufferPolicy
from ers.domain.repository.unit_of_work import UnitOfWork
from ers.domain.service.availability_service import AvailabilityService


@dataclass(frozen=True)
class AvailabilityLineDTO:
    asset_id: str
    asset_name: str
    total_quantity: int
    booked_quantity: int
    available_quantity: int
    blocked_from: str
    blocked_until: str
    next_available_date: str | None


@dataclass(frozen=True)
class AvailabilitySummaryDTO:
    asset_id: str
    asset_name: str
    is_available: bool
    available_quantity: int
    total_quantity: int
    next_available_date: str | None
    message: str


@dataclass(frozen=True)
class BookingLineDTO:
    order_id: int
    quantity: int
    blocked_from: str
    blocked_until: str


class CheckAvailabilityHandler:
    """Availability of one asset for an event, buffers included."""

    def __init__(self, uow: UnitOfWork, policy: BufferPolicy = DEFAULT_BUFFER_POLICY) -> None:
        self._uow = uow
        self._policy = policy

    def handle(self, asset_id: str, event_start: date, event_end: date) -> AvailabilityLineDTO:
        with self._uow as uow:
            asset = uow.assets.get_by_id(asset_id)
            if asset is None or asset.is_deleted:
                raise EntityNotFoundError(f"Asset '{asset_id}' not found")
            svc = AvailabilityService(uow.assets, uow.bookings, self._policy)
            period = svc.blocked_period(event_start, event_end, asset.refurb_days)
            availability = svc.get_asset_availability(asset_id, period.start, period.end)

        next_date = availability.next_available_date
        return AvailabilityLineDTO(
            asset_id=asset.id,
            asset_name=asset.name,
            total_quantity=availability.total_quantity,
            booked_quantity=availability.booked_quantity,
            available_quantity=availability.available_quantity,
            blocked_from=period.start.isoformat(),
            blocked_until=period.end.isoformat(),
            next_available_date=next_date.isoformat() if next_date else None,
        )


class AssetAvailabilitySummaryHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        policy: BufferPolicy = DEFAULT_BUFFER_POLICY,
        clock: Clock = utc_now,
    ) -> None:
        self._uow = uow
        self._policy = policy
        self._clock = clock

    def handle(
        self, asset_id: str, start: date | None = None, end: date | None = None
    ) -> AvailabilitySummaryDTO:
        if start is not None and end is not None and end < start:
            raise ValidationError("End date must be on or after start date")
        today = self._clock().date()
        with self._uow as uow:
            asset = uow.assets.get_by_id(asset_id)
            if asset is None or asset.is_deleted:
                raise EntityNotFoundError(f"Asset '{asset_id}' not found")
            summary = AvailabilityService(
                uow.assets, uow.bookings, self._policy
            ).get_availability_summary(asset_id, today, start, end)

        return AvailabilitySummaryDTO(
            asset_id=asset.id,
            asset_name=asset.name,
            is_available=summary.is_available,
            available_quantity=summary.available_quantity,
            total_quantity=summary.total_quantity,
            next_available_date=(
                summary.next_available_date.isoformat() if summary.next_available_date else None
            ),
            message=summary.message,
        )


class AssetCalendarHandler:
    """Bookings of one asset, earliest first, optionally within a window."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self, asset_id: str, from_date: date | None = None, to_date: date | None = None
    ) -> list[BookingLineDTO]:
        with self._uow as uow:
            if uow.assets.get_by_id(asset_id) is None:
                raise EntityNotFoundError(f"Asset '{asset_id}' not found")
            bookings = AvailabilityService(uow.assets, uow.bookings).get_asset_bookings(
                asset_id, from_date, to_date
            )
        return [
            BookingLineDTO(
                order_id=b.order_id,
                quantity=b.quantity,
                blocked_from=b.blocked_from.isoformat(),
                blocked_until=b.blocked_until.isoformat(),
            )
            for b in bookings
        ]
