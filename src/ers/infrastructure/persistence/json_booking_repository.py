"""JSON-document-backed implementation of BookingRepository."""

from __future__ import annotations

from datetime import date
from typing import Any

from ers.domain.model.booking import Booking
from ers.domain.repository.booking_repository import BookingRepository


class JsonBookingRepository(BookingRepository):

    def __init__(self, document: dict[str, Any]) -> None:
        self._document = document

    @property
    def _rows(self) -> list[dict]:
        return self._document["bookings"]

    # --- BookingRepository interface ------------------------------------------

    def list_overlapping(self, asset_id: str, start: date, end: date) -> list[Booking]:
        return [
            b
            for b in self.list_for_asset(asset_id)
            if b.overlaps(start, end)
        ]

    def list_for_asset(self, asset_id: str) -> list[Booking]:
        return [self._to_domain(raw) for raw in self._rows if raw["asset_id"] == asset_id]

    def list_for_order(self, order_id: int) -> list[Booking]:
        return [self._to_domain(raw) for raw in self._rows if raw["order_id"] == order_id]

    def add(self, booking: Booking) -> None:
        booking.id = max((raw["id"] for raw in self._rows), default=0) + 1
        self._rows.append(self._to_raw(booking))

    def delete_for_order(self, order_id: int) -> int:
        kept = [raw for raw in self._rows if raw["order_id"] != order_id]
        removed = len(self._rows) - len(kept)
        self._document["bookings"] = kept
        return removed

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(booking: Booking) -> dict:
        return {
            "id": booking.id,
            "asset_id": booking.asset_id,
            "order_id": booking.order_id,
            "quantity": booking.quantity,
            "blocked_from": booking.blocked_from.isoformat(),
            "blocked_until": booking.blocked_until.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Booking:
        return Booking(
            id=raw["id"],
            asset_id=raw["asset_id"],
            order_id=raw["order_id"],
            quantity=raw["quantity"],
            blocked_from=date.fromisoformat(raw["blocked_from"]),
            blocked_until=date.fromisoformat(raw["blocked_until"]),
        )
