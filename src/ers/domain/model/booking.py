"""Booking: one ledger entry claiming units of an asset over a date range."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ers.domain.model.date_range import ranges_overlap


@dataclass
class Booking:
    """Quantity claimed by an order over its blocked period.

    Bookings are created and deleted only by order lifecycle transitions.
    They are the sole input to availability math.
    """

    id: int | None
    asset_id: str
    order_id: int
    quantity: int
    blocked_from: date
    blocked_until: date

    def overlaps(self, start: date, end: date) -> bool:
        return ranges_overlap(self.blocked_from, self.blocked_until, start, end)
