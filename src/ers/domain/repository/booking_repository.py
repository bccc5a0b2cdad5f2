"""Abstract repository for the booking ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from ers.domain.model.booking import Booking


class BookingRepository(ABC):

    @abstractmethod
    def list_overlapping(self, asset_id: str, start: date, end: date) -> list[Booking]:
        """Return bookings of an asset whose blocked period overlaps
        ``[start, end]`` (inclusive)."""

    @abstractmethod
    def list_for_asset(self, asset_id: str) -> list[Booking]:
        """Return every booking of an asset."""

    @abstractmethod
    def list_for_order(self, order_id: int) -> list[Booking]:
        """Return every booking created for an order."""

    @abstractmethod
    def add(self, booking: Booking) -> None:
        """Insert a booking, assigning its ID."""

    @abstractmethod
    def delete_for_order(self, order_id: int) -> int:
        """Delete all bookings of an order and return how many were removed."""
