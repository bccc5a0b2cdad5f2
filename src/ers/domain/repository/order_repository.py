"""Port for storing orders and issuing their order and invoice numbers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from ers.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Id the next new order will get."""

    @abstractmethod
    def next_order_number(self, day: date) -> str:
        """Generate the next human-readable number for orders created on ``day``."""

    @abstractmethod
    def next_invoice_number(self, day: date) -> str:
        """Generate the next invoice number for invoices issued on ``day``."""

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """The order, or None."""

    @abstractmethod
    def list_by_status(self, *statuses: OrderStatus) -> list[Order]:
        """Return orders currently in any of the given statuses."""

    @abstractmethod
    def references_pricing_tier(self, tier_id: str) -> bool:
        """True if any order points at the pricing tier."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Insert or replace; assigns an id to a new order."""
