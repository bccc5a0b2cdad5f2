"""Abstract unit of work: the transaction boundary of every use case.

Handlers run their whole read-check-write sequence inside one unit of
work::

    with uow:
        order = uow.orders.get_by_id(order_id)
        ...
        uow.commit()

Leaving the block without ``commit()`` (normally or through an exception)
discards every change made through the repositories.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ers.domain.repository.asset_repository import AssetRepository
from ers.domain.repository.booking_repository import BookingRepository
from ers.domain.repository.company_repository import CompanyRepository
from ers.domain.repository.order_repository import OrderRepository
from ers.domain.repository.pricing_tier_repository import PricingTierRepository


class UnitOfWork(ABC):

    assets: AssetRepository
    bookings: BookingRepository
    companies: CompanyRepository
    orders: OrderRepository
    pricing_tiers: PricingTierRepository

    def __enter__(self) -> UnitOfWork:
        self._begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.rollback()
        finally:
            self._end()

    @abstractmethod
    def _begin(self) -> None:
        """Open the transaction and bind the repositories."""

    @abstractmethod
    def _end(self) -> None:
        """Release whatever ``_begin`` acquired."""

    @abstractmethod
    def commit(self) -> None:
        """Make every change since ``_begin`` durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard uncommitted changes.  A no-op right after ``commit``."""
