"""Abstract repository for PricingTier rows."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ers.domain.model.pricing_tier import PricingTier


class PricingTierRepository(ABC):

    @abstractmethod
    def get_by_id(self, tier_id: str) -> PricingTier | None:
        """The tier, or None."""

    @abstractmethod
    def list_for_country(self, country: str) -> list[PricingTier]:
        """Return every tier of a country (any city), matched case-insensitively."""

    @abstractmethod
    def list_all(self) -> list[PricingTier]:
        """Every tier, active or not."""

    @abstractmethod
    def save(self, tier: PricingTier) -> None:
        """Insert or replace by id."""

    @abstractmethod
    def delete(self, tier_id: str) -> None:
        """Remove a tier."""
