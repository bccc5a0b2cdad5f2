"""Domain service: Pricing.

Standard pricing is a two-layer calculation:

1. the logistics **base price** comes from the pricing tier matching the
   venue location and the order's total volume;
2. the platform **margin** (the company's percent) is added on top.

Each amount is rounded to cents as soon as it is computed, so a figure
shown to the client is the same figure that is stored and invoiced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from ers.domain.exceptions import EntityNotFoundError
from ers.domain.model.order import Order
from ers.domain.model.pricing_tier import PricingTier
from ers.domain.model.value_objects import Money, round_volume
from ers.domain.repository.company_repository import CompanyRepository
from ers.domain.repository.pricing_tier_repository import PricingTierRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StandardPricing:
    pricing_tier_id: str | None
    a2_base_price: Money | None
    pmg_margin_percent: Decimal
    pmg_margin_amount: Money | None
    final_total_price: Money | None
    tier_found: bool


@dataclass(frozen=True)
class OrderEstimate:
    """Non-binding figure shown before an order is submitted."""

    volume: Decimal
    pricing_tier_id: str | None
    base_price: Money | None
    margin_percent: Decimal
    margin_amount: Money | None
    total: Money | None
    unknown_assets: tuple[str, ...] = ()

    @property
    def is_complete(self) -> bool:
        return self.total is not None and not self.unknown_assets


def apply_margin(base_price: Money, margin_percent: Decimal) -> tuple[Money, Money]:
    """Return ``(margin_amount, final_total)`` for a base price."""
    margin_amount = base_price.percent(margin_percent)
    return margin_amount, base_price + margin_amount


class PricingService:

    def __init__(
        self,
        tier_repo: PricingTierRepository,
        company_repo: CompanyRepository,
    ) -> None:
        self._tier_repo = tier_repo
        self._company_repo = company_repo

    def find_matching_tier(self, country: str, city: str, volume: Decimal) -> PricingTier | None:
        """Active tier for the exact city, else the country's wildcard tier.

        When several bands cover the volume the narrowest one wins.
        """
        candidates = [
            t for t in self._tier_repo.list_for_country(country) if t.is_active and t.covers(volume)
        ]
        exact = [t for t in candidates if t.same_location(country, city)]
        if exact:
            return min(exact, key=lambda t: t.band_width)
        wildcard = [t for t in candidates if t.is_wildcard]
        if wildcard:
            return min(wildcard, key=lambda t: t.band_width)
        return None

    def find_overlapping_tier(
        self,
        country: str,
        city: str,
        volume_min: Decimal,
        volume_max: Decimal,
        exclude_id: str | None = None,
    ) -> PricingTier | None:
        """Active tier of the same location whose band intersects
        ``[volume_min, volume_max)``."""
        for tier in self._tier_repo.list_for_country(country):
            if tier.id == exclude_id or not tier.is_active:
                continue
            if tier.same_location(country, city) and tier.overlaps(volume_min, volume_max):
                return tier
        return None

    def margin_percent_for(self, company_id: str) -> Decimal:
        company = self._company_repo.get_by_id(company_id)
        if company is None:
            raise EntityNotFoundError(f"Company '{company_id}' not found")
        return company.pmg_margin_percent

    def calculate_standard_pricing(self, order: Order) -> StandardPricing:
        """Tier price plus company margin for an order.

        A missing venue or no matching tier is not an error: it returns
        ``tier_found=False`` so the order can be priced by hand.
        """
        margin_percent = self.margin_percent_for(order.company_id)
        not_found = StandardPricing(
            pricing_tier_id=None,
            a2_base_price=None,
            pmg_margin_percent=margin_percent,
            pmg_margin_amount=None,
            final_total_price=None,
            tier_found=False,
        )
        if order.venue is None:
            return not_found

        tier = self.find_matching_tier(
            order.venue.country, order.venue.city, order.calculated_volume
        )
        if tier is None:
            logger.info(
                "No pricing tier for %s, %s at %s m³ (order %s)",
                order.venue.city,
                order.venue.country,
                order.calculated_volume,
                order.display_id,
            )
            return not_found

        margin_amount, final_total = apply_margin(tier.base_price, margin_percent)
        return StandardPricing(
            pricing_tier_id=tier.id,
            a2_base_price=tier.base_price,
            pmg_margin_percent=margin_percent,
            pmg_margin_amount=margin_amount,
            final_total_price=final_total,
            tier_found=True,
        )

    def estimate(
        self,
        volume: Decimal,
        country: str | None,
        city: str | None,
        company_id: str,
        unknown_assets: tuple[str, ...] = (),
    ) -> OrderEstimate | None:
        """Best-effort estimate for a cart.  Never raises for missing data."""
        company = self._company_repo.get_by_id(company_id)
        if company is None or not country or not city:
            return None

        volume = round_volume(volume)
        tier = self.find_matching_tier(country, city, volume)
        if tier is None:
            return OrderEstimate(
                volume=volume,
                pricing_tier_id=None,
                base_price=None,
                margin_percent=company.pmg_margin_percent,
                margin_amount=None,
                total=None,
                unknown_assets=unknown_assets,
            )

        margin_amount, total = apply_margin(tier.base_price, company.pmg_margin_percent)
        return OrderEstimate(
            volume=volume,
            pricing_tier_id=tier.id,
            base_price=tier.base_price,
            margin_percent=company.pmg_margin_percent,
            margin_amount=margin_amount,
            total=total,
            unknown_assets=unknown_assets,
        )
