"""Application service: Estimate Order use case (query).

Gives a cart a rough price before checkout.  Unlike submission it is
tolerant: unknown assets are skipped and listed, and a missing tier just
leaves the totals empty.
"""

from __future__ import annotations

from decimal import Decimal

from ers.application.dto import CartItemSpec, EstimateDTO
from ers.application.mapping import money_str, percent_str
from ers.domain.repository.unit_of_work import UnitOfWork
from ers.domain.service.pricing_service import PricingService


class EstimateOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        company_id: str,
        items: list[CartItemSpec],
        venue_country: str | None,
        venue_city: str | None,
    ) -> EstimateDTO | None:
        """Return an estimate, or None when there is nothing to price against."""
        with self._uow as uow:
            volume = Decimal("0")
            unknown: list[str] = []
            for spec in items:
                asset = uow.assets.get_by_id(spec.asset_id)
                if asset is None or asset.company_id != company_id or asset.is_deleted:
                    unknown.append(spec.asset_id)
                    continue
                volume += asset.volume * max(spec.quantity, 0)

            estimate = PricingService(uow.pricing_tiers, uow.companies).estimate(
                volume, venue_country, venue_city, company_id, tuple(unknown)
            )

        if estimate is None:
            return None
        return EstimateDTO(
            volume=str(estimate.volume),
            base_price=money_str(estimate.base_price),
            margin_percent=percent_str(estimate.margin_percent),  # type: ignore[arg-type]
            margin_amount=money_str(estimate.margin_amount),
            total=money_str(estimate.total),
            complete=estimate.is_complete,
            unknown_assets=list(estimate.unknown_assets),
        )
