"""Application service: Get Pricing Details use case (query).

Shows the reviewer what the standard calculation would give next to
whatever pricing the order carries right now.
"""

from __future__ import annotations

from ers.application.dto import PricingDetailsDTO, StandardPricingDTO
from ers.application.mapping import money_str, percent_str, to_pricing_dto
from ers.domain.exceptions import EntityNotFoundError
from ers.domain.repository.unit_of_work import UnitOfWork
from ers.domain.service.pricing_service import PricingService


class GetPricingDetailsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int) -> PricingDetailsDTO:
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            company = uow.companies.get_by_id(order.company_id)
            if company is None:
                raise EntityNotFoundError(f"Company '{order.company_id}' not found")
            standard = PricingService(uow.pricing_tiers, uow.companies).calculate_standard_pricing(
                order
            )

        return PricingDetailsDTO(
            order_number=order.display_id,
            status=order.status.value,
            calculated_volume=str(order.calculated_volume),
            venue_country=order.venue.country if order.venue else None,
            venue_city=order.venue.city if order.venue else None,
            company_name=company.name,
            standard=StandardPricingDTO(
                tier_found=standard.tier_found,
                pricing_tier_id=standard.pricing_tier_id,
                a2_base_price=money_str(standard.a2_base_price),
                pmg_margin_percent=percent_str(standard.pmg_margin_percent),  # type: ignore[arg-type]
                pmg_margin_amount=money_str(standard.pmg_margin_amount),
                final_total_price=money_str(standard.final_total_price),
            ),
            current=to_pricing_dto(order),
        )
