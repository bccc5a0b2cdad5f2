"""Application services: pricing tier administration.

Active tiers of the same location must not have overlapping volume
bands, otherwise a lookup could match two prices.  Inactive tiers are
ignored by both matching and the overlap check.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ers.domain.exceptions import EntityNotFoundError, ValidationError
from ers.domain.model.pricing_tier import PricingTier, validate_tier_fields
from ers.domain.model.value_objects import Money, to_decimal
from ers.domain.repository.unit_of_work import UnitOfWork
from ers.domain.service.pricing_service import PricingService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricingTierDTO:
    id: str
    country: str
    city: str
    volume_min: str
    volume_max: str
    base_price: str
    is_active: bool


def to_tier_dto(tier: PricingTier) -> PricingTierDTO:
    return PricingTierDTO(
        id=tier.id,
        country=tier.country,
        city=tier.city,
        volume_min=str(tier.volume_min),
        volume_max=str(tier.volume_max),
        base_price=f"{tier.base_price.amount:.2f}",
        is_active=tier.is_active,
    )


def _ensure_no_overlap(uow: UnitOfWork, tier: PricingTier) -> None:
    clash = PricingService(uow.pricing_tiers, uow.companies).find_overlapping_tier(
        tier.country, tier.city, tier.volume_min, tier.volume_max, exclude_id=tier.id
    )
    if clash is not None:
        raise ValidationError(
            f"Volume range overlaps with existing tier {clash.id} "
            f"({clash.volume_min}-{clash.volume_max} m³)"
        )


def _get_tier(uow: UnitOfWork, tier_id: str) -> PricingTier:
    tier = uow.pricing_tiers.get_by_id(tier_id)
    if tier is None:
        raise EntityNotFoundError(f"Pricing tier '{tier_id}' not found")
    return tier


class AddPricingTierHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        country: str,
        city: str,
        volume_min: str,
        volume_max: str,
        base_price: str,
        is_active: bool = True,
    ) -> PricingTierDTO:
        with self._uow as uow:
            # Auto-assign ID based on existing tiers
            all_tiers = uow.pricing_tiers.list_all()
            if all_tiers:
                next_id = str(max(int(t.id) for t in all_tiers) + 1)
            else:
                next_id = "1"

            tier = PricingTier(
                id=next_id,
                country=country,
                city=city,
                volume_min=to_decimal(volume_min, "volumeMin"),
                volume_max=to_decimal(volume_max, "volumeMax"),
                base_price=Money.of(base_price),
                is_active=is_active,
            )
            if tier.is_active:
                _ensure_no_overlap(uow, tier)
            uow.pricing_tiers.save(tier)
            uow.commit()

        logger.info("Pricing tier %s added: %s", tier.id, tier)
        return to_tier_dto(tier)


class UpdatePricingTierHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        tier_id: str,
        country: str | None = None,
        city: str | None = None,
        volume_min: str | None = None,
        volume_max: str | None = None,
        base_price: str | None = None,
    ) -> PricingTierDTO:
        """Change any subset of a tier's fields; unchanged ones are kept."""
        with self._uow as uow:
            tier = _get_tier(uow, tier_id)

            new_country = country if country is not None else tier.country
            new_city = city if city is not None else tier.city
            new_min = (
                to_decimal(volume_min, "volumeMin") if volume_min is not None else tier.volume_min
            )
            new_max = (
                to_decimal(volume_max, "volumeMax") if volume_max is not None else tier.volume_max
            )
            new_price = Money.of(base_price) if base_price is not None else tier.base_price
            validate_tier_fields(new_country, new_city, new_min, new_max, new_price)

            tier.country = new_country.strip()
            tier.city = new_city.strip()
            tier.volume_min = new_min
            tier.volume_max = new_max
            tier.base_price = new_price
            if tier.is_active:
                _ensure_no_overlap(uow, tier)
            uow.pricing_tiers.save(tier)
            uow.commit()

        logger.info("Pricing tier %s updated: %s", tier.id, tier)
        return to_tier_dto(tier)


class TogglePricingTierHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, tier_id: str) -> PricingTierDTO:
        """Flip a tier between active and inactive."""
        with self._uow as uow:
            tier = _get_tier(uow, tier_id)
            tier.is_active = not tier.is_active
            if tier.is_active:
                _ensure_no_overlap(uow, tier)
            uow.pricing_tiers.save(tier)
            uow.commit()

        logger.info(
            "Pricing tier %s %s", tier.id, "activated" if tier.is_active else "deactivated"
        )
        return to_tier_dto(tier)


class DeletePricingTierHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, tier_id: str) -> None:
        with self._uow as uow:
            _get_tier(uow, tier_id)
            if uow.orders.references_pricing_tier(tier_id):
                raise ValidationError(
                    "Cannot delete tier - it is referenced by existing orders. "
                    "Deactivate instead."
                )
            uow.pricing_tiers.delete(tier_id)
            uow.commit()

        logger.info("Pricing tier %s deleted", tier_id)


class ListPricingTiersHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, country: str | None = None, active_only: bool = False) -> list[PricingTierDTO]:
        with self._uow as uow:
            tiers = (
                uow.pricing_tiers.list_for_country(country)
                if country
                else uow.pricing_tiers.list_all()
            )
        if active_only:
            tiers = [t for t in tiers if t.is_active]
        tiers.sort(key=lambda t: (t.country.lower(), t.city.lower(), t.volume_min))
        return [to_tier_dto(t) for t in tiers]
