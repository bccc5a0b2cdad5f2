"""JSON-document-backed implementation of PricingTierRepository."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from ers.domain.model.pricing_tier import PricingTier
from ers.domain.repository.pricing_tier_repository import PricingTierRepository
from ers.infrastructure.persistence.serialization import money_from_raw, money_to_raw


class JsonPricingTierRepository(PricingTierRepository):

    def __init__(self, document: dict[str, Any]) -> None:
        self._document = document

    @property
    def _rows(self) -> list[dict]:
        return self._document["pricing_tiers"]

    # --- PricingTierRepository interface --------------------------------------

    def get_by_id(self, tier_id: str) -> PricingTier | None:
        for raw in self._rows:
            if raw["id"] == tier_id:
                return self._to_domain(raw)
        return None

    def list_for_country(self, country: str) -> list[PricingTier]:
        wanted = country.strip().lower()
        return [
            self._to_domain(raw) for raw in self._rows if raw["country"].lower() == wanted
        ]

    def list_all(self) -> list[PricingTier]:
        return [self._to_domain(raw) for raw in self._rows]

    def save(self, tier: PricingTier) -> None:
        for i, raw in enumerate(self._rows):
            if raw["id"] == tier.id:
                self._rows[i] = self._to_raw(tier)
                return
        self._rows.append(self._to_raw(tier))

    def delete(self, tier_id: str) -> None:
        self._document["pricing_tiers"] = [raw for raw in self._rows if raw["id"] != tier_id]

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(tier: PricingTier) -> dict:
        return {
            "id": tier.id,
            "country": tier.country,
            "city": tier.city,
            "volume_min": str(tier.volume_min),
            "volume_max": str(tier.volume_max),
            "base_price": money_to_raw(tier.base_price),
            "is_active": tier.is_active,
        }

    @staticmethod
    def _to_domain(raw: dict) -> PricingTier:
        return PricingTier(
            id=raw["id"],
            country=raw["country"],
            city=raw["city"],
            volume_min=Decimal(raw["volume_min"]),
            volume_max=Decimal(raw["volume_max"]),
            base_price=money_from_raw(raw["base_price"]),  # type: ignore[arg-type]
            is_active=raw.get("is_active", True),
        )
