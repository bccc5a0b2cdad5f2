"""PricingTier: a (location, volume band) -> base price row.

Tiers are managed by administrators and referenced, not owned, by orders.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ers.domain.exceptions import ValidationError
from ers.domain.model.value_objects import Money

WILDCARD_CITY = "*"


@dataclass
class PricingTier:
    """Base logistics price for orders whose volume falls in
    ``[volume_min, volume_max)`` and whose venue is in ``country``/``city``.

    A ``city`` of ``'*'`` matches every city of the country.
    """

    id: str
    country: str
    city: str
    volume_min: Decimal
    volume_max: Decimal
    base_price: Money
    is_active: bool = True

    def __post_init__(self) -> None:
        validate_tier_fields(
            self.country, self.city, self.volume_min, self.volume_max, self.base_price
        )
        self.country = self.country.strip()
        self.city = self.city.strip()

    @property
    def is_wildcard(self) -> bool:
        return self.city == WILDCARD_CITY

    def covers(self, volume: Decimal) -> bool:
        """Lower bound inclusive, upper bound exclusive."""
        return self.volume_min <= volume < self.volume_max

    def same_location(self, country: str, city: str) -> bool:
        return (
            self.country.lower() == country.strip().lower()
            and self.city.lower() == city.strip().lower()
        )

    def overlaps(self, volume_min: Decimal, volume_max: Decimal) -> bool:
        return volume_min < self.volume_max and self.volume_min < volume_max

    @property
    def band_width(self) -> Decimal:
        return self.volume_max - self.volume_min

    def __str__(self) -> str:
        return (
            f"{self.city}, {self.country} "
            f"[{self.volume_min}-{self.volume_max}) m³ @ {self.base_price}"
        )


def validate_tier_fields(
    country: str,
    city: str,
    volume_min: Decimal,
    volume_max: Decimal,
    base_price: Money,
) -> None:
    if not country or not country.strip():
        raise ValidationError("country is required")
    if not city or not city.strip():
        raise ValidationError("city is required")
    if volume_min < 0:
        raise ValidationError("volumeMin must be greater than or equal to 0")
    if volume_max <= volume_min:
        raise ValidationError("volumeMax must be greater than volumeMin")
    if base_price.amount <= 0:
        raise ValidationError("basePrice must be greater than 0")
