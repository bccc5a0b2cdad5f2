"""Company: the client account that owns assets and places orders."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ers.domain.exceptions import ValidationError


@dataclass
class Company:
    """Client company.

    ``pmg_margin_percent`` is the platform markup applied on top of the
    logistics base price for this company's orders.
    """

    id: str
    name: str
    pmg_margin_percent: Decimal = Decimal("25.00")

    def __post_init__(self) -> None:
        validate_margin_percent(self.pmg_margin_percent)


def validate_margin_percent(value: Decimal) -> None:
    if value < 0 or value > 100:
        raise ValidationError("PMG margin percent must be between 0 and 100")
