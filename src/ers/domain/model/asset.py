"""Asset aggregate: a physical item type that can be rented out.

Assets live independently of orders.  Orders copy what they need into
OrderItem snapshots, so edits here never rewrite history.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from ers.domain.exceptions import ValidationError


class AssetCondition(Enum):
    GREEN = "GREEN"
    ORANGE = "ORANGE"
    RED = "RED"


class AssetStatus(Enum):
    """Informational only; bookings are gated by the ledger, not by this."""

    AVAILABLE = "AVAILABLE"
    BOOKED = "BOOKED"
    OUT = "OUT"
    IN_MAINTENANCE = "IN_MAINTENANCE"


@dataclass
class Asset:
    """Aggregate root for a rentable item type.

    Invariants:
    - ``total_quantity`` is at least 1
    - an asset not in GREEN condition carries a refurbishment estimate
    """

    id: str
    company_id: str
    name: str
    total_quantity: int
    volume: Decimal
    weight: Decimal
    condition: AssetCondition = AssetCondition.GREEN
    refurb_days_estimate: int | None = None
    status: AssetStatus = AssetStatus.AVAILABLE
    handling_tags: tuple[str, ...] = field(default_factory=tuple)
    deleted_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.total_quantity < 1:
            raise ValidationError(f"Asset '{self.name}' must have a total quantity of at least 1")
        if self.volume < 0 or self.weight < 0:
            raise ValidationError(f"Asset '{self.name}' cannot have negative volume or weight")
        if self.refurb_days_estimate is not None and self.refurb_days_estimate < 0:
            raise ValidationError("Refurbishment estimate cannot be negative")
        if self.condition != AssetCondition.GREEN and self.refurb_days_estimate is None:
            raise ValidationError(
                f"Asset '{self.name}' is {self.condition.value} and needs a "
                f"refurbishment estimate"
            )

    @property
    def refurb_days(self) -> int:
        return self.refurb_days_estimate or 0

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def change_total_quantity(self, new_total: int, peak_booked: int) -> None:
        """Set a new unit count.

        ``peak_booked`` is the highest quantity committed on any single day
        from now on; going below it would over-commit existing bookings.
        """
        if new_total < 1:
            raise ValidationError("Total quantity must be at least 1")
        if new_total < peak_booked:
            raise ValidationError(
                f"Cannot reduce {self.name} to {new_total} units: "
                f"{peak_booked} are already booked over an upcoming period"
            )
        self.total_quantity = new_total
