"""Money, quantities and the decimal rounding rules of the rental domain.

Prices are kept to cents, volumes (m³) to three places and weights (kg)
to two.  Rounding is always half-up and always applied where a value is
produced, never later when it is displayed.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import total_ordering

from ers.domain.exceptions import ValidationError

DEFAULT_CURRENCY = "AED"

CENTS = Decimal("0.01")
VOLUME_PLACES = Decimal("0.001")
WEIGHT_PLACES = Decimal("0.01")


def to_decimal(value: str | float | int | Decimal, label: str = "value") -> Decimal:
    """Coerce user input to Decimal, going through ``str`` for floats."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Invalid {label}: {value!r}") from exc


def round_volume(value: Decimal) -> Decimal:
    return value.quantize(VOLUME_PLACES, rounding=ROUND_HALF_UP)


def round_weight(value: Decimal) -> Decimal:
    return value.quantize(WEIGHT_PLACES, rounding=ROUND_HALF_UP)


@total_ordering
@dataclass(frozen=True)
class Money:
    """Non-negative amount in one currency, held to cents.

    The amount is quantized on construction, so a sum, a multiple or a
    percentage of Money is rounded the moment it is computed.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < 0:
            raise ValidationError(f"Money amount cannot be negative, got {self.amount}")
        object.__setattr__(self, "amount", self.amount.quantize(CENTS, rounding=ROUND_HALF_UP))

    @classmethod
    def of(cls, amount: str | float | int | Decimal, currency: str = DEFAULT_CURRENCY) -> Money:
        return cls(to_decimal(amount, "money amount"), currency)

    def __add__(self, other: Money) -> Money:
        self._check_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int | Decimal) -> Money:
        # bool is an int subclass; 'price * True' is always a bug
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            raise TypeError(f"Money can be multiplied by int or Decimal, not {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def __lt__(self, other: Money) -> bool:
        self._check_currency(other)
        return self.amount < other.amount

    def percent(self, rate: Decimal) -> Money:
        """``rate`` percent of this amount, e.g. ``percent(25)`` is a quarter."""
        return Money(self.amount * rate / 100, self.currency)

    def __str__(self) -> str:
        return f"{self.currency} {self.amount:.2f}"

    def _check_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(f"Cannot combine {self.currency} with {other.currency}")


@dataclass(frozen=True)
class Quantity:
    """Units of one asset on an order line or a booking; at least 1."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(f"Quantity must be an integer, got {self.value!r}")
        if self.value < 1:
            raise ValidationError(f"Quantity must be positive, got {self.value}")

    def __str__(self) -> str:
        return str(self.value)
