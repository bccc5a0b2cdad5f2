"""Order aggregate: a rental request from cart to closed.

An order moves along two independent tracks: the fulfillment ``status``
(quote, delivery, return) and the commercial ``financial_status`` (quote,
invoice, payment).  Each track is a small value object driven by a fixed
adjacency table.  Some fulfillment states can only be entered once the
financial track has progressed far enough.

The Order owns its line items and its status history.  Cross-aggregate
work (bookings, pricing lookups) is coordinated by domain services.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

from ers.domain.exceptions import InvalidTransitionError, ValidationError
from ers.domain.model.asset import Asset, AssetCondition
from ers.domain.model.value_objects import Money, Quantity, round_volume, round_weight


class OrderStatus(Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    PRICING_REVIEW = "PRICING_REVIEW"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    QUOTED = "QUOTED"
    DECLINED = "DECLINED"
    CONFIRMED = "CONFIRMED"
    IN_PREPARATION = "IN_PREPARATION"
    READY_FOR_DELIVERY = "READY_FOR_DELIVERY"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    IN_USE = "IN_USE"
    AWAITING_RETURN = "AWAITING_RETURN"
    CLOSED = "CLOSED"


class FinancialStatus(Enum):
    PENDING_QUOTE = "PENDING_QUOTE"
    QUOTE_SENT = "QUOTE_SENT"
    QUOTE_ACCEPTED = "QUOTE_ACCEPTED"
    PENDING_INVOICE = "PENDING_INVOICE"
    INVOICED = "INVOICED"
    PAID = "PAID"


# ---------------------------------------------------------------------------
# Transition tables
# ---------------------------------------------------------------------------
STATUS_TRANSITIONS: dict[OrderStatus, tuple[OrderStatus, ...]] = {
    OrderStatus.DRAFT: (OrderStatus.SUBMITTED,),
    OrderStatus.SUBMITTED: (OrderStatus.PRICING_REVIEW,),
    OrderStatus.PRICING_REVIEW: (OrderStatus.QUOTED, OrderStatus.PENDING_APPROVAL),
    OrderStatus.PENDING_APPROVAL: (OrderStatus.QUOTED,),
    OrderStatus.QUOTED: (OrderStatus.CONFIRMED, OrderStatus.DECLINED),
    OrderStatus.DECLINED: (),
    OrderStatus.CONFIRMED: (OrderStatus.IN_PREPARATION,),
    OrderStatus.IN_PREPARATION: (OrderStatus.READY_FOR_DELIVERY,),
    OrderStatus.READY_FOR_DELIVERY: (OrderStatus.IN_TRANSIT,),
    OrderStatus.IN_TRANSIT: (OrderStatus.DELIVERED,),
    OrderStatus.DELIVERED: (OrderStatus.IN_USE,),
    OrderStatus.IN_USE: (OrderStatus.AWAITING_RETURN,),
    OrderStatus.AWAITING_RETURN: (OrderStatus.CLOSED,),
    OrderStatus.CLOSED: (),
}

FINANCIAL_TRANSITIONS: dict[FinancialStatus, tuple[FinancialStatus, ...]] = {
    FinancialStatus.PENDING_QUOTE: (FinancialStatus.QUOTE_SENT,),
    # a sent quote can fall back to PENDING_QUOTE when it is re-priced
    FinancialStatus.QUOTE_SENT: (FinancialStatus.QUOTE_ACCEPTED, FinancialStatus.PENDING_QUOTE),
    FinancialStatus.QUOTE_ACCEPTED: (FinancialStatus.PENDING_INVOICE,),
    FinancialStatus.PENDING_INVOICE: (FinancialStatus.INVOICED,),
    FinancialStatus.INVOICED: (FinancialStatus.PAID,),
    FinancialStatus.PAID: (),
}

# Fulfillment states that need the financial track to have reached a value.
FINANCIAL_GATES: dict[OrderStatus, FinancialStatus] = {
    OrderStatus.CONFIRMED: FinancialStatus.QUOTE_SENT,
    OrderStatus.IN_PREPARATION: FinancialStatus.QUOTE_ACCEPTED,
}

_FINANCIAL_PROGRESS: tuple[FinancialStatus, ...] = (
    FinancialStatus.PENDING_QUOTE,
    FinancialStatus.QUOTE_SENT,
    FinancialStatus.QUOTE_ACCEPTED,
    FinancialStatus.PENDING_INVOICE,
    FinancialStatus.INVOICED,
    FinancialStatus.PAID,
)


def _coerce(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def is_valid_transition(from_status: OrderStatus | str, to_status: OrderStatus | str) -> bool:
    """Pure lookup in ``STATUS_TRANSITIONS``; unknown names are never valid."""
    source = _coerce(OrderStatus, from_status)
    target = _coerce(OrderStatus, to_status)
    if source is None or target is None:
        return False
    return target in STATUS_TRANSITIONS[source]


def is_valid_financial_transition(
    from_status: FinancialStatus | str, to_status: FinancialStatus | str
) -> bool:
    """Pure lookup in ``FINANCIAL_TRANSITIONS``; unknown names are never valid."""
    source = _coerce(FinancialStatus, from_status)
    target = _coerce(FinancialStatus, to_status)
    if source is None or target is None:
        return False
    return target in FINANCIAL_TRANSITIONS[source]


@dataclass(frozen=True)
class FulfillmentTrack:
    """Where the order is physically: quoting, delivery, use, return."""

    state: OrderStatus = OrderStatus.DRAFT

    def can_move_to(self, target: OrderStatus) -> bool:
        return is_valid_transition(self.state, target)

    def move_to(self, target: OrderStatus) -> FulfillmentTrack:
        if not self.can_move_to(target):
            raise InvalidTransitionError(self.state.value, target.value)
        return FulfillmentTrack(target)


@dataclass(frozen=True)
class FinancialTrack:
    """Where the order is commercially: quote, invoice, payment."""

    state: FinancialStatus = FinancialStatus.PENDING_QUOTE

    def has_reached(self, milestone: FinancialStatus) -> bool:
        return _FINANCIAL_PROGRESS.index(self.state) >= _FINANCIAL_PROGRESS.index(milestone)

    def can_move_to(self, target: FinancialStatus) -> bool:
        return is_valid_financial_transition(self.state, target)

    def move_to(self, target: FinancialStatus) -> FinancialTrack:
        if not self.can_move_to(target):
            raise InvalidTransitionError(self.state.value, target.value)
        return FinancialTrack(target)


# ---------------------------------------------------------------------------
# Snapshots and value objects owned by the order
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StatusHistoryEntry:
    """Audit record of one fulfillment transition.  Never edited."""

    status: OrderStatus
    updated_by: str
    timestamp: datetime
    notes: str | None = None


@dataclass(frozen=True)
class OrderItem:
    """Snapshot of an asset at order time.

    Booking and pricing math reads these values, never the live asset, so
    later edits to the catalog do not change what was ordered.
    """

    asset_id: str
    asset_name: str
    quantity: Quantity
    volume: Decimal  # per unit
    weight: Decimal  # per unit
    condition: AssetCondition = AssetCondition.GREEN
    refurb_days: int = 0
    handling_tags: tuple[str, ...] = ()

    @property
    def total_volume(self) -> Decimal:
        return round_volume(self.volume * self.quantity.value)

    @property
    def total_weight(self) -> Decimal:
        return round_weight(self.weight * self.quantity.value)

    @staticmethod
    def from_asset(asset: Asset, quantity: int) -> OrderItem:
        return OrderItem(
            asset_id=asset.id,
            asset_name=asset.name,
            quantity=Quantity(quantity),
            volume=asset.volume,
            weight=asset.weight,
            condition=asset.condition,
            refurb_days=asset.refurb_days,
            handling_tags=tuple(asset.handling_tags),
        )


_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class Venue:
    name: str
    country: str
    city: str
    address: str
    access_notes: str | None = None

    def __post_init__(self) -> None:
        if not all(
            value and value.strip()
            for value in (self.name, self.country, self.city, self.address)
        ):
            raise ValidationError("All venue information fields are required")


@dataclass(frozen=True)
class Contact:
    name: str
    email: str
    phone: str

    def __post_init__(self) -> None:
        if not all(value and value.strip() for value in (self.name, self.email, self.phone)):
            raise ValidationError("All contact information fields are required")
        if not _EMAIL_PATTERN.match(self.email):
            raise ValidationError("Invalid email format")


@dataclass(frozen=True)
class Invoice:
    number: str
    generated_at: datetime
    paid_at: date | None = None
    payment_method: str | None = None
    payment_reference: str | None = None


def format_order_number(day: date, sequence: int) -> str:
    """``ORD-YYYYMMDD-###``"""
    return f"ORD-{day.strftime('%Y%m%d')}-{sequence:03d}"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_LINE_ITEMS = 50
MIN_REASON_LENGTH = 10


@dataclass
class Order:
    """Aggregate root for rental orders.

    Use the ``Order.create()`` factory for new orders; it validates dates,
    venue, contact and items.  The plain ``__init__`` is what repositories
    use to rebuild persisted orders.
    """

    id: int | None
    order_number: str | None
    company_id: str
    user_id: str
    items: list[OrderItem]
    event_start: date | None = None
    event_end: date | None = None
    venue: Venue | None = None
    contact: Contact | None = None
    brand: str | None = None
    special_instructions: str | None = None
    fulfillment: FulfillmentTrack = field(default_factory=FulfillmentTrack)
    financial: FinancialTrack = field(default_factory=FinancialTrack)

    # pricing
    pricing_tier_id: str | None = None
    a2_base_price: Money | None = None
    a2_adjusted_price: Money | None = None
    a2_adjustment_reason: str | None = None
    a2_adjusted_by: str | None = None
    a2_adjusted_at: datetime | None = None
    pmg_margin_percent: Decimal | None = None
    pmg_margin_amount: Money | None = None
    pmg_reviewed_by: str | None = None
    pmg_reviewed_at: datetime | None = None
    pmg_review_notes: str | None = None
    final_total_price: Money | None = None
    quote_sent_at: datetime | None = None
    decline_reason: str | None = None

    invoice: Invoice | None = None
    status_history: tuple[StatusHistoryEntry, ...] = ()
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        company_id: str,
        user_id: str,
        items: list[OrderItem],
        event_start: date,
        event_end: date,
        venue: Venue,
        contact: Contact,
        today: date,
        brand: str | None = None,
        special_instructions: str | None = None,
    ) -> Order:
        """Create a new DRAFT order, enforcing all invariants."""
        if not company_id:
            raise ValidationError("Company is required")
        if not user_id:
            raise ValidationError("User is required")
        if not items:
            raise ValidationError("At least one item is required")
        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")
        validate_event_dates(event_start, event_end, today)

        return Order(
            id=None,
            order_number=None,
            company_id=company_id,
            user_id=user_id,
            items=list(items),
            event_start=event_start,
            event_end=event_end,
            venue=venue,
            contact=contact,
            brand=brand or None,
            special_instructions=special_instructions or None,
        )

    # --- Status tracks --------------------------------------------------------

    @property
    def status(self) -> OrderStatus:
        return self.fulfillment.state

    @property
    def financial_status(self) -> FinancialStatus:
        return self.financial.state

    def transition_to(
        self,
        target: OrderStatus,
        updated_by: str,
        notes: str | None = None,
        at: datetime | None = None,
    ) -> OrderStatus:
        """Move the fulfillment track and append a history entry.

        Returns the previous status.  Side effects on other aggregates
        (bookings) are the lifecycle service's job and must happen first.
        """
        self.check_transition(target)
        previous = self.status
        self.fulfillment = self.fulfillment.move_to(target)
        timestamp = at or _utc_now()
        self.status_history = self.status_history + (
            StatusHistoryEntry(
                status=target, updated_by=updated_by, timestamp=timestamp, notes=notes
            ),
        )
        self.updated_at = timestamp
        return previous

    def check_transition(self, target: OrderStatus) -> None:
        """Raise InvalidTransitionError unless ``target`` can be entered now."""
        if not self.fulfillment.can_move_to(target):
            raise InvalidTransitionError(self.status.value, target.value)
        required = FINANCIAL_GATES.get(target)
        if required is not None and not self.financial.has_reached(required):
            raise InvalidTransitionError(
                self.status.value,
                target.value,
                f"financial status must reach {required.value} "
                f"(currently {self.financial_status.value})",
            )

    def move_financial_to(self, target: FinancialStatus, at: datetime | None = None) -> None:
        """Advance the financial track.  Financial moves are not written
        to the status history."""
        self.financial = self.financial.move_to(target)
        self.updated_at = at or _utc_now()

    def require_status(self, expected: OrderStatus, action: str) -> None:
        if self.status != expected:
            raise InvalidTransitionError(
                self.status.value,
                action,
                f"order is not in {expected.value} status",
            )

    # --- Pricing --------------------------------------------------------------

    def record_quote(
        self,
        pricing_tier_id: str | None,
        base_price: Money,
        margin_percent: Decimal,
        margin_amount: Money,
        final_total: Money,
        at: datetime,
    ) -> None:
        self.pricing_tier_id = pricing_tier_id
        self.a2_base_price = base_price
        self.pmg_margin_percent = margin_percent
        self.pmg_margin_amount = margin_amount
        self.final_total_price = final_total
        self.quote_sent_at = at

    def record_adjustment(
        self, adjusted_price: Money, reason: str, adjusted_by: str, at: datetime
    ) -> None:
        if adjusted_price.amount <= 0:
            raise ValidationError("Adjusted price must be greater than 0")
        validate_reason(reason, "Adjustment reason")
        self.a2_adjusted_price = adjusted_price
        self.a2_adjustment_reason = reason.strip()
        self.a2_adjusted_by = adjusted_by
        self.a2_adjusted_at = at

    def record_pmg_review(self, reviewed_by: str, notes: str | None, at: datetime) -> None:
        self.pmg_reviewed_by = reviewed_by
        self.pmg_review_notes = notes or None
        self.pmg_reviewed_at = at

    def record_decline(self, reason: str) -> None:
        validate_reason(reason, "Decline reason")
        self.decline_reason = reason.strip()

    # --- Invoicing ------------------------------------------------------------

    def record_invoice(self, number: str, at: datetime) -> Invoice:
        if self.invoice is not None:
            raise ValidationError(
                f"Order {self.order_number} already has invoice {self.invoice.number}"
            )
        self.invoice = Invoice(number=number, generated_at=at)
        return self.invoice

    def record_payment(self, method: str, reference: str, paid_on: date) -> Invoice:
        if self.invoice is None:
            raise ValidationError("Invoice not generated for this order")
        if self.invoice.paid_at is not None:
            raise ValidationError("Payment already confirmed for this invoice")
        if not method or not method.strip() or not reference or not reference.strip():
            raise ValidationError("Payment method and reference are required")
        self.invoice = replace(
            self.invoice,
            paid_at=paid_on,
            payment_method=method.strip(),
            payment_reference=reference.strip(),
        )
        return self.invoice

    # --- Computed properties --------------------------------------------------

    @property
    def calculated_volume(self) -> Decimal:
        return round_volume(sum((item.total_volume for item in self.items), Decimal("0")))

    @property
    def calculated_weight(self) -> Decimal:
        return round_weight(sum((item.total_weight for item in self.items), Decimal("0")))

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity.value for item in self.items)

    @property
    def display_id(self) -> str:
        return self.order_number or f"#{self.id}"


def validate_event_dates(event_start: date, event_end: date, today: date) -> None:
    if event_start is None or event_end is None:
        raise ValidationError("Event start and end dates are required")
    if event_start < today:
        raise ValidationError("Event start date cannot be in the past")
    if event_end < event_start:
        raise ValidationError("Event end date must be on or after start date")


def validate_reason(reason: str | None, label: str) -> None:
    if not reason or len(reason.strip()) < MIN_REASON_LENGTH:
        raise ValidationError(
            f"{label} is required and must be at least {MIN_REASON_LENGTH} characters"
        )
