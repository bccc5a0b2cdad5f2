"""Domain service: Order Lifecycle.

Coordinates a status change with the work it implies on other
aggregates:

    QUOTED -> CONFIRMED          book every line item first; the quote is
                                 accepted on the financial track
    any -> CLOSED / DECLINED     release the order's bookings
    PRICING_REVIEW -> QUOTED     attach the standard tier price
    PRICING_REVIEW -> PENDING_APPROVAL
                                 attach the adjusted price and its reason
    PENDING_APPROVAL -> QUOTED   attach the approved base price and margin

Side effects happen before the status moves.  The caller's unit of work
is what makes the pair all-or-nothing: if booking fails, nothing is
committed and the order stays where it was.

Every method returns the notification intents the change produced; the
caller dispatches them after committing.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal

from ers.domain.exceptions import InvalidTransitionError, ValidationError
from ers.domain.model.company import validate_margin_percent
from ers.domain.model.notification import NotificationType, notification_for_transition
from ers.domain.model.order import FinancialStatus, Order, OrderStatus
from ers.domain.model.value_objects import Money
from ers.domain.service.availability_service import AvailabilityService
from ers.domain.service.pricing_service import StandardPricing, apply_margin

logger = logging.getLogger(__name__)

Intent = tuple[NotificationType, int]

_RELEASING_STATES = (OrderStatus.CLOSED, OrderStatus.DECLINED)

# Edges that carry a price; only the pricing methods below may take them.
_PRICING_EDGES = {
    (OrderStatus.PRICING_REVIEW, OrderStatus.QUOTED): "approve_standard_pricing",
    (OrderStatus.PRICING_REVIEW, OrderStatus.PENDING_APPROVAL): "adjust_pricing",
    (OrderStatus.PENDING_APPROVAL, OrderStatus.QUOTED): "approve_adjusted_pricing",
}


class OrderLifecycleService:

    def __init__(self, availability: AvailabilityService) -> None:
        self._availability = availability

    def transition(
        self,
        order: Order,
        target: OrderStatus,
        updated_by: str,
        notes: str | None = None,
        at: datetime | None = None,
    ) -> list[Intent]:
        """Apply one fulfillment transition with its side effects.

        Pricing edges are refused here: they go through the pricing methods,
        which attach the price before the status moves.
        """
        use_case = _PRICING_EDGES.get((order.status, target))
        if use_case is not None:
            raise InvalidTransitionError(
                order.status.value, target.value, f"use {use_case} to attach pricing"
            )
        return self._apply(order, target, updated_by, notes, at)

    def _apply(
        self,
        order: Order,
        target: OrderStatus,
        updated_by: str,
        notes: str | None,
        at: datetime | None,
    ) -> list[Intent]:
        at = at or datetime.now(timezone.utc)
        order.check_transition(target)

        if target == OrderStatus.CONFIRMED:
            self._availability.create_bookings_for_order(order)
        elif target in _RELEASING_STATES and order.id is not None:
            self._availability.release_bookings_for_order(order.id)

        previous = order.transition_to(target, updated_by=updated_by, notes=notes, at=at)

        if target == OrderStatus.CONFIRMED:
            order.move_financial_to(FinancialStatus.QUOTE_ACCEPTED, at)

        logger.info(
            "Order %s: %s -> %s by %s", order.display_id, previous.value, target.value, updated_by
        )
        notification = notification_for_transition(previous, target)
        return self._intents(order, notification)

    # --- Pricing paths --------------------------------------------------------

    def approve_standard_pricing(
        self,
        order: Order,
        pricing: StandardPricing,
        updated_by: str,
        notes: str | None = None,
        at: datetime | None = None,
    ) -> list[Intent]:
        """Accept the tier price as-is; the quote goes straight to the client."""
        at = at or datetime.now(timezone.utc)
        order.require_status(OrderStatus.PRICING_REVIEW, "approve standard pricing")
        if not pricing.tier_found:
            raise ValidationError(
                "No pricing tier found for this order. Please adjust pricing manually."
            )

        order.record_quote(
            pricing_tier_id=pricing.pricing_tier_id,
            base_price=pricing.a2_base_price,
            margin_percent=pricing.pmg_margin_percent,
            margin_amount=pricing.pmg_margin_amount,
            final_total=pricing.final_total_price,
            at=at,
        )
        intents = self._apply(
            order,
            OrderStatus.QUOTED,
            updated_by,
            notes or "Standard pricing approved by A2",
            at,
        )
        order.move_financial_to(FinancialStatus.QUOTE_SENT, at)
        return [(NotificationType.A2_APPROVED_STANDARD, order.id)] + intents

    def adjust_pricing(
        self,
        order: Order,
        adjusted_price: Money,
        reason: str,
        updated_by: str,
        at: datetime | None = None,
    ) -> list[Intent]:
        """Override the tier price; a second approver must sign it off."""
        at = at or datetime.now(timezone.utc)
        order.require_status(OrderStatus.PRICING_REVIEW, "adjust pricing")
        order.record_adjustment(adjusted_price, reason, updated_by, at)
        return self._apply(
            order,
            OrderStatus.PENDING_APPROVAL,
            updated_by,
            f"A2 adjusted pricing: {order.a2_adjustment_reason}",
            at,
        )

    def approve_adjusted_pricing(
        self,
        order: Order,
        base_price: Money,
        margin_percent: Decimal,
        updated_by: str,
        notes: str | None = None,
        at: datetime | None = None,
    ) -> list[Intent]:
        """Second approval of an adjusted price; sets the final quote."""
        at = at or datetime.now(timezone.utc)
        order.require_status(OrderStatus.PENDING_APPROVAL, "approve adjusted pricing")
        if base_price.amount <= 0:
            raise ValidationError("A2 base price must be greater than 0")
        validate_margin_percent(margin_percent)
        if order.a2_adjusted_by is not None and order.a2_adjusted_by == updated_by:
            raise ValidationError("Adjusted pricing must be approved by a different user")

        margin_amount, final_total = apply_margin(base_price, margin_percent)
        order.record_quote(
            pricing_tier_id=order.pricing_tier_id,
            base_price=base_price,
            margin_percent=margin_percent,
            margin_amount=margin_amount,
            final_total=final_total,
            at=at,
        )
        order.record_pmg_review(updated_by, notes, at)
        intents = self._apply(
            order,
            OrderStatus.QUOTED,
            updated_by,
            notes or "PMG approved adjusted pricing",
            at,
        )
        order.move_financial_to(FinancialStatus.QUOTE_SENT, at)
        return intents

    @staticmethod
    def _intents(order: Order, notification: NotificationType | None) -> list[Intent]:
        if notification is None or order.id is None:
            return []
        return [(notification, order.id)]
