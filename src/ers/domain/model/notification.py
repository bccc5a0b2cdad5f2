"""Notification intents raised by order transitions.

The core only decides *which* notification an edge deserves; delivery is
somebody else's problem.
"""

from __future__ import annotations

from enum import Enum

from ers.domain.model.order import OrderStatus


class NotificationType(Enum):
    ORDER_SUBMITTED = "ORDER_SUBMITTED"
    A2_APPROVED_STANDARD = "A2_APPROVED_STANDARD"
    A2_ADJUSTED_PRICING = "A2_ADJUSTED_PRICING"
    QUOTE_SENT = "QUOTE_SENT"
    QUOTE_APPROVED = "QUOTE_APPROVED"
    QUOTE_DECLINED = "QUOTE_DECLINED"
    INVOICE_GENERATED = "INVOICE_GENERATED"
    PAYMENT_CONFIRMED = "PAYMENT_CONFIRMED"
    ORDER_CONFIRMED = "ORDER_CONFIRMED"
    READY_FOR_DELIVERY = "READY_FOR_DELIVERY"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    PICKUP_REMINDER = "PICKUP_REMINDER"
    ORDER_CLOSED = "ORDER_CLOSED"


_S = OrderStatus

# Edges mapped to None are internal steps nobody needs to hear about.
TRANSITION_NOTIFICATIONS: dict[tuple[OrderStatus, OrderStatus], NotificationType | None] = {
    (_S.DRAFT, _S.SUBMITTED): NotificationType.ORDER_SUBMITTED,
    (_S.SUBMITTED, _S.PRICING_REVIEW): None,
    (_S.PRICING_REVIEW, _S.QUOTED): NotificationType.QUOTE_SENT,
    (_S.PRICING_REVIEW, _S.PENDING_APPROVAL): NotificationType.A2_ADJUSTED_PRICING,
    (_S.PENDING_APPROVAL, _S.QUOTED): NotificationType.QUOTE_SENT,
    (_S.QUOTED, _S.CONFIRMED): NotificationType.QUOTE_APPROVED,
    (_S.QUOTED, _S.DECLINED): NotificationType.QUOTE_DECLINED,
    (_S.CONFIRMED, _S.IN_PREPARATION): NotificationType.ORDER_CONFIRMED,
    (_S.IN_PREPARATION, _S.READY_FOR_DELIVERY): NotificationType.READY_FOR_DELIVERY,
    (_S.READY_FOR_DELIVERY, _S.IN_TRANSIT): NotificationType.IN_TRANSIT,
    (_S.IN_TRANSIT, _S.DELIVERED): NotificationType.DELIVERED,
    (_S.DELIVERED, _S.IN_USE): None,
    # pickup reminders are sent by the reminder job instead
    (_S.IN_USE, _S.AWAITING_RETURN): None,
    (_S.AWAITING_RETURN, _S.CLOSED): NotificationType.ORDER_CLOSED,
}


def notification_for_transition(
    from_status: OrderStatus, to_status: OrderStatus
) -> NotificationType | None:
    return TRANSITION_NOTIFICATIONS.get((from_status, to_status))
