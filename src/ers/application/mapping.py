"""Domain -> DTO mapping shared by the query and command handlers."""

from __future__ import annotations

from decimal import Decimal

from ers.application.dto import (
    OrderDTO,
    OrderItemDTO,
    PricingDTO,
    QuoteDTO,
    StatusHistoryDTO,
)
from ers.domain.model.order import Order
from ers.domain.model.value_objects import Money


def money_str(value: Money | None) -> str | None:
    return None if value is None else f"{value.amount:.2f}"


def percent_str(value: Decimal | None) -> str | None:
    return None if value is None else f"{value:.2f}"


def to_pricing_dto(order: Order) -> PricingDTO:
    return PricingDTO(
        pricing_tier_id=order.pricing_tier_id,
        a2_base_price=money_str(order.a2_base_price),
        a2_adjusted_price=money_str(order.a2_adjusted_price),
        a2_adjustment_reason=order.a2_adjustment_reason,
        pmg_margin_percent=percent_str(order.pmg_margin_percent),
        pmg_margin_amount=money_str(order.pmg_margin_amount),
        final_total_price=money_str(order.final_total_price),
        quote_sent_at=order.quote_sent_at.isoformat() if order.quote_sent_at else None,
    )


def to_quote_dto(order: Order) -> QuoteDTO:
    return QuoteDTO(
        order_number=order.display_id,
        status=order.status.value,
        financial_status=order.financial_status.value,
        a2_base_price=money_str(order.a2_base_price),
        pmg_margin_percent=percent_str(order.pmg_margin_percent),
        pmg_margin_amount=money_str(order.pmg_margin_amount),
        final_total_price=money_str(order.final_total_price),
    )


def to_order_dto(order: Order) -> OrderDTO:
    venue = order.venue
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        order_number=order.display_id,
        company_id=order.company_id,
        status=order.status.value,
        financial_status=order.financial_status.value,
        event_start=order.event_start.isoformat() if order.event_start else None,
        event_end=order.event_end.isoformat() if order.event_end else None,
        venue=f"{venue.name}, {venue.city}, {venue.country}" if venue else None,
        items=[
            OrderItemDTO(
                asset_name=item.asset_name,
                quantity=item.quantity.value,
                total_volume=str(item.total_volume),
                total_weight=str(item.total_weight),
                condition=item.condition.value,
            )
            for item in order.items
        ],
        calculated_volume=str(order.calculated_volume),
        calculated_weight=str(order.calculated_weight),
        pricing=to_pricing_dto(order),
        history=[
            StatusHistoryDTO(
                status=entry.status.value,
                updated_by=entry.updated_by,
                timestamp=entry.timestamp.strftime("%Y-%m-%d %H:%M UTC"),
                notes=entry.notes,
            )
            for entry in order.status_history
        ],
        invoice_number=order.invoice.number if order.invoice else None,
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
    )
