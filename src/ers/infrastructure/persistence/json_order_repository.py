"""JSON-document-backed implementation of OrderRepository."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from ers.domain.model.asset import AssetCondition
from ers.domain.model.order import (
    Contact,
    FinancialStatus,
    FinancialTrack,
    FulfillmentTrack,
    Invoice,
    Order,
    OrderItem,
    OrderStatus,
    StatusHistoryEntry,
    Venue,
    format_order_number,
)
from ers.domain.model.value_objects import Quantity
from ers.domain.repository.order_repository import OrderRepository
from ers.infrastructure.persistence.serialization import (
    date_from_raw,
    date_to_raw,
    datetime_from_raw,
    decimal_from_raw,
    decimal_to_raw,
    money_from_raw,
    money_to_raw,
)


def _iso(value: datetime | None) -> str | None:
    return None if value is None else value.isoformat()


class JsonOrderRepository(OrderRepository):

    def __init__(self, document: dict[str, Any]) -> None:
        self._rows: list[dict] = document["orders"]
        self._sequences: dict[str, int] = document["sequences"]

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> int:
        if not self._rows:
            return 1
        return max(o["id"] for o in self._rows) + 1

    def next_order_number(self, day: date) -> str:
        return format_order_number(day, self._next_in_sequence(f"ORD-{day:%Y%m%d}"))

    def next_invoice_number(self, day: date) -> str:
        return f"INV-{day:%Y%m%d}-{self._next_in_sequence(f'INV-{day:%Y%m%d}'):03d}"

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._rows:
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def list_by_status(self, *statuses: OrderStatus) -> list[Order]:
        wanted = {s.value for s in statuses}
        return [self._to_domain(raw) for raw in self._rows if raw["status"] in wanted]

    def references_pricing_tier(self, tier_id: str) -> bool:
        return any(raw.get("pricing_tier_id") == tier_id for raw in self._rows)

    def save(self, order: Order) -> None:
        if order.id is None:
            order.id = self.next_id()

        # Upsert: replace if exists, otherwise append
        for i, raw in enumerate(self._rows):
            if raw["id"] == order.id:
                self._rows[i] = self._to_raw(order)
                return
        self._rows.append(self._to_raw(order))

    def _next_in_sequence(self, key: str) -> int:
        value = self._sequences.get(key, 0) + 1
        self._sequences[key] = value
        return value

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        venue = order.venue
        contact = order.contact
        invoice = order.invoice
        return {
            "id": order.id,
            "order_number": order.order_number,
            "company_id": order.company_id,
            "user_id": order.user_id,
            "status": order.status.value,
            "financial_status": order.financial_status.value,
            "event_start": date_to_raw(order.event_start),
            "event_end": date_to_raw(order.event_end),
            "venue": None
            if venue is None
            else {
                "name": venue.name,
                "country": venue.country,
                "city": venue.city,
                "address": venue.address,
                "access_notes": venue.access_notes,
            },
            "contact": None
            if contact is None
            else {"name": contact.name, "email": contact.email, "phone": contact.phone},
            "brand": order.brand,
            "special_instructions": order.special_instructions,
            "items": [
                {
                    "asset_id": item.asset_id,
                    "asset_name": item.asset_name,
                    "quantity": item.quantity.value,
                    "volume": str(item.volume),
                    "weight": str(item.weight),
                    "condition": item.condition.value,
                    "refurb_days": item.refurb_days,
                    "handling_tags": list(item.handling_tags),
                }
                for item in order.items
            ],
            "pricing": {
                "a2_base_price": money_to_raw(order.a2_base_price),
                "a2_adjusted_price": money_to_raw(order.a2_adjusted_price),
                "a2_adjustment_reason": order.a2_adjustment_reason,
                "a2_adjusted_by": order.a2_adjusted_by,
                "a2_adjusted_at": _iso(order.a2_adjusted_at),
                "pmg_margin_percent": decimal_to_raw(order.pmg_margin_percent),
                "pmg_margin_amount": money_to_raw(order.pmg_margin_amount),
                "pmg_reviewed_by": order.pmg_reviewed_by,
                "pmg_reviewed_at": _iso(order.pmg_reviewed_at),
                "pmg_review_notes": order.pmg_review_notes,
                "final_total_price": money_to_raw(order.final_total_price),
                "quote_sent_at": _iso(order.quote_sent_at),
            },
            "pricing_tier_id": order.pricing_tier_id,
            "decline_reason": order.decline_reason,
            "invoice": None
            if invoice is None
            else {
                "number": invoice.number,
                "generated_at": invoice.generated_at.isoformat(),
                "paid_at": date_to_raw(invoice.paid_at),
                "payment_method": invoice.payment_method,
                "payment_reference": invoice.payment_reference,
            },
            "status_history": [
                {
                    "status": entry.status.value,
                    "updated_by": entry.updated_by,
                    "timestamp": entry.timestamp.isoformat(),
                    "notes": entry.notes,
                }
                for entry in order.status_history
            ],
            "created_at": order.created_at.isoformat(),
            "updated_at": order.updated_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        items = [
            OrderItem(
                asset_id=i["asset_id"],
                asset_name=i["asset_name"],
                quantity=Quantity(i["quantity"]),
                volume=Decimal(i["volume"]),
                weight=Decimal(i["weight"]),
                condition=AssetCondition(i.get("condition", "GREEN")),
                refurb_days=i.get("refurb_days", 0),
                handling_tags=tuple(i.get("handling_tags", ())),
            )
            for i in raw["items"]
        ]
        venue = raw.get("venue")
        contact = raw.get("contact")
        invoice = raw.get("invoice")
        pricing = raw.get("pricing", {})
        return Order(
            id=raw["id"],
            order_number=raw.get("order_number"),
            company_id=raw["company_id"],
            user_id=raw["user_id"],
            items=items,
            event_start=date_from_raw(raw.get("event_start")),
            event_end=date_from_raw(raw.get("event_end")),
            venue=None if venue is None else Venue(**venue),
            contact=None if contact is None else Contact(**contact),
            brand=raw.get("brand"),
            special_instructions=raw.get("special_instructions"),
            fulfillment=FulfillmentTrack(OrderStatus(raw["status"])),
            financial=FinancialTrack(FinancialStatus(raw["financial_status"])),
            pricing_tier_id=raw.get("pricing_tier_id"),
            a2_base_price=money_from_raw(pricing.get("a2_base_price")),
            a2_adjusted_price=money_from_raw(pricing.get("a2_adjusted_price")),
            a2_adjustment_reason=pricing.get("a2_adjustment_reason"),
            a2_adjusted_by=pricing.get("a2_adjusted_by"),
            a2_adjusted_at=datetime_from_raw(pricing.get("a2_adjusted_at")),
            pmg_margin_percent=decimal_from_raw(pricing.get("pmg_margin_percent")),
            pmg_margin_amount=money_from_raw(pricing.get("pmg_margin_amount")),
            pmg_reviewed_by=pricing.get("pmg_reviewed_by"),
            pmg_reviewed_at=datetime_from_raw(pricing.get("pmg_reviewed_at")),
            pmg_review_notes=pricing.get("pmg_review_notes"),
            final_total_price=money_from_raw(pricing.get("final_total_price")),
            quote_sent_at=datetime_from_raw(pricing.get("quote_sent_at")),
            decline_reason=raw.get("decline_reason"),
            invoice=None
            if invoice is None
            else Invoice(
                number=invoice["number"],
                generated_at=datetime.fromisoformat(invoice["generated_at"]),
                paid_at=date_from_raw(invoice.get("paid_at")),
                payment_method=invoice.get("payment_method"),
                payment_reference=invoice.get("payment_reference"),
            ),
            status_history=tuple(
                StatusHistoryEntry(
                    status=OrderStatus(h["status"]),
                    updated_by=h["updated_by"],
                    timestamp=datetime.fromisoformat(h["timestamp"]),
                    notes=h.get("notes"),
                )
                for h in raw.get("status_history", [])
            ),
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
        )
