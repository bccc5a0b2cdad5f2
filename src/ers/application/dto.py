"""Input and output records of the application handlers.

Outputs are already formatted for display: money as two-decimal strings,
volumes with three decimals, dates in ISO form.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class CartItemSpec:
    """Input: one cart line (asset + quantity)."""

    asset_id: str
    quantity: int


@dataclass(frozen=True)
class CartSubmission:
    """Input: everything the client filled in at checkout."""

    items: list[CartItemSpec]
    event_start: date
    event_end: date
    venue_name: str
    venue_country: str
    venue_city: str
    venue_address: str
    contact_name: str
    contact_email: str
    contact_phone: str
    venue_access_notes: str | None = None
    brand: str | None = None
    special_instructions: str | None = None


@dataclass(frozen=True)
class SubmissionResultDTO:
    order_id: int
    order_number: str
    status: str
    financial_status: str
    company_name: str
    calculated_volume: str
    item_count: int


@dataclass(frozen=True)
class OrderItemDTO:
    asset_name: str
    quantity: int
    total_volume: str
    total_weight: str
    condition: str


@dataclass(frozen=True)
class StatusHistoryDTO:
    status: str
    updated_by: str
    timestamp: str
    notes: str | None


@dataclass(frozen=True)
class PricingDTO:
    """Output: pricing fields as displayed, ``None`` where not set yet."""

    pricing_tier_id: str | None
    a2_base_price: str | None
    a2_adjusted_price: str | None
    a2_adjustment_reason: str | None
    pmg_margin_percent: str | None
    pmg_margin_amount: str | None
    final_total_price: str | None
    quote_sent_at: str | None


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    order_number: str
    company_id: str
    status: str
    financial_status: str
    event_start: str | None
    event_end: str | None
    venue: str | None
    items: list[OrderItemDTO]
    calculated_volume: str
    calculated_weight: str
    pricing: PricingDTO
    history: list[StatusHistoryDTO]
    invoice_number: str | None
    created_at: str


@dataclass(frozen=True)
class StandardPricingDTO:
    tier_found: bool
    pricing_tier_id: str | None
    a2_base_price: str | None
    pmg_margin_percent: str
    pmg_margin_amount: str | None
    final_total_price: str | None


@dataclass(frozen=True)
class PricingDetailsDTO:
    """Output: what an operator sees when reviewing an order's price."""

    order_number: str
    status: str
    calculated_volume: str
    venue_country: str | None
    venue_city: str | None
    company_name: str
    standard: StandardPricingDTO
    current: PricingDTO


@dataclass(frozen=True)
class EstimateDTO:
    volume: str
    base_price: str | None
    margin_percent: str
    margin_amount: str | None
    total: str | None
    complete: bool
    unknown_assets: list[str]


@dataclass(frozen=True)
class QuoteDTO:
    """Output: prices attached by a pricing step."""

    order_number: str
    status: str
    financial_status: str
    a2_base_price: str | None
    pmg_margin_percent: str | None
    pmg_margin_amount: str | None
    final_total_price: str | None
