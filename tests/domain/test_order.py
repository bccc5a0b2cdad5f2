"""Unit tests for the Order aggregate and its two status tracks."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from ers.domain.exceptions import InvalidTransitionError, ValidationError
from ers.domain.model.order import (
    STATUS_TRANSITIONS,
    Contact,
    FinancialStatus,
    FinancialTrack,
    FulfillmentTrack,
    Order,
    OrderItem,
    OrderStatus,
    Venue,
    format_order_number,
    is_valid_financial_transition,
    is_valid_transition,
)
from ers.domain.model.value_objects import Money
from tests.fakes import FIXED_NOW, make_asset, make_order

AT = datetime(2025, 6, 2, 12, 0, tzinfo=timezone.utc)


def _walk(order: Order, *statuses: OrderStatus) -> None:
    for status in statuses:
        order.transition_to(status, updated_by="ops", at=AT)


# ── Transition tables ────────────────────────────────────────────────────────


class TestTransitionTables:

    def test_happy_path_edges_valid(self):
        path = [
            "DRAFT", "SUBMITTED", "PRICING_REVIEW", "QUOTED", "CONFIRMED", "IN_PREPARATION",
            "READY_FOR_DELIVERY", "IN_TRANSIT", "DELIVERED", "IN_USE", "AWAITING_RETURN", "CLOSED",
        ]
        for src, dst in zip(path, path[1:]):
            assert is_valid_transition(src, dst), (src, dst)

    def test_skipping_a_step_invalid(self):
        assert not is_valid_transition(OrderStatus.QUOTED, OrderStatus.IN_PREPARATION)

    @pytest.mark.parametrize("terminal", [OrderStatus.CLOSED, OrderStatus.DECLINED])
    def test_terminal_states_have_no_exits(self, terminal):
        assert all(not is_valid_transition(terminal, target) for target in OrderStatus)

    def test_unknown_names_invalid_not_error(self):
        assert not is_valid_transition("DRAFT", "SHIPPED")
        assert not is_valid_transition("NOPE", "SUBMITTED")
        assert not is_valid_financial_transition("PAID", "REFUNDED")

    def test_paid_has_no_exits(self):
        assert all(
            not is_valid_financial_transition(FinancialStatus.PAID, t) for t in FinancialStatus
        )

    def test_quote_sent_can_fall_back_to_pending_quote(self):
        assert is_valid_financial_transition("QUOTE_SENT", "PENDING_QUOTE")

    def test_every_state_listed(self):
        assert set(STATUS_TRANSITIONS) == set(OrderStatus)


class TestTracks:

    def test_fulfillment_move_returns_new_track(self):
        track = FulfillmentTrack()
        moved = track.move_to(OrderStatus.SUBMITTED)
        assert moved.state == OrderStatus.SUBMITTED
        assert track.state == OrderStatus.DRAFT

    def test_invalid_move_raises_with_states(self):
        with pytest.raises(InvalidTransitionError) as info:
            FulfillmentTrack().move_to(OrderStatus.CLOSED)
        assert info.value.current == "DRAFT"
        assert info.value.requested == "CLOSED"

    def test_financial_has_reached(self):
        track = FinancialTrack(FinancialStatus.INVOICED)
        assert track.has_reached(FinancialStatus.QUOTE_ACCEPTED)
        assert not track.has_reached(FinancialStatus.PAID)


# ── Creation ─────────────────────────────────────────────────────────────────


class TestOrderCreate:

    def test_new_order_is_draft_pending_quote(self):
        order = make_order([(make_asset(), 2)])
        assert order.status == OrderStatus.DRAFT
        assert order.financial_status == FinancialStatus.PENDING_QUOTE
        assert order.status_history == ()

    def test_no_items_rejected(self):
        with pytest.raises(ValidationError, match="At least one item"):
            make_order([])

    def test_past_start_rejected(self):
        with pytest.raises(ValidationError, match="cannot be in the past"):
            make_order([(make_asset(), 1)], event_start=date(2025, 5, 31), event_end=date(2025, 6, 2))

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError, match="on or after start"):
            make_order([(make_asset(), 1)], event_start=date(2025, 6, 10), event_end=date(2025, 6, 9))

    def test_totals_from_item_snapshots(self):
        a = make_asset("a1", volume="2.5", weight="10")
        b = make_asset("b1", volume="0.125", weight="1.5")
        order = make_order([(a, 2), (b, 3)])
        assert order.calculated_volume == Decimal("5.375")
        assert order.calculated_weight == Decimal("24.50")
        assert order.total_quantity == 5

    def test_item_snapshot_ignores_later_asset_edits(self):
        asset = make_asset(volume="2.5")
        item = OrderItem.from_asset(asset, 2)
        asset.volume = Decimal("9")
        assert item.total_volume == Decimal("5.000")

    def test_order_number_format(self):
        assert format_order_number(date(2025, 6, 1), 7) == "ORD-20250601-007"


class TestVenueAndContact:

    def test_blank_venue_field_rejected(self):
        with pytest.raises(ValidationError, match="All venue information"):
            Venue("Hall", "UAE", " ", "1 Road")

    def test_blank_contact_field_rejected(self):
        with pytest.raises(ValidationError, match="All contact information"):
            Contact("", "a@b.co", "123")

    @pytest.mark.parametrize("email", ["no-at-sign", "a@b", "a b@c.d"])
    def test_bad_email_rejected(self, email):
        with pytest.raises(ValidationError, match="Invalid email format"):
            Contact("Dana", email, "123")


# ── Transitions ──────────────────────────────────────────────────────────────


class TestOrderTransitions:

    def test_transition_appends_history(self):
        order = make_order([(make_asset(), 1)])
        previous = order.transition_to(OrderStatus.SUBMITTED, "client-1", "hello", AT)
        assert previous == OrderStatus.DRAFT
        entry = order.status_history[-1]
        assert (entry.status, entry.updated_by, entry.notes, entry.timestamp) == (
            OrderStatus.SUBMITTED, "client-1", "hello", AT,
        )

    def test_history_entries_never_rewritten(self):
        order = make_order([(make_asset(), 1)])
        _walk(order, OrderStatus.SUBMITTED)
        first = order.status_history[0]
        _walk(order, OrderStatus.PRICING_REVIEW)
        assert order.status_history[0] is first
        assert len(order.status_history) == 2

    def test_invalid_transition_leaves_order_untouched(self):
        order = make_order([(make_asset(), 1)])
        with pytest.raises(InvalidTransitionError, match="from DRAFT to QUOTED"):
            order.transition_to(OrderStatus.QUOTED, "ops")
        assert order.status == OrderStatus.DRAFT
        assert order.status_history == ()

    def test_confirmed_needs_quote_sent(self):
        order = make_order([(make_asset(), 1)])
        _walk(order, OrderStatus.SUBMITTED, OrderStatus.PRICING_REVIEW, OrderStatus.QUOTED)
        with pytest.raises(InvalidTransitionError, match="financial status must reach QUOTE_SENT"):
            order.check_transition(OrderStatus.CONFIRMED)
        order.move_financial_to(FinancialStatus.QUOTE_SENT)
        order.check_transition(OrderStatus.CONFIRMED)

    def test_require_status(self):
        order = make_order([(make_asset(), 1)])
        with pytest.raises(InvalidTransitionError, match="not in QUOTED status"):
            order.require_status(OrderStatus.QUOTED, "approve quote")


class TestPricingRecords:

    def test_adjustment_needs_positive_price(self):
        order = make_order([(make_asset(), 1)])
        with pytest.raises(ValidationError, match="greater than 0"):
            order.record_adjustment(Money.of("0"), "Crane access needed", "a2", AT)

    def test_adjustment_reason_min_length(self):
        order = make_order([(make_asset(), 1)])
        with pytest.raises(ValidationError, match="at least 10 characters"):
            order.record_adjustment(Money.of("900"), "too short", "a2", AT)

    def test_decline_reason_stripped(self):
        order = make_order([(make_asset(), 1)])
        order.record_decline("  Budget was cut this quarter  ")
        assert order.decline_reason == "Budget was cut this quarter"


class TestInvoiceRecords:

    def test_recorders_return_the_stored_invoice(self):
        order = make_order([(make_asset(), 1)])
        issued = order.record_invoice("INV-20250601-001", AT)
        assert issued is order.invoice

        paid = order.record_payment(" bank transfer ", " TX-1 ", FIXED_NOW.date())
        assert paid is order.invoice
        assert (paid.number, paid.payment_method, paid.payment_reference) == (
            "INV-20250601-001", "bank transfer", "TX-1"
        )

    def test_payment_without_invoice_rejected(self):
        order = make_order([(make_asset(), 1)])
        with pytest.raises(ValidationError, match="Invoice not generated"):
            order.record_payment("bank transfer", "TX-1", FIXED_NOW.date())

    def test_double_payment_rejected(self):
        order = make_order([(make_asset(), 1)])
        order.record_invoice("INV-20250601-001", AT)
        order.record_payment("bank transfer", "TX-1", FIXED_NOW.date())
        with pytest.raises(ValidationError, match="already confirmed"):
            order.record_payment("bank transfer", "TX-2", FIXED_NOW.date())
        assert order.invoice.payment_reference == "TX-1"

    def test_second_invoice_rejected(self):
        order = make_order([(make_asset(), 1)])
        order.record_invoice("INV-20250601-001", AT)
        with pytest.raises(ValidationError, match="already has invoice"):
            order.record_invoice("INV-20250601-002", AT)
