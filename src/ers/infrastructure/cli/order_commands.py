"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from ers.application.adjust_pricing import A2AdjustPricingHandler
from ers.application.approve_standard_pricing import A2ApproveStandardPricingHandler
from ers.application.client_quote import ClientApproveQuoteHandler, ClientDeclineQuoteHandler
from ers.application.dto import CartItemSpec, CartSubmission, OrderDTO, QuoteDTO
from ers.application.estimate_order import EstimateOrderHandler
from ers.application.invoicing import ConfirmPaymentHandler, GenerateInvoiceHandler, InvoiceDTO
from ers.application.pmg_approve_pricing import PmgApprovePricingHandler
from ers.application.pricing_details import GetPricingDetailsHandler
from ers.application.progress_order import ProgressOrderStatusHandler
from ers.application.show_order import ShowOrderHandler
from ers.application.submit_order import SubmitOrderFromCartHandler
from ers.domain.exceptions import DomainException
from ers.infrastructure.bootstrap import buffer_policy, dispatcher, unit_of_work

DATE = click.DateTime(formats=["%Y-%m-%d"])


def _parse_items(raw: str) -> list[CartItemSpec]:
    """Parse 'asset-1:3,asset-2:5' into CartItemSpec list."""
    specs: list[CartItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'AssetId:Quantity'."
            )
        asset_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for asset '{asset_id}'."
            )
        specs.append(CartItemSpec(asset_id=asset_id.strip(), quantity=qty))
    return specs


def _display_quote(dto: QuoteDTO) -> None:
    click.echo(f"Order {dto.order_number}  (status={dto.status}, financial={dto.financial_status})")
    if dto.final_total_price is not None:
        click.echo(f"  Base price:   {dto.a2_base_price}")
        click.echo(f"  Margin:       {dto.pmg_margin_amount} ({dto.pmg_margin_percent}%)")
        click.echo(f"  Final total:  {dto.final_total_price}")


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.order_number}  (status={dto.status}, financial={dto.financial_status})")
    click.echo(f"Company: {dto.company_id}")
    click.echo(f"Event:   {dto.event_start} .. {dto.event_end}")
    click.echo(f"Venue:   {dto.venue}")
    click.echo(f"Created: {dto.created_at}")
    click.echo()

    click.echo(f"  {'Asset':<24} {'Qty':>5} {'Volume':>10} {'Weight':>10}")
    click.echo(f"  {'-'*52}")
    for item in dto.items:
        click.echo(
            f"  {item.asset_name:<24} {item.quantity:>5} {item.total_volume:>10} {item.total_weight:>10}"
        )
    click.echo(f"  {'-'*52}")
    click.echo(f"  {'Total':<30} {dto.calculated_volume:>10} {dto.calculated_weight:>10}")

    pricing = dto.pricing
    if pricing.final_total_price is not None:
        click.echo()
        click.echo(f"Quote: {pricing.final_total_price} "
                   f"(base {pricing.a2_base_price} + margin {pricing.pmg_margin_amount})")
    elif pricing.a2_adjusted_price is not None:
        click.echo()
        click.echo(f"Adjusted price {pricing.a2_adjusted_price} awaiting approval: "
                   f"{pricing.a2_adjustment_reason}")
    if dto.invoice_number:
        click.echo(f"Invoice: {dto.invoice_number}")

    click.echo()
    click.echo("History:")
    for entry in dto.history:
        note = f"  {entry.notes}" if entry.notes else ""
        click.echo(f"  {entry.timestamp}  {entry.status:<18} {entry.updated_by}{note}")


def _display_invoice(dto: InvoiceDTO) -> None:
    click.echo(f"Invoice {dto.invoice_number} for order {dto.order_number}")
    click.echo(f"  Amount:    {dto.amount}")
    click.echo(f"  Status:    {dto.financial_status}")
    if dto.paid_at:
        click.echo(f"  Paid:      {dto.paid_at} via {dto.payment_method} ({dto.payment_reference})")


@click.command("submit")
@click.option("--user", "user_id", required=True, help="Submitting user.")
@click.option("--company", "company_id", required=True, help="Client company ID.")
@click.option("--items", required=True, help="Items as 'AssetId:Qty,AssetId:Qty'.")
@click.option("--start", "event_start", required=True, type=DATE, help="Event start (YYYY-MM-DD).")
@click.option("--end", "event_end", required=True, type=DATE, help="Event end (YYYY-MM-DD).")
@click.option("--venue-name", required=True)
@click.option("--venue-country", required=True)
@click.option("--venue-city", required=True)
@click.option("--venue-address", required=True)
@click.option("--access-notes", default=None, help="Venue access notes.")
@click.option("--contact-name", required=True)
@click.option("--contact-email", required=True)
@click.option("--contact-phone", required=True)
@click.option("--brand", default=None)
@click.option("--instructions", default=None, help="Special instructions.")
def order_submit(
    user_id, company_id, items, event_start, event_end, venue_name, venue_country,
    venue_city, venue_address, access_notes, contact_name, contact_email, contact_phone,
    brand, instructions,
) -> None:
    """Submit a cart as a new order."""
    request = CartSubmission(
        items=_parse_items(items),
        event_start=event_start.date(),
        event_end=event_end.date(),
        venue_name=venue_name,
        venue_country=venue_country,
        venue_city=venue_city,
        venue_address=venue_address,
        venue_access_notes=access_notes,
        contact_name=contact_name,
        contact_email=contact_email,
        contact_phone=contact_phone,
        brand=brand,
        special_instructions=instructions,
    )
    handler = SubmitOrderFromCartHandler(unit_of_work(), dispatcher(), buffer_policy())

    try:
        dto = handler.handle(user_id, company_id, request)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} submitted  (id={dto.order_id}, status={dto.status})")
    click.echo(f"Company: {dto.company_name}")
    click.echo(f"Items: {dto.item_count}  Volume: {dto.calculated_volume} m³")


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(unit_of_work())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("pricing")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
def order_pricing(order_id: int) -> None:
    """Compare the standard price with the order's current pricing."""
    handler = GetPricingDetailsHandler(unit_of_work())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number}  (status={dto.status})")
    click.echo(f"Company: {dto.company_name}")
    click.echo(f"Venue:   {dto.venue_city}, {dto.venue_country}  Volume: {dto.calculated_volume} m³")
    standard = dto.standard
    if standard.tier_found:
        click.echo(
            f"Standard: tier {standard.pricing_tier_id}, base {standard.a2_base_price} + "
            f"{standard.pmg_margin_percent}% = {standard.final_total_price}"
        )
    else:
        click.echo("Standard: no matching pricing tier, adjust pricing manually")
    if dto.current.final_total_price is not None:
        click.echo(f"Current quote: {dto.current.final_total_price}")


@click.command("estimate")
@click.option("--company", "company_id", required=True, help="Client company ID.")
@click.option("--items", required=True, help="Items as 'AssetId:Qty,AssetId:Qty'.")
@click.option("--country", default=None, help="Venue country.")
@click.option("--city", default=None, help="Venue city.")
def order_estimate(company_id: str, items: str, country: str | None, city: str | None) -> None:
    """Estimate the price of a cart before submitting it."""
    handler = EstimateOrderHandler(unit_of_work())

    try:
        dto = handler.handle(company_id, _parse_items(items), country, city)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if dto is None:
        click.echo("No estimate available (unknown company or venue location).")
        return
    click.echo(f"Volume: {dto.volume} m³")
    if dto.total is None:
        click.echo("No pricing tier covers this volume; the order will be priced manually.")
    else:
        click.echo(f"Estimate: {dto.total} (base {dto.base_price} + {dto.margin_percent}%)")
    if dto.unknown_assets:
        click.echo(f"Skipped unknown assets: {', '.join(dto.unknown_assets)}")


@click.command("approve-standard")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--user", "user_id", required=True, help="Approving A2 user.")
@click.option("--notes", default=None)
def order_approve_standard(order_id: int, user_id: str, notes: str | None) -> None:
    """Approve the standard tier price and send the quote."""
    handler = A2ApproveStandardPricingHandler(unit_of_work(), dispatcher(), buffer_policy())

    try:
        dto = handler.handle(order_id, user_id, notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_quote(dto)


@click.command("adjust")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--user", "user_id", required=True, help="Adjusting A2 user.")
@click.option("--price", required=True, help="Adjusted base price.")
@click.option("--reason", required=True, help="Why the price was adjusted.")
def order_adjust(order_id: int, user_id: str, price: str, reason: str) -> None:
    """Adjust the price; a PMG reviewer must approve it."""
    handler = A2AdjustPricingHandler(unit_of_work(), dispatcher(), buffer_policy())

    try:
        dto = handler.handle(order_id, user_id, price, reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} sent for PMG approval  (status={dto.status})")


@click.command("pmg-approve")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--user", "user_id", required=True, help="Approving PMG user.")
@click.option("--base-price", required=True, help="Approved base price.")
@click.option("--margin", "margin_percent", required=True, help="Margin percent (0-100).")
@click.option("--notes", default=None)
def order_pmg_approve(
    order_id: int, user_id: str, base_price: str, margin_percent: str, notes: str | None
) -> None:
    """Approve adjusted pricing and send the quote."""
    handler = PmgApprovePricingHandler(unit_of_work(), dispatcher(), buffer_policy())

    try:
        dto = handler.handle(order_id, user_id, base_price, margin_percent, notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_quote(dto)


@click.command("accept-quote")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--user", "user_id", required=True, help="Client user.")
@click.option("--company", "company_id", default=None, help="Client company ID.")
def order_accept_quote(order_id: int, user_id: str, company_id: str | None) -> None:
    """Accept a quote (books the order's assets)."""
    handler = ClientApproveQuoteHandler(unit_of_work(), dispatcher(), buffer_policy())

    try:
        dto = handler.handle(order_id, user_id, company_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} confirmed, assets booked.")


@click.command("decline-quote")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--user", "user_id", required=True, help="Client user.")
@click.option("--reason", required=True, help="Decline reason (10+ characters).")
@click.option("--company", "company_id", default=None, help="Client company ID.")
def order_decline_quote(order_id: int, user_id: str, reason: str, company_id: str | None) -> None:
    """Decline a quote."""
    handler = ClientDeclineQuoteHandler(unit_of_work(), dispatcher(), buffer_policy())

    try:
        dto = handler.handle(order_id, user_id, reason, company_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} declined.")


@click.command("progress")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--status", "new_status", required=True, help="Target status, e.g. IN_PREPARATION.")
@click.option("--user", "user_id", required=True)
@click.option("--notes", default=None)
def order_progress(order_id: int, new_status: str, user_id: str, notes: str | None) -> None:
    """Move an order to its next fulfillment status."""
    handler = ProgressOrderStatusHandler(unit_of_work(), dispatcher(), buffer_policy())

    try:
        dto = handler.handle(order_id, new_status, user_id, notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} is now {dto.status}.")


@click.command("invoice")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--user", "user_id", required=True)
def order_invoice(order_id: int, user_id: str) -> None:
    """Generate the invoice for an accepted quote."""
    handler = GenerateInvoiceHandler(unit_of_work(), dispatcher())

    try:
        dto = handler.handle(order_id, user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_invoice(dto)


@click.command("pay")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--user", "user_id", required=True)
@click.option("--method", "payment_method", required=True, help="e.g. bank transfer.")
@click.option("--reference", "payment_reference", required=True)
@click.option("--date", "payment_date", default=None, type=DATE, help="Payment date (YYYY-MM-DD).")
def order_pay(order_id, user_id, payment_method, payment_reference, payment_date) -> None:
    """Confirm payment of an invoiced order."""
    handler = ConfirmPaymentHandler(unit_of_work(), dispatcher())

    try:
        dto = handler.handle(
            order_id,
            user_id,
            payment_method,
            payment_reference,
            payment_date.date() if payment_date else None,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_invoice(dto)
