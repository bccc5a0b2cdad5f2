"""CLI commands for assets and their availability."""

from __future__ import annotations

import click

from ers.application.availability_queries import (
    AssetAvailabilitySummaryHandler,
    AssetCalendarHandler,
    CheckAvailabilityHandler,
)
from ers.application.catalog import AddAssetHandler
from ers.application.set_asset_quantity import SetAssetQuantityHandler
from ers.domain.exceptions import DomainException
from ers.infrastructure.bootstrap import buffer_policy, unit_of_work

DATE = click.DateTime(formats=["%Y-%m-%d"])


@click.command("add")
@click.option("--company", "company_id", required=True, help="Owning company ID.")
@click.option("--name", required=True, help="Asset name.")
@click.option("--quantity", "total_quantity", required=True, type=int, help="Units owned.")
@click.option("--volume", required=True, help="Volume per unit in m³.")
@click.option("--weight", required=True, help="Weight per unit in kg.")
@click.option("--condition", default="GREEN", help="GREEN, ORANGE or RED.")
@click.option("--refurb-days", default=None, type=int, help="Refurbishment estimate in days.")
@click.option("--tag", "tags", multiple=True, help="Handling tag (repeatable).")
def asset_add(company_id, name, total_quantity, volume, weight, condition, refurb_days, tags) -> None:
    """Add an asset to a company's catalog."""
    handler = AddAssetHandler(unit_of_work())

    try:
        asset = handler.handle(
            company_id, name, total_quantity, volume, weight, condition, refurb_days, tuple(tags)
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Asset {asset.id} added: {asset.name} x{asset.total_quantity}")


@click.command("availability")
@click.option("--id", "asset_id", required=True, help="Asset ID.")
@click.option("--start", "event_start", required=True, type=DATE, help="Event start (YYYY-MM-DD).")
@click.option("--end", "event_end", required=True, type=DATE, help="Event end (YYYY-MM-DD).")
def asset_availability(asset_id: str, event_start, event_end) -> None:
    """Check how many units are free for an event, buffers included."""
    handler = CheckAvailabilityHandler(unit_of_work(), buffer_policy())

    try:
        dto = handler.handle(asset_id, event_start.date(), event_end.date())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"{dto.asset_name} ({dto.asset_id})")
    click.echo(f"  Blocked period: {dto.blocked_from} .. {dto.blocked_until}")
    click.echo(
        f"  Available: {dto.available_quantity} of {dto.total_quantity} "
        f"(booked {dto.booked_quantity})"
    )
    if dto.available_quantity == 0 and dto.next_available_date:
        click.echo(f"  Next available: {dto.next_available_date}")


@click.command("summary")
@click.option("--id", "asset_id", required=True, help="Asset ID.")
@click.option("--start", default=None, type=DATE, help="Window start (default today).")
@click.option("--end", default=None, type=DATE, help="Window end (default start + 30 days).")
def asset_summary(asset_id: str, start, end) -> None:
    """One-line availability summary for catalog display."""
    handler = AssetAvailabilitySummaryHandler(unit_of_work(), buffer_policy())

    try:
        dto = handler.handle(
            asset_id, start.date() if start else None, end.date() if end else None
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"{dto.asset_name}: {dto.message}")


@click.command("calendar")
@click.option("--id", "asset_id", required=True, help="Asset ID.")
@click.option("--from", "from_date", default=None, type=DATE)
@click.option("--to", "to_date", default=None, type=DATE)
def asset_calendar(asset_id: str, from_date, to_date) -> None:
    """List the bookings of an asset."""
    handler = AssetCalendarHandler(unit_of_work())

    try:
        lines = handler.handle(
            asset_id,
            from_date.date() if from_date else None,
            to_date.date() if to_date else None,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo("No bookings.")
        return

    click.echo(f"  {'Order':>6} {'Qty':>5} {'From':>12} {'Until':>12}")
    click.echo(f"  {'-'*38}")
    for line in lines:
        click.echo(
            f"  {line.order_id:>6} {line.quantity:>5} {line.blocked_from:>12} {line.blocked_until:>12}"
        )


@click.command("set-quantity")
@click.option("--id", "asset_id", required=True, help="Asset ID.")
@click.option("--quantity", required=True, type=int, help="New total unit count.")
def asset_set_quantity(asset_id: str, quantity: int) -> None:
    """Change the number of units an asset has."""
    handler = SetAssetQuantityHandler(unit_of_work())

    try:
        asset = handler.handle(asset_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"{asset.name}: total quantity set to {asset.total_quantity}")
