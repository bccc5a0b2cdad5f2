"""CLI commands for pricing tiers."""

from __future__ import annotations

import click

from ers.application.manage_pricing_tiers import (
    AddPricingTierHandler,
    DeletePricingTierHandler,
    ListPricingTiersHandler,
    PricingTierDTO,
    TogglePricingTierHandler,
    UpdatePricingTierHandler,
)
from ers.domain.exceptions import DomainException
from ers.infrastructure.bootstrap import unit_of_work


def _describe(tier: PricingTierDTO) -> str:
    state = "active" if tier.is_active else "inactive"
    return (
        f"Tier {tier.id}: {tier.city}, {tier.country} "
        f"[{tier.volume_min}-{tier.volume_max}) m³ @ {tier.base_price} ({state})"
    )


@click.command("add")
@click.option("--country", required=True)
@click.option("--city", required=True, help="City, or '*' for the whole country.")
@click.option("--min", "volume_min", required=True, help="Lower volume bound (inclusive).")
@click.option("--max", "volume_max", required=True, help="Upper volume bound (exclusive).")
@click.option("--price", "base_price", required=True, help="Base price.")
@click.option("--inactive", is_flag=True, default=False, help="Create the tier deactivated.")
def tier_add(country, city, volume_min, volume_max, base_price, inactive) -> None:
    """Add a pricing tier."""
    handler = AddPricingTierHandler(unit_of_work())

    try:
        dto = handler.handle(country, city, volume_min, volume_max, base_price, not inactive)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Added {_describe(dto)}")


@click.command("list")
@click.option("--country", default=None, help="Only tiers for this country.")
@click.option("--active-only", is_flag=True, default=False)
def tier_list(country: str | None, active_only: bool) -> None:
    """List pricing tiers."""
    tiers = ListPricingTiersHandler(unit_of_work()).handle(country, active_only)

    if not tiers:
        click.echo("No pricing tiers.")
        return

    click.echo(
        f"  {'ID':>4} {'Country':<16} {'City':<16} {'Min':>8} {'Max':>8} {'Price':>10} {'Active':>7}"
    )
    click.echo(f"  {'-'*75}")
    for t in tiers:
        click.echo(
            f"  {t.id:>4} {t.country:<16} {t.city:<16} {t.volume_min:>8} {t.volume_max:>8} "
            f"{t.base_price:>10} {'yes' if t.is_active else 'no':>7}"
        )


@click.command("update")
@click.option("--id", "tier_id", required=True)
@click.option("--country", default=None)
@click.option("--city", default=None)
@click.option("--min", "volume_min", default=None)
@click.option("--max", "volume_max", default=None)
@click.option("--price", "base_price", default=None)
def tier_update(tier_id, country, city, volume_min, volume_max, base_price) -> None:
    """Update fields of a pricing tier."""
    handler = UpdatePricingTierHandler(unit_of_work())

    try:
        dto = handler.handle(tier_id, country, city, volume_min, volume_max, base_price)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Updated {_describe(dto)}")


@click.command("toggle")
@click.option("--id", "tier_id", required=True)
def tier_toggle(tier_id: str) -> None:
    """Activate or deactivate a pricing tier."""
    handler = TogglePricingTierHandler(unit_of_work())

    try:
        dto = handler.handle(tier_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(_describe(dto))


@click.command("delete")
@click.option("--id", "tier_id", required=True)
def tier_delete(tier_id: str) -> None:
    """Delete a pricing tier no order refers to."""
    handler = DeletePricingTierHandler(unit_of_work())

    try:
        handler.handle(tier_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Tier {tier_id} deleted.")
