import click

from ers.domain.exceptions import DomainException
from ers.infrastructure.bootstrap import settings
from ers.infrastructure.cli.asset_commands import (
    asset_add,
    asset_availability,
    asset_calendar,
    asset_set_quantity,
    asset_summary,
)
from ers.infrastructure.cli.job_commands import company_add, jobs_event_day, jobs_pickup_reminders
from ers.infrastructure.cli.order_commands import (
    order_accept_quote,
    order_adjust,
    order_approve_standard,
    order_decline_quote,
    order_estimate,
    order_invoice,
    order_pay,
    order_pmg_approve,
    order_pricing,
    order_progress,
    order_show,
    order_submit,
)
from ers.infrastructure.cli.tier_commands import (
    tier_add,
    tier_delete,
    tier_list,
    tier_toggle,
    tier_update,
)
from ers.infrastructure.logging_config import configure_logging


@click.group()
def cli() -> None:
    """ERS: Event Rental System"""
    try:
        configure_logging(settings().log_level)
    except DomainException as exc:
        raise click.ClickException(str(exc))


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def asset() -> None:
    """Manage assets and check availability."""


@cli.group()
def tier() -> None:
    """Manage pricing tiers."""


@cli.group()
def company() -> None:
    """Manage client companies."""


@cli.group()
def jobs() -> None:
    """Run scheduled lifecycle jobs."""


# Register subcommands
order.add_command(order_accept_quote)
order.add_command(order_adjust)
order.add_command(order_approve_standard)
order.add_command(order_decline_quote)
order.add_command(order_estimate)
order.add_command(order_invoice)
order.add_command(order_pay)
order.add_command(order_pmg_approve)
order.add_command(order_pricing)
order.add_command(order_progress)
order.add_command(order_show)
order.add_command(order_submit)
asset.add_command(asset_add)
asset.add_command(asset_availability)
asset.add_command(asset_calendar)
asset.add_command(asset_set_quantity)
asset.add_command(asset_summary)
tier.add_command(tier_add)
tier.add_command(tier_delete)
tier.add_command(tier_list)
tier.add_command(tier_toggle)
tier.add_command(tier_update)
company.add_command(company_add)
jobs.add_command(jobs_event_day)
jobs.add_command(jobs_pickup_reminders)
