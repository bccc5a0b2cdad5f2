"""CLI commands for the daily lifecycle jobs and catalog seeding."""

from __future__ import annotations

import click

from ers.application.catalog import AddCompanyHandler
from ers.application.lifecycle_jobs import EventDayTransitionsHandler, PickupReminderHandler
from ers.domain.exceptions import DomainException
from ers.infrastructure.bootstrap import buffer_policy, dispatcher, settings, unit_of_work


@click.command("event-day")
def jobs_event_day() -> None:
    """Move delivered orders into use and finished events to awaiting return."""
    handler = EventDayTransitionsHandler(
        unit_of_work(), dispatcher(), settings().system_user, buffer_policy()
    )

    try:
        result = handler.handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"In use: {len(result.started)}  Awaiting return: {len(result.awaiting_return)}")
    for number in result.started:
        click.echo(f"  {number} -> IN_USE")
    for number in result.awaiting_return:
        click.echo(f"  {number} -> AWAITING_RETURN")


@click.command("pickup-reminders")
def jobs_pickup_reminders() -> None:
    """Send pickup reminders for events ending within two days."""
    reminded = PickupReminderHandler(unit_of_work(), dispatcher()).handle()
    click.echo(f"Pickup reminders sent: {len(reminded)}")
    for number in reminded:
        click.echo(f"  {number}")


@click.command("add")
@click.option("--id", "company_id", required=True, help="Company ID.")
@click.option("--name", required=True, help="Company name.")
@click.option("--margin", "margin_percent", default="25.00", help="PMG margin percent.")
def company_add(company_id: str, name: str, margin_percent: str) -> None:
    """Register a client company."""
    handler = AddCompanyHandler(unit_of_work())

    try:
        company = handler.handle(company_id, name, margin_percent)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Company {company.id} added: {company.name} (margin {company.pmg_margin_percent}%)")
