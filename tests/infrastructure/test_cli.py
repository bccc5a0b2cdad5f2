"""Smoke tests for the command-line interface against a temporary store."""

from datetime import date, timedelta

import pytest
from click.testing import CliRunner

from ers.infrastructure import bootstrap
from ers.infrastructure.cli.main import cli


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv("ERS_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("ERS_LOG_LEVEL", "WARNING")
    bootstrap.settings.cache_clear()
    yield CliRunner()
    bootstrap.settings.cache_clear()


def _invoke(runner, *args):
    result = runner.invoke(cli, list(args))
    assert result.exit_code == 0, result.output
    return result.output


def _seed(runner):
    _invoke(runner, "company", "add", "--id", "acme", "--name", "Acme Events")
    _invoke(
        runner, "asset", "add", "--company", "acme", "--name", "Stage Deck",
        "--quantity", "4", "--volume", "2.5", "--weight", "40",
    )
    _invoke(runner, "tier", "add", "--country", "UAE", "--city", "*",
            "--min", "0", "--max", "20", "--price", "800")


def _submit(runner, quantity=2):
    start = date.today() + timedelta(days=30)
    return runner.invoke(cli, [
        "order", "submit", "--user", "client-1", "--company", "acme",
        "--items", f"acme-1:{quantity}",
        "--start", start.isoformat(), "--end", (start + timedelta(days=2)).isoformat(),
        "--venue-name", "Expo Hall", "--venue-country", "UAE", "--venue-city", "Dubai",
        "--venue-address", "1 Expo Road", "--contact-name", "Dana",
        "--contact-email", "dana@example.com", "--contact-phone", "+971500000000",
    ])


def test_seed_commands(runner):
    _seed(runner)
    output = _invoke(runner, "tier", "list")
    assert "UAE" in output
    assert "800.00" in output


def test_submit_and_show(runner):
    _seed(runner)
    result = _submit(runner)
    assert result.exit_code == 0, result.output
    assert "submitted" in result.output
    assert "PRICING_REVIEW" in result.output

    output = _invoke(runner, "order", "show", "--id", "1")
    assert "Stage Deck" in output
    assert "SUBMITTED" in output


def test_quote_and_accept(runner):
    _seed(runner)
    _submit(runner)

    output = _invoke(runner, "order", "approve-standard", "--id", "1", "--user", "a2-user")
    assert "Final total:  1000.00" in output

    output = _invoke(runner, "order", "accept-quote", "--id", "1", "--user", "client-1")
    assert "confirmed" in output

    output = _invoke(runner, "asset", "calendar", "--id", "acme-1")
    assert "No bookings." not in output


def test_over_request_reports_shortfall(runner):
    _seed(runner)
    result = _submit(runner, quantity=9)

    assert result.exit_code == 1
    assert "Stage Deck: requested 9, available 4" in result.output


def test_unknown_order_is_clean_error(runner):
    result = runner.invoke(cli, ["order", "show", "--id", "42"])
    assert result.exit_code == 1
    assert "Order #42 not found" in result.output


def test_bad_item_format(runner):
    result = runner.invoke(cli, ["order", "estimate", "--company", "acme", "--items", "acme-1"])
    assert result.exit_code == 2
    assert "Expected 'AssetId:Quantity'" in result.output
