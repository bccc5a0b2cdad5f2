"""Raw-value helpers shared by the JSON repositories."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from ers.domain.model.value_objects import Money


def money_to_raw(value: Money | None) -> dict | None:
    if value is None:
        return None
    return {"amount": str(value.amount), "currency": value.currency}


def money_from_raw(raw: dict | None) -> Money | None:
    if raw is None:
        return None
    return Money(Decimal(raw["amount"]), raw.get("currency", "AED"))


def decimal_to_raw(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


def decimal_from_raw(raw: str | None) -> Decimal | None:
    return None if raw is None else Decimal(raw)


def date_to_raw(value: date | None) -> str | None:
    return None if value is None else value.isoformat()


def date_from_raw(raw: str | None) -> date | None:
    return None if raw is None else date.fromisoformat(raw)


def datetime_from_raw(raw: str | None) -> datetime | None:
    return None if raw is None else datetime.fromisoformat(raw)
