"""Errors raised by the rental core.

Every one derives from DomainException.  Messages are written for the end
user; the CLI prints them unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


class DomainException(Exception):
    """Root of the error taxonomy."""


class ValidationError(DomainException):
    """Bad or incomplete input the caller can fix."""


class EntityNotFoundError(DomainException):
    """An order, asset, company or pricing tier id matched nothing."""


@dataclass(frozen=True)
class Shortfall:
    """One asset that cannot cover the requested quantity."""

    asset_id: str
    asset_name: str
    requested: int
    available: int
    next_available_date: date | None = None

    def describe(self) -> str:
        text = (
            f"{self.asset_name}: requested {self.requested}, "
            f"available {self.available}"
        )
        if self.next_available_date is not None:
            text += f" (available from {self.next_available_date.isoformat()})"
        return text


class AvailabilityError(DomainException):
    """Requested quantities do not fit the blocked period of the assets."""

    def __init__(self, shortfalls: list[Shortfall] | tuple[Shortfall, ...]) -> None:
        self.shortfalls = tuple(shortfalls)
        details = "; ".join(s.describe() for s in self.shortfalls)
        super().__init__(f"Insufficient availability for requested dates: {details}")


class InvalidTransitionError(DomainException):
    """A status change is not allowed from the current state."""

    def __init__(self, current: str, requested: str, reason: str | None = None) -> None:
        self.current = current
        self.requested = requested
        message = f"Invalid transition from {current} to {requested}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
