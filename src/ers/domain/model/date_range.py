"""Date ranges and the buffer arithmetic behind blocked periods.

A blocked period is wider than the event itself: units leave the warehouse
``prep_buffer_days`` (plus any refurbishment time) before the event starts
and only come back ``return_buffer_days`` after it ends.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from ers.domain.exceptions import ValidationError

PREP_BUFFER_DAYS = 5
RETURN_BUFFER_DAYS = 3


def ranges_overlap(start1: date, end1: date, start2: date, end2: date) -> bool:
    """Inclusive overlap test: ranges sharing a single day overlap."""
    return start1 <= end2 and end1 >= start2


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar days."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValidationError(
                f"Range end {self.end.isoformat()} is before start {self.start.isoformat()}"
            )

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"


@dataclass(frozen=True)
class BufferPolicy:
    """How many days around an event a unit stays reserved."""

    prep_buffer_days: int = PREP_BUFFER_DAYS
    return_buffer_days: int = RETURN_BUFFER_DAYS

    def __post_init__(self) -> None:
        if self.prep_buffer_days < 0 or self.return_buffer_days < 0:
            raise ValidationError("Buffer days cannot be negative")


DEFAULT_BUFFER_POLICY = BufferPolicy()


def calculate_blocked_period(
    event_start: date,
    event_end: date,
    refurb_days: int = 0,
    policy: BufferPolicy = DEFAULT_BUFFER_POLICY,
) -> DateRange:
    """Widen an event range by the prep, refurbishment and return buffers.

    Refurbishment happens before delivery, so ``refurb_days`` only extends
    the prep side.
    """
    if refurb_days < 0:
        raise ValidationError("Refurbishment days cannot be negative")
    if event_end < event_start:
        raise ValidationError("Event end date must be on or after start date")

    total_prep_days = policy.prep_buffer_days + refurb_days
    return DateRange(
        start=event_start - timedelta(days=total_prep_days),
        end=event_end + timedelta(days=policy.return_buffer_days),
    )
