"""Application services: scheduled lifecycle jobs.

Meant to be run once a day (cron, systemd timer).  Both jobs are safe to
re-run: the event-day job only touches orders that are still behind
their dates, and the reminder job writes nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta

from ers.application.clock import Clock, utc_now
from ers.domain.model.date_range import DEFAULT_BUFFER_POLICY, BufferPolicy
from ers.domain.model.notification import NotificationType
from ers.domain.model.order import OrderStatus
from ers.domain.repository.unit_of_work import UnitOfWork
from ers.domain.service.availability_service import AvailabilityService
from ers.domain.service.lifecycle_service import OrderLifecycleService
from ers.domain.service.notification_dispatcher import NotificationDispatcher, dispatch_safely

logger = logging.getLogger(__name__)

PICKUP_REMINDER_DAYS = 2


@dataclass(frozen=True)
class EventDayResultDTO:
    started: list[str] = field(default_factory=list)
    awaiting_return: list[str] = field(default_factory=list)


class EventDayTransitionsHandler:
    """DELIVERED -> IN_USE once the event has started, IN_USE ->
    AWAITING_RETURN once it has ended.  Runs as the system user."""

    def __init__(
        self,
        uow: UnitOfWork,
        dispatcher: NotificationDispatcher,
        system_user: str = "system",
        policy: BufferPolicy = DEFAULT_BUFFER_POLICY,
        clock: Clock = utc_now,
    ) -> None:
        self._uow = uow
        self._dispatcher = dispatcher
        self._system_user = system_user
        self._policy = policy
        self._clock = clock

    def handle(self) -> EventDayResultDTO:
        now = self._clock()
        today = now.date()
        result = EventDayResultDTO()
        intents = []

        with self._uow as uow:
            lifecycle = OrderLifecycleService(
                AvailabilityService(uow.assets, uow.bookings, self._policy)
            )

            for order in uow.orders.list_by_status(OrderStatus.DELIVERED):
                if order.event_start is None or order.event_start > today:
                    continue
                intents += lifecycle.transition(
                    order, OrderStatus.IN_USE, self._system_user, "Event started", now
                )
                uow.orders.save(order)
                result.started.append(order.display_id)

            for order in uow.orders.list_by_status(OrderStatus.IN_USE):
                if order.event_end is None or order.event_end >= today:
                    continue
                intents += lifecycle.transition(
                    order, OrderStatus.AWAITING_RETURN, self._system_user, "Event ended", now
                )
                uow.orders.save(order)
                result.awaiting_return.append(order.display_id)

            uow.commit()

        logger.info(
            "Event-day job: %d order(s) in use, %d awaiting return",
            len(result.started),
            len(result.awaiting_return),
        )
        dispatch_safely(self._dispatcher, intents)
        return result


class PickupReminderHandler:
    """Reminds clients whose event ends within the next two days that the
    assets will be collected.  Read-only."""

    def __init__(
        self,
        uow: UnitOfWork,
        dispatcher: NotificationDispatcher,
        clock: Clock = utc_now,
    ) -> None:
        self._uow = uow
        self._dispatcher = dispatcher
        self._clock = clock

    def handle(self) -> list[str]:
        today = self._clock().date()
        horizon = today + timedelta(days=PICKUP_REMINDER_DAYS)
        with self._uow as uow:
            due = [
                order
                for order in uow.orders.list_by_status(
                    OrderStatus.IN_USE, OrderStatus.AWAITING_RETURN
                )
                if order.event_end is not None and today <= order.event_end <= horizon
            ]

        dispatch_safely(
            self._dispatcher,
            [(NotificationType.PICKUP_REMINDER, order.id) for order in due],  # type: ignore[misc]
        )
        logger.info("Pickup reminders queued for %d order(s)", len(due))
        return [order.display_id for order in due]
