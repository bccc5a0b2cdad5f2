"""Application service: Progress Order Status use case.

Generic fulfillment step for operations staff: moves an order along one
edge of the status graph, booking on CONFIRMED and releasing on CLOSED or
DECLINED. Edges that attach a price are refused; they belong to the
pricing use cases.
"""

from __future__ import annotations

from ers.application.clock import Clock, utc_now
from ers.application.dto import OrderDTO
from ers.application.mapping import to_order_dto
from ers.domain.exceptions import EntityNotFoundError, ValidationError
from ers.domain.model.date_range import DEFAULT_BUFFER_POLICY, BufferPolicy
from ers.domain.model.order import OrderStatus
from ers.domain.repository.unit_of_work import UnitOfWork
from ers.domain.service.availability_service import AvailabilityService
from ers.domain.service.lifecycle_service import OrderLifecycleService
from ers.domain.service.notification_dispatcher import NotificationDispatcher, dispatch_safely


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value.strip().upper())
    except ValueError as exc:
        raise ValidationError(f"Unknown order status '{value}'") from exc


class ProgressOrderStatusHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        dispatcher: NotificationDispatcher,
        policy: BufferPolicy = DEFAULT_BUFFER_POLICY,
        clock: Clock = utc_now,
    ) -> None:
        self._uow = uow
        self._dispatcher = dispatcher
        self._policy = policy
        self._clock = clock

    def handle(
        self, order_id: int, new_status: str, user_id: str, notes: str | None = None
    ) -> OrderDTO:
        target = parse_status(new_status)
        now = self._clock()
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")

            lifecycle = OrderLifecycleService(
                AvailabilityService(uow.assets, uow.bookings, self._policy)
            )
            intents = lifecycle.transition(order, target, user_id, notes, now)
            uow.orders.save(order)
            uow.commit()

        dispatch_safely(self._dispatcher, intents)
        return to_order_dto(order)
