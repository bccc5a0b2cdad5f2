"""Application services: the client's answer to a quote.

Accepting books every line item and confirms the order; declining
releases whatever the order holds.  Either way the order must be QUOTED.
"""

from __future__ import annotations

import logging

from ers.application.clock import Clock, utc_now
from ers.application.dto import QuoteDTO
from ers.application.mapping import to_quote_dto
from ers.domain.exceptions import EntityNotFoundError
from ers.domain.model.date_range import DEFAULT_BUFFER_POLICY, BufferPolicy
from ers.domain.model.order import Order, OrderStatus
from ers.domain.repository.unit_of_work import UnitOfWork
from ers.domain.service.availability_service import AvailabilityService
from ers.domain.service.lifecycle_service import OrderLifecycleService
from ers.domain.service.notification_dispatcher import NotificationDispatcher, dispatch_safely

logger = logging.getLogger(__name__)


def _load_client_order(uow: UnitOfWork, order_id: int, company_id: str | None) -> Order:
    order = uow.orders.get_by_id(order_id)
    # another company's order is reported exactly like a missing one
    if order is None or (company_id is not None and order.company_id != company_id):
        raise EntityNotFoundError(f"Order #{order_id} not found")
    return order


class ClientApproveQuoteHandler:

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
        self,
        order_id: int,
        user_id: str,
        company_id: str | None = None,
        notes: str | None = None,
    ) -> QuoteDTO:
        """Accept the quote.

        Bookings are created before the status moves; if any asset has
        been taken in the meantime an AvailabilityError is raised and the
        order stays QUOTED with no bookings.
        """
        now = self._clock()
        with self._uow as uow:
            order = _load_client_order(uow, order_id, company_id)
            order.require_status(OrderStatus.QUOTED, "approve quote")

            lifecycle = OrderLifecycleService(
                AvailabilityService(uow.assets, uow.bookings, self._policy)
            )
            intents = lifecycle.transition(
                order, OrderStatus.CONFIRMED, user_id, notes or "Client approved quote", now
            )
            uow.orders.save(order)
            uow.commit()

        dispatch_safely(self._dispatcher, intents)
        return to_quote_dto(order)


class ClientDeclineQuoteHandler:

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
        self,
        order_id: int,
        user_id: str,
        decline_reason: str,
        company_id: str | None = None,
    ) -> QuoteDTO:
        now = self._clock()
        with self._uow as uow:
            order = _load_client_order(uow, order_id, company_id)
            order.require_status(OrderStatus.QUOTED, "decline quote")
            order.record_decline(decline_reason)

            lifecycle = OrderLifecycleService(
                AvailabilityService(uow.assets, uow.bookings, self._policy)
            )
            intents = lifecycle.transition(
                order,
                OrderStatus.DECLINED,
                user_id,
                f"Client declined quote: {order.decline_reason}",
                now,
            )
            uow.orders.save(order)
            uow.commit()

        logger.info("Quote for order %s declined by %s", order.display_id, user_id)
        dispatch_safely(self._dispatcher, intents)
        return to_quote_dto(order)
