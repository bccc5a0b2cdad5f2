"""Application service: PMG Approve Pricing use case."""

from __future__ import annotations

from ers.application.clock import Clock, utc_now
from ers.application.dto import QuoteDTO
from ers.application.mapping import to_quote_dto
from ers.domain.exceptions import EntityNotFoundError
from ers.domain.model.date_range import DEFAULT_BUFFER_POLICY, BufferPolicy
from ers.domain.model.value_objects import Money, to_decimal
from ers.domain.repository.unit_of_work import UnitOfWork
from ers.domain.service.availability_service import AvailabilityService
from ers.domain.service.lifecycle_service import OrderLifecycleService
from ers.domain.service.notification_dispatcher import NotificationDispatcher, dispatch_safely


class PmgApprovePricingHandler:

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
        a2_base_price: str,
        pmg_margin_percent: str,
        notes: str | None = None,
    ) -> QuoteDTO:
        """Set the final quote for an adjusted order.

        The reviewer confirms (or corrects) the base price and the margin;
        the margin amount and final total are derived from them.
        """
        base_price = Money.of(a2_base_price)
        margin_percent = to_decimal(pmg_margin_percent, "PMG margin percent")
        now = self._clock()
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")

            lifecycle = OrderLifecycleService(
                AvailabilityService(uow.assets, uow.bookings, self._policy)
            )
            intents = lifecycle.approve_adjusted_pricing(
                order, base_price, margin_percent, user_id, notes, now
            )
            uow.orders.save(order)
            uow.commit()

        dispatch_safely(self._dispatcher, intents)
        return to_quote_dto(order)
