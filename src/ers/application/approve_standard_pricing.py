"""Application service: A2 Approve Standard Pricing use case.

Accepts the tier price for an order in PRICING_REVIEW and sends the
quote to the client.
"""

from __future__ import annotations

from ers.application.clock import Clock, utc_now
from ers.application.dto import QuoteDTO
from ers.application.mapping import to_quote_dto
from ers.domain.exceptions import EntityNotFoundError
from ers.domain.model.date_range import DEFAULT_BUFFER_POLICY, BufferPolicy
from ers.domain.repository.unit_of_work import UnitOfWork
from ers.domain.service.availability_service import AvailabilityService
from ers.domain.service.lifecycle_service import OrderLifecycleService
from ers.domain.service.notification_dispatcher import NotificationDispatcher, dispatch_safely
from ers.domain.service.pricing_service import PricingService


class A2ApproveStandardPricingHandler:

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

    def handle(self, order_id: int, user_id: str, notes: str | None = None) -> QuoteDTO:
        now = self._clock()
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")

            pricing = PricingService(uow.pricing_tiers, uow.companies).calculate_standard_pricing(
                order
            )
            lifecycle = OrderLifecycleService(
                AvailabilityService(uow.assets, uow.bookings, self._policy)
            )
            intents = lifecycle.approve_standard_pricing(order, pricing, user_id, notes, now)
            uow.orders.save(order)
            uow.commit()

        dispatch_safely(self._dispatcher, intents)
        return to_quote_dto(order)
