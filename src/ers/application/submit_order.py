"""Application service: Submit Order From Cart use case.

Turns a checkout cart into an order waiting for pricing review.  The
availability check, the order insert and the status moves share one unit
of work, so two carts racing for the same units cannot both get through.
"""

from __future__ import annotations

import logging

from ers.application.clock import Clock, utc_now
from ers.application.dto import CartSubmission, SubmissionResultDTO
from ers.domain.exceptions import AvailabilityError, EntityNotFoundError, ValidationError
from ers.domain.model.asset import Asset
from ers.domain.model.date_range import DEFAULT_BUFFER_POLICY, BufferPolicy
from ers.domain.model.order import (
    Contact,
    Order,
    OrderItem,
    OrderStatus,
    Venue,
    validate_event_dates,
)
from ers.domain.model.value_objects import Quantity
from ers.domain.repository.unit_of_work import UnitOfWork
from ers.domain.service.availability_service import AvailabilityService, ItemRequest
from ers.domain.service.lifecycle_service import OrderLifecycleService
from ers.domain.service.notification_dispatcher import NotificationDispatcher, dispatch_safely
from ers.domain.service.pricing_service import PricingService

logger = logging.getLogger(__name__)


class SubmitOrderFromCartHandler:

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

    def handle(self, user_id: str, company_id: str, request: CartSubmission) -> SubmissionResultDTO:
        """Submit a cart.

        Steps:
        1. Validate the request shape (items, dates, venue, contact).
        2. Resolve assets: they must belong to the company and not be deleted.
        3. Check availability over each asset's blocked period; report every
           shortfall at once.
        4. Snapshot assets into order items, match a pricing tier, persist,
           and walk the order DRAFT -> SUBMITTED -> PRICING_REVIEW.
        """
        now = self._clock()
        today = now.date()

        if not request.items:
            raise ValidationError("At least one item is required")
        for spec in request.items:
            Quantity(spec.quantity)
        validate_event_dates(request.event_start, request.event_end, today)
        venue = Venue(
            name=request.venue_name,
            country=request.venue_country,
            city=request.venue_city,
            address=request.venue_address,
            access_notes=request.venue_access_notes or None,
        )
        contact = Contact(
            name=request.contact_name,
            email=request.contact_email,
            phone=request.contact_phone,
        )

        with self._uow as uow:
            company = uow.companies.get_by_id(company_id)
            if company is None:
                raise EntityNotFoundError(f"Company '{company_id}' not found")

            assets = self._resolve_assets(uow, company_id, [s.asset_id for s in request.items])

            availability = AvailabilityService(uow.assets, uow.bookings, self._policy)
            report = availability.check_multiple_assets_availability(
                [ItemRequest(s.asset_id, s.quantity) for s in request.items],
                request.event_start,
                request.event_end,
            )
            if not report.all_available:
                raise AvailabilityError(report.unavailable_items)

            order = Order.create(
                company_id=company_id,
                user_id=user_id,
                items=[OrderItem.from_asset(assets[s.asset_id], s.quantity) for s in request.items],
                event_start=request.event_start,
                event_end=request.event_end,
                venue=venue,
                contact=contact,
                today=today,
                brand=request.brand,
                special_instructions=request.special_instructions,
            )
            order.created_at = now
            order.updated_at = now

            tier = PricingService(uow.pricing_tiers, uow.companies).find_matching_tier(
                venue.country, venue.city, order.calculated_volume
            )
            order.pricing_tier_id = tier.id if tier else None

            order.id = uow.orders.next_id()
            order.order_number = uow.orders.next_order_number(today)
            uow.orders.save(order)

            lifecycle = OrderLifecycleService(availability)
            intents = lifecycle.transition(
                order, OrderStatus.SUBMITTED, user_id, "Order submitted from cart", now
            )
            intents += lifecycle.transition(
                order, OrderStatus.PRICING_REVIEW, user_id, "Awaiting pricing review", now
            )
            uow.orders.save(order)
            uow.commit()

        logger.info(
            "Order %s submitted by %s for %s: %d item(s), %s m³, tier=%s",
            order.order_number,
            user_id,
            company.name,
            len(order.items),
            order.calculated_volume,
            order.pricing_tier_id or "none",
        )
        dispatch_safely(self._dispatcher, intents)

        return SubmissionResultDTO(
            order_id=order.id,  # type: ignore[arg-type]
            order_number=order.order_number,
            status=order.status.value,
            financial_status=order.financial_status.value,
            company_name=company.name,
            calculated_volume=str(order.calculated_volume),
            item_count=len(request.items),
        )

    @staticmethod
    def _resolve_assets(uow: UnitOfWork, company_id: str, asset_ids: list[str]) -> dict[str, Asset]:
        found: dict[str, Asset] = {}
        for asset_id in set(asset_ids):
            asset = uow.assets.get_by_id(asset_id)
            if asset is None or asset.company_id != company_id or asset.is_deleted:
                raise ValidationError(
                    "One or more assets not found or do not belong to your company"
                )
            found[asset_id] = asset
        return found
