"""Application service: Set Asset Quantity use case."""

from __future__ import annotations

import logging

from ers.application.clock import Clock, utc_now
from ers.domain.exceptions import EntityNotFoundError
from ers.domain.model.asset import Asset
from ers.domain.repository.unit_of_work import UnitOfWork
from ers.domain.service.availability_service import AvailabilityService

logger = logging.getLogger(__name__)


class SetAssetQuantityHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, asset_id: str, total_quantity: int) -> Asset:
        """Change how many units of an asset exist.

        Shrinking is refused when a day from today on already has more
        units booked than the new total.
        """
        today = self._clock().date()
        with self._uow as uow:
            asset = uow.assets.get_by_id(asset_id)
            if asset is None or asset.is_deleted:
                raise EntityNotFoundError(f"Asset '{asset_id}' not found")

            previous = asset.total_quantity
            peak = AvailabilityService(uow.assets, uow.bookings).max_concurrent_booked(
                asset_id, today
            )
            asset.change_total_quantity(total_quantity, peak)
            uow.assets.save(asset)
            uow.commit()

        logger.info("Asset %s quantity changed %d -> %d", asset.name, previous, total_quantity)
        return asset
