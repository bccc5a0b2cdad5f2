"""JSON-document-backed implementation of AssetRepository."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from ers.domain.model.asset import Asset, AssetCondition, AssetStatus
from ers.domain.repository.asset_repository import AssetRepository
from ers.infrastructure.persistence.serialization import datetime_from_raw


class JsonAssetRepository(AssetRepository):

    def __init__(self, document: dict[str, Any]) -> None:
        self._rows: list[dict] = document["assets"]

    # --- AssetRepository interface --------------------------------------------

    def get_by_id(self, asset_id: str) -> Asset | None:
        for raw in self._rows:
            if raw["id"] == asset_id:
                return self._to_domain(raw)
        return None

    def list_for_company(self, company_id: str) -> list[Asset]:
        return [self._to_domain(raw) for raw in self._rows if raw["company_id"] == company_id]

    def save(self, asset: Asset) -> None:
        for i, raw in enumerate(self._rows):
            if raw["id"] == asset.id:
                self._rows[i] = self._to_raw(asset)
                return
        self._rows.append(self._to_raw(asset))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(asset: Asset) -> dict:
        return {
            "id": asset.id,
            "company_id": asset.company_id,
            "name": asset.name,
            "total_quantity": asset.total_quantity,
            "volume": str(asset.volume),
            "weight": str(asset.weight),
            "condition": asset.condition.value,
            "refurb_days_estimate": asset.refurb_days_estimate,
            "status": asset.status.value,
            "handling_tags": list(asset.handling_tags),
            "deleted_at": asset.deleted_at.isoformat() if asset.deleted_at else None,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Asset:
        return Asset(
            id=raw["id"],
            company_id=raw["company_id"],
            name=raw["name"],
            total_quantity=raw["total_quantity"],
            volume=Decimal(raw["volume"]),
            weight=Decimal(raw["weight"]),
            condition=AssetCondition(raw.get("condition", "GREEN")),
            refurb_days_estimate=raw.get("refurb_days_estimate"),
            status=AssetStatus(raw.get("status", "AVAILABLE")),
            handling_tags=tuple(raw.get("handling_tags", ())),
            deleted_at=datetime_from_raw(raw.get("deleted_at")),
        )
