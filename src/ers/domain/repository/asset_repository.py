"""Port for the asset catalog."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ers.domain.model.asset import Asset


class AssetRepository(ABC):

    @abstractmethod
    def get_by_id(self, asset_id: str) -> Asset | None:
        """The asset, soft-deleted or not, or None."""

    @abstractmethod
    def list_for_company(self, company_id: str) -> list[Asset]:
        """Every asset a company has ever owned, soft-deleted ones included."""

    @abstractmethod
    def save(self, asset: Asset) -> None:
        """Insert or replace by id."""
