"""Application services: minimal catalog setup (companies and assets).

Full catalog management belongs to the admin side; these exist so a
store can be seeded from the command line.
"""

from __future__ import annotations

from ers.domain.exceptions import ValidationError
from ers.domain.model.asset import Asset, AssetCondition
from ers.domain.model.company import Company
from ers.domain.model.value_objects import to_decimal
from ers.domain.repository.unit_of_work import UnitOfWork


class AddCompanyHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, company_id: str, name: str, pmg_margin_percent: str = "25.00") -> Company:
        if not company_id or not company_id.strip():
            raise ValidationError("Company id is required")
        if not name or not name.strip():
            raise ValidationError("Company name is required")

        with self._uow as uow:
            if uow.companies.get_by_id(company_id) is not None:
                raise ValidationError(f"Company '{company_id}' already exists")
            company = Company(
                id=company_id.strip(),
                name=name.strip(),
                pmg_margin_percent=to_decimal(pmg_margin_percent, "PMG margin percent"),
            )
            uow.companies.save(company)
            uow.commit()
        return company


class AddAssetHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        company_id: str,
        name: str,
        total_quantity: int,
        volume: str,
        weight: str,
        condition: str = "GREEN",
        refurb_days_estimate: int | None = None,
        handling_tags: tuple[str, ...] = (),
    ) -> Asset:
        """Add a new asset to a company's catalog."""
        if not name or not name.strip():
            raise ValidationError("Asset name is required")
        try:
            asset_condition = AssetCondition(condition.upper())
        except ValueError as exc:
            raise ValidationError(f"Unknown asset condition '{condition}'") from exc

        with self._uow as uow:
            if uow.companies.get_by_id(company_id) is None:
                raise ValidationError(f"Company '{company_id}' does not exist")

            # Auto-assign ID based on the company's existing assets
            existing = uow.assets.list_for_company(company_id)
            next_id = f"{company_id}-{len(existing) + 1}"

            asset = Asset(
                id=next_id,
                company_id=company_id,
                name=name.strip(),
                total_quantity=total_quantity,
                volume=to_decimal(volume, "volume"),
                weight=to_decimal(weight, "weight"),
                condition=asset_condition,
                refurb_days_estimate=refurb_days_estimate,
                handling_tags=tuple(handling_tags),
            )
            uow.assets.save(asset)
            uow.commit()
        return asset
