"""JSON-document-backed implementation of CompanyRepository."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from ers.domain.model.company import Company
from ers.domain.repository.company_repository import CompanyRepository


class JsonCompanyRepository(CompanyRepository):

    def __init__(self, document: dict[str, Any]) -> None:
        self._rows: list[dict] = document["companies"]

    def get_by_id(self, company_id: str) -> Company | None:
        for raw in self._rows:
            if raw["id"] == company_id:
                return Company(
                    id=raw["id"],
                    name=raw["name"],
                    pmg_margin_percent=Decimal(raw.get("pmg_margin_percent", "25.00")),
                )
        return None

    def save(self, company: Company) -> None:
        row = {
            "id": company.id,
            "name": company.name,
            "pmg_margin_percent": str(company.pmg_margin_percent),
        }
        for i, raw in enumerate(self._rows):
            if raw["id"] == company.id:
                self._rows[i] = row
                return
        self._rows.append(row)
