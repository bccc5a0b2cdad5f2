"""Abstract repository for Company accounts."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ers.domain.model.company import Company


class CompanyRepository(ABC):

    @abstractmethod
    def get_by_id(self, company_id: str) -> Company | None:
        """The company, or None."""

    @abstractmethod
    def save(self, company: Company) -> None:
        """Insert or replace by id."""
