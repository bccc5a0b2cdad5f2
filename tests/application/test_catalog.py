from decimal import Decimal

import pytest

from ers.application.catalog import AddAssetHandler, AddCompanyHandler
from ers.domain.exceptions import ValidationError
from ers.domain.model.asset import AssetCondition
from tests.fakes import FakeUnitOfWork


class TestAddCompany:

    def test_add_company(self):
        uow = FakeUnitOfWork()
        company = AddCompanyHandler(uow).handle("acme", " Acme Events ", "30")

        assert company.name == "Acme Events"
        assert company.pmg_margin_percent == Decimal("30")
        assert uow.companies.get_by_id("acme") is company
        assert uow.commits == 1

    def test_duplicate_rejected(self):
        uow = FakeUnitOfWork()
        AddCompanyHandler(uow).handle("acme", "Acme Events")
        with pytest.raises(ValidationError, match="already exists"):
            AddCompanyHandler(uow).handle("acme", "Other")

    def test_margin_out_of_range(self):
        with pytest.raises(ValidationError, match="between 0 and 100"):
            AddCompanyHandler(FakeUnitOfWork()).handle("acme", "Acme Events", "120")


class TestAddAsset:

    @pytest.fixture
    def uow(self):
        uow = FakeUnitOfWork()
        AddCompanyHandler(uow).handle("acme", "Acme Events")
        return uow

    def test_ids_count_per_company(self, uow):
        first = AddAssetHandler(uow).handle("acme", "Stage Deck", 4, "2.5", "40")
        second = AddAssetHandler(uow).handle("acme", "Bar Stool", 20, "0.2", "4.5", handling_tags=("fragile",))

        assert (first.id, second.id) == ("acme-1", "acme-2")
        assert second.handling_tags == ("fragile",)
        assert first.condition == AssetCondition.GREEN

    def test_damaged_asset_needs_estimate(self, uow):
        with pytest.raises(ValidationError, match="refurbishment estimate"):
            AddAssetHandler(uow).handle("acme", "Stage Deck", 4, "2.5", "40", condition="orange")

        asset = AddAssetHandler(uow).handle(
            "acme", "Stage Deck", 4, "2.5", "40", condition="orange", refurb_days_estimate=3
        )
        assert asset.refurb_days == 3

    def test_unknown_company(self, uow):
        with pytest.raises(ValidationError, match="does not exist"):
            AddAssetHandler(uow).handle("nobody", "Stage Deck", 4, "2.5", "40")

    def test_unknown_condition(self, uow):
        with pytest.raises(ValidationError, match="Unknown asset condition"):
            AddAssetHandler(uow).handle("acme", "Stage Deck", 4, "2.5", "40", condition="blue")
