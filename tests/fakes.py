"""In-memory fakes for testing.

The fake repositories implement the same abstract interfaces as the JSON
repositories but keep everything in dicts.  ``FakeUnitOfWork`` snapshots
every store when a transaction begins and restores the snapshot on
rollback, so handler tests can check all-or-nothing behaviour without
touching the file system.
"""

from __future__ import annotations

import copy
from datetime import date, datetime, timezone
from decimal import Decimal

from ers.domain.model.asset import Asset
from ers.domain.model.booking import Booking
from ers.domain.model.company import Company
from ers.domain.model.notification import NotificationType
from ers.domain.model.order import (
    Contact,
    Order,
    OrderItem,
    OrderStatus,
    Venue,
    format_order_number,
)
from ers.domain.model.pricing_tier import PricingTier
from ers.domain.repository.asset_repository import AssetRepository
from ers.domain.repository.booking_repository import BookingRepository
from ers.domain.repository.company_repository import CompanyRepository
from ers.domain.repository.order_repository import OrderRepository
from ers.domain.repository.pricing_tier_repository import PricingTierRepository
from ers.domain.repository.unit_of_work import UnitOfWork
from ers.domain.service.notification_dispatcher import NotificationDispatcher

FIXED_NOW = datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc)


def fixed_clock(now: datetime = FIXED_NOW):
    return lambda: now


class FakeAssetRepository(AssetRepository):

    def __init__(self, assets: list[Asset] | None = None) -> None:
        self._store: dict[str, Asset] = {a.id: a for a in assets or []}

    def get_by_id(self, asset_id: str) -> Asset | None:
        return self._store.get(asset_id)

    def list_for_company(self, company_id: str) -> list[Asset]:
        return [a for a in self._store.values() if a.company_id == company_id]

    def save(self, asset: Asset) -> None:
        self._store[asset.id] = asset


class FakeBookingRepository(BookingRepository):

    def __init__(self, bookings: list[Booking] | None = None) -> None:
        self._store: dict[int, Booking] = {}
        for b in bookings or []:
            self.add(b)

    def list_overlapping(self, asset_id: str, start: date, end: date) -> list[Booking]:
        return [
            b
            for b in self._store.values()
            if b.asset_id == asset_id
            and b.overlaps(start, end)
        ]

    def list_for_asset(self, asset_id: str) -> list[Booking]:
        return [b for b in self._store.values() if b.asset_id == asset_id]

    def list_for_order(self, order_id: int) -> list[Booking]:
        return [b for b in self._store.values() if b.order_id == order_id]

    def add(self, booking: Booking) -> None:
        booking.id = max(self._store, default=0) + 1
        self._store[booking.id] = booking

    def delete_for_order(self, order_id: int) -> int:
        doomed = [bid for bid, b in self._store.items() if b.order_id == order_id]
        for bid in doomed:
            del self._store[bid]
        return len(doomed)

    def all(self) -> list[Booking]:
        return list(self._store.values())


class FakeOrderRepository(OrderRepository):

    def __init__(self) -> None:
        self._store: dict[int, Order] = {}
        self._sequences: dict[str, int] = {}

    def next_id(self) -> int:
        return max(self._store, default=0) + 1

    def next_order_number(self, day: date) -> str:
        return format_order_number(day, self._next(f"ORD-{day:%Y%m%d}"))

    def next_invoice_number(self, day: date) -> str:
        return f"INV-{day:%Y%m%d}-{self._next(f'INV-{day:%Y%m%d}'):03d}"

    def get_by_id(self, order_id: int) -> Order | None:
        return self._store.get(order_id)

    def list_by_status(self, *statuses: OrderStatus) -> list[Order]:
        return [o for o in self._store.values() if o.status in statuses]

    def references_pricing_tier(self, tier_id: str) -> bool:
        return any(o.pricing_tier_id == tier_id for o in self._store.values())

    def save(self, order: Order) -> None:
        if order.id is None:
            order.id = self.next_id()
        self._store[order.id] = order

    def _next(self, key: str) -> int:
        self._sequences[key] = self._sequences.get(key, 0) + 1
        return self._sequences[key]


class FakePricingTierRepository(PricingTierRepository):

    def __init__(self, tiers: list[PricingTier] | None = None) -> None:
        self._store: dict[str, PricingTier] = {t.id: t for t in tiers or []}

    def get_by_id(self, tier_id: str) -> PricingTier | None:
        return self._store.get(tier_id)

    def list_for_country(self, country: str) -> list[PricingTier]:
        return [t for t in self._store.values() if t.country.lower() == country.strip().lower()]

    def list_all(self) -> list[PricingTier]:
        return list(self._store.values())

    def save(self, tier: PricingTier) -> None:
        self._store[tier.id] = tier

    def delete(self, tier_id: str) -> None:
        self._store.pop(tier_id, None)


class FakeCompanyRepository(CompanyRepository):

    def __init__(self, companies: list[Company] | None = None) -> None:
        self._store: dict[str, Company] = {c.id: c for c in companies or []}

    def get_by_id(self, company_id: str) -> Company | None:
        return self._store.get(company_id)

    def save(self, company: Company) -> None:
        self._store[company.id] = company


class FakeUnitOfWork(UnitOfWork):

    def __init__(
        self,
        assets: list[Asset] | None = None,
        companies: list[Company] | None = None,
        tiers: list[PricingTier] | None = None,
        bookings: list[Booking] | None = None,
    ) -> None:
        self.assets = FakeAssetRepository(assets)
        self.bookings = FakeBookingRepository(bookings)
        self.companies = FakeCompanyRepository(companies)
        self.orders = FakeOrderRepository()
        self.pricing_tiers = FakePricingTierRepository(tiers)
        self.commits = 0
        self._snapshot: list | None = None

    def _repos(self) -> list:
        return [self.assets, self.bookings, self.companies, self.orders, self.pricing_tiers]

    def _begin(self) -> None:
        self._snapshot = copy.deepcopy(
            [(repo._store, getattr(repo, "_sequences", None)) for repo in self._repos()]
        )

    def _end(self) -> None:
        self._snapshot = None

    def commit(self) -> None:
        self.commits += 1
        self._snapshot = None

    def rollback(self) -> None:
        if self._snapshot is None:
            return
        for repo, (store, sequences) in zip(self._repos(), copy.deepcopy(self._snapshot)):
            repo._store = store
            if sequences is not None:
                repo._sequences = sequences


class RecordingNotificationDispatcher(NotificationDispatcher):

    def __init__(self) -> None:
        self.sent: list[tuple[NotificationType, int]] = []

    def dispatch(self, notification_type: NotificationType, order_id: int) -> None:
        self.sent.append((notification_type, order_id))

    @property
    def types(self) -> list[NotificationType]:
        return [t for t, _ in self.sent]


class FailingNotificationDispatcher(NotificationDispatcher):

    def dispatch(self, notification_type: NotificationType, order_id: int) -> None:
        raise ConnectionError("mail server unreachable")


# ── Builders ─────────────────────────────────────────────────────────────────


def make_asset(
    asset_id: str = "a1",
    total_quantity: int = 5,
    company_id: str = "acme",
    name: str | None = None,
    volume: str = "2.5",
    weight: str = "10",
    **kwargs,
) -> Asset:
    return Asset(
        id=asset_id,
        company_id=company_id,
        name=name or f"Asset {asset_id}",
        total_quantity=total_quantity,
        volume=Decimal(volume),
        weight=Decimal(weight),
        **kwargs,
    )


def make_order(
    items: list[tuple[Asset, int]],
    event_start: date = date(2025, 6, 10),
    event_end: date = date(2025, 6, 12),
    order_id: int | None = 1,
    company_id: str = "acme",
    country: str = "UAE",
    city: str = "Dubai",
) -> Order:
    """Build a saved-looking DRAFT order for the given (asset, qty) pairs."""
    order = Order.create(
        company_id=company_id,
        user_id="client-1",
        items=[OrderItem.from_asset(asset, qty) for asset, qty in items],
        event_start=event_start,
        event_end=event_end,
        venue=Venue("Expo Hall", country, city, "1 Expo Road"),
        contact=Contact("Dana", "dana@example.com", "+971500000000"),
        today=FIXED_NOW.date(),
    )
    order.id = order_id
    order.order_number = f"ORD-20250601-{order_id or 0:03d}"
    return order
