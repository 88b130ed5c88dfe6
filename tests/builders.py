"""Builders for pool fixtures shared by several test modules."""

from __future__ import annotations

from datetime import timedelta

from stockpool.domain.model.resource import (
    PricingStrategy,
    Resource,
    ResourceKind,
    UnitPrice,
)
from stockpool.domain.model.value_objects import Money
from stockpool.domain.service.pool_allocator import PoolAllocator
from stockpool.domain.service.stock_ledger import StockLedger
from tests.fakes import T0, FakeClock, FakeLedgerRepository, FakePriceRepository


def make_pool(
    *specs: tuple[str, int | None, str | None],
    strategy: PricingStrategy = PricingStrategy.LOWEST,
    kind: ResourceKind = ResourceKind.BOOKING,
    ledger_cls: type[StockLedger] = StockLedger,
):
    """Build a pool from (name, stock, price) tuples.

    A stock of None means the item does not manage stock.
    """
    repo = FakeLedgerRepository()
    clock = FakeClock()
    prices = FakePriceRepository()
    pool = Resource.create(
        id="P", name="Rooms", kind=ResourceKind.POOL, manages_stock=False,
        pricing_strategy=strategy,
    )

    items = []
    for i, (name, stock, price) in enumerate(specs, start=1):
        item = Resource.create(
            id=str(i), name=name, kind=kind, manages_stock=stock is not None
        )
        items.append(item)
        ledger = ledger_cls(item, repo, clock)
        if stock:
            ledger.increase(stock)
        if price is not None:
            prices.save(item.id, UnitPrice(Money.of(price)))
    pool.attach_single_items(items)

    members = [ledger_cls(item, repo, clock) for item in items]
    return PoolAllocator(pool, members, prices, repo, clock), repo, clock, prices


def booking_window(hours: int = 24, start_day: int = 1):
    start = T0 + timedelta(days=start_day)
    return start, start + timedelta(hours=hours)
