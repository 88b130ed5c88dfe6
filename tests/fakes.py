"""In-memory fakes for testing.

These implement the same abstract interfaces as the JSON repositories
but keep everything in a dict. No file I/O, no side effects.  FakeClock
stands still until a test moves it.
"""

from __future__ import annotations

import copy
from datetime import datetime, timedelta, timezone

from stockpool.domain.clock import Clock
from stockpool.domain.model.ledger import LedgerEntry
from stockpool.domain.model.resource import Resource, UnitPrice
from stockpool.domain.repository.ledger_repository import LedgerRepository
from stockpool.domain.repository.price_repository import PriceRepository
from stockpool.domain.repository.resource_repository import ResourceRepository

T0 = datetime(2030, 1, 1, tzinfo=timezone.utc)


class FakeClock(Clock):

    def __init__(self, now: datetime = T0) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, **delta) -> None:
        self._now += timedelta(**delta)

    def set(self, now: datetime) -> None:
        self._now = now


class FakeResourceRepository(ResourceRepository):

    def __init__(self, resources: list[Resource] | None = None) -> None:
        self._store: dict[str, Resource] = {}
        for r in resources or []:
            self._store[r.id] = r

    def get_by_id(self, resource_id: str) -> Resource | None:
        return self._store.get(resource_id)

    def get_by_name(self, name: str) -> Resource | None:
        for r in self._store.values():
            if r.name.lower() == name.lower():
                return r
        return None

    def list_all(self) -> list[Resource]:
        return list(self._store.values())

    def save(self, resource: Resource) -> None:
        self._store[resource.id] = resource


class FakeLedgerRepository(LedgerRepository):
    """Stores copies, like a real store would, so callers cannot mutate rows."""

    def __init__(self) -> None:
        super().__init__()
        self._rows: list[LedgerEntry] = []
        self.writes = 0

    def get(self, entry_id: str) -> LedgerEntry | None:
        for row in self._rows:
            if row.id == entry_id:
                return copy.copy(row)
        return None

    def entries_for(self, resource_id: str) -> list[LedgerEntry]:
        return [copy.copy(row) for row in self._rows if row.resource_id == resource_id]

    def append(self, *entries: LedgerEntry) -> None:
        self._rows.extend(copy.copy(entry) for entry in entries)
        self.writes += 1

    def save(self, entry: LedgerEntry) -> None:
        for i, row in enumerate(self._rows):
            if row.id == entry.id:
                self._rows[i] = copy.copy(entry)
                self.writes += 1
                return
        raise KeyError(entry.id)


class FakePriceRepository(PriceRepository):

    def __init__(self, prices: dict[str, UnitPrice] | None = None) -> None:
        self._store: dict[str, UnitPrice] = dict(prices or {})

    def get_for(self, resource_id: str) -> UnitPrice | None:
        return self._store.get(resource_id)

    def save(self, resource_id: str, price: UnitPrice) -> None:
        self._store[resource_id] = price
