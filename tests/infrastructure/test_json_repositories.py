"""Tests for the JSON-file repositories: what goes in comes back out."""

import json
from datetime import timedelta

import pytest

from stockpool.domain.exceptions import EntityNotFoundError
from stockpool.domain.model.ledger import EntryKind, EntryStatus, LedgerEntry, Reference
from stockpool.domain.model.resource import PricingStrategy, Resource, ResourceKind, UnitPrice
from stockpool.domain.model.value_objects import Money
from stockpool.infrastructure.persistence.json_ledger_repository import JsonLedgerRepository
from stockpool.infrastructure.persistence.json_price_repository import JsonPriceRepository
from stockpool.infrastructure.persistence.json_resource_repository import (
    JsonResourceRepository,
)
from tests.fakes import T0


class TestJsonResourceRepository:

    def test_creates_missing_file(self, tmp_path):
        path = tmp_path / "nested" / "resources.json"
        JsonResourceRepository(path)
        assert json.loads(path.read_text()) == []

    def test_pool_relations_survive_a_reload(self, tmp_path):
        path = tmp_path / "resources.json"
        repo = JsonResourceRepository(path)
        pool = Resource.create(
            id="1",
            name="Rooms",
            kind=ResourceKind.POOL,
            manages_stock=False,
            pricing_strategy=PricingStrategy.HIGHEST,
        )
        room = Resource.create(id="2", name="Room 1", kind=ResourceKind.BOOKING)
        pool.attach_single_items([room])
        repo.save(pool)
        repo.save(room)

        reloaded = JsonResourceRepository(path)

        assert reloaded.get_by_name("rooms") == pool
        assert reloaded.get_by_id("2").pool_ids == ["1"]
        assert [r.name for r in reloaded.list_all()] == ["Rooms", "Room 1"]

    def test_save_replaces_existing(self, tmp_path):
        repo = JsonResourceRepository(tmp_path / "resources.json")
        repo.save(Resource.create(id="1", name="Widget"))
        repo.save(Resource.create(id="1", name="Widget", low_stock_threshold=3))

        assert len(repo.list_all()) == 1
        assert repo.get_by_id("1").low_stock_threshold == 3

    def test_unknown_lookups_return_none(self, tmp_path):
        repo = JsonResourceRepository(tmp_path / "resources.json")
        assert repo.get_by_id("9") is None
        assert repo.get_by_name("Nope") is None


class TestJsonLedgerRepository:

    def test_claim_survives_a_reload(self, tmp_path):
        path = tmp_path / "ledger.json"
        claim = LedgerEntry(
            resource_id="1",
            quantity=2,
            kind=EntryKind.CLAIMED,
            status=EntryStatus.PENDING,
            claimed_from=T0 + timedelta(hours=8),
            expires_at=T0 + timedelta(hours=20),
            reference=Reference("order", "42"),
            note="front desk",
            created_at=T0,
        )
        JsonLedgerRepository(path).append(claim)

        reloaded = JsonLedgerRepository(path).get(claim.id)

        assert reloaded == claim
        assert reloaded.expires_at.tzinfo is not None

    def test_entries_are_kept_per_resource_in_order(self, tmp_path):
        repo = JsonLedgerRepository(tmp_path / "ledger.json")
        first = LedgerEntry(resource_id="1", quantity=5, kind=EntryKind.INCREASE, created_at=T0)
        other = LedgerEntry(resource_id="2", quantity=1, kind=EntryKind.INCREASE, created_at=T0)
        second = LedgerEntry(resource_id="1", quantity=-2, kind=EntryKind.DECREASE, created_at=T0)
        repo.append(first, other)
        repo.append(second)

        assert [e.id for e in repo.entries_for("1")] == [first.id, second.id]

    def test_save_updates_status(self, tmp_path):
        repo = JsonLedgerRepository(tmp_path / "ledger.json")
        claim = LedgerEntry(
            resource_id="1",
            quantity=1,
            kind=EntryKind.CLAIMED,
            status=EntryStatus.PENDING,
            created_at=T0,
        )
        repo.append(claim)

        claim.status = EntryStatus.COMPLETED
        repo.save(claim)

        assert repo.get(claim.id).status == EntryStatus.COMPLETED

    def test_save_unknown_entry(self, tmp_path):
        repo = JsonLedgerRepository(tmp_path / "ledger.json")
        entry = LedgerEntry(resource_id="1", quantity=1, kind=EntryKind.INCREASE, created_at=T0)
        with pytest.raises(EntityNotFoundError):
            repo.save(entry)


class TestJsonPriceRepository:

    def test_sale_price_survives_a_reload(self, tmp_path):
        path = tmp_path / "prices.json"
        price = UnitPrice(Money.of("40.00"), sale_amount=Money.of("32.50"), on_sale=True)
        JsonPriceRepository(path).save("1", price)

        reloaded = JsonPriceRepository(path).get_for("1")

        assert reloaded == price
        assert reloaded.current() == Money.of("32.50")

    def test_save_replaces_previous_price(self, tmp_path):
        repo = JsonPriceRepository(tmp_path / "prices.json")
        repo.save("1", UnitPrice(Money.of("10")))
        repo.save("1", UnitPrice(Money.of("12")))

        assert repo.get_for("1").amount == Money.of("12")
        assert repo.get_for("2") is None
