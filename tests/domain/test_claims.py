"""Unit tests for the claim lifecycle: create, expire, release."""

import threading
from datetime import timedelta

import pytest

from stockpool.domain.exceptions import InsufficientStock, ValidationError
from stockpool.domain.model.ledger import EntryKind, EntryStatus, Reference
from stockpool.domain.model.resource import Resource
from stockpool.domain.service.stock_ledger import StockLedger
from tests.fakes import T0, FakeClock, FakeLedgerRepository


def _setup(stock: int = 100):
    resource = Resource.create(id="1", name="Widget")
    repo = FakeLedgerRepository()
    clock = FakeClock()
    ledger = StockLedger(resource, repo, clock)
    ledger.increase(stock)
    return ledger, repo, clock


def _day(n: int):
    return T0 + timedelta(days=n)


# ── Claiming ─────────────────────────────────────────────────────────────────


class TestClaim:

    def test_claim_writes_decrease_and_marker_together(self):
        ledger, repo, _ = _setup()
        writes_before = repo.writes

        claim = ledger.claim(10, reference=Reference("cart", "7"), note="web")

        assert repo.writes == writes_before + 1
        decrease, marker = ledger.entries()[-2:]
        assert decrease.kind == EntryKind.DECREASE
        assert decrease.quantity == -10
        assert decrease.status == EntryStatus.COMPLETED
        assert decrease.expires_at is None
        assert marker.id == claim.id
        assert marker.kind == EntryKind.CLAIMED
        assert marker.quantity == 10
        assert marker.status == EntryStatus.PENDING
        assert marker.reference == Reference("cart", "7")

    def test_claim_reduces_availability(self):
        ledger, _, _ = _setup()
        ledger.claim(10)
        assert ledger.available_stock() == 90
        assert ledger.currently_claimed() == 10

    def test_claim_more_than_available_rejected(self):
        ledger, _, _ = _setup(stock=10)

        with pytest.raises(InsufficientStock) as exc:
            ledger.claim(15)

        assert exc.value.available == 10
        assert exc.value.requested == 15
        assert ledger.available_stock() == 10

    def test_window_end_must_follow_start(self):
        ledger, _, _ = _setup()
        with pytest.raises(ValidationError, match="end after it starts"):
            ledger.claim(1, from_=_day(2), until=_day(2))

    def test_overlapping_claims_scenario(self):
        ledger, _, _ = _setup(stock=100)
        ledger.claim(20, from_=_day(5), until=_day(10))
        ledger.claim(30, from_=_day(8), until=_day(15))

        assert ledger.available_stock(_day(6)) == 80
        assert ledger.available_stock(_day(9)) == 50
        assert ledger.available_stock(_day(20)) == 100
        assert ledger.available_stock() == 100

    def test_future_claim_blocks_a_permanent_one(self):
        ledger, _, _ = _setup(stock=10)
        ledger.claim(8, from_=_day(5), until=_day(6))

        with pytest.raises(InsufficientStock) as exc:
            ledger.claim(5)

        assert exc.value.available == 2

    def test_claim_ending_before_a_future_claim_fits(self):
        ledger, _, _ = _setup(stock=10)
        ledger.claim(8, from_=_day(5), until=_day(6))

        assert ledger.claim(5, until=_day(3)) is not None
        assert ledger.available_stock() == 5


# ── Implicit expiry ──────────────────────────────────────────────────────────


class TestExpiry:

    def test_expired_claim_frees_stock_without_any_write(self):
        ledger, repo, clock = _setup(stock=100)
        ledger.claim(10, until=_day(5))
        writes = repo.writes

        assert ledger.available_stock(_day(6)) == 100
        clock.advance(days=6)
        assert ledger.available_stock() == 100
        assert ledger.currently_claimed() == 0
        assert repo.writes == writes

    def test_expiry_boundary_is_half_open(self):
        ledger, _, _ = _setup(stock=100)
        ledger.claim(10, until=_day(5))

        assert ledger.available_stock(_day(5) - timedelta(microseconds=1)) == 90
        assert ledger.available_stock(_day(5)) == 100

    def test_claim_not_counted_before_it_starts(self):
        ledger, _, _ = _setup(stock=100)
        ledger.claim(10, from_=_day(2), until=_day(4))

        assert ledger.available_stock() == 100
        assert ledger.available_stock(_day(2)) == 90


# ── Release ──────────────────────────────────────────────────────────────────


class TestRelease:

    def test_release_returns_stock(self):
        ledger, _, _ = _setup(stock=100)
        claim = ledger.claim(10)

        assert ledger.release(claim) is True
        assert ledger.available_stock() == 100
        assert ledger.currently_claimed() == 0
        assert ledger.entries()[-1].kind == EntryKind.RETURN

    def test_release_is_idempotent(self):
        ledger, _, _ = _setup(stock=100)
        claim = ledger.claim(10)

        assert ledger.release(claim) is True
        assert ledger.release(claim) is False
        assert ledger.available_stock() == 100
        assert ledger.capacity() == 110

    def test_stale_copy_cannot_release_twice(self):
        ledger, repo, _ = _setup(stock=100)
        claim = ledger.claim(10)
        stale = repo.get(claim.id)

        ledger.release(claim)

        assert stale.status == EntryStatus.PENDING
        assert ledger.release(stale) is False
        assert stale.status == EntryStatus.COMPLETED
        assert ledger.available_stock() == 100

    def test_only_claims_can_be_released(self):
        ledger, _, _ = _setup()
        with pytest.raises(ValidationError, match="Only claims"):
            ledger.release(ledger.entries()[0])

    def test_claim_of_another_resource_rejected(self):
        ledger, repo, clock = _setup()
        other = StockLedger(Resource.create(id="2", name="Gadget"), repo, clock)
        other.increase(5)
        claim = other.claim(1)

        with pytest.raises(ValidationError, match="does not belong"):
            ledger.release(claim)

    def test_release_expired_tidies_the_ledger(self):
        ledger, _, clock = _setup(stock=100)
        ledger.claim(10, until=_day(1))
        ledger.claim(5)
        clock.advance(days=2)

        assert ledger.release_expired() == 1
        assert ledger.release_expired() == 0
        assert ledger.available_stock() == 95
        assert [c.quantity for c in ledger.claims()] == [5]


# ── Claim queries ────────────────────────────────────────────────────────────


class TestClaimQueries:

    def test_claimed_totals(self):
        ledger, _, _ = _setup(stock=100)
        ledger.claim(10)
        ledger.claim(5, from_=_day(3), until=_day(4))
        ledger.claim(2, until=_day(1))

        assert ledger.currently_claimed() == 12
        assert ledger.active_and_planned_claimed() == 17
        assert ledger.future_claimed() == 5
        assert ledger.future_claimed(_day(4)) == 0

    def test_claims_lists_unexpired_pending_only(self):
        ledger, _, clock = _setup(stock=100)
        keep = ledger.claim(10)
        ledger.claim(2, until=_day(1))
        released = ledger.claim(3)
        ledger.release(released)
        clock.advance(days=2)

        assert [c.id for c in ledger.claims()] == [keep.id]

    def test_claims_for_reference(self):
        ledger, _, _ = _setup(stock=100)
        cart = Reference("cart", "1")
        ledger.claim(1, reference=cart)
        ledger.claim(2, reference=Reference("cart", "2"))
        ledger.claim(3, reference=cart)

        assert sorted(c.quantity for c in ledger.claims_for(cart)) == [1, 3]

    def test_conservation(self):
        ledger, _, _ = _setup(stock=100)
        ledger.decrease(5)
        ledger.claim(10)
        ledger.claim(7, from_=_day(3), until=_day(4))

        for instant in (T0, _day(3), _day(5)):
            assert (
                int(ledger.available_stock(instant))
                + ledger.currently_claimed(instant)
                + 5
                == int(ledger.capacity())
            )


# ── Booking windows ──────────────────────────────────────────────────────────


class TestBookingWindow:

    def test_max_bookable_is_window_minimum(self):
        ledger, _, _ = _setup(stock=10)
        ledger.claim(4, from_=_day(2), until=_day(3))

        assert ledger.max_bookable(_day(1), _day(2)) == 10
        assert ledger.max_bookable(_day(1), _day(4)) == 6
        assert ledger.max_bookable(_day(3), _day(4)) == 10

    def test_is_available_for_booking(self):
        ledger, _, _ = _setup(stock=10)
        ledger.claim(4, from_=_day(2), until=_day(3))

        assert ledger.is_available_for_booking(_day(1), _day(4), 6)
        assert not ledger.is_available_for_booking(_day(1), _day(4), 7)


# ── Concurrency ──────────────────────────────────────────────────────────────


class TestConcurrentClaims:

    def test_last_unit_is_claimed_once(self):
        ledger, _, _ = _setup(stock=1)
        results: list[str] = []
        start = threading.Barrier(8)

        def worker():
            start.wait()
            try:
                ledger.claim(1)
                results.append("ok")
            except InsufficientStock:
                results.append("short")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count("ok") == 1
        assert results.count("short") == 7
        assert ledger.available_stock() == 0
