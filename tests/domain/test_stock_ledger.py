"""Unit tests for the StockLedger domain service: movements and levels."""

from datetime import timedelta

import pytest

from stockpool.domain.exceptions import InsufficientStock, ValidationError
from stockpool.domain.model.ledger import EntryKind, EntryStatus
from stockpool.domain.model.resource import Resource
from stockpool.domain.model.value_objects import UNBOUNDED
from stockpool.domain.service.stock_ledger import StockLedger
from tests.fakes import T0, FakeClock, FakeLedgerRepository


def _setup(stock: int = 0, manages_stock: bool = True, threshold: int | None = None):
    resource = Resource.create(
        id="1",
        name="Widget",
        manages_stock=manages_stock,
        low_stock_threshold=threshold,
    )
    repo = FakeLedgerRepository()
    clock = FakeClock()
    ledger = StockLedger(resource, repo, clock)
    if stock:
        ledger.increase(stock)
    return ledger, repo, clock


# ── Increase / decrease ──────────────────────────────────────────────────────


class TestIncreaseDecrease:

    def test_increase_adds_stock(self):
        ledger, _, _ = _setup()
        assert ledger.increase(10) is True
        assert ledger.available_stock() == 10

    def test_decrease_removes_stock(self):
        ledger, _, _ = _setup(stock=10)
        assert ledger.decrease(4) is True
        assert ledger.available_stock() == 6

    def test_decrease_beyond_available_rejected(self):
        ledger, _, _ = _setup(stock=3)

        with pytest.raises(InsufficientStock, match="requested 5, 3 available") as exc:
            ledger.decrease(5)

        assert exc.value.available == 3
        assert exc.value.requested == 5
        assert ledger.available_stock() == 3

    def test_temporary_decrease_comes_back(self):
        ledger, _, clock = _setup(stock=10)
        ledger.decrease(4, until=T0 + timedelta(days=2))

        assert ledger.available_stock() == 6
        clock.advance(days=2)
        assert ledger.available_stock() == 10

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_rejected(self, quantity):
        ledger, _, _ = _setup(stock=10)
        with pytest.raises(ValidationError, match="must be positive"):
            ledger.increase(quantity)
        with pytest.raises(ValidationError, match="must be positive"):
            ledger.decrease(quantity)

    def test_entries_are_stamped_by_the_clock(self):
        ledger, _, clock = _setup()
        clock.advance(hours=3)
        ledger.increase(1)
        assert ledger.entries()[0].created_at == T0 + timedelta(hours=3)


# ── Capacity ─────────────────────────────────────────────────────────────────


class TestCapacity:

    def test_capacity_ignores_decreases_and_claims(self):
        ledger, _, _ = _setup(stock=100)
        ledger.decrease(10)
        ledger.claim(20)

        assert ledger.capacity() == 100
        assert ledger.available_stock() == 70

    def test_capacity_counts_returns(self):
        ledger, _, _ = _setup(stock=100)
        claim = ledger.claim(20)
        ledger.release(claim)

        assert ledger.capacity() == 120
        assert ledger.available_stock() == 100


# ── Adjust ───────────────────────────────────────────────────────────────────


class TestAdjust:

    def test_return_adds(self):
        ledger, _, _ = _setup(stock=5)
        ledger.adjust(EntryKind.RETURN, 2, note="customer return")
        assert ledger.available_stock() == 7

    def test_decrease_checks_availability(self):
        ledger, _, _ = _setup(stock=5)
        with pytest.raises(InsufficientStock):
            ledger.adjust(EntryKind.DECREASE, 6)

    def test_pending_decrease_is_not_checked_and_does_not_count(self):
        ledger, _, _ = _setup(stock=5)
        ledger.adjust(EntryKind.DECREASE, 50, status=EntryStatus.PENDING)
        assert ledger.available_stock() == 5

    def test_claimed_delegates_to_claim(self):
        ledger, _, _ = _setup(stock=5)
        claim = ledger.adjust(EntryKind.CLAIMED, 2, until=T0 + timedelta(days=1))

        assert claim.is_pending_claim
        assert ledger.available_stock() == 3


# ── Stock flags ──────────────────────────────────────────────────────────────


class TestStockFlags:

    def test_in_stock(self):
        ledger, _, _ = _setup()
        assert not ledger.is_in_stock()
        ledger.increase(1)
        assert ledger.is_in_stock()

    def test_low_stock_at_threshold(self):
        ledger, _, _ = _setup(stock=5, threshold=3)
        assert not ledger.is_low_stock()
        ledger.decrease(2)
        assert ledger.is_low_stock()

    def test_zero_threshold_is_honoured(self):
        ledger, _, _ = _setup(stock=1, threshold=0)
        assert not ledger.is_low_stock()
        ledger.decrease(1)
        assert ledger.is_low_stock()

    def test_no_threshold_never_low(self):
        ledger, _, _ = _setup(stock=0)
        assert not ledger.is_low_stock()


# ── Unmanaged stock ──────────────────────────────────────────────────────────


class TestUnmanagedStock:

    def test_levels_are_unbounded(self):
        ledger, _, _ = _setup(manages_stock=False)
        assert ledger.available_stock() == UNBOUNDED
        assert ledger.capacity() == UNBOUNDED
        assert ledger.is_in_stock()
        assert not ledger.is_low_stock()

    def test_mutators_are_no_ops(self):
        ledger, repo, _ = _setup(manages_stock=False)

        assert ledger.increase(5) is False
        assert ledger.decrease(5) is True
        assert ledger.claim(5) is None
        assert repo.writes == 0

    def test_booking_always_possible(self):
        ledger, _, _ = _setup(manages_stock=False)
        assert ledger.is_available_for_booking(T0, T0 + timedelta(days=1), 10**6)
