"""Domain service: Pool Allocator.

Presents several single items, each with its own Stock Ledger, as one
allocatable resource.

Quoting and claiming share one code path: ``candidates()`` builds the list
of (item, price, quantity) triples for a window and ranks it by the pool's
pricing strategy.  ``quote_next_unit`` walks that list to price unit N+1;
``claim_pool`` walks the very same list to take units.  As long as nothing
changes in between, the unit quoted is the unit claimed.

Ranking: LOWEST sorts by ascending price, HIGHEST by descending price.
AVERAGE quotes one weighted average over everything available and claims in
ascending price order.  Items without a price of their own use the pool's
price; items with neither sort last.  Ties keep membership order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from stockpool.domain.clock import Clock
from stockpool.domain.exceptions import (
    InsufficientStock,
    InvalidPoolConfiguration,
    NotPoolResource,
    PoolHasNoMembers,
    ValidationError,
)
from stockpool.domain.model.ledger import Claim, Reference
from stockpool.domain.model.resource import PricingStrategy, Resource, ResourceKind
from stockpool.domain.model.value_objects import UNBOUNDED, Availability, Money
from stockpool.domain.repository.ledger_repository import LedgerRepository
from stockpool.domain.repository.price_repository import PriceRepository
from stockpool.domain.service import availability
from stockpool.domain.service.availability import Calendar
from stockpool.domain.service.pricing import booking_price
from stockpool.domain.service.stock_ledger import DEFAULT_CALENDAR_DAYS, StockLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """Units one single item can contribute to an allocation."""

    item: StockLedger
    unit_price: Money | None  # per day for booking items
    price: Money | None  # one unit for the whole window, unrounded
    quantity: Availability

    @property
    def item_id(self) -> str:
        return self.item.resource.id


@dataclass(frozen=True)
class Allocation:
    """Where the next unit would come from, and what it would cost."""

    item_id: str
    item_name: str
    unit_price: Money | None
    price: Money | None


@dataclass(frozen=True)
class ClaimedUnit:
    item_id: str
    item_name: str
    claim: Claim | None  # None for items that do not manage stock


@dataclass(frozen=True)
class MemberAvailability:
    id: str
    name: str
    kind: ResourceKind
    manages_stock: bool
    available: Availability


@dataclass(frozen=True)
class PriceRange:
    min: Money
    max: Money


@dataclass(frozen=True)
class AvailablePeriod:
    first_day: date
    last_day: date
    min_available: Availability

    @property
    def days(self) -> int:
        return (self.last_day - self.first_day).days + 1


@dataclass(frozen=True)
class PoolValidationReport:
    valid: bool
    errors: list[str]
    warnings: list[str]


class PoolAllocator:

    def __init__(
        self,
        pool: Resource,
        members: Sequence[StockLedger],
        prices: PriceRepository,
        ledger_repo: LedgerRepository,
        clock: Clock,
    ) -> None:
        if not pool.is_pool:
            raise NotPoolResource(f"'{pool.name}' is not a pool resource")
        self._pool = pool
        self._members = list(members)
        self._prices = prices
        self._ledger_repo = ledger_repo
        self._clock = clock

    @property
    def pool(self) -> Resource:
        return self._pool

    @property
    def members(self) -> list[StockLedger]:
        return list(self._members)

    @property
    def strategy(self) -> PricingStrategy:
        return self._pool.pricing_strategy or PricingStrategy.default()

    # --- Availability ---------------------------------------------------------

    def pool_availability(
        self, from_: datetime | None = None, until: datetime | None = None
    ) -> Availability:
        """How many units the pool can hand out, now or for a window.

        Members that do not manage stock are present but unbounded: they
        make the pool unbounded only when every member is like that,
        otherwise they are left out of the count.
        """
        windowed = self._window(from_, until)
        if not self._members:
            return Availability(0)

        managed = [m for m in self._members if m.manages_stock]
        if not managed:
            return UNBOUNDED

        total = Availability(0)
        for member in managed:
            if windowed:
                total = total + member.max_bookable(from_, until)
            else:
                total = total + member.available_stock()
        return total

    def is_pool_available(
        self, from_: datetime, until: datetime, quantity: int = 1
    ) -> bool:
        return self.pool_availability(from_, until).covers(quantity)

    def members_availability(
        self, from_: datetime | None = None, until: datetime | None = None
    ) -> list[MemberAvailability]:
        windowed = self._window(from_, until)
        return [
            MemberAvailability(
                id=m.resource.id,
                name=m.resource.name,
                kind=m.resource.kind,
                manages_stock=m.manages_stock,
                available=m.max_bookable(from_, until) if windowed else m.available_stock(),
            )
            for m in self._members
        ]

    def availability_by_day(self, first_day: date, last_day: date) -> dict[date, Availability]:
        """Units available for a whole-day booking on each day."""
        tz = self._clock.now().tzinfo
        result: dict[date, Availability] = {}
        for day in availability.days_between(first_day, last_day):
            start = datetime.combine(day, time.min, tzinfo=tz)
            result[day] = self.pool_availability(start, start + timedelta(days=1))
        return result

    def available_periods(
        self,
        first_day: date,
        last_day: date,
        quantity: int = 1,
        min_consecutive_days: int = 1,
    ) -> list[AvailablePeriod]:
        """Runs of consecutive days on which ``quantity`` units are free."""
        periods: list[AvailablePeriod] = []
        current: AvailablePeriod | None = None

        for day, available in self.availability_by_day(first_day, last_day).items():
            if available.covers(quantity):
                if current is None:
                    current = AvailablePeriod(day, day, available)
                else:
                    current = AvailablePeriod(
                        current.first_day, day, min(current.min_available, available)
                    )
            elif current is not None:
                periods.append(current)
                current = None
        if current is not None:
            periods.append(current)

        return [p for p in periods if p.days >= min_consecutive_days]

    def calendar(
        self,
        from_: date | None = None,
        until: date | None = None,
        default_days: int = DEFAULT_CALENDAR_DAYS,
    ) -> Calendar:
        first_day, last_day = availability.calendar_range(
            self._clock.now().date(), from_, until, default_days
        )
        if not self._members:
            return availability.uniform_calendar(first_day, last_day, Availability(0))

        managed = [m for m in self._members if m.manages_stock]
        if not managed:
            return availability.uniform_calendar(first_day, last_day, UNBOUNDED)
        return availability.sum_calendars(
            [m.calendar(first_day, last_day) for m in managed]
        )

    def day_timeline(self, day: date | None = None) -> dict[time, Availability]:
        if not self._members:
            return {time.min: Availability(0)}
        managed = [m for m in self._members if m.manages_stock]
        if not managed:
            return {time.min: UNBOUNDED}
        return availability.merge_timelines([m.day_timeline(day) for m in managed])

    # --- Allocation order -----------------------------------------------------

    def candidates(
        self,
        from_: datetime | None = None,
        until: datetime | None = None,
        sales_price: bool | None = None,
        pending: Mapping[str, int] | None = None,
    ) -> list[Candidate]:
        """Available items for the window, ranked in allocation order.

        ``pending`` maps item IDs to units already earmarked for them (an
        in-progress cart, say); those units are not offered again.
        """
        windowed = self._window(from_, until)
        pool_price = self._prices.get_for(self._pool.id)
        pending = pending or {}

        rows: list[Candidate] = []
        for member in self._allocatable():
            quantity = self._claimable(member, from_, until) - pending.get(member.resource.id, 0)
            if not quantity.covers(1):
                continue

            listed = self._prices.get_for(member.resource.id) or pool_price
            unit_price = listed.current(sales_price) if listed else None
            price = unit_price
            if price is not None and windowed:
                price = booking_price(price, from_, until)
            rows.append(
                Candidate(item=member, unit_price=unit_price, price=price, quantity=quantity)
            )

        return self._rank(rows)

    def _rank(self, rows: list[Candidate]) -> list[Candidate]:
        descending = self.strategy == PricingStrategy.HIGHEST

        def key(row: Candidate):
            if row.price is None:
                return (1, 0)
            return (0, -row.price.amount if descending else row.price.amount)

        return sorted(rows, key=key)

    # --- Quotes ---------------------------------------------------------------

    def quote_next_unit(
        self,
        skip_quantity: int = 0,
        sales_price: bool | None = None,
        from_: datetime | None = None,
        until: datetime | None = None,
    ) -> Money | None:
        """Price of unit ``skip_quantity + 1`` if the first units are taken.

        Returns None when nothing priced is left after skipping.
        """
        if skip_quantity < 0:
            raise ValidationError("Skip quantity cannot be negative")

        ranked = self.candidates(from_, until, sales_price)
        if self.strategy == PricingStrategy.AVERAGE:
            return self._average_price(ranked)

        row = _nth_unit(ranked, skip_quantity)
        if row is None or row.price is None:
            return None
        return row.price.rounded()

    def next_allocation(
        self,
        pending: Mapping[str, int] | None = None,
        sales_price: bool | None = None,
        from_: datetime | None = None,
        until: datetime | None = None,
    ) -> Allocation | None:
        """The exact item the next unit comes from, given earmarked units."""
        ranked = self.candidates(from_, until, sales_price, pending)
        if not ranked:
            return None

        first = ranked[0]
        if self.strategy == PricingStrategy.AVERAGE:
            price = self._average_price(ranked)
        else:
            price = first.price.rounded() if first.price is not None else None
        return Allocation(
            item_id=first.item_id,
            item_name=first.item.resource.name,
            unit_price=first.unit_price,
            price=price,
        )

    def quote_next_unit_given_reservation_state(
        self,
        pending: Mapping[str, int],
        sales_price: bool | None = None,
        from_: datetime | None = None,
        until: datetime | None = None,
    ) -> Money | None:
        """Like ``quote_next_unit`` but skips units per item, not per price.

        Two items can share a price; skipping by price tier can attribute
        the remaining capacity to the wrong one.  Subtracting what each
        specific item already has earmarked always lands on the item that
        will actually be claimed.
        """
        allocation = self.next_allocation(pending, sales_price, from_, until)
        return allocation.price if allocation else None

    def price_range(
        self, from_: datetime | None = None, until: datetime | None = None
    ) -> PriceRange | None:
        prices = [c.price for c in self.candidates(from_, until) if c.price is not None]
        if not prices:
            return None
        return PriceRange(min=min(prices).rounded(), max=max(prices).rounded())

    @staticmethod
    def _average_price(ranked: list[Candidate]) -> Money | None:
        priced = [c for c in ranked if c.price is not None]
        if not priced:
            return None
        total = None
        weight = 0
        for row in priced:
            units = 1 if row.quantity.is_unbounded else row.quantity.quantity
            amount = row.price * units
            total = amount if total is None else total + amount
            weight += units
        return (total / weight).rounded()

    # --- Claims ---------------------------------------------------------------

    def claim_pool(
        self,
        quantity: int,
        reference: Reference | None = None,
        from_: datetime | None = None,
        until: datetime | None = None,
        note: str | None = None,
    ) -> list[ClaimedUnit]:
        """Claim ``quantity`` units, one at a time, in allocation order.

        Either every unit is claimed or none is: if any member claim fails,
        the ones already made in this call are released before re-raising.
        """
        if quantity <= 0:
            raise ValidationError("Claim quantity must be positive")
        if not self._members:
            raise PoolHasNoMembers(f"Pool '{self._pool.name}' has no single items")

        member_ids = [m.resource.id for m in self._members]
        with self._ledger_repo.atomic(*member_ids):
            ranked = self.candidates(from_, until)
            available = sum((c.quantity for c in ranked), Availability(0))
            if not available.covers(quantity):
                raise InsufficientStock(int(available), quantity, self._pool.name)

            claimed: list[ClaimedUnit] = []
            try:
                for row in _units(ranked, quantity):
                    claim = row.item.claim(
                        1, reference=reference, from_=from_, until=until, note=note
                    )
                    claimed.append(
                        ClaimedUnit(
                            item_id=row.item_id,
                            item_name=row.item.resource.name,
                            claim=claim,
                        )
                    )
            except Exception:
                self._roll_back(claimed)
                raise

        logger.info(
            "Pool %s (%s) claimed %d unit(s) from %s",
            self._pool.name,
            self._pool.id,
            quantity,
            ", ".join(unit.item_name for unit in claimed),
        )
        return claimed

    def release_pool(self, reference: Reference) -> int:
        """Release every pending claim tagged with ``reference``."""
        released = 0
        for member in self._members:
            for claim in member.claims_for(reference):
                if member.release(claim):
                    released += 1
        return released

    def _roll_back(self, claimed: list[ClaimedUnit]) -> None:
        by_id = {m.resource.id: m for m in self._members}
        for unit in reversed(claimed):
            if unit.claim is not None:
                by_id[unit.item_id].release(unit.claim)
        logger.warning(
            "Pool %s (%s): rolled back %d claim(s) after a failed allocation",
            self._pool.name,
            self._pool.id,
            len(claimed),
        )

    # --- Validation -----------------------------------------------------------

    def validate_configuration(self, strict: bool = False) -> PoolValidationReport:
        """Sanity-check the pool.

        Raises for states that cannot work at all (no members, a pool that
        manages stock itself).  Ambiguous setups are reported as warnings,
        and raised instead when ``strict`` is set.
        """
        name = self._pool.name
        if self._pool.manages_stock:
            raise InvalidPoolConfiguration(
                f"Pool '{name}' manages stock itself; only its single items may"
            )
        if not self._members:
            raise PoolHasNoMembers(
                f"Pool '{name}' has no single items; attach at least one"
            )

        errors: list[str] = []
        warnings: list[str] = []

        nested = [m.resource.name for m in self._members if m.resource.is_pool]
        if nested:
            errors.append(f"Single items that are pools themselves: {', '.join(nested)}")

        unmanaged = [m.resource.name for m in self._members if not m.manages_stock]
        if unmanaged and len(unmanaged) < len(self._members):
            warnings.append(
                "Single items without stock management mixed with managed ones: "
                + ", ".join(unmanaged)
            )

        kinds = {m.resource.kind for m in self._members}
        if len(kinds) > 1:
            warnings.append(
                "Mixed single item kinds: "
                + ", ".join(sorted(k.value for k in kinds))
            )

        empty = [
            m.resource.name
            for m in self._members
            if m.manages_stock and not m.available_stock().covers(1)
        ]
        if empty:
            warnings.append("Single items with zero available stock: " + ", ".join(empty))

        if strict and warnings:
            raise InvalidPoolConfiguration(f"Pool '{name}': {warnings[0]}")

        for warning in warnings:
            logger.warning("Pool %s: %s", name, warning)
        return PoolValidationReport(valid=not errors, errors=errors, warnings=warnings)

    # --- Internal helpers -----------------------------------------------------

    def _allocatable(self) -> list[StockLedger]:
        """Members that take part in allocation.

        Unmanaged members only count when the whole pool is unmanaged,
        matching ``pool_availability``.
        """
        managed = [m for m in self._members if m.manages_stock]
        return managed or list(self._members)

    def _claimable(
        self, member: StockLedger, from_: datetime | None, until: datetime | None
    ) -> Availability:
        """Units a claim on this member would be allowed to take right now."""
        if not member.manages_stock:
            return UNBOUNDED
        return member.max_bookable(from_ or self._clock.now(), until)

    @staticmethod
    def _window(from_: datetime | None, until: datetime | None) -> bool:
        if (from_ is None) != (until is None):
            raise ValidationError("A window needs both a start and an end")
        if from_ is not None and until <= from_:
            raise ValidationError("Window end must be after its start")
        return from_ is not None


def _nth_unit(ranked: list[Candidate], index: int) -> Candidate | None:
    """The candidate that supplies unit number ``index`` (0-based)."""
    skipped = 0
    for row in ranked:
        if row.quantity.is_unbounded or skipped + row.quantity.quantity > index:
            return row
        skipped += row.quantity.quantity
    return None


def _units(ranked: list[Candidate], quantity: int):
    """Yield one candidate per unit, in order, ``quantity`` times."""
    remaining = quantity
    for row in ranked:
        take = remaining if row.quantity.is_unbounded else min(remaining, row.quantity.quantity)
        for _ in range(take):
            yield row
        remaining -= take
        if remaining == 0:
            return
