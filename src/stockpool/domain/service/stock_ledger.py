"""Domain service: Stock Ledger.

The single source of truth for one resource's capacity over time.  All
writes append entries through the ledger repository inside
``LedgerRepository.atomic`` (check availability, then append, under the
resource's lock).  Reads are computed from the entries at call time and
never take the lock.

Claims use a two-entry pattern:

- a COMPLETED DECREASE of ``-qty`` makes availability drop for every
  instant the claim covers;
- a PENDING CLAIMED entry of ``+qty`` carries the window and reference.

``capacity()`` ignores both, so it keeps answering "how big could the stock
get if nothing had been taken".  Expiry is implicit: once ``expires_at`` has
passed the claim simply stops counting (see ``availability.available_at``).
Only permanent claims ever need an explicit ``release()``.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time

from stockpool.domain.clock import Clock
from stockpool.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStock,
    ValidationError,
)
from stockpool.domain.model.ledger import (
    Claim,
    EntryKind,
    EntryStatus,
    LedgerEntry,
    Reference,
)
from stockpool.domain.model.resource import Resource
from stockpool.domain.model.value_objects import UNBOUNDED, Availability
from stockpool.domain.repository.ledger_repository import LedgerRepository
from stockpool.domain.service import availability
from stockpool.domain.service.availability import Calendar

logger = logging.getLogger(__name__)

DEFAULT_CALENDAR_DAYS = 30


class StockLedger:

    def __init__(
        self,
        resource: Resource,
        ledger_repo: LedgerRepository,
        clock: Clock,
    ) -> None:
        self._resource = resource
        self._ledger_repo = ledger_repo
        self._clock = clock

    @property
    def resource(self) -> Resource:
        return self._resource

    @property
    def manages_stock(self) -> bool:
        return self._resource.manages_stock

    def entries(self) -> list[LedgerEntry]:
        return self._ledger_repo.entries_for(self._resource.id)

    # --- Write side -----------------------------------------------------------

    def increase(
        self,
        quantity: int,
        note: str | None = None,
        reference: Reference | None = None,
    ) -> bool:
        """Add physical stock.  Returns False if stock is not managed."""
        _require_positive(quantity, "Increase")
        if not self.manages_stock:
            return False

        with self._ledger_repo.atomic(self._resource.id):
            self._ledger_repo.append(
                self._entry(EntryKind.INCREASE, quantity, note=note, reference=reference)
            )
        self._log_change("increase", quantity)
        return True

    def decrease(
        self,
        quantity: int,
        until: datetime | None = None,
        note: str | None = None,
        reference: Reference | None = None,
    ) -> bool:
        """Remove physical stock, optionally only until ``until``.

        A temporary decrease gives its capacity back automatically once
        ``until`` has passed.  Unmanaged stock is never short, so this is
        a successful no-op for it.

        Raises InsufficientStock if less than ``quantity`` is available now.
        """
        _require_positive(quantity, "Decrease")
        if not self.manages_stock:
            return True

        with self._ledger_repo.atomic(self._resource.id):
            available = self.available_stock()
            if not available.covers(quantity):
                raise InsufficientStock(int(available), quantity, self._resource.name)
            self._ledger_repo.append(
                self._entry(
                    EntryKind.DECREASE,
                    -quantity,
                    expires_at=until,
                    note=note,
                    reference=reference,
                )
            )
        self._log_change("decrease", -quantity)
        return True

    def adjust(
        self,
        kind: EntryKind,
        quantity: int,
        until: datetime | None = None,
        from_: datetime | None = None,
        status: EntryStatus | None = None,
        note: str | None = None,
        reference: Reference | None = None,
    ) -> Claim | bool | None:
        """Record a movement of any kind; ``quantity`` is always positive.

        INCREASE and RETURN add stock, DECREASE removes it (checked against
        availability only when COMPLETED, since a PENDING movement does not
        count).  CLAIMED delegates to ``claim`` and returns the claim.
        """
        _require_positive(quantity, "Adjustment")
        if kind == EntryKind.CLAIMED:
            return self.claim(quantity, reference=reference, from_=from_, until=until, note=note)
        if not self.manages_stock:
            return False

        status = status or EntryStatus.COMPLETED
        adds = kind in (EntryKind.INCREASE, EntryKind.RETURN)
        delta = quantity if adds else -quantity

        with self._ledger_repo.atomic(self._resource.id):
            if not adds and status == EntryStatus.COMPLETED:
                available = self.available_stock()
                if not available.covers(quantity):
                    raise InsufficientStock(int(available), quantity, self._resource.name)
            self._ledger_repo.append(
                self._entry(
                    kind,
                    delta,
                    status=status,
                    expires_at=until,
                    note=note,
                    reference=reference,
                )
            )
        self._log_change("adjust", delta)
        return True

    def claim(
        self,
        quantity: int,
        reference: Reference | None = None,
        from_: datetime | None = None,
        until: datetime | None = None,
        note: str | None = None,
    ) -> Claim | None:
        """Reserve ``quantity`` units for ``[from_, until)``.

        ``from_=None`` starts the claim immediately, ``until=None`` makes it
        permanent.  Availability is checked over the whole window: at its
        start and at every ledger boundary inside it.

        Returns the PENDING CLAIMED entry, or None when stock is not
        managed.  Raises InsufficientStock if the window cannot hold it.
        """
        _require_positive(quantity, "Claim")
        if not self.manages_stock:
            return None

        start = from_ or self._clock.now()
        if until is not None and until <= start:
            raise ValidationError("A claim must end after it starts")

        with self._ledger_repo.atomic(self._resource.id):
            available = availability.window_minimum(self.entries(), start, until)
            if available < quantity:
                raise InsufficientStock(available, quantity, self._resource.name)

            decrease = self._entry(
                EntryKind.DECREASE, -quantity, note=note, reference=reference
            )
            claim = self._entry(
                EntryKind.CLAIMED,
                quantity,
                status=EntryStatus.PENDING,
                claimed_from=from_,
                expires_at=until,
                note=note,
                reference=reference,
            )
            self._ledger_repo.append(decrease, claim)

        logger.info(
            "Claimed %d of %s (%s) from %s until %s, reference=%s",
            quantity,
            self._resource.name,
            self._resource.id,
            from_ or "now",
            until or "released",
            reference,
        )
        return claim

    def release(self, claim: Claim) -> bool:
        """Give a claim's units back.

        Returns False if the claim was already released, so releasing twice
        is a harmless no-op.
        """
        if not claim.is_claim:
            raise ValidationError("Only claims can be released")
        if claim.resource_id != self._resource.id:
            raise ValidationError(
                f"Claim {claim.id} does not belong to {self._resource.name}"
            )

        with self._ledger_repo.atomic(self._resource.id):
            current = self._ledger_repo.get(claim.id)
            if current is None:
                raise EntityNotFoundError(f"Claim {claim.id} not found")
            if current.status == EntryStatus.COMPLETED:
                claim.status = EntryStatus.COMPLETED
                return False

            self._ledger_repo.append(
                self._entry(
                    EntryKind.RETURN,
                    current.quantity,
                    note=f"Released claim {current.id}",
                    reference=current.reference,
                )
            )
            current.status = EntryStatus.COMPLETED
            self._ledger_repo.save(current)
            claim.status = EntryStatus.COMPLETED

        self._log_change("release", current.quantity)
        return True

    def release_expired(self) -> int:
        """Explicitly release PENDING claims whose window has already closed.

        Reads already ignore expired claims; this only tidies the ledger.
        """
        now = self._clock.now()
        released = 0
        for entry in self.entries():
            if entry.is_pending_claim and entry.is_expired_at(now):
                if self.release(entry):
                    released += 1
        return released

    # --- Read side ------------------------------------------------------------

    def capacity(self) -> Availability:
        """Sum of everything ever added (INCREASE and RETURN)."""
        if not self.manages_stock:
            return UNBOUNDED
        return Availability(
            sum(
                e.quantity
                for e in self.entries()
                if e.status == EntryStatus.COMPLETED
                and e.kind in (EntryKind.INCREASE, EntryKind.RETURN)
            )
        )

    def available_stock(self, as_of: datetime | None = None) -> Availability:
        if not self.manages_stock:
            return UNBOUNDED
        instant = as_of or self._clock.now()
        return Availability(availability.available_at(self.entries(), instant))

    def currently_claimed(self, as_of: datetime | None = None) -> int:
        """Units held by claims in force at ``as_of`` (default: now)."""
        instant = as_of or self._clock.now()
        return sum(c.quantity for c in self._pending_claims() if c.is_active_at(instant))

    def active_and_planned_claimed(self, as_of: datetime | None = None) -> int:
        """Units held by every claim not yet expired, started or not."""
        instant = as_of or self._clock.now()
        return sum(
            c.quantity for c in self._pending_claims() if not c.is_expired_at(instant)
        )

    def future_claimed(self, from_: datetime | None = None) -> int:
        """Units held by unexpired claims starting at/after ``from_``.

        Without ``from_``: claims that start strictly after now.
        """
        now = self._clock.now()
        total = 0
        for c in self._pending_claims():
            if c.is_expired_at(now) or c.claimed_from is None:
                continue
            if (from_ is not None and c.claimed_from >= from_) or (
                from_ is None and c.claimed_from > now
            ):
                total += c.quantity
        return total

    def claims(self) -> list[Claim]:
        """PENDING claims that have not expired yet."""
        now = self._clock.now()
        return [c for c in self._pending_claims() if not c.is_expired_at(now)]

    def claims_for(self, reference: Reference) -> list[Claim]:
        return [c for c in self._pending_claims() if c.reference == reference]

    def is_in_stock(self) -> bool:
        return self.available_stock() > 0

    def is_low_stock(self) -> bool:
        threshold = self._resource.low_stock_threshold
        if not self.manages_stock or threshold is None:
            return False
        return self.available_stock() <= threshold

    def max_bookable(
        self, from_: datetime, until: datetime | None = None
    ) -> Availability:
        """Largest quantity that stays available for the whole window."""
        if not self.manages_stock:
            return UNBOUNDED
        return Availability(availability.window_minimum(self.entries(), from_, until))

    def is_available_for_booking(
        self, from_: datetime, until: datetime | None = None, quantity: int = 1
    ) -> bool:
        return self.max_bookable(from_, until).covers(quantity)

    # --- Calendars ------------------------------------------------------------

    def calendar(
        self,
        from_: date | None = None,
        until: date | None = None,
        default_days: int = DEFAULT_CALENDAR_DAYS,
    ) -> Calendar:
        """Per-day min/max availability for every day in ``[from_, until]``."""
        first_day, last_day = self.calendar_range(from_, until, default_days)
        if not self.manages_stock:
            return availability.uniform_calendar(first_day, last_day, UNBOUNDED)
        return availability.build_calendar(
            self.entries(), first_day, last_day, self._clock.now().tzinfo
        )

    def day_timeline(self, day: date | None = None) -> dict[time, Availability]:
        day = availability.as_day(day) if day is not None else self._clock.now().date()
        if not self.manages_stock:
            return {time.min: UNBOUNDED}
        return availability.day_timeline(self.entries(), day, self._clock.now().tzinfo)

    def calendar_range(
        self,
        from_: date | None,
        until: date | None,
        default_days: int = DEFAULT_CALENDAR_DAYS,
    ) -> tuple[date, date]:
        return availability.calendar_range(
            self._clock.now().date(), from_, until, default_days
        )

    # --- Internal helpers -----------------------------------------------------

    def _pending_claims(self) -> list[Claim]:
        return [e for e in self.entries() if e.is_pending_claim]

    def _entry(self, kind: EntryKind, quantity: int, **fields) -> LedgerEntry:
        return LedgerEntry(
            resource_id=self._resource.id,
            quantity=quantity,
            kind=kind,
            created_at=self._clock.now(),
            **fields,
        )

    def _log_change(self, action: str, delta: int) -> None:
        logger.info(
            "Stock %s on %s (%s): %+d, available now %s",
            action,
            self._resource.name,
            self._resource.id,
            delta,
            self.available_stock(),
        )


def _require_positive(quantity: int, what: str) -> None:
    if quantity <= 0:
        raise ValidationError(f"{what} quantity must be positive")
