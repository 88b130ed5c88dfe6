"""Ledger entries — the append-only movement records behind every stock level.

A resource's stock is never stored as a counter.  It is derived from the
entries appended for it:

- INCREASE / RETURN add capacity (positive quantity)
- DECREASE removes capacity (negative quantity)
- CLAIMED marks an amount held by a reservation (positive quantity).  A
  claim is always written together with a DECREASE of the same size; the
  CLAIMED entry on its own is never a capacity delta.

Entries are never deleted.  The only mutation is ``status`` going from
PENDING to COMPLETED when a claim is released.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class EntryKind(Enum):
    INCREASE = "increase"
    DECREASE = "decrease"
    RETURN = "return"
    CLAIMED = "claimed"


class EntryStatus(Enum):
    COMPLETED = "completed"
    PENDING = "pending"


@dataclass(frozen=True)
class Reference:
    """Opaque (type, id) pointer to an external object (cart, order, booking).

    Used for attribution and filtering only; never interpreted.
    """

    type: str
    id: str

    def __str__(self) -> str:
        return f"{self.type}:{self.id}"

    @staticmethod
    def parse(raw: str) -> Reference:
        ref_type, sep, ref_id = raw.partition(":")
        if not sep or not ref_type or not ref_id:
            raise ValueError(f"Reference must look like 'type:id', got {raw!r}")
        return Reference(type=ref_type, id=ref_id)


@dataclass
class LedgerEntry:
    """One stock movement for exactly one resource."""

    resource_id: str
    quantity: int
    kind: EntryKind
    status: EntryStatus = EntryStatus.COMPLETED
    claimed_from: datetime | None = None  # None = effective immediately
    expires_at: datetime | None = None  # None = permanent
    note: str | None = None
    reference: Reference | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    # --- Classification -------------------------------------------------------

    @property
    def is_claim(self) -> bool:
        return self.kind == EntryKind.CLAIMED

    @property
    def is_pending_claim(self) -> bool:
        return self.is_claim and self.status == EntryStatus.PENDING

    @property
    def counts_toward_stock(self) -> bool:
        """True for the COMPLETED capacity movements (everything but claims)."""
        return self.status == EntryStatus.COMPLETED and not self.is_claim

    @property
    def is_permanent(self) -> bool:
        return self.expires_at is None

    @property
    def is_temporary(self) -> bool:
        return self.expires_at is not None

    # --- Time semantics -------------------------------------------------------

    def is_expired_at(self, instant: datetime) -> bool:
        """Half-open: an entry expiring at T no longer applies at T."""
        return self.expires_at is not None and self.expires_at <= instant

    def has_started_at(self, instant: datetime) -> bool:
        return self.claimed_from is None or self.claimed_from <= instant

    def is_active_at(self, instant: datetime) -> bool:
        """A claim is active while PENDING, started, and not yet expired."""
        return (
            self.is_pending_claim
            and self.has_started_at(instant)
            and not self.is_expired_at(instant)
        )

    def boundaries(self) -> list[datetime]:
        """Instants at which this entry starts or stops affecting stock."""
        return [t for t in (self.claimed_from, self.expires_at) if t is not None]


# A claim is the PENDING CLAIMED entry; its paired DECREASE is bookkeeping.
Claim = LedgerEntry
