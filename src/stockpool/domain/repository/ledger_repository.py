"""Abstract repository for ledger entries.

Besides storage, the repository owns the serialization primitive that every
write path uses: ``atomic(*resource_ids)`` holds a lock per resource for the
whole read-check-append sequence, so two callers can never both observe
"1 unit available" and both claim it.  Reads do not take the lock.

The locks below live with the repository instance, which is right for a
store only that instance can reach.  Repositories over shared storage
override ``atomic`` so that every handle on the same store serializes.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager

from stockpool.domain.model.ledger import LedgerEntry


class LedgerRepository(ABC):

    def __init__(self) -> None:
        self._resource_locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    @abstractmethod
    def get(self, entry_id: str) -> LedgerEntry | None:
        """Return a single entry by ID, or None."""

    @abstractmethod
    def entries_for(self, resource_id: str) -> list[LedgerEntry]:
        """Return every entry of a resource in insertion order."""

    @abstractmethod
    def append(self, *entries: LedgerEntry) -> None:
        """Persist new entries in a single write (all or nothing)."""

    @abstractmethod
    def save(self, entry: LedgerEntry) -> None:
        """Persist a status change on an existing entry."""

    # --- Serialization --------------------------------------------------------

    @contextmanager
    def atomic(self, *resource_ids: str) -> Iterator[None]:
        """Serialize writers per resource.

        Locks are re-entrant, so a pool claim holding all of its members
        can call each member's own ``claim``.  They are acquired in sorted
        order to rule out lock-order deadlocks between overlapping pools.
        """
        with ExitStack() as stack:
            for resource_id in sorted(set(resource_ids)):
                lock = self._lock_for(resource_id)
                lock.acquire()
                stack.callback(lock.release)
            yield

    def _lock_for(self, resource_id: str) -> threading.RLock:
        with self._locks_guard:
            return self._resource_locks.setdefault(resource_id, threading.RLock())
