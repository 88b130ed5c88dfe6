"""Application service: Release Pool use case."""

from __future__ import annotations

from stockpool.application.lookup import build_allocator, require_resource
from stockpool.domain.clock import Clock
from stockpool.domain.model.ledger import Reference
from stockpool.domain.repository.ledger_repository import LedgerRepository
from stockpool.domain.repository.price_repository import PriceRepository
from stockpool.domain.repository.resource_repository import ResourceRepository


class ReleasePoolHandler:

    def __init__(
        self,
        resource_repo: ResourceRepository,
        ledger_repo: LedgerRepository,
        price_repo: PriceRepository,
        clock: Clock,
    ) -> None:
        self._resource_repo = resource_repo
        self._ledger_repo = ledger_repo
        self._price_repo = price_repo
        self._clock = clock

    def handle(self, pool_name: str, reference: Reference) -> int:
        """Release every claim on the pool's items tagged with ``reference``."""
        pool = require_resource(self._resource_repo, pool_name)
        allocator = build_allocator(
            pool, self._resource_repo, self._ledger_repo, self._price_repo, self._clock
        )
        return allocator.release_pool(reference)
