"""Application service: Claim Pool use case.

Claims units of a pool from its single items in allocation order.  All
or nothing: the allocator rolls back partial claims on failure.
"""

from __future__ import annotations

from datetime import datetime

from stockpool.application.dto import PoolClaimDTO
from stockpool.application.lookup import build_allocator, require_resource
from stockpool.application.mapping import to_claim_dto
from stockpool.domain.clock import Clock
from stockpool.domain.model.ledger import Reference
from stockpool.domain.repository.ledger_repository import LedgerRepository
from stockpool.domain.repository.price_repository import PriceRepository
from stockpool.domain.repository.resource_repository import ResourceRepository


class ClaimPoolHandler:

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

    def handle(
        self,
        pool_name: str,
        quantity: int,
        reference: Reference | None = None,
        from_: datetime | None = None,
        until: datetime | None = None,
        note: str | None = None,
    ) -> PoolClaimDTO:
        pool = require_resource(self._resource_repo, pool_name)
        allocator = build_allocator(
            pool, self._resource_repo, self._ledger_repo, self._price_repo, self._clock
        )
        units = allocator.claim_pool(
            quantity, reference=reference, from_=from_, until=until, note=note
        )
        return PoolClaimDTO(
            pool_name=pool.name,
            claims=[
                to_claim_dto(unit.claim, unit.item_name)
                for unit in units
                if unit.claim is not None
            ],
            unmanaged_items=[unit.item_name for unit in units if unit.claim is None],
        )
