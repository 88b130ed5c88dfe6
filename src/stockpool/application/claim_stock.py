"""Application service: Claim Stock use case.

Reserves units of a single resource for a window.  Pools are claimed
through ClaimPoolHandler instead.
"""

from __future__ import annotations

from datetime import datetime

from stockpool.application.dto import ClaimDTO
from stockpool.application.lookup import require_resource
from stockpool.application.mapping import to_claim_dto
from stockpool.domain.clock import Clock
from stockpool.domain.exceptions import ValidationError
from stockpool.domain.model.ledger import Reference
from stockpool.domain.repository.ledger_repository import LedgerRepository
from stockpool.domain.repository.resource_repository import ResourceRepository
from stockpool.domain.service.stock_ledger import StockLedger


class ClaimStockHandler:

    def __init__(
        self,
        resource_repo: ResourceRepository,
        ledger_repo: LedgerRepository,
        clock: Clock,
    ) -> None:
        self._resource_repo = resource_repo
        self._ledger_repo = ledger_repo
        self._clock = clock

    def handle(
        self,
        resource_name: str,
        quantity: int,
        reference: Reference | None = None,
        from_: datetime | None = None,
        until: datetime | None = None,
        note: str | None = None,
    ) -> ClaimDTO | None:
        """Claim stock; returns None when the resource does not manage stock."""
        resource = require_resource(self._resource_repo, resource_name)
        if resource.is_pool:
            raise ValidationError(
                f"'{resource.name}' is a pool; claim it with the pool commands"
            )

        ledger = StockLedger(resource, self._ledger_repo, self._clock)
        claim = ledger.claim(quantity, reference=reference, from_=from_, until=until, note=note)
        if claim is None:
            return None
        return to_claim_dto(claim, resource.name)
