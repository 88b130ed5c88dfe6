"""Application service: Increase Stock use case."""

from __future__ import annotations

from stockpool.application.lookup import require_resource
from stockpool.domain.clock import Clock
from stockpool.domain.model.ledger import Reference
from stockpool.domain.repository.ledger_repository import LedgerRepository
from stockpool.domain.repository.resource_repository import ResourceRepository
from stockpool.domain.service.stock_ledger import StockLedger


class IncreaseStockHandler:

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
        note: str | None = None,
        reference: Reference | None = None,
    ) -> bool:
        """Add stock.  Returns False when the resource does not manage stock."""
        resource = require_resource(self._resource_repo, resource_name)
        ledger = StockLedger(resource, self._ledger_repo, self._clock)
        return ledger.increase(quantity, note=note, reference=reference)
