"""Application service: Show Stock use case (query)."""

from __future__ import annotations

from datetime import datetime

from stockpool.application.dto import StockDTO
from stockpool.application.lookup import require_resource
from stockpool.application.mapping import to_claim_dto
from stockpool.domain.clock import Clock
from stockpool.domain.exceptions import ValidationError
from stockpool.domain.repository.ledger_repository import LedgerRepository
from stockpool.domain.repository.resource_repository import ResourceRepository
from stockpool.domain.service.stock_ledger import StockLedger


class ShowStockHandler:

    def __init__(
        self,
        resource_repo: ResourceRepository,
        ledger_repo: LedgerRepository,
        clock: Clock,
    ) -> None:
        self._resource_repo = resource_repo
        self._ledger_repo = ledger_repo
        self._clock = clock

    def handle(self, resource_name: str, as_of: datetime | None = None) -> StockDTO:
        resource = require_resource(self._resource_repo, resource_name)
        if resource.is_pool:
            raise ValidationError(
                f"'{resource.name}' is a pool; use the pool commands to inspect it"
            )

        ledger = StockLedger(resource, self._ledger_repo, self._clock)
        return StockDTO(
            resource_name=resource.name,
            manages_stock=resource.manages_stock,
            capacity=str(ledger.capacity()),
            available=str(ledger.available_stock(as_of)),
            currently_claimed=ledger.currently_claimed(as_of),
            active_and_planned_claimed=ledger.active_and_planned_claimed(as_of),
            future_claimed=ledger.future_claimed(),
            in_stock=ledger.is_in_stock(),
            low_stock=ledger.is_low_stock(),
            claims=[to_claim_dto(c, resource.name) for c in ledger.claims()],
        )
