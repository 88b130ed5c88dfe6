"""Application service: Release Expired Claims use case.

Housekeeping only.  Expired claims already stop counting at read time;
this marks them COMPLETED so the ledger reads cleanly.
"""

from __future__ import annotations

from stockpool.application.lookup import require_resource
from stockpool.domain.clock import Clock
from stockpool.domain.repository.ledger_repository import LedgerRepository
from stockpool.domain.repository.resource_repository import ResourceRepository
from stockpool.domain.service.stock_ledger import StockLedger


class ReleaseExpiredHandler:

    def __init__(
        self,
        resource_repo: ResourceRepository,
        ledger_repo: LedgerRepository,
        clock: Clock,
    ) -> None:
        self._resource_repo = resource_repo
        self._ledger_repo = ledger_repo
        self._clock = clock

    def handle(self, resource_name: str | None = None) -> int:
        """Release expired claims of one resource, or of every resource."""
        if resource_name is not None:
            resources = [require_resource(self._resource_repo, resource_name)]
        else:
            resources = [r for r in self._resource_repo.list_all() if r.manages_stock]

        return sum(
            StockLedger(resource, self._ledger_repo, self._clock).release_expired()
            for resource in resources
        )
