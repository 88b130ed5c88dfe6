"""Application service: Release Claim use case."""

from __future__ import annotations

from stockpool.domain.clock import Clock
from stockpool.domain.exceptions import EntityNotFoundError, ValidationError
from stockpool.domain.repository.ledger_repository import LedgerRepository
from stockpool.domain.repository.resource_repository import ResourceRepository
from stockpool.domain.service.stock_ledger import StockLedger


class ReleaseClaimHandler:

    def __init__(
        self,
        resource_repo: ResourceRepository,
        ledger_repo: LedgerRepository,
        clock: Clock,
    ) -> None:
        self._resource_repo = resource_repo
        self._ledger_repo = ledger_repo
        self._clock = clock

    def handle(self, claim_id: str) -> bool:
        """Release a claim by ID.  False means it was already released."""
        claim = self._ledger_repo.get(claim_id)
        if claim is None:
            raise EntityNotFoundError(f"Claim {claim_id} not found")
        if not claim.is_claim:
            raise ValidationError(f"Entry {claim_id} is not a claim")

        resource = self._resource_repo.get_by_id(claim.resource_id)
        if resource is None:
            raise EntityNotFoundError(
                f"Claim {claim_id} belongs to a missing resource #{claim.resource_id}"
            )

        return StockLedger(resource, self._ledger_repo, self._clock).release(claim)
