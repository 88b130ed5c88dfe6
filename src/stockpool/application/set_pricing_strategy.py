"""Application service: Set Pricing Strategy use case."""

from __future__ import annotations

from stockpool.application.lookup import require_resource
from stockpool.domain.exceptions import NotPoolResource
from stockpool.domain.repository.resource_repository import ResourceRepository


class SetPricingStrategyHandler:

    def __init__(self, resource_repo: ResourceRepository) -> None:
        self._resource_repo = resource_repo

    def handle(self, pool_name: str, strategy: str) -> str:
        """Change the order in which a pool quotes and claims its items.

        Claims already made keep the items they took.  Returns the
        strategy now in force.
        """
        pool = require_resource(self._resource_repo, pool_name)
        if not pool.is_pool:
            raise NotPoolResource(f"'{pool.name}' is not a pool resource")

        pool.set_pricing_strategy(strategy)
        self._resource_repo.save(pool)
        return pool.pricing_strategy.value
