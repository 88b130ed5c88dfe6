"""Application service: Quote Pool use case (query).

Answers "what would the next unit cost" for a pool.  Callers holding a
cart pass either the number of units already in it (``skip``) or, more
precisely, how many units each single item already supplies (``pending``).
"""

from __future__ import annotations

from datetime import datetime

from stockpool.application.dto import QuoteDTO
from stockpool.application.lookup import build_allocator, require_resource
from stockpool.application.mapping import format_money
from stockpool.domain.clock import Clock
from stockpool.domain.repository.ledger_repository import LedgerRepository
from stockpool.domain.repository.price_repository import PriceRepository
from stockpool.domain.repository.resource_repository import ResourceRepository


class QuotePoolHandler:

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
        skip: int = 0,
        sales_price: bool | None = None,
        from_: datetime | None = None,
        until: datetime | None = None,
        pending: dict[str, int] | None = None,
    ) -> QuoteDTO:
        """Quote the next unit of a pool.

        ``pending`` maps single item names to units already earmarked; when
        given it takes precedence over ``skip``.
        """
        pool = require_resource(self._resource_repo, pool_name)
        allocator = build_allocator(
            pool, self._resource_repo, self._ledger_repo, self._price_repo, self._clock
        )
        available = str(allocator.pool_availability(from_, until))

        if pending:
            by_id = {
                require_resource(self._resource_repo, name).id: units
                for name, units in pending.items()
            }
            allocation = allocator.next_allocation(by_id, sales_price, from_, until)
            return QuoteDTO(
                pool_name=pool.name,
                price=format_money(allocation.price) if allocation else None,
                item_name=allocation.item_name if allocation else None,
                available=available,
            )

        price = allocator.quote_next_unit(skip, sales_price, from_, until)
        return QuoteDTO(
            pool_name=pool.name,
            price=format_money(price),
            item_name=None,
            available=available,
        )
