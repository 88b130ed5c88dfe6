"""Application service: Show Pool use case (query)."""

from __future__ import annotations

from datetime import datetime

from stockpool.application.dto import MemberDTO, PoolDTO
from stockpool.application.lookup import build_allocator, require_resource
from stockpool.application.mapping import format_money
from stockpool.domain.clock import Clock
from stockpool.domain.repository.ledger_repository import LedgerRepository
from stockpool.domain.repository.price_repository import PriceRepository
from stockpool.domain.repository.resource_repository import ResourceRepository


class ShowPoolHandler:

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
        from_: datetime | None = None,
        until: datetime | None = None,
    ) -> PoolDTO:
        pool = require_resource(self._resource_repo, pool_name)
        allocator = build_allocator(
            pool, self._resource_repo, self._ledger_repo, self._price_repo, self._clock
        )

        members = []
        for member in allocator.members_availability(from_, until):
            price = self._price_repo.get_for(member.id)
            members.append(
                MemberDTO(
                    name=member.name,
                    kind=member.kind.value,
                    manages_stock=member.manages_stock,
                    available=str(member.available),
                    price=format_money(price.current()) if price else None,
                )
            )

        price_range = allocator.price_range(from_, until)
        return PoolDTO(
            name=pool.name,
            pricing_strategy=allocator.strategy.value,
            available=str(allocator.pool_availability(from_, until)),
            members=members,
            price_range=(
                (str(price_range.min), str(price_range.max)) if price_range else None
            ),
        )
