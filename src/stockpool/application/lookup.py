"""Shared resolution helpers for the use-case handlers.

Resolve a resource by name and build the domain service that operates on
it.  Kept here so every handler fails the same way for unknown names.
"""

from __future__ import annotations

from stockpool.domain.clock import Clock
from stockpool.domain.exceptions import EntityNotFoundError, NotPoolResource
from stockpool.domain.model.resource import Resource
from stockpool.domain.repository.ledger_repository import LedgerRepository
from stockpool.domain.repository.price_repository import PriceRepository
from stockpool.domain.repository.resource_repository import ResourceRepository
from stockpool.domain.service.pool_allocator import PoolAllocator
from stockpool.domain.service.stock_ledger import StockLedger


def require_resource(resource_repo: ResourceRepository, name: str) -> Resource:
    resource = resource_repo.get_by_name(name)
    if resource is None:
        raise EntityNotFoundError(f"Resource not found: '{name}'")
    return resource


def members_of(resource_repo: ResourceRepository, pool: Resource) -> list[Resource]:
    members: list[Resource] = []
    for member_id in pool.member_ids:
        member = resource_repo.get_by_id(member_id)
        if member is None:
            raise EntityNotFoundError(
                f"Pool '{pool.name}' refers to a missing single item #{member_id}"
            )
        members.append(member)
    return members


def build_allocator(
    pool: Resource,
    resource_repo: ResourceRepository,
    ledger_repo: LedgerRepository,
    price_repo: PriceRepository,
    clock: Clock,
) -> PoolAllocator:
    if not pool.is_pool:
        raise NotPoolResource(f"'{pool.name}' is not a pool resource")
    ledgers = [
        StockLedger(member, ledger_repo, clock)
        for member in members_of(resource_repo, pool)
    ]
    return PoolAllocator(pool, ledgers, price_repo, ledger_repo, clock)
