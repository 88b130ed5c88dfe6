"""Application service: Attach Members use case.

Links single items to a pool.  Both sides of the relation change, so the
pool and every item are saved.
"""

from __future__ import annotations

from stockpool.application.dto import ResourceDTO
from stockpool.application.lookup import members_of, require_resource
from stockpool.application.mapping import to_resource_dto
from stockpool.domain.exceptions import NotPoolResource, ValidationError
from stockpool.domain.repository.price_repository import PriceRepository
from stockpool.domain.repository.resource_repository import ResourceRepository


class AttachMembersHandler:

    def __init__(
        self,
        resource_repo: ResourceRepository,
        price_repo: PriceRepository,
    ) -> None:
        self._resource_repo = resource_repo
        self._price_repo = price_repo

    def handle(self, pool_name: str, member_names: list[str]) -> ResourceDTO:
        if not member_names:
            raise ValidationError("Name at least one single item to attach")

        pool = require_resource(self._resource_repo, pool_name)
        if not pool.is_pool:
            raise NotPoolResource(f"'{pool.name}' is not a pool resource")

        items = [require_resource(self._resource_repo, name) for name in member_names]
        pool.attach_single_items(items)

        for item in items:
            self._resource_repo.save(item)
        self._resource_repo.save(pool)

        return to_resource_dto(
            pool,
            self._price_repo.get_for(pool.id),
            [m.name for m in members_of(self._resource_repo, pool)],
        )
