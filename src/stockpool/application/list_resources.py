"""Application service: List Resources use case (query)."""

from __future__ import annotations

from stockpool.application.dto import ResourceDTO
from stockpool.application.lookup import members_of
from stockpool.application.mapping import to_resource_dto
from stockpool.domain.repository.price_repository import PriceRepository
from stockpool.domain.repository.resource_repository import ResourceRepository


class ListResourcesHandler:

    def __init__(
        self,
        resource_repo: ResourceRepository,
        price_repo: PriceRepository,
    ) -> None:
        self._resource_repo = resource_repo
        self._price_repo = price_repo

    def handle(self) -> list[ResourceDTO]:
        return [
            to_resource_dto(
                resource,
                self._price_repo.get_for(resource.id),
                [m.name for m in members_of(self._resource_repo, resource)],
            )
            for resource in self._resource_repo.list_all()
        ]
