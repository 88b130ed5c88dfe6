"""Application service: Add Resource use case."""

from __future__ import annotations

from stockpool.application.dto import ResourceDTO
from stockpool.application.mapping import to_resource_dto
from stockpool.domain.exceptions import ValidationError
from stockpool.domain.model.resource import (
    PricingStrategy,
    Resource,
    ResourceKind,
    UnitPrice,
)
from stockpool.domain.model.value_objects import Money
from stockpool.domain.repository.price_repository import PriceRepository
from stockpool.domain.repository.resource_repository import ResourceRepository


class AddResourceHandler:

    def __init__(
        self,
        resource_repo: ResourceRepository,
        price_repo: PriceRepository,
    ) -> None:
        self._resource_repo = resource_repo
        self._price_repo = price_repo

    def handle(
        self,
        name: str,
        kind: str = "SIMPLE",
        manages_stock: bool | None = None,
        low_stock_threshold: int | None = None,
        pricing_strategy: str | None = None,
        price: str | None = None,
        sale_price: str | None = None,
        on_sale: bool = False,
    ) -> ResourceDTO:
        """Register a resource and, optionally, its unit price.

        ``manages_stock`` defaults to False for pools and True otherwise.
        """
        if not name or not name.strip():
            raise ValidationError("Resource name is required")
        if self._resource_repo.get_by_name(name) is not None:
            raise ValidationError(f"Resource '{name}' already exists")

        try:
            resource_kind = ResourceKind(kind.upper())
        except ValueError as exc:
            raise ValidationError(f"Invalid resource kind: {kind}") from exc
        try:
            strategy = PricingStrategy(pricing_strategy.upper()) if pricing_strategy else None
        except ValueError as exc:
            raise ValidationError(f"Invalid pricing strategy: {pricing_strategy}") from exc

        if manages_stock is None:
            manages_stock = resource_kind != ResourceKind.POOL

        # Auto-assign ID based on existing resources
        all_resources = self._resource_repo.list_all()
        if all_resources:
            next_id = str(max(int(r.id) for r in all_resources) + 1)
        else:
            next_id = "1"

        resource = Resource.create(
            id=next_id,
            name=name,
            kind=resource_kind,
            manages_stock=manages_stock,
            low_stock_threshold=low_stock_threshold,
            pricing_strategy=strategy,
        )

        unit_price = None
        if price is not None:
            unit_price = UnitPrice(
                amount=Money.of(price),
                sale_amount=Money.of(sale_price) if sale_price is not None else None,
                on_sale=on_sale,
            )
        elif sale_price is not None:
            raise ValidationError("A sale price needs a regular price")

        self._resource_repo.save(resource)
        if unit_price is not None:
            self._price_repo.save(resource.id, unit_price)
        return to_resource_dto(resource, unit_price)
