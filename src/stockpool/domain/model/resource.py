"""Resource aggregate — anything whose availability is tracked over time.

A resource is a plain product, a bookable single item, or a pool that is
backed by several single items.  Only the stock-related fields live here;
catalog data (descriptions, categories) belongs to an external catalog.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from stockpool.domain.exceptions import ValidationError
from stockpool.domain.model.value_objects import Money


class ResourceKind(Enum):
    SIMPLE = "SIMPLE"
    BOOKING = "BOOKING"
    POOL = "POOL"


class PricingStrategy(Enum):
    LOWEST = "LOWEST"
    HIGHEST = "HIGHEST"
    AVERAGE = "AVERAGE"

    @staticmethod
    def default() -> PricingStrategy:
        return PricingStrategy.LOWEST


class RelationKind(Enum):
    SINGLE = "SINGLE"  # pool -> single item
    POOL = "POOL"  # single item -> pool


@dataclass(frozen=True)
class ResourceRelation:
    kind: RelationKind
    target_id: str


@dataclass(frozen=True)
class UnitPrice:
    """A resource's price as answered by the pricing lookup.

    For booking resources ``amount`` is the price of one unit for one day
    (24 hours).
    """

    amount: Money
    sale_amount: Money | None = None
    on_sale: bool = False

    def current(self, sales_price: bool | None = None) -> Money:
        use_sale = self.on_sale if sales_price is None else sales_price
        if use_sale and self.sale_amount is not None:
            return self.sale_amount
        return self.amount


@dataclass
class Resource:
    """Aggregate root for anything with a stock ledger.

    Invariants:
    - a pool never manages stock itself; its members do
    - only pools carry a pricing strategy and SINGLE relations
    """

    id: str
    name: str
    kind: ResourceKind = ResourceKind.SIMPLE
    manages_stock: bool = True
    low_stock_threshold: int | None = None
    pricing_strategy: PricingStrategy | None = None
    relations: list[ResourceRelation] = field(default_factory=list)

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def create(
        id: str,
        name: str,
        kind: ResourceKind = ResourceKind.SIMPLE,
        manages_stock: bool = True,
        low_stock_threshold: int | None = None,
        pricing_strategy: PricingStrategy | None = None,
    ) -> Resource:
        """Create a new resource, enforcing all invariants."""
        if not name or not name.strip():
            raise ValidationError("Resource name is required")
        if low_stock_threshold is not None and low_stock_threshold < 0:
            raise ValidationError("Low stock threshold cannot be negative")

        if kind == ResourceKind.POOL:
            if manages_stock:
                raise ValidationError(
                    "Pool resources cannot manage stock; their single items do"
                )
            pricing_strategy = pricing_strategy or PricingStrategy.default()
        elif pricing_strategy is not None:
            raise ValidationError("Only pool resources have a pricing strategy")

        return Resource(
            id=id,
            name=name.strip(),
            kind=kind,
            manages_stock=manages_stock,
            low_stock_threshold=low_stock_threshold,
            pricing_strategy=pricing_strategy,
        )

    # --- Queries --------------------------------------------------------------

    @property
    def is_pool(self) -> bool:
        return self.kind == ResourceKind.POOL

    @property
    def is_booking(self) -> bool:
        return self.kind == ResourceKind.BOOKING

    @property
    def member_ids(self) -> list[str]:
        return [r.target_id for r in self.relations if r.kind == RelationKind.SINGLE]

    @property
    def pool_ids(self) -> list[str]:
        return [r.target_id for r in self.relations if r.kind == RelationKind.POOL]

    # --- Mutations ------------------------------------------------------------

    def relate(self, kind: RelationKind, target_id: str) -> None:
        """Add a relation; adding the same relation twice is a no-op."""
        relation = ResourceRelation(kind=kind, target_id=target_id)
        if relation not in self.relations:
            self.relations.append(relation)

    def attach_single_items(self, items: list[Resource]) -> None:
        """Make ``items`` members of this pool.

        Writes the SINGLE relation on the pool and the reverse POOL
        relation on each item, so an item can belong to several pools.
        """
        if not self.is_pool:
            raise ValidationError(f"'{self.name}' is not a pool resource")
        for item in items:
            if item.id == self.id:
                raise ValidationError("A pool cannot contain itself")
            if item.is_pool:
                raise ValidationError(
                    f"'{item.name}' is a pool and cannot be a single item"
                )
            self.relate(RelationKind.SINGLE, item.id)
            item.relate(RelationKind.POOL, self.id)

    def set_pricing_strategy(self, strategy: PricingStrategy | str) -> None:
        if not self.is_pool:
            raise ValidationError(f"'{self.name}' is not a pool resource")
        if isinstance(strategy, str):
            try:
                strategy = PricingStrategy(strategy.upper())
            except ValueError as exc:
                raise ValidationError(f"Invalid pricing strategy: {strategy}") from exc
        self.pricing_strategy = strategy
