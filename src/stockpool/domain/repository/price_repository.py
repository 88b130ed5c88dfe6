"""Abstract pricing lookup.

Prices are owned by an external catalog; the allocator only asks for the
current unit price of a resource.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockpool.domain.model.resource import UnitPrice


class PriceRepository(ABC):

    @abstractmethod
    def get_for(self, resource_id: str) -> UnitPrice | None:
        """Return the default price of a resource, or None if it has none."""

    @abstractmethod
    def save(self, resource_id: str, price: UnitPrice) -> None:
        """Set the default price of a resource."""
