"""Abstract repository for the Resource aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, SQL, in-memory)
live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockpool.domain.model.resource import Resource


class ResourceRepository(ABC):

    @abstractmethod
    def get_by_id(self, resource_id: str) -> Resource | None:
        """Return a resource by its ID, or None if not found."""

    @abstractmethod
    def get_by_name(self, name: str) -> Resource | None:
        """Return a resource by its exact name, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Resource]:
        """Return every resource."""

    @abstractmethod
    def save(self, resource: Resource) -> None:
        """Persist a new or updated resource."""
