"""JSON-file-backed implementation of ResourceRepository."""

from __future__ import annotations

from pathlib import Path

from stockpool.domain.model.resource import (
    PricingStrategy,
    RelationKind,
    Resource,
    ResourceKind,
    ResourceRelation,
)
from stockpool.domain.repository.resource_repository import ResourceRepository
from stockpool.infrastructure.persistence.json_file import (
    ensure_file,
    read_records,
    store_lock,
    write_records,
)


class JsonResourceRepository(ResourceRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = store_lock(file_path)
        self._ensure_file()

    # --- ResourceRepository interface -----------------------------------------

    def get_by_id(self, resource_id: str) -> Resource | None:
        for raw in self._load_raw():
            if raw["id"] == resource_id:
                return self._to_domain(raw)
        return None

    def get_by_name(self, name: str) -> Resource | None:
        for raw in self._load_raw():
            if raw["name"].lower() == name.lower():
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Resource]:
        return [self._to_domain(raw) for raw in self._load_raw()]

    def save(self, resource: Resource) -> None:
        with self._lock:
            records = self._load_raw()
            for i, raw in enumerate(records):
                if raw["id"] == resource.id:
                    records[i] = self._to_raw(resource)
                    break
            else:
                records.append(self._to_raw(resource))
            self._persist_raw(records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(resource: Resource) -> dict:
        return {
            "id": resource.id,
            "name": resource.name,
            "kind": resource.kind.value,
            "manages_stock": resource.manages_stock,
            "low_stock_threshold": resource.low_stock_threshold,
            "pricing_strategy": (
                resource.pricing_strategy.value if resource.pricing_strategy else None
            ),
            "relations": [
                {"kind": r.kind.value, "target_id": r.target_id}
                for r in resource.relations
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Resource:
        strategy = raw.get("pricing_strategy")
        return Resource(
            id=raw["id"],
            name=raw["name"],
            kind=ResourceKind(raw.get("kind", "SIMPLE")),
            manages_stock=raw.get("manages_stock", True),
            low_stock_threshold=raw.get("low_stock_threshold"),
            pricing_strategy=PricingStrategy(strategy) if strategy else None,
            relations=[
                ResourceRelation(kind=RelationKind(r["kind"]), target_id=r["target_id"])
                for r in raw.get("relations", [])
            ],
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return read_records(self._file_path)

    def _persist_raw(self, records: list[dict]) -> None:
        write_records(self._file_path, records)

    def _ensure_file(self) -> None:
        ensure_file(self._file_path)
