"""JSON-file-backed implementation of PriceRepository."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from stockpool.domain.model.resource import UnitPrice
from stockpool.domain.model.value_objects import Money
from stockpool.domain.repository.price_repository import PriceRepository
from stockpool.infrastructure.persistence.json_file import (
    ensure_file,
    read_records,
    store_lock,
    write_records,
)


class JsonPriceRepository(PriceRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = store_lock(file_path)
        self._ensure_file()

    # --- PriceRepository interface --------------------------------------------

    def get_for(self, resource_id: str) -> UnitPrice | None:
        for raw in self._load_raw():
            if raw["resource_id"] == resource_id:
                return self._to_domain(raw)
        return None

    def save(self, resource_id: str, price: UnitPrice) -> None:
        with self._lock:
            records = [r for r in self._load_raw() if r["resource_id"] != resource_id]
            records.append(self._to_raw(resource_id, price))
            self._persist_raw(records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(resource_id: str, price: UnitPrice) -> dict:
        return {
            "resource_id": resource_id,
            "amount": str(price.amount.amount),
            "sale_amount": str(price.sale_amount.amount) if price.sale_amount else None,
            "on_sale": price.on_sale,
            "currency": price.amount.currency,
        }

    @staticmethod
    def _to_domain(raw: dict) -> UnitPrice:
        currency = raw.get("currency", "USD")
        sale = raw.get("sale_amount")
        return UnitPrice(
            amount=Money(Decimal(raw["amount"]), currency),
            sale_amount=Money(Decimal(sale), currency) if sale is not None else None,
            on_sale=raw.get("on_sale", False),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return read_records(self._file_path)

    def _persist_raw(self, records: list[dict]) -> None:
        write_records(self._file_path, records)

    def _ensure_file(self) -> None:
        ensure_file(self._file_path)
