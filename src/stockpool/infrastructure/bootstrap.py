"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from pathlib import Path

from stockpool.domain.clock import SystemClock
from stockpool.infrastructure.config import get_settings
from stockpool.infrastructure.persistence.json_ledger_repository import (
    JsonLedgerRepository,
)
from stockpool.infrastructure.persistence.json_price_repository import (
    JsonPriceRepository,
)
from stockpool.infrastructure.persistence.json_resource_repository import (
    JsonResourceRepository,
)


def _data_dir() -> Path:
    return get_settings().data_dir


def resource_repository() -> JsonResourceRepository:
    return JsonResourceRepository(_data_dir() / "resources.json")


def ledger_repository() -> JsonLedgerRepository:
    return JsonLedgerRepository(_data_dir() / "ledger.json")


def price_repository() -> JsonPriceRepository:
    return JsonPriceRepository(_data_dir() / "prices.json")


def clock() -> SystemClock:
    return SystemClock()
