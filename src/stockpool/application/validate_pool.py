"""Application service: Validate Pool use case."""

from __future__ import annotations

from stockpool.application.dto import ValidationReportDTO
from stockpool.application.lookup import build_allocator, require_resource
from stockpool.domain.clock import Clock
from stockpool.domain.repository.ledger_repository import LedgerRepository
from stockpool.domain.repository.price_repository import PriceRepository
from stockpool.domain.repository.resource_repository import ResourceRepository


class ValidatePoolHandler:

    def __init__(
        self,
        resource_repo: ResourceRepository,
        ledger_repo: LedgerRepository,
        price_repo: PriceRepository,
        clock: Clock,
    ) -> None:
        self._resource_repo = resource_repo
        self._ledger_repo = ledger_repo
        self._price_repo = price_repo
        self._clock = clock

    def handle(self, pool_name: str, strict: bool = False) -> ValidationReportDTO:
        pool = require_resource(self._resource_repo, pool_name)
        allocator = build_allocator(
            pool, self._resource_repo, self._ledger_repo, self._price_repo, self._clock
        )
        report = allocator.validate_configuration(strict=strict)
        return ValidationReportDTO(
            pool_name=pool.name,
            valid=report.valid,
            errors=report.errors,
            warnings=report.warnings,
        )
