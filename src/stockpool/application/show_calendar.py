"""Application service: Show Calendar use cases (queries).

Both work for single resources and pools; a pool's calendar is the sum of
its members' calendars.
"""

from __future__ import annotations

from datetime import date

from stockpool.application.dto import CalendarDTO, TimelinePointDTO
from stockpool.application.lookup import build_allocator, require_resource
from stockpool.application.mapping import to_calendar_dto
from stockpool.domain.clock import Clock
from stockpool.domain.repository.ledger_repository import LedgerRepository
from stockpool.domain.repository.price_repository import PriceRepository
from stockpool.domain.repository.resource_repository import ResourceRepository
from stockpool.domain.service.stock_ledger import DEFAULT_CALENDAR_DAYS, StockLedger


class _AvailabilityQuery:

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

    def _subject(self, resource_name: str):
        resource = require_resource(self._resource_repo, resource_name)
        if resource.is_pool:
            return resource, build_allocator(
                resource,
                self._resource_repo,
                self._ledger_repo,
                self._price_repo,
                self._clock,
            )
        return resource, StockLedger(resource, self._ledger_repo, self._clock)


class ShowCalendarHandler(_AvailabilityQuery):

    def handle(
        self,
        resource_name: str,
        from_: date | None = None,
        until: date | None = None,
        default_days: int = DEFAULT_CALENDAR_DAYS,
    ) -> CalendarDTO:
        resource, subject = self._subject(resource_name)
        calendar = subject.calendar(from_, until, default_days=default_days)
        return to_calendar_dto(resource.name, calendar)


class ShowTimelineHandler(_AvailabilityQuery):

    def handle(self, resource_name: str, day: date | None = None) -> list[TimelinePointDTO]:
        _, subject = self._subject(resource_name)
        timeline = subject.day_timeline(day)
        return [
            TimelinePointDTO(at=at.strftime("%H:%M:%S"), available=str(level))
            for at, level in sorted(timeline.items())
        ]
