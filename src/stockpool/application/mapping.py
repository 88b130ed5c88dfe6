"""Domain object → DTO mapping shared by several handlers."""

from __future__ import annotations

from datetime import datetime

from stockpool.application.dto import (
    CalendarDayDTO,
    CalendarDTO,
    ClaimDTO,
    ResourceDTO,
)
from stockpool.domain.model.ledger import Claim
from stockpool.domain.model.resource import Resource, UnitPrice
from stockpool.domain.model.value_objects import Money
from stockpool.domain.service.availability import Calendar


def format_instant(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.strftime("%Y-%m-%d %H:%M %Z").strip()


def format_money(value: Money | None) -> str | None:
    return str(value.rounded()) if value is not None else None


def to_claim_dto(claim: Claim, resource_name: str) -> ClaimDTO:
    return ClaimDTO(
        id=claim.id,
        resource_name=resource_name,
        quantity=claim.quantity,
        status=claim.status.value,
        claimed_from=format_instant(claim.claimed_from),
        expires_at=format_instant(claim.expires_at),
        reference=str(claim.reference) if claim.reference else None,
        note=claim.note,
    )


def to_resource_dto(
    resource: Resource,
    price: UnitPrice | None = None,
    member_names: list[str] | None = None,
) -> ResourceDTO:
    return ResourceDTO(
        id=resource.id,
        name=resource.name,
        kind=resource.kind.value,
        manages_stock=resource.manages_stock,
        low_stock_threshold=resource.low_stock_threshold,
        pricing_strategy=(
            resource.pricing_strategy.value if resource.pricing_strategy else None
        ),
        price=format_money(price.current()) if price else None,
        members=member_names or [],
    )


def to_calendar_dto(resource_name: str, calendar: Calendar) -> CalendarDTO:
    return CalendarDTO(
        resource_name=resource_name,
        days=[
            CalendarDayDTO(day=day.isoformat(), min=str(r.min), max=str(r.max))
            for day, r in calendar.days.items()
        ],
        min_available=str(calendar.min_available),
        max_available=str(calendar.max_available),
    )
