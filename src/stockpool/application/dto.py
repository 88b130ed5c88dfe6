"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.  Availability values are
rendered as strings ("12" or "unlimited"), money as "$x.xx".
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ResourceDTO:
    id: str
    name: str
    kind: str
    manages_stock: bool
    low_stock_threshold: int | None
    pricing_strategy: str | None
    price: str | None
    members: list[str]  # names of single items, pools only


@dataclass(frozen=True)
class ClaimDTO:
    id: str
    resource_name: str
    quantity: int
    status: str
    claimed_from: str | None
    expires_at: str | None
    reference: str | None
    note: str | None


@dataclass(frozen=True)
class StockDTO:
    """Output: the stock picture of one resource at one instant."""

    resource_name: str
    manages_stock: bool
    capacity: str
    available: str
    currently_claimed: int
    active_and_planned_claimed: int
    future_claimed: int
    in_stock: bool
    low_stock: bool
    claims: list[ClaimDTO]


@dataclass(frozen=True)
class CalendarDayDTO:
    day: str  # ISO date
    min: str
    max: str


@dataclass(frozen=True)
class CalendarDTO:
    resource_name: str
    days: list[CalendarDayDTO]
    min_available: str
    max_available: str


@dataclass(frozen=True)
class TimelinePointDTO:
    at: str  # HH:MM:SS
    available: str


@dataclass(frozen=True)
class MemberDTO:
    name: str
    kind: str
    manages_stock: bool
    available: str
    price: str | None


@dataclass(frozen=True)
class PoolDTO:
    """Output: a pool with its members and aggregate availability."""

    name: str
    pricing_strategy: str
    available: str
    members: list[MemberDTO]
    price_range: tuple[str, str] | None


@dataclass(frozen=True)
class QuoteDTO:
    pool_name: str
    price: str | None
    item_name: str | None  # set when quoted against a reservation state
    available: str


@dataclass(frozen=True)
class PoolClaimDTO:
    pool_name: str
    claims: list[ClaimDTO]
    unmanaged_items: list[str]  # items that took a unit without a ledger claim


@dataclass(frozen=True)
class ValidationReportDTO:
    pool_name: str
    valid: bool
    errors: list[str]
    warnings: list[str]
