"""CLI commands for single-resource stock and claims."""

from __future__ import annotations

from datetime import datetime

import click

from stockpool.application.claim_stock import ClaimStockHandler
from stockpool.application.decrease_stock import DecreaseStockHandler
from stockpool.application.increase_stock import IncreaseStockHandler
from stockpool.application.release_claim import ReleaseClaimHandler
from stockpool.application.release_expired import ReleaseExpiredHandler
from stockpool.application.show_calendar import ShowCalendarHandler, ShowTimelineHandler
from stockpool.application.show_stock import ShowStockHandler
from stockpool.domain.exceptions import DomainException
from stockpool.infrastructure.bootstrap import (
    clock,
    ledger_repository,
    price_repository,
    resource_repository,
)
from stockpool.infrastructure.cli.params import (
    DAY,
    INSTANT,
    as_day,
    as_instant,
    parse_reference,
)
from stockpool.infrastructure.config import get_settings


@click.command("show")
@click.option("--resource", required=True, help="Resource name.")
@click.option("--as-of", type=INSTANT, default=None, help="Instant to evaluate (default: now).")
def stock_show(resource: str, as_of: datetime | None) -> None:
    """Show stock levels and open claims of a resource."""
    handler = ShowStockHandler(
        resource_repo=resource_repository(),
        ledger_repo=ledger_repository(),
        clock=clock(),
    )

    try:
        dto = handler.handle(resource, as_of=as_instant(as_of))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Resource:  {dto.resource_name}")
    click.echo(f"Capacity:  {dto.capacity}")
    click.echo(f"Available: {dto.available}")
    click.echo(
        f"Claimed:   {dto.currently_claimed} now, "
        f"{dto.active_and_planned_claimed} incl. planned, {dto.future_claimed} future"
    )
    if dto.low_stock:
        click.echo("Warning:   low stock")

    if not dto.claims:
        return
    click.echo()
    click.echo(f"  {'Claim':<34} {'Qty':>5} {'From':<22} {'Until':<22} Reference")
    click.echo(f"  {'-'*96}")
    for c in dto.claims:
        click.echo(
            f"  {c.id:<34} {c.quantity:>5} {c.claimed_from or 'now':<22} "
            f"{c.expires_at or 'released':<22} {c.reference or ''}"
        )


@click.command("increase")
@click.option("--resource", required=True, help="Resource name.")
@click.option("--quantity", required=True, type=int, help="Units to add.")
@click.option("--note", default=None, help="Free-text note.")
@click.option("--reference", default=None, help="Reference as 'type:id'.")
def stock_increase(resource: str, quantity: int, note: str | None, reference: str | None) -> None:
    """Add stock to a resource."""
    handler = IncreaseStockHandler(
        resource_repo=resource_repository(),
        ledger_repo=ledger_repository(),
        clock=clock(),
    )

    try:
        changed = handler.handle(
            resource, quantity, note=note, reference=parse_reference(reference)
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if changed:
        click.echo(f"Stock of '{resource}' increased by {quantity}")
    else:
        click.echo(f"'{resource}' does not manage stock; nothing recorded")


@click.command("decrease")
@click.option("--resource", required=True, help="Resource name.")
@click.option("--quantity", required=True, type=int, help="Units to remove.")
@click.option("--until", type=INSTANT, default=None, help="Give the units back at this instant.")
@click.option("--note", default=None, help="Free-text note.")
@click.option("--reference", default=None, help="Reference as 'type:id'.")
def stock_decrease(
    resource: str,
    quantity: int,
    until: datetime | None,
    note: str | None,
    reference: str | None,
) -> None:
    """Remove stock from a resource, permanently or until a given instant."""
    handler = DecreaseStockHandler(
        resource_repo=resource_repository(),
        ledger_repo=ledger_repository(),
        clock=clock(),
    )

    try:
        handler.handle(
            resource,
            quantity,
            until=as_instant(until),
            note=note,
            reference=parse_reference(reference),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock of '{resource}' decreased by {quantity}")


@click.command("claim")
@click.option("--resource", required=True, help="Resource name.")
@click.option("--quantity", required=True, type=int, help="Units to claim.")
@click.option("--from", "from_", type=INSTANT, default=None, help="Start (default: now).")
@click.option("--until", type=INSTANT, default=None, help="End (default: until released).")
@click.option("--reference", default=None, help="Reference as 'type:id'.")
@click.option("--note", default=None, help="Free-text note.")
def stock_claim(
    resource: str,
    quantity: int,
    from_: datetime | None,
    until: datetime | None,
    reference: str | None,
    note: str | None,
) -> None:
    """Claim units of a resource for a window."""
    handler = ClaimStockHandler(
        resource_repo=resource_repository(),
        ledger_repo=ledger_repository(),
        clock=clock(),
    )

    try:
        dto = handler.handle(
            resource,
            quantity,
            reference=parse_reference(reference),
            from_=as_instant(from_),
            until=as_instant(until),
            note=note,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if dto is None:
        click.echo(f"'{resource}' does not manage stock; nothing to claim")
        return
    click.echo(f"Claim {dto.id}: {dto.quantity} x '{dto.resource_name}'")


@click.command("release")
@click.option("--claim", "claim_id", required=True, help="Claim ID.")
def stock_release(claim_id: str) -> None:
    """Release a claim."""
    handler = ReleaseClaimHandler(
        resource_repo=resource_repository(),
        ledger_repo=ledger_repository(),
        clock=clock(),
    )

    try:
        released = handler.handle(claim_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if released:
        click.echo(f"Claim {claim_id} released.")
    else:
        click.echo(f"Claim {claim_id} was already released.")


@click.command("release-expired")
@click.option("--resource", default=None, help="Resource name (default: all).")
def stock_release_expired(resource: str | None) -> None:
    """Mark claims whose window has closed as released."""
    handler = ReleaseExpiredHandler(
        resource_repo=resource_repository(),
        ledger_repo=ledger_repository(),
        clock=clock(),
    )

    try:
        count = handler.handle(resource)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Released {count} expired claim(s).")


@click.command("calendar")
@click.option("--resource", required=True, help="Resource or pool name.")
@click.option("--from", "from_", type=DAY, default=None, help="First day (default: today).")
@click.option("--until", type=DAY, default=None, help="Last day.")
def stock_calendar(resource: str, from_: datetime | None, until: datetime | None) -> None:
    """Show per-day min/max availability."""
    handler = ShowCalendarHandler(
        resource_repo=resource_repository(),
        ledger_repo=ledger_repository(),
        price_repo=price_repository(),
        clock=clock(),
    )

    try:
        dto = handler.handle(
            resource,
            as_day(from_),
            as_day(until),
            default_days=get_settings().calendar_days,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_calendar(dto)


@click.command("timeline")
@click.option("--resource", required=True, help="Resource or pool name.")
@click.option("--day", type=DAY, default=None, help="Day (default: today).")
def stock_timeline(resource: str, day: datetime | None) -> None:
    """Show every availability change during one day."""
    handler = ShowTimelineHandler(
        resource_repo=resource_repository(),
        ledger_repo=ledger_repository(),
        price_repo=price_repository(),
        clock=clock(),
    )

    try:
        points = handler.handle(resource, as_day(day))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"{'Time':<10} {'Available':>10}")
    click.echo("-" * 21)
    for point in points:
        click.echo(f"{point.at:<10} {point.available:>10}")


def display_calendar(dto) -> None:
    """Shared formatting for displaying a calendar."""
    click.echo(f"Calendar for '{dto.resource_name}'")
    click.echo(f"{'Day':<12} {'Min':>10} {'Max':>10}")
    click.echo("-" * 34)
    for day in dto.days:
        click.echo(f"{day.day:<12} {day.min:>10} {day.max:>10}")
    click.echo("-" * 34)
    click.echo(f"{'Overall':<12} {dto.min_available:>10} {dto.max_available:>10}")
