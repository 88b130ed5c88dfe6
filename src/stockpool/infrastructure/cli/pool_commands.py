"""CLI commands for pools."""

from __future__ import annotations

from datetime import datetime

import click

from stockpool.application.claim_pool import ClaimPoolHandler
from stockpool.application.quote_pool import QuotePoolHandler
from stockpool.application.release_pool import ReleasePoolHandler
from stockpool.application.show_calendar import ShowCalendarHandler
from stockpool.application.show_pool import ShowPoolHandler
from stockpool.application.validate_pool import ValidatePoolHandler
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
    parse_counts,
    parse_reference,
)
from stockpool.infrastructure.cli.stock_commands import display_calendar
from stockpool.infrastructure.config import get_settings


def _repos() -> dict:
    return {
        "resource_repo": resource_repository(),
        "ledger_repo": ledger_repository(),
        "price_repo": price_repository(),
        "clock": clock(),
    }


@click.command("show")
@click.option("--pool", required=True, help="Pool name.")
@click.option("--from", "from_", type=INSTANT, default=None, help="Window start.")
@click.option("--until", type=INSTANT, default=None, help="Window end.")
def pool_show(pool: str, from_: datetime | None, until: datetime | None) -> None:
    """Show a pool, its single items and what is available."""
    handler = ShowPoolHandler(**_repos())

    try:
        dto = handler.handle(pool, as_instant(from_), as_instant(until))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Pool '{dto.name}'  (strategy={dto.pricing_strategy}, available={dto.available})")
    if dto.price_range:
        click.echo(f"Prices: {dto.price_range[0]} - {dto.price_range[1]}")
    click.echo()
    click.echo(f"  {'Item':<20} {'Kind':<8} {'Available':>10} {'Price':>10}")
    click.echo(f"  {'-'*51}")
    for m in dto.members:
        click.echo(f"  {m.name:<20} {m.kind:<8} {m.available:>10} {m.price or '-':>10}")


@click.command("quote")
@click.option("--pool", required=True, help="Pool name.")
@click.option("--skip", type=int, default=0, show_default=True, help="Units already taken.")
@click.option("--pending", default=None, help="Units per item already taken, as 'Item:Qty,Item:Qty'.")
@click.option("--sale/--regular", "sales_price", default=None, help="Force sale or regular prices.")
@click.option("--from", "from_", type=INSTANT, default=None, help="Booking start.")
@click.option("--until", type=INSTANT, default=None, help="Booking end.")
def pool_quote(
    pool: str,
    skip: int,
    pending: str | None,
    sales_price: bool | None,
    from_: datetime | None,
    until: datetime | None,
) -> None:
    """Quote the price of the next unit of a pool."""
    handler = QuotePoolHandler(**_repos())

    try:
        dto = handler.handle(
            pool,
            skip=skip,
            sales_price=sales_price,
            from_=as_instant(from_),
            until=as_instant(until),
            pending=parse_counts(pending) if pending else None,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if dto.price is None:
        click.echo(f"No priced unit left in '{dto.pool_name}' (available={dto.available})")
        return
    source = f" from '{dto.item_name}'" if dto.item_name else ""
    click.echo(f"Next unit of '{dto.pool_name}'{source}: {dto.price}")


@click.command("claim")
@click.option("--pool", required=True, help="Pool name.")
@click.option("--quantity", required=True, type=int, help="Units to claim.")
@click.option("--from", "from_", type=INSTANT, default=None, help="Start (default: now).")
@click.option("--until", type=INSTANT, default=None, help="End (default: until released).")
@click.option("--reference", default=None, help="Reference as 'type:id'.")
@click.option("--note", default=None, help="Free-text note.")
def pool_claim(
    pool: str,
    quantity: int,
    from_: datetime | None,
    until: datetime | None,
    reference: str | None,
    note: str | None,
) -> None:
    """Claim units of a pool from its single items."""
    handler = ClaimPoolHandler(**_repos())

    try:
        dto = handler.handle(
            pool,
            quantity,
            reference=parse_reference(reference),
            from_=as_instant(from_),
            until=as_instant(until),
            note=note,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Claimed {quantity} unit(s) of '{dto.pool_name}':")
    for c in dto.claims:
        click.echo(f"  {c.resource_name:<20} claim {c.id}")
    for name in dto.unmanaged_items:
        click.echo(f"  {name:<20} (stock not managed)")


@click.command("release")
@click.option("--pool", required=True, help="Pool name.")
@click.option("--reference", required=True, help="Reference as 'type:id'.")
def pool_release(pool: str, reference: str) -> None:
    """Release every claim on a pool made for a reference."""
    handler = ReleasePoolHandler(**_repos())

    try:
        count = handler.handle(pool, parse_reference(reference))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Released {count} claim(s) of '{pool}' for {reference}.")


@click.command("validate")
@click.option("--pool", required=True, help="Pool name.")
@click.option("--strict", is_flag=True, default=False, help="Treat warnings as errors.")
def pool_validate(pool: str, strict: bool) -> None:
    """Check a pool's configuration."""
    handler = ValidatePoolHandler(**_repos())

    try:
        report = handler.handle(pool, strict=strict)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    for error in report.errors:
        click.echo(f"ERROR:   {error}")
    for warning in report.warnings:
        click.echo(f"WARNING: {warning}")
    if not report.valid:
        raise click.ClickException(f"Pool '{report.pool_name}' is invalid")
    click.echo(f"Pool '{report.pool_name}' is valid.")


@click.command("calendar")
@click.option("--pool", required=True, help="Pool name.")
@click.option("--from", "from_", type=DAY, default=None, help="First day (default: today).")
@click.option("--until", type=DAY, default=None, help="Last day.")
def pool_calendar(pool: str, from_: datetime | None, until: datetime | None) -> None:
    """Show per-day min/max availability of a pool."""
    handler = ShowCalendarHandler(**_repos())

    try:
        dto = handler.handle(
            pool,
            as_day(from_),
            as_day(until),
            default_days=get_settings().calendar_days,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_calendar(dto)
