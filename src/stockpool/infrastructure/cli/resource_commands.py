"""CLI commands for the Resource aggregate."""

from __future__ import annotations

import click

from stockpool.application.add_resource import AddResourceHandler
from stockpool.application.attach_members import AttachMembersHandler
from stockpool.application.list_resources import ListResourcesHandler
from stockpool.application.set_pricing_strategy import SetPricingStrategyHandler
from stockpool.domain.exceptions import DomainException
from stockpool.infrastructure.bootstrap import price_repository, resource_repository
from stockpool.infrastructure.cli.params import parse_names


@click.command("add")
@click.option("--name", required=True, help="Resource name.")
@click.option(
    "--kind",
    type=click.Choice(["simple", "booking", "pool"], case_sensitive=False),
    default="simple",
    show_default=True,
    help="Resource kind.",
)
@click.option("--price", default=None, help="Unit price (per day for bookings), e.g. 30.00.")
@click.option("--sale-price", default=None, help="Sale price, e.g. 25.00.")
@click.option("--on-sale", is_flag=True, default=False, help="Quote the sale price by default.")
@click.option("--unmanaged", is_flag=True, default=False, help="Do not track stock (unlimited).")
@click.option("--low-stock", type=int, default=None, help="Low stock threshold.")
@click.option(
    "--strategy",
    type=click.Choice(["lowest", "highest", "average"], case_sensitive=False),
    default=None,
    help="Pricing strategy (pools only).",
)
def resource_add(
    name: str,
    kind: str,
    price: str | None,
    sale_price: str | None,
    on_sale: bool,
    unmanaged: bool,
    low_stock: int | None,
    strategy: str | None,
) -> None:
    """Add a new resource."""
    handler = AddResourceHandler(
        resource_repo=resource_repository(),
        price_repo=price_repository(),
    )

    try:
        dto = handler.handle(
            name=name,
            kind=kind,
            manages_stock=False if unmanaged else None,
            low_stock_threshold=low_stock,
            pricing_strategy=strategy,
            price=price,
            sale_price=sale_price,
            on_sale=on_sale,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    priced = f" at {dto.price}" if dto.price else ""
    click.echo(f"Resource #{dto.id} '{dto.name}' ({dto.kind}) added{priced}")


@click.command("list")
def resource_list() -> None:
    """List all resources."""
    handler = ListResourcesHandler(
        resource_repo=resource_repository(),
        price_repo=price_repository(),
    )

    try:
        resources = handler.handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not resources:
        click.echo("No resources found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Kind':<8} {'Stock':<9} {'Price':>10}  Members")
    click.echo("-" * 70)
    for r in resources:
        stock = "managed" if r.manages_stock else "-"
        members = ", ".join(r.members)
        click.echo(
            f"{r.id:<6} {r.name:<20} {r.kind:<8} {stock:<9} {r.price or '-':>10}  {members}"
        )


@click.command("attach")
@click.option("--pool", required=True, help="Pool name.")
@click.option("--items", required=True, help="Single items as 'Name,Name'.")
def resource_attach(pool: str, items: str) -> None:
    """Attach single items to a pool."""
    handler = AttachMembersHandler(
        resource_repo=resource_repository(),
        price_repo=price_repository(),
    )

    try:
        dto = handler.handle(pool_name=pool, member_names=parse_names(items))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Pool '{dto.name}' now holds: {', '.join(dto.members)}")


@click.command("set-strategy")
@click.option("--pool", required=True, help="Pool name.")
@click.option(
    "--strategy",
    required=True,
    type=click.Choice(["lowest", "highest", "average"], case_sensitive=False),
    help="Pricing strategy.",
)
def resource_set_strategy(pool: str, strategy: str) -> None:
    """Change a pool's pricing strategy."""
    handler = SetPricingStrategyHandler(resource_repo=resource_repository())

    try:
        applied = handler.handle(pool_name=pool, strategy=strategy)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Pool '{pool}' now prices by {applied}")
