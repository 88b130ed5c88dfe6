import click

from stockpool.infrastructure.cli.pool_commands import (
    pool_calendar,
    pool_claim,
    pool_quote,
    pool_release,
    pool_show,
    pool_validate,
)
from stockpool.infrastructure.cli.resource_commands import (
    resource_add,
    resource_attach,
    resource_list,
    resource_set_strategy,
)
from stockpool.infrastructure.cli.stock_commands import (
    stock_calendar,
    stock_claim,
    stock_decrease,
    stock_increase,
    stock_release,
    stock_release_expired,
    stock_show,
    stock_timeline,
)
from stockpool.infrastructure.config import get_settings
from stockpool.infrastructure.logging_config import setup_logging


@click.group()
def cli() -> None:
    """Stockpool — availability over time for stock, bookings and pools"""
    setup_logging(get_settings().log_level)


@cli.group()
def resource() -> None:
    """Manage resources and pool membership."""


@cli.group()
def stock() -> None:
    """Manage stock and claims of single resources."""


@cli.group()
def pool() -> None:
    """Quote, claim and inspect pools."""


# Register subcommands
resource.add_command(resource_add)
resource.add_command(resource_attach)
resource.add_command(resource_list)
resource.add_command(resource_set_strategy)
stock.add_command(stock_calendar)
stock.add_command(stock_claim)
stock.add_command(stock_decrease)
stock.add_command(stock_increase)
stock.add_command(stock_release)
stock.add_command(stock_release_expired)
stock.add_command(stock_show)
stock.add_command(stock_timeline)
pool.add_command(pool_calendar)
pool.add_command(pool_claim)
pool.add_command(pool_quote)
pool.add_command(pool_release)
pool.add_command(pool_show)
pool.add_command(pool_validate)
