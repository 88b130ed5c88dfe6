"""Parsing helpers shared by the CLI commands."""

from __future__ import annotations

from datetime import date, datetime, timezone

import click

from stockpool.domain.model.ledger import Reference

# Accepted by every date/time option; naive values are taken as UTC.
INSTANT = click.DateTime(formats=["%Y-%m-%d", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"])
DAY = click.DateTime(formats=["%Y-%m-%d"])


def as_instant(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def as_day(value: datetime | None) -> date | None:
    return value.date() if value is not None else None


def parse_reference(raw: str | None) -> Reference | None:
    if raw is None:
        return None
    try:
        return Reference.parse(raw)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def parse_counts(raw: str) -> dict[str, int]:
    """Parse 'Room A:2,Room B:1' into {name: qty} dict."""
    result: dict[str, int] = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ItemName:Quantity'."
            )
        name, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for item '{name}'."
            )
        result[name.strip()] = qty
    return result


def parse_names(raw: str) -> list[str]:
    """Parse 'Room A, Room B' into a list of names."""
    return [name.strip() for name in raw.split(",") if name.strip()]
