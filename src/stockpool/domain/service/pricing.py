"""Booking price arithmetic.

A booking resource is priced per day (24 hours).  A booking window is
charged by its exact length in minutes, so 12 hours costs half a day and
36 hours one and a half.  Windows shorter than a minute still cost one
minute.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from stockpool.domain.exceptions import ValidationError
from stockpool.domain.model.value_objects import Money

MINUTES_PER_DAY = Decimal(1440)
MIN_BOOKING_DAYS = Decimal(1) / MINUTES_PER_DAY


def booking_days(from_: datetime, until: datetime) -> Decimal:
    if until < from_:
        raise ValidationError("Booking end must not be before its start")
    minutes = int((until - from_).total_seconds() // 60)
    return max(Decimal(minutes) / MINUTES_PER_DAY, MIN_BOOKING_DAYS)


def booking_price(price_per_day: Money, from_: datetime, until: datetime) -> Money:
    """Unrounded price of one unit for the window."""
    return price_per_day * booking_days(from_, until)
