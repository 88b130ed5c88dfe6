"""Sweep-line availability over a resource's ledger entries.

Pure functions, no repository access.  Everything derives from one formula,
evaluated for a single instant ``t``::

    available(t) = max(0, base(t) + reinstated(t))

    base(t)       = sum of COMPLETED non-claim entries not expired at t
    reinstated(t) = sum of PENDING claims NOT active at t

A claim's DECREASE is permanent once written, but while the claim is not in
force (not started yet, or already expired) its amount is added back.  So
one ledger answers "available now" and "available on day N" without any
per-date rows and without a background job releasing expired claims.

Availability only changes at entry boundaries (``claimed_from`` and
``expires_at``), so the calendar evaluates the formula at each day's start,
its end, and every boundary falling inside it.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo

from stockpool.domain.exceptions import ValidationError
from stockpool.domain.model.ledger import LedgerEntry
from stockpool.domain.model.value_objects import Availability

ONE_DAY = timedelta(days=1)
LAST_SECOND = timedelta(seconds=1)


@dataclass(frozen=True)
class DayRange:
    min: Availability
    max: Availability


@dataclass(frozen=True)
class Calendar:
    """Per-day min/max availability plus the extremes over the whole range."""

    days: dict[date, DayRange]
    min_available: Availability
    max_available: Availability


# --- Point-in-time ------------------------------------------------------------


def available_at(entries: Iterable[LedgerEntry], instant: datetime) -> int:
    total = 0
    for entry in entries:
        if entry.counts_toward_stock:
            if not entry.is_expired_at(instant):
                total += entry.quantity
        elif entry.is_pending_claim and not entry.is_active_at(instant):
            total += entry.quantity
    return max(0, total)


def window_minimum(
    entries: Sequence[LedgerEntry],
    start: datetime,
    until: datetime | None = None,
) -> int:
    """Lowest availability anywhere in the half-open window ``[start, until)``.

    ``until=None`` means the window never closes.
    """
    if until is not None and until <= start:
        raise ValidationError("Window end must be after its start")

    instants = {start}
    for entry in entries:
        for boundary in entry.boundaries():
            if boundary > start and (until is None or boundary < until):
                instants.add(boundary)
    return min(available_at(entries, t) for t in instants)


# --- Day helpers --------------------------------------------------------------


def day_bounds(day: date, tz: tzinfo = timezone.utc) -> tuple[datetime, datetime]:
    """First and last second of a calendar day."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    return start, start + ONE_DAY - LAST_SECOND


def as_day(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def calendar_range(
    today: date,
    from_: date | datetime | None,
    until: date | datetime | None,
    default_days: int,
) -> tuple[date, date]:
    """First and last day of a calendar; the span defaults to ``default_days``."""
    first_day = as_day(from_) if from_ is not None else today
    last_day = as_day(until) if until is not None else first_day + timedelta(days=default_days)
    return first_day, last_day


def days_between(first_day: date, last_day: date) -> list[date]:
    if last_day < first_day:
        raise ValidationError(f"Range end {last_day} is before its start {first_day}")
    count = (last_day - first_day).days + 1
    return [first_day + timedelta(days=i) for i in range(count)]


def event_instants(
    entries: Iterable[LedgerEntry], start: datetime, end: datetime
) -> list[datetime]:
    """Start, end and every entry boundary inside ``[start, end]``, sorted."""
    instants = {start, end}
    for entry in entries:
        for boundary in entry.boundaries():
            if start <= boundary <= end:
                instants.add(boundary)
    return sorted(instants)


# --- Calendars ----------------------------------------------------------------


def build_calendar(
    entries: Sequence[LedgerEntry],
    first_day: date,
    last_day: date,
    tz: tzinfo = timezone.utc,
) -> Calendar:
    days: dict[date, DayRange] = {}
    for day in days_between(first_day, last_day):
        start, end = day_bounds(day, tz)
        levels = [available_at(entries, t) for t in event_instants(entries, start, end)]
        days[day] = DayRange(min=Availability(min(levels)), max=Availability(max(levels)))
    return _with_extremes(days)


def uniform_calendar(
    first_day: date, last_day: date, level: Availability
) -> Calendar:
    """A calendar with the same level every day (unmanaged stock, empty pools)."""
    days = {day: DayRange(min=level, max=level) for day in days_between(first_day, last_day)}
    return _with_extremes(days)


def sum_calendars(calendars: Sequence[Calendar]) -> Calendar:
    """Add calendars day by day; all must cover the same days."""
    if not calendars:
        raise ValidationError("Nothing to sum")
    days: dict[date, DayRange] = {}
    for day in calendars[0].days:
        days[day] = DayRange(
            min=sum((c.days[day].min for c in calendars), Availability(0)),
            max=sum((c.days[day].max for c in calendars), Availability(0)),
        )
    return _with_extremes(days)


def _with_extremes(days: dict[date, DayRange]) -> Calendar:
    if not days:
        return Calendar(days={}, min_available=Availability(0), max_available=Availability(0))
    return Calendar(
        days=days,
        min_available=min(r.min for r in days.values()),
        max_available=max(r.max for r in days.values()),
    )


# --- Intraday timeline --------------------------------------------------------


def day_timeline(
    entries: Sequence[LedgerEntry], day: date, tz: tzinfo = timezone.utc
) -> dict[time, Availability]:
    """Availability at the start of the day and at every change during it."""
    start, end = day_bounds(day, tz)
    timeline: dict[time, Availability] = {}
    for instant in event_instants(entries, start, end):
        if instant == end:
            continue
        key = instant.astimezone(tz).time()
        if key not in timeline:
            timeline[key] = Availability(available_at(entries, instant))
    return timeline


def merge_timelines(timelines: Sequence[dict[time, Availability]]) -> dict[time, Availability]:
    """Sum step functions: each timeline holds its last value until it changes."""
    keys = sorted({key for timeline in timelines for key in timeline})
    merged: dict[time, Availability] = {}
    for key in keys:
        total = Availability(0)
        for timeline in timelines:
            current = Availability(0)
            for at in sorted(timeline):
                if at > key:
                    break
                current = timeline[at]
            total = total + current
        merged[key] = total
    return merged

