"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import total_ordering

from stockpool.domain.exceptions import ValidationError

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """Monetary amount with currency.

    Uses Decimal to avoid floating-point rounding errors.  Intermediate
    results (e.g. a per-day price scaled by a fractional number of days)
    keep full precision; call ``rounded()`` at the boundary.
    """

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int | Decimal) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            raise TypeError(
                f"Can only multiply Money by int or Decimal, got {type(factor).__name__}"
            )
        return Money(self.amount * factor, self.currency)

    def __truediv__(self, divisor: int | Decimal) -> Money:
        if isinstance(divisor, bool) or not isinstance(divisor, (int, Decimal)):
            raise TypeError(
                f"Can only divide Money by int or Decimal, got {type(divisor).__name__}"
            )
        if divisor == 0:
            raise ValidationError("Cannot divide Money by zero")
        return Money(self.amount / Decimal(divisor), self.currency)

    def __lt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount >= other.amount

    def rounded(self) -> Money:
        """Round half-up to whole cents."""
        return Money(self.amount.quantize(CENTS, rounding=ROUND_HALF_UP), self.currency)

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"${self.amount:.2f}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal, currency: str = "USD") -> Money:
        """Convenient factory that coerces to Decimal safely."""
        try:
            return Money(Decimal(str(amount)), currency)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc


@total_ordering
@dataclass(frozen=True, eq=False)
class Availability:
    """A stock level that is either a concrete count or unbounded.

    Resources that do not manage stock are unbounded.  Arithmetic saturates:
    anything plus unbounded is unbounded, and subtraction never goes below
    zero.  Compares directly with ``int`` so callers can write
    ``available >= quantity``; unbounded orders above every count.
    """

    quantity: int | None = None  # None means unbounded

    def __post_init__(self) -> None:
        if self.quantity is not None and self.quantity < 0:
            raise ValidationError(
                f"Availability cannot be negative, got {self.quantity}"
            )

    @staticmethod
    def of(quantity: int) -> Availability:
        return Availability(max(0, quantity))

    @property
    def is_unbounded(self) -> bool:
        return self.quantity is None

    def covers(self, requested: int) -> bool:
        return self.is_unbounded or self.quantity >= requested

    # --- Arithmetic -----------------------------------------------------------

    def __add__(self, other: Availability | int) -> Availability:
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        if self.is_unbounded or other.is_unbounded:
            return UNBOUNDED
        return Availability(self.quantity + other.quantity)

    __radd__ = __add__

    def __sub__(self, other: int) -> Availability:
        if not isinstance(other, int):
            return NotImplemented
        if self.is_unbounded:
            return self
        return Availability.of(self.quantity - other)

    # --- Comparison -----------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        coerced = _coerce(other)
        if coerced is NotImplemented:
            return NotImplemented
        return self._key() == coerced._key()

    def __lt__(self, other: Availability | int) -> bool:
        coerced = _coerce(other)
        if coerced is NotImplemented:
            return NotImplemented
        return self._key() < coerced._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __int__(self) -> int:
        if self.is_unbounded:
            raise ValueError("Unbounded availability has no integer value")
        return self.quantity

    def __str__(self) -> str:
        return "unlimited" if self.is_unbounded else str(self.quantity)

    def _key(self) -> tuple[int, int]:
        return (1, 0) if self.is_unbounded else (0, self.quantity)


UNBOUNDED = Availability(None)


def _coerce(value: object) -> Availability:
    if isinstance(value, Availability):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return Availability.of(value)
    return NotImplemented
