"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class InsufficientStock(ValidationError):
    """A claim or decrease asked for more than is available.

    Recoverable: the caller should re-quote or shrink the request.
    """

    def __init__(self, available: int, requested: int, resource: str | None = None) -> None:
        self.available = available
        self.requested = requested
        self.resource = resource
        subject = f" for {resource}" if resource else ""
        super().__init__(
            f"Insufficient stock{subject} (requested {requested}, {available} available)"
        )


class NotPoolResource(DomainException):
    """A pool-only operation was called on a non-pool resource."""


class PoolHasNoMembers(DomainException):
    """A pool has no single items to allocate from."""


class InvalidPoolConfiguration(DomainException):
    """A pool failed a configuration check."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)
