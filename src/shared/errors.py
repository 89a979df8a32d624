"""Error taxonomy shared by every fulfillment context.

``ValidationError`` and ``NotFoundError`` are Protean's own exceptions so that
aggregate invariants, repository lookups and application code all raise the
same types. The remaining errors describe saga-level failures.
"""

from protean.exceptions import ObjectNotFoundError, ProteanException, ValidationError

NotFoundError = ObjectNotFoundError

__all__ = [
    "ConcurrencyConflict",
    "FulfillmentError",
    "InsufficientFundsError",
    "InsufficientStockError",
    "MalformedMessageError",
    "NotFoundError",
    "RemoteTimeoutError",
    "TransientInfraError",
    "ValidationError",
]


class FulfillmentError(ProteanException):
    """Base class for saga errors that are not plain validation failures."""

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.message


class InsufficientStockError(FulfillmentError):
    """The targeted warehouse cannot cover the requested quantity. Nothing was debited."""


class ConcurrencyConflict(FulfillmentError):
    """A compare-and-swap kept losing to concurrent writers until attempts ran out."""


class RemoteTimeoutError(FulfillmentError):
    """A synchronous call to another context exceeded its time budget."""


class MalformedMessageError(FulfillmentError):
    """A broker message failed schema validation. Never retried."""


class TransientInfraError(FulfillmentError):
    """Infrastructure was momentarily unavailable. Safe to redeliver."""


class InsufficientFundsError(FulfillmentError):
    """The paying account cannot cover a transfer. No balance changed."""
