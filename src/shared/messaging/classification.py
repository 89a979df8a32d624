"""Maps a consumer failure to what the broker should do with the message."""

from enum import Enum

from protean.exceptions import DatabaseError, ExpectedVersionError
from pydantic import ValidationError as SchemaError

from shared.errors import (
    ConcurrencyConflict,
    InsufficientStockError,
    MalformedMessageError,
    NotFoundError,
    RemoteTimeoutError,
    TransientInfraError,
    ValidationError,
)


class Disposition(Enum):
    RETRY = "retry"  # nack; the broker redelivers with backoff up to its ceiling
    DEAD_LETTER = "dead_letter"  # ack and park on <stream>:dlq for inspection
    DROP = "drop"  # ack; the outcome is already settled


# First match wins, so subclasses must precede their bases.
_RULES: tuple[tuple[type[BaseException], Disposition], ...] = (
    (MalformedMessageError, Disposition.DEAD_LETTER),
    (SchemaError, Disposition.DEAD_LETTER),
    (ValidationError, Disposition.DEAD_LETTER),
    (NotFoundError, Disposition.DEAD_LETTER),
    (InsufficientStockError, Disposition.DROP),
    (TransientInfraError, Disposition.RETRY),
    (ConcurrencyConflict, Disposition.RETRY),
    (RemoteTimeoutError, Disposition.RETRY),
    (ExpectedVersionError, Disposition.RETRY),
    (DatabaseError, Disposition.RETRY),
    (ConnectionError, Disposition.RETRY),
    (TimeoutError, Disposition.RETRY),
)


def classify(exc: BaseException) -> Disposition:
    """Decide between retry-with-backoff, dead-letter and ack-and-drop.

    Unknown failures are retried: the broker's retry ceiling dead-letters
    them eventually, so nothing is lost silently.
    """
    for exc_type, disposition in _RULES:
        if isinstance(exc, exc_type):
            return disposition
    return Disposition.RETRY
