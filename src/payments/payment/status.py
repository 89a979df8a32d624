"""Payment status graph, shared by payments and their transaction log entries.

    PENDING → PROCESSING → COMPLETED → REFUNDED
    PENDING | PROCESSING → FAILED

The values travel verbatim as the ``type`` of payment webhooks.
"""

from enum import Enum

from protean.exceptions import ValidationError


class PaymentStatus(Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


_VALID_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.PROCESSING, PaymentStatus.FAILED},
    PaymentStatus.PROCESSING: {PaymentStatus.COMPLETED, PaymentStatus.FAILED},
    PaymentStatus.COMPLETED: {PaymentStatus.REFUNDED},
    PaymentStatus.FAILED: set(),  # Terminal
    PaymentStatus.REFUNDED: set(),  # Terminal
}


def can_transition(current: str, target: PaymentStatus) -> bool:
    return target in _VALID_TRANSITIONS.get(PaymentStatus(current), set())


def assert_can_transition(current: str, target: PaymentStatus) -> None:
    if not can_transition(current, target):
        raise ValidationError({"status": [f"Cannot transition from {current} to {target.value}"]})
