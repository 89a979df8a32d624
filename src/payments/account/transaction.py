"""Append-only transaction log.

One TransactionRecord per transfer. Records are never deleted; only their
status moves, along the same graph as payments.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Float, Identifier, String

from payments.domain import payments
from payments.payment.status import PaymentStatus, assert_can_transition


@payments.aggregate
class TransactionRecord:
    from_account_id = Identifier(required=True)
    to_account_id = Identifier(required=True)
    amount = Float(required=True, min_value=0.01)
    description = String(max_length=500)
    status = String(choices=PaymentStatus, default=PaymentStatus.PROCESSING.value)
    failure_reason = String(max_length=500)
    refund_of = Identifier()  # Set on reversal entries
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def start(cls, from_account_id, to_account_id, amount, description="", refund_of=None):
        now = datetime.now(UTC)
        return cls(
            from_account_id=str(from_account_id),
            to_account_id=str(to_account_id),
            amount=round(float(amount), 2),
            description=description,
            status=PaymentStatus.PROCESSING.value,
            refund_of=refund_of,
            created_at=now,
            updated_at=now,
        )

    def _move(self, target: PaymentStatus) -> None:
        assert_can_transition(self.status, target)
        self.status = target.value
        self.updated_at = datetime.now(UTC)

    def complete(self) -> None:
        self._move(PaymentStatus.COMPLETED)

    def fail(self, reason: str) -> None:
        self._move(PaymentStatus.FAILED)
        self.failure_reason = reason

    def mark_refunded(self) -> None:
        self._move(PaymentStatus.REFUNDED)
