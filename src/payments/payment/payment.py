"""Payment aggregate — one biller-code payment instruction per order.

State Machine:
    PENDING → PROCESSING → COMPLETED → REFUNDED
    PENDING | PROCESSING → FAILED

A payment is keyed by its order: the id is derived from the order id, so a
second instruction for the same order collides instead of duplicating.
"""

from datetime import UTC, datetime, timedelta

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String

from payments.domain import payments
from payments.payment.status import PaymentStatus, assert_can_transition, can_transition

DEFAULT_EXPIRY_MINUTES = 30


def payment_id_for(order_id) -> str:
    return f"pay-{order_id}"


def payment_reference_for(order_id) -> str:
    return f"BP-{order_id}"


@payments.aggregate
class Payment:
    order_id = Identifier(required=True)
    biller_code = String(required=True, max_length=20)
    reference = String(required=True, max_length=255)
    amount = Float(required=True, min_value=0.01)
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payer_account_id = Identifier()
    transaction_id = Identifier()
    refund_transaction_id = Identifier()
    failure_reason = String(max_length=500)
    expires_at = DateTime()
    paid_at = DateTime()
    refunded_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def issue(cls, order_id, amount, biller_code, expiry_minutes=DEFAULT_EXPIRY_MINUTES):
        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Payment amount must be positive"]})
        now = datetime.now(UTC)
        return cls(
            id=payment_id_for(order_id),
            order_id=str(order_id),
            biller_code=str(biller_code),
            reference=payment_reference_for(order_id),
            amount=round(float(amount), 2),
            status=PaymentStatus.PENDING.value,
            expires_at=now + timedelta(minutes=expiry_minutes),
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def is_expired(self, now=None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(UTC)
        expires_at = self.expires_at if self.expires_at.tzinfo else self.expires_at.replace(tzinfo=UTC)
        return now >= expires_at

    def can_move_to(self, target: PaymentStatus) -> bool:
        return can_transition(self.status, target)

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def _move(self, target: PaymentStatus) -> None:
        assert_can_transition(self.status, target)
        self.status = target.value
        self.updated_at = datetime.now(UTC)

    def start_processing(self, payer_account_id) -> None:
        self._move(PaymentStatus.PROCESSING)
        self.payer_account_id = str(payer_account_id)

    def complete(self, transaction_id) -> None:
        self._move(PaymentStatus.COMPLETED)
        self.transaction_id = str(transaction_id)
        self.paid_at = self.updated_at

    def fail(self, reason: str) -> None:
        self._move(PaymentStatus.FAILED)
        self.failure_reason = reason

    def refund(self, refund_transaction_id) -> None:
        self._move(PaymentStatus.REFUNDED)
        self.refund_transaction_id = str(refund_transaction_id)
        self.refunded_at = self.updated_at
