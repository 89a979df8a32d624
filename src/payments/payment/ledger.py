"""Payment Ledger — instructions, settlement, refunds and voids.

Each operation changes the payment in its own Unit of Work and pushes the
``PAYMENT_EVENT`` webhook only after that Unit of Work has committed.
``refund_in_place`` and ``void_in_place`` are the Unit-of-Work-bound cores,
shared with the refund-request consumer.
"""

from dataclasses import dataclass
from datetime import datetime

from protean import UnitOfWork
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain
from shared.concurrency import retry_on_conflict
from shared.errors import ConcurrencyConflict, InsufficientFundsError, NotFoundError

from payments.account.account import Account
from payments.account.transfers import AccountLedger, merchant_account_for
from payments.domain import logger, payments
from payments.payment.notifier import push_status_change
from payments.payment.payment import DEFAULT_EXPIRY_MINUTES, Payment, payment_id_for
from payments.payment.status import PaymentStatus, assert_can_transition


@dataclass(frozen=True)
class PaymentInstruction:
    payment_id: str
    order_id: str
    biller_code: str
    reference: str
    amount: float
    status: str
    expires_at: datetime

    @classmethod
    def of(cls, payment) -> "PaymentInstruction":
        return cls(
            payment_id=str(payment.id),
            order_id=str(payment.order_id),
            biller_code=payment.biller_code,
            reference=payment.reference,
            amount=payment.amount,
            status=payment.status,
            expires_at=payment.expires_at,
        )


def instruction_settings() -> tuple[str, int]:
    custom = current_domain.config.get("custom", {})
    return (
        str(custom.get("biller_code", "93242")),
        int(custom.get("instruction_expiry_minutes", DEFAULT_EXPIRY_MINUTES)),
    )


def payment_for_order(order_id) -> Payment | None:
    try:
        return current_domain.repository_for(Payment).get(payment_id_for(order_id))
    except ObjectNotFoundError:
        return None


def refund_in_place(payment, reason) -> None:
    """COMPLETED → REFUNDED with a reverse transfer. Must run inside a Unit of Work."""
    assert_can_transition(payment.status, PaymentStatus.REFUNDED)
    reversal = AccountLedger().reverse(payment.transaction_id, f"Refund for {payment.reference}: {reason}")
    payment.refund(reversal.id)
    current_domain.repository_for(Payment).add(payment)


def void_in_place(payment, reason) -> None:
    """PENDING/PROCESSING → FAILED. Must run inside a Unit of Work."""
    payment.fail(reason)
    current_domain.repository_for(Payment).add(payment)


@payments.application_service(part_of=Payment)
class PaymentLedger:
    # -------------------------------------------------------------------
    # Instructions
    # -------------------------------------------------------------------
    def issue_instruction(self, order_id, amount) -> PaymentInstruction:
        """One instruction per order. Re-requesting with the same amount returns it."""
        existing = payment_for_order(order_id)
        if existing is not None:
            if existing.amount != round(float(amount), 2) or existing.status != PaymentStatus.PENDING.value:
                raise ValidationError({"order_id": [f"A payment already exists for order {order_id}"]})
            logger.info("payment_instruction_reissued", order_id=str(order_id), payment_id=str(existing.id))
            return PaymentInstruction.of(existing)

        biller_code, expiry_minutes = instruction_settings()
        merchant_account_for(biller_code)

        payment = Payment.issue(order_id, amount, biller_code, expiry_minutes=expiry_minutes)
        with UnitOfWork():
            current_domain.repository_for(Payment).add(payment)

        logger.info(
            "payment_instruction_issued",
            order_id=str(order_id),
            payment_id=str(payment.id),
            reference=payment.reference,
            amount=payment.amount,
        )
        return PaymentInstruction.of(payment)

    def get_payment(self, payment_id) -> Payment:
        return current_domain.repository_for(Payment).get(str(payment_id))

    def find_by_reference(self, reference) -> Payment:
        payment = current_domain.repository_for(Payment)._dao.query.filter(reference=str(reference)).all().first
        if payment is None:
            raise NotFoundError(f"No payment with reference {reference}")
        return payment

    # -------------------------------------------------------------------
    # Settlement
    # -------------------------------------------------------------------
    def confirm_payment(self, reference, payer_account_id) -> str:
        """Settle an instruction from the payer's account. Returns the final status."""
        payment = self.find_by_reference(reference)
        repo = current_domain.repository_for(Payment)

        if payment.is_expired():
            with UnitOfWork():
                void_in_place(payment, "Payment instruction expired")
            logger.warning("payment_instruction_expired", payment_id=str(payment.id), reference=reference)
            push_status_change(payment)
            return payment.status

        current_domain.repository_for(Account).get(str(payer_account_id))
        with UnitOfWork():
            payment.start_processing(payer_account_id)
            repo.add(payment)
        push_status_change(payment)

        merchant = merchant_account_for(payment.biller_code)
        try:
            record = AccountLedger().transfer(
                payer_account_id,
                merchant.id,
                payment.amount,
                f"Payment {payment.reference}",
            )
        except (InsufficientFundsError, ConcurrencyConflict, NotFoundError) as exc:
            payment = repo.get(payment.id)
            if payment.status == PaymentStatus.FAILED.value:
                return payment.status
            with UnitOfWork():
                void_in_place(payment, str(exc))
            logger.warning("payment_failed", payment_id=str(payment.id), reference=reference, reason=str(exc))
            push_status_change(payment)
            return payment.status

        def settle():
            with UnitOfWork():
                current = repo.get(payment.id)
                if current.status == PaymentStatus.FAILED.value:
                    # Voided while the funds were moving
                    AccountLedger().reverse(record.id, f"Settlement of {current.reference} after void")
                    return current, False
                current.complete(record.id)
                repo.add(current)
                return current, True

        payment, completed = retry_on_conflict(settle, operation="payments.settle")
        if not completed:
            logger.warning(
                "payment_settlement_reversed",
                payment_id=str(payment.id),
                reference=reference,
                transaction_id=str(record.id),
                reason=payment.failure_reason,
            )
            return payment.status

        logger.info("payment_completed", payment_id=str(payment.id), reference=reference, amount=payment.amount)
        push_status_change(payment)
        return payment.status

    # -------------------------------------------------------------------
    # Compensation
    # -------------------------------------------------------------------
    def refund_payment(self, order_id, reason) -> Payment:
        payment = payment_for_order(order_id)
        if payment is None:
            raise NotFoundError(f"No payment for order {order_id}")

        def attempt():
            with UnitOfWork():
                current = current_domain.repository_for(Payment).get(payment.id)
                refund_in_place(current, reason)
                return current

        refunded = retry_on_conflict(attempt, operation="payments.refund")
        logger.info("payment_refunded", payment_id=str(refunded.id), order_id=str(order_id), reason=reason)
        push_status_change(refunded)
        return refunded

    def void_payment(self, order_id, reason) -> Payment:
        payment = payment_for_order(order_id)
        if payment is None:
            raise NotFoundError(f"No payment for order {order_id}")

        with UnitOfWork():
            void_in_place(payment, reason)
        logger.info("payment_voided", payment_id=str(payment.id), order_id=str(order_id), reason=reason)
        push_status_change(payment)
        return payment
