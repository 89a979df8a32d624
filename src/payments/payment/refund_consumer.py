"""Consumer for ``payment.refund.request`` — the refund compensation.

COMPLETED payments are refunded, PENDING/PROCESSING ones are voided, and
anything else (already FAILED or REFUNDED, or no payment at all) is a
logged no-op, so redelivery and reordering are harmless. A settlement that
lands after its payment was voided is reversed by the ledger.
"""

from shared.messaging.consumer import IdempotentConsumer
from shared.messaging.messages import RefundRequest
from shared.messaging.streams import PAYMENT_REFUND

from payments.domain import logger, payments
from payments.inbox import ProcessedMessage
from payments.payment.ledger import payment_for_order, refund_in_place, void_in_place
from payments.payment.notifier import push_status_change
from payments.payment.status import PaymentStatus


@payments.subscriber(stream=PAYMENT_REFUND)
class PaymentRefundConsumer(IdempotentConsumer):
    message_class = RefundRequest
    processed_message_cls = ProcessedMessage
    changed = None  # Payment to announce once committed

    def apply(self, message: RefundRequest) -> None:
        self.changed = None
        payment = payment_for_order(message.order_id)
        if payment is None:
            logger.warning("refund_request_without_payment", order_id=message.order_id, event_id=message.event_id)
            return

        status = PaymentStatus(payment.status)
        if status is PaymentStatus.COMPLETED:
            refund_in_place(payment, message.reason)
        elif status in (PaymentStatus.PENDING, PaymentStatus.PROCESSING):
            void_in_place(payment, message.reason)
        else:
            logger.info(
                "refund_request_ignored",
                order_id=message.order_id,
                payment_id=str(payment.id),
                status=payment.status,
            )
            return

        logger.info(
            "refund_request_applied",
            order_id=message.order_id,
            payment_id=str(payment.id),
            status=payment.status,
            requested_by=message.user_id,
        )
        self.changed = payment

    def after_commit(self, message: RefundRequest) -> None:
        if self.changed is not None:
            push_status_change(self.changed)
