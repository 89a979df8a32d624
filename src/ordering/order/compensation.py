"""Compensating and notification messages published by the orchestrator.

Event ids are derived from the order and the reason, so publishing the same
compensation twice is deduplicated by the consumer's idempotency ledger.
Called inside a Unit of Work, the broker holds each message until commit.
"""

from protean.utils.globals import current_domain
from shared.messaging.messages import EmailNotification, EmailType, RefundRequest, RollbackRequest, event_id, utcnow
from shared.messaging.streams import INVENTORY_ROLLBACK, PAYMENT_REFUND, email_stream

from ordering.domain import logger

SYSTEM_USER = "system"


def _publish(stream, message) -> None:
    current_domain.brokers["default"].publish(stream, message.to_payload())


def request_rollback(order, reason: str) -> RollbackRequest:
    message = RollbackRequest(
        order_id=str(order.id),
        product_id=str(order.product_id),
        amount=order.quantity,
        reason=reason,
        event_id=event_id("rollback", str(order.id), reason),
        timestamp=utcnow(),
    )
    _publish(INVENTORY_ROLLBACK, message)
    logger.info("rollback_requested", order_id=str(order.id), reason=reason, event_id=message.event_id)
    return message


def request_refund(order, reason: str, user_id: str | None = None) -> RefundRequest:
    message = RefundRequest(
        order_id=str(order.id),
        reason=reason,
        event_id=event_id("refund", str(order.id), reason),
        timestamp=utcnow(),
        user_id=str(user_id or order.user_id or SYSTEM_USER),
    )
    _publish(PAYMENT_REFUND, message)
    logger.info("refund_requested", order_id=str(order.id), reason=reason, event_id=message.event_id)
    return message


def notify_customer(order, email_type: EmailType, discriminator: str | None = None, **details) -> EmailNotification:
    message = EmailNotification(
        event_id=event_id("email", str(order.id), f"{email_type.value}-{discriminator or 'once'}"),
        type=email_type,
        order_id=str(order.id),
        user_id=str(order.user_id),
        recipient=order.recipient_email,
        details={
            "recipient_name": order.recipient_name,
            "product_id": str(order.product_id),
            "quantity": order.quantity,
            "total_amount": order.total_amount,
            **details,
        },
        timestamp=utcnow(),
    )
    _publish(email_stream(email_type.value), message)
    return message
