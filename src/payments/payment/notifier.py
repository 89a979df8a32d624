"""Payment status webhooks.

Called after the Unit of Work that changed the status has committed, never
from inside one.
"""

from webhooks.client import get_webhook_client

from payments.domain import logger

PAYMENT_EVENT = "PAYMENT_EVENT"


def payment_webhook_payload(payment) -> dict:
    """``paid_at`` is the time of this status change."""
    changed_at = payment.updated_at or payment.created_at
    return {
        "type": payment.status,
        "order_id": str(payment.order_id),
        "payment_id": str(payment.id),
        "amount": payment.amount,
        "paid_at": changed_at.isoformat(),
    }


def push_status_change(payment) -> bool:
    delivered = get_webhook_client().deliver(PAYMENT_EVENT, payment_webhook_payload(payment))
    if not delivered:
        logger.warning(
            "payment_webhook_not_delivered",
            payment_id=str(payment.id),
            order_id=str(payment.order_id),
            status=payment.status,
        )
    return delivered
