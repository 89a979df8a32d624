"""Broker stream names shared by producers and consumers."""

INVENTORY_ROLLBACK = "inventory.rollback.request"
PAYMENT_REFUND = "payment.refund.request"
STOCK_SYNC = "inventory.stock.sync"

EMAIL_PREFIX = "email."


def email_stream(email_type: str) -> str:
    return f"{EMAIL_PREFIX}{email_type}"


def dead_letter_stream(stream: str) -> str:
    """Destination for messages that must not be retried automatically."""
    return f"{stream}:dlq"
