"""Idempotency ledger for the inventory context's broker consumers."""

from protean.fields import DateTime, String

from inventory.domain import inventory


@inventory.aggregate(schema_name="processed_messages")
class ProcessedMessage:
    """Presence means ``consumer`` already applied ``message_id``.

    The id is ``<consumer>:<message_id>``, so a concurrent duplicate insert
    collides on the primary key.
    """

    message_id = String(required=True, max_length=255)
    consumer = String(required=True, max_length=100)
    processed_at = DateTime(required=True)
