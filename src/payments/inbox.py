"""Idempotency ledger for the payments context's broker consumers."""

from protean.fields import DateTime, String

from payments.domain import payments


@payments.aggregate(schema_name="processed_messages")
class ProcessedMessage:
    message_id = String(required=True, max_length=255)
    consumer = String(required=True, max_length=100)
    processed_at = DateTime(required=True)
