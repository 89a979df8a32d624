"""EmailLog aggregate — one row per send attempt.

A SENT row is written in the same Unit of Work as the idempotency marker,
so a redelivered message never produces a second SENT row. FAILED rows are
written on their own because the failed attempt's Unit of Work rolls back.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, String, Text

from notifications.domain import notifications


class EmailStatus(Enum):
    SENT = "SENT"
    FAILED = "FAILED"


@notifications.aggregate
class EmailLog:
    source_event_id = String(required=True, max_length=255)
    email_type = String(required=True, max_length=50)
    order_id = Identifier(required=True)
    user_id = Identifier()
    recipient = String(required=True, max_length=255)
    subject = String(max_length=500)
    body = Text()
    status = String(choices=EmailStatus, required=True)
    provider_message_id = String(max_length=100)
    failure_reason = String(max_length=500)
    created_at = DateTime()

    @classmethod
    def _record(cls, notification, rendered, status, **fields):
        return cls(
            source_event_id=notification.event_id,
            email_type=notification.type.value,
            order_id=notification.order_id,
            user_id=notification.user_id,
            recipient=notification.recipient,
            subject=rendered.get("subject"),
            body=rendered.get("body"),
            status=status.value,
            created_at=datetime.now(UTC),
            **fields,
        )

    @classmethod
    def sent(cls, notification, rendered: dict, provider_message_id: str):
        return cls._record(notification, rendered, EmailStatus.SENT, provider_message_id=provider_message_id)

    @classmethod
    def failed(cls, notification, rendered: dict, reason: str):
        return cls._record(notification, rendered, EmailStatus.FAILED, failure_reason=reason[:500])
