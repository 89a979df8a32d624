"""Pydantic response models for the Notifications API."""

from datetime import datetime

from pydantic import BaseModel


class EmailLogResponse(BaseModel):
    email_id: str
    source_event_id: str
    email_type: str
    order_id: str
    recipient: str
    subject: str | None = None
    status: str
    failure_reason: str | None = None
    created_at: datetime | None = None

    @classmethod
    def of(cls, log) -> "EmailLogResponse":
        return cls(
            email_id=str(log.id),
            source_event_id=log.source_event_id,
            email_type=log.email_type,
            order_id=str(log.order_id),
            recipient=log.recipient,
            subject=log.subject,
            status=log.status,
            failure_reason=log.failure_reason,
            created_at=log.created_at,
        )


class EmailLogListResponse(BaseModel):
    emails: list[EmailLogResponse]
    total: int
