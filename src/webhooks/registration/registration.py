"""WebhookRegistration aggregate — one callback URL per event name."""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Integer, String

from webhooks.domain import webhooks

PAYMENT_EVENT = "PAYMENT_EVENT"
SHIPMENT_STATUS_UPDATE = "SHIPMENT_STATUS_UPDATE"


def validate_registration(event, callback_url):
    errors = {}
    if not event or not str(event).strip():
        errors["event"] = ["Event name is required"]
    if not callback_url or not str(callback_url).startswith(("http://", "https://")):
        errors["callback_url"] = ["Callback URL must be an absolute http(s) URL"]
    if errors:
        raise ValidationError(errors)


@webhooks.aggregate
class WebhookRegistration:
    """Identified by the event name itself, so there is never a second row per event."""

    callback_url = String(required=True, max_length=2048)
    revision = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, event, callback_url):
        validate_registration(event, callback_url)
        now = datetime.now(UTC)
        return cls(
            id=str(event).strip(),
            callback_url=callback_url,
            revision=0,
            created_at=now,
            updated_at=now,
        )

    @property
    def event(self) -> str:
        return str(self.id)
