"""In-process webhook client: calls the registry inside the webhooks domain context.

Must be called outside any Unit of Work; the registry opens its own.
"""

from typing import Any

from webhooks.client.port import WebhookClient
from webhooks.domain import webhooks
from webhooks.registration.registry import WebhookRegistry


class LocalWebhookClient(WebhookClient):
    def register(self, event: str, callback_url: str) -> bool:
        with webhooks.domain_context():
            return WebhookRegistry().register(event, callback_url)

    def deliver(self, event: str, payload: dict[str, Any]) -> bool:
        with webhooks.domain_context():
            return WebhookRegistry().deliver(event, payload)
