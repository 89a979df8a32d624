"""Webhook client factory.

Provides get_webhook_client() / set_webhook_client() to swap implementations:
- LocalWebhookClient talks to the in-process registry
- RecordingWebhookClient for tests
"""

from webhooks.client.port import WebhookClient

__all__ = ["WebhookClient", "get_webhook_client", "reset_webhook_client", "set_webhook_client"]

_current_client: WebhookClient | None = None


def get_webhook_client() -> WebhookClient:
    """Return the current client. Defaults to LocalWebhookClient."""
    global _current_client
    if _current_client is None:
        from webhooks.client.local_adapter import LocalWebhookClient

        _current_client = LocalWebhookClient()
    return _current_client


def set_webhook_client(client: WebhookClient) -> None:
    """Override the active client (useful for tests)."""
    global _current_client
    _current_client = client


def reset_webhook_client() -> None:
    """Reset to default client."""
    global _current_client
    _current_client = None
