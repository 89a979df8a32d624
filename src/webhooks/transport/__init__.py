"""Webhook transport factory.

Provides get_transport() / set_transport() to swap implementations:
- HttpxTransport for real receivers
- FakeTransport for tests
"""

from webhooks.transport.httpx_adapter import HttpxTransport
from webhooks.transport.port import WebhookDeliveryError, WebhookTransport

__all__ = ["WebhookDeliveryError", "WebhookTransport", "get_transport", "reset_transport", "set_transport"]

_current_transport: WebhookTransport | None = None


def get_transport() -> WebhookTransport:
    """Return the current transport. Defaults to HttpxTransport."""
    global _current_transport
    if _current_transport is None:
        _current_transport = HttpxTransport()
    return _current_transport


def set_transport(transport: WebhookTransport) -> None:
    """Override the active transport (useful for tests)."""
    global _current_transport
    _current_transport = transport


def reset_transport() -> None:
    """Reset to default transport."""
    global _current_transport
    _current_transport = None
